from datetime import date
from typing import List, Optional
from urllib.parse import quote
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from weekly_report.core.errors import SaveFailed
from weekly_report.database import Database, get_database, get_db
from weekly_report.models.report import Report
from weekly_report.schemas.report import (
    ReportItemResponse, ReportSaveRequest, ReportSaveResponse, ReportWeekResponse
)
from weekly_report.services.carry_over import resolve_week
from weekly_report.services.docx_export import (
    DOCX_CONTENT_TYPE, build_weekly_report, report_filename, week_bounds
)
from weekly_report.services.report_save import SaveOutcome, save_week

router = APIRouter(prefix="/reports", tags=["reports"])


def require_week_start(week_start: Optional[date]) -> date:
    if week_start is None:
        raise HTTPException(400, "Missing weekStart param")
    return week_start


def docx_response(selected: date, items) -> Response:
    content = build_weekly_report(selected, items)
    filename = report_filename(selected)
    start, _ = week_bounds(selected)
    # header values must be latin-1, so the Korean name goes in filename*
    disposition = (
        f'attachment; filename="weekly_report_{start:%Y%m%d}.docx"; '
        f"filename*=UTF-8''{quote(filename)}"
    )
    return Response(content=content, media_type=DOCX_CONTENT_TYPE,
                    headers={"Content-Disposition": disposition})


@router.get("", response_model=ReportWeekResponse)
async def get_week_report(
    week_start: Optional[date] = Query(None, alias="weekStart"),
    db: AsyncSession = Depends(get_db)
):
    week_start = require_week_start(week_start)
    resolved = await resolve_week(db, week_start)
    return ReportWeekResponse(
        items=[ReportItemResponse.model_validate(item) for item in resolved.items],
        is_draft=resolved.is_draft
    )


@router.post("", response_model=ReportSaveResponse)
async def save_week_report(
    report_in: ReportSaveRequest,
    database: Database = Depends(get_database)
):
    result = await save_week(database, report_in.week_start, report_in.items)

    if result.outcome == SaveOutcome.PARTIAL:
        raise SaveFailed(
            f"Save partially applied: the previous items of {report_in.week_start} were deleted "
            f"but only {result.written} of {len(report_in.items)} new items were written",
            result
        )
    if not result.ok:
        raise SaveFailed("Database error", result)

    return ReportSaveResponse(success=True, count=result.written)


@router.get("/status", response_model=List[str])
async def get_report_status(db: AsyncSession = Depends(get_db)):
    """Weeks that have saved items, oldest first."""
    result = await db.execute(
        select(Report.week_start).distinct().order_by(Report.week_start)
    )
    return result.scalars().all()


@router.get("/export")
async def export_week_report(
    week_start: Optional[date] = Query(None, alias="weekStart"),
    db: AsyncSession = Depends(get_db)
):
    week_start = require_week_start(week_start)
    resolved = await resolve_week(db, week_start)
    return docx_response(week_start, resolved.items)


@router.post("/export")
async def export_unsaved_report(report_in: ReportSaveRequest):
    # renders what the editor currently holds, saved or not
    return docx_response(report_in.week_start, report_in.items)
