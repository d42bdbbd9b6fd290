import logging
from datetime import datetime, timezone
from typing import Any, Tuple
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from weekly_report.core.errors import InvalidRequest
from weekly_report.models.project import Project
from weekly_report.models.report import Report
from weekly_report.schemas.backup import (
    BackupDocument, BackupDump, LegacyBackup, ProjectRow, ReportRow, VersionedBackup
)

logger = logging.getLogger(__name__)

BACKUP_VERSION = 2


async def export_backup(db: AsyncSession) -> BackupDump:
    reports = await db.execute(
        select(Report).order_by(Report.week_start.desc(), Report.division)
    )
    projects = await db.execute(
        select(Project).order_by(Project.created_at.desc())
    )
    return BackupDump(
        version=BACKUP_VERSION,
        timestamp=datetime.now(timezone.utc),
        reports=[ReportRow.model_validate(r) for r in reports.scalars()],
        projects=[ProjectRow.model_validate(p) for p in projects.scalars()],
    )


def _format_errors(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg')}" if location else first.get("msg", "")


def decode_backup(payload: Any) -> BackupDocument:
    """Decode an uploaded backup into one of the two known document shapes.

    A bare array is a legacy reports-only backup; an object must carry both
    ``reports`` and ``projects``. Every row is validated here, so a bad
    document is rejected before anything is written.
    """
    try:
        if isinstance(payload, list):
            return LegacyBackup(reports=payload)
        if isinstance(payload, dict) and "reports" in payload and "projects" in payload:
            fields = {k: v for k, v in payload.items() if k != "kind"}
            return VersionedBackup.model_validate(fields)
    except ValidationError as e:
        raise InvalidRequest(f"Invalid backup format: {_format_errors(e)}")
    raise InvalidRequest("Invalid backup format")


def _report_from_row(row: ReportRow, now: datetime) -> Report:
    return Report(
        id=row.id,
        week_start=row.week_start,
        division=row.division or "",
        project=row.project or "",
        prev_progress=row.prev_progress or "",
        curr_progress=row.curr_progress or "",
        remarks=row.remarks or "",
        created_at=row.created_at or now,
    )


def _project_from_row(row: ProjectRow, now: datetime) -> Project:
    return Project(
        id=row.id,
        name=row.name,
        client=row.client or "",
        pm=row.pm or "",
        period=row.period or "",
        code=row.code or "",
        created_at=row.created_at or now,
    )


async def restore_backup(db: AsyncSession, document: BackupDocument) -> Tuple[int, int]:
    """Insert-or-replace every row of ``document`` by id, in one transaction.

    Existing rows with the same id are overwritten field for field (absent
    text fields become ""); rows not mentioned in the document are left
    alone. When an id repeats inside the document the last row wins. Returns
    the number of distinct (reports, projects) rows written.
    """
    now = datetime.now(timezone.utc)

    report_ids = set()
    for row in document.reports:
        await db.merge(_report_from_row(row, now))
        report_ids.add(row.id)

    project_ids = set()
    if isinstance(document, VersionedBackup):
        for row in document.projects:
            await db.merge(_project_from_row(row, now))
            project_ids.add(row.id)

    await db.commit()
    logger.info("Restored %s backup: %d report(s), %d project(s)",
                document.kind, len(report_ids), len(project_ids))
    return len(report_ids), len(project_ids)
