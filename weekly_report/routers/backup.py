from typing import Any
from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from weekly_report.database import get_db
from weekly_report.schemas.backup import BackupDump, RestoreResponse
from weekly_report.services.backup import decode_backup, export_backup, restore_backup

router = APIRouter(tags=["backup"])


@router.get("/backup", response_model=BackupDump)
async def get_backup(db: AsyncSession = Depends(get_db)):
    return await export_backup(db)


async def _restore(payload: Any, db: AsyncSession) -> RestoreResponse:
    # decoded before anything touches the store
    document = decode_backup(payload)
    reports, projects = await restore_backup(db, document)
    return RestoreResponse(success=True, reports=reports, projects=projects)


@router.post("/backup", response_model=RestoreResponse)
async def import_backup(
    payload: Any = Body(...),
    db: AsyncSession = Depends(get_db)
):
    return await _restore(payload, db)


@router.post("/restore", response_model=RestoreResponse)
async def restore(
    payload: Any = Body(...),
    db: AsyncSession = Depends(get_db)
):
    return await _restore(payload, db)
