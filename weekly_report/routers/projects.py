import uuid
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from weekly_report.config import Settings, get_settings
from weekly_report.database import get_db
from weekly_report.models.project import Project
from weekly_report.schemas.project import (
    ProjectCreate, ProjectUpdate, ProjectResponse, ProjectCreatedResponse, ProjectImportResponse
)
from weekly_report.services.project_import import import_projects

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=List[ProjectResponse])
async def list_projects(db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(Project).order_by(Project.created_at.desc())
    )
    return result.scalars().all()


@router.post("", response_model=ProjectCreatedResponse)
async def create_project(
    project_in: ProjectCreate,
    db: AsyncSession = Depends(get_db)
):
    if not project_in.name:
        raise HTTPException(400, "Name is required")

    project = Project(
        id=str(uuid.uuid4()),
        name=project_in.name,
        client=project_in.client or "",
        pm=project_in.pm or "",
        period=project_in.period or "",
        code=project_in.code or ""
    )
    db.add(project)
    await db.commit()
    return ProjectCreatedResponse(success=True, id=project.id)


@router.put("")
async def update_project(
    project_in: ProjectUpdate,
    db: AsyncSession = Depends(get_db)
):
    if not project_in.id or not project_in.name:
        raise HTTPException(400, "ID and Name are required")

    result = await db.execute(select(Project).where(Project.id == project_in.id))
    project = result.scalar_one_or_none()
    if not project:
        raise HTTPException(404, "Project not found")

    project.name = project_in.name
    project.client = project_in.client or ""
    project.pm = project_in.pm or ""
    project.period = project_in.period or ""
    project.code = project_in.code or ""

    db.add(project)
    await db.commit()
    return {"success": True}


@router.delete("")
async def delete_project(
    id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    if not id:
        raise HTTPException(400, "ID is required")

    # report rows refer to projects by name only, so nothing cascades
    await db.execute(delete(Project).where(Project.id == id))
    await db.commit()
    return {"success": True}


@router.post("/import", response_model=ProjectImportResponse)
async def import_external_projects(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    source_url = settings.effective_import_database_url
    if not source_url:
        raise HTTPException(500, "Import credentials not configured")

    count = await import_projects(db, source_url)
    return ProjectImportResponse(success=True, count=count)
