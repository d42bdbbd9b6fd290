from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List, Literal, Union

class ReportRow(BaseModel):
    id: str = Field(..., min_length=1)
    week_start: str = Field(..., min_length=1)
    division: Optional[str] = None
    project: Optional[str] = None
    prev_progress: Optional[str] = None
    curr_progress: Optional[str] = None
    remarks: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

class ProjectRow(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    client: Optional[str] = None
    pm: Optional[str] = None
    period: Optional[str] = None
    code: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

class LegacyBackup(BaseModel):
    """Bare JSON array of report rows, written before projects were backed up."""
    kind: Literal["legacy"] = "legacy"
    reports: List[ReportRow]

class VersionedBackup(BaseModel):
    kind: Literal["versioned"] = "versioned"
    version: Optional[int] = None
    timestamp: Optional[str] = None
    reports: List[ReportRow]
    projects: List[ProjectRow]

BackupDocument = Union[LegacyBackup, VersionedBackup]

class BackupDump(BaseModel):
    version: int
    timestamp: datetime
    reports: List[ReportRow]
    projects: List[ProjectRow]

class RestoreResponse(BaseModel):
    success: bool
    reports: int
    projects: int
