from pydantic import BaseModel
from datetime import datetime
from typing import Optional

# name is checked by hand so a missing name yields the same 400 payload as other presence checks
class ProjectCreate(BaseModel):
    name: Optional[str] = None
    client: Optional[str] = None
    pm: Optional[str] = None
    period: Optional[str] = None
    code: Optional[str] = None

class ProjectUpdate(ProjectCreate):
    id: Optional[str] = None

class ProjectResponse(BaseModel):
    id: str
    name: str
    client: Optional[str]
    pm: Optional[str]
    period: Optional[str]
    code: Optional[str]
    created_at: Optional[datetime]

    model_config = {"from_attributes": True}

class ProjectCreatedResponse(BaseModel):
    success: bool
    id: str

class ProjectImportResponse(BaseModel):
    success: bool
    count: int
