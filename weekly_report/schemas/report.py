from pydantic import BaseModel, Field
from datetime import datetime, date
from typing import Optional, List

class ReportItemIn(BaseModel):
    # id is omitted for rows the client created; the server assigns one on save
    id: Optional[str] = None
    division: Optional[str] = ""
    project: Optional[str] = ""
    prev_progress: Optional[str] = ""
    curr_progress: Optional[str] = ""
    remarks: Optional[str] = ""

class ReportSaveRequest(BaseModel):
    week_start: date = Field(..., alias="weekStart", description="Monday of the week, YYYY-MM-DD")
    items: List[ReportItemIn]

    model_config = {"populate_by_name": True}

class ReportItemResponse(BaseModel):
    id: str
    week_start: str
    division: Optional[str]
    project: Optional[str]
    prev_progress: Optional[str]
    curr_progress: Optional[str]
    remarks: Optional[str]
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

class ReportWeekResponse(BaseModel):
    items: List[ReportItemResponse]
    is_draft: bool = Field(False, serialization_alias="isDraft")

class ReportSaveResponse(BaseModel):
    success: bool
    count: int
