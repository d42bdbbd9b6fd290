from sqlalchemy import Column, String, Text, DateTime, func
from weekly_report.database import Base

class Report(Base):
    __tablename__ = "reports"

    id = Column(String, primary_key=True)
    week_start = Column(String, nullable=False, index=True)  # YYYY-MM-DD, Monday of the week

    division = Column(Text, nullable=True)
    project = Column(Text, nullable=True)        # loose reference to projects.name
    prev_progress = Column(Text, nullable=True)  # multi-line
    curr_progress = Column(Text, nullable=True)  # multi-line
    remarks = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
