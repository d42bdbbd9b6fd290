from sqlalchemy import Column, String, Text, DateTime, func
from weekly_report.database import Base

class Project(Base):
    __tablename__ = "projects"

    id = Column(String, primary_key=True)
    name = Column(Text, nullable=False)
    client = Column(Text, nullable=True)
    pm = Column(Text, nullable=True)
    period = Column(Text, nullable=True)  # contract period, free text
    code = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
