from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, func
from app.core.db import Base

JOB_STATUSES = ("applied", "interviewing", "offers", "rejected")

class Job(Base):
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    company = Column(String(200), nullable=False)
    title = Column(String(200), nullable=False)
    status = Column(String(20), nullable=False, default="applied")

    fit = Column(Integer, nullable=False, default=0)
    progress = Column(Integer, nullable=False, default=0)

    applied_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    next_action = Column(String(500), nullable=False, default="")
    high_priority = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
