# app/schemas/job.py
from datetime import datetime
from typing import List, Optional
from .base import BaseSchema


class JobCreateIn(BaseSchema):
    company: Optional[str] = None
    title: Optional[str] = None
    status: Optional[str] = None
    fit: Optional[float] = None
    progress: Optional[float] = None
    next_action: Optional[str] = None
    high_priority: Optional[bool] = None
    applied_at: Optional[datetime] = None


class JobUpdateIn(JobCreateIn):
    pass


class JobOut(BaseSchema):
    id: int
    user_id: int
    company: str
    title: str
    status: str
    fit: int
    progress: int
    applied_at: datetime
    next_action: str
    high_priority: bool
    created_at: datetime
    updated_at: datetime


class JobEnvelope(BaseSchema):
    job: JobOut


class JobMessageOut(BaseSchema):
    message: str
    job: JobOut


class JobListOut(BaseSchema):
    jobs: List[JobOut]
