# app/services/jobs.py
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, ValidationError
from app.core.security import Clock, utcnow
from app.models.job import JOB_STATUSES, Job

UPDATABLE_FIELDS = ("company", "title", "status", "fit", "progress", "next_action", "high_priority", "applied_at")
STATUS_PREFIXES = tuple(zip(("appl", "inter", "offer", "reject"), JOB_STATUSES))


def normalize_status(raw: Optional[str]) -> str:
    if not raw:
        return JOB_STATUSES[0]
    s = str(raw).lower().strip()
    for prefix, status in STATUS_PREFIXES:
        if s.startswith(prefix):
            return status
    return JOB_STATUSES[0]


def clamp_percent(value: Optional[float]) -> int:
    return int(min(100, max(0, value or 0)))


def create_job(db: Session, user_id: int, data: Dict[str, Any], clock: Clock = utcnow) -> Job:
    company = (data.get("company") or "").strip()
    title = (data.get("title") or "").strip()
    if not company or not title:
        raise ValidationError("company and title required")

    job = Job(
        user_id=user_id,
        company=company,
        title=title,
        status=normalize_status(data.get("status")),
        fit=clamp_percent(data.get("fit")),
        progress=clamp_percent(data.get("progress")),
        next_action=data.get("next_action") or "",
        high_priority=bool(data.get("high_priority")),
        applied_at=data.get("applied_at") or clock(),
    )
    db.add(job)
    db.commit()
    db.refresh(job)
    return job


def list_jobs(db: Session, user_id: int) -> List[Job]:
    return (
        db.query(Job)
        .filter(Job.user_id == user_id)
        .order_by(Job.created_at.desc(), Job.id.desc())
        .all()
    )


def get_job(db: Session, user_id: int, job_id: int) -> Job:
    job = db.query(Job).filter(Job.id == job_id, Job.user_id == user_id).first()
    if not job:
        raise NotFoundError("Not found")
    return job


def update_job(db: Session, user_id: int, job_id: int, data: Dict[str, Any]) -> Job:
    job = db.query(Job).filter(Job.id == job_id, Job.user_id == user_id).first()
    if not job:
        raise NotFoundError("Not found or not yours")

    updates = {k: v for k, v in data.items() if k in UPDATABLE_FIELDS and v is not None}

    for key in ("company", "title"):
        if key in updates:
            updates[key] = updates[key].strip()
            if not updates[key]:
                raise ValidationError(f"{key} cannot be empty")
    if "status" in updates:
        updates["status"] = normalize_status(updates["status"])
    if "fit" in updates:
        updates["fit"] = clamp_percent(updates["fit"])
    if "progress" in updates:
        updates["progress"] = clamp_percent(updates["progress"])

    for key, value in updates.items():
        setattr(job, key, value)
    db.commit()
    db.refresh(job)
    return job


def delete_job(db: Session, user_id: int, job_id: int) -> Job:
    job = db.query(Job).filter(Job.id == job_id, Job.user_id == user_id).first()
    if not job:
        raise NotFoundError("Not found or not yours")
    db.delete(job)
    db.commit()
    return job
