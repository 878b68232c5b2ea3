from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from app.core.auth import get_current_user_id
from app.core.db import get_db
from app.core.deps import get_clock
from app.core.security import Clock
from app.schemas.job import JobCreateIn, JobEnvelope, JobListOut, JobMessageOut, JobOut, JobUpdateIn
from app.services import jobs as job_service

router = APIRouter(prefix="/api/jobs", tags=["jobs"])


@router.post("", response_model=JobMessageOut, status_code=status.HTTP_201_CREATED)
def create_job(
    body: JobCreateIn,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
    clock: Clock = Depends(get_clock),
):
    job = job_service.create_job(db, user_id, body.model_dump(), clock=clock)
    return JobMessageOut(message="Job created", job=JobOut.model_validate(job))


@router.get("", response_model=JobListOut)
def list_jobs(db: Session = Depends(get_db), user_id: int = Depends(get_current_user_id)):
    jobs = job_service.list_jobs(db, user_id)
    return JobListOut(jobs=[JobOut.model_validate(j) for j in jobs])


@router.get("/{job_id}", response_model=JobEnvelope)
def get_job(
    job_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    return JobEnvelope(job=JobOut.model_validate(job_service.get_job(db, user_id, job_id)))


@router.put("/{job_id}", response_model=JobMessageOut)
def update_job(
    body: JobUpdateIn,
    job_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    job = job_service.update_job(db, user_id, job_id, body.model_dump(exclude_unset=True, by_alias=False))
    return JobMessageOut(message="Updated", job=JobOut.model_validate(job))


@router.delete("/{job_id}", response_model=JobMessageOut)
def delete_job(
    job_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    job = job_service.delete_job(db, user_id, job_id)
    return JobMessageOut(message="Deleted", job=JobOut.model_validate(job))
