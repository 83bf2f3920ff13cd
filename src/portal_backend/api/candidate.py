"""Candidate profile, resume and saved job endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import Field
from sqlalchemy.orm import Session

from portal_backend.auth.dependencies import require_candidate
from portal_backend.auth.models import User
from portal_backend.core.database import get_db
from portal_backend.schemas.base import CamelModel, dump, success_response
from portal_backend.schemas.candidate import CandidateProfileResponse, CandidateProfileUpdate, ResumeCreate
from portal_backend.schemas.job import JobResponse
from portal_backend.services.candidate_service import CandidateService
from .deps import dump_items

router = APIRouter(prefix="/api/candidate", tags=["candidate"])


class SaveJobRequest(CamelModel):
    job_id: UUID = Field(..., description="Job to save")


def _profile_payload(profile) -> dict:
    return success_response(data=dump(CandidateProfileResponse.model_validate(profile)) if profile else None)


@router.get("/profile")
async def get_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_candidate)
):
    return _profile_payload(CandidateService().get_profile(db, current_user))


@router.put("/profile")
async def update_profile(
    data: CandidateProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_candidate)
):
    """Create or update the caller's profile."""
    return _profile_payload(CandidateService().upsert_profile(db, current_user, data))


@router.post("/resume", status_code=status.HTTP_201_CREATED)
async def add_resume(
    data: ResumeCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_candidate)
):
    return _profile_payload(CandidateService().add_resume(db, current_user, data))


@router.delete("/resume/{resume_id}")
async def delete_resume(
    resume_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_candidate)
):
    return _profile_payload(CandidateService().delete_resume(db, current_user, resume_id))


@router.get("/saved-jobs")
async def saved_jobs(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_candidate)
):
    """Saved jobs that are still open and not yet applied to."""
    jobs = CandidateService().saved_jobs(db, current_user)
    data = dump_items(JobResponse, jobs)
    return success_response(count=len(data), data=data)


@router.post("/saved-jobs")
async def save_job(
    data: SaveJobRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_candidate)
):
    jobs = CandidateService().save_job(db, current_user, data.job_id)
    return success_response(data=dump_items(JobResponse, jobs))


@router.delete("/saved-jobs/{job_id}")
async def remove_saved_job(
    job_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_candidate)
):
    jobs = CandidateService().remove_saved_job(db, current_user, job_id)
    return success_response(data=dump_items(JobResponse, jobs))
