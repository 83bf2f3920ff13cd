"""Candidate profile, resume and saved job service."""

from typing import List
from uuid import UUID

from sqlalchemy.orm import Session
import structlog

from portal_backend.auth.models import User
from portal_backend.core.enums import JobStatus
from portal_backend.core.error_handling import ConflictError, NotFoundError
from portal_backend.models.candidate_profile import CandidateProfile, Resume
from portal_backend.models.job import Job
from portal_backend.repositories.application import ApplicationRepository
from portal_backend.repositories.candidate_profile import CandidateProfileRepository
from portal_backend.repositories.job import JobRepository
from portal_backend.schemas.candidate import CandidateProfileUpdate, ResumeCreate

logger = structlog.get_logger(__name__)


class CandidateService:
    """Service for a candidate's own profile."""

    def __init__(self):
        self.repository = CandidateProfileRepository()
        self.job_repository = JobRepository()
        self.application_repository = ApplicationRepository()

    def get_profile(self, db: Session, candidate: User):
        return self.repository.get_by_user(db, candidate.id)

    def upsert_profile(self, db: Session, candidate: User, data: CandidateProfileUpdate) -> CandidateProfile:
        """Create the profile on first write, otherwise update the sent fields."""
        profile = self.repository.get_or_create(db, candidate.id)
        values = data.model_dump(exclude_unset=True)
        if "skills" in values and values["skills"] is None:
            values["skills"] = []
        profile = self.repository.update(db, profile, **values)

        if values.get("avatar_url"):
            candidate.avatar_url = values["avatar_url"]
            db.commit()

        logger.info("Candidate profile saved", user_id=str(candidate.id), fields=sorted(values))
        return self.repository.get_by_user(db, candidate.id)

    def add_resume(self, db: Session, candidate: User, data: ResumeCreate) -> CandidateProfile:
        """Attach a resume; the first one becomes the default."""
        profile = self.repository.get_or_create(db, candidate.id)
        profile.resumes.append(Resume(name=data.name, url=data.url))
        if not profile.default_resume_url:
            profile.default_resume_url = data.url
        db.commit()
        logger.info("Resume added", user_id=str(candidate.id))
        return self.repository.get_by_user(db, candidate.id)

    def delete_resume(self, db: Session, candidate: User, resume_id: UUID) -> CandidateProfile:
        """Remove a resume, moving the default to the oldest remaining one if needed."""
        profile = self.repository.get_by_user(db, candidate.id)
        if profile is None:
            raise NotFoundError("Profile not found")

        remaining = [resume for resume in profile.resumes if resume.id != resume_id]
        if len(remaining) == len(profile.resumes):
            raise NotFoundError("Resume not found")
        profile.resumes = remaining

        if not remaining:
            profile.default_resume_url = None
        elif not any(resume.url == profile.default_resume_url for resume in remaining):
            profile.default_resume_url = remaining[0].url
        db.commit()
        logger.info("Resume deleted", user_id=str(candidate.id), resume_id=str(resume_id))
        return self.repository.get_by_user(db, candidate.id)

    def saved_jobs(self, db: Session, candidate: User) -> List[Job]:
        """Saved jobs that are still Open and not yet applied to."""
        profile = self.repository.get_by_user(db, candidate.id)
        if profile is None:
            return []
        applied = self.application_repository.applied_job_ids(db, candidate.id)
        return [
            job for job in profile.saved_jobs
            if job.status == JobStatus.OPEN.value and job.id not in applied
        ]

    def save_job(self, db: Session, candidate: User, job_id: UUID) -> List[Job]:
        job = self.job_repository.get_by_id(db, job_id)
        if job is None:
            raise NotFoundError("Job not found")

        profile = self.repository.get_or_create(db, candidate.id)
        if any(saved.id == job.id for saved in profile.saved_jobs):
            raise ConflictError("Job already saved")

        profile.saved_jobs.append(job)
        db.commit()
        logger.info("Job saved", user_id=str(candidate.id), job_id=str(job.id))
        return list(profile.saved_jobs)

    def remove_saved_job(self, db: Session, candidate: User, job_id: UUID) -> List[Job]:
        profile = self.repository.get_by_user(db, candidate.id)
        if profile is None:
            raise NotFoundError("Profile not found")
        profile.saved_jobs = [saved for saved in profile.saved_jobs if saved.id != job_id]
        db.commit()
        return list(profile.saved_jobs)
