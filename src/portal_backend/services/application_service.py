"""Job application management service."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session
import structlog

from portal_backend.auth.models import User
from portal_backend.auth.permissions import ensure_owner_or_admin
from portal_backend.core.custom_types import utcnow
from portal_backend.core.enums import ApplicationStatus, EntityType, NotificationType
from portal_backend.core.error_handling import ConflictError, NotFoundError, ValidationError
from portal_backend.models.application import Application
from portal_backend.notifications.outbox import NotificationOutbox
from portal_backend.repositories.application import ApplicationRepository
from portal_backend.repositories.candidate_profile import CandidateProfileRepository
from portal_backend.repositories.job import JobRepository
from portal_backend.schemas.application import ApplicationCreate
from portal_backend.search import APPLICATION_SEARCH, Page, QuerySpec, search

logger = structlog.get_logger(__name__)

ALREADY_APPLIED_MESSAGE = "You have already applied to this job"


class ApplicationService:
    """Service for managing application operations."""

    def __init__(self):
        self.repository = ApplicationRepository()
        self.job_repository = JobRepository()
        self.profile_repository = CandidateProfileRepository()

    def apply(
        self,
        db: Session,
        candidate: User,
        job_id: UUID,
        data: ApplicationCreate,
        outbox: NotificationOutbox
    ) -> Application:
        """Create an application and notify the job's employer.

        Args:
            db: Database session
            candidate: Applying candidate
            job_id: Target job
            data: Application fields
            outbox: Collects the notifications to deliver after the response

        Returns:
            Created application

        Raises:
            NotFoundError: Unknown job
            ValidationError: Job not Open or past its deadline
            ConflictError: Candidate already applied
        """
        job = self.job_repository.get_by_id(db, job_id)
        if job is None:
            raise NotFoundError("Job not found")

        if not job.can_apply(utcnow()):
            raise ValidationError("Job is not open for applications")

        if self.repository.get_for_candidate(db, job.id, candidate.id) is not None:
            raise ConflictError(ALREADY_APPLIED_MESSAGE)

        profile = self.profile_repository.get_by_user(db, candidate.id)
        resume_url = data.resume_url or (profile.default_resume_url if profile else None)

        # The unique index still rejects a concurrent duplicate as a conflict
        application = self.repository.create(
            db,
            job_id=job.id,
            candidate_id=candidate.id,
            employer_id=job.employer_id,
            resume_url=resume_url,
            status=ApplicationStatus.APPLIED.value,
        )

        if profile is not None and any(saved.id == job.id for saved in profile.saved_jobs):
            profile.saved_jobs = [saved for saved in profile.saved_jobs if saved.id != job.id]
            db.commit()

        logger.info(
            "Application created",
            application_id=str(application.id),
            job_id=str(job.id),
            candidate_id=str(candidate.id),
        )

        outbox.notify_user(
            job.employer_id,
            NotificationType.APPLICATION_RECEIVED,
            "New Application Received",
            f"{candidate.name} applied for {job.title}",
            entity_type=EntityType.APPLICATION,
            entity_id=application.id,
            data={"jobId": str(job.id), "candidateId": str(candidate.id)},
        )
        return application

    def get_for_candidate(self, db: Session, candidate: User, job_id: UUID) -> Optional[Application]:
        return self.repository.get_for_candidate(db, job_id, candidate.id)

    def my_applications(self, db: Session, candidate: User, spec: QuerySpec) -> Page:
        query = (
            self.repository.base_query(db)
            .filter(Application.candidate_id == candidate.id)
        )
        return search(query, spec, APPLICATION_SEARCH)

    def job_applications(self, db: Session, actor: User, job_id: UUID) -> List[Application]:
        """Applications of one job, for its owner or an admin."""
        job = self.job_repository.get_by_id(db, job_id)
        if job is None:
            raise NotFoundError("Job not found")
        ensure_owner_or_admin(actor, job.employer_id, "view applications for this job")
        return self.repository.list_for_job(db, job.id)

    def employer_applications(self, db: Session, employer: User) -> List[Application]:
        return self.repository.list_for_employer(db, employer.id)

    def update_status(
        self,
        db: Session,
        actor: User,
        application_id: UUID,
        status: ApplicationStatus,
        outbox: NotificationOutbox
    ) -> Application:
        """Set an application's status; the candidate is told only about real changes.

        Raises:
            NotFoundError: Unknown application
            AuthorizationError: Actor neither owns the application nor is an admin
        """
        application = self.repository.base_query(db).filter(Application.id == application_id).first()
        if application is None:
            raise NotFoundError("Application not found")
        ensure_owner_or_admin(actor, application.employer_id, "update this application")

        previous = application.status
        if previous == status.value:
            return application

        self.repository.update(db, application, status=status.value)
        logger.info(
            "Application status updated",
            application_id=str(application.id),
            previous=previous,
            status=status.value,
            actor_id=str(actor.id),
        )

        job_title = application.job.title if application.job else "your application"
        outbox.notify_user(
            application.candidate_id,
            NotificationType.APPLICATION_STATUS_UPDATE,
            "Application Status Updated",
            f"Your application for {job_title} is now {status.value}",
            entity_type=EntityType.APPLICATION,
            entity_id=application.id,
            data={"jobId": str(application.job_id), "status": status.value},
        )
        return application
