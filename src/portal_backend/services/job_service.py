"""Job posting management service."""

from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session
import structlog

from portal_backend.auth.models import User
from portal_backend.auth.permissions import ensure_owner_or_admin
from portal_backend.core.config import Settings, settings as default_settings
from portal_backend.core.custom_types import to_naive_utc, utcnow
from portal_backend.core.enums import EntityType, JobStatus, NotificationType, UserRole
from portal_backend.core.error_handling import NotFoundError, ValidationError
from portal_backend.models.application import Application
from portal_backend.models.job import Job, parse_salary_range
from portal_backend.notifications.channels import DeliveryChannel
from portal_backend.notifications.outbox import NotificationOutbox
from portal_backend.repositories.application import ApplicationRepository
from portal_backend.repositories.company import CompanyRepository
from portal_backend.repositories.job import JobRepository
from portal_backend.schemas.job import JobCreate, JobUpdate
from portal_backend.search import JOB_SEARCH, Page, QuerySpec, search

logger = structlog.get_logger(__name__)

DEADLINE_LOCKED_MESSAGE = "Cannot edit deadline because applications have already been received."


class JobService:
    """Service for managing job postings."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self.repository = JobRepository()
        self.company_repository = CompanyRepository()
        self.application_repository = ApplicationRepository()

    def get_job_or_404(self, db: Session, job_id: UUID) -> Job:
        job = self.repository.base_query(db).filter(Job.id == job_id).first()
        if job is None:
            raise NotFoundError("Job not found")
        return job

    def _salary_bounds(self, salary_range: Optional[str], min_salary: Optional[int], max_salary: Optional[int]) -> Dict[str, Optional[int]]:
        """Fill missing bounds from the free-text range."""
        if salary_range and (min_salary is None or max_salary is None):
            parsed_min, parsed_max = parse_salary_range(salary_range)
            if parsed_min is not None:
                return {"min_salary": parsed_min, "max_salary": parsed_max}
        return {"min_salary": min_salary, "max_salary": max_salary}

    def create_job(self, db: Session, actor: User, data: JobCreate, outbox: NotificationOutbox) -> Job:
        """Create a job for the actor's company and tell the admins about it.

        Args:
            db: Database session
            actor: Employer (or admin) posting the job
            data: Job fields
            outbox: Collects the notifications to deliver after the response

        Returns:
            Created job

        Raises:
            ValidationError: Deadline not in the future, or no company to post for
        """
        deadline = to_naive_utc(data.application_deadline)
        if deadline <= utcnow():
            raise ValidationError("Application deadline must be a future date", field="applicationDeadline")

        company = None
        if data.company_id is not None and actor.is_admin:
            company = self.company_repository.get_by_id(db, data.company_id)
        if company is None:
            company = self.company_repository.get_by_owner(db, actor.id)
        if company is None:
            raise ValidationError("Please create a company profile first")

        job = self.repository.create(
            db,
            employer_id=actor.id,
            company_id=company.id,
            title=data.title,
            description=data.description,
            location=data.location,
            type=data.type.value,
            experience_level=data.experience_level.value,
            salary_range=data.salary_range,
            skills_required=list(data.skills_required),
            status=data.status.value,
            application_deadline=deadline,
            posted_at=utcnow(),
            **self._salary_bounds(data.salary_range, data.min_salary, data.max_salary),
        )

        logger.info(
            "Job created",
            job_id=str(job.id),
            employer_id=str(actor.id),
            company_id=str(company.id),
            status=job.status,
        )

        outbox.notify_role(
            UserRole.ADMIN,
            NotificationType.JOB_POSTED,
            "New Job Posted",
            f"{actor.name} posted a new job: {job.title}",
            entity_type=EntityType.JOB,
            entity_id=job.id,
            data={"jobId": str(job.id), "companyName": company.name},
            channels=(DeliveryChannel.IN_APP,),
            exclude_user_ids=(actor.id,),
        )
        if self.settings.notify_candidates_on_job_post and job.status == JobStatus.OPEN.value:
            outbox.notify_role(
                UserRole.CANDIDATE,
                NotificationType.JOB_POSTED,
                "New Job Opportunity",
                f"{company.name} is hiring: {job.title}",
                entity_type=EntityType.JOB,
                entity_id=job.id,
                data={"jobId": str(job.id)},
            )
        return self.get_job_or_404(db, job.id)

    def update_job(self, db: Session, actor: User, job_id: UUID, data: JobUpdate) -> Job:
        """Update a job owned by the actor (or any job, for admins).

        Once a job has applications only an admin may move its deadline to
        another day.

        Raises:
            NotFoundError: Unknown job
            AuthorizationError: Actor is neither owner nor admin
            ValidationError: Deadline not in the future, or locked by applications
        """
        job = self.get_job_or_404(db, job_id)
        ensure_owner_or_admin(actor, job.employer_id, "update this job")

        changes = data.model_dump(exclude_unset=True)

        if changes.get("application_deadline") is not None:
            new_deadline = to_naive_utc(changes["application_deadline"])
            if new_deadline <= utcnow():
                raise ValidationError("Application deadline must be a future date", field="applicationDeadline")
            if not actor.is_admin and new_deadline.date() != job.application_deadline.date():
                if self.repository.count_applications(db, job.id) > 0:
                    raise ValidationError(DEADLINE_LOCKED_MESSAGE, field="applicationDeadline")
            changes["application_deadline"] = new_deadline
        elif "application_deadline" in changes:
            del changes["application_deadline"]

        for key in ("type", "experience_level", "status"):
            if changes.get(key) is not None:
                changes[key] = changes[key].value
            elif key in changes:
                del changes[key]
        for key in ("title", "description", "location", "skills_required"):
            if key in changes and changes[key] is None:
                del changes[key]

        if changes.get("salary_range"):
            changes.update(self._salary_bounds(
                changes["salary_range"],
                changes.get("min_salary"),
                changes.get("max_salary"),
            ))

        self.repository.update(db, job, **changes)
        logger.info("Job updated", job_id=str(job.id), actor_id=str(actor.id), fields=sorted(changes))
        return self.get_job_or_404(db, job.id)

    def delete_job(self, db: Session, actor: User, job_id: UUID) -> None:
        job = self.get_job_or_404(db, job_id)
        ensure_owner_or_admin(actor, job.employer_id, "delete this job")
        self.repository.delete(db, job)
        logger.info("Job deleted", job_id=str(job_id), actor_id=str(actor.id))

    def get_job(self, db: Session, job_id: UUID) -> Tuple[Job, int]:
        """Job with its application count."""
        job = self.get_job_or_404(db, job_id)
        return job, self.repository.count_applications(db, job.id)

    def application_counts(self, db: Session, jobs: List[Job]) -> Dict[UUID, int]:
        ids = [job.id for job in jobs]
        if not ids:
            return {}
        rows = (
            db.query(Application.job_id, func.count(Application.id))
            .filter(Application.job_id.in_(ids))
            .group_by(Application.job_id)
            .all()
        )
        return {job_id: count for job_id, count in rows}

    def list_public_jobs(self, db: Session, spec: QuerySpec) -> Page:
        """Open, unexpired jobs matching the query."""
        return search(self.repository.open_query(db, utcnow()), spec, JOB_SEARCH)

    def job_feed(self, db: Session, candidate: User, spec: QuerySpec) -> Page:
        """Public jobs the candidate has not applied to yet."""
        query = self.repository.open_query(db, utcnow())
        applied = self.application_repository.applied_job_ids(db, candidate.id)
        if applied:
            query = query.filter(Job.id.notin_(applied))
        return search(query, spec, JOB_SEARCH)

    def my_jobs(self, db: Session, employer: User) -> List[Job]:
        return (
            self.repository.base_query(db)
            .filter(Job.employer_id == employer.id)
            .order_by(Job.created_at.desc())
            .all()
        )

    def close_expired_jobs(self, db: Session) -> int:
        """Close every Open job whose deadline has passed."""
        expired = self.repository.get_expired_open(db, utcnow())
        for job in expired:
            job.status = JobStatus.CLOSED.value
        db.commit()
        if expired:
            logger.info("Closed expired jobs", count=len(expired))
        return len(expired)
