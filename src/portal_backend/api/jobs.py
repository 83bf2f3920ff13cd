"""Job posting API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import structlog

from portal_backend.auth.dependencies import require_candidate, require_employer
from portal_backend.auth.models import User
from portal_backend.core.database import get_db
from portal_backend.core.logging import performance_logger
from portal_backend.models.job import Job
from portal_backend.notifications.outbox import NotificationOutbox
from portal_backend.schemas.base import dump, paginated_response, success_response
from portal_backend.schemas.job import JobCreate, JobDetailResponse, JobResponse, JobUpdate
from portal_backend.search import JOB_SEARCH, QuerySpec
from portal_backend.services.job_service import JobService
from .deps import dump_items, get_outbox, get_services, search_spec

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/jobs", tags=["jobs"])


def _job_service(services=Depends(get_services)) -> JobService:
    return JobService(services.settings)


def job_detail(job: Job, applications_count: int) -> dict:
    data = JobResponse.model_validate(job).model_dump()
    return dump(JobDetailResponse.model_validate({
        **data,
        "is_expired": job.is_expired(),
        "can_apply": job.can_apply(),
        "applications_count": applications_count,
    }))


@router.get("")
async def list_jobs(
    spec: QuerySpec = Depends(search_spec(JOB_SEARCH, "default_page_size")),
    db: Session = Depends(get_db),
    job_service: JobService = Depends(_job_service)
):
    """Open, unexpired jobs with filtering, keyword, salary overlap, sort and paging."""
    with performance_logger.log_operation_time("list_jobs", page=spec.page, limit=spec.limit):
        page = job_service.list_public_jobs(db, spec)
        return paginated_response(dump_items(JobResponse, page.items, spec, JOB_SEARCH), page)


@router.get("/feed")
async def job_feed(
    spec: QuerySpec = Depends(search_spec(JOB_SEARCH, "feed_page_size")),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_candidate),
    job_service: JobService = Depends(_job_service)
):
    """Public jobs the candidate has not applied to yet."""
    page = job_service.job_feed(db, current_user, spec)
    return paginated_response(dump_items(JobResponse, page.items, spec, JOB_SEARCH), page)


@router.get("/my-jobs")
async def my_jobs(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer),
    job_service: JobService = Depends(_job_service)
):
    jobs = job_service.my_jobs(db, current_user)
    counts = job_service.application_counts(db, jobs)
    data = [job_detail(job, counts.get(job.id, 0)) for job in jobs]
    return success_response(count=len(data), data=data)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_job(
    data: JobCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer),
    outbox: NotificationOutbox = Depends(get_outbox),
    job_service: JobService = Depends(_job_service)
):
    """Post a job for the employer's company."""
    with performance_logger.log_operation_time("create_job", user_id=str(current_user.id)):
        job = job_service.create_job(db, current_user, data, outbox)
        return success_response(data=job_detail(job, 0))


@router.get("/{job_id}")
async def get_job(
    job_id: UUID,
    db: Session = Depends(get_db),
    job_service: JobService = Depends(_job_service)
):
    job, applications_count = job_service.get_job(db, job_id)
    return success_response(data=job_detail(job, applications_count))


@router.put("/{job_id}")
async def update_job(
    job_id: UUID,
    data: JobUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer),
    job_service: JobService = Depends(_job_service)
):
    with performance_logger.log_operation_time("update_job", job_id=str(job_id), user_id=str(current_user.id)):
        job = job_service.update_job(db, current_user, job_id, data)
        _, applications_count = job_service.get_job(db, job.id)
        return success_response(data=job_detail(job, applications_count))


@router.delete("/{job_id}")
async def delete_job(
    job_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer),
    job_service: JobService = Depends(_job_service)
):
    job_service.delete_job(db, current_user, job_id)
    return success_response(data={})
