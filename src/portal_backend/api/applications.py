"""Job application API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import structlog

from portal_backend.auth.dependencies import require_candidate, require_employer
from portal_backend.auth.models import User
from portal_backend.core.database import get_db
from portal_backend.core.logging import performance_logger
from portal_backend.notifications.outbox import NotificationOutbox
from portal_backend.schemas.application import ApplicationCreate, ApplicationResponse, ApplicationStatusUpdate
from portal_backend.schemas.base import dump, paginated_response, success_response
from portal_backend.search import APPLICATION_SEARCH, QuerySpec
from portal_backend.services.application_service import ApplicationService
from .deps import dump_items, get_outbox, search_spec

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/applications", tags=["applications"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def apply_for_job(
    data: ApplicationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_candidate),
    outbox: NotificationOutbox = Depends(get_outbox)
):
    """Apply to an open job.

    The job's employer is notified once the response has been sent.
    """
    with performance_logger.log_operation_time("apply_for_job", job_id=str(data.job_id), user_id=str(current_user.id)):
        application = ApplicationService().apply(db, current_user, data.job_id, data, outbox)
        return success_response(data=dump(ApplicationResponse.model_validate(application)))


@router.get("/my-applications")
async def my_applications(
    spec: QuerySpec = Depends(search_spec(APPLICATION_SEARCH, "default_page_size")),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_candidate)
):
    """The candidate's applications; filterable by ``status`` and ``jobId``."""
    page = ApplicationService().my_applications(db, current_user, spec)
    return paginated_response(dump_items(ApplicationResponse, page.items, spec, APPLICATION_SEARCH), page)


@router.get("/check/{job_id}")
async def check_applied(
    job_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_candidate)
):
    """Whether the candidate already applied to the job."""
    application = ApplicationService().get_for_candidate(db, current_user, job_id)
    return success_response(
        hasApplied=application is not None,
        data=dump(ApplicationResponse.model_validate(application)) if application else None,
    )


@router.get("/employer/all")
async def employer_applications(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer)
):
    applications = ApplicationService().employer_applications(db, current_user)
    data = dump_items(ApplicationResponse, applications)
    return success_response(count=len(data), data=data)


@router.get("/job/{job_id}")
async def job_applications(
    job_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer)
):
    applications = ApplicationService().job_applications(db, current_user, job_id)
    data = dump_items(ApplicationResponse, applications)
    return success_response(count=len(data), data=data)


@router.put("/{application_id}/status")
async def update_application_status(
    application_id: UUID,
    data: ApplicationStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer),
    outbox: NotificationOutbox = Depends(get_outbox)
):
    with performance_logger.log_operation_time(
        "update_application_status",
        application_id=str(application_id),
        user_id=str(current_user.id)
    ):
        application = ApplicationService().update_status(db, current_user, application_id, data.status, outbox)
        return success_response(data=dump(ApplicationResponse.model_validate(application)))
