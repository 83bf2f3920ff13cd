"""Admin dashboard report endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from portal_backend.auth.dependencies import require_admin
from portal_backend.auth.models import User
from portal_backend.core.database import get_db
from portal_backend.core.logging import performance_logger
from portal_backend.schemas.base import success_response
from portal_backend.services.report_service import ReportService

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get("/stats")
async def stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    with performance_logger.log_operation_time("report_stats"):
        return success_response(data=ReportService().stats(db))


@router.get("/activity")
async def recent_activity(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    return success_response(data=ReportService().recent_activity(db))


@router.get("/growth")
async def user_growth(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """Signups per month over the last six months."""
    return success_response(data=ReportService().user_growth(db))
