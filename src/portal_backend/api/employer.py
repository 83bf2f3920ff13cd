"""Candidate discovery endpoints for employers."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from portal_backend.auth.dependencies import require_employer
from portal_backend.auth.models import User
from portal_backend.core.database import get_db
from portal_backend.core.logging import performance_logger
from portal_backend.schemas.base import dump, paginated_response, success_response
from portal_backend.schemas.candidate import CandidateProfileResponse
from portal_backend.search import CANDIDATE_SEARCH, QuerySpec
from portal_backend.services.employer_service import EmployerService
from .deps import dump_items, search_spec

router = APIRouter(prefix="/api/employer", tags=["employer"])


@router.get("/candidates")
async def search_candidates(
    spec: QuerySpec = Depends(search_spec(CANDIDATE_SEARCH)),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer)
):
    """Search active candidates by keyword, location, skills and more."""
    with performance_logger.log_operation_time("search_candidates", user_id=str(current_user.id)):
        page = EmployerService().search_candidates(db, spec)
        return paginated_response(dump_items(CandidateProfileResponse, page.items, spec, CANDIDATE_SEARCH), page)


@router.get("/candidates/{candidate_id}")
async def get_candidate(
    candidate_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer)
):
    profile = EmployerService().get_candidate(db, candidate_id)
    return success_response(data=dump(CandidateProfileResponse.model_validate(profile)))
