"""Candidate discovery for employers."""

from uuid import UUID

from sqlalchemy.orm import Session, contains_eager, selectinload
import structlog

from portal_backend.auth.models import User
from portal_backend.core.enums import UserRole, UserStatus
from portal_backend.core.error_handling import NotFoundError
from portal_backend.models.candidate_profile import CandidateProfile
from portal_backend.search import CANDIDATE_SEARCH, Page, QuerySpec, search

logger = structlog.get_logger(__name__)


class EmployerService:
    """Lets employers browse the profiles of active candidates."""

    def _candidate_query(self, db: Session):
        return (
            db.query(CandidateProfile)
            .join(User, CandidateProfile.user_id == User.id)
            .options(contains_eager(CandidateProfile.user), selectinload(CandidateProfile.resumes))
            .filter(User.role == UserRole.CANDIDATE.value, User.status == UserStatus.ACTIVE.value)
        )

    def search_candidates(self, db: Session, spec: QuerySpec) -> Page:
        """Active candidate profiles matching the query.

        ``keyword`` covers the candidate's name, title, skills and about text.
        """
        page = search(self._candidate_query(db), spec, CANDIDATE_SEARCH)
        logger.debug("Candidate search", total=page.total, keyword=spec.keyword)
        return page

    def get_candidate(self, db: Session, candidate_ref: UUID) -> CandidateProfile:
        """Profile looked up by profile id, falling back to the user id.

        Raises:
            NotFoundError: No such profile, or its owner is not an active candidate
        """
        profile = (
            db.query(CandidateProfile)
            .options(selectinload(CandidateProfile.user), selectinload(CandidateProfile.resumes))
            .filter(CandidateProfile.id == candidate_ref)
            .first()
        )
        if profile is None:
            profile = (
                db.query(CandidateProfile)
                .options(selectinload(CandidateProfile.user), selectinload(CandidateProfile.resumes))
                .filter(CandidateProfile.user_id == candidate_ref)
                .first()
            )
        if profile is None:
            raise NotFoundError("Candidate not found")

        user = profile.user
        if user is None or user.role != UserRole.CANDIDATE.value or user.status != UserStatus.ACTIVE.value:
            raise NotFoundError("Candidate not available")
        return profile
