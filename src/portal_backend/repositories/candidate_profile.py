"""Repository for candidate profiles."""

from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session, selectinload

from portal_backend.models.candidate_profile import CandidateProfile
from .base import BaseRepository


class CandidateProfileRepository(BaseRepository[CandidateProfile]):
    def __init__(self):
        super().__init__(CandidateProfile)

    def get_by_user(self, db: Session, user_id: UUID) -> Optional[CandidateProfile]:
        return (
            db.query(CandidateProfile)
            .options(selectinload(CandidateProfile.resumes), selectinload(CandidateProfile.user))
            .filter(CandidateProfile.user_id == user_id)
            .first()
        )

    def get_or_create(self, db: Session, user_id: UUID) -> CandidateProfile:
        profile = self.get_by_user(db, user_id)
        if profile is None:
            profile = self.create(db, user_id=user_id, skills=[])
        return profile
