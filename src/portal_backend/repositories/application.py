"""Repository for applications."""

from typing import List, Optional, Set
from uuid import UUID

from sqlalchemy.orm import Query, Session, joinedload

from portal_backend.models.application import Application
from portal_backend.models.job import Job
from .base import BaseRepository


class ApplicationRepository(BaseRepository[Application]):
    conflict_message = "You have already applied to this job"

    def __init__(self):
        super().__init__(Application)

    def base_query(self, db: Session) -> Query:
        return db.query(Application).options(
            joinedload(Application.job).joinedload(Job.company),
            joinedload(Application.candidate),
        )

    def get_for_candidate(self, db: Session, job_id: UUID, candidate_id: UUID) -> Optional[Application]:
        return db.query(Application).filter(
            Application.job_id == job_id,
            Application.candidate_id == candidate_id,
        ).first()

    def applied_job_ids(self, db: Session, candidate_id: UUID) -> Set[UUID]:
        rows = db.query(Application.job_id).filter(Application.candidate_id == candidate_id).all()
        return {row[0] for row in rows}

    def list_for_job(self, db: Session, job_id: UUID) -> List[Application]:
        return (
            self.base_query(db)
            .filter(Application.job_id == job_id)
            .order_by(Application.created_at.desc())
            .all()
        )

    def list_for_employer(self, db: Session, employer_id: UUID) -> List[Application]:
        return (
            self.base_query(db)
            .filter(Application.employer_id == employer_id)
            .order_by(Application.created_at.desc())
            .all()
        )
