"""Repository for job postings."""

from datetime import datetime
from typing import List
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Query, Session, joinedload

from portal_backend.core.enums import JobStatus
from portal_backend.models.application import Application
from portal_backend.models.job import Job
from .base import BaseRepository


class JobRepository(BaseRepository[Job]):
    def __init__(self):
        super().__init__(Job)

    def base_query(self, db: Session) -> Query:
        """Jobs with their company and employer eagerly loaded."""
        return db.query(Job).options(joinedload(Job.company), joinedload(Job.employer))

    def open_query(self, db: Session, now: datetime) -> Query:
        """Jobs visible on the public board: Open and not past the deadline."""
        return self.base_query(db).filter(
            Job.status == JobStatus.OPEN.value,
            Job.application_deadline >= now,
        )

    def count_applications(self, db: Session, job_id: UUID) -> int:
        return db.query(func.count(Application.id)).filter(Application.job_id == job_id).scalar() or 0

    def get_expired_open(self, db: Session, now: datetime) -> List[Job]:
        return db.query(Job).filter(
            Job.status == JobStatus.OPEN.value,
            Job.application_deadline < now,
        ).all()

    def count_by_type(self, db: Session) -> dict:
        rows = db.query(Job.type, func.count(Job.id)).group_by(Job.type).all()
        return {job_type: count for job_type, count in rows}
