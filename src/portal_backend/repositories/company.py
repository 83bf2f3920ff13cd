"""Repository for companies."""

from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from portal_backend.models.company import Company
from .base import BaseRepository


class CompanyRepository(BaseRepository[Company]):
    conflict_message = "Company name is already taken"

    def __init__(self):
        super().__init__(Company)

    def get_by_owner(self, db: Session, owner_id: UUID) -> Optional[Company]:
        return db.query(Company).filter(Company.owner_id == owner_id).first()
