"""Company profile management service."""

from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session
import structlog

from portal_backend.auth.models import User
from portal_backend.auth.permissions import ensure_owner_or_admin
from portal_backend.core.error_handling import ConflictError, NotFoundError
from portal_backend.models.company import Company, DEFAULT_LOGO
from portal_backend.repositories.company import CompanyRepository
from portal_backend.schemas.company import CompanyCreate, CompanyUpdate
from portal_backend.search import COMPANY_SEARCH, Page, QuerySpec, search

logger = structlog.get_logger(__name__)


class CompanyService:
    def __init__(self):
        self.repository = CompanyRepository()

    def create_company(self, db: Session, owner: User, data: CompanyCreate) -> Company:
        """Create the owner's company.

        Raises:
            ConflictError: The owner already has a company, or the name is taken
        """
        if self.repository.get_by_owner(db, owner.id) is not None:
            raise ConflictError("You already have a company profile")

        values = data.model_dump(exclude_unset=True)
        if values.get("employees_count") is not None:
            values["employees_count"] = values["employees_count"].value
        if not values.get("logo_url"):
            values["logo_url"] = DEFAULT_LOGO

        company = self.repository.create(db, owner_id=owner.id, **values)
        logger.info("Company created", company_id=str(company.id), owner_id=str(owner.id))
        return company

    def get_company(self, db: Session, company_id: UUID) -> Company:
        company = self.repository.get_by_id(db, company_id)
        if company is None:
            raise NotFoundError("Company not found")
        return company

    def my_company(self, db: Session, owner: User) -> Optional[Company]:
        return self.repository.get_by_owner(db, owner.id)

    def list_companies(self, db: Session, spec: QuerySpec) -> Page:
        return search(db.query(Company), spec, COMPANY_SEARCH)

    def update_company(self, db: Session, actor: User, company_id: UUID, data: CompanyUpdate) -> Company:
        company = self.get_company(db, company_id)
        ensure_owner_or_admin(actor, company.owner_id, "update this company")

        values = data.model_dump(exclude_unset=True)
        if "employees_count" in values and values["employees_count"] is not None:
            values["employees_count"] = values["employees_count"].value
        if "name" in values and values["name"] is None:
            del values["name"]
        if "logo_url" in values and not values["logo_url"]:
            values["logo_url"] = DEFAULT_LOGO

        company = self.repository.update(db, company, **values)
        logger.info("Company updated", company_id=str(company.id), actor_id=str(actor.id))
        return company
