"""Company profile API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from portal_backend.auth.dependencies import get_current_user, require_employer
from portal_backend.auth.models import User
from portal_backend.core.database import get_db
from portal_backend.schemas.base import dump, paginated_response, success_response
from portal_backend.schemas.company import CompanyCreate, CompanyResponse, CompanyUpdate
from portal_backend.search import COMPANY_SEARCH, QuerySpec
from portal_backend.services.company_service import CompanyService
from .deps import dump_items, search_spec

router = APIRouter(prefix="/api/companies", tags=["companies"])


@router.get("")
async def list_companies(
    spec: QuerySpec = Depends(search_spec(COMPANY_SEARCH, "default_page_size")),
    db: Session = Depends(get_db)
):
    page = CompanyService().list_companies(db, spec)
    return paginated_response(dump_items(CompanyResponse, page.items, spec, COMPANY_SEARCH), page)


@router.get("/me")
async def my_company(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """The caller's company, or null when they have none."""
    company = CompanyService().my_company(db, current_user)
    return success_response(data=dump(CompanyResponse.model_validate(company)) if company else None)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_company(
    data: CompanyCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer)
):
    company = CompanyService().create_company(db, current_user, data)
    return success_response(data=dump(CompanyResponse.model_validate(company)))


@router.get("/{company_id}")
async def get_company(company_id: UUID, db: Session = Depends(get_db)):
    company = CompanyService().get_company(db, company_id)
    return success_response(data=dump(CompanyResponse.model_validate(company)))


@router.put("/{company_id}")
async def update_company(
    company_id: UUID,
    data: CompanyUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer)
):
    company = CompanyService().update_company(db, current_user, company_id, data)
    return success_response(data=dump(CompanyResponse.model_validate(company)))
