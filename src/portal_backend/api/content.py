"""Site content endpoints (about, terms, privacy)."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from portal_backend.auth.dependencies import require_admin
from portal_backend.auth.models import User
from portal_backend.core.database import get_db
from portal_backend.schemas.base import dump, success_response
from portal_backend.schemas.content import ContentResponse, ContentUpsert
from portal_backend.services.content_service import ContentService

router = APIRouter(prefix="/api/content", tags=["content"])


@router.get("")
async def list_content(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    return success_response(data=ContentService().list_content(db))


@router.put("")
async def update_content(
    data: ContentUpsert,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    content = ContentService().upsert(db, current_user, data)
    return success_response(data=dump(ContentResponse.model_validate(content)))
