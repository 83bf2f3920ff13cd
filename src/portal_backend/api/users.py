"""Admin user management endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from portal_backend.auth.dependencies import require_admin
from portal_backend.auth.models import User
from portal_backend.core.database import get_db
from portal_backend.schemas.base import dump, paginated_response, success_response
from portal_backend.schemas.user import UserDetail, UserUpdate
from portal_backend.search import USER_SEARCH, QuerySpec
from portal_backend.services.user_service import UserService
from .deps import dump_items, search_spec

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("")
async def list_users(
    spec: QuerySpec = Depends(search_spec(USER_SEARCH, "default_page_size")),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    page = UserService().list_users(db, spec)
    return paginated_response(dump_items(UserDetail, page.items, spec, USER_SEARCH), page)


@router.get("/{user_id}")
async def get_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    return success_response(data=dump(UserDetail.model_validate(UserService().get_user(db, user_id))))


@router.put("/{user_id}")
async def update_user(
    user_id: UUID,
    data: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """Update a user; ``status: blocked`` locks the account out."""
    user = UserService().update_user(db, current_user, user_id, data)
    return success_response(data=dump(UserDetail.model_validate(user)))


@router.delete("/{user_id}")
async def delete_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    UserService().delete_user(db, current_user, user_id)
    return success_response(data={})
