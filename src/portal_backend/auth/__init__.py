"""Authentication and authorization module."""

from .dependencies import (
    get_current_user,
    require_roles,
    require_admin,
    require_employer,
    require_candidate,
    resolve_user,
)
from .models import User, SignupRequest, LoginRequest, UserResponse, Token, TokenData
from .permissions import ensure_owner_or_admin, is_owner_or_admin
from .utils import (
    create_access_token,
    create_refresh_token,
    verify_token,
    get_password_hash,
    verify_password,
)

__all__ = [
    "get_current_user",
    "require_roles",
    "require_admin",
    "require_employer",
    "require_candidate",
    "resolve_user",
    "User",
    "SignupRequest",
    "LoginRequest",
    "UserResponse",
    "Token",
    "TokenData",
    "ensure_owner_or_admin",
    "is_owner_or_admin",
    "create_access_token",
    "create_refresh_token",
    "verify_token",
    "get_password_hash",
    "verify_password",
]
