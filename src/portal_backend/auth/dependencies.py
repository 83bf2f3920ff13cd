"""FastAPI dependencies for authentication and authorization."""

from typing import Callable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
import structlog

from portal_backend.core.database import get_db
from portal_backend.core.enums import UserRole
from portal_backend.core.error_handling import (
    AccountBlockedError,
    AuthenticationError,
    AuthorizationError,
)
from .models import User
from .utils import verify_token, get_user_by_id

logger = structlog.get_logger(__name__)

# auto_error is off so missing credentials reach our own 401 envelope
security = HTTPBearer(auto_error=False)


def resolve_user(db: Session, token: Optional[str], settings) -> User:
    """Turn a bearer token into an active user.

    Raises:
        AuthenticationError: Missing or invalid token, or unknown user
        AccountBlockedError: The user is blocked
    """
    if not token:
        raise AuthenticationError("Not authorized, no token")

    token_data = verify_token(token, settings)
    if token_data is None:
        raise AuthenticationError("Not authorized, token failed")

    user = get_user_by_id(db, token_data.user_id)
    if user is None:
        logger.info("Token subject not found", user_id=str(token_data.user_id))
        raise AuthenticationError("Not authorized, user not found")

    if user.is_blocked:
        logger.info("Blocked user rejected", user_id=str(user.id))
        raise AccountBlockedError()

    return user


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """Get current authenticated user from JWT token.

    Raises:
        AuthenticationError: If authentication fails
        AccountBlockedError: If the account is blocked
    """
    token = credentials.credentials if credentials else None
    user = resolve_user(db, token, request.app.state.services.settings)
    structlog.contextvars.bind_contextvars(user_id=str(user.id))
    return user


def require_roles(*roles: UserRole) -> Callable:
    """Dependency factory admitting only users holding one of ``roles``.

    Authentication runs first, so a missing token is always a 401 even on
    role-gated routes.
    """
    allowed = {role.value for role in roles}

    async def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            logger.info(
                "Role not permitted",
                user_id=str(current_user.id),
                role=current_user.role,
                allowed=sorted(allowed),
            )
            raise AuthorizationError(
                f"User role {current_user.role} is not authorized to access this route"
            )
        return current_user

    return role_checker


require_admin = require_roles(UserRole.ADMIN)
require_employer = require_roles(UserRole.EMPLOYER, UserRole.ADMIN)
require_candidate = require_roles(UserRole.CANDIDATE)
