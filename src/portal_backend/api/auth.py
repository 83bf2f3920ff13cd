"""Authentication API endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import structlog

from portal_backend.auth.dependencies import get_current_user
from portal_backend.auth.models import (
    ForgotPasswordRequest,
    LoginRequest,
    RefreshRequest,
    ResetPasswordRequest,
    SignupRequest,
    User,
    UserResponse,
)
from portal_backend.core.database import get_db
from portal_backend.core.logging import performance_logger
from portal_backend.core.registry import ServiceRegistry
from portal_backend.notifications.outbox import NotificationOutbox
from portal_backend.schemas.base import dump, success_response
from portal_backend.services.auth_service import AuthService
from .deps import get_outbox, get_services

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _auth_service(services: ServiceRegistry = Depends(get_services)) -> AuthService:
    return AuthService(services.settings, services.email_sender)


def _session_payload(user: User, token) -> dict:
    return success_response(
        token=token.access_token,
        refreshToken=token.refresh_token,
        expiresIn=token.expires_in,
        user=dump(UserResponse.model_validate(user)),
    )


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(
    data: SignupRequest,
    db: Session = Depends(get_db),
    outbox: NotificationOutbox = Depends(get_outbox),
    auth_service: AuthService = Depends(_auth_service)
):
    """Register a candidate or employer account."""
    with performance_logger.log_operation_time("signup", role=data.role.value):
        user, token = auth_service.signup(db, data, outbox)
        return _session_payload(user, token)


@router.post("/login")
async def login(
    data: LoginRequest,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(_auth_service)
):
    with performance_logger.log_operation_time("login"):
        user, token = auth_service.login(db, data)
        return _session_payload(user, token)


@router.post("/refresh-token")
async def refresh_token(
    data: RefreshRequest,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(_auth_service)
):
    token = auth_service.refresh(db, data.refresh_token)
    return success_response(token=token.access_token, refreshToken=token.refresh_token, expiresIn=token.expires_in)


@router.get("/me")
async def me(current_user: User = Depends(get_current_user)):
    return success_response(data=dump(UserResponse.model_validate(current_user)))


@router.get("/logout")
async def logout(current_user: User = Depends(get_current_user)):
    """Tokens are stateless; the client discards them."""
    logger.info("User logged out", user_id=str(current_user.id))
    return success_response(data={})


@router.post("/forgot-password")
async def forgot_password(
    data: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(_auth_service)
):
    """Email a password reset link."""
    await auth_service.forgot_password(db, data.email)
    return success_response(data="Email sent")


@router.put("/reset-password/{reset_token}")
async def reset_password(
    reset_token: str,
    data: ResetPasswordRequest,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(_auth_service)
):
    user, token = auth_service.reset_password(db, reset_token, data.password)
    return _session_payload(user, token)
