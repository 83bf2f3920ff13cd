"""Account lifecycle: signup, login, token refresh and password reset."""

from datetime import timedelta
from typing import Optional, Tuple

from sqlalchemy.orm import Session
import structlog

from portal_backend.auth.models import LoginRequest, SignupRequest, Token, User
from portal_backend.auth.utils import (
    REFRESH_TOKEN_TYPE,
    authenticate_user,
    create_access_token,
    create_refresh_token,
    generate_reset_token,
    get_password_hash,
    hash_reset_token,
    verify_token,
)
from portal_backend.core.config import Settings
from portal_backend.core.custom_types import utcnow
from portal_backend.core.enums import EntityType, NotificationType, UserRole
from portal_backend.core.error_handling import (
    AccountBlockedError,
    AuthenticationError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)
from portal_backend.notifications.channels import DeliveryChannel
from portal_backend.notifications.mailer import EmailSender
from portal_backend.notifications.outbox import NotificationOutbox
from portal_backend.repositories.candidate_profile import CandidateProfileRepository
from portal_backend.repositories.user import UserRepository

logger = structlog.get_logger(__name__)


class AuthService:
    """Service for account creation and credential handling."""

    def __init__(self, settings: Settings, email_sender: Optional[EmailSender] = None):
        self.settings = settings
        self.email_sender = email_sender
        self.repository = UserRepository()
        self.profile_repository = CandidateProfileRepository()

    def issue_tokens(self, user: User) -> Token:
        return Token(
            access_token=create_access_token(user, self.settings),
            refresh_token=create_refresh_token(user, self.settings),
            expires_in=self.settings.access_token_expire_minutes * 60,
        )

    def signup(self, db: Session, data: SignupRequest, outbox: NotificationOutbox) -> Tuple[User, Token]:
        """Register a candidate or employer and queue their welcome notification.

        Raises:
            ConflictError: The email is already registered
        """
        if self.repository.get_by_email(db, data.email) is not None:
            raise ConflictError("User already exists")

        user = self.repository.create(
            db,
            name=data.name.strip(),
            email=data.email.lower(),
            hashed_password=get_password_hash(data.password),
            role=data.role.value,
        )
        if data.role == UserRole.CANDIDATE:
            self.profile_repository.get_or_create(db, user.id)

        logger.info("User registered", user_id=str(user.id), role=user.role)

        outbox.notify_user(
            user.id,
            NotificationType.WELCOME,
            "Welcome to the Job Portal",
            f"Hi {user.name}, your {user.role} account is ready.",
            entity_type=EntityType.USER,
            entity_id=user.id,
            channels=(DeliveryChannel.IN_APP,),
        )
        return user, self.issue_tokens(user)

    def login(self, db: Session, data: LoginRequest) -> Tuple[User, Token]:
        """Check credentials and record the login time.

        Raises:
            AuthenticationError: Unknown email or wrong password
            AccountBlockedError: The account is blocked
        """
        user = authenticate_user(db, data.email, data.password)
        if user is None:
            raise AuthenticationError("Invalid credentials")
        if user.is_blocked:
            logger.info("Blocked user login rejected", user_id=str(user.id))
            raise AccountBlockedError()

        user = self.repository.update(db, user, last_login=utcnow())
        logger.info("User logged in", user_id=str(user.id))
        return user, self.issue_tokens(user)

    def refresh(self, db: Session, refresh_token: Optional[str]) -> Token:
        if not refresh_token:
            raise AuthenticationError("No refresh token provided")

        token_data = verify_token(refresh_token, self.settings, token_type=REFRESH_TOKEN_TYPE)
        if token_data is None:
            raise AuthenticationError("Invalid refresh token")

        user = self.repository.get_by_id(db, token_data.user_id)
        if user is None:
            raise AuthenticationError("Invalid refresh token")
        if user.is_blocked:
            raise AccountBlockedError()
        return self.issue_tokens(user)

    async def forgot_password(self, db: Session, email: str) -> None:
        """Store a hashed reset token and email the raw token as a link.

        Raises:
            NotFoundError: No account for ``email``
            ExternalServiceError: The email could not be sent; the token is discarded
        """
        user = self.repository.get_by_email(db, email)
        if user is None:
            raise NotFoundError("There is no user with that email")

        token, token_hash = generate_reset_token()
        self.repository.update(
            db,
            user,
            reset_password_token=token_hash,
            reset_password_expires=utcnow() + timedelta(minutes=self.settings.password_reset_expire_minutes),
        )

        reset_url = f"{self.settings.client_url.rstrip('/')}/reset-password/{token}"
        body = (
            "You are receiving this email because you (or someone else) requested "
            f"a password reset. Open the link below to choose a new password:\n\n{reset_url}\n\n"
            f"The link expires in {self.settings.password_reset_expire_minutes} minutes."
        )
        try:
            if self.email_sender is None:
                raise ExternalServiceError("Email is not configured", service_name="smtp")
            await self.email_sender.send(user.email, "Password reset token", body)
        except ExternalServiceError as e:
            self.repository.update(db, user, reset_password_token=None, reset_password_expires=None)
            logger.warning("Password reset email failed", user_id=str(user.id), error=e.message)
            raise ExternalServiceError("Email could not be sent", service_name="smtp", original_error=e)

        logger.info("Password reset requested", user_id=str(user.id))

    def reset_password(self, db: Session, token: str, password: str) -> Tuple[User, Token]:
        """Set a new password using an unexpired reset token.

        Raises:
            ValidationError: Unknown or expired token
        """
        user = self.repository.get_by_reset_token(db, hash_reset_token(token))
        if user is None or user.reset_password_expires is None or user.reset_password_expires <= utcnow():
            raise ValidationError("Invalid token")

        user = self.repository.update(
            db,
            user,
            hashed_password=get_password_hash(password),
            reset_password_token=None,
            reset_password_expires=None,
        )
        logger.info("Password reset", user_id=str(user.id))
        return user, self.issue_tokens(user)
