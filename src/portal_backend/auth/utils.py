"""Authentication utilities."""

import hashlib
import os
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional, Tuple
from uuid import UUID

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import func
from sqlalchemy.orm import Session
import structlog

from portal_backend.core.config import Settings, settings as default_settings
from .models import User, TokenData

logger = structlog.get_logger(__name__)

REFRESH_TOKEN_TYPE = "refresh"
ACCESS_TOKEN_TYPE = "access"


def is_testing() -> bool:
    return os.getenv("TESTING", "false").lower() in ("1", "true", "yes")


@lru_cache(maxsize=2)
def _pwd_context(testing: bool) -> CryptContext:
    if testing:
        return CryptContext(schemes=["plaintext"], deprecated="auto")
    return CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_pwd_context() -> CryptContext:
    """Get password context based on environment."""
    return _pwd_context(is_testing())


def _prehash(password: str) -> str:
    # bcrypt only reads the first 72 bytes
    if len(password.encode("utf-8")) > 72:
        return hashlib.sha256(password.encode("utf-8")).hexdigest()
    return password


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash.

    Args:
        plain_password: Plain text password
        hashed_password: Hashed password from database

    Returns:
        True if password matches, False otherwise
    """
    try:
        return get_pwd_context().verify(_prehash(plain_password), hashed_password)
    except ValueError:
        logger.warning("Stored password hash is not recognised")
        return False


def get_password_hash(password: str) -> str:
    """Hash a password, pre-hashing passwords longer than bcrypt accepts."""
    return get_pwd_context().hash(_prehash(password))


def _encode(claims: dict, secret: str, algorithm: str, expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    to_encode = claims.copy()
    to_encode.update({
        "exp": now + expires_delta,
        "iat": now,
        "jti": str(uuid.uuid4()),
    })
    return jwt.encode(to_encode, secret, algorithm=algorithm)


def create_access_token(user: User, settings: Optional[Settings] = None, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed access token for ``user``.

    Args:
        user: Token subject
        settings: Settings providing the secret and expiry
        expires_delta: Override of the configured lifetime

    Returns:
        Encoded JWT token
    """
    settings = settings or default_settings
    return _encode(
        {"sub": str(user.id), "role": user.role, "type": ACCESS_TOKEN_TYPE},
        settings.secret_key,
        settings.algorithm,
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes),
    )


def create_refresh_token(user: User, settings: Optional[Settings] = None) -> str:
    settings = settings or default_settings
    return _encode(
        {"sub": str(user.id), "type": REFRESH_TOKEN_TYPE},
        settings.refresh_secret_key,
        settings.algorithm,
        timedelta(days=settings.refresh_token_expire_days),
    )


def verify_token(token: str, settings: Optional[Settings] = None, token_type: str = ACCESS_TOKEN_TYPE) -> Optional[TokenData]:
    """Verify and decode a JWT token.

    Args:
        token: JWT token to verify
        settings: Settings providing the secrets
        token_type: ``"access"`` or ``"refresh"``; selects the secret to check against

    Returns:
        TokenData if valid, None otherwise
    """
    settings = settings or default_settings
    secret = settings.refresh_secret_key if token_type == REFRESH_TOKEN_TYPE else settings.secret_key

    try:
        payload = jwt.decode(token, secret, algorithms=[settings.algorithm])
    except JWTError as e:
        logger.info("Token verification failed", error=str(e))
        return None

    if payload.get("type", ACCESS_TOKEN_TYPE) != token_type:
        logger.info("Token type mismatch", expected=token_type)
        return None

    user_id_str = payload.get("sub")
    if user_id_str is None:
        logger.warning("Token missing user ID")
        return None

    try:
        user_id = UUID(user_id_str)
    except ValueError:
        logger.warning("Invalid UUID in token")
        return None

    return TokenData(user_id=user_id, role=payload.get("role"), token_type=token_type)


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Authenticate a user with email and password.

    Blocked users still authenticate; the caller decides how to reject them.

    Returns:
        User if the credentials match, None otherwise
    """
    user = get_user_by_email(db, email)
    if not user:
        logger.info("Login for unknown email")
        return None

    if not verify_password(password, user.hashed_password):
        logger.info("Invalid password", user_id=str(user.id))
        return None

    return user


def get_user_by_id(db: Session, user_id: UUID) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def generate_reset_token() -> Tuple[str, str]:
    """Create a password reset token.

    Returns:
        ``(token, token_hash)``; only the hash is stored
    """
    token = secrets.token_hex(20)
    return token, hash_reset_token(token)
