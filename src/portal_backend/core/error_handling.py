"""Error classification and the HTTP translation of portal errors."""

from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
from enum import Enum

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .logging import get_logger

logger = get_logger(__name__)


class ErrorSeverity(Enum):
    """Error severity levels for classification and handling."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification and routing."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    EXTERNAL_SERVICE = "external_service"
    SYSTEM = "system"


class PortalError(Exception):
    """Base exception class for job portal errors."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.details = details or {}
        self.original_error = original_error
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging."""
        return {
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "status_code": self.status_code,
            "timestamp": self.timestamp.isoformat(),
            "details": self.details,
            "original_error": str(self.original_error) if self.original_error else None,
        }


class ValidationError(PortalError):
    """Invalid input or a business rule rejected the request."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, field: str = None, **kwargs):
        super().__init__(message, ErrorCategory.VALIDATION, ErrorSeverity.LOW, **kwargs)
        self.field = field


class AuthenticationError(PortalError):
    """Missing, invalid or expired credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Not authorized, token failed", **kwargs):
        super().__init__(message, ErrorCategory.AUTHENTICATION, ErrorSeverity.MEDIUM, **kwargs)


class AccountBlockedError(PortalError):
    """The authenticated user's account is blocked."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Your account has been blocked", **kwargs):
        super().__init__(message, ErrorCategory.AUTHENTICATION, ErrorSeverity.HIGH, **kwargs)


class AuthorizationError(PortalError):
    """Wrong role, or not the owner of the resource."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Not authorized to perform this action", **kwargs):
        super().__init__(message, ErrorCategory.AUTHORIZATION, ErrorSeverity.HIGH, **kwargs)


class NotFoundError(PortalError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Resource not found", **kwargs):
        super().__init__(message, ErrorCategory.NOT_FOUND, ErrorSeverity.LOW, **kwargs)


class ConflictError(PortalError):
    """Uniqueness violation such as a duplicate application."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str, **kwargs):
        super().__init__(message, ErrorCategory.CONFLICT, ErrorSeverity.LOW, **kwargs)


class ExternalServiceError(PortalError):
    """A delivery collaborator (push provider, SMTP) failed."""

    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, message: str, service_name: str = None, **kwargs):
        super().__init__(message, ErrorCategory.EXTERNAL_SERVICE, ErrorSeverity.MEDIUM, **kwargs)
        self.service_name = service_name


def error_body(message: str, errors: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return body


async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    log = logger.warning if exc.status_code >= 500 else logger.info
    log(
        "Request rejected",
        path=request.url.path,
        status_code=exc.status_code,
        category=exc.category.value,
        error=exc.message,
    )
    errors = None
    if isinstance(exc, ValidationError) and exc.field:
        errors = [{"field": exc.field, "message": exc.message}]
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, errors))


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message),
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = []
    for item in exc.errors():
        location = [str(part) for part in item.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(location) or None, "message": item.get("msg")})

    message = errors[0]["message"] if errors else "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder(error_body(message, errors)),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Server Error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the JSON error envelope on every failure path."""
    app.add_exception_handler(PortalError, portal_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
