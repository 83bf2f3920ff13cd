"""Push notification payloads and providers (Firebase Cloud Messaging)."""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import httpx
import structlog

from portal_backend.core.config import Settings

logger = structlog.get_logger(__name__)

FCM_SCOPE = "https://www.googleapis.com/auth/firebase.messaging"
FCM_SEND_URL = "https://fcm.googleapis.com/v1/projects/{project_id}/messages:send"

# Codes that mean the token itself is dead; anything else leaves it enabled
INVALID_TOKEN_ERRORS = frozenset({"UNREGISTERED", "SENDER_ID_MISMATCH", "INVALID_REGISTRATION"})


def stringify_data(data: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """FCM data values must be strings."""
    return {str(key): "" if value is None else str(value) for key, value in (data or {}).items()}


@dataclass
class PushPayload:
    title: str
    body: str
    data: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        title: str,
        body: str,
        data: Optional[Dict[str, Any]] = None,
        screen: Optional[str] = None,
        entity_id: Optional[Any] = None,
    ) -> "PushPayload":
        """Build a payload, adding the deep-link ``screen``/``entityId`` when given."""
        merged = dict(data or {})
        if screen:
            merged["screen"] = screen
        if entity_id is not None:
            merged["entityId"] = entity_id
        return cls(title=title, body=body, data=stringify_data(merged))


@dataclass
class TokenResult:
    token: str
    success: bool
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def invalid(self) -> bool:
        return not self.success and self.error_code in INVALID_TOKEN_ERRORS


class PushProvider:
    """Sends one payload to a set of device tokens, reporting per-token outcomes."""

    enabled = True

    async def send(self, tokens: Sequence[str], payload: PushPayload) -> List[TokenResult]:
        raise NotImplementedError

    async def close(self) -> None:
        return None


class NullPushProvider(PushProvider):
    """Used when no FCM credentials are configured."""

    enabled = False

    async def send(self, tokens: Sequence[str], payload: PushPayload) -> List[TokenResult]:
        return []


def parse_fcm_error(response: httpx.Response) -> Optional[str]:
    """Extract the FCM error code from an HTTP v1 error response.

    ``INVALID_ARGUMENT`` is only reported as ``INVALID_REGISTRATION`` when a
    field violation names the registration token; a malformed payload keeps
    the generic code so the recipient's tokens stay enabled.
    """
    try:
        error = response.json().get("error", {})
    except ValueError:
        return None
    details = error.get("details", []) or []
    code = next((detail["errorCode"] for detail in details if detail.get("errorCode")), None)
    code = code or error.get("status")
    if code == "INVALID_ARGUMENT":
        for detail in details:
            for violation in detail.get("fieldViolations", []) or []:
                if violation.get("field") == "message.token":
                    return "INVALID_REGISTRATION"
    return code


class FcmPushProvider(PushProvider):
    """FCM HTTP v1 client authenticated with a service account."""

    def __init__(self, project_id: str, credentials_file: str, timeout: float = 10.0):
        """Initialize the provider.

        Args:
            project_id: Firebase project id
            credentials_file: Path to the service account JSON file
            timeout: Per-request timeout in seconds
        """
        from google.oauth2 import service_account

        self.project_id = project_id
        self.credentials = service_account.Credentials.from_service_account_file(
            credentials_file, scopes=[FCM_SCOPE]
        )
        self.client = httpx.AsyncClient(timeout=timeout)
        self._token_lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "FcmPushProvider":
        return cls(settings.fcm_project_id, settings.fcm_credentials_file, settings.fcm_timeout_seconds)

    async def _access_token(self) -> str:
        from google.auth.transport.requests import Request

        async with self._token_lock:
            if not self.credentials.valid:
                await asyncio.to_thread(self.credentials.refresh, Request())
            return self.credentials.token

    async def _send_one(self, token: str, payload: PushPayload, access_token: str) -> TokenResult:
        message = {
            "message": {
                "token": token,
                "notification": {"title": payload.title, "body": payload.body},
                "data": payload.data,
            }
        }
        try:
            response = await self.client.post(
                FCM_SEND_URL.format(project_id=self.project_id),
                json=message,
                headers={"Authorization": f"Bearer {access_token}"},
            )
        except httpx.HTTPError as e:
            return TokenResult(token=token, success=False, error_code="NETWORK_ERROR", error_message=str(e))

        if response.status_code == 200:
            return TokenResult(token=token, success=True)
        return TokenResult(
            token=token,
            success=False,
            error_code=parse_fcm_error(response) or f"HTTP_{response.status_code}",
            error_message=response.text[:200],
        )

    async def send(self, tokens: Sequence[str], payload: PushPayload) -> List[TokenResult]:
        if not tokens:
            return []
        access_token = await self._access_token()
        return list(await asyncio.gather(*(self._send_one(token, payload, access_token) for token in tokens)))

    async def close(self) -> None:
        await self.client.aclose()


def create_push_provider(settings: Settings) -> PushProvider:
    if not settings.push_enabled:
        logger.info("Push notifications disabled, FCM is not configured")
        return NullPushProvider()
    return FcmPushProvider.from_settings(settings)
