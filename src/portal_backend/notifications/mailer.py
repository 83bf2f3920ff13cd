"""SMTP delivery for notification and account emails."""

import asyncio
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

import structlog

from portal_backend.core.config import Settings
from portal_backend.core.error_handling import ExternalServiceError

logger = structlog.get_logger(__name__)


class EmailSender:
    """Sends plain text (and optional HTML) email through the configured SMTP server."""

    def __init__(self, settings: Settings):
        self.settings = settings

    @property
    def enabled(self) -> bool:
        return self.settings.email_notifications_enabled

    def _build_message(self, to_address: str, subject: str, body: str, html_body: Optional[str]) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.settings.smtp_from_address
        msg["To"] = to_address
        msg.attach(MIMEText(body, "plain"))
        if html_body:
            msg.attach(MIMEText(html_body, "html"))
        return msg

    def _send_sync(self, msg: MIMEMultipart) -> None:
        with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port, timeout=30) as server:
            if self.settings.smtp_use_tls:
                server.starttls()
            if self.settings.smtp_username and self.settings.smtp_password:
                server.login(self.settings.smtp_username, self.settings.smtp_password)
            server.send_message(msg)

    async def send(self, to_address: str, subject: str, body: str, html_body: Optional[str] = None) -> None:
        """Send one email.

        Raises:
            ExternalServiceError: If the SMTP exchange fails
        """
        msg = self._build_message(to_address, subject, body, html_body)
        try:
            await asyncio.to_thread(self._send_sync, msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.warning("Email delivery failed", subject=subject, error=str(e))
            raise ExternalServiceError(f"Email delivery failed: {e}", service_name="smtp", original_error=e)

        logger.info("Email sent", subject=subject)
