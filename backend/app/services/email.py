# backend/app/services/email.py
"""
Email Service for the Disciplix platform

Sends transactional email through the configured provider:
- ``console``: logs the message (development and tests)
- ``resend``: delivers through the Resend API

Send failures raise ServiceException; callers decide whether the
failure is fatal for their flow.
"""

import logging
import re
from typing import Any, Dict, List, Optional

import resend
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import BRAND_NAME
from ..core.exceptions import ServiceException
from .base import BaseService
from .template_service import TemplateService

logger = logging.getLogger(__name__)


class EmailService(BaseService):
    """
    Service for sending emails.

    Console deliveries are kept in ``outbox`` so tests can read the
    links that were sent.
    """

    def __init__(
        self,
        db: Session,
        template_service: Optional[TemplateService] = None,
        provider: Optional[str] = None,
    ):
        super().__init__(db)
        self.template_service = template_service or TemplateService()
        self.provider = provider or settings.email_provider
        self.from_email = f"{BRAND_NAME} <{settings.email_from}>"
        self.outbox: List[Dict[str, Any]] = []

        if self.provider == "resend":
            if not settings.resend_api_key:
                raise ServiceException("Resend API key not configured")
            resend.api_key = settings.resend_api_key

    def _html_to_text(self, html_content: str) -> str:
        """Convert HTML content to plain text for better deliverability"""
        text = re.sub(r"<[^>]+>", "", html_content)
        text = re.sub(r"\s+", " ", text)
        return text.strip()

    @BaseService.measure_operation("send_email")
    def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Send a generic email.

        Args:
            to_email: Recipient email address
            subject: Email subject
            html_content: HTML content of the email
            text_content: Optional plain text version

        Returns:
            Provider response (message id)

        Raises:
            ServiceException: If email sending fails
        """
        email_data = {
            "from": self.from_email,
            "to": to_email,
            "subject": subject,
            "html": html_content,
            "text": text_content or self._html_to_text(html_content),
        }

        if self.provider == "console":
            self.outbox.append(email_data)
            self.logger.info(f"[console email] to={to_email} subject={subject}")
            self.logger.debug(email_data["text"])
            return {"id": f"console-{len(self.outbox)}"}

        try:
            response = resend.Emails.send(email_data)
        except Exception as e:
            self.logger.error(f"Failed to send email to {to_email}: {str(e)}")
            raise ServiceException(f"Failed to send email: {str(e)}") from e

        self.log_operation("email_sent", to_email=to_email, subject=subject)
        return dict(response)

    def send_verification_email(self, to_email: str, name: str, token: str) -> Dict[str, Any]:
        action_url = f"{settings.client_url}/verify-email?token={token}"
        html = self.template_service.render_template(
            "email/verification.html",
            name=name,
            action_url=action_url,
            expires_in_hours=settings.email_verification_ttl_hours,
        )
        return self.send_email(to_email, f"Verify your {BRAND_NAME} account", html)

    def send_password_reset_email(self, to_email: str, name: str, token: str) -> Dict[str, Any]:
        action_url = f"{settings.client_url}/reset-password?token={token}"
        html = self.template_service.render_template(
            "email/password_reset.html",
            name=name,
            action_url=action_url,
            expires_in_minutes=settings.password_reset_ttl_minutes,
        )
        return self.send_email(to_email, f"Reset your {BRAND_NAME} password", html)
