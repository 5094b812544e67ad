# slotkeeper/services/email.py
"""
Email Service for SlotKeeper

Sends notification emails through the Resend API. The provider is picked
from settings by ``create_email_service``; the console provider
(``email_console.py``) is the default for development and tests.
"""

import logging
import re
from typing import Any, Dict, Optional, Protocol

import resend

from ..core.config import Settings, settings as default_settings
from ..core.exceptions import ServiceException
from .base import BaseService
from .email_console import ConsoleEmailService

logger = logging.getLogger(__name__)


class EmailSender(Protocol):
    """Anything that can deliver a rendered email."""

    def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
    ) -> Dict[str, Any]:
        ...


def html_to_text(html_content: str) -> str:
    """Convert HTML content to plain text for better deliverability."""
    text = re.sub(r"<[^>]+>", "", html_content)
    text = re.sub(r"\s+", " ", text)
    return text.strip()


class EmailService(BaseService):
    """
    Service for sending emails using Resend API.
    """

    def __init__(self, config: Optional[Settings] = None):
        """
        Initialize email service.

        Args:
            config: Settings to read the API key and sender from

        Raises:
            ServiceException: If the Resend API key is not configured
        """
        super().__init__()
        config = config or default_settings

        if config.resend_api_key is None or not config.resend_api_key.get_secret_value():
            raise ServiceException("Resend API key not configured")
        resend.api_key = config.resend_api_key.get_secret_value()

        self.from_email = config.from_email
        self.logger.info("EmailService initialized successfully")

    @BaseService.measure_operation("send_email")
    def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Send an email using Resend.

        Args:
            to_email: Recipient email address
            subject: Email subject
            html_content: HTML content of the email
            text_content: Optional plain text version (derived from HTML when omitted)

        Returns:
            Dict containing the Resend API response

        Raises:
            ServiceException: If email sending fails
        """
        email_data: Dict[str, Any] = {
            "from": self.from_email,
            "to": to_email,
            "subject": subject,
            "html": html_content,
            "text": text_content or html_to_text(html_content),
        }

        try:
            response = resend.Emails.send(email_data)
        except Exception as e:
            error_msg = str(e) or type(e).__name__
            self.logger.error(f"Failed to send email to {to_email}: {error_msg}")
            self.log_operation("email_failed", to_email=to_email, subject=subject, error=error_msg)
            raise ServiceException(f"Email sending failed: {error_msg}")

        self.logger.info(f"Email sent successfully to {to_email} - Subject: {subject}")
        self.log_operation("email_sent", to_email=to_email, subject=subject)
        return dict(response) if response else {}


def create_email_service(config: Optional[Settings] = None) -> EmailSender:
    """Build the email provider selected by ``EMAIL_PROVIDER``."""
    config = config or default_settings
    if config.email_provider == "resend":
        return EmailService(config)
    return ConsoleEmailService(from_email=config.from_email)
