# slotkeeper/services/notification_service.py
"""
Notification Service for SlotKeeper

Renders booking emails from Jinja2 templates and delivers them through
the configured email provider, retrying transient failures with
exponential backoff. A failed delivery is logged and reported as False;
it never propagates into the booking operation that triggered it.
"""

from functools import wraps
import logging
import time
from typing import Any, Callable, Dict, Optional, TypeVar, cast

from jinja2.exceptions import TemplateNotFound

from ..core.config import Settings, settings as default_settings
from ..core.exceptions import ServiceException
from ..events.booking_events import BookingSnapshot
from .base import BaseService
from .email import EmailSender, create_email_service
from .email_subjects import EmailSubject
from .template_service import TemplateRegistry, TemplateService

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def retry(max_attempts: Optional[int] = None, backoff_seconds: Optional[float] = None) -> Callable[[F], F]:
    """
    Decorator for retrying failed operations with exponential backoff.

    When an argument is None the decorated method's instance supplies it
    through ``max_attempts`` / ``backoff_seconds`` attributes.

    Args:
        max_attempts: Maximum number of attempts
        backoff_seconds: Initial backoff time in seconds (doubles per attempt)
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
            attempts = max_attempts or getattr(self, "max_attempts", 3)
            backoff = backoff_seconds if backoff_seconds is not None else getattr(self, "backoff_seconds", 1.0)
            last_exception: Optional[Exception] = None

            for attempt in range(attempts):
                try:
                    return func(self, *args, **kwargs)
                except TemplateNotFound:
                    # Retrying cannot fix a missing template
                    raise
                except Exception as e:
                    last_exception = e
                    if attempt < attempts - 1:
                        wait_time = backoff * (2**attempt)
                        logger.warning(
                            f"Attempt {attempt + 1}/{attempts} failed for {func.__name__}: {str(e)}. "
                            f"Retrying in {wait_time}s..."
                        )
                        if wait_time > 0:
                            time.sleep(wait_time)
                    else:
                        logger.error(f"All {attempts} attempts failed for {func.__name__}: {str(e)}")

            if last_exception is not None:
                raise last_exception
            raise RuntimeError("Retry failed without capturing exception")

        return cast(F, wrapper)

    return decorator


class NotificationService(BaseService):
    """
    Booking notification emails.

    Holds no database session: every method works from a BookingSnapshot
    so that notifications for deleted (rejected) bookings can still render.
    """

    def __init__(
        self,
        email_service: Optional[EmailSender] = None,
        template_service: Optional[TemplateService] = None,
        config: Optional[Settings] = None,
    ) -> None:
        """
        Initialize the notification service.

        Args:
            email_service: Email provider (built from settings if not provided)
            template_service: TemplateService instance (created if not provided)
            config: Settings for admin address and retry policy
        """
        super().__init__()
        self.config = config or default_settings
        self.email_service = email_service or create_email_service(self.config)
        self.template_service = template_service or TemplateService(
            timezone_name=self.config.business_timezone
        )
        self.max_attempts = self.config.notification_max_attempts
        self.backoff_seconds = self.config.notification_backoff_seconds

    # Public notifications

    @BaseService.measure_operation("send_booking_received")
    def send_booking_received(self, booking: BookingSnapshot) -> bool:
        """Tell the requester their booking request was received and is pending review."""
        return self._deliver(
            "booking_received",
            booking,
            to_email=booking.email,
            subject=EmailSubject.booking_received(),
            template=TemplateRegistry.BOOKING_REQUEST_RECEIVED,
        )

    @BaseService.measure_operation("send_admin_pending_review")
    def send_admin_pending_review(self, booking: BookingSnapshot) -> bool:
        """Tell the administrator a new booking is waiting for review (skipped without ADMIN_EMAIL)."""
        if not self.config.admin_email:
            self.logger.info(f"ADMIN_EMAIL not configured; skipping review notice for {booking.id}")
            return False
        return self._deliver(
            "admin_pending_review",
            booking,
            to_email=self.config.admin_email,
            subject=EmailSubject.admin_pending_review(booking.type),
            template=TemplateRegistry.BOOKING_ADMIN_PENDING_REVIEW,
        )

    @BaseService.measure_operation("send_booking_confirmed")
    def send_booking_confirmed(self, booking: BookingSnapshot) -> bool:
        """Tell the requester their booking is confirmed."""
        return self._deliver(
            "booking_confirmed",
            booking,
            to_email=booking.email,
            subject=EmailSubject.booking_confirmed(),
            template=TemplateRegistry.BOOKING_CONFIRMED,
        )

    @BaseService.measure_operation("send_booking_rejected")
    def send_booking_rejected(self, booking: BookingSnapshot, message: Optional[str] = None) -> bool:
        """Tell the requester their booking was declined, with the optional admin message."""
        return self._deliver(
            "booking_rejected",
            booking,
            to_email=booking.email,
            subject=EmailSubject.booking_rejected(),
            template=TemplateRegistry.BOOKING_REJECTED,
            extra_context={"message": message},
        )

    # Delivery

    def _deliver(
        self,
        kind: str,
        booking: BookingSnapshot,
        *,
        to_email: str,
        subject: str,
        template: TemplateRegistry,
        extra_context: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Render and send one email.

        Returns:
            True if the email was accepted by the provider, False otherwise

        Raises:
            ServiceException: If the template is missing
        """
        context: Dict[str, Any] = {"booking": booking, "subject": subject}
        if extra_context:
            context.update(extra_context)

        try:
            self._send_rendered(to_email, subject, template, context)
        except TemplateNotFound as e:
            self.logger.error(f"Template error in {kind} notification: {str(e)}")
            raise ServiceException(f"Email template error: {str(e)}")
        except Exception as e:
            self.logger.error(f"Failed to send {kind} email for booking {booking.id} after retries: {str(e)}")
            return False

        self.log_operation(f"{kind}_sent", booking_id=booking.id, to_email=to_email)
        return True

    @retry()
    def _send_rendered(
        self,
        to_email: str,
        subject: str,
        template: TemplateRegistry,
        context: Dict[str, Any],
    ) -> None:
        html_content = self.template_service.render_template(template, context)
        # Let exceptions propagate for retry
        self.email_service.send_email(to_email=to_email, subject=subject, html_content=html_content)
