"""Event handlers - turn booking events into notification emails."""
import logging

from ..services.notification_service import NotificationService
from .booking_events import BookingConfirmed, BookingRejected, BookingRequested
from .publisher import EventPublisher

logger = logging.getLogger(__name__)


class BookingNotificationHandlers:
    """Bridges booking lifecycle events to the NotificationService."""

    def __init__(self, notification_service: NotificationService):
        self.notification_service = notification_service

    def handle_booking_requested(self, event: BookingRequested) -> None:
        """Acknowledge the request to the requester and alert the administrator."""
        booking = event.booking
        received = self.notification_service.send_booking_received(booking)
        reviewed = self.notification_service.send_admin_pending_review(booking)
        logger.info(
            "Booking %s request notifications: requester=%s admin=%s", booking.id, received, reviewed
        )

    def handle_booking_confirmed(self, event: BookingConfirmed) -> None:
        """Send the confirmation email."""
        sent = self.notification_service.send_booking_confirmed(event.booking)
        logger.info("Booking %s confirmation email sent=%s", event.booking.id, sent)

    def handle_booking_rejected(self, event: BookingRejected) -> None:
        """Send the rejection email with the admin's message."""
        sent = self.notification_service.send_booking_rejected(event.booking, event.message)
        logger.info("Booking %s rejection email sent=%s", event.booking.id, sent)

    def register(self, publisher: EventPublisher) -> EventPublisher:
        publisher.subscribe(BookingRequested, self.handle_booking_requested)
        publisher.subscribe(BookingConfirmed, self.handle_booking_confirmed)
        publisher.subscribe(BookingRejected, self.handle_booking_rejected)
        return publisher


def build_event_publisher(notification_service: NotificationService) -> EventPublisher:
    """Publisher with the booking notification handlers registered."""
    return BookingNotificationHandlers(notification_service).register(EventPublisher())
