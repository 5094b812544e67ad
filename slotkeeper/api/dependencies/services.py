# slotkeeper/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

Request-scoped services get a fresh database session per request; the
notification stack and event publisher are process-wide singletons.
"""

from functools import lru_cache
import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...events.handlers import build_event_publisher
from ...events.publisher import EventPublisher
from ...services.booking_query_service import BookingQueryService
from ...services.booking_service import BookingService
from ...services.notification_service import NotificationService
from .database import get_db

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_notification_service() -> NotificationService:
    """Get the process-wide notification service."""
    return NotificationService()


@lru_cache(maxsize=1)
def _event_publisher_singleton() -> EventPublisher:
    publisher = build_event_publisher(get_notification_service())
    logger.info("Booking event publisher initialized")
    return publisher


def get_event_publisher() -> EventPublisher:
    """Get the event publisher with booking notification handlers registered."""
    return _event_publisher_singleton()


def get_booking_service(
    db: Session = Depends(get_db),
    event_publisher: EventPublisher = Depends(get_event_publisher),
) -> BookingService:
    """
    Get booking service instance with all dependencies.

    Args:
        db: Database session
        event_publisher: Publisher for lifecycle notifications

    Returns:
        BookingService instance
    """
    return BookingService(db, event_publisher=event_publisher)


def get_booking_query_service(db: Session = Depends(get_db)) -> BookingQueryService:
    """Get booking query service instance."""
    return BookingQueryService(db)
