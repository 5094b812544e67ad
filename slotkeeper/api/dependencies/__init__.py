"""
Central export point for all dependencies.
"""

from ...auth import get_current_actor, require_admin, require_right
from .database import get_db
from .services import (
    get_booking_query_service,
    get_booking_service,
    get_event_publisher,
    get_notification_service,
)

__all__ = [
    # Auth
    "get_current_actor",
    "require_admin",
    "require_right",
    # Database
    "get_db",
    # Services
    "get_booking_query_service",
    "get_booking_service",
    "get_event_publisher",
    "get_notification_service",
]
