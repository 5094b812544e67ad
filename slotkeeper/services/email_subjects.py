"""
Centralized email subject builders.

Keep subjects in code (not templates) for versioning and logging.
Bodies remain in Jinja templates.
"""

from ..core.config import settings


class EmailSubject:
    """Utility class with static builders for email subjects."""

    @staticmethod
    def booking_received() -> str:
        return f"{settings.brand_name}: Booking Request Received"

    @staticmethod
    def admin_pending_review(booking_type: str) -> str:
        return f"{settings.brand_name}: New {booking_type} Booking Awaiting Review"

    @staticmethod
    def booking_confirmed() -> str:
        return "Booking Confirmation"

    @staticmethod
    def booking_rejected() -> str:
        return f"{settings.brand_name}: Booking Request Declined"
