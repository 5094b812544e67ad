"""
Request and response schemas for SlotKeeper.
"""

from .base_responses import HealthResponse, PaginatedResponse
from .booking import (
    AvailabilityResponse,
    BookingCreate,
    BookingReject,
    BookingResponse,
    BookingUpdate,
    PublicBookingResponse,
)

__all__ = [
    "AvailabilityResponse",
    "BookingCreate",
    "BookingReject",
    "BookingResponse",
    "BookingUpdate",
    "HealthResponse",
    "PaginatedResponse",
    "PublicBookingResponse",
]
