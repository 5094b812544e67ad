"""Booking domain events and the in-process publisher."""

from .booking_events import BookingConfirmed, BookingRejected, BookingRequested, BookingSnapshot
from .publisher import EventPublisher

__all__ = [
    "BookingConfirmed",
    "BookingRejected",
    "BookingRequested",
    "BookingSnapshot",
    "EventPublisher",
]
