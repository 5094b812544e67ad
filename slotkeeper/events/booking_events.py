"""Booking domain events."""
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from ..models.booking import Booking


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class BookingSnapshot:
    """Booking fields needed to render notifications, captured at publish time."""

    id: str
    name: str
    email: str
    type: str
    start_time: datetime
    end_time: datetime
    notes: Optional[str] = None

    @classmethod
    def from_booking(cls, booking: "Booking") -> "BookingSnapshot":
        return cls(
            id=booking.id,
            name=booking.name,
            email=booking.email,
            type=booking.type,
            start_time=booking.start_time,
            end_time=booking.end_time,
            notes=booking.notes,
        )


@dataclass
class BookingRequested:
    """Fired after a booking request is stored (pending)."""

    booking: BookingSnapshot
    requested_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class BookingConfirmed:
    """Fired after a pending booking is confirmed."""

    booking: BookingSnapshot
    confirmed_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class BookingRejected:
    """Fired after a pending booking is rejected and removed."""

    booking: BookingSnapshot
    message: Optional[str] = None
    rejected_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
