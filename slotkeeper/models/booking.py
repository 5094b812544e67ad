# slotkeeper/models/booking.py
"""
Booking model for SlotKeeper.

A booking is a single reserved time window with the requester's contact
details and a confirmation flag. Bookings start pending and become
confirmed only through the explicit confirm action; rejection removes
the record.
"""

import logging
from typing import Any, Dict

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Index,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.sql import false, func

from ..core.ulid_helper import generate_ulid
from ..database import Base
from .types import UTCDateTime

logger = logging.getLogger(__name__)


class Booking(Base):
    """
    Time-window reservation for the single provider.

    Storage guarantees:
    - ``end_time > start_time`` (check constraint)
    - ``(email, start_time, end_time)`` is unique (duplicate-submission guard)
    - ``(start_time, end_time)`` is indexed for overlap range queries
    """

    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)

    # Requester details
    name = Column(String(120), nullable=False)
    email = Column(String(254), nullable=False, index=True)
    phone = Column(String(32), nullable=False)
    type = Column(String(100), nullable=False, index=True)
    notes = Column(Text, nullable=True)

    # Reserved window
    start_time = Column(UTCDateTime(), nullable=False)
    end_time = Column(UTCDateTime(), nullable=False)

    # Lifecycle
    confirmed = Column(Boolean, nullable=False, default=False, server_default=false(), index=True)
    confirmed_at = Column(UTCDateTime(), nullable=True)

    # Timestamps
    created_at = Column(UTCDateTime(), nullable=False, server_default=func.now())
    updated_at = Column(UTCDateTime(), nullable=True, onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("email", "start_time", "end_time", name="uq_bookings_email_window"),
        CheckConstraint("end_time > start_time", name="ck_bookings_window_order"),
        Index("ix_bookings_window", "start_time", "end_time"),
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        if self.confirmed is None:
            self.confirmed = False

    def to_dict(self) -> Dict[str, Any]:
        """Plain mapping of all columns."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "type": self.type,
            "notes": self.notes,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "confirmed": self.confirmed,
            "confirmed_at": self.confirmed_at,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id} {self.start_time}-{self.end_time} "
            f"confirmed={self.confirmed}>"
        )
