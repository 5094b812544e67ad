# slotkeeper/schemas/booking.py
"""
Booking schemas for SlotKeeper.

Request models normalize requester input (trimmed strings, lower-cased
email, empty notes to null). Window ordering is checked by the booking
service, which reports an inverted window as INVALID_TIME_WINDOW (400).
"""

from datetime import datetime
import re
from typing import Any, Dict, Optional

from pydantic import ConfigDict, EmailStr, Field, field_validator, model_validator

from ..core.constants import (
    MAX_NAME_LENGTH,
    MAX_NOTES_LENGTH,
    MAX_REJECTION_MESSAGE_LENGTH,
    MAX_TYPE_LENGTH,
    PHONE_PATTERN,
)
from .base import StandardizedModel, StrictModel, StrictRequestModel

PHONE_REGEX = re.compile(PHONE_PATTERN)


def _clean_required_text(value: Any, field_name: str) -> Any:
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValueError(f"{field_name} must not be empty")
    return value


def _clean_notes(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _clean_phone(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        if not PHONE_REGEX.fullmatch(value):
            raise ValueError(
                "phone must be 7-15 characters of digits, spaces, '-', '(', ')' or '.'"
            )
    return value


class BookingCreate(StrictRequestModel):
    """Public booking request."""

    name: str = Field(..., max_length=MAX_NAME_LENGTH, description="Requester name")
    email: EmailStr = Field(..., description="Requester email")
    phone: str = Field(..., description="Contact phone number")
    type: str = Field(..., max_length=MAX_TYPE_LENGTH, description="Booking type")
    notes: Optional[str] = Field(None, max_length=MAX_NOTES_LENGTH, description="Optional notes")
    start_time: datetime = Field(..., description="Window start (ISO-8601)")
    end_time: datetime = Field(..., description="Window end (ISO-8601)")

    @field_validator("name", mode="before")
    @classmethod
    def _clean_name(cls, v: Any) -> Any:
        return _clean_required_text(v, "name")

    @field_validator("type", mode="before")
    @classmethod
    def _clean_type(cls, v: Any) -> Any:
        return _clean_required_text(v, "type")

    @field_validator("email", mode="after")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("phone", mode="before")
    @classmethod
    def _validate_phone(cls, v: Any) -> Any:
        return _clean_phone(v)

    @field_validator("notes", mode="before")
    @classmethod
    def _clean_notes(cls, v: Any) -> Any:
        return _clean_notes(v)


class BookingUpdate(StrictRequestModel):
    """
    Administrative partial update.

    At least one field must be supplied. Only ``notes`` may be cleared
    with an explicit null.
    """

    name: Optional[str] = Field(None, max_length=MAX_NAME_LENGTH)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    type: Optional[str] = Field(None, max_length=MAX_TYPE_LENGTH)
    notes: Optional[str] = Field(None, max_length=MAX_NOTES_LENGTH)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @field_validator("name", mode="before")
    @classmethod
    def _clean_name(cls, v: Any) -> Any:
        return _clean_required_text(v, "name")

    @field_validator("type", mode="before")
    @classmethod
    def _clean_type(cls, v: Any) -> Any:
        return _clean_required_text(v, "type")

    @field_validator("email", mode="after")
    @classmethod
    def _normalize_email(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().lower() if v else v

    @field_validator("phone", mode="before")
    @classmethod
    def _validate_phone(cls, v: Any) -> Any:
        return _clean_phone(v)

    @field_validator("notes", mode="before")
    @classmethod
    def _clean_notes(cls, v: Any) -> Any:
        return _clean_notes(v)

    @model_validator(mode="after")
    def _require_changes(self) -> "BookingUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        for field_name in self.model_fields_set:
            if field_name != "notes" and getattr(self, field_name) is None:
                raise ValueError(f"{field_name} cannot be null")
        return self

    def changes(self) -> Dict[str, Any]:
        """Supplied fields only."""
        return self.model_dump(exclude_unset=True)


class BookingReject(StrictRequestModel):
    """Optional message included in the rejection email."""

    message: Optional[str] = Field(None, max_length=MAX_REJECTION_MESSAGE_LENGTH)

    @field_validator("message", mode="before")
    @classmethod
    def _clean_message(cls, v: Any) -> Any:
        return _clean_notes(v)


class BookingResponse(StandardizedModel):
    """Full booking representation (administrators and the requester's own create)."""

    id: str
    name: str
    email: str
    phone: str
    type: str
    notes: Optional[str] = None
    start_time: datetime
    end_time: datetime
    confirmed: bool
    confirmed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PublicBookingResponse(StrictModel):
    """Redacted booking: occupied window and type only."""

    # extra="forbid" keeps full rows from ever validating as the public shape
    model_config = ConfigDict(extra="forbid", from_attributes=True)

    id: str
    start_time: datetime
    end_time: datetime
    type: str


class AvailabilityResponse(StandardizedModel):
    """Result of an availability check."""

    available: bool
