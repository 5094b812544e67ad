# slotkeeper/services/booking_service.py
"""
Booking Service for SlotKeeper

The only component that changes booking state. Handles:
- Creating booking requests (pending) with window validation and
  overlap checking
- Administrative update, delete, confirm and reject
- Availability checks
- Publishing lifecycle events after each committed transition

Every write follows the same order: validate window, check overlap,
persist and commit, then publish. Storage constraint violations surface
as BookingConflictException.
"""

from datetime import datetime, timezone
import logging
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.exc import IntegrityError, InvalidRequestError
from sqlalchemy.orm import Session

from ..core.exceptions import (
    BookingConflictException,
    BookingNotFoundException,
    BusinessRuleException,
)
from ..core.ulid_helper import is_valid_ulid
from ..events.booking_events import (
    BookingConfirmed,
    BookingRejected,
    BookingRequested,
    BookingSnapshot,
)
from ..events.publisher import Event, EventPublisher
from ..models.booking import Booking
from ..repositories import RepositoryFactory
from ..repositories.booking_repository import BookingRepository
from ..schemas.booking import BookingCreate, BookingUpdate
from .base import BaseService
from .conflict_checker import ConflictChecker
from .time_window import TimeWindow, validate_time_window

logger = logging.getLogger(__name__)

GENERIC_CONFLICT_MESSAGE = "Time slot conflicts with an existing booking"
DUPLICATE_BOOKING_MESSAGE = "Duplicate booking for this user and time range"

TIME_FIELDS = ("start_time", "end_time")


class BookingService(BaseService):
    """
    Service layer for the booking lifecycle.

    State machine:
        pending --confirm--> confirmed
        pending --reject--> (deleted, requester notified)
        pending|confirmed --delete--> (deleted, no notification)
        pending|confirmed --update--> same state
    """

    def __init__(
        self,
        db: Session,
        repository: Optional[BookingRepository] = None,
        conflict_checker: Optional[ConflictChecker] = None,
        event_publisher: Optional[EventPublisher] = None,
    ):
        """
        Initialize booking service.

        Args:
            db: Database session
            repository: Optional BookingRepository instance
            conflict_checker: Optional ConflictChecker sharing the same repository
            event_publisher: Publisher for lifecycle events (none published when omitted)
        """
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_booking_repository(db)
        self.conflict_checker = conflict_checker or ConflictChecker(db, repository=self.repository)
        self.event_publisher = event_publisher or EventPublisher()

    # Creation

    @BaseService.measure_operation("create_booking")
    def create_booking(self, booking_data: BookingCreate) -> Booking:
        """
        Store a new pending booking request.

        Args:
            booking_data: Validated request fields

        Returns:
            Created booking instance (confirmed=False)

        Raises:
            InvalidTimeWindowException: If the window is malformed or inverted
            BookingConflictException: If the window overlaps a stored booking,
                or an identical (email, start, end) booking already exists
        """
        window = validate_time_window(booking_data.start_time, booking_data.end_time)
        self.log_operation(
            "create_booking",
            booking_type=booking_data.type,
            start_time=window.start.isoformat(),
            end_time=window.end.isoformat(),
        )

        self._ensure_window_free(window)

        fields = booking_data.model_dump()
        fields.update(start_time=window.start, end_time=window.end, confirmed=False)

        try:
            with self.repository.transaction():
                booking = self.repository.create(**fields)
        except IntegrityError as exc:
            raise self._conflict_from_integrity_error(exc, window) from exc

        self.repository.refresh(booking)
        self.logger.info(f"Created booking {booking.id} for {window.start.isoformat()}")

        self._publish(BookingRequested(booking=BookingSnapshot.from_booking(booking)))
        return booking

    # Reads

    def get_booking(self, booking_id: str) -> Optional[Booking]:
        """Booking by id, or None. Malformed ids are simply not found."""
        if not is_valid_ulid(booking_id):
            return None
        return self.repository.get_by_id(booking_id)

    def get_booking_or_404(self, booking_id: str) -> Booking:
        """
        Booking by id.

        Raises:
            BookingNotFoundException: If the id is unknown or malformed
        """
        booking = self.get_booking(booking_id)
        if booking is None:
            raise BookingNotFoundException(booking_id)
        return booking

    @BaseService.measure_operation("check_availability")
    def check_availability(self, start_time: Any, end_time: Any) -> bool:
        """
        True iff ``[start_time, end_time)`` overlaps no stored booking.

        Raises:
            InvalidTimeWindowException: If the window is malformed or inverted
        """
        window = validate_time_window(start_time, end_time)
        return self.conflict_checker.is_available(window.start, window.end)

    # Administrative mutations

    @BaseService.measure_operation("update_booking")
    def update_booking(self, booking_id: str, changes: BookingUpdate) -> Booking:
        """
        Apply a partial update.

        The effective window (supplied values, else current ones) is always
        validated; the overlap check runs only when a time field is supplied
        and ignores the booking itself. On any failure the stored booking is
        left unchanged.

        Raises:
            BookingNotFoundException: If the booking does not exist
            InvalidTimeWindowException: If the effective window is invalid
            BookingConflictException: If the new window overlaps another booking
        """
        booking = self.get_booking_or_404(booking_id)
        updates = changes.changes()

        window = validate_time_window(
            updates.get("start_time", booking.start_time),
            updates.get("end_time", booking.end_time),
        )

        if any(field in updates for field in TIME_FIELDS):
            self._ensure_window_free(window, exclude_booking_id=booking.id)
            updates["start_time"] = window.start
            updates["end_time"] = window.end

        self.log_operation("update_booking", booking_id=booking.id, fields=sorted(updates))

        try:
            with self.repository.transaction():
                updated = self.repository.update(booking.id, **updates)
        except IntegrityError as exc:
            raise self._conflict_from_integrity_error(exc, window) from exc

        if updated is None:
            raise BookingNotFoundException(booking_id)

        self.repository.refresh(updated)
        return updated

    @BaseService.measure_operation("delete_booking")
    def delete_booking(self, booking_id: str) -> None:
        """
        Remove a booking without notifying anyone.

        Raises:
            BookingNotFoundException: If the booking does not exist
        """
        booking = self.get_booking_or_404(booking_id)
        self.log_operation("delete_booking", booking_id=booking.id)

        with self.repository.transaction():
            deleted = self.repository.delete(booking.id)

        if not deleted:
            raise BookingNotFoundException(booking_id)

    @BaseService.measure_operation("confirm_booking")
    def confirm_booking(self, booking_id: str) -> Booking:
        """
        Confirm a pending booking and notify the requester.

        Confirming an already confirmed booking returns it unchanged and
        sends nothing.

        Raises:
            BookingNotFoundException: If the booking does not exist
        """
        booking = self.get_booking_or_404(booking_id)

        if booking.confirmed:
            self.logger.info(f"Booking {booking.id} already confirmed; nothing to do")
            return booking

        confirmed_at = datetime.now(timezone.utc)
        with self.repository.transaction():
            won = self.repository.mark_confirmed(booking.id, confirmed_at)

        try:
            self.repository.refresh(booking)
        except InvalidRequestError:
            # Deleted between the read and the update
            raise BookingNotFoundException(booking_id)

        if not won:
            # Another request confirmed it between the read and the update
            self.logger.info(f"Booking {booking.id} already confirmed; nothing to do")
            return booking

        self.log_operation("confirm_booking", booking_id=booking.id)

        self._publish(
            BookingConfirmed(booking=BookingSnapshot.from_booking(booking), confirmed_at=confirmed_at)
        )
        return booking

    @BaseService.measure_operation("reject_booking")
    def reject_booking(self, booking_id: str, message: Optional[str] = None) -> BookingSnapshot:
        """
        Decline a pending booking: remove it and notify the requester.

        Args:
            booking_id: Booking to reject
            message: Optional note from the administrator, included in the email

        Returns:
            Snapshot of the removed booking

        Raises:
            BookingNotFoundException: If the booking does not exist
            BusinessRuleException: If the booking is already confirmed
        """
        booking = self.get_booking_or_404(booking_id)

        if booking.confirmed:
            raise BusinessRuleException(
                "Confirmed bookings cannot be rejected; delete the booking instead",
                code="BOOKING_ALREADY_CONFIRMED",
                details={"booking_id": booking.id},
            )

        snapshot = BookingSnapshot.from_booking(booking)

        with self.repository.transaction():
            deleted = self.repository.delete(booking.id)

        if not deleted:
            raise BookingNotFoundException(booking_id)

        self.log_operation("reject_booking", booking_id=snapshot.id, has_message=bool(message))
        self._publish(BookingRejected(booking=snapshot, message=message))
        return snapshot

    # Helpers

    def _ensure_window_free(self, window: TimeWindow, exclude_booking_id: Optional[str] = None) -> None:
        conflict = self.conflict_checker.find_conflict(window.start, window.end, exclude_booking_id)
        if conflict is not None:
            raise BookingConflictException(
                GENERIC_CONFLICT_MESSAGE,
                details=self._build_conflict_details(
                    window, (conflict.start_time, conflict.end_time)
                ),
            )

    def _build_conflict_details(
        self,
        window: TimeWindow,
        conflicting_window: Optional[Tuple[datetime, datetime]] = None,
    ) -> Dict[str, Any]:
        """Construct structured conflict metadata for error responses."""
        details: Dict[str, Any] = {"requested": window.to_dict()}
        if conflicting_window is not None:
            start, end = conflicting_window
            details["conflicting"] = {"start_time": start.isoformat(), "end_time": end.isoformat()}
        return details

    def _resolve_integrity_conflict_message(self, integrity_error: IntegrityError) -> str:
        """
        Determine the conflict message from a database IntegrityError.
        """
        constraint_name = ""
        orig = getattr(integrity_error, "orig", None)
        diag = getattr(orig, "diag", None)

        if diag is not None:
            constraint_name = getattr(diag, "constraint_name", "") or ""

        if not constraint_name and orig is not None:
            text = str(orig)
            # SQLite reports the columns rather than the constraint name
            if "uq_bookings_email_window" in text or "bookings.email, bookings.start_time" in text:
                constraint_name = "uq_bookings_email_window"

        if constraint_name == "uq_bookings_email_window":
            return DUPLICATE_BOOKING_MESSAGE
        return GENERIC_CONFLICT_MESSAGE

    def _conflict_from_integrity_error(
        self, exc: IntegrityError, window: TimeWindow
    ) -> BookingConflictException:
        message = self._resolve_integrity_conflict_message(exc)
        self.logger.warning(f"Integrity conflict for {window.start.isoformat()}: {message}")
        return BookingConflictException(message, details=self._build_conflict_details(window))

    def _publish(self, event: Event) -> None:
        """Publish a post-commit event; failures never unwind the committed change."""
        try:
            self.event_publisher.publish(event)
        except Exception as e:
            self.logger.error(f"Failed to publish {type(event).__name__}: {str(e)}")
