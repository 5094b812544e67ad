# slotkeeper/repositories/booking_repository.py
"""
Booking Repository for SlotKeeper

Implements all data access operations for bookings:
- Booking CRUD operations (inherited)
- Time-window overlap lookups for conflict checking
- Filtered, sorted and paginated listing
"""

from datetime import datetime
import logging
from typing import List, Optional, Sequence, Tuple, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, load_only

from ..core.exceptions import RepositoryException
from ..models.booking import Booking
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

# (column name, descending)
OrderSpec = Sequence[Tuple[str, bool]]


class BookingRepository(BaseRepository[Booking]):
    """
    Repository for booking data access.

    Overlap uses the half-open rule shared by every caller:
    ``existing.start_time < end AND existing.end_time > start``.
    """

    def __init__(self, db: Session):
        """Initialize with Booking model."""
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    # Conflict queries

    def first_overlapping(
        self,
        start_time: datetime,
        end_time: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> Optional[Booking]:
        """Return one overlapping booking, or None when the window is free."""
        try:
            query = self._overlap_query(start_time, end_time, exclude_booking_id)
            return cast(Optional[Booking], query.order_by(Booking.start_time.asc()).first())
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking time conflict: {str(e)}")
            raise RepositoryException(f"Failed to check time conflict: {str(e)}")

    # State transitions

    def mark_confirmed(self, booking_id: str, confirmed_at: datetime) -> bool:
        """
        Flip a pending booking to confirmed.

        The update only matches rows that are still pending, so of several
        concurrent confirmations exactly one sees True.
        """
        try:
            updated = (
                self._build_query()
                .filter(Booking.id == booking_id, Booking.confirmed.is_(False))
                .update(
                    {Booking.confirmed: True, Booking.confirmed_at: confirmed_at},
                    synchronize_session="fetch",
                )
            )
            return cast(int, updated) == 1
        except SQLAlchemyError as e:
            self.logger.error(f"Error confirming booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to confirm booking: {str(e)}")

    # Listing

    def search(
        self,
        *,
        window_start: Optional[datetime] = None,
        window_end: Optional[datetime] = None,
        booking_type: Optional[str] = None,
        email: Optional[str] = None,
        confirmed: Optional[bool] = None,
        starts_at_or_after: Optional[datetime] = None,
        order_by: OrderSpec = (("start_time", False),),
        offset: int = 0,
        limit: Optional[int] = None,
        columns: Optional[Sequence[str]] = None,
    ) -> Tuple[List[Booking], int]:
        """
        Filtered listing with total count.

        ``window_start``/``window_end`` select bookings overlapping that range;
        either bound may be given alone. ``columns`` restricts the loaded
        attributes (the primary key is always loaded).

        Returns:
            (page of bookings, total matching rows before paging)
        """
        try:
            query = self._build_query()

            if window_end is not None:
                query = query.filter(Booking.start_time < window_end)
            if window_start is not None:
                query = query.filter(Booking.end_time > window_start)
            if booking_type is not None:
                query = query.filter(Booking.type == booking_type)
            if email is not None:
                query = query.filter(Booking.email == email)
            if confirmed is not None:
                query = query.filter(Booking.confirmed.is_(confirmed))
            if starts_at_or_after is not None:
                query = query.filter(Booking.start_time >= starts_at_or_after)

            total = query.count()

            query = self._apply_ordering(query, order_by)
            if columns:
                query = query.options(load_only(*[getattr(Booking, name) for name in columns]))
            if offset:
                query = query.offset(offset)
            if limit is not None:
                query = query.limit(limit)

            return self._execute_query(query), total
        except SQLAlchemyError as e:
            self.logger.error(f"Error searching bookings: {str(e)}")
            raise RepositoryException(f"Failed to search bookings: {str(e)}")

    # Helpers

    def _overlap_query(
        self,
        start_time: datetime,
        end_time: datetime,
        exclude_booking_id: Optional[str],
    ) -> Query:
        query = self._build_query().filter(
            # start_time < other_end_time AND end_time > other_start_time
            Booking.start_time < end_time,
            Booking.end_time > start_time,
        )
        if exclude_booking_id:
            query = query.filter(Booking.id != exclude_booking_id)
        return query

    def _apply_ordering(self, query: Query, order_by: OrderSpec) -> Query:
        clauses = []
        for name, descending in order_by:
            column = getattr(Booking, name)
            clauses.append(column.desc() if descending else column.asc())
        # Stable paging across equal sort keys
        clauses.append(Booking.id.asc())
        return query.order_by(*clauses)
