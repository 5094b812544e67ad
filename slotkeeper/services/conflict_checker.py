# slotkeeper/services/conflict_checker.py
"""
Conflict Checker Service for SlotKeeper

Answers "is this window free?" against every stored booking, pending and
confirmed alike. The check is advisory: it runs before the write in the
same unit of work but is not atomic with it, so the storage constraints
remain the final arbiter.
"""

from datetime import datetime
import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..models.booking import Booking
from ..repositories import RepositoryFactory
from ..repositories.booking_repository import BookingRepository
from .base import BaseService

logger = logging.getLogger(__name__)


class ConflictChecker(BaseService):
    """
    Service for checking booking time-window conflicts.

    Overlap is ``existing.start < end AND existing.end > start``.
    """

    def __init__(self, db: Session, repository: Optional[BookingRepository] = None):
        """
        Initialize conflict checker service.

        Args:
            db: Database session
            repository: Optional BookingRepository instance
        """
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_booking_repository(db)

    @BaseService.measure_operation("find_conflict")
    def find_conflict(
        self,
        start_time: datetime,
        end_time: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> Optional[Booking]:
        """
        Return the first booking that overlaps ``[start_time, end_time)``, or None.

        Args:
            start_time: Candidate start (UTC)
            end_time: Candidate end (UTC)
            exclude_booking_id: Booking to ignore (the booking being updated)
        """
        conflict = self.repository.first_overlapping(start_time, end_time, exclude_booking_id)
        if conflict is not None:
            self.logger.info(
                f"Window {start_time.isoformat()}-{end_time.isoformat()} "
                f"conflicts with booking {conflict.id}"
            )
        return conflict

    @BaseService.measure_operation("is_available")
    def is_available(
        self,
        start_time: datetime,
        end_time: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> bool:
        """True iff no stored booking overlaps ``[start_time, end_time)``."""
        return self.find_conflict(start_time, end_time, exclude_booking_id) is None

