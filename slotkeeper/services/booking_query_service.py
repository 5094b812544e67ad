# slotkeeper/services/booking_query_service.py
"""
Booking listing for SlotKeeper.

Translates shaped filters plus ``{sort_by, limit, page}`` into repository
queries and returns paginated, projected rows.
"""

from dataclasses import dataclass
from datetime import datetime
import logging
import math
from typing import Any, Dict, List, Optional, Tuple

from pytz import timezone as pytz_timezone
from sqlalchemy.orm import Session

from ..core.config import Settings, settings as default_settings
from ..core.constants import DEFAULT_SORT
from ..core.exceptions import ValidationException
from ..principal import Actor
from ..repositories import RepositoryFactory
from ..repositories.booking_repository import BookingRepository
from .base import BaseService
from .visibility import BookingFilter, QueryOptions, project, shape_booking_query

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = frozenset({"start_time", "end_time", "created_at", "type", "name", "email"})


@dataclass(frozen=True)
class Page:
    items: List[Dict[str, Any]]
    total: int
    page: int
    per_page: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.per_page) if self.total else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": self.items,
            "total": self.total,
            "page": self.page,
            "per_page": self.per_page,
            "total_pages": self.total_pages,
            "has_next": self.has_next,
            "has_prev": self.has_prev,
        }


def parse_sort(sort_by: Optional[str]) -> List[Tuple[str, bool]]:
    """
    Parse ``field:asc|desc[,field:asc|desc...]`` into (field, descending) pairs.

    Unknown fields are ignored; an empty result falls back to DEFAULT_SORT.
    """
    order: List[Tuple[str, bool]] = []
    for part in (sort_by or "").split(","):
        field, _, direction = part.strip().partition(":")
        field = field.strip()
        if field not in SORTABLE_FIELDS or any(existing == field for existing, _ in order):
            continue
        order.append((field, direction.strip().lower() == "desc"))

    return order or parse_sort(DEFAULT_SORT)


class BookingQueryService(BaseService):
    """Read-side service: role-shaped listing and the administrator's review queue."""

    def __init__(
        self,
        db: Session,
        repository: Optional[BookingRepository] = None,
        config: Optional[Settings] = None,
    ):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_booking_repository(db)
        self.config = config or default_settings

    @BaseService.measure_operation("list_bookings")
    def list_bookings(
        self,
        actor: Actor,
        raw_filter: BookingFilter,
        options: Optional[QueryOptions] = None,
    ) -> Page:
        """
        List bookings visible to ``actor``.

        Raises:
            ValidationException: invalid paging, or a public query without a window
        """
        shaped = shape_booking_query(actor, raw_filter, options)
        limit, page = self._resolve_paging(shaped.options)

        bookings, total = self.repository.search(
            window_start=shaped.filter.window_start,
            window_end=shaped.filter.window_end,
            booking_type=shaped.filter.type,
            email=shaped.filter.email.strip().lower() if shaped.filter.email else None,
            order_by=parse_sort(shaped.options.sort_by),
            offset=(page - 1) * limit,
            limit=limit,
            columns=shaped.projection,
        )

        return Page(
            items=[project(booking, shaped.projection) for booking in bookings],
            total=total,
            page=page,
            per_page=limit,
        )

    @BaseService.measure_operation("list_unconfirmed_upcoming")
    def list_unconfirmed_upcoming(
        self,
        options: Optional[QueryOptions] = None,
        now: Optional[datetime] = None,
    ) -> Page:
        """
        Pending bookings starting at or after the start of the current day.

        "Today" is taken in the configured business timezone.
        """
        options = options or QueryOptions()
        limit, page = self._resolve_paging(options)

        bookings, total = self.repository.search(
            confirmed=False,
            starts_at_or_after=self.start_of_business_day(now),
            order_by=parse_sort(options.sort_by),
            offset=(page - 1) * limit,
            limit=limit,
        )

        return Page(
            items=[project(booking, None) for booking in bookings],
            total=total,
            page=page,
            per_page=limit,
        )

    def start_of_business_day(self, now: Optional[datetime] = None) -> datetime:
        """Midnight of the current business day, as an aware datetime."""
        tz = pytz_timezone(self.config.business_timezone)
        local_now = (now or datetime.now(tz)).astimezone(tz)
        return tz.localize(datetime(local_now.year, local_now.month, local_now.day))

    def _resolve_paging(self, options: QueryOptions) -> Tuple[int, int]:
        limit = options.limit if options.limit is not None else self.config.default_page_size
        page = options.page if options.page is not None else 1

        if limit < 1 or page < 1:
            raise ValidationException(
                "limit and page must be at least 1",
                code="INVALID_PAGINATION",
                details={"limit": limit, "page": page},
            )
        if limit > self.config.max_page_size:
            raise ValidationException(
                f"limit must not exceed {self.config.max_page_size}",
                code="INVALID_PAGINATION",
                details={"limit": limit, "max": self.config.max_page_size},
            )
        return limit, page
