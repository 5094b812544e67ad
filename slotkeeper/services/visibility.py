# slotkeeper/services/visibility.py
"""
Role-based shaping of booking reads.

This is the only place that branches on the caller's role for reads:
callers pass the raw filter and options and receive an explicit
(filter, options, projection) triple.
"""

from dataclasses import dataclass, replace
from datetime import datetime
import logging
from typing import Any, Dict, Optional, Sequence, Tuple

from ..core.exceptions import ValidationException
from ..principal import GET_BOOKINGS, Actor

logger = logging.getLogger(__name__)

PUBLIC_FIELDS: Tuple[str, ...] = ("id", "start_time", "end_time", "type")


@dataclass(frozen=True)
class BookingFilter:
    """Requester-supplied list filter. ``window_*`` select overlapping bookings."""

    window_start: Optional[datetime] = None
    window_end: Optional[datetime] = None
    type: Optional[str] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class QueryOptions:
    """Sort and page parameters as received (validated by the query service)."""

    sort_by: Optional[str] = None
    limit: Optional[int] = None
    page: Optional[int] = None


@dataclass(frozen=True)
class ShapedQuery:
    filter: BookingFilter
    options: QueryOptions
    projection: Optional[Tuple[str, ...]]


def shape_booking_query(
    actor: Actor,
    raw_filter: BookingFilter,
    raw_options: Optional[QueryOptions] = None,
) -> ShapedQuery:
    """
    Apply the caller's visibility rules to a list request.

    Administrators get the filter unchanged and no projection. Everyone
    else loses the ``email`` filter, must bound the query with both window
    ends, and sees only PUBLIC_FIELDS.

    Raises:
        ValidationException: non-administrator query without ``from``/``to``
    """
    options = raw_options or QueryOptions()

    if actor.has_right(GET_BOOKINGS):
        return ShapedQuery(filter=raw_filter, options=options, projection=None)

    if raw_filter.window_start is None or raw_filter.window_end is None:
        raise ValidationException(
            "from and to are required",
            code="TIME_RANGE_REQUIRED",
            details={"required": ["from", "to"]},
        )

    shaped_filter = raw_filter
    if raw_filter.email is not None:
        logger.debug("Dropping email filter for non-admin booking query")
        shaped_filter = replace(raw_filter, email=None)

    return ShapedQuery(filter=shaped_filter, options=options, projection=PUBLIC_FIELDS)


def project(booking: Any, projection: Optional[Sequence[str]]) -> Dict[str, Any]:
    """
    Output mapping for one booking under ``projection``.

    ``None`` means every column; otherwise only the named fields appear.
    """
    if projection is None:
        return booking.to_dict()
    return {field: getattr(booking, field) for field in projection}
