# slotkeeper/routes/v1/bookings.py
"""
Booking routes - API v1

Versioned booking endpoints under /v1/bookings.
All business logic delegated to BookingService / BookingQueryService.

Endpoints:
    POST / - Submit a booking request (anyone)
    GET / - List bookings, shaped by caller role
    GET /availability - Check whether a window is free
    GET /unconfirmed - Upcoming pending bookings (admin)
    GET /{booking_id} - Full booking details (admin)
    PATCH /{booking_id} - Update booking (admin)
    DELETE /{booking_id} - Delete booking without notification (admin)
    POST /{booking_id}/confirm - Confirm and notify (admin)
    POST /{booking_id}/reject - Reject, delete and notify (admin)
"""

import asyncio
from datetime import datetime
import logging
from typing import Annotated, Any, Dict, NoReturn, Optional, Union

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query, Response, status

from ...api.dependencies import (
    get_booking_query_service,
    get_booking_service,
    get_current_actor,
    require_admin,
    require_right,
)
from ...core.config import settings
from ...core.exceptions import DomainException
from ...principal import GET_BOOKINGS, Actor
from ...schemas.base_responses import PaginatedResponse
from ...schemas.booking import (
    AvailabilityResponse,
    BookingCreate,
    BookingReject,
    BookingResponse,
    BookingUpdate,
    PublicBookingResponse,
)
from ...services.booking_query_service import BookingQueryService
from ...services.booking_service import BookingService
from ...services.visibility import BookingFilter, QueryOptions

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["bookings-v1"])

BookingListItem = Union[BookingResponse, PublicBookingResponse]

BookingIdPath = Annotated[
    str,
    Path(
        description="Booking ULID (malformed ids are reported as not found)",
        examples=["01HF4G12ABCDEF3456789XYZAB"],
    ),
]


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


# ============================================================================
# SECTION 1: Static routes (no path parameters)
# ============================================================================


@router.get("/availability", response_model=AvailabilityResponse)
async def check_availability(
    start: str = Query(..., description="Window start (ISO-8601)"),
    end: str = Query(..., description="Window end (ISO-8601)"),
    booking_service: BookingService = Depends(get_booking_service),
) -> AvailabilityResponse:
    """Check whether a time window overlaps any stored booking."""
    try:
        available = await asyncio.to_thread(booking_service.check_availability, start, end)
        return AvailabilityResponse(available=available)
    except DomainException as e:
        handle_domain_exception(e)


@router.get(
    "/unconfirmed",
    response_model=PaginatedResponse[BookingResponse],
)
async def list_unconfirmed_bookings(
    sort_by: Optional[str] = Query(None, alias="sortBy", description="field:asc|desc, comma-separated"),
    limit: Optional[int] = Query(None, ge=1, le=settings.max_page_size),
    page: Optional[int] = Query(None, ge=1),
    _admin: Actor = Depends(require_right(GET_BOOKINGS)),
    query_service: BookingQueryService = Depends(get_booking_query_service),
) -> Dict[str, Any]:
    """Pending bookings starting today or later, for the review queue."""
    try:
        result = await asyncio.to_thread(
            query_service.list_unconfirmed_upcoming,
            QueryOptions(sort_by=sort_by, limit=limit, page=page),
        )
        return result.to_dict()
    except DomainException as e:
        handle_domain_exception(e)


# ============================================================================
# SECTION 2: Root routes
# ============================================================================


@router.get("", response_model=PaginatedResponse[BookingListItem])
async def list_bookings(
    window_start: Optional[datetime] = Query(None, alias="from", description="Overlap window start"),
    window_end: Optional[datetime] = Query(None, alias="to", description="Overlap window end"),
    booking_type: Optional[str] = Query(None, alias="type"),
    email: Optional[str] = Query(None, description="Administrators only; ignored otherwise"),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="field:asc|desc, comma-separated"),
    limit: Optional[int] = Query(None, ge=1, le=settings.max_page_size),
    page: Optional[int] = Query(None, ge=1),
    actor: Actor = Depends(get_current_actor),
    query_service: BookingQueryService = Depends(get_booking_query_service),
) -> Dict[str, Any]:
    """
    List bookings.

    Anonymous and non-admin callers must pass ``from`` and ``to`` and only
    see each booking's id, window and type.
    """
    try:
        result = await asyncio.to_thread(
            query_service.list_bookings,
            actor,
            BookingFilter(
                window_start=window_start,
                window_end=window_end,
                type=booking_type,
                email=email,
            ),
            QueryOptions(sort_by=sort_by, limit=limit, page=page),
        )
        return result.to_dict()
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_booking(
    booking_data: BookingCreate = Body(...),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Submit a booking request. The booking starts pending."""
    try:
        booking = await asyncio.to_thread(booking_service.create_booking, booking_data)
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


# ============================================================================
# SECTION 3: Booking-specific routes
# ============================================================================


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    responses={404: {"description": "Booking not found"}},
)
async def get_booking(
    booking_id: BookingIdPath,
    _admin: Actor = Depends(require_right(GET_BOOKINGS)),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Full booking details."""
    try:
        booking = await asyncio.to_thread(booking_service.get_booking_or_404, booking_id)
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch(
    "/{booking_id}",
    response_model=BookingResponse,
    responses={404: {"description": "Booking not found"}},
)
async def update_booking(
    booking_id: BookingIdPath,
    update_data: BookingUpdate = Body(...),
    _admin: Actor = Depends(require_admin),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Update booking fields; time changes are re-validated and re-checked for overlap."""
    try:
        booking = await asyncio.to_thread(booking_service.update_booking, booking_id, update_data)
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete(
    "/{booking_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"description": "Booking not found"}},
)
async def delete_booking(
    booking_id: BookingIdPath,
    _admin: Actor = Depends(require_admin),
    booking_service: BookingService = Depends(get_booking_service),
) -> Response:
    """Delete a booking. No notification is sent."""
    try:
        await asyncio.to_thread(booking_service.delete_booking, booking_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/{booking_id}/confirm",
    response_model=BookingResponse,
    responses={404: {"description": "Booking not found"}},
)
async def confirm_booking(
    booking_id: BookingIdPath,
    _admin: Actor = Depends(require_admin),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Confirm a pending booking and email the requester. Idempotent."""
    try:
        booking = await asyncio.to_thread(booking_service.confirm_booking, booking_id)
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/{booking_id}/reject",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        404: {"description": "Booking not found"},
        422: {"description": "Booking already confirmed"},
    },
)
async def reject_booking(
    booking_id: BookingIdPath,
    reject_data: Optional[BookingReject] = Body(None),
    _admin: Actor = Depends(require_admin),
    booking_service: BookingService = Depends(get_booking_service),
) -> Response:
    """Reject a pending booking: it is deleted and the requester is emailed."""
    message = reject_data.message if reject_data else None
    try:
        await asyncio.to_thread(booking_service.reject_booking, booking_id, message)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except DomainException as e:
        handle_domain_exception(e)
