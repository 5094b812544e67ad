from datetime import datetime, timezone

import pytest

from slotkeeper.core.config import Settings
from slotkeeper.core.exceptions import ValidationException
from slotkeeper.principal import ANONYMOUS, ROLE_ADMIN, ROLE_USER, Actor
from slotkeeper.services.booking_query_service import BookingQueryService, Page, parse_sort
from slotkeeper.services.visibility import PUBLIC_FIELDS, BookingFilter, QueryOptions
from tests.helpers import at

ADMIN = Actor(actor_id="admin-1", role=ROLE_ADMIN)
USER = Actor(actor_id="user-1", role=ROLE_USER)


class TestParseSort:
    def test_default_when_missing(self) -> None:
        assert parse_sort(None) == [("start_time", False)]
        assert parse_sort("") == [("start_time", False)]

    def test_multiple_fields_and_directions(self) -> None:
        assert parse_sort("type:asc, start_time:DESC") == [("type", False), ("start_time", True)]

    def test_unknown_and_repeated_fields_are_ignored(self) -> None:
        assert parse_sort("phone:desc,end_time:desc,end_time:asc") == [("end_time", True)]
        assert parse_sort("nonsense") == [("start_time", False)]


class TestPage:
    def test_navigation_flags(self) -> None:
        page = Page(items=[], total=45, page=2, per_page=20)
        assert page.total_pages == 3
        assert page.has_next is True
        assert page.has_prev is True

    def test_empty_result(self) -> None:
        page = Page(items=[], total=0, page=1, per_page=20)
        assert page.to_dict() == {
            "items": [],
            "total": 0,
            "page": 1,
            "per_page": 20,
            "total_pages": 0,
            "has_next": False,
            "has_prev": False,
        }


class TestListBookings:
    def test_admin_sees_full_rows(self, query_service, make_booking) -> None:
        booking = make_booking(at(9), at(10), email="ada@example.com")

        result = query_service.list_bookings(ADMIN, BookingFilter())

        assert result.total == 1
        assert result.items[0]["id"] == booking.id
        assert result.items[0]["email"] == "ada@example.com"
        assert result.items[0]["phone"] == "+1 555 0100"

    def test_admin_email_filter_is_case_insensitive(self, query_service, make_booking) -> None:
        make_booking(at(9), at(10), email="ada@example.com")
        make_booking(at(11), at(12), email="bob@example.com")

        result = query_service.list_bookings(ADMIN, BookingFilter(email=" Ada@Example.COM "))

        assert [item["email"] for item in result.items] == ["ada@example.com"]

    @pytest.mark.parametrize("actor", [ANONYMOUS, USER])
    def test_public_query_requires_window(self, query_service, actor) -> None:
        with pytest.raises(ValidationException) as exc_info:
            query_service.list_bookings(actor, BookingFilter(window_start=at(0)))

        assert exc_info.value.code == "TIME_RANGE_REQUIRED"

    @pytest.mark.parametrize("actor", [ANONYMOUS, USER])
    def test_public_rows_are_projected_and_email_filter_dropped(
        self, query_service, make_booking, actor
    ) -> None:
        make_booking(at(9), at(10), email="ada@example.com")
        make_booking(at(11), at(12), email="bob@example.com")

        result = query_service.list_bookings(
            actor,
            BookingFilter(window_start=at(0), window_end=at(23), email="ada@example.com"),
        )

        assert result.total == 2
        for item in result.items:
            assert tuple(item) == PUBLIC_FIELDS

    def test_window_selects_overlapping_bookings(self, query_service, make_booking) -> None:
        inside = make_booking(at(9), at(10))
        make_booking(at(10), at(11))
        make_booking(at(7), at(8))

        result = query_service.list_bookings(
            ANONYMOUS, BookingFilter(window_start=at(8, 30), window_end=at(10))
        )

        assert [item["id"] for item in result.items] == [inside.id]

    def test_type_filter(self, query_service, make_booking) -> None:
        make_booking(at(9), at(10), type="consultation")
        fitting = make_booking(at(11), at(12), type="fitting")

        result = query_service.list_bookings(ADMIN, BookingFilter(type="fitting"))

        assert [item["id"] for item in result.items] == [fitting.id]

    def test_sorting_and_paging(self, query_service, make_booking) -> None:
        early = make_booking(at(9), at(10))
        middle = make_booking(at(11), at(12))
        late = make_booking(at(13), at(14))

        first_page = query_service.list_bookings(
            ADMIN, BookingFilter(), QueryOptions(sort_by="start_time:desc", limit=2, page=1)
        )
        second_page = query_service.list_bookings(
            ADMIN, BookingFilter(), QueryOptions(sort_by="start_time:desc", limit=2, page=2)
        )

        assert [item["id"] for item in first_page.items] == [late.id, middle.id]
        assert [item["id"] for item in second_page.items] == [early.id]
        assert second_page.total == 3
        assert second_page.has_prev is True
        assert second_page.has_next is False

    @pytest.mark.parametrize("options", [QueryOptions(limit=0), QueryOptions(page=0), QueryOptions(limit=101)])
    def test_invalid_paging(self, query_service, options) -> None:
        with pytest.raises(ValidationException) as exc_info:
            query_service.list_bookings(ADMIN, BookingFilter(), options)

        assert exc_info.value.code == "INVALID_PAGINATION"

    def test_default_page_size(self, query_service, make_booking) -> None:
        for hour in range(3):
            make_booking(at(hour), at(hour, 30))

        result = query_service.list_bookings(ADMIN, BookingFilter())

        assert result.per_page == 20
        assert result.page == 1
        assert len(result.items) == 3


class TestUnconfirmedUpcoming:
    def test_only_pending_bookings_from_today(self, query_service, make_booking) -> None:
        yesterday = make_booking(at(9, day_offset=-1), at(10, day_offset=-1))
        earlier_today = make_booking(at(8), at(9))
        tomorrow = make_booking(at(9, day_offset=1), at(10, day_offset=1))
        make_booking(at(11), at(12), confirmed=True)

        result = query_service.list_unconfirmed_upcoming(now=at(12))

        ids = [item["id"] for item in result.items]
        assert ids == [earlier_today.id, tomorrow.id]
        assert yesterday.id not in ids
        assert all(item["confirmed"] is False for item in result.items)

    def test_start_of_business_day_uses_configured_timezone(self, db) -> None:
        service = BookingQueryService(db, config=Settings(business_timezone="America/New_York"))

        # 03:00 UTC on the 15th is still the evening of the 14th in New York (EST, UTC-5)
        midnight = service.start_of_business_day(datetime(2030, 1, 15, 3, 0, tzinfo=timezone.utc))

        assert midnight.astimezone(timezone.utc) == datetime(2030, 1, 14, 5, 0, tzinfo=timezone.utc)
