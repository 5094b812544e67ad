"""HTTP-level tests for /v1/bookings."""

from typing import Any, Dict

from slotkeeper.models.booking import Booking
from tests.helpers import at, iso

BOOKINGS_URL = "/v1/bookings"


def _payload(**overrides: Any) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "name": "Ada Lovelace",
        "email": "Ada@Example.com",
        "phone": "+1 555 0100",
        "type": "consultation",
        "notes": "",
        "start_time": iso(9),
        "end_time": iso(10),
    }
    data.update(overrides)
    return data


class TestHealth:
    def test_health(self, client) -> None:
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "healthy"


class TestCreateBooking:
    def test_create_returns_pending_booking(self, client, email_outbox) -> None:
        r = client.post(BOOKINGS_URL, json=_payload())

        assert r.status_code == 201
        body = r.json()
        assert body["confirmed"] is False
        assert body["email"] == "ada@example.com"
        assert body["notes"] is None
        assert body["start_time"].startswith("2030-01-15T09:00:00")
        assert len(email_outbox.sent) == 2

    def test_overlap_is_a_conflict(self, client) -> None:
        assert client.post(BOOKINGS_URL, json=_payload(email="a@example.com")).status_code == 201

        r = client.post(
            BOOKINGS_URL,
            json=_payload(email="b@example.com", start_time=iso(9, 30), end_time=iso(10, 30)),
        )

        assert r.status_code == 409
        problem = r.json()
        assert problem["status"] == 409
        assert problem["title"] == "Conflict"
        assert problem["code"] == "BOOKING_CONFLICT"
        assert problem["detail"] == "Time slot conflicts with an existing booking"
        assert problem["instance"] == BOOKINGS_URL

    def test_back_to_back_is_accepted(self, client) -> None:
        client.post(BOOKINGS_URL, json=_payload(email="a@example.com"))

        r = client.post(
            BOOKINGS_URL, json=_payload(email="c@example.com", start_time=iso(10), end_time=iso(11))
        )

        assert r.status_code == 201

    def test_inverted_window(self, client) -> None:
        r = client.post(BOOKINGS_URL, json=_payload(start_time=iso(10), end_time=iso(9)))

        assert r.status_code == 400
        assert r.json()["detail"] == "end_time must be after start_time"
        assert r.json()["code"] == "INVALID_TIME_WINDOW"

    def test_invalid_body(self, client) -> None:
        r = client.post(BOOKINGS_URL, json=_payload(email="not-an-email", extra="nope"))

        assert r.status_code == 422
        assert r.json()["code"] == "validation_error"
        assert r.json()["errors"]

    def test_client_cannot_create_confirmed_booking(self, client) -> None:
        r = client.post(BOOKINGS_URL, json=_payload(confirmed=True))
        assert r.status_code == 422


class TestAvailability:
    def test_availability(self, client, make_booking) -> None:
        make_booking(at(9), at(10))

        busy = client.get(f"{BOOKINGS_URL}/availability", params={"start": iso(9, 30), "end": iso(10, 30)})
        free = client.get(f"{BOOKINGS_URL}/availability", params={"start": iso(10), "end": iso(11)})

        assert busy.json() == {"available": False}
        assert free.json() == {"available": True}

    def test_invalid_dates(self, client) -> None:
        r = client.get(f"{BOOKINGS_URL}/availability", params={"start": "soon", "end": iso(11)})

        assert r.status_code == 400
        assert r.json()["detail"] == "start_time and end_time must be valid dates"


class TestListBookings:
    def test_anonymous_requires_window(self, client) -> None:
        r = client.get(BOOKINGS_URL)

        assert r.status_code == 400
        assert r.json()["code"] == "TIME_RANGE_REQUIRED"

    def test_anonymous_sees_public_fields(self, client, make_booking) -> None:
        booking = make_booking(at(9), at(10))

        r = client.get(BOOKINGS_URL, params={"from": iso(0), "to": iso(23), "email": booking.email})

        assert r.status_code == 200
        body = r.json()
        assert body["total"] == 1
        assert set(body["items"][0]) == {"id", "start_time", "end_time", "type"}

    def test_invalid_token_is_treated_as_anonymous(self, client, make_booking) -> None:
        make_booking(at(9), at(10))
        headers = {"Authorization": "Bearer not-a-real-token"}

        assert client.get(BOOKINGS_URL, headers=headers).status_code == 400

        r = client.get(BOOKINGS_URL, params={"from": iso(0), "to": iso(23)}, headers=headers)
        assert r.status_code == 200
        assert "email" not in r.json()["items"][0]

    def test_user_role_sees_public_fields(self, client, make_booking, user_headers) -> None:
        make_booking(at(9), at(10))

        r = client.get(BOOKINGS_URL, params={"from": iso(0), "to": iso(23)}, headers=user_headers)

        assert r.status_code == 200
        assert "email" not in r.json()["items"][0]

    def test_admin_sees_everything(self, client, make_booking, admin_headers) -> None:
        make_booking(at(9), at(10), email="ada@example.com")
        make_booking(at(11), at(12), email="bob@example.com")

        r = client.get(
            BOOKINGS_URL,
            params={"email": "ada@example.com", "sortBy": "start_time:desc", "limit": 10},
            headers=admin_headers,
        )

        assert r.status_code == 200
        body = r.json()
        assert body["total"] == 1
        assert body["items"][0]["email"] == "ada@example.com"
        assert body["items"][0]["phone"] == "+1 555 0100"
        assert body["per_page"] == 10

    def test_limit_above_maximum(self, client, admin_headers) -> None:
        r = client.get(BOOKINGS_URL, params={"limit": 1000}, headers=admin_headers)
        assert r.status_code == 422


class TestUnconfirmed:
    def test_requires_admin(self, client, user_headers) -> None:
        assert client.get(f"{BOOKINGS_URL}/unconfirmed").status_code == 401
        assert client.get(f"{BOOKINGS_URL}/unconfirmed", headers=user_headers).status_code == 403

    def test_lists_pending_upcoming(self, client, make_booking, admin_headers) -> None:
        pending = make_booking(at(9), at(10))
        make_booking(at(11), at(12), confirmed=True)

        r = client.get(f"{BOOKINGS_URL}/unconfirmed", headers=admin_headers)

        assert r.status_code == 200
        assert [item["id"] for item in r.json()["items"]] == [pending.id]


class TestBookingDetail:
    def test_access_control(self, client, make_booking, user_headers, admin_headers) -> None:
        booking = make_booking(at(9), at(10))
        url = f"{BOOKINGS_URL}/{booking.id}"

        unauthenticated = client.get(url)
        assert unauthenticated.status_code == 401
        assert unauthenticated.json()["code"] == "NOT_AUTHENTICATED"

        forbidden = client.get(url, headers=user_headers)
        assert forbidden.status_code == 403
        assert forbidden.json()["code"] == "FORBIDDEN"

        ok = client.get(url, headers=admin_headers)
        assert ok.status_code == 200
        assert ok.json()["id"] == booking.id

    def test_unknown_and_malformed_ids(self, client, admin_headers) -> None:
        assert client.get(f"{BOOKINGS_URL}/01HF4G12ABCDEF3456789XYZAB", headers=admin_headers).status_code == 404
        assert client.get(f"{BOOKINGS_URL}/not-a-ulid", headers=admin_headers).status_code == 404


class TestAdminMutations:
    def test_update(self, client, make_booking, admin_headers) -> None:
        booking = make_booking(at(9), at(10))

        r = client.patch(
            f"{BOOKINGS_URL}/{booking.id}",
            json={"start_time": iso(13), "end_time": iso(14), "notes": None},
            headers=admin_headers,
        )

        assert r.status_code == 200
        assert r.json()["start_time"].startswith("2030-01-15T13:00:00")

    def test_update_requires_admin(self, client, make_booking, user_headers) -> None:
        booking = make_booking(at(9), at(10))

        r = client.patch(f"{BOOKINGS_URL}/{booking.id}", json={"name": "x"}, headers=user_headers)

        assert r.status_code == 403

    def test_empty_update_is_invalid(self, client, make_booking, admin_headers) -> None:
        booking = make_booking(at(9), at(10))

        r = client.patch(f"{BOOKINGS_URL}/{booking.id}", json={}, headers=admin_headers)

        assert r.status_code == 422

    def test_confirm_twice_sends_one_email(self, client, make_booking, admin_headers, email_outbox) -> None:
        booking = make_booking(at(9), at(10))
        url = f"{BOOKINGS_URL}/{booking.id}/confirm"

        first = client.post(url, headers=admin_headers)
        second = client.post(url, headers=admin_headers)

        assert first.status_code == 200
        assert first.json()["confirmed"] is True
        assert second.status_code == 200
        assert [m["subject"] for m in email_outbox.sent] == ["Booking Confirmation"]

    def test_reject_removes_booking(self, client, make_booking, admin_headers, email_outbox, db) -> None:
        booking = make_booking(at(9), at(10))

        r = client.post(
            f"{BOOKINGS_URL}/{booking.id}/reject",
            json={"message": "Closed for maintenance"},
            headers=admin_headers,
        )

        assert r.status_code == 204
        assert r.content == b""
        assert db.get(Booking, booking.id) is None
        assert "Closed for maintenance" in email_outbox.sent[0]["html"]

    def test_reject_without_body(self, client, make_booking, admin_headers) -> None:
        booking = make_booking(at(9), at(10))

        r = client.post(f"{BOOKINGS_URL}/{booking.id}/reject", headers=admin_headers)

        assert r.status_code == 204

    def test_reject_confirmed_booking(self, client, make_booking, admin_headers) -> None:
        booking = make_booking(at(9), at(10), confirmed=True)

        r = client.post(f"{BOOKINGS_URL}/{booking.id}/reject", headers=admin_headers)

        assert r.status_code == 422
        assert r.json()["code"] == "BOOKING_ALREADY_CONFIRMED"

    def test_reject_unknown_booking(self, client, admin_headers) -> None:
        r = client.post(f"{BOOKINGS_URL}/01HF4G12ABCDEF3456789XYZAB/reject", headers=admin_headers)
        assert r.status_code == 404

    def test_delete(self, client, make_booking, admin_headers, email_outbox) -> None:
        booking = make_booking(at(9), at(10))

        r = client.delete(f"{BOOKINGS_URL}/{booking.id}", headers=admin_headers)

        assert r.status_code == 204
        assert client.get(f"{BOOKINGS_URL}/{booking.id}", headers=admin_headers).status_code == 404
        assert email_outbox.sent == []
