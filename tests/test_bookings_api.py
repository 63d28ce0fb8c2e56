"""Tests for the public /bookings endpoints."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4


def _body(court, user, day, start="10:00", end="11:00", **extra):
    return {
        "court_id": str(court.id),
        "user_id": str(user.id),
        "date": day.isoformat(),
        "start_time": start,
        "end_time": end,
        **extra,
    }


class TestCreateBooking:
    def test_created(self, client, court, user, tomorrow):
        resp = client.post(
            "/api/v1/bookings/",
            json=_body(court, user, tomorrow, players=[{"name": "Sam", "is_guest": True}], notes="doubles"),
        )
        assert resp.status_code == 201
        data = resp.json()
        assert data["status"] == "confirmed"
        assert data["booking_number"].startswith("TCB-")
        assert data["duration_minutes"] == 60
        assert Decimal(data["total_price"]) == Decimal("20.00")
        assert data["court"]["name"] == court.name
        assert data["players"][0]["name"] == "Sam"

    def test_slot_taken(self, client, court, make_user, tomorrow):
        first, second = make_user(), make_user()
        assert client.post("/api/v1/bookings/", json=_body(court, first, tomorrow)).status_code == 201

        resp = client.post("/api/v1/bookings/", json=_body(court, second, tomorrow, "10:30", "11:30"))
        assert resp.status_code == 409
        assert resp.json()["detail"]["error"] == "SlotTaken"
        assert resp.json()["detail"]["message"]

    def test_user_double_booked_across_courts(self, client, make_court, user, tomorrow):
        court_a, court_b = make_court(), make_court()
        assert client.post("/api/v1/bookings/", json=_body(court_a, user, tomorrow)).status_code == 201

        resp = client.post("/api/v1/bookings/", json=_body(court_b, user, tomorrow, "10:30", "11:30"))
        assert resp.status_code == 409
        assert resp.json()["detail"]["error"] == "UserDoubleBooked"

    def test_duration_out_of_range(self, client, court, user, tomorrow):
        resp = client.post("/api/v1/bookings/", json=_body(court, user, tomorrow, "10:00", "10:30"))
        assert resp.status_code == 400
        assert resp.json()["detail"]["error"] == "DurationOutOfRange"

    def test_past_date(self, client, court, user):
        yesterday = datetime.now(timezone.utc).date() - timedelta(days=1)
        resp = client.post("/api/v1/bookings/", json=_body(court, user, yesterday))
        assert resp.json()["detail"]["error"] == "PastDate"

    def test_too_far_in_advance(self, client, court, user):
        far = datetime.now(timezone.utc).date() + timedelta(days=30)
        resp = client.post("/api/v1/bookings/", json=_body(court, user, far))
        assert resp.json()["detail"]["error"] == "TooFarInAdvance"

    def test_inactive_court(self, client, make_court, user, tomorrow):
        court = make_court(is_active=False)
        resp = client.post("/api/v1/bookings/", json=_body(court, user, tomorrow))
        assert resp.status_code == 400
        assert resp.json()["detail"]["error"] == "CourtInactive"

    def test_unknown_user(self, client, court, user, tomorrow):
        body = _body(court, user, tomorrow)
        body["user_id"] = str(uuid4())
        assert client.post("/api/v1/bookings/", json=body).status_code == 404

    def test_too_many_players(self, client, court, user, tomorrow):
        players = [{"name": f"P{i}"} for i in range(4)]
        resp = client.post("/api/v1/bookings/", json=_body(court, user, tomorrow, players=players))
        assert resp.status_code == 422


class TestReadBookings:
    def test_list_and_get(self, client, court, user, make_user, tomorrow):
        created = client.post("/api/v1/bookings/", json=_body(court, user, tomorrow)).json()
        client.post("/api/v1/bookings/", json=_body(court, make_user(), tomorrow, "12:00", "13:00"))

        resp = client.get("/api/v1/bookings/", params={"user_id": str(user.id)})
        assert resp.status_code == 200
        assert resp.json()["total"] == 1
        assert resp.json()["data"][0]["id"] == created["id"]

        assert client.get(f"/api/v1/bookings/{created['id']}").json()["booking_number"] == created["booking_number"]

    def test_unknown_booking(self, client):
        assert client.get(f"/api/v1/bookings/{uuid4()}").status_code == 404

    def test_notifications(self, client, court, user, tomorrow):
        client.post("/api/v1/bookings/", json=_body(court, user, tomorrow))
        resp = client.get(f"/api/v1/users/{user.id}/notifications")
        assert resp.json()["total"] == 1
        note = resp.json()["data"][0]
        assert note["type"] == "booking_confirmed"

        read = client.patch(f"/api/v1/users/{user.id}/notifications/{note['id']}/read")
        assert read.json()["is_read"] is True


class TestCancelBooking:
    def test_owner_cancels_and_slot_frees_up(self, client, court, make_user, tomorrow):
        owner, other = make_user(), make_user()
        day = tomorrow + timedelta(days=1)
        booking = client.post("/api/v1/bookings/", json=_body(court, owner, day)).json()

        resp = client.patch(
            f"/api/v1/bookings/{booking['id']}/cancel",
            json={"user_id": str(owner.id), "reason": "injury"},
        )
        assert resp.status_code == 200
        assert resp.json()["status"] == "cancelled"

        assert client.post("/api/v1/bookings/", json=_body(court, other, day)).status_code == 201

    def test_someone_else_cannot_cancel(self, client, court, make_user, tomorrow):
        owner, other = make_user(), make_user()
        booking = client.post("/api/v1/bookings/", json=_body(court, owner, tomorrow + timedelta(days=1))).json()

        resp = client.patch(f"/api/v1/bookings/{booking['id']}/cancel", json={"user_id": str(other.id)})
        assert resp.status_code == 403
        assert resp.json()["detail"]["error"] == "NotBookingOwner"

    def test_admin_key_cancels_any_booking(self, client, court, user, tomorrow, admin_headers):
        booking = client.post("/api/v1/bookings/", json=_body(court, user, tomorrow)).json()
        resp = client.patch(f"/api/v1/bookings/{booking['id']}/cancel", json={}, headers=admin_headers)
        assert resp.status_code == 200

    def test_cancel_twice(self, client, court, user, tomorrow, admin_headers):
        booking = client.post("/api/v1/bookings/", json=_body(court, user, tomorrow)).json()
        client.patch(f"/api/v1/bookings/{booking['id']}/cancel", json={}, headers=admin_headers)
        resp = client.patch(f"/api/v1/bookings/{booking['id']}/cancel", json={}, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json()["detail"]["error"] == "AlreadyCancelled"
