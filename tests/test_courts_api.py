"""Tests for the public /courts endpoints."""

from datetime import datetime, time, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

from courtbooking.models.court import CourtSurface


def _next_monday():
    today = datetime.now(timezone.utc).date()
    return today + timedelta(days=(0 - today.weekday() - 1) % 7 + 1)


class TestListCourts:
    def test_only_active_by_default(self, client, make_court):
        make_court(name="Alpha")
        make_court(name="Beta", is_active=False)
        resp = client.get("/api/v1/courts/")
        assert resp.status_code == 200
        assert [c["name"] for c in resp.json()] == ["Alpha"]

    def test_include_inactive(self, client, make_court):
        make_court(name="Alpha")
        make_court(name="Beta", is_active=False)
        resp = client.get("/api/v1/courts/", params={"include_inactive": True})
        assert len(resp.json()) == 2

    def test_filter_surface(self, client, make_court):
        make_court(name="Clay", surface=CourtSurface.CLAY)
        make_court(name="Hard", surface=CourtSurface.HARD)
        resp = client.get("/api/v1/courts/", params={"surface": "hard"})
        assert [c["name"] for c in resp.json()] == ["Hard"]

    def test_search_name_or_description(self, client, make_court):
        make_court(name="Center Court")
        make_court(name="Indoor Court 1", description="Heated hall next to the clubhouse")
        make_court(name="Practice wall")
        by_name = client.get("/api/v1/courts/", params={"search": "center"})
        assert [c["name"] for c in by_name.json()] == ["Center Court"]
        by_description = client.get("/api/v1/courts/", params={"search": "CLUBHOUSE"})
        assert [c["name"] for c in by_description.json()] == ["Indoor Court 1"]

    def test_get_court(self, client, court):

        resp = client.get(f"/api/v1/courts/{court.id}")
        assert resp.status_code == 200
        data = resp.json()
        assert data["operating_hours"]["monday"] == {"open": "08:00:00", "close": "22:00:00"}
        assert data["slot_increment_minutes"] == 60

    def test_unknown_court(self, client):
        assert client.get(f"/api/v1/courts/{uuid4()}").status_code == 404


class TestCourtAvailability:
    def test_thirteen_free_hours(self, client, court, user, add_booking):
        monday = _next_monday()
        add_booking(court, user, monday, time(14, 0), time(15, 0))

        resp = client.get(
            f"/api/v1/courts/{court.id}/availability",
            params={"date": monday.isoformat(), "duration_minutes": 60},
        )
        assert resp.status_code == 200
        slots = resp.json()["slots"]
        assert len(slots) == 13
        assert "14:00:00" not in [s["start_time"] for s in slots]
        assert all(s["available"] for s in slots)

    def test_duration_defaults_to_court_minimum(self, client, court):
        resp = client.get(f"/api/v1/courts/{court.id}/availability", params={"date": _next_monday().isoformat()})
        assert resp.json()["duration_minutes"] == 60

    def test_duration_out_of_range(self, client, court):
        resp = client.get(
            f"/api/v1/courts/{court.id}/availability",
            params={"date": _next_monday().isoformat(), "duration_minutes": 180},
        )
        assert resp.status_code == 400
        assert resp.json()["detail"]["error"] == "DurationOutOfRange"

    def test_maintenance_mode_has_no_slots(self, client, make_court):
        court = make_court(maintenance_mode=True)
        resp = client.get(f"/api/v1/courts/{court.id}/availability", params={"date": _next_monday().isoformat()})
        assert resp.json()["slots"] == []
        assert resp.json()["reason"] == "Court is not active or in maintenance."

    def test_all_courts_explain_closed_courts(self, client, make_court):
        monday = _next_monday()
        hours = {d: {"open": "08:00", "close": "22:00"} for d in ("tuesday", "wednesday")}
        make_court(name="A open")
        make_court(name="B maintenance", maintenance_mode=True)
        make_court(name="C weekdays", operating_hours=hours)

        resp = client.get("/api/v1/courts/availability", params={"date": monday.isoformat()})
        courts = {c["court"]["name"]: c for c in resp.json()["courts"]}
        assert courts["A open"]["reason"] is None
        assert courts["A open"]["slots"]
        assert courts["B maintenance"]["reason"] == "Court is not active or in maintenance."
        assert courts["C weekdays"]["reason"] == "Operating hours not defined for this day."
        assert courts["C weekdays"]["slots"] == []


    def test_all_courts(self, client, make_court, user, add_booking):
        first = make_court(name="A court")
        make_court(name="B court")
        monday = _next_monday()
        add_booking(first, user, monday, time(8, 0), time(10, 0))

        resp = client.get("/api/v1/courts/availability", params={"date": monday.isoformat()})
        assert resp.status_code == 200
        courts = resp.json()["courts"]
        assert [c["court"]["name"] for c in courts] == ["A court", "B court"]
        assert len(courts[0]["slots"]) == 12
        assert len(courts[1]["slots"]) == 14


class TestPriceQuote:
    def test_peak_boundary(self, client, make_court):
        court = make_court(peak_windows=[("monday", time(17, 0), time(20, 0))])
        monday = _next_monday().isoformat()

        off_peak = client.get(
            f"/api/v1/courts/{court.id}/price",
            params={"date": monday, "start_time": "16:30", "duration_minutes": 60},
        ).json()
        peak = client.get(
            f"/api/v1/courts/{court.id}/price",
            params={"date": monday, "start_time": "17:00", "duration_minutes": 60},
        ).json()

        assert Decimal(off_peak["total_price"]) == Decimal("20.00")
        assert off_peak["is_peak"] is False
        assert Decimal(peak["total_price"]) == Decimal("30.00")
        assert peak["is_peak"] is True

    def test_bad_time_format(self, client, court):
        resp = client.get(
            f"/api/v1/courts/{court.id}/price",
            params={"date": _next_monday().isoformat(), "start_time": "5pm", "duration_minutes": 60},
        )
        assert resp.status_code == 422
