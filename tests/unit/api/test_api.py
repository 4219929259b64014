"""HTTP-level tests against the FastAPI app with an in-memory database."""

import datetime

import pytest
from fastapi.testclient import TestClient

from app.core.cache import TTLCache
from app.db.session import get_db
from app.main import app

COACH = 1


@pytest.fixture
def client(session):
    def _override():
        yield session

    app.dependency_overrides[get_db] = _override
    app.state.preference_cache = TTLCache()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def day():
    """A weekday-agnostic date a few days ahead so analysis never skips it."""
    return datetime.date.today() + datetime.timedelta(days=3)


@pytest.fixture
def reference_day(client, day):
    assert client.post("/api/v1/calendar/availability", json={
        "coach_id": COACH, "date": day.isoformat(), "start_time": "09:00", "end_time": "17:00"}).status_code == 201
    ids = []
    for client_id, start, end in ((101, "09:00", "10:00"), (102, "11:00", "12:00"), (103, "15:00", "17:00")):
        response = client.post("/api/v1/bookings", json={"coach_id": COACH, "client_id": client_id,
                                                         "date": day.isoformat(), "start_time": start,
                                                         "end_time": end})
        assert response.status_code == 201
        ids.append(response.json()["id"])
    return ids


class TestHealth:
    def test_root(self, client):
        assert client.get("/").json()["status"] == "healthy"

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy", "service": "coach-calendar-api",
                                                "version": "0.1.0"}


class TestCalendar:
    def test_gaps(self, client, day, reference_day):
        response = client.get(f"/api/v1/calendar/{COACH}/gaps", params={"date": day.isoformat()})
        assert response.status_code == 200
        assert [(g["start_time"], g["end_time"], g["duration_minutes"]) for g in response.json()] == [
            ("10:00:00", "11:00:00", 60), ("12:00:00", "15:00:00", 180)]

    def test_gaps_reject_bad_minimum(self, client, day):
        response = client.get(f"/api/v1/calendar/{COACH}/gaps", params={"date": day.isoformat(),
                                                                        "min_gap_minutes": 0})
        assert response.status_code == 422

    def test_invalid_booking(self, client, day):
        response = client.post("/api/v1/bookings", json={"coach_id": COACH, "client_id": 5, "date": day.isoformat(),
                                                         "start_time": "11:00", "end_time": "10:00"})
        assert response.status_code == 400

    def test_double_booking_conflicts(self, client, day, reference_day):
        response = client.post("/api/v1/bookings", json={"coach_id": COACH, "client_id": 5, "date": day.isoformat(),
                                                         "start_time": "09:30", "end_time": "10:30"})
        assert response.status_code == 409
        gaps = client.get(f"/api/v1/calendar/{COACH}/gaps", params={"date": day.isoformat()}).json()
        assert len(gaps) == 2

    def test_workload(self, client, day, reference_day):
        response = client.get(f"/api/v1/calendar/{COACH}/workload",
                              params={"window_days": 1, "as_of": day.isoformat()})
        assert response.status_code == 200


class TestOptimization:
    def test_missing_suggestion(self, client):
        response = client.post("/api/v1/optimization/suggestions/999/respond", json={"action": "accept"})
        assert response.status_code == 404

    def test_range_too_large(self, client, day):
        response = client.get(f"/api/v1/optimization/{COACH}/opportunities",
                              params={"start_date": day.isoformat(),
                                      "end_date": (day + datetime.timedelta(days=40)).isoformat()})
        assert response.status_code == 400

    def test_accept_and_apply(self, client, day, reference_day):
        created = client.post(f"/api/v1/optimization/{COACH}/suggestions",
                              json={"start_date": day.isoformat(), "end_date": day.isoformat(), "limit": 1})
        assert created.status_code == 201
        suggestion = created.json()[0]
        assert suggestion["source_booking_id"] == reference_day[1]

        accepted = client.post(f"/api/v1/optimization/suggestions/{suggestion['id']}/respond",
                               json={"action": "accept"})
        assert accepted.json()["status"] == "accepted"

        applied = client.post(f"/api/v1/optimization/suggestions/{suggestion['id']}/apply")
        assert applied.status_code == 200
        assert applied.json()["success"] is True
        booking = client.get(f"/api/v1/bookings/{reference_day[1]}").json()
        assert booking["start_time"] == "10:00:00"

    def test_apply_conflict(self, client, day, reference_day):
        suggestion = client.post(f"/api/v1/optimization/{COACH}/suggestions",
                                 json={"start_date": day.isoformat(), "end_date": day.isoformat(),
                                       "limit": 1}).json()[0]
        client.post(f"/api/v1/optimization/suggestions/{suggestion['id']}/respond", json={"action": "accept"})
        client.post("/api/v1/bookings", json={"coach_id": COACH, "client_id": 300, "date": day.isoformat(),
                                              "start_time": "10:00", "end_time": "11:00"})

        applied = client.post(f"/api/v1/optimization/suggestions/{suggestion['id']}/apply")

        assert applied.status_code == 409
        assert applied.json()["success"] is False
        pending = client.post(f"/api/v1/optimization/suggestions/{suggestion['id']}/respond",
                              json={"action": "reject"})
        assert pending.status_code == 409

    def test_invalid_action(self, client):
        response = client.post("/api/v1/optimization/suggestions/1/respond", json={"action": "maybe"})
        assert response.status_code == 422


class TestPackagesAndWaitlist:
    def test_package_flow(self, client, day):
        package = client.post(f"/api/v1/packages/coach/{COACH}/shared", json={
            "primary_client_id": 10, "shared_with_client_ids": [11],
            "terms": {"name": "Duo", "total_sessions": 2, "max_shared_users": 2}})
        assert package.status_code == 201
        package_id = package.json()["id"]

        assert client.post(f"/api/v1/packages/{package_id}/members", json={"client_id": 12}).status_code == 409
        assert client.delete(f"/api/v1/packages/{package_id}/members/10").status_code == 409

        assert client.post("/api/v1/calendar/availability", json={
            "coach_id": COACH, "date": day.isoformat(), "start_time": "09:00", "end_time": "17:00"}).status_code == 201
        booking = client.post("/api/v1/bookings", json={"coach_id": COACH, "client_id": 11, "date": day.isoformat(),
                                                        "start_time": "09:00", "end_time": "10:00",
                                                        "package_id": package_id}).json()
        usage = client.post("/api/v1/packages/usage", json={"booking_id": booking["id"], "used_by_client_id": 11})
        assert usage.status_code == 200
        assert usage.json()["sessions_remaining"] == 1

        again = client.post("/api/v1/packages/usage", json={"booking_id": booking["id"], "used_by_client_id": 11})
        assert again.status_code == 422

    def test_waitlist_duplicate(self, client):
        assert client.post(f"/api/v1/waitlist/{COACH}", json={"client_id": 50}).status_code == 201
        assert client.post(f"/api/v1/waitlist/{COACH}", json={"client_id": 50}).status_code == 409
        entries = client.get(f"/api/v1/waitlist/{COACH}").json()
        assert [e["client_id"] for e in entries] == [50]

    def test_expiration_job(self, client):
        response = client.post("/api/v1/jobs/expiration-alerts")
        assert response.status_code == 200
        assert response.json() == {"checked": 0, "alerted": 0}
