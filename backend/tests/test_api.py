"""HTTP tests over an in-memory database (every day open 09:00-13:00)."""
import json
from datetime import date, timedelta

import pytest

from homeslots.models.generated import SchedulingSettings
from homeslots.services.events import EVENTS_QUEUE
from homeslots.services.slots.redis_store import SchedulingConfigStore

FUTURE = date.today() + timedelta(days=7)


def _slots_request(client, *service_ids, day=FUTURE, **extra):
    return client.post("/slots/day", json={
        "date": day.isoformat(),
        "items": [{"service_id": s} for s in service_ids],
        **extra,
    })


def _book(client, time_str, *service_ids, day=FUTURE):
    return client.post("/bookings/", json={
        "date": day.isoformat(),
        "time": time_str,
        "items": [{"service_id": s} for s in service_ids],
    })


def _times(response):
    return [s["time"] for s in response.json()["slots"]]


@pytest.fixture
def full_day(client):
    """Book every plumbing slot on FUTURE."""
    for t in ("09:00", "10:00", "11:00", "12:00"):
        assert _book(client, t, 1).status_code == 201


class TestSlotsDay:

    def test_open_day(self, client):
        response = _slots_request(client, 1)

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "available"
        assert data["slot_date"] == FUTURE.isoformat()
        assert data["shifted"] is False
        assert data["notice"] is None
        assert data["slot_interval_minutes"] == 60
        assert data["required_duration_minutes"] == 60
        assert data["slots"] == [
            {"time": t, "remaining_capacity": 1} for t in ("09:00", "10:00", "11:00", "12:00")
        ]

    def test_quantity_lengthens_requirement(self, client):
        response = client.post("/slots/day", json={
            "date": FUTURE.isoformat(),
            "items": [{"service_id": 1, "quantity": 2}],
        })

        assert response.json()["required_duration_minutes"] == 120
        assert _times(response) == ["09:00", "10:00", "11:00"]

    def test_full_day_advances_to_next_day(self, client, full_day):
        data = _slots_request(client, 1).json()

        assert data["status"] == "available"
        assert data["slot_date"] == (FUTURE + timedelta(days=1)).isoformat()
        assert data["shifted"] is True
        assert data["notice"].startswith("No slots available on ")

    def test_full_day_without_search(self, client, full_day):
        data = _slots_request(client, 1, find_next_available=False).json()

        assert data["status"] == "no_availability"
        assert data["slots"] == []

    def test_other_category_unaffected(self, client, full_day):
        assert _slots_request(client, 3).json()["slot_date"] == FUTURE.isoformat()

    def test_scan_exhausted(self, client):
        settings = client.get("/settings/scheduling").json()
        for window in settings["weekly_availability"]:
            window["is_enabled"] = False
        assert client.put("/settings/scheduling", json=settings).status_code == 200

        data = _slots_request(client, 1).json()

        assert data["status"] == "scan_exhausted"
        assert data["slot_date"] is None
        assert data["slots"] == []

    def test_unknown_service(self, client):
        response = _slots_request(client, 1, 999)

        assert response.status_code == 422
        assert response.json()["service_id"] == 999

    def test_retired_service(self, client):
        assert _slots_request(client, 4).status_code == 422

    def test_past_date(self, client):
        assert _slots_request(client, 1, day=date.today() - timedelta(days=1)).status_code == 400

    def test_empty_cart(self, client):
        assert _slots_request(client).status_code == 422

    def test_configuration_unavailable(self, client, seeded_db):
        seeded_db.get(SchedulingSettings, 1).slot_interval_minutes = 0
        seeded_db.commit()

        response = _slots_request(client, 1)

        assert response.status_code == 503
        assert response.json()["detail"] == "Scheduling temporarily unavailable"


class TestBookings:

    def test_create(self, client, fake_redis):
        response = _book(client, "10:00 AM", 1)

        assert response.status_code == 201
        data = response.json()
        assert data["scheduled_date"] == FUTURE.isoformat()
        assert data["scheduled_time_slot"] == "10:00"
        assert data["status"] == "pending"
        assert data["items"] == [{"service_id": 1, "quantity": 1}]

        event = json.loads(fake_redis.lists[EVENTS_QUEUE][-1])
        assert event["type"] == "booking_created"
        assert event["booking_id"] == data["id"]

    def test_saturated_slot_conflict(self, client):
        assert _book(client, "10:00", 1).status_code == 201

        response = _book(client, "10:00", 2)

        assert response.status_code == 409
        assert "no longer available" in response.json()["detail"]

    def test_invalid_time(self, client):
        assert _book(client, "25:99", 1).status_code == 422

    def test_list_and_get(self, client):
        created = _book(client, "09:00", 1).json()
        _book(client, "09:00", 1, day=FUTURE + timedelta(days=1))

        listed = client.get("/bookings/", params={"date": FUTURE.isoformat()}).json()

        assert [b["id"] for b in listed] == [created["id"]]
        assert client.get(f"/bookings/{created['id']}").json()["scheduled_time_slot"] == "09:00"
        assert client.get("/bookings/999").status_code == 404

    def test_delete_not_allowed(self, client):
        booking = _book(client, "09:00", 1).json()

        assert client.delete(f"/bookings/{booking['id']}").status_code == 405


class TestReschedule:

    def test_own_slot_offered(self, client):
        booking = _book(client, "10:00", 1).json()
        _book(client, "11:00", 1)

        response = client.get(f"/slots/reschedule/{booking['id']}", params={"date": FUTURE.isoformat()})

        assert response.status_code == 200
        data = response.json()
        assert data["current_time"] == "10:00"
        assert _times(response) == ["09:00", "10:00", "12:00"]

    def test_move(self, client, fake_redis):
        booking = _book(client, "10:00", 1).json()

        response = client.post(f"/bookings/{booking['id']}/reschedule", json={
            "date": FUTURE.isoformat(),
            "time": "12:00",
        })

        assert response.status_code == 200
        assert response.json()["scheduled_time_slot"] == "12:00"
        event = json.loads(fake_redis.lists[EVENTS_QUEUE][-1])
        assert event["type"] == "booking_rescheduled"
        assert event["was"] == f"{FUTURE.isoformat()} 10:00"

    def test_move_onto_taken_slot(self, client):
        booking = _book(client, "10:00", 1).json()
        _book(client, "11:00", 1)

        response = client.post(f"/bookings/{booking['id']}/reschedule", json={
            "date": FUTURE.isoformat(),
            "time": "11:00",
        })

        assert response.status_code == 409

    def test_unknown_booking(self, client):
        response = client.post("/bookings/999/reschedule", json={
            "date": FUTURE.isoformat(),
            "time": "11:00",
        })

        assert response.status_code == 404
        assert client.get("/slots/reschedule/999", params={"date": FUTURE.isoformat()}).status_code == 404

    def test_cancelled_booking(self, client, fake_redis):
        booking = _book(client, "10:00", 1).json()

        response = client.post(f"/bookings/{booking['id']}/cancel")
        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"
        assert json.loads(fake_redis.lists[EVENTS_QUEUE][-1])["type"] == "booking_cancelled"

        assert client.get(
            f"/slots/reschedule/{booking['id']}", params={"date": FUTURE.isoformat()}
        ).status_code == 409
        assert client.post(f"/bookings/{booking['id']}/reschedule", json={
            "date": FUTURE.isoformat(),
            "time": "11:00",
        }).status_code == 409
        assert "10:00" in _times(_slots_request(client, 1))


class TestSchedulingSettings:

    def test_read(self, client):
        data = client.get("/settings/scheduling").json()

        assert data["slot_interval_minutes"] == 60
        assert data["break_minutes"] == 0
        assert data["max_days_to_scan"] == 30
        assert [w["weekday"] for w in data["weekly_availability"]] == list(range(7))

    def test_update_replaces_cached_snapshot(self, client, fake_redis):
        _slots_request(client, 1)
        assert SchedulingConfigStore.KEY in fake_redis.values

        settings = client.get("/settings/scheduling").json()
        settings["slot_interval_minutes"] = 30
        response = client.put("/settings/scheduling", json=settings)

        assert response.status_code == 200
        cached = json.loads(fake_redis.values[SchedulingConfigStore.KEY])
        assert cached["policy"]["slot_interval_minutes"] == 30
        assert _times(_slots_request(client, 1)) == [
            "09:00", "09:30", "10:00", "10:30", "11:00", "11:30", "12:00",
        ]

    def test_rejects_inverted_window(self, client):
        settings = client.get("/settings/scheduling").json()
        settings["weekly_availability"][0]["end_time"] = "08:00"

        assert client.put("/settings/scheduling", json=settings).status_code == 422

    def test_rejects_duplicate_weekday(self, client):
        settings = client.get("/settings/scheduling").json()
        settings["weekly_availability"][1]["weekday"] = 0

        assert client.put("/settings/scheduling", json=settings).status_code == 422


class TestCategoryLimits:

    def test_list_with_defaults(self, client):
        data = client.get("/settings/category-limits").json()

        assert data == [
            {"category_id": 2, "category_name": "Cleaning", "max_concurrent_bookings": 2},
            {"category_id": 1, "category_name": "Plumbing", "max_concurrent_bookings": 1},
        ]

    def test_raise_limit(self, client, fake_redis):
        _slots_request(client, 1)

        response = client.put("/settings/category-limits/1", json={"max_concurrent_bookings": 2})

        assert response.status_code == 200
        assert SchedulingConfigStore.KEY not in fake_redis.values
        assert _book(client, "10:00", 1).status_code == 201
        assert _book(client, "10:00", 1).status_code == 201
        assert _book(client, "10:00", 1).status_code == 409

    def test_remove_limit(self, client):
        assert client.delete("/settings/category-limits/2").status_code == 204
        assert client.delete("/settings/category-limits/2").status_code == 404

        limits = {c["category_id"]: c["max_concurrent_bookings"] for c in client.get("/settings/category-limits").json()}
        assert limits[2] == 1

    def test_unknown_category(self, client):
        assert client.put("/settings/category-limits/99", json={"max_concurrent_bookings": 2}).status_code == 404

    def test_limit_must_be_positive(self, client):
        assert client.put("/settings/category-limits/1", json={"max_concurrent_bookings": 0}).status_code == 422
