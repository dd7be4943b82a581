"""Shared test fixtures."""
import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")

from collections import defaultdict
from datetime import date, datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from homeslots.database import get_db
from homeslots.main import app
from homeslots.models.generated import (
    Base,
    Categories,
    SchedulingSettings,
    Services,
    SubCategories,
    TimeSlotCategoryLimits,
    WeeklyAvailability,
)
from homeslots.redis_client import get_redis
from homeslots.services.slots import (
    AvailabilityWindow,
    BookingItem,
    ExistingBooking,
    SchedulingPolicy,
    ServiceDurationInfo,
)

MONDAY = date(2026, 10, 19)
TUESDAY = date(2026, 10, 20)
DAY_BEFORE = datetime(2026, 10, 18, 8, 0)

PLUMBING = "plumbing"
CLEANING = "cleaning"


class InMemoryRedis:
    """Just enough of the Redis API for the config cache and event queue."""

    def __init__(self):
        self.values = {}
        self.lists = defaultdict(list)

    def get(self, key):
        return self.values.get(key)

    def set(self, key, value, ex=None):
        self.values[key] = value
        return True

    def delete(self, *keys):
        deleted = 0
        for key in keys:
            if self.values.pop(key, None) is not None:
                deleted += 1
            if self.lists.pop(key, None) is not None:
                deleted += 1
        return deleted

    def rpush(self, key, *values):
        self.lists[key].extend(values)
        return len(self.lists[key])

    def ping(self):
        return True


# ── Engine fixtures ─────────────────────────────────────────────────────


@pytest.fixture
def catalog():
    """service_id → duration/category."""
    return {
        "tap-repair": ServiceDurationInfo("tap-repair", 60, PLUMBING),
        "pipe-refit": ServiceDurationInfo("pipe-refit", 90, PLUMBING),
        "drain-unclog": ServiceDurationInfo("drain-unclog", 30, PLUMBING),
        "deep-clean": ServiceDurationInfo("deep-clean", 120, CLEANING),
        "sofa-clean": ServiceDurationInfo("sofa-clean", 60, CLEANING),
    }


@pytest.fixture
def policy():
    return SchedulingPolicy(slot_interval_minutes=60, break_minutes=0)


@pytest.fixture
def weekly():
    """Every day 09:00-13:00."""
    return {d: AvailabilityWindow(d, True, "09:00", "13:00") for d in range(7)}


@pytest.fixture
def make_booking():
    """Build an ExistingBooking on MONDAY."""
    counter = {"id": 0}

    def _make(start_time, *service_ids, day=MONDAY, status="pending", booking_id=None):
        counter["id"] += 1
        return ExistingBooking(
            booking_id=booking_id if booking_id is not None else counter["id"],
            date=day,
            start_time=start_time,
            items=tuple(BookingItem(service_id=s) for s in service_ids),
            status=status,
        )
    return _make


# ── Database / API fixtures ─────────────────────────────────────────────


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded_db(db_session):
    """
    Catalog and settings:
      category 1 Plumbing (limit 1), category 2 Cleaning (limit 2)
      service 1 Tap repair 60 min, 2 Pipe refit 90 min (plumbing)
      service 3 Deep clean 120 min (cleaning), 4 retired 60 min (inactive)
      60 min slots, no break, lead time off, every day 09:00-13:00
    """
    db_session.add_all([
        Categories(id=1, name="Plumbing", slug="plumbing"),
        Categories(id=2, name="Cleaning", slug="cleaning"),
        SubCategories(id=10, parent_id=1, name="Taps & pipes"),
        SubCategories(id=20, parent_id=2, name="Home cleaning"),
        Services(id=1, sub_category_id=10, name="Tap repair", duration_min=60),
        Services(id=2, sub_category_id=10, name="Pipe refit", duration_min=90),
        Services(id=3, sub_category_id=20, name="Deep clean", duration_min=120),
        Services(id=4, sub_category_id=10, name="Retired", duration_min=60, is_active=0),
        TimeSlotCategoryLimits(category_id=2, max_concurrent_bookings=2),
        SchedulingSettings(
            id=1,
            slot_interval_minutes=60,
            break_minutes=0,
            lead_time_enabled=0,
            lead_time_hours=0,
            max_days_to_scan=30,
        ),
    ])
    db_session.add_all([
        WeeklyAvailability(weekday=d, is_enabled=1, start_time="09:00", end_time="13:00")
        for d in range(7)
    ])
    db_session.commit()
    return db_session


@pytest.fixture
def fake_redis():
    return InMemoryRedis()


@pytest.fixture
def client(seeded_db, fake_redis):
    def _get_db():
        yield seeded_db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_redis] = lambda: fake_redis
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
