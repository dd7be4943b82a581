"""
Read contracts the engine consumes, backed by the database.

- Catalog lookup: service → (duration, owning category)
- Booking ledger: bookings on an exact date
- Scheduling configuration: weekly hours, policy, category limits
"""

import logging
from collections.abc import Iterable
from datetime import date

from redis import Redis
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from .config import (
    AvailabilityWindow,
    SchedulingConfig,
    SchedulingPolicy,
    get_default_scheduling_config,
)
from .errors import BookingNotFound, ConfigurationUnavailable
from .models import BookingItem, ExistingBooking, ServiceDurationInfo
from .redis_store import SchedulingConfigStore

logger = logging.getLogger(__name__)

SETTINGS_ROW_ID = 1


# ── Catalog ──────────────────────────────────────────────────────────────


def load_catalog(
    db: Session,
    service_ids: Iterable[int] | None = None,
    active_only: bool = False,
) -> dict[int, ServiceDurationInfo]:
    """
    Load service durations and owning categories.

    The owning category is the parent of the service's sub-category.
    Inactive services stay resolvable (active_only=False) so that existing
    bookings for them still occupy capacity.
    """
    from ...models.generated import Services, SubCategories

    query = (
        db.query(Services.id, Services.duration_min, SubCategories.parent_id)
        .join(SubCategories, Services.sub_category_id == SubCategories.id)
    )
    if service_ids is not None:
        query = query.filter(Services.id.in_(list(service_ids)))
    if active_only:
        query = query.filter(Services.is_active == 1)

    return {
        service_id: ServiceDurationInfo(
            service_id=service_id,
            duration_minutes=duration_min or 0,
            category_id=category_id,
        )
        for service_id, duration_min, category_id in query.all()
    }


# ── Booking ledger ───────────────────────────────────────────────────────


def list_bookings_for_date(
    db: Session,
    target_date: date,
    for_update: bool = False,
) -> list[ExistingBooking]:
    """
    Get active bookings whose scheduled date equals target_date.

    for_update=True locks the rows where the backend supports it
    (ignored by SQLite, which relies on BEGIN IMMEDIATE instead).
    """
    from ...models.generated import Bookings

    query = (
        db.query(Bookings)
        .options(selectinload(Bookings.items))
        .filter(
            Bookings.scheduled_date == target_date.isoformat(),
            Bookings.status != "cancelled",
        )
        .order_by(Bookings.id)
    )
    if for_update:
        query = query.with_for_update()

    return [to_existing_booking(row) for row in query.all()]


def get_existing_booking(db: Session, booking_id: int) -> ExistingBooking:
    from ...models.generated import Bookings

    row = db.get(Bookings, booking_id)
    if row is None:
        raise BookingNotFound(booking_id)
    return to_existing_booking(row)


def to_existing_booking(row) -> ExistingBooking:
    """Convert a Bookings row into the engine's read-only snapshot."""
    return ExistingBooking(
        booking_id=row.id,
        date=date.fromisoformat(row.scheduled_date),
        start_time=row.scheduled_time_slot,
        items=tuple(
            BookingItem(service_id=item.service_id, quantity=item.quantity)
            for item in row.items
        ),
        status=row.status,
    )


# ── Configuration ────────────────────────────────────────────────────────


def load_scheduling_config(
    db: Session,
    redis: Redis | None = None,
    cache_ttl_seconds: int = 300,
) -> SchedulingConfig:
    """
    Get the scheduling configuration snapshot, using Redis cache when available.

    Missing rows fall back to the defaults (unsaved settings, weekday
    without a row).

    Raises:
        ConfigurationUnavailable: the database could not be read
    """
    store = SchedulingConfigStore(redis, cache_ttl_seconds) if redis is not None else None
    if store is not None:
        cached = store.get()
        if cached is not None:
            return cached

    try:
        config = _read_scheduling_config(db)
    except SQLAlchemyError as e:
        logger.error(f"Failed to load scheduling configuration: {e}")
        raise ConfigurationUnavailable() from e

    if store is not None:
        store.store(config)
    return config


def _read_scheduling_config(db: Session) -> SchedulingConfig:
    from ...models.generated import (
        SchedulingSettings,
        TimeSlotCategoryLimits,
        WeeklyAvailability,
    )

    defaults = get_default_scheduling_config()

    row = db.get(SchedulingSettings, SETTINGS_ROW_ID)
    if row is None:
        policy = defaults.policy
    else:
        try:
            policy = SchedulingPolicy(
                slot_interval_minutes=row.slot_interval_minutes,
                break_minutes=row.break_minutes,
                lead_time_enabled=bool(row.lead_time_enabled),
                lead_time_hours=row.lead_time_hours,
                max_days_to_scan=row.max_days_to_scan,
            )
        except ValueError as e:
            raise ConfigurationUnavailable(f"Invalid scheduling settings: {e}") from e

    windows = dict(defaults.weekly_availability)
    for w in db.query(WeeklyAvailability).all():
        windows[w.weekday] = AvailabilityWindow(
            weekday=w.weekday,
            is_enabled=bool(w.is_enabled),
            start_time=w.start_time,
            end_time=w.end_time,
        )

    limits = {
        limit.category_id: limit.max_concurrent_bookings
        for limit in db.query(TimeSlotCategoryLimits).all()
    }

    return SchedulingConfig(weekly_availability=windows, policy=policy, category_limits=limits)
