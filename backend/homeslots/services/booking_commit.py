"""
backend/homeslots/services/booking_commit.py

Write path for bookings with the authoritative capacity check.

Slots shown to a customer are advisory: two customers can see the same
free bucket. Every write therefore re-reads the day's bookings and re-runs
the engine inside one write transaction, and only then inserts/updates.

SQLite: the transaction starts with BEGIN IMMEDIATE (see database.py),
so concurrent commits for any day serialize.
Other backends: the day's booking rows are read FOR UPDATE.
"""

import logging
from datetime import date, datetime

from redis import Redis
from sqlalchemy.orm import Session

from ..config import settings
from ..models.generated import BookingItems, Bookings
from .slots import (
    BookingCancelled,
    BookingNotFound,
    CartItem,
    SlotUnavailable,
    build_cart_requirement,
    compute_slots,
    find_slot,
    is_reschedule_slot_available,
)
from .slots.config import minutes_to_time_str, time_str_to_minutes
from .slots.sources import (
    list_bookings_for_date,
    load_catalog,
    load_scheduling_config,
    to_existing_booking,
)

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def _begin_write_transaction(db: Session) -> None:
    """Open the session's transaction with a write lock. Must run first."""
    if db.in_transaction():
        # A transaction autobegun by an earlier read would not hold the lock
        db.commit()
    db.connection(execution_options={"sqlite_begin": "IMMEDIATE"})


def commit_booking(
    db: Session,
    target_date: date,
    time_str: str,
    items: list[CartItem],
    client_id: str | None = None,
    notes: str | None = None,
    redis: Redis | None = None,
    now: datetime | None = None,
) -> Bookings:
    """
    Create a booking if (target_date, time_str) is still bookable for the cart.

    Raises:
        SlotUnavailable: capacity was taken since the slot was displayed
        CatalogLookupMissing: a cart service no longer exists
        ConfigurationUnavailable: configuration could not be read
    """
    _begin_write_transaction(db)
    try:
        config = load_scheduling_config(db, redis, settings.config_cache_ttl_seconds)
        requirement = build_cart_requirement(
            items,
            load_catalog(db, [item.service_id for item in items], active_only=True),
        )
        existing = list_bookings_for_date(db, target_date, for_update=True)

        slots = compute_slots(
            target_date,
            requirement,
            existing,
            config.weekly_availability,
            config.policy,
            config.category_limits,
            load_catalog(db),
            now=now,
        )
        slot = find_slot(slots, time_str)
        if slot is None:
            raise SlotUnavailable(target_date, time_str)

        booking = Bookings(
            scheduled_date=target_date.isoformat(),
            scheduled_time_slot=slot.start_time,
            status="pending",
            client_id=client_id,
            notes=notes,
        )
        booking.items = [
            BookingItems(service_id=item.service_id, quantity=item.quantity)
            for item in items
        ]
        db.add(booking)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(booking)
    logger.info(
        f"Booking created: booking_id={booking.id}, "
        f"time={booking.scheduled_date} {booking.scheduled_time_slot}, "
        f"remaining_capacity_before={slot.remaining_capacity}"
    )
    return booking


def reschedule_booking(
    db: Session,
    booking_id: int,
    target_date: date,
    time_str: str,
    redis: Redis | None = None,
    now: datetime | None = None,
) -> tuple[Bookings, str]:
    """
    Move a booking to (target_date, time_str).

    The booking does not count against itself on the target day.

    Returns:
        (updated booking, previous "YYYY-MM-DD HH:MM")

    Raises:
        BookingNotFound, BookingCancelled, SlotUnavailable,
        CatalogLookupMissing, ConfigurationUnavailable
    """
    _begin_write_transaction(db)
    try:
        row = db.get(Bookings, booking_id, with_for_update=True)
        if row is None:
            raise BookingNotFound(booking_id)
        if row.status == "cancelled":
            raise BookingCancelled(booking_id)

        booking = to_existing_booking(row)
        config = load_scheduling_config(db, redis, settings.config_cache_ttl_seconds)
        existing = list_bookings_for_date(db, target_date, for_update=True)

        if not is_reschedule_slot_available(
            booking,
            target_date,
            time_str,
            existing,
            config,
            load_catalog(db),
            now=now,
        ):
            raise SlotUnavailable(target_date, time_str)

        previous = f"{row.scheduled_date} {row.scheduled_time_slot}"
        row.scheduled_date = target_date.isoformat()
        row.scheduled_time_slot = minutes_to_time_str(time_str_to_minutes(time_str))
        row.updated_at = datetime.now().strftime(TIMESTAMP_FORMAT)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(row)
    logger.info(
        f"Booking rescheduled: booking_id={row.id}, "
        f"{previous} → {row.scheduled_date} {row.scheduled_time_slot}"
    )
    return row, previous


def cancel_booking(db: Session, booking_id: int) -> Bookings:
    """Cancel a booking; cancelled bookings stop occupying capacity."""
    row = db.get(Bookings, booking_id)
    if row is None:
        raise BookingNotFound(booking_id)

    if row.status != "cancelled":
        row.status = "cancelled"
        row.updated_at = datetime.now().strftime(TIMESTAMP_FORMAT)
        db.commit()
        db.refresh(row)
        logger.info(f"Booking cancelled: booking_id={row.id}")

    return row
