"""
Reschedule path: slots for moving an existing booking.

Same engine, same rules (weekly hours, lead time, per-category limits);
only the inputs differ:
- the requirement comes from the booking itself, reduced to one
  representative duration (its total, as counted in occupancy);
- the booking is removed from the target day's bookings so it never
  blocks its own move.
"""

from collections.abc import Hashable, Iterable, Mapping
from datetime import date, datetime

from .calculator import booking_footprint, compute_slots, find_slot
from .config import SchedulingConfig
from .models import CartRequirement, ExistingBooking, ServiceDurationInfo, SlotResult


def reschedule_requirement(
    booking: ExistingBooking,
    catalog: Mapping[Hashable, ServiceDurationInfo],
) -> CartRequirement:
    """
    Build the requirement for moving a booking.

    Raises:
        CatalogLookupMissing: one of the booking's services is gone
        ValueError: the booking has no items
    """
    total_min, categories = booking_footprint(booking, catalog, strict=True)
    if not categories:
        raise ValueError(f"Booking {booking.booking_id} has no items")
    return CartRequirement(
        durations={category_id: total_min for category_id in categories},
        max_duration=total_min,
    )


def exclude_booking(
    bookings: Iterable[ExistingBooking],
    booking_id: Hashable,
) -> list[ExistingBooking]:
    return [b for b in bookings if b.booking_id != booking_id]


def compute_reschedule_slots(
    booking: ExistingBooking,
    target_date: date,
    existing_bookings: Iterable[ExistingBooking],
    config: SchedulingConfig,
    catalog: Mapping[Hashable, ServiceDurationInfo],
    now: datetime | None = None,
) -> list[SlotResult]:
    """Bookable slots on target_date for moving `booking`."""
    requirement = reschedule_requirement(booking, catalog)
    return compute_slots(
        target_date,
        requirement,
        exclude_booking(existing_bookings, booking.booking_id),
        config.weekly_availability,
        config.policy,
        config.category_limits,
        catalog,
        now=now,
    )


def is_reschedule_slot_available(
    booking: ExistingBooking,
    target_date: date,
    time_str: str,
    existing_bookings: Iterable[ExistingBooking],
    config: SchedulingConfig,
    catalog: Mapping[Hashable, ServiceDurationInfo],
    now: datetime | None = None,
) -> bool:
    slots = compute_reschedule_slots(booking, target_date, existing_bookings, config, catalog, now)
    return find_slot(slots, time_str) is not None
