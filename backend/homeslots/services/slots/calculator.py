"""
Slot capacity engine.

Given a date, a cart requirement, the day's existing bookings and the
configuration snapshot, produces the bookable start times with the
remaining per-category capacity of each.

Pure: no I/O, no writes. All inputs are pre-fetched by the caller.

Occupancy is tracked in buckets of slot_interval_minutes, keyed by the
bucket's start minute on the grid anchored at the window start:

    window 09:00, interval 60 → buckets 540, 600, 660, ...
    booking 10:00, 70 min     → buckets 600, 660

Each bucket holds a Counter of bookings per category. A booking that
touches two categories counts once in each.
"""

import logging
from collections import Counter, defaultdict
from collections.abc import Hashable, Iterable, Mapping
from datetime import date, datetime, timedelta

from .config import (
    DEFAULT_CATEGORY_LIMIT,
    AvailabilityWindow,
    SchedulingPolicy,
    minutes_to_time_str,
    time_str_to_minutes,
)
from .errors import CatalogLookupMissing
from .models import CartRequirement, ExistingBooking, ServiceDurationInfo, SlotResult

logger = logging.getLogger(__name__)


def compute_slots(
    target_date: date,
    requirement: CartRequirement,
    existing_bookings: Iterable[ExistingBooking],
    weekly_availability: Mapping[int, AvailabilityWindow],
    policy: SchedulingPolicy,
    category_limits: Mapping[Hashable, int],
    catalog: Mapping[Hashable, ServiceDurationInfo],
    now: datetime | None = None,
) -> list[SlotResult]:
    """
    Calculate bookable slots for a cart on a specific date.

    Returns:
        SlotResult list ordered by start time. Empty list = no availability.
    """
    # Step 1: Business hours for the weekday
    window = weekly_availability.get(target_date.weekday())
    if window is None or not window.is_enabled:
        return []

    # Step 2: Earliest bookable instant, rounded up to the whole minute
    earliest = (now or datetime.now()) + timedelta(hours=policy.effective_lead_time_hours)
    if earliest.second or earliest.microsecond:
        earliest = earliest.replace(second=0, microsecond=0) + timedelta(minutes=1)

    start_min = window.start_minutes
    end_min = window.end_minutes
    step = policy.slot_interval_minutes

    # Step 3: Occupancy from existing bookings
    occupancy = build_occupancy(existing_bookings, target_date, policy, catalog, start_min)

    # Step 4: Walk candidates at the slot cadence
    required_buckets = policy.buckets_for(requirement.max_duration)
    categories = requirement.categories
    day_start = datetime.combine(target_date, datetime.min.time())

    slots: list[SlotResult] = []
    for t in range(start_min, end_min, policy.cadence_minutes):
        if day_start + timedelta(minutes=t) < earliest:
            continue

        if t + requirement.max_duration > end_min:
            continue

        remaining = _remaining_capacity(
            occupancy,
            first_bucket=align_to_bucket(t, start_min, step),
            bucket_count=required_buckets,
            step=step,
            categories=categories,
            category_limits=category_limits,
        )
        if remaining is not None:
            slots.append(SlotResult(start_time=minutes_to_time_str(t), remaining_capacity=remaining))

    return slots


def build_occupancy(
    bookings: Iterable[ExistingBooking],
    target_date: date,
    policy: SchedulingPolicy,
    catalog: Mapping[Hashable, ServiceDurationInfo],
    anchor_minutes: int,
) -> dict[int, Counter]:
    """
    Count active bookings per (bucket, category) for one day.

    Returns:
        Dict mapping bucket start minute → Counter(category_id → bookings).
    """
    occupancy: dict[int, Counter] = defaultdict(Counter)
    step = policy.slot_interval_minutes

    for booking in bookings:
        if not booking.is_active or booking.date != target_date:
            continue

        try:
            start_min = time_str_to_minutes(booking.start_time)
        except ValueError:
            logger.warning(
                f"Skipping booking {booking.booking_id}: unparseable start time {booking.start_time!r}"
            )
            continue

        total_min, categories = booking_footprint(booking, catalog)
        if not categories:
            continue

        first = align_to_bucket(start_min, anchor_minutes, step)
        for i in range(policy.buckets_for(total_min)):
            bucket = occupancy[first + i * step]
            for category_id in categories:
                bucket[category_id] += 1

    return occupancy


def booking_footprint(
    booking: ExistingBooking,
    catalog: Mapping[Hashable, ServiceDurationInfo],
    strict: bool = False,
) -> tuple[int, set]:
    """
    Total duration and touched categories of a booking.

    Items whose service is no longer in the catalog are skipped with a
    warning, unless strict=True, in which case CatalogLookupMissing is raised.
    """
    total_min = 0
    categories: set = set()
    for item in booking.items:
        info = catalog.get(item.service_id)
        if info is None:
            if strict:
                raise CatalogLookupMissing(item.service_id)
            logger.warning(
                f"Booking {booking.booking_id}: service {item.service_id} not in catalog, item ignored"
            )
            continue
        total_min += info.duration_minutes * item.quantity
        categories.add(info.category_id)
    return total_min, categories


def align_to_bucket(minutes: int, anchor_minutes: int, step: int) -> int:
    """Start minute of the bucket containing `minutes` (grid anchored at anchor_minutes)."""
    return anchor_minutes + ((minutes - anchor_minutes) // step) * step


def find_slot(slots: Iterable[SlotResult], time_str: str) -> SlotResult | None:
    """Find the slot starting at time_str ("HH:MM" or "hh:mm AM/PM")."""
    wanted = time_str_to_minutes(time_str)
    for slot in slots:
        if time_str_to_minutes(slot.start_time) == wanted:
            return slot
    return None


def _remaining_capacity(
    occupancy: Mapping[int, Counter],
    first_bucket: int,
    bucket_count: int,
    step: int,
    categories: list,
    category_limits: Mapping[Hashable, int],
) -> int | None:
    """
    Minimum (limit − occupancy) over the candidate's buckets and the cart's
    categories, or None as soon as any pair has no capacity left.
    """
    remaining: int | None = None
    for i in range(bucket_count):
        counts = occupancy.get(first_bucket + i * step)
        for category_id in categories:
            limit = category_limits.get(category_id, DEFAULT_CATEGORY_LIMIT)
            used = counts[category_id] if counts else 0
            free = limit - used
            if free <= 0:
                return None
            remaining = free if remaining is None else min(remaining, free)
    return remaining
