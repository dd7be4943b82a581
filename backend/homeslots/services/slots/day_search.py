"""
Day search: when the requested day has no slots, move forward one day at a
time (bounded by max_days_to_scan) and return the first day with slots.
"""

import logging
from collections.abc import Callable, Hashable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum

from .calculator import compute_slots
from .config import AvailabilityWindow, SchedulingPolicy
from .models import CartRequirement, ExistingBooking, ServiceDurationInfo, SlotResult

logger = logging.getLogger(__name__)

BookingSource = Callable[[date], list[ExistingBooking]]


class DaySearchStatus(str, Enum):
    FOUND = "found"
    SCAN_EXHAUSTED = "scan_exhausted"


@dataclass(frozen=True)
class DaySearchResult:
    status: DaySearchStatus
    requested_date: date
    slot_date: date | None = None
    slots: list[SlotResult] = field(default_factory=list)
    days_scanned: int = 0

    @property
    def found(self) -> bool:
        return self.status is DaySearchStatus.FOUND

    @property
    def shifted(self) -> bool:
        """True when the slots belong to a later day than requested."""
        return self.found and self.slot_date != self.requested_date

    @property
    def notice(self) -> str | None:
        """User-facing message when the requested day was silently advanced."""
        if not self.shifted:
            return None
        return (
            f"No slots available on {_format_day(self.requested_date)}. "
            f"Showing first available slots for {_format_day(self.slot_date)}."
        )


def find_next_available_day(
    start_date: date,
    requirement: CartRequirement,
    booking_source: BookingSource,
    weekly_availability: Mapping[int, AvailabilityWindow],
    policy: SchedulingPolicy,
    category_limits: Mapping[Hashable, int],
    catalog: Mapping[Hashable, ServiceDurationInfo],
    max_days_to_scan: int | None = None,
    now: datetime | None = None,
) -> DaySearchResult:
    """
    Find the first day, starting at start_date, that has bookable slots.

    start_date is checked first, then up to max_days_to_scan following
    days (policy.max_days_to_scan when not given).

    Returns:
        DaySearchResult with status FOUND or SCAN_EXHAUSTED.
    """
    days_ahead = policy.max_days_to_scan if max_days_to_scan is None else max_days_to_scan
    if days_ahead < 0:
        raise ValueError(f"max_days_to_scan must be >= 0, got {days_ahead}")

    # One clock reading for the whole scan
    now = now or datetime.now()

    for offset in range(days_ahead + 1):
        day = start_date + timedelta(days=offset)

        window = weekly_availability.get(day.weekday())
        if window is None or not window.is_enabled:
            # Closed day: no need to hit the booking ledger
            continue

        slots = compute_slots(
            day,
            requirement,
            booking_source(day),
            weekly_availability,
            policy,
            category_limits,
            catalog,
            now=now,
        )
        if slots:
            if offset:
                logger.info(f"No slots on {start_date}, advanced {offset} day(s) to {day}")
            return DaySearchResult(
                status=DaySearchStatus.FOUND,
                requested_date=start_date,
                slot_date=day,
                slots=slots,
                days_scanned=offset + 1,
            )

    logger.info(f"Day search exhausted: no slots from {start_date} within {days_ahead} day(s)")
    return DaySearchResult(
        status=DaySearchStatus.SCAN_EXHAUSTED,
        requested_date=start_date,
        days_scanned=days_ahead + 1,
    )


def _format_day(day: date) -> str:
    # e.g. "Monday, 19 October"
    return f"{day:%A}, {day.day} {day:%B}"
