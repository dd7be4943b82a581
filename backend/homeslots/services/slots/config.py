"""
Scheduling configuration for slots calculation.

One SchedulingConfig snapshot is read per request and treated as immutable
for the whole computation.
"""

import re
from dataclasses import dataclass, field
from functools import lru_cache
from math import ceil


WEEKDAY_NAMES = (
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
)

# Limit applied to a category with no explicit TimeSlotCategoryLimits row
DEFAULT_CATEGORY_LIMIT = 1

_TIME_12H = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AaPp][Mm])\s*$")
_TIME_24H = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")


def time_str_to_minutes(time_str: str) -> int:
    """
    Convert a wall-clock string to minutes since midnight.

    Accepts "HH:MM" (24h, "24:00" allowed as end of day) and the legacy
    "hh:mm AM/PM" form found on older booking records.
    """
    match = _TIME_12H.match(time_str or "")
    if match:
        hours, minutes = int(match.group(1)), int(match.group(2))
        period = match.group(3).upper()
        if not 1 <= hours <= 12 or minutes > 59:
            raise ValueError(f"Invalid time: {time_str!r}")
        if period == "PM" and hours < 12:
            hours += 12
        if period == "AM" and hours == 12:
            hours = 0
        return hours * 60 + minutes

    match = _TIME_24H.match(time_str or "")
    if not match:
        raise ValueError(f"Invalid time: {time_str!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes > 59 or hours > 24 or (hours == 24 and minutes):
        raise ValueError(f"Invalid time: {time_str!r}")
    return hours * 60 + minutes


def minutes_to_time_str(total_minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM"."""
    return f"{total_minutes // 60:02d}:{total_minutes % 60:02d}"


@dataclass(frozen=True)
class SchedulingPolicy:
    """
    Slot grid and booking-window policy.

    Attributes:
        slot_interval_minutes: Bucket size; bookings occupy whole buckets
        break_minutes: Gap added between consecutive candidate start times
        lead_time_enabled: Whether lead_time_hours applies
        lead_time_hours: Minimum delay between now and the earliest slot
        max_days_to_scan: Day search bound when a day has no slots
    """
    slot_interval_minutes: int = 60
    break_minutes: int = 15
    lead_time_enabled: bool = False
    lead_time_hours: int = 4
    max_days_to_scan: int = 30

    def __post_init__(self):
        """Validate policy."""
        if self.slot_interval_minutes <= 0:
            raise ValueError(
                f"slot_interval_minutes must be positive, got {self.slot_interval_minutes}"
            )
        if self.break_minutes < 0:
            raise ValueError(f"break_minutes must be >= 0, got {self.break_minutes}")
        if self.lead_time_hours < 0:
            raise ValueError(f"lead_time_hours must be >= 0, got {self.lead_time_hours}")
        if self.max_days_to_scan < 0:
            raise ValueError(f"max_days_to_scan must be >= 0, got {self.max_days_to_scan}")

    @property
    def cadence_minutes(self) -> int:
        """Spacing between consecutive candidate start times."""
        return self.slot_interval_minutes + self.break_minutes

    @property
    def effective_lead_time_hours(self) -> int:
        return self.lead_time_hours if self.lead_time_enabled else 0

    def buckets_for(self, duration_minutes: int) -> int:
        """
        Number of buckets a duration occupies (always rounded up, min 1).

        - 60 min @ 60 → 1
        - 70 min @ 60 → 2
        - 0 min       → 1
        """
        return max(1, ceil(duration_minutes / self.slot_interval_minutes))


@dataclass(frozen=True)
class AvailabilityWindow:
    """Business hours for one weekday (0 = Monday)."""
    weekday: int
    is_enabled: bool
    start_time: str
    end_time: str

    @property
    def start_minutes(self) -> int:
        return time_str_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return time_str_to_minutes(self.end_time)


DEFAULT_WEEKLY_AVAILABILITY = {
    0: AvailabilityWindow(0, True, "09:00", "17:00"),
    1: AvailabilityWindow(1, True, "09:00", "17:00"),
    2: AvailabilityWindow(2, True, "09:00", "17:00"),
    3: AvailabilityWindow(3, True, "09:00", "17:00"),
    4: AvailabilityWindow(4, True, "09:00", "17:00"),
    5: AvailabilityWindow(5, True, "10:00", "14:00"),
    6: AvailabilityWindow(6, True, "10:00", "14:00"),
}


@dataclass(frozen=True)
class SchedulingConfig:
    """Configuration snapshot: weekly hours, slot policy, per-category limits."""
    weekly_availability: dict[int, AvailabilityWindow] = field(
        default_factory=lambda: dict(DEFAULT_WEEKLY_AVAILABILITY)
    )
    policy: SchedulingPolicy = field(default_factory=SchedulingPolicy)
    category_limits: dict = field(default_factory=dict)

    # ── Serialization (Redis snapshot) ──────────────────────────────────

    def to_dict(self) -> dict:
        return {
            "weekly_availability": [
                {
                    "weekday": w.weekday,
                    "is_enabled": w.is_enabled,
                    "start_time": w.start_time,
                    "end_time": w.end_time,
                }
                for w in sorted(self.weekly_availability.values(), key=lambda w: w.weekday)
            ],
            "policy": {
                "slot_interval_minutes": self.policy.slot_interval_minutes,
                "break_minutes": self.policy.break_minutes,
                "lead_time_enabled": self.policy.lead_time_enabled,
                "lead_time_hours": self.policy.lead_time_hours,
                "max_days_to_scan": self.policy.max_days_to_scan,
            },
            # list of pairs: JSON object keys would turn integer ids into strings
            "category_limits": [
                [category_id, limit] for category_id, limit in self.category_limits.items()
            ],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SchedulingConfig":
        windows = {
            int(w["weekday"]): AvailabilityWindow(
                weekday=int(w["weekday"]),
                is_enabled=bool(w["is_enabled"]),
                start_time=w["start_time"],
                end_time=w["end_time"],
            )
            for w in data.get("weekly_availability", [])
        }
        return cls(
            weekly_availability=windows,
            policy=SchedulingPolicy(**data.get("policy", {})),
            category_limits={
                category_id: int(limit)
                for category_id, limit in data.get("category_limits", [])
            },
        )


@lru_cache
def get_default_scheduling_config() -> SchedulingConfig:
    """
    Configuration used when nothing has been saved yet.

    Mirrors the marketplace defaults: 60 min slots with a 15 min break,
    Mon-Fri 09:00-17:00, weekends 10:00-14:00, lead time off.
    """
    return SchedulingConfig()
