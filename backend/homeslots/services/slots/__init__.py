"""
Appointment slot scheduling.

Engine (pure): calculator.compute_slots
Day search:    day_search.find_next_available_day
Reschedule:    reschedule.compute_reschedule_slots
Collaborators: sources (database), redis_store (config snapshot cache)
"""

from .config import (
    AvailabilityWindow,
    SchedulingConfig,
    SchedulingPolicy,
    get_default_scheduling_config,
)
from .models import (
    BookingItem,
    CartItem,
    CartRequirement,
    ExistingBooking,
    ServiceDurationInfo,
    SlotResult,
    build_cart_requirement,
)
from .errors import (
    BookingCancelled,
    BookingNotFound,
    CatalogLookupMissing,
    ConfigurationUnavailable,
    SchedulingError,
    SlotUnavailable,
)
from .calculator import compute_slots, find_slot
from .day_search import DaySearchResult, DaySearchStatus, find_next_available_day
from .reschedule import compute_reschedule_slots, is_reschedule_slot_available
from .invalidator import invalidate_scheduling_config

__all__ = [
    "AvailabilityWindow",
    "SchedulingConfig",
    "SchedulingPolicy",
    "get_default_scheduling_config",
    "BookingItem",
    "CartItem",
    "CartRequirement",
    "ExistingBooking",
    "ServiceDurationInfo",
    "SlotResult",
    "build_cart_requirement",
    "BookingCancelled",
    "BookingNotFound",
    "CatalogLookupMissing",
    "ConfigurationUnavailable",
    "SchedulingError",
    "SlotUnavailable",
    "compute_slots",
    "find_slot",
    "DaySearchResult",
    "DaySearchStatus",
    "find_next_available_day",
    "compute_reschedule_slots",
    "is_reschedule_slot_available",
    "invalidate_scheduling_config",
]
