"""
Scheduling error taxonomy.

Empty results (no slots on a day, day search exhausted) are NOT errors:
they are returned as values and callers branch on them.
"""


class SchedulingError(Exception):
    """Base class for scheduling failures."""


class ConfigurationUnavailable(SchedulingError):
    """Scheduling configuration could not be read."""

    def __init__(self, reason: str = "Scheduling configuration could not be loaded"):
        super().__init__(reason)
        self.reason = reason


class CatalogLookupMissing(SchedulingError):
    """A requested service no longer exists in the catalog."""

    def __init__(self, service_id):
        super().__init__(f"Service {service_id} is not available in the catalog")
        self.service_id = service_id


class BookingNotFound(SchedulingError):
    def __init__(self, booking_id):
        super().__init__(f"Booking {booking_id} not found")
        self.booking_id = booking_id


class SlotUnavailable(SchedulingError):
    """The slot was offered at read time but is no longer free at commit time."""

    def __init__(self, target_date, time_str: str):
        super().__init__(f"Slot {target_date} {time_str} is no longer available")
        self.target_date = target_date
        self.time_str = time_str


class BookingCancelled(SchedulingError):
    """A cancelled booking cannot be moved."""

    def __init__(self, booking_id):
        super().__init__(f"Booking {booking_id} is cancelled")
        self.booking_id = booking_id
