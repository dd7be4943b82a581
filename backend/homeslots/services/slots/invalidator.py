"""
Cache invalidation for the scheduling configuration snapshot.

Triggers:
✓ Slot policy or weekly availability saved
✓ Category limit created/updated/deleted

Does NOT trigger:
✗ Booking created/rescheduled/cancelled (bookings are read per request)
✗ Catalog changes (catalog is read per request)
"""

from redis import Redis

from .redis_store import SchedulingConfigStore


def invalidate_scheduling_config(redis: Redis | None) -> int:
    """
    Invalidate the cached configuration snapshot.

    Returns:
        Number of deleted cache keys
    """
    if redis is None:
        return 0
    return SchedulingConfigStore(redis).delete()
