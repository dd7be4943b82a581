"""
In-memory inputs and outputs of the slot engine.

All of these are built fresh for one scheduling request and never persisted.
"""

from dataclasses import dataclass, field
from datetime import date
from collections.abc import Hashable, Iterable, Mapping

from .errors import CatalogLookupMissing


INACTIVE_BOOKING_STATUSES = frozenset({"cancelled"})


@dataclass(frozen=True)
class ServiceDurationInfo:
    service_id: Hashable
    duration_minutes: int
    category_id: Hashable


@dataclass(frozen=True)
class CartItem:
    service_id: Hashable
    quantity: int = 1


@dataclass(frozen=True)
class CartRequirement:
    """
    What a cart needs from the schedule.

    Attributes:
        durations: category_id → total minutes required in that category
        max_duration: total minutes over every line; the booking occupies
            this many minutes in each of its categories once committed
    """
    durations: dict
    max_duration: int

    @property
    def categories(self) -> list:
        return list(self.durations)


@dataclass(frozen=True)
class BookingItem:
    service_id: Hashable
    quantity: int = 1


@dataclass(frozen=True)
class ExistingBooking:
    """Read-only snapshot of a booking on the target date."""
    booking_id: Hashable
    date: date
    start_time: str
    items: tuple[BookingItem, ...] = field(default_factory=tuple)
    status: str = "pending"

    @property
    def is_active(self) -> bool:
        return self.status.lower() not in INACTIVE_BOOKING_STATUSES


@dataclass(frozen=True)
class SlotResult:
    start_time: str  # "HH:MM"
    remaining_capacity: int


def build_cart_requirement(
    items: Iterable[CartItem],
    catalog: Mapping[Hashable, ServiceDurationInfo],
) -> CartRequirement:
    """
    Aggregate cart lines into per-category durations and the total length.

    Raises:
        CatalogLookupMissing: a cart service is not in the catalog
        ValueError: the cart is empty
    """
    durations: dict = {}
    total_min = 0
    for item in items:
        info = catalog.get(item.service_id)
        if info is None:
            raise CatalogLookupMissing(item.service_id)
        line_min = info.duration_minutes * item.quantity
        durations[info.category_id] = durations.get(info.category_id, 0) + line_min
        total_min += line_min

    if not durations:
        raise ValueError("Cart is empty")

    return CartRequirement(durations=durations, max_duration=total_min)
