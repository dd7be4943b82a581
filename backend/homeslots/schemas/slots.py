# backend/homeslots/schemas/slots.py
"""
Pydantic schemas for slots API.
"""

from datetime import date
from typing import Literal, Optional
from pydantic import BaseModel, Field


class CartItemIn(BaseModel):
    """One cart line."""
    service_id: int
    quantity: int = Field(1, ge=1)


class SlotsDayRequest(BaseModel):
    """Request for bookable slots of a cart on a day."""
    date: date
    items: list[CartItemIn] = Field(min_length=1)
    find_next_available: bool = Field(
        True,
        description="When the day has no slots, return the first later day that has some",
    )


class SlotOut(BaseModel):
    """A single bookable start time."""
    time: str  # "HH:MM"
    remaining_capacity: int

    model_config = {"from_attributes": True}


class SlotsDayResponse(BaseModel):
    """Bookable slots for a cart."""
    requested_date: date
    slot_date: Optional[date] = None  # day the slots belong to; None when nothing was found
    status: Literal["available", "no_availability", "scan_exhausted"]
    shifted: bool = False
    notice: Optional[str] = None
    slots: list[SlotOut]

    # Metadata
    slot_interval_minutes: int
    required_duration_minutes: int


class RescheduleSlotsResponse(BaseModel):
    """Slots available for moving an existing booking."""
    booking_id: int
    date: date
    current_date: date
    current_time: str
    slots: list[SlotOut]
