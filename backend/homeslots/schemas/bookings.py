# backend/homeslots/schemas/bookings.py

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from ..services.slots.config import minutes_to_time_str, time_str_to_minutes
from .slots import CartItemIn


def _normalize_time(v: str) -> str:
    try:
        return minutes_to_time_str(time_str_to_minutes(v))
    except ValueError:
        raise ValueError("Time must be in HH:MM format")


class BookingCreate(BaseModel):
    date: date
    time: str = Field(description="Start time in HH:MM format")
    items: list[CartItemIn] = Field(min_length=1)

    client_id: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        """Validate time and normalize to HH:MM."""
        return _normalize_time(v)


class BookingReschedule(BaseModel):
    date: date
    time: str = Field(description="New start time in HH:MM format")

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        """Validate time and normalize to HH:MM."""
        return _normalize_time(v)


class BookingItemRead(BaseModel):
    service_id: int
    quantity: int

    model_config = {"from_attributes": True}


class BookingRead(BaseModel):
    id: int

    scheduled_date: str
    scheduled_time_slot: str
    status: str

    client_id: Optional[str] = None
    notes: Optional[str] = None
    items: list[BookingItemRead]

    created_at: str
    updated_at: str

    model_config = {"from_attributes": True}
