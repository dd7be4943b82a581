# backend/homeslots/schemas/settings.py
"""
Pydantic schemas for the scheduling settings admin API.
"""

from pydantic import BaseModel, Field, field_validator, model_validator

from ..services.slots.config import WEEKDAY_NAMES, minutes_to_time_str, time_str_to_minutes


class AvailabilityWindowSchema(BaseModel):
    """Business hours for one weekday (0 = Monday)."""
    weekday: int = Field(ge=0, le=6)
    is_enabled: bool = True
    start_time: str = Field(description="HH:MM")
    end_time: str = Field(description="HH:MM")

    model_config = {"from_attributes": True}

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        """Validate time and normalize to HH:MM."""
        try:
            return minutes_to_time_str(time_str_to_minutes(v))
        except ValueError:
            raise ValueError("Time must be in HH:MM format")

    @model_validator(mode="after")
    def check_order(self):
        if self.is_enabled and time_str_to_minutes(self.end_time) <= time_str_to_minutes(self.start_time):
            raise ValueError(
                f"{WEEKDAY_NAMES[self.weekday]}: end_time must be after start_time"
            )
        return self


class SchedulingSettingsSchema(BaseModel):
    """Slot policy plus weekly availability."""
    slot_interval_minutes: int = Field(gt=0, le=24 * 60)
    break_minutes: int = Field(0, ge=0, le=24 * 60)
    lead_time_enabled: bool = False
    lead_time_hours: int = Field(0, ge=0)
    max_days_to_scan: int = Field(30, ge=1, le=366)
    weekly_availability: list[AvailabilityWindowSchema]

    @field_validator("weekly_availability")
    @classmethod
    def unique_weekdays(cls, v: list[AvailabilityWindowSchema]) -> list[AvailabilityWindowSchema]:
        weekdays = [w.weekday for w in v]
        if len(weekdays) != len(set(weekdays)):
            raise ValueError("Each weekday may appear only once")
        return sorted(v, key=lambda w: w.weekday)


class CategoryLimitUpdate(BaseModel):
    max_concurrent_bookings: int = Field(ge=1)


class CategoryLimitRead(BaseModel):
    category_id: int
    category_name: str
    max_concurrent_bookings: int
