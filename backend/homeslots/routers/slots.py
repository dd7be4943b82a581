# backend/homeslots/routers/slots.py
"""
Slots API endpoints.

POST /slots/day                      - Bookable slots for a cart (with day search)
GET  /slots/reschedule/{booking_id}  - Slots for moving an existing booking
"""

from datetime import date, datetime
from fastapi import APIRouter, Depends, HTTPException, Query
from redis import Redis
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..redis_client import get_redis
from ..schemas.slots import (
    RescheduleSlotsResponse,
    SlotOut,
    SlotsDayRequest,
    SlotsDayResponse,
)
from ..services.slots import (
    CartItem,
    SlotResult,
    build_cart_requirement,
    compute_reschedule_slots,
    compute_slots,
    find_next_available_day,
)
from ..services.slots.sources import (
    get_existing_booking,
    list_bookings_for_date,
    load_catalog,
    load_scheduling_config,
)


router = APIRouter(prefix="/slots", tags=["slots"])


def _slots_out(slots: list[SlotResult]) -> list[SlotOut]:
    return [SlotOut(time=s.start_time, remaining_capacity=s.remaining_capacity) for s in slots]


@router.post("/day", response_model=SlotsDayResponse)
def get_slots_day(
    data: SlotsDayRequest,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    """Get bookable time slots for a cart on a day, optionally searching forward."""
    if data.date < date.today():
        raise HTTPException(status_code=400, detail="Date cannot be in the past")

    config = load_scheduling_config(db, redis, settings.config_cache_ttl_seconds)

    items = [CartItem(service_id=i.service_id, quantity=i.quantity) for i in data.items]
    requirement = build_cart_requirement(
        items,
        load_catalog(db, [i.service_id for i in items], active_only=True),
    )
    catalog = load_catalog(db)
    now = datetime.now()

    if data.find_next_available:
        result = find_next_available_day(
            data.date,
            requirement,
            lambda day: list_bookings_for_date(db, day),
            config.weekly_availability,
            config.policy,
            config.category_limits,
            catalog,
            now=now,
        )
        return SlotsDayResponse(
            requested_date=data.date,
            slot_date=result.slot_date,
            status="available" if result.found else "scan_exhausted",
            shifted=result.shifted,
            notice=result.notice,
            slots=_slots_out(result.slots),
            slot_interval_minutes=config.policy.slot_interval_minutes,
            required_duration_minutes=requirement.max_duration,
        )

    slots = compute_slots(
        data.date,
        requirement,
        list_bookings_for_date(db, data.date),
        config.weekly_availability,
        config.policy,
        config.category_limits,
        catalog,
        now=now,
    )
    return SlotsDayResponse(
        requested_date=data.date,
        slot_date=data.date,
        status="available" if slots else "no_availability",
        slots=_slots_out(slots),
        slot_interval_minutes=config.policy.slot_interval_minutes,
        required_duration_minutes=requirement.max_duration,
    )


@router.get("/reschedule/{booking_id}", response_model=RescheduleSlotsResponse)
def get_reschedule_slots(
    booking_id: int,
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    """Get slots an existing booking can be moved to (admin)."""
    booking = get_existing_booking(db, booking_id)
    if not booking.is_active:
        raise HTTPException(status_code=409, detail="Booking is cancelled")

    config = load_scheduling_config(db, redis, settings.config_cache_ttl_seconds)
    slots = compute_reschedule_slots(
        booking,
        target_date,
        list_bookings_for_date(db, target_date),
        config,
        load_catalog(db),
    )

    return RescheduleSlotsResponse(
        booking_id=booking_id,
        date=target_date,
        current_date=booking.date,
        current_time=booking.start_time,
        slots=_slots_out(slots),
    )
