# backend/homeslots/routers/bookings.py
# Writes go through services.booking_commit (capacity re-checked at commit time)

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from redis import Redis
from sqlalchemy.orm import Session, selectinload

from ..database import get_db
from ..models.generated import Bookings as DBBookings
from ..redis_client import get_redis
from ..schemas.bookings import (
    BookingCreate,
    BookingRead,
    BookingReschedule,
)
from ..services.booking_commit import cancel_booking, commit_booking, reschedule_booking
from ..services.events import emit_event
from ..services.slots import CartItem

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get("/", response_model=list[BookingRead])
def list_bookings(
    target_date: Optional[date] = Query(None, alias="date"),
    db: Session = Depends(get_db),
):
    query = db.query(DBBookings).options(selectinload(DBBookings.items))
    if target_date is not None:
        query = query.filter(DBBookings.scheduled_date == target_date.isoformat())
    return query.order_by(DBBookings.scheduled_date, DBBookings.scheduled_time_slot).all()


@router.get("/{id}", response_model=BookingRead)
def get_booking(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBBookings, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


@router.post("/", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    obj = commit_booking(
        db,
        target_date=data.date,
        time_str=data.time,
        items=[CartItem(service_id=i.service_id, quantity=i.quantity) for i in data.items],
        client_id=data.client_id,
        notes=data.notes,
        redis=redis,
    )

    emit_event("booking_created", {
        "booking_id": obj.id,
        "date": obj.scheduled_date,
        "time": obj.scheduled_time_slot,
    }, redis=redis)

    return obj


@router.post("/{id}/reschedule", response_model=BookingRead)
def reschedule(
    id: int,
    data: BookingReschedule,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    obj, previous = reschedule_booking(
        db,
        booking_id=id,
        target_date=data.date,
        time_str=data.time,
        redis=redis,
    )

    emit_event("booking_rescheduled", {
        "booking_id": obj.id,
        "was": previous,
        "now": f"{obj.scheduled_date} {obj.scheduled_time_slot}",
    }, redis=redis)

    return obj


@router.post("/{id}/cancel", response_model=BookingRead)
def cancel(
    id: int,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    obj = cancel_booking(db, id)

    emit_event("booking_cancelled", {"booking_id": obj.id}, redis=redis)

    return obj


@router.delete("/{id}")
def delete_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )
