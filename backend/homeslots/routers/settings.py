# backend/homeslots/routers/settings.py
"""
Scheduling settings (admin).

GET/PUT /settings/scheduling                    - Slot policy + weekly hours
GET     /settings/category-limits               - Per-category concurrency limits
PUT     /settings/category-limits/{category_id} - Create/update a limit
DELETE  /settings/category-limits/{category_id} - Back to the default limit (1)

Every write invalidates the cached configuration snapshot.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from redis import Redis
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..models.generated import (
    Categories as DBCategories,
    SchedulingSettings as DBSchedulingSettings,
    TimeSlotCategoryLimits as DBCategoryLimits,
    WeeklyAvailability as DBWeeklyAvailability,
)
from ..redis_client import get_redis
from ..schemas.settings import (
    AvailabilityWindowSchema,
    CategoryLimitRead,
    CategoryLimitUpdate,
    SchedulingSettingsSchema,
)
from ..services.slots import invalidate_scheduling_config
from ..services.slots.config import DEFAULT_CATEGORY_LIMIT
from ..services.slots.sources import SETTINGS_ROW_ID, load_scheduling_config

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


@router.get("/scheduling", response_model=SchedulingSettingsSchema)
def get_scheduling_settings(
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    config = load_scheduling_config(db, redis, settings.config_cache_ttl_seconds)
    policy = config.policy
    return SchedulingSettingsSchema(
        slot_interval_minutes=policy.slot_interval_minutes,
        break_minutes=policy.break_minutes,
        lead_time_enabled=policy.lead_time_enabled,
        lead_time_hours=policy.lead_time_hours,
        max_days_to_scan=policy.max_days_to_scan,
        weekly_availability=[
            AvailabilityWindowSchema(
                weekday=w.weekday,
                is_enabled=w.is_enabled,
                start_time=w.start_time,
                end_time=w.end_time,
            )
            for w in sorted(config.weekly_availability.values(), key=lambda w: w.weekday)
        ],
    )


@router.put("/scheduling", response_model=SchedulingSettingsSchema)
def update_scheduling_settings(
    data: SchedulingSettingsSchema,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    now_str = datetime.now().strftime(TIMESTAMP_FORMAT)

    row = db.get(DBSchedulingSettings, SETTINGS_ROW_ID)
    if row is None:
        row = DBSchedulingSettings(id=SETTINGS_ROW_ID)
        db.add(row)

    row.slot_interval_minutes = data.slot_interval_minutes
    row.break_minutes = data.break_minutes
    row.lead_time_enabled = int(data.lead_time_enabled)
    row.lead_time_hours = data.lead_time_hours
    row.max_days_to_scan = data.max_days_to_scan
    row.updated_at = now_str

    existing = {w.weekday: w for w in db.query(DBWeeklyAvailability).all()}
    for window in data.weekly_availability:
        obj = existing.get(window.weekday)
        if obj is None:
            obj = DBWeeklyAvailability(weekday=window.weekday)
            db.add(obj)
        obj.is_enabled = int(window.is_enabled)
        obj.start_time = window.start_time
        obj.end_time = window.end_time

    db.commit()
    invalidate_scheduling_config(redis)
    logger.info(
        f"Scheduling settings updated: interval={data.slot_interval_minutes}, "
        f"break={data.break_minutes}, lead_time={data.lead_time_enabled}/{data.lead_time_hours}h"
    )

    return get_scheduling_settings(db=db, redis=redis)


@router.get("/category-limits", response_model=list[CategoryLimitRead])
def list_category_limits(db: Session = Depends(get_db)):
    """All categories with their effective limit (default 1 when unset)."""
    rows = (
        db.query(DBCategories, DBCategoryLimits.max_concurrent_bookings)
        .outerjoin(DBCategoryLimits, DBCategoryLimits.category_id == DBCategories.id)
        .order_by(DBCategories.name)
        .all()
    )
    return [
        CategoryLimitRead(
            category_id=category.id,
            category_name=category.name,
            max_concurrent_bookings=limit if limit is not None else DEFAULT_CATEGORY_LIMIT,
        )
        for category, limit in rows
    ]


@router.put("/category-limits/{category_id}", response_model=CategoryLimitRead)
def set_category_limit(
    category_id: int,
    data: CategoryLimitUpdate,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    category = db.get(DBCategories, category_id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")

    obj = db.get(DBCategoryLimits, category_id)
    if obj is None:
        obj = DBCategoryLimits(category_id=category_id)
        db.add(obj)
    obj.max_concurrent_bookings = data.max_concurrent_bookings
    obj.updated_at = datetime.now().strftime(TIMESTAMP_FORMAT)

    db.commit()
    invalidate_scheduling_config(redis)
    logger.info(f"Category limit set: category_id={category_id}, limit={data.max_concurrent_bookings}")

    return CategoryLimitRead(
        category_id=category.id,
        category_name=category.name,
        max_concurrent_bookings=obj.max_concurrent_bookings,
    )


@router.delete("/category-limits/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category_limit(
    category_id: int,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    obj = db.get(DBCategoryLimits, category_id)
    if obj is None:
        raise HTTPException(status_code=404, detail="Not found")

    db.delete(obj)
    db.commit()
    invalidate_scheduling_config(redis)
    logger.info(f"Category limit removed: category_id={category_id}")
