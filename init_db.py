"""
Create the schema and seed default scheduling settings.

Usage:
    DATABASE_URL=sqlite:///./data/homeslots.db REDIS_URL=redis://localhost:6379/0 \
        python init_db.py
"""

import logging

from homeslots.database import SessionLocal, engine
from homeslots.models.generated import Base, SchedulingSettings, WeeklyAvailability
from homeslots.redis_client import redis_client
from homeslots.services.slots import get_default_scheduling_config, invalidate_scheduling_config
from homeslots.services.slots.sources import SETTINGS_ROW_ID

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def seed_defaults(db) -> bool:
    """Insert default settings rows if missing. Returns True when anything was added."""
    defaults = get_default_scheduling_config()
    changed = False

    if db.get(SchedulingSettings, SETTINGS_ROW_ID) is None:
        policy = defaults.policy
        db.add(SchedulingSettings(
            id=SETTINGS_ROW_ID,
            slot_interval_minutes=policy.slot_interval_minutes,
            break_minutes=policy.break_minutes,
            lead_time_enabled=int(policy.lead_time_enabled),
            lead_time_hours=policy.lead_time_hours,
            max_days_to_scan=policy.max_days_to_scan,
        ))
        changed = True

    present = {w.weekday for w in db.query(WeeklyAvailability).all()}
    for window in defaults.weekly_availability.values():
        if window.weekday in present:
            continue
        db.add(WeeklyAvailability(
            weekday=window.weekday,
            is_enabled=int(window.is_enabled),
            start_time=window.start_time,
            end_time=window.end_time,
        ))
        changed = True

    db.commit()
    return changed


def main():
    Base.metadata.create_all(bind=engine)
    logger.info("Schema ready")

    db = SessionLocal()
    try:
        if seed_defaults(db):
            logger.info("Default scheduling settings seeded")
            invalidate_scheduling_config(redis_client)
        else:
            logger.info("Scheduling settings already present")
    finally:
        db.close()


if __name__ == "__main__":
    main()
