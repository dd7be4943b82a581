"""
backend/homeslots/services/events.py

Booking notifications for the external notifier. This service only enqueues;
email and message delivery happen elsewhere.

Queue: events:p2p (Redis list, consumed FIFO)

Event types:
- booking_created      {booking_id, date, time}
- booking_rescheduled  {booking_id, was, now}
- booking_cancelled    {booking_id}
"""

import json
import logging
import time

from redis import Redis

from ..redis_client import redis_client

logger = logging.getLogger(__name__)

EVENTS_QUEUE = "events:p2p"


def build_event(event_type: str, payload: dict) -> dict:
    return {"type": event_type, **payload, "ts": int(time.time())}


def emit_event(event_type: str, payload: dict, redis: Redis | None = None) -> None:
    """
    Enqueue a booking event.

    Never raises: the booking is already committed when this runs, and a
    lost notification must not turn into a failed request.
    """
    client = redis if redis is not None else redis_client
    try:
        client.rpush(EVENTS_QUEUE, json.dumps(build_event(event_type, payload)))
    except Exception as e:
        logger.error(f"Failed to emit event {event_type}: {e}")
        return
    logger.info(f"Event emitted: {event_type} → {EVENTS_QUEUE}")
