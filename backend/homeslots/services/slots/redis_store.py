"""
Redis storage for the scheduling configuration snapshot.

Key format: sched:config
Value: JSON of SchedulingConfig.to_dict(), with TTL.

Redis is an accelerator only: any Redis failure is logged and the caller
falls back to the database.
"""

import json
import logging
from redis import Redis
from redis.exceptions import RedisError

from .config import SchedulingConfig

logger = logging.getLogger(__name__)


class SchedulingConfigStore:
    """Redis wrapper for the cached configuration snapshot."""

    KEY = "sched:config"

    def __init__(self, redis: Redis, ttl_seconds: int = 300):
        self.redis = redis
        self.ttl_seconds = ttl_seconds

    # ── Read ─────────────────────────────────────────────────────────────

    def get(self) -> SchedulingConfig | None:
        """
        Get cached snapshot.

        Returns:
            SchedulingConfig, or None on cache miss / unreadable entry.
        """
        try:
            raw = self.redis.get(self.KEY)
        except RedisError as e:
            logger.warning(f"Config cache read failed: {e}")
            return None

        if raw is None:
            return None

        if isinstance(raw, bytes):
            raw = raw.decode()
        try:
            return SchedulingConfig.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Discarding malformed config cache entry: {e}")
            return None

    # ── Write ────────────────────────────────────────────────────────────

    def store(self, config: SchedulingConfig) -> None:
        try:
            self.redis.set(self.KEY, json.dumps(config.to_dict()), ex=self.ttl_seconds)
        except RedisError as e:
            logger.warning(f"Config cache write failed: {e}")

    # ── Delete ───────────────────────────────────────────────────────────

    def delete(self) -> int:
        """
        Drop the cached snapshot.

        Returns:
            Number of deleted keys (0 when absent or Redis is down).
        """
        try:
            return self.redis.delete(self.KEY)
        except RedisError as e:
            logger.warning(f"Config cache invalidation failed: {e}")
            return 0
