"""Redis key that keeps a single discovery loop alive."""

import logging
from functools import lru_cache
from typing import Optional
from uuid import uuid4
import redis
from matheque.core.config import get_settings

logger = logging.getLogger(__name__)

LOOP_KEY = "matheque:discovery:loop"


class DiscoveryLoopLock:
    """
    Token of the one live discovery loop.

    Starting a loop writes a fresh token. A scheduled pass runs and re-arms
    only while its token is the current one, so a pass restored from an
    earlier worker's queue drops out instead of running beside the new loop.
    """

    def __init__(self, redis_url: Optional[str] = None, ttl_seconds: int = 1200, client: Optional[redis.Redis] = None):
        """
        Args:
            redis_url: Redis connection URL
            ttl_seconds: Lease length; refreshed by every pass that holds the token
            client: Ready Redis client, used instead of connecting to redis_url
        """
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self._redis = client

    def _get_redis(self) -> redis.Redis:
        if self._redis is None:
            self._redis = redis.Redis.from_url(self.redis_url, decode_responses=True)
        return self._redis

    def start(self) -> str:
        """Take over the loop with a new token, superseding any earlier one."""
        token = uuid4().hex
        self._get_redis().set(LOOP_KEY, token, ex=self.ttl_seconds)
        logger.info(f"Discovery loop token {token[:8]} issued")
        return token

    def holds(self, token: Optional[str]) -> bool:
        """Check that token is the current one and extend its lease."""
        if not token:
            return False
        client = self._get_redis()
        if client.get(LOOP_KEY) != token:
            return False
        client.expire(LOOP_KEY, self.ttl_seconds)
        return True


@lru_cache(maxsize=1)
def get_loop_lock() -> DiscoveryLoopLock:
    """Return the process-wide lock; the lease covers a long pass plus the wait before the next one."""
    settings = get_settings()
    return DiscoveryLoopLock(settings.REDIS_URL, ttl_seconds=settings.POLL_INTERVAL_MAX * 2 + 3600)
