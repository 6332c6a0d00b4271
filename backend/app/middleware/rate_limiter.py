# backend/app/middleware/rate_limiter.py
"""
Sliding window rate limiting backed by Redis.

Each request adds a timestamped member to a sorted set keyed by client;
members older than the window are trimmed before counting. When Redis
cannot be reached the request is allowed and a warning is logged.
"""

import hashlib
import logging
import time
from typing import Optional, Tuple
from uuid import uuid4

from redis import Redis
from redis.exceptions import RedisError

from ..core.config import settings
from ..core.redis import get_redis_client

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Core rate limiting logic using sliding window algorithm.
    """

    def __init__(self, redis_client: Optional[Redis] = None):
        """
        Initialize rate limiter.

        Args:
            redis_client: Redis client (uses the shared client if not provided)
        """
        self.redis = redis_client if redis_client is not None else get_redis_client()
        self.enabled = settings.rate_limit_enabled

    def _get_cache_key(self, identifier: str, window_name: str) -> str:
        # Hash long identifiers to keep keys reasonable
        if len(identifier) > 32:
            identifier = hashlib.md5(identifier.encode()).hexdigest()[:16]

        return f"rate_limit:{window_name}:{identifier}"

    def check_rate_limit(
        self, identifier: str, limit: int, window_seconds: int, window_name: Optional[str] = None
    ) -> Tuple[bool, int, int]:
        """
        Check if request is within rate limit using sliding window.

        Args:
            identifier: Unique identifier for rate limiting
            limit: Maximum requests allowed
            window_seconds: Time window in seconds
            window_name: Optional name for the window (for cache key)

        Returns:
            Tuple of (allowed, requests_made, retry_after_seconds)
        """
        if not self.enabled:
            return True, 0, 0

        if self.redis is None:
            logger.warning("Rate limiting bypassed - Redis not configured")
            return True, 0, 0

        window_name = window_name or f"{limit}per{window_seconds}s"
        cache_key = self._get_cache_key(identifier, window_name)

        try:
            pipe = self.redis.pipeline()

            now = time.time()
            window_start = now - window_seconds
            # Unique member so requests sharing a timestamp are each counted
            member = f"{now}:{uuid4().hex}"

            pipe.zremrangebyscore(cache_key, 0, window_start)
            pipe.zcard(cache_key)
            pipe.zadd(cache_key, {member: now})
            pipe.expire(cache_key, window_seconds + 60)

            results = pipe.execute()

            # Count before the current request was added
            requests_in_window = int(results[1])

            if requests_in_window >= limit:
                oldest = self.redis.zrange(cache_key, 0, 0, withscores=True)
                if oldest:
                    retry_after = max(1, int(oldest[0][1] + window_seconds - now))
                else:
                    retry_after = window_seconds

                # Rejected requests do not count against the window
                self.redis.zrem(cache_key, member)

                return False, requests_in_window, retry_after

            return True, requests_in_window + 1, 0

        except (RedisError, OSError) as e:
            logger.warning(f"Rate limiting bypassed - Redis unavailable: {e}")
            return True, 0, 0
