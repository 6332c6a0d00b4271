# backend/app/core/redis.py
"""
Shared Redis client.

Only the rate limiter uses Redis today. The client is created lazily and
connects on first use, so an unreachable server surfaces as a RedisError
at call time rather than at import.
"""

import logging
from typing import Optional

from redis import Redis

from app.core.config import settings

logger = logging.getLogger(__name__)

_redis_client: Optional[Redis] = None


def get_redis_client() -> Optional[Redis]:
    """
    Get or create the Redis client.

    Returns:
        Redis client, or None when REDIS_URL is not configured
    """
    global _redis_client

    if not settings.redis_url:
        return None

    if _redis_client is None:
        _redis_client = Redis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_connect_timeout=1,
            socket_timeout=1,
        )
        logger.info("[REDIS] Client initialized")

    return _redis_client


def close_redis_client() -> None:
    """Close the Redis client gracefully."""
    global _redis_client

    if _redis_client is not None:
        _redis_client.close()
        _redis_client = None
        logger.info("[REDIS] Client closed")
