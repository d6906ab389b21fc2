"""Redis connection and the JSON cache used for staff lookups."""

import json
from typing import Any, cast

import redis
import structlog

from app.config import Settings, settings

logger = structlog.get_logger(__name__)

_redis_client: redis.Redis | None = None


def get_redis_client(config: Settings | None = None) -> redis.Redis:
    """Shared Redis client, created on first use."""
    global _redis_client

    if _redis_client is None:
        config = config or settings
        _redis_client = redis.Redis(
            host=config.redis_host,
            port=config.redis_port,
            username=config.redis_username,
            password=config.redis_password or None,
            decode_responses=config.redis_decode_responses,
            socket_connect_timeout=5,
            health_check_interval=30,
        )

    return _redis_client


async def check_redis_connection() -> bool:
    """Ping Redis, False if it cannot be reached."""
    try:
        return bool(get_redis_client().ping())
    except redis.RedisError as e:
        logger.warning("redis_ping_failed", error=str(e))
        return False


def close_redis_connection() -> None:
    """Close and forget the shared client."""
    global _redis_client

    if _redis_client is not None:
        _redis_client.close()
        _redis_client = None


class CacheManager:
    """
    Redis-backed JSON cache.

    Every operation degrades to a miss when Redis is unreachable, so the
    repositories keep working against the database alone. Keys are stored
    under ``key_prefix`` so several sites can share one Redis database.
    """

    def __init__(self, redis_client: redis.Redis, key_prefix: str = ""):
        """Initialize cache manager with Redis client."""
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def get_json(self, key: str) -> Any | None:
        """Get a cached value, None on a miss."""
        try:
            value = cast(str | None, self.redis.get(self._key(key)))
        except redis.RedisError as e:
            logger.warning("cache_get_failed", key=key, error=str(e))
            return None
        return json.loads(value) if value else None

    def set_json(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """
        Cache a value as JSON.

        Dates and other non-JSON values are stored as strings.

        Args:
            key: Cache key
            value: Value to cache
            ttl: Time to live in seconds, no expiry when omitted

        Returns:
            True if the value was stored
        """
        payload = json.dumps(value, default=str)
        try:
            if ttl:
                self.redis.setex(self._key(key), ttl, payload)
            else:
                self.redis.set(self._key(key), payload)
        except redis.RedisError as e:
            logger.warning("cache_set_failed", key=key, error=str(e))
            return False
        return True

    def delete(self, *keys: str) -> bool:
        """Delete one or more keys."""
        if not keys:
            return True
        try:
            self.redis.delete(*(self._key(key) for key in keys))
        except redis.RedisError as e:
            logger.warning("cache_delete_failed", keys=list(keys), error=str(e))
            return False
        return True
