"""
Database Module - Upstash Redis client

Provides the lazily created async Upstash Redis client used as the
durable cart store, plus key prefixes and TTL constants.
"""

from typing import Optional

from upstash_redis.asyncio import Redis as AsyncRedis

from storefront import config
from storefront.errors import ERROR_REDIS_NOT_CONFIGURED


_redis_client: Optional[AsyncRedis] = None


def get_redis() -> AsyncRedis:
    """
    Get async Upstash Redis client (singleton).

    Uses standard Upstash env var names:
    - UPSTASH_REDIS_REST_URL
    - UPSTASH_REDIS_REST_TOKEN
    """
    global _redis_client

    if _redis_client is None:
        if not config.redis_configured():
            raise ValueError(ERROR_REDIS_NOT_CONFIGURED)
        _redis_client = AsyncRedis(
            url=config.UPSTASH_REDIS_REST_URL,
            token=config.UPSTASH_REDIS_REST_TOKEN,
        )

    return _redis_client


async def close_redis() -> None:
    """Close the shared Redis client if one was created."""
    global _redis_client
    if _redis_client is not None:
        await _redis_client.close()
        _redis_client = None


class RedisKeys:
    """Redis key prefixes for different data types."""

    CART = "cart:"  # cart:{session_id}

    @staticmethod
    def cart_key(session_id: str) -> str:
        return f"{RedisKeys.CART}{session_id}"


class TTL:
    """Time-to-live constants for Redis keys (seconds)."""

    CART = config.CART_TTL_SECONDS
