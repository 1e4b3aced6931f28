"""Durable key-value storage for serialized carts."""
from typing import Optional, Protocol

from storefront import config
from storefront.db import TTL, RedisKeys, get_redis
from storefront.logging import get_logger

logger = get_logger(__name__)


class CartStorage(Protocol):
    """Key-value interface the cart store persists through."""

    async def get(self, key: str) -> Optional[str]:
        ...

    async def set(self, key: str, value: str) -> bool:
        ...

    async def delete(self, key: str) -> None:
        ...

    def key_for(self, session_id: str) -> str:
        ...


class RedisCartStorage:
    """Upstash Redis backed storage; every write refreshes the cart TTL."""

    def __init__(self, redis=None, ttl: Optional[int] = None):
        self._redis = redis  # Lazy initialization
        self.ttl = ttl if ttl is not None else TTL.CART

    @property
    def redis(self):
        """Get Redis client (lazy initialization)."""
        if self._redis is None:
            self._redis = get_redis()
        return self._redis

    @staticmethod
    def key_for(session_id: str) -> str:
        return RedisKeys.cart_key(session_id)

    async def get(self, key: str) -> Optional[str]:
        data = await self.redis.get(key)
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return data or None

    async def set(self, key: str, value: str) -> bool:
        result = await self.redis.set(key, value, ex=self.ttl)
        return bool(result)

    async def delete(self, key: str) -> None:
        await self.redis.delete(key)


class MemoryCartStorage:
    """Process-local storage for tests and single-process local runs."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self.data: dict[str, str] = dict(initial or {})

    @staticmethod
    def key_for(session_id: str) -> str:
        return RedisKeys.cart_key(session_id)

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> bool:
        self.data[key] = value
        return True

    async def delete(self, key: str) -> None:
        self.data.pop(key, None)


_cart_storage: Optional[CartStorage] = None


def get_cart_storage() -> CartStorage:
    """Get the configured cart storage backend (singleton)."""
    global _cart_storage
    if _cart_storage is None:
        if config.get_cart_storage_backend() == config.STORAGE_REDIS:
            _cart_storage = RedisCartStorage()
        else:
            logger.info("Redis not configured, carts are kept in process memory")
            _cart_storage = MemoryCartStorage()
    return _cart_storage
