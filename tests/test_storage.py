"""Tests for cart storage backends"""
import pytest
from unittest.mock import AsyncMock, Mock, patch

from storefront import config
from storefront.cart import MemoryCartStorage, RedisCartStorage
from storefront.cart import storage as storage_module


@pytest.fixture
def mock_redis():
    """Mock Upstash async Redis client"""
    redis = Mock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    redis.delete = AsyncMock(return_value=1)
    return redis


@pytest.mark.asyncio
async def test_redis_set_uses_ttl(mock_redis):
    storage = RedisCartStorage(redis=mock_redis, ttl=600)

    ok = await storage.set("cart:s1", "[]")

    assert ok is True
    mock_redis.set.assert_awaited_once_with("cart:s1", "[]", ex=600)


@pytest.mark.asyncio
async def test_redis_get_decodes_bytes(mock_redis):
    mock_redis.get = AsyncMock(return_value=b"[]")
    storage = RedisCartStorage(redis=mock_redis)

    assert await storage.get("cart:s1") == "[]"


@pytest.mark.asyncio
async def test_redis_get_missing(mock_redis):
    storage = RedisCartStorage(redis=mock_redis)
    assert await storage.get("cart:s1") is None


@pytest.mark.asyncio
async def test_redis_delete(mock_redis):
    storage = RedisCartStorage(redis=mock_redis)
    await storage.delete("cart:s1")
    mock_redis.delete.assert_awaited_once_with("cart:s1")


def test_redis_default_ttl_is_a_day(mock_redis):
    assert RedisCartStorage(redis=mock_redis).ttl == 86400


def test_redis_requires_configuration():
    with patch.object(config, "UPSTASH_REDIS_REST_URL", ""), \
         patch("storefront.db._redis_client", None):
        storage = RedisCartStorage()
        with pytest.raises(ValueError):
            storage.redis


def test_key_for():
    assert RedisCartStorage.key_for("abc") == "cart:abc"
    assert MemoryCartStorage.key_for("abc") == "cart:abc"


@pytest.mark.asyncio
async def test_memory_storage():
    storage = MemoryCartStorage({"cart:a": "[]"})

    assert await storage.get("cart:a") == "[]"
    assert await storage.set("cart:b", "[1]") is True
    await storage.delete("cart:a")
    await storage.delete("cart:missing")

    assert storage.data == {"cart:b": "[1]"}


@pytest.mark.parametrize("env,redis_ready,expected", [
    ({"CART_STORAGE": "memory"}, True, config.STORAGE_MEMORY),
    ({"CART_STORAGE": "redis"}, False, config.STORAGE_REDIS),
    ({"CART_STORAGE": ""}, True, config.STORAGE_REDIS),
    ({"CART_STORAGE": ""}, False, config.STORAGE_MEMORY),
])
def test_storage_backend_selection(env, redis_ready, expected):
    with patch.dict("os.environ", env), \
         patch.object(config, "redis_configured", return_value=redis_ready):
        assert config.get_cart_storage_backend() == expected


def test_get_cart_storage_memory_fallback():
    with patch.object(storage_module, "_cart_storage", None), \
         patch.object(config, "get_cart_storage_backend", return_value=config.STORAGE_MEMORY):
        first = storage_module.get_cart_storage()
        second = storage_module.get_cart_storage()

    assert isinstance(first, MemoryCartStorage)
    assert first is second
