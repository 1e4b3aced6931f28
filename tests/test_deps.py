"""Tests for router dependencies"""
import asyncio

import pytest

from storefront.cart import CartState, MemoryCartStorage
from storefront.routers import CartStoreRegistry


@pytest.mark.asyncio
async def test_registry_reuses_store():
    registry = CartStoreRegistry(storage=MemoryCartStorage())

    first = await registry.get("s1")
    second = await registry.get("s1")

    assert first is second
    assert first.is_ready
    assert len(registry) == 1


@pytest.mark.asyncio
async def test_registry_evicts_least_recently_used(cheap_product):
    storage = MemoryCartStorage()
    registry = CartStoreRegistry(storage=storage, max_sessions=2)

    s1 = await registry.get("s1")
    s1.add_item(cheap_product, 2)
    await registry.get("s2")
    await registry.get("s1")
    await registry.get("s3")

    assert "s2" not in registry
    assert "s1" in registry
    assert len(registry) == 2
    await registry.flush_all()


@pytest.mark.asyncio
async def test_evicted_session_rehydrates(cheap_product):
    storage = MemoryCartStorage()
    registry = CartStoreRegistry(storage=storage, max_sessions=1)

    s1 = await registry.get("s1")
    s1.add_item(cheap_product, 3)
    await s1.flush()
    await registry.get("s2")

    reopened = await registry.get("s1")

    assert reopened is not s1
    assert reopened.cart_count == 3


@pytest.mark.asyncio
async def test_flush_all_writes_pending(cheap_product):
    storage = MemoryCartStorage()
    registry = CartStoreRegistry(storage=storage)

    store = await registry.get("s1")
    store.add_item(cheap_product, 1)
    await registry.flush_all()

    assert "cart:s1" in storage.data


@pytest.mark.asyncio
async def test_eviction_waits_for_unflushed_write(cheap_product):
    storage = MemoryCartStorage()
    registry = CartStoreRegistry(storage=storage, max_sessions=1)

    s1 = await registry.get("s1")
    s1.add_item(cheap_product, 3)
    assert s1.has_pending_writes
    await registry.get("s2")

    assert not s1.has_pending_writes
    reopened = await registry.get("s1")
    assert reopened.cart_count == 3


@pytest.mark.asyncio
async def test_session_reopened_while_draining_gets_same_store(cheap_product):
    storage = MemoryCartStorage()
    release = asyncio.Event()
    fast_set = storage.set

    async def gated_set(key, value):
        await release.wait()
        return await fast_set(key, value)

    storage.set = gated_set
    registry = CartStoreRegistry(storage=storage, max_sessions=1)

    s1 = await registry.get("s1")
    s1.add_item(cheap_product, 2)
    evicting = asyncio.create_task(registry.get("s2"))
    while "s1" in registry:
        await asyncio.sleep(0)

    reopened = await registry.get("s1")
    release.set()
    await evicting
    await registry.flush_all()

    assert reopened is s1
    assert reopened.cart_count == 2
    assert CartState.loads(storage.data["cart:s1"]).cart_count == 2


@pytest.mark.asyncio
async def test_flush_all_covers_draining_stores(cheap_product):
    storage = MemoryCartStorage()
    release = asyncio.Event()
    fast_set = storage.set

    async def gated_set(key, value):
        await release.wait()
        return await fast_set(key, value)

    storage.set = gated_set
    registry = CartStoreRegistry(storage=storage, max_sessions=1)

    s1 = await registry.get("s1")
    s1.add_item(cheap_product, 1)
    evicting = asyncio.create_task(registry.get("s2"))
    while "s1" in registry:
        await asyncio.sleep(0)

    shutdown = asyncio.create_task(registry.flush_all())
    await asyncio.sleep(0)
    assert not shutdown.done()
    release.set()
    await shutdown
    await evicting

    assert "cart:s1" in storage.data
