# SPDX-License-Identifier: Apache-2.0
"""Client cache semantics under concurrency."""
from __future__ import annotations

import asyncio

import pytest

from sensor_triggers.cache import ClientCache
from sensor_triggers.errors import AuthenticationError


class FakeClient:
    def __init__(self):
        self.closed = False

    async def close(self):
        self.closed = True


@pytest.mark.asyncio
async def test_concurrent_first_use_creates_one_client():
    cache = ClientCache()
    created = []

    async def factory():
        await asyncio.sleep(0.01)
        client = FakeClient()
        created.append(client)
        return client

    results = await asyncio.gather(*(cache.get_or_create("bill", factory) for _ in range(10)))
    assert len(created) == 1
    assert all(r is created[0] for r in results)
    assert await cache.get_or_create("bill", factory) is created[0]
    assert len(created) == 1


@pytest.mark.asyncio
async def test_distinct_names_get_distinct_clients():
    cache = ClientCache()

    async def factory():
        return FakeClient()

    a, b = await asyncio.gather(cache.get_or_create("a", factory), cache.get_or_create("b", factory))
    assert a is not b
    assert len(cache) == 2


@pytest.mark.asyncio
async def test_failed_factory_is_not_cached():
    cache = ClientCache()
    calls = 0

    async def factory():
        nonlocal calls
        calls += 1
        if calls == 1:
            raise AuthenticationError("no credentials")
        return FakeClient()

    with pytest.raises(AuthenticationError):
        await cache.get_or_create("bill", factory)
    assert "bill" not in cache
    assert isinstance(await cache.get_or_create("bill", factory), FakeClient)


@pytest.mark.asyncio
async def test_evict_and_close_release_clients():
    cache = ClientCache()
    first = await cache.get_or_create("a", lambda: asyncio.sleep(0, result=FakeClient()))
    second = await cache.get_or_create("b", lambda: asyncio.sleep(0, result=FakeClient()))
    await cache.evict("a")
    assert first.closed and "a" not in cache
    await cache.close()
    assert second.closed and len(cache) == 0


@pytest.mark.asyncio
async def test_evict_waits_for_in_flight_factory():
    cache = ClientCache()
    release = asyncio.Event()
    running = 0
    peak = 0
    created = []

    async def factory():
        nonlocal running, peak
        running += 1
        peak = max(peak, running)
        await release.wait()
        running -= 1
        client = FakeClient()
        created.append(client)
        return client

    first = asyncio.create_task(cache.get_or_create("bill", factory))
    await asyncio.sleep(0)
    evicting = asyncio.create_task(cache.evict("bill"))
    await asyncio.sleep(0)
    second = asyncio.create_task(cache.get_or_create("bill", factory))
    await asyncio.sleep(0.01)
    assert len(created) == 0 and running == 1

    release.set()
    old, _, new = await asyncio.gather(first, evicting, second)
    assert peak == 1
    assert old.closed
    assert new is not old and not new.closed
    assert cache.get("bill") is new
