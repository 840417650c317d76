# SPDX-License-Identifier: Apache-2.0
"""Process-wide cache of authenticated clients keyed by trigger name."""
from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Dict

log = logging.getLogger(__name__)

ClientFactory = Callable[[], Awaitable[Any]]


class ClientCache:
    def __init__(self):
        self._clients: Dict[str, Any] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._clients

    def __len__(self) -> int:
        return len(self._clients)

    def get(self, name: str) -> Any | None:
        return self._clients.get(name)

    async def get_or_create(self, name: str, factory: ClientFactory) -> Any:
        client = self._clients.get(name)
        if client is not None:
            return client
        # setdefault runs without yielding, so racing callers share one lock
        lock = self._locks.setdefault(name, asyncio.Lock())
        async with lock:
            client = self._clients.get(name)
            if client is not None:
                return client
            client = await factory()
            self._clients[name] = client
            log.info("cached new client for trigger %s", name)
            return client

    async def evict(self, name: str) -> None:
        # the lock stays registered: waiters and later callers must share it
        async with self._locks.setdefault(name, asyncio.Lock()):
            client = self._clients.pop(name, None)
        if client is not None:
            log.info("evicted client for trigger %s", name)
            await _close_client(client)

    async def close(self) -> None:
        clients = list(self._clients.items())
        self._clients.clear()
        self._locks.clear()
        for name, client in clients:
            try:
                await _close_client(client)
            except Exception:
                log.exception("failed to close client for trigger %s", name)


async def _close_client(client: Any) -> None:
    for attr in ("close", "disconnect"):
        closer = getattr(client, attr, None)
        if closer is None:
            continue
        result = closer()
        if inspect.isawaitable(result):
            await result
        return


CLIENT_CACHE = ClientCache()
