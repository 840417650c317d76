# SPDX-License-Identifier: Apache-2.0
"""Dispatcher that fans an event set out to triggers and drives retries."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Sequence

from .cache import CLIENT_CACHE, ClientCache
from .config import SensorConfig
from .events import Event
from .metrics import TRIGGER_OUTCOMES, TRIGGER_RETRIES
from .pipeline import run_once
from .policy import Outcome
from .triggers import build_triggers
from .triggers.base import Trigger

log = logging.getLogger(__name__)


@dataclass(slots=True)
class DispatchResult:
    trigger: str
    outcome: Outcome
    response: Any = None
    error: BaseException | None = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.SUCCESS


class TriggerDispatcher:
    def __init__(
        self,
        triggers: Iterable[Trigger],
        *,
        cache: ClientCache | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.triggers: Dict[str, Trigger] = {t.name: t for t in triggers}
        self.cache = cache if cache is not None else CLIENT_CACHE
        self._sleep = sleep

    @classmethod
    def from_config(cls, sensor: SensorConfig, *, cache: ClientCache | None = None) -> "TriggerDispatcher":
        cache = cache if cache is not None else CLIENT_CACHE
        triggers = build_triggers(sensor.triggers, cache=cache, settings=sensor.settings)
        log.info("sensor %s registered %d triggers", sensor.name, len(triggers))
        return cls(triggers.values(), cache=cache)

    async def dispatch(self, trigger: Trigger, events: Mapping[str, Event]) -> DispatchResult:
        policy = trigger.policy
        intervals = iter(policy.backoff.intervals()) if policy and policy.backoff else iter(())
        attempts = 0
        while True:
            attempts += 1
            attempt = await run_once(trigger, events)
            outcome = attempt.outcome
            if outcome is not Outcome.RETRY:
                break
            delay = next(intervals, None)
            if delay is None:
                log.warning("trigger %s giving up after %d attempts", trigger.name, attempts)
                outcome = Outcome.FAILURE
                break
            TRIGGER_RETRIES.labels(trigger.name, trigger.trigger_type).inc()
            log.info("trigger %s retrying in %.2fs (attempt %d)", trigger.name, delay, attempts)
            await self._sleep(delay)
        TRIGGER_OUTCOMES.labels(trigger.name, trigger.trigger_type, outcome.value).inc()
        return DispatchResult(
            trigger=trigger.name,
            outcome=outcome,
            response=attempt.response,
            error=attempt.error,
            attempts=attempts,
        )

    async def _isolated(self, trigger: Trigger, events: Mapping[str, Event]) -> DispatchResult:
        try:
            return await self.dispatch(trigger, events)
        except Exception as exc:
            log.exception("trigger %s dispatch failed", trigger.name)
            TRIGGER_OUTCOMES.labels(trigger.name, trigger.trigger_type, Outcome.FAILURE.value).inc()
            return DispatchResult(trigger=trigger.name, outcome=Outcome.FAILURE, error=exc, attempts=1)

    async def dispatch_all(self, events: Mapping[str, Event], names: Sequence[str] | None = None) -> List[DispatchResult]:
        selected = [self.triggers[name] for name in names] if names else list(self.triggers.values())
        return list(await asyncio.gather(*(self._isolated(t, events) for t in selected)))

    async def replace(self, triggers: Iterable[Trigger]) -> None:
        """Swap in a new set of trigger definitions, dropping stale clients."""
        incoming = {t.name: t for t in triggers}
        for name, old in self.triggers.items():
            new = incoming.get(name)
            if new is None or new.config != old.config:
                await old.close()
                await self.cache.evict(name)
        self.triggers = incoming

    async def close(self) -> None:
        await asyncio.gather(*(t.close() for t in self.triggers.values()))
        await self.cache.close()
