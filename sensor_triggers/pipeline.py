# SPDX-License-Identifier: Apache-2.0
"""Single-attempt trigger pipeline: fetch, parameterise, execute, evaluate."""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Mapping

from .errors import TriggerError
from .events import Event
from .metrics import TRIGGER_EXECUTE_LATENCY
from .policy import Outcome, evaluate_error
from .triggers.base import Trigger

log = logging.getLogger(__name__)


@dataclass(slots=True)
class Attempt:
    outcome: Outcome
    response: Any = None
    error: BaseException | None = None
    timed_out: bool = False


async def run_once(trigger: Trigger, events: Mapping[str, Event], timeout: float | None = None) -> Attempt:
    timeout = trigger.timeout if timeout is None else timeout
    try:
        resource = await trigger.fetch_resource()
        resource = trigger.apply_resource_parameters(events, resource)
    except TriggerError as exc:
        log.error("trigger %s failed to prepare resource: %s", trigger.name, exc)
        return Attempt(outcome=Outcome.FAILURE, error=exc)

    start = time.perf_counter()
    try:
        response = await asyncio.wait_for(trigger.execute(events, resource), timeout)
    except asyncio.TimeoutError as exc:
        outcome = evaluate_error(trigger.policy, exc)
        log.warning("trigger %s timed out after %.2fs (%s)", trigger.name, timeout, outcome.value)
        return Attempt(outcome=outcome, error=exc, timed_out=True)
    except TriggerError as exc:
        outcome = evaluate_error(trigger.policy, exc)
        log.error("trigger %s execution failed (%s): %s", trigger.name, outcome.value, exc)
        return Attempt(outcome=outcome, error=exc)
    finally:
        TRIGGER_EXECUTE_LATENCY.labels(trigger.trigger_type).observe((time.perf_counter() - start) * 1000)

    outcome = await trigger.apply_policy(response)
    return Attempt(outcome=outcome, response=response)
