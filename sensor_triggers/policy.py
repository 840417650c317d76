# SPDX-License-Identifier: Apache-2.0
"""Classify trigger execution outcomes.

The evaluator is stateless and never performs I/O. Each trigger kind reduces
its raw response to a `(status, body)` pair before calling `evaluate`, so
the rules here stay independent of any action's semantics.
"""
from __future__ import annotations

import asyncio
import enum
import random
from dataclasses import dataclass, field
from typing import Any, Iterator, Tuple

from .errors import ExecutionError, PathResolutionError
from .paths import get_path


class Outcome(str, enum.Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    RETRY = "retry"


@dataclass(frozen=True, slots=True)
class Backoff:
    steps: int = 3
    duration: float = 1.0
    factor: float = 2.0
    cap: float | None = None
    jitter: float = 0.0

    def intervals(self) -> Iterator[float]:
        """Wait before each retry, in seconds."""
        delay = self.duration
        for _ in range(self.steps):
            wait = delay if self.cap is None else min(delay, self.cap)
            if self.jitter:
                wait += random.uniform(0, wait * self.jitter)
            yield wait
            delay *= self.factor


@dataclass(frozen=True, slots=True)
class FieldMatch:
    path: str
    value: Any


@dataclass(frozen=True, slots=True)
class Policy:
    allow: Tuple[Any, ...] = ()
    match: FieldMatch | None = None
    retry_on: Tuple[Any, ...] = ()
    retry_on_timeout: bool = False
    retry_on_error: bool = False
    backoff: Backoff | None = field(default=None)


def _contains(codes: Tuple[Any, ...], status: Any) -> bool:
    return str(status) in {str(code) for code in codes}


def evaluate(policy: Policy | None, status: Any, body: Any) -> Outcome:
    if policy is None:
        return Outcome.SUCCESS
    if policy.retry_on and _contains(policy.retry_on, status):
        return Outcome.RETRY
    if policy.allow and not _contains(policy.allow, status):
        return Outcome.FAILURE
    if policy.match is not None:
        try:
            actual = get_path(body, policy.match.path)
        except PathResolutionError:
            return Outcome.FAILURE
        if actual != policy.match.value:
            return Outcome.FAILURE
    return Outcome.SUCCESS


def evaluate_error(policy: Policy | None, exc: BaseException) -> Outcome:
    if policy is None:
        return Outcome.FAILURE
    if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        return Outcome.RETRY if policy.retry_on_timeout else Outcome.FAILURE
    if isinstance(exc, ExecutionError):
        return Outcome.RETRY if policy.retry_on_error else Outcome.FAILURE
    return Outcome.FAILURE
