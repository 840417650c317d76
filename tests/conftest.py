# SPDX-License-Identifier: Apache-2.0
"""Shared fixtures for trigger dispatch tests."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, List

import pytest

from sensor_triggers.cache import ClientCache
from sensor_triggers.config import Settings, TriggerConfig
from sensor_triggers.errors import ExecutionError
from sensor_triggers.events import EventSet
from sensor_triggers.triggers import TRIGGER_TYPES, register
from sensor_triggers.triggers.base import Resource, Trigger


@dataclass
class CaptureResource(Resource):
    target: str = ""
    status: Any = "OK"
    delay_s: float = 0.0
    fail: bool = False


class CaptureTrigger(Trigger):
    """Trigger used in tests to capture what the pipeline hands to execute."""

    trigger_type = "capture"
    resource_type = CaptureResource

    def __init__(self, config, *, cache, settings):
        super().__init__(config, cache=cache, settings=settings)
        self.calls: List[dict] = []
        self.statuses: List[Any] = []
        self.closed = False

    async def execute(self, events, resource):  # type: ignore[override]
        self.check_resource(resource)
        payload = self.build_payload(events, resource)
        self.calls.append({"resource": resource, "payload": payload})
        if resource.delay_s:
            await asyncio.sleep(resource.delay_s)
        if resource.fail:
            raise ExecutionError(f"capture trigger {self.name} asked to fail")
        status = self.statuses.pop(0) if self.statuses else resource.status
        return {"status": status, "target": resource.target}

    def describe_response(self, response):
        return response["status"], response

    async def close(self) -> None:
        self.closed = True


@pytest.fixture(scope="session", autouse=True)
def register_test_triggers():
    """Register the capture trigger type for tests."""
    if "capture" not in TRIGGER_TYPES:
        register("capture", CaptureTrigger)
    yield


@pytest.fixture
def cache() -> ClientCache:
    return ClientCache()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(secrets_root=str(tmp_path), default_timeout_s=2.0)


@pytest.fixture
def order_events() -> EventSet:
    return EventSet.from_payloads({"order-event": {"amount": 42, "customer": {"id": "c-1", "tags": ["vip"]}}})


@pytest.fixture
def make_trigger(cache, settings):
    def _make(cls=CaptureTrigger, **kwargs) -> Trigger:
        kwargs.setdefault("name", "capture-trigger")
        kwargs.setdefault("type", cls.trigger_type)
        return cls(TriggerConfig(**kwargs), cache=cache, settings=settings)

    return _make
