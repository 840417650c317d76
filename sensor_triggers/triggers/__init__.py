# SPDX-License-Identifier: Apache-2.0
"""Trigger factory."""
from __future__ import annotations

from typing import Callable, Dict, Iterable

from sensor_triggers.cache import CLIENT_CACHE, ClientCache
from sensor_triggers.config import Settings, TriggerConfig
from sensor_triggers.utils import resolve_callable

from .base import Resource, Trigger

TRIGGER_TYPES: dict[str, Callable[..., Trigger]] = {}


def register(trigger_type: str, factory: Callable[..., Trigger]) -> None:
    TRIGGER_TYPES[trigger_type] = factory


def create_trigger(cfg: TriggerConfig, *, cache: ClientCache | None = None, settings: Settings | None = None) -> Trigger:
    factory = TRIGGER_TYPES.get(cfg.type)
    if factory is None:
        if ":" not in cfg.type:
            raise ValueError(f"unknown trigger type '{cfg.type}'")
        factory = resolve_callable(cfg.type)
    return factory(cfg, cache=cache if cache is not None else CLIENT_CACHE, settings=settings or Settings())


def build_triggers(
    configs: Iterable[TriggerConfig], *, cache: ClientCache | None = None, settings: Settings | None = None
) -> Dict[str, Trigger]:
    return {cfg.name: create_trigger(cfg, cache=cache, settings=settings) for cfg in configs}


from .aws_lambda import AWSLambdaTrigger
from .gcp_function import GCPCloudFunctionTrigger
from .http import HTTPTrigger
from .log import LogTrigger
from .mqtt import MQTTTrigger

for _cls in (GCPCloudFunctionTrigger, AWSLambdaTrigger, HTTPTrigger, MQTTTrigger, LogTrigger):
    register(_cls.trigger_type, _cls)

__all__ = ["Resource", "Trigger", "TRIGGER_TYPES", "register", "create_trigger", "build_triggers"]
