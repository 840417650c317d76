# SPDX-License-Identifier: Apache-2.0
"""Configuration loader for sensor trigger definitions."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .params import OVERWRITE, ParameterBinding, ParameterSource
from .policy import Backoff, FieldMatch, Policy

DEFAULT_SECRETS_ROOT = "/var/run/sensor-triggers/secrets"


@dataclass(slots=True)
class Settings:
    secrets_root: str = DEFAULT_SECRETS_ROOT
    default_timeout_s: float = 30.0


@dataclass(frozen=True, slots=True)
class TriggerConfig:
    name: str
    type: str
    template: Dict[str, Any] = field(default_factory=dict)
    parameters: Tuple[ParameterBinding, ...] = ()
    payload: Optional[Tuple[ParameterBinding, ...]] = None
    policy: Optional[Policy] = None
    timeout_s: Optional[float] = None


@dataclass(slots=True)
class SensorConfig:
    version: int
    name: str
    settings: Settings
    triggers: List[TriggerConfig]


def _parse_settings(data: Dict[str, Any]) -> Settings:
    return Settings(
        secrets_root=os.getenv("SENSOR_SECRETS_ROOT") or data.get("secrets_root", DEFAULT_SECRETS_ROOT),
        default_timeout_s=float(data.get("default_timeout_s", 30.0)),
    )


def _parse_source(data: Dict[str, Any]) -> ParameterSource:
    dependency = data.get("dependency_name", data.get("dependency"))
    if not dependency:
        raise ValueError("parameter source requires 'dependency'")
    kwargs: Dict[str, Any] = {
        "dependency_name": dependency,
        "data_key": data.get("data_key"),
        "context_key": data.get("context_key"),
    }
    if "value" in data:
        kwargs["value"] = data["value"]
    return ParameterSource(**kwargs)


def _parse_bindings(items: List[Dict[str, Any]], *, owner: str) -> Tuple[ParameterBinding, ...]:
    bindings: List[ParameterBinding] = []
    for item in items:
        if not isinstance(item, dict) or "src" not in item or "dest" not in item:
            raise ValueError(f"trigger '{owner}' has a parameter without 'src' and 'dest'")
        bindings.append(
            ParameterBinding(
                src=_parse_source(item["src"]),
                dest=str(item["dest"]),
                operation=item.get("operation", OVERWRITE),
            )
        )
    return tuple(bindings)


def _parse_backoff(data: Dict[str, Any]) -> Backoff:
    return Backoff(
        steps=int(data.get("steps", 3)),
        duration=float(data.get("duration", 1.0)),
        factor=float(data.get("factor", 2.0)),
        cap=float(data["cap"]) if data.get("cap") is not None else None,
        jitter=float(data.get("jitter", 0.0)),
    )


def _parse_policy(data: Dict[str, Any]) -> Policy:
    match = data.get("match")
    backoff = data.get("backoff")
    return Policy(
        allow=tuple(data.get("allow", []) or []),
        match=FieldMatch(path=match["path"], value=match.get("value")) if match else None,
        retry_on=tuple(data.get("retry_on", []) or []),
        retry_on_timeout=bool(data.get("retry_on_timeout", False)),
        retry_on_error=bool(data.get("retry_on_error", False)),
        backoff=_parse_backoff(backoff) if backoff else None,
    )


def _parse_triggers(items: List[Dict[str, Any]]) -> List[TriggerConfig]:
    triggers: List[TriggerConfig] = []
    seen = set()
    for item in items:
        name = item.get("name")
        if not name:
            raise ValueError("trigger requires a 'name'")
        if name in seen:
            raise ValueError(f"duplicate trigger name '{name}'")
        seen.add(name)
        template = item.get("template", {}) or {}
        if not isinstance(template, dict):
            raise ValueError(f"trigger '{name}' template must be a mapping")
        payload = item.get("payload")
        triggers.append(
            TriggerConfig(
                name=name,
                type=item.get("type", name),
                template=template,
                parameters=_parse_bindings(item.get("parameters", []) or [], owner=name),
                payload=_parse_bindings(payload, owner=name) if payload is not None else None,
                policy=_parse_policy(item["policy"]) if item.get("policy") else None,
                timeout_s=float(item["timeout_s"]) if item.get("timeout_s") is not None else None,
            )
        )
    return triggers


def parse_sensor(raw: Dict[str, Any]) -> SensorConfig:
    return SensorConfig(
        version=int(raw.get("version", 1)),
        name=raw.get("name", "sensor"),
        settings=_parse_settings(raw.get("settings", {}) or {}),
        triggers=_parse_triggers(raw.get("triggers", []) or []),
    )


def load_sensor(path: str | Path) -> SensorConfig:
    raw = yaml.safe_load(Path(path).read_text())
    if not isinstance(raw, dict):
        raise ValueError(f"sensor file {path} must contain a mapping")
    return parse_sensor(raw)
