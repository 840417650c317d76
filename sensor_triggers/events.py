# SPDX-License-Identifier: Apache-2.0
"""Event envelope and the immutable per-dispatch event set."""
from __future__ import annotations

import json
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping


@dataclass(frozen=True, slots=True)
class EventContext:
    """Metadata describing where and when an event was produced."""

    source: str
    type: str = ""
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    subject: str = ""
    time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    data_content_type: str = "application/json"
    spec_version: str = "1.0"

    def as_document(self) -> Dict[str, Any]:
        doc = asdict(self)
        doc["time"] = self.time.isoformat()
        return doc


@dataclass(frozen=True, slots=True)
class Event:
    context: EventContext
    data: bytes

    @classmethod
    def from_value(cls, value: Any, *, source: str, **context: Any) -> "Event":
        if isinstance(value, (bytes, bytearray)):
            data = bytes(value)
            context.setdefault("data_content_type", "application/octet-stream")
        else:
            data = json.dumps(value, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
        return cls(context=EventContext(source=source, **context), data=data)

    @classmethod
    def from_dict(cls, name: str, raw: Mapping[str, Any]) -> "Event":
        context = dict(raw.get("context", {}))
        context.setdefault("source", name)
        if isinstance(context.get("time"), str):
            context["time"] = datetime.fromisoformat(context["time"])
        data = raw.get("data")
        if isinstance(data, str) and not context.get("data_content_type", "application/json").endswith("json"):
            return cls(context=EventContext(**context), data=data.encode("utf-8"))
        return cls.from_value(data, **context)


class EventSet(Mapping[str, Event]):
    """Read-only mapping from dependency name to the event that satisfied it."""

    __slots__ = ("_events",)

    def __init__(self, events: Mapping[str, Event] | None = None):
        self._events = MappingProxyType(dict(events or {}))

    @classmethod
    def from_payloads(cls, payloads: Mapping[str, Any]) -> "EventSet":
        return cls({name: Event.from_value(value, source=name) for name, value in payloads.items()})

    @classmethod
    def from_dict(cls, raw: Mapping[str, Mapping[str, Any]]) -> "EventSet":
        return cls({name: Event.from_dict(name, item) for name, item in raw.items()})

    def __getitem__(self, name: str) -> Event:
        return self._events[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def __repr__(self) -> str:
        return f"EventSet({sorted(self._events)})"
