# SPDX-License-Identifier: Apache-2.0
"""Logging trigger for debugging and audits."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from sensor_triggers.errors import InvalidResourceTypeError
from sensor_triggers.events import Event

from .base import Resource, Trigger

log = logging.getLogger(__name__)


@dataclass
class LogResource(Resource):
    level: str = "info"


class LogTrigger(Trigger):
    trigger_type = "log"
    resource_type = LogResource

    async def execute(self, events: Mapping[str, Event], resource: Resource) -> Any:
        self.check_resource(resource)
        level = logging.getLevelName(resource.level.upper())
        if not isinstance(level, int):
            raise InvalidResourceTypeError(f"log trigger {self.name} has unknown level '{resource.level}'")
        payload = self.build_payload(events, resource)
        for name, event in events.items():
            log.log(level, "[trigger %s] event %s source=%s id=%s data=%s", self.name, name, event.context.source, event.context.id, event.data[:512])
        if payload is not None:
            log.log(level, "[trigger %s] payload=%s", self.name, payload)
        return {"events": len(events), "payload": payload}
