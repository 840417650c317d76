# SPDX-License-Identifier: Apache-2.0
"""MQTT trigger for publishing messages."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Mapping

from asyncio_mqtt import Client, MqttError

from sensor_triggers.credentials import read_secret
from sensor_triggers.errors import AuthenticationError, ExecutionError
from sensor_triggers.events import Event

from .base import Resource, Trigger

log = logging.getLogger(__name__)


@dataclass
class MQTTResource(Resource):
    topic: str
    host: str = "127.0.0.1"
    port: int = 1883
    qos: int = 0
    retain: bool = False
    username: str | None = None
    password_path: str | None = None


class MQTTTrigger(Trigger):
    trigger_type = "mqtt"
    resource_type = MQTTResource
    requires_payload = True

    async def create_client(self) -> Client:
        tpl = self.template
        password = None
        if tpl.password_path:
            password = await asyncio.to_thread(read_secret, tpl.password_path, self.settings.secrets_root)
        client = Client(hostname=tpl.host, port=int(tpl.port), username=tpl.username, password=password)
        try:
            await client.connect()
        except MqttError as exc:
            raise AuthenticationError(f"mqtt trigger {self.name} could not connect to {tpl.host}:{tpl.port}") from exc
        log.info("connected mqtt trigger %s to %s:%s", self.name, tpl.host, tpl.port)
        return client

    async def execute(self, events: Mapping[str, Event], resource: Resource) -> Any:
        self.check_resource(resource)
        payload = self.build_payload(events, resource)
        client = await self.client()
        try:
            await client.publish(resource.topic, payload, qos=int(resource.qos), retain=bool(resource.retain))
        except MqttError as exc:
            raise ExecutionError(f"mqtt trigger {self.name} failed to publish to {resource.topic}") from exc
        return {"topic": resource.topic, "bytes": len(payload)}
