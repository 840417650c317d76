# SPDX-License-Identifier: Apache-2.0
"""HTTP trigger for calling remote endpoints."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Tuple

import aiohttp

from sensor_triggers.credentials import read_secret
from sensor_triggers.errors import ExecutionError
from sensor_triggers.events import Event
from sensor_triggers.serialization import decode_body

from .base import Resource, Trigger

log = logging.getLogger(__name__)

_BODY_METHODS = {"POST", "PUT", "PATCH"}


@dataclass
class HTTPResource(Resource):
    url: str
    method: str = "POST"
    headers: Dict[str, str] = field(default_factory=dict)
    bearer_token_path: str | None = None


@dataclass(slots=True)
class HTTPResponse:
    status: int
    headers: Dict[str, str]
    body: bytes


class HTTPTrigger(Trigger):
    trigger_type = "http"
    resource_type = HTTPResource

    def payload_required(self, resource: Resource) -> bool:
        return resource.method.upper() in _BODY_METHODS

    async def create_client(self) -> aiohttp.ClientSession:
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        return aiohttp.ClientSession(timeout=timeout)

    async def execute(self, events: Mapping[str, Event], resource: Resource) -> Any:
        self.check_resource(resource)
        payload = self.build_payload(events, resource)
        headers = {"Content-Type": "application/json", **resource.headers}
        if resource.bearer_token_path:
            token = await asyncio.to_thread(read_secret, resource.bearer_token_path, self.settings.secrets_root)
            headers["Authorization"] = f"Bearer {token}"
        session = await self.client()
        method = resource.method.upper()
        try:
            async with session.request(method, resource.url, data=payload, headers=headers) as resp:
                body = await resp.read()
                if resp.status >= 400:
                    log.warning("http trigger %s got status=%s body=%s", self.name, resp.status, body[:200])
                return HTTPResponse(status=resp.status, headers=dict(resp.headers), body=body)
        except aiohttp.ClientError as exc:
            raise ExecutionError(f"http trigger {self.name}: {method} {resource.url} failed") from exc

    def describe_response(self, response: HTTPResponse) -> Tuple[Any, Any]:
        return response.status, decode_body(response.body)
