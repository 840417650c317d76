# SPDX-License-Identifier: Apache-2.0
"""AWS Lambda trigger."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Tuple

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from sensor_triggers.credentials import read_secret
from sensor_triggers.errors import AuthenticationError, ExecutionError
from sensor_triggers.events import Event
from sensor_triggers.serialization import decode_body

from .base import Resource, Trigger

log = logging.getLogger(__name__)


@dataclass
class AWSLambdaResource(Resource):
    function_name: str
    region: str
    access_key_path: str | None = None
    secret_key_path: str | None = None
    invocation_type: str = "RequestResponse"


@dataclass(slots=True)
class LambdaResponse:
    status_code: int
    function_error: str | None
    payload: bytes


class AWSLambdaTrigger(Trigger):
    trigger_type = "aws_lambda"
    resource_type = AWSLambdaResource
    requires_payload = True

    async def create_client(self) -> Any:
        return await asyncio.to_thread(self._build_client)

    def _build_client(self) -> Any:
        tpl = self.template
        kwargs = {}
        if tpl.access_key_path or tpl.secret_key_path:
            if not (tpl.access_key_path and tpl.secret_key_path):
                raise AuthenticationError(f"lambda trigger {self.name} needs both access_key_path and secret_key_path")
            kwargs["aws_access_key_id"] = read_secret(tpl.access_key_path, self.settings.secrets_root)
            kwargs["aws_secret_access_key"] = read_secret(tpl.secret_key_path, self.settings.secrets_root)
        # single attempt per call; the dispatcher owns retries
        config = Config(
            retries={"max_attempts": 1, "mode": "standard"},
            connect_timeout=self.timeout,
            read_timeout=self.timeout,
        )
        try:
            return boto3.client("lambda", region_name=tpl.region, config=config, **kwargs)
        except BotoCoreError as exc:
            raise AuthenticationError(f"failed to create a lambda client for trigger {self.name}") from exc

    async def execute(self, events: Mapping[str, Event], resource: Resource) -> Any:
        self.check_resource(resource)
        payload = self.build_payload(events, resource)
        client = await self.client()
        try:
            return await asyncio.to_thread(self._invoke, client, resource, payload)
        except (BotoCoreError, ClientError) as exc:
            raise ExecutionError(f"lambda trigger {self.name} failed to invoke {resource.function_name}") from exc

    @staticmethod
    def _invoke(client: Any, resource: AWSLambdaResource, payload: bytes) -> LambdaResponse:
        response = client.invoke(
            FunctionName=resource.function_name,
            InvocationType=resource.invocation_type,
            Payload=payload,
        )
        stream = response.get("Payload")
        return LambdaResponse(
            status_code=int(response["StatusCode"]),
            function_error=response.get("FunctionError"),
            payload=stream.read() if stream is not None else b"",
        )

    def describe_response(self, response: LambdaResponse) -> Tuple[Any, Any]:
        if response.function_error:
            log.warning("lambda trigger %s function error: %s", self.name, response.function_error)
        return response.status_code, decode_body(response.payload)
