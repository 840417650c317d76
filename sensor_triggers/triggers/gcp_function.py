# SPDX-License-Identifier: Apache-2.0
"""GCP Cloud Functions trigger invoking a deployed function with the event payload."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple

import google_auth_httplib2
import httplib2
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient import discovery
from googleapiclient.errors import Error as GoogleAPIError

from sensor_triggers.credentials import resolve_secret_path
from sensor_triggers.errors import AuthenticationError, ExecutionError
from sensor_triggers.events import Event
from sensor_triggers.serialization import decode_body

from .base import Resource, Trigger

log = logging.getLogger(__name__)

_SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]


@dataclass
class GCPCloudFunctionResource(Resource):
    function_name: str
    credentials_path: str | None = None


class GCPCloudFunctionTrigger(Trigger):
    trigger_type = "gcp_cloud_function"
    resource_type = GCPCloudFunctionResource
    requires_payload = True

    async def create_client(self) -> Any:
        return await asyncio.to_thread(self._build_service)

    def _build_service(self) -> Any:
        if not self.template.credentials_path:
            raise AuthenticationError(f"gcp trigger {self.name} has no credentials_path")
        path = resolve_secret_path(self.template.credentials_path, self.settings.secrets_root)
        try:
            credentials = service_account.Credentials.from_service_account_file(str(path), scopes=_SCOPES)
        except (OSError, ValueError) as exc:
            raise AuthenticationError(f"can not load service account file {path}") from exc
        # each socket operation is bounded by the trigger deadline
        http = google_auth_httplib2.AuthorizedHttp(credentials, http=httplib2.Http(timeout=self.timeout))
        try:
            service = discovery.build("cloudfunctions", "v1", http=http, cache_discovery=False)
        except (GoogleAPIError, GoogleAuthError) as exc:
            raise AuthenticationError("failed to create a GCP cloud functions service") from exc
        log.info("created cloud functions service for trigger %s", self.name)
        return service

    async def execute(self, events: Mapping[str, Event], resource: Resource) -> Any:
        self.check_resource(resource)
        payload = self.build_payload(events, resource)
        service = await self.client()
        request = service.projects().locations().functions().call(
            name=resource.function_name, body={"data": payload.decode("utf-8")}
        )
        try:
            return await asyncio.to_thread(request.execute)
        except (GoogleAPIError, GoogleAuthError, httplib2.HttpLib2Error, OSError) as exc:
            raise ExecutionError(f"gcp trigger {self.name} failed to call {resource.function_name}") from exc

    def describe_response(self, response: Dict[str, Any]) -> Tuple[Any, Any]:
        body = dict(response)
        result = body.get("result")
        if isinstance(result, str):
            body["result"] = decode_body(result.encode("utf-8"))
        if body.get("error"):
            log.warning("gcp trigger %s function returned error: %s", self.name, body["error"])
            return "ERROR", body
        return "OK", body
