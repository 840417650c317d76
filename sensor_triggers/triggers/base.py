# SPDX-License-Identifier: Apache-2.0
"""Trigger primitives shared by every action kind."""
from __future__ import annotations

import abc
import copy
import logging
import types
import typing
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Mapping, Tuple, Type

from sensor_triggers.cache import ClientCache
from sensor_triggers.config import Settings, TriggerConfig
from sensor_triggers.errors import InvalidResourceTypeError, PayloadNotSpecifiedError
from sensor_triggers.events import Event
from sensor_triggers.params import apply_params, construct_payload
from sensor_triggers.policy import Outcome, Policy, evaluate
from sensor_triggers.serialization import decode_document, encode_document

log = logging.getLogger(__name__)


@dataclass
class Resource:
    """Typed view of a trigger's action template."""

    @classmethod
    def from_document(cls, doc: Any) -> "Resource":
        if not isinstance(doc, dict):
            raise InvalidResourceTypeError(f"{cls.__name__} template must be a mapping, got {type(doc).__name__}")
        unknown = set(doc) - {f.name for f in fields(cls)}
        if unknown:
            raise InvalidResourceTypeError(f"{cls.__name__} got unknown fields: {', '.join(sorted(unknown))}")
        hints = typing.get_type_hints(cls)
        for name, value in doc.items():
            hint = hints.get(name, Any)
            if not _matches(value, hint):
                raise InvalidResourceTypeError(
                    f"{cls.__name__}.{name} must be {getattr(hint, '__name__', hint)}, got {type(value).__name__}"
                )
        try:
            return cls(**doc)
        except TypeError as exc:
            raise InvalidResourceTypeError(f"invalid {cls.__name__} template: {exc}") from exc

    def to_document(self) -> Dict[str, Any]:
        return asdict(self)


def _matches(value: Any, hint: Any) -> bool:
    if hint is Any:
        return True
    origin = typing.get_origin(hint)
    if origin is typing.Union or origin is types.UnionType:
        return any(_matches(value, arg) for arg in typing.get_args(hint))
    if origin is not None:
        return isinstance(value, origin)
    if hint is float:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if isinstance(hint, type):
        return isinstance(value, hint)
    return True


class Trigger(abc.ABC):
    trigger_type: str = ""
    resource_type: Type[Resource] = Resource
    requires_payload: bool = False

    def __init__(self, config: TriggerConfig, *, cache: ClientCache, settings: Settings):
        self.config = config
        self.name = config.name
        self.cache = cache
        self.settings = settings
        # parsed once up front so a bad template fails at load time
        self.template = self.resource_type.from_document(copy.deepcopy(config.template))

    @property
    def policy(self) -> Policy | None:
        return self.config.policy

    @property
    def timeout(self) -> float:
        return self.config.timeout_s if self.config.timeout_s is not None else self.settings.default_timeout_s

    async def fetch_resource(self) -> Resource:
        return self.resource_type.from_document(copy.deepcopy(self.config.template))

    def apply_resource_parameters(self, events: Mapping[str, Event], resource: Resource) -> Resource:
        self.check_resource(resource)
        if not self.config.parameters:
            return resource
        updated = apply_params(encode_document(resource.to_document()), self.config.parameters, events)
        return self.resource_type.from_document(decode_document(updated))

    def check_resource(self, resource: Any) -> None:
        if not isinstance(resource, self.resource_type):
            raise InvalidResourceTypeError(
                f"trigger {self.name} ({self.trigger_type}) cannot handle resource {type(resource).__name__}"
            )

    def payload_required(self, resource: Resource) -> bool:
        return self.requires_payload

    def build_payload(self, events: Mapping[str, Event], resource: Resource) -> bytes | None:
        if self.config.payload is None:
            if self.payload_required(resource):
                raise PayloadNotSpecifiedError(f"trigger {self.name}: payload parameters are not specified")
            return None
        return construct_payload(events, self.config.payload)

    async def client(self) -> Any:
        return await self.cache.get_or_create(self.name, self.create_client)

    async def create_client(self) -> Any:
        raise NotImplementedError(f"{self.trigger_type} triggers do not use a client")

    @abc.abstractmethod
    async def execute(self, events: Mapping[str, Event], resource: Resource) -> Any:
        raise NotImplementedError

    def describe_response(self, response: Any) -> Tuple[Any, Any]:
        """Reduce a raw response to the (status, body) pair seen by the policy."""
        return "OK", response

    async def apply_policy(self, response: Any) -> Outcome:
        status, body = self.describe_response(response)
        outcome = evaluate(self.policy, status, body)
        if outcome is not Outcome.SUCCESS:
            log.info("trigger %s policy classified status=%s as %s", self.name, status, outcome.value)
        return outcome

    async def close(self) -> None:
        """Optional per-trigger teardown; cached clients are closed by the cache."""
