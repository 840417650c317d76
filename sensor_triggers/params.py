# SPDX-License-Identifier: Apache-2.0
"""Resolve event values and inject them into templates and payloads."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from .errors import InvalidOperationError, MissingEventError, ParameterError, PathResolutionError
from .events import Event
from .paths import get_path, set_path
from .serialization import decode_document, decode_event_data, encode_document

log = logging.getLogger(__name__)

OVERWRITE = "overwrite"
PREPEND = "prepend"
APPEND = "append"
OPERATIONS = frozenset({OVERWRITE, PREPEND, APPEND})

_UNSET = object()


@dataclass(frozen=True, slots=True)
class ParameterSource:
    dependency_name: str
    data_key: str | None = None
    context_key: str | None = None
    value: Any = _UNSET

    @property
    def has_default(self) -> bool:
        return self.value is not _UNSET


@dataclass(frozen=True, slots=True)
class ParameterBinding:
    src: ParameterSource
    dest: str
    operation: str = OVERWRITE

    def __post_init__(self) -> None:
        if self.operation not in OPERATIONS:
            raise ValueError(f"unsupported parameter operation '{self.operation}'")


def _lookup(src: ParameterSource, event: Event) -> Any:
    if src.context_key is not None:
        return get_path(event.context.as_document(), src.context_key)
    try:
        data = decode_event_data(event)
    except ValueError as exc:
        raise PathResolutionError(src.data_key or "$", f"event data for '{src.dependency_name}' is not decodable") from exc
    if src.data_key is None:
        return data
    return get_path(data, src.data_key)


def resolve_param_value(src: ParameterSource, events: Mapping[str, Event]) -> Any:
    event = events.get(src.dependency_name)
    if event is None:
        if src.has_default:
            return src.value
        raise MissingEventError(src.dependency_name)
    try:
        return _lookup(src, event)
    except PathResolutionError:
        if src.has_default:
            log.debug("using default for %s: key did not resolve", src.dependency_name)
            return src.value
        raise


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return encode_document(value).decode("utf-8")


def _apply_one(doc: Any, binding: ParameterBinding, value: Any) -> Any:
    if binding.operation == OVERWRITE:
        return set_path(doc, binding.dest, value)
    try:
        current = get_path(doc, binding.dest)
    except PathResolutionError as exc:
        raise InvalidOperationError(f"cannot {binding.operation} to '{binding.dest}': destination is missing") from exc
    if isinstance(current, list):
        merged = [value, *current] if binding.operation == PREPEND else [*current, value]
    elif isinstance(current, str):
        merged = _as_text(value) + current if binding.operation == PREPEND else current + _as_text(value)
    else:
        raise InvalidOperationError(
            f"cannot {binding.operation} to '{binding.dest}': destination holds {type(current).__name__}"
        )
    return set_path(doc, binding.dest, merged)


def _apply_all(doc: Any, bindings: Sequence[ParameterBinding], events: Mapping[str, Event]) -> Any:
    for binding in bindings:
        value = resolve_param_value(binding.src, events)
        doc = _apply_one(doc, binding, value)
    return doc


def apply_params(template: bytes, bindings: Sequence[ParameterBinding], events: Mapping[str, Event]) -> bytes:
    """Apply bindings in order to a serialised template and return the new bytes."""
    try:
        doc = decode_document(template)
    except ValueError as exc:
        raise ParameterError("resource template is not a valid JSON document") from exc
    return encode_document(_apply_all(doc, bindings, events))


def construct_payload(events: Mapping[str, Event], bindings: Sequence[ParameterBinding]) -> bytes:
    """Build a fresh payload document from bindings; fails as a whole on any unresolved binding."""
    return encode_document(_apply_all({}, bindings, events))
