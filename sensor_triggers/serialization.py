# SPDX-License-Identifier: Apache-2.0
"""Helpers for decoding event data and encoding structured documents."""
from __future__ import annotations

import json
from typing import Any

import yaml

from .events import Event

_JSON_TYPES = {"application/json", "text/json", "application/cloudevents+json"}
_YAML_TYPES = {"application/yaml", "application/x-yaml", "text/yaml", "text/x-yaml"}


def decode_event_data(event: Event) -> Any:
    fmt = event.context.data_content_type.split(";", 1)[0].strip().lower()
    if fmt in _JSON_TYPES or fmt.endswith("+json"):
        return json.loads(event.data.decode("utf-8"))
    if fmt in _YAML_TYPES:
        try:
            return yaml.safe_load(event.data.decode("utf-8"))
        except yaml.YAMLError as exc:
            raise ValueError(f"invalid YAML event data: {exc}") from exc
    try:
        text = event.data.decode("utf-8")
    except UnicodeDecodeError:
        return event.data
    if fmt.startswith("text/"):
        return text
    try:
        return json.loads(text)
    except ValueError:
        return text


def encode_document(doc: Any) -> bytes:
    """Serialise a document to compact JSON; equal documents give equal bytes."""
    return json.dumps(doc, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def decode_document(data: bytes) -> Any:
    return json.loads(data.decode("utf-8"))


def decode_body(data: bytes) -> Any:
    """Best-effort decoding of a response body: JSON when possible, else text."""
    if not data:
        return None
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        return data
    try:
        return json.loads(text)
    except ValueError:
        return text
