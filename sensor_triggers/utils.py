# SPDX-License-Identifier: Apache-2.0
"""Utility helpers for loading pluggable trigger kinds."""
from __future__ import annotations

import importlib
from typing import Any


def resolve_callable(qualname: str) -> Any:
    """Resolve `package.module:attribute` to the object it names.

    Used for trigger types that are not registered up front, so a sensor
    file can point at a `Trigger` subclass shipped in another package.
    """
    module_name, _, attr = qualname.partition(":")
    if not module_name or not attr:
        raise ValueError(f"'{qualname}' is not of the form 'package.module:attribute'")
    module = importlib.import_module(module_name)
    try:
        return getattr(module, attr)
    except AttributeError as exc:
        raise AttributeError(f"callable '{qualname}' not found in module '{module_name}'") from exc
