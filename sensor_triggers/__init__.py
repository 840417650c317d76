# SPDX-License-Identifier: Apache-2.0
"""Trigger dispatch core: events in, parameterised actions out."""
from __future__ import annotations

__version__ = "0.1.0"
