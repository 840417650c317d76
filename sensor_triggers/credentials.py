# SPDX-License-Identifier: Apache-2.0
"""Load credential material from files populated by mounted secret volumes."""
from __future__ import annotations

from pathlib import Path

from .errors import AuthenticationError


def resolve_secret_path(path: str | Path, root: str | Path) -> Path:
    candidate = Path(path)
    if not candidate.is_absolute():
        candidate = Path(root) / candidate
    if not candidate.is_file():
        raise AuthenticationError(f"credential file {candidate} does not exist")
    return candidate


def read_secret(path: str | Path, root: str | Path) -> str:
    resolved = resolve_secret_path(path, root)
    try:
        return resolved.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as exc:
        raise AuthenticationError(f"failed to read credential file {resolved}") from exc
