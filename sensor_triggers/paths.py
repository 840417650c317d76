# SPDX-License-Identifier: Apache-2.0
"""Path expressions over generic JSON-shaped documents.

Supported forms:
- `$` or the empty string for the whole document
- `$.order.amount` / `order.amount` for mapping keys
- `items[0]` or `items.0` for sequence indices
- `['key.with.dots']` or `key\\.with\\.dots` for keys containing dots

Bracketed indices create sequences when `set_path` builds missing structure;
bare segments always create mappings.
"""
from __future__ import annotations

from typing import Any, List, Union

from .errors import PathResolutionError

Segment = Union[str, int]


def parse_path(path: str) -> List[Segment]:
    text = (path or "").strip()
    if text.startswith("$"):
        text = text[1:]
        if text.startswith("."):
            text = text[1:]
    segments: List[Segment] = []
    buf: List[str] = []
    pending = False
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text):
            buf.append(text[i + 1])
            pending = True
            i += 2
            continue
        if ch == ".":
            if not pending:
                raise PathResolutionError(path, f"empty segment at offset {i}")
            segments.append("".join(buf))
            buf, pending = [], False
        elif ch == "[":
            if pending:
                segments.append("".join(buf))
                buf, pending = [], False
            end = text.find("]", i)
            if end == -1:
                raise PathResolutionError(path, "unterminated '['")
            inner = text[i + 1 : end].strip()
            if len(inner) >= 2 and inner[0] == inner[-1] and inner[0] in "'\"":
                segments.append(inner[1:-1])
            elif inner.isdigit():
                segments.append(int(inner))
            else:
                raise PathResolutionError(path, f"invalid index '{inner}'")
            i = end + 1
            if i < len(text) and text[i] == ".":
                i += 1
            continue
        else:
            buf.append(ch)
            pending = True
        i += 1
    if pending:
        segments.append("".join(buf))
    elif text.endswith(".") and not text.endswith("\\."):
        raise PathResolutionError(path, "trailing '.'")
    return segments


def _list_index(seg: Segment, path: str) -> int:
    if isinstance(seg, int):
        return seg
    if seg.isdigit():
        return int(seg)
    raise PathResolutionError(path, f"key '{seg}' used on a sequence")


def get_path(doc: Any, path: str) -> Any:
    node = doc
    for seg in parse_path(path):
        if isinstance(node, dict):
            if isinstance(seg, int):
                raise PathResolutionError(path, f"index [{seg}] used on a mapping")
            if seg not in node:
                raise PathResolutionError(path, f"key '{seg}' not found")
            node = node[seg]
        elif isinstance(node, list):
            idx = _list_index(seg, path)
            if idx >= len(node):
                raise PathResolutionError(path, f"index {idx} out of range")
            node = node[idx]
        else:
            raise PathResolutionError(path, f"cannot address '{seg}' inside {type(node).__name__}")
    return node


def _new_container(seg: Segment) -> Any:
    return [] if isinstance(seg, int) else {}


def _put(node: Any, seg: Segment, value: Any, path: str) -> None:
    if isinstance(node, dict):
        if isinstance(seg, int):
            raise PathResolutionError(path, f"index [{seg}] used on a mapping")
        node[seg] = value
    elif isinstance(node, list):
        idx = _list_index(seg, path)
        if idx < len(node):
            node[idx] = value
        else:
            node.extend([None] * (idx - len(node)))
            node.append(value)
    else:
        raise PathResolutionError(path, f"cannot address '{seg}' inside {type(node).__name__}")


def _peek(node: Any, seg: Segment) -> Any:
    if isinstance(node, dict):
        return node.get(seg) if isinstance(seg, str) else None
    if isinstance(node, list):
        idx = seg if isinstance(seg, int) else int(seg) if seg.isdigit() else len(node)
        return node[idx] if idx < len(node) else None
    return None


def set_path(doc: Any, path: str, value: Any) -> Any:
    """Set `value` at `path`, creating intermediate structure; returns the new root."""
    segments = parse_path(path)
    if not segments:
        return value
    if doc is None:
        doc = _new_container(segments[0])
    node = doc
    for seg, nxt in zip(segments, segments[1:]):
        child = _peek(node, seg)
        if child is None:
            child = _new_container(nxt)
            _put(node, seg, child, path)
        node = child
    _put(node, segments[-1], value, path)
    return doc
