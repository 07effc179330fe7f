"""
NexusForge Kernel — Path Engine

Pure functions over configuration trees:
  get_at_path(tree, path)          → value
  apply_update(tree, path, value)  → new tree

A path is an ordered sequence of keys: strings index dicts, ints index
lists. apply_update never mutates its input; it deep-copies the tree and
replaces a single field, so anyone holding the previous tree keeps seeing
the previous values.

There is no auto-vivification. Every prefix must resolve to a dict or a
list and the terminal key must already exist in its container.
"""

from __future__ import annotations

import copy
from collections.abc import Sequence
from typing import Any

from forge.kernel.types import PathKey


class InvalidPathError(Exception):
    """A path does not resolve inside the configuration tree."""

    def __init__(self, path: Sequence[PathKey], reason: str) -> None:
        self.path = list(path)
        self.reason = reason
        super().__init__(f"{format_path(path)}: {reason}")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_at_path(tree: Any, path: Sequence[PathKey]) -> Any:
    """Return the value at path. An empty path returns the tree itself."""
    current = tree
    for i, key in enumerate(path):
        current = _step(current, key, path, i)
    return current


def apply_update(tree: dict[str, Any], path: Sequence[PathKey], value: Any) -> dict[str, Any]:
    """
    Replace the value at path and return the new tree.

    Raises InvalidPathError if path is empty, if any prefix does not
    resolve to a container, or if the terminal key is absent.
    """
    if not path:
        raise InvalidPathError(path, "path must not be empty")

    new_tree = copy.deepcopy(tree)
    parent = new_tree
    for i, key in enumerate(path[:-1]):
        parent = _step(parent, key, path, i)

    last = path[-1]
    last_index = len(path) - 1
    if isinstance(parent, dict):
        if not isinstance(last, str):
            raise InvalidPathError(path, f"segment {last_index} must be a field name")
        if last not in parent:
            raise InvalidPathError(path, f"unknown field {last!r}")
        parent[last] = copy.deepcopy(value)
    elif isinstance(parent, list):
        if not _is_index(last) or not -len(parent) <= last < len(parent):
            raise InvalidPathError(path, f"index {last!r} out of range")
        parent[last] = copy.deepcopy(value)
    else:
        raise InvalidPathError(path, f"segment {last_index - 1} is not a container")

    return new_tree


def is_valid_path(tree: Any, path: Sequence[PathKey]) -> bool:
    """Return True if apply_update(tree, path, ...) would succeed."""
    if not path:
        return False
    try:
        parent = get_at_path(tree, path[:-1])
    except InvalidPathError:
        return False
    last = path[-1]
    if isinstance(parent, dict):
        return isinstance(last, str) and last in parent
    if isinstance(parent, list):
        return _is_index(last) and -len(parent) <= last < len(parent)
    return False


def format_path(path: Sequence[PathKey]) -> str:
    """
    Human-readable path for error messages.

    Examples:
      ["features", "welcomeMessage", "channel"] → "features.welcomeMessage.channel"
      ["pages", 0, "sections", "hero"]          → "pages[0].sections.hero"
    """
    out = ""
    for key in path:
        if _is_index(key):
            out += f"[{key}]"
        else:
            out += f".{key}" if out else str(key)
    return out or "<root>"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _is_index(key: Any) -> bool:
    return isinstance(key, int) and not isinstance(key, bool)


def _step(current: Any, key: PathKey, path: Sequence[PathKey], i: int) -> Any:
    if isinstance(current, dict):
        if not isinstance(key, str) or key not in current:
            raise InvalidPathError(path, f"unknown field {key!r} at segment {i}")
        return current[key]
    if isinstance(current, list):
        if not _is_index(key) or not -len(current) <= key < len(current):
            raise InvalidPathError(path, f"index {key!r} out of range at segment {i}")
        return current[key]
    raise InvalidPathError(path, f"segment {i} does not address a container")
