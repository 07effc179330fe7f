"""
NexusForge Kernel — Records

User-authored records living in lists inside a configuration tree
(custom commands, ticket panels, embeds, orders). Every helper is a thin
layer over apply_update: it computes the new list and replaces it, so the
copy-on-write guarantee carries over.
"""

from __future__ import annotations

import copy
import time
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any

from forge.kernel.paths import apply_update, get_at_path
from forge.kernel.types import PathKey

CUSTOM_COMMANDS_PATH: tuple[PathKey, ...] = ("customCommands",)
TICKET_PANELS_PATH: tuple[PathKey, ...] = ("features", "ticketSystem", "panels")
EMBEDS_PATH: tuple[PathKey, ...] = ("embeds",)
ORDERS_PATH: tuple[PathKey, ...] = ("orders",)


class IdAllocator:
    """
    Issues `<prefix>_<n>` identifiers.

    n is the wall clock in milliseconds, bumped so it always increases.
    An identifier handed out once is never handed out again by the same
    allocator, even after the record carrying it is deleted.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._last = 0

    def next(self, prefix: str) -> str:
        value = max(int(self._clock() * 1000), self._last + 1)
        self._last = value
        return f"{prefix}_{value}"


# ---------------------------------------------------------------------------
# List record helpers
# ---------------------------------------------------------------------------


def append_record(tree: dict[str, Any], path: Sequence[PathKey], record: dict[str, Any]) -> dict[str, Any]:
    """Return a new tree with record added at the end of the list at path."""
    records = get_at_path(tree, path)
    return apply_update(tree, path, [*records, record])


def prepend_record(tree: dict[str, Any], path: Sequence[PathKey], record: dict[str, Any]) -> dict[str, Any]:
    """Return a new tree with record inserted first in the list at path."""
    records = get_at_path(tree, path)
    return apply_update(tree, path, [record, *records])


def upsert_record(tree: dict[str, Any], path: Sequence[PathKey], record: dict[str, Any]) -> dict[str, Any]:
    """Replace the record with the same id, or append it when no record matches."""
    records = get_at_path(tree, path)
    if any(r.get("id") == record["id"] for r in records):
        return apply_update(tree, path, [record if r.get("id") == record["id"] else r for r in records])
    return apply_update(tree, path, [*records, record])


def remove_record(tree: dict[str, Any], path: Sequence[PathKey], record_id: str) -> dict[str, Any]:
    """Return a new tree without the record carrying record_id. Unknown ids are a no-op."""
    records = get_at_path(tree, path)
    return apply_update(tree, path, [r for r in records if r.get("id") != record_id])


def find_record(records: list[dict[str, Any]], record_id: str) -> dict[str, Any] | None:
    return next((r for r in records if r.get("id") == record_id), None)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


def make_order(payload: dict[str, Any], order_id: str, created_at: datetime) -> dict[str, Any]:
    """
    Build an Order record from a placeOrder payload.

    Items are deep-copied: an order keeps the price and description the
    customer saw, whatever happens to the catalog later.
    """
    order: dict[str, Any] = {
        "id": order_id,
        "createdAt": created_at,
        "customerEmail": payload["customerEmail"],
        "items": copy.deepcopy(list(payload["items"])),
        "total": payload["total"],
    }
    if payload.get("shippingAddress") is not None:
        order["shippingAddress"] = dict(payload["shippingAddress"])
    return order
