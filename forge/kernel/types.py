"""
NexusForge Kernel — Shared Types

Data classes used across the path engine, code generator, renderer,
preview bridge and workspace. These are the contracts that bind the kernel
together.

Configuration trees themselves stay plain dicts (JSON-like); only the
records around them (projects, preview states, logs) get classes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any, Union

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

PROJECT_TYPES: set[str] = {"bot", "website"}

HOSTING_STATUSES: set[str] = {"undeployed", "deploying", "online", "offline"}

SITE_TEMPLATES: tuple[str, ...] = ("modern", "minimalist", "bold")

PRODUCT_PAGE_LAYOUTS: set[str] = {"image-left", "image-top"}

LOG_LEVELS: set[str] = {"info", "warn", "error"}

# Persisted fields with these exact names are rebuilt as datetimes on load
DATE_FIELDS: frozenset[str] = frozenset({"createdAt", "timestamp"})

# Flat checkout shipping charge
SHIPPING_FLAT_RATE = Decimal("4.99")

PathKey = Union[str, int]


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


@dataclass
class Project:
    """
    A user project. Owns exactly one configuration tree whose variant
    (bot or website) is fixed at creation.
    """

    id: str
    name: str
    type: str
    config: dict[str, Any]
    created_at: datetime
    hosting_status: str = "undeployed"
    live_url: str | None = None
    bot_invite_url: str | None = None
    owner_id: str | None = None
    owner_username: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "createdAt": self.created_at,
            "config": self.config,
            "hostingStatus": self.hosting_status,
            "liveUrl": self.live_url,
        }
        if self.bot_invite_url is not None:
            d["botInviteUrl"] = self.bot_invite_url
        if self.owner_id is not None:
            d["ownerId"] = self.owner_id
        if self.owner_username is not None:
            d["ownerUsername"] = self.owner_username
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Project:
        created = d.get("createdAt")
        if not isinstance(created, datetime):
            created = now_utc()
        return cls(
            id=d["id"],
            name=d["name"],
            type=d["type"],
            config=d.get("config", {}),
            created_at=created,
            hosting_status=d.get("hostingStatus", "undeployed"),
            live_url=d.get("liveUrl"),
            bot_invite_url=d.get("botInviteUrl"),
            owner_id=d.get("ownerId"),
            owner_username=d.get("ownerUsername"),
        )


@dataclass
class SystemLog:
    """One entry of the in-app system log collection."""

    id: str
    timestamp: datetime
    level: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "level": self.level,
            "message": self.message,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> SystemLog:
        ts = d.get("timestamp")
        if not isinstance(ts, datetime):
            ts = now_utc()
        return cls(id=d["id"], timestamp=ts, level=d.get("level", "info"), message=d.get("message", ""))


# ---------------------------------------------------------------------------
# Preview states
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PagePreview:
    id: str
    type: str = field(default="page", init=False)


@dataclass(frozen=True)
class ProductPreview:
    id: str
    type: str = field(default="product", init=False)


@dataclass(frozen=True)
class CheckoutPreview:
    """Checkout screen for a snapshot of the visitor's cart."""

    cart: tuple[dict[str, Any], ...]
    type: str = field(default="checkout", init=False)


@dataclass(frozen=True)
class OrderSuccessPreview:
    type: str = field(default="order_success", init=False)


PreviewState = Union[PagePreview, ProductPreview, CheckoutPreview, OrderSuccessPreview]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def now_utc() -> datetime:
    """Current time, timezone-aware UTC."""
    return datetime.now(UTC)
