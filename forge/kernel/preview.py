"""
NexusForge Kernel — Preview Bridge

The only live coupling between a rendered storefront and the workspace.
The document posts `{action, payload}` messages; the host validates them
and turns each one into a preview-state transition, plus a config
mutation for placeOrder.

    navigate      {id}                                      → PagePreview(id)
    viewProduct   {id}                                      → ProductPreview(id)
    viewCheckout  {cart}                                    → CheckoutPreview(cart)
    placeOrder    {customerEmail, items, total, shipping?}  → prepend Order, OrderSuccessPreview

Messages from an unexpected origin, or that fail validation, are dropped
without touching anything. There are no timeouts: every transition needs
an explicit message.
"""

from __future__ import annotations

import copy
import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from forge.config import settings
from forge.kernel.records import ORDERS_PATH, IdAllocator, make_order, prepend_record
from forge.kernel.types import (
    CheckoutPreview,
    OrderSuccessPreview,
    PagePreview,
    PreviewState,
    ProductPreview,
    now_utc,
)

logger = logging.getLogger(__name__)

# Prices and totals beyond this cannot be quantized to cents
MAX_AMOUNT = 10**12


# ---------------------------------------------------------------------------
# Message models
# ---------------------------------------------------------------------------


def _check_items(items: list[dict[str, Any]]) -> list[dict[str, Any]]:
    for item in items:
        for key in ("price", "salePrice"):
            value = item.get(key)
            if key == "salePrice" and value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int | float):
                raise ValueError(f"item {key} must be a number")
            if abs(value) > MAX_AMOUNT or not math.isfinite(value):
                raise ValueError(f"item {key} is out of range")
    return items


class IdPayload(BaseModel):
    id: str = Field(min_length=1)


class CartPayload(BaseModel):
    """Snapshot of the visitor's cart: product records as shown in the document."""

    cart: list[dict[str, Any]]

    @field_validator("cart")
    @classmethod
    def check_prices(cls, v: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return _check_items(v)


class ShippingAddress(BaseModel):
    name: str = ""
    street: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""
    country: str = ""


class OrderPayload(BaseModel):
    customerEmail: str = Field(min_length=3, max_length=320)
    items: list[dict[str, Any]]
    total: float = Field(ge=0, le=MAX_AMOUNT, allow_inf_nan=False)
    shippingAddress: ShippingAddress | None = None

    @field_validator("items")
    @classmethod
    def check_prices(cls, v: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return _check_items(v)


class NavigateMessage(BaseModel):
    model_config = {"extra": "forbid"}

    action: Literal["navigate"]
    payload: IdPayload


class ViewProductMessage(BaseModel):
    model_config = {"extra": "forbid"}

    action: Literal["viewProduct"]
    payload: IdPayload


class ViewCheckoutMessage(BaseModel):
    model_config = {"extra": "forbid"}

    action: Literal["viewCheckout"]
    payload: CartPayload


class PlaceOrderMessage(BaseModel):
    model_config = {"extra": "forbid"}

    action: Literal["placeOrder"]
    payload: OrderPayload


PreviewMessage = Annotated[
    Union[NavigateMessage, ViewProductMessage, ViewCheckoutMessage, PlaceOrderMessage],
    Field(discriminator="action"),
]

_message_adapter: TypeAdapter[Any] = TypeAdapter(PreviewMessage)


def parse_message(data: Any) -> NavigateMessage | ViewProductMessage | ViewCheckoutMessage | PlaceOrderMessage | None:
    """Validate an inbound message. Returns None for anything malformed."""
    try:
        return _message_adapter.validate_python(data)
    except PydanticValidationError as e:
        logger.debug("Dropping malformed preview message: %s", e.errors(include_url=False))
        return None


# ---------------------------------------------------------------------------
# Host
# ---------------------------------------------------------------------------


@dataclass
class PreviewOutcome:
    """Result of one accepted message."""

    preview: PreviewState
    config: dict[str, Any]
    order: dict[str, Any] | None = None


class PreviewHost:
    """
    Accepts messages from exactly one origin and maps them onto
    preview-state transitions. The config passed in is never mutated;
    placeOrder hands back a new tree.
    """

    def __init__(
        self,
        expected_origin: str | None = None,
        ids: IdAllocator | None = None,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self.expected_origin = settings.PREVIEW_ORIGIN if expected_origin is None else expected_origin
        self.ids = ids or IdAllocator()
        self.clock = clock

    def receive(self, origin: str, data: Any, config: dict[str, Any]) -> PreviewOutcome | None:
        if origin != self.expected_origin:
            logger.debug("Dropping preview message from untrusted origin %r", origin)
            return None
        message = parse_message(data)
        if message is None:
            return None
        return _TRANSITIONS[message.action](self, message, config)


def _on_navigate(host: PreviewHost, msg: NavigateMessage, config: dict[str, Any]) -> PreviewOutcome:
    return PreviewOutcome(preview=PagePreview(msg.payload.id), config=config)


def _on_view_product(host: PreviewHost, msg: ViewProductMessage, config: dict[str, Any]) -> PreviewOutcome:
    return PreviewOutcome(preview=ProductPreview(msg.payload.id), config=config)


def _on_view_checkout(host: PreviewHost, msg: ViewCheckoutMessage, config: dict[str, Any]) -> PreviewOutcome:
    cart = tuple(copy.deepcopy(msg.payload.cart))
    return PreviewOutcome(preview=CheckoutPreview(cart), config=config)


def _on_place_order(host: PreviewHost, msg: PlaceOrderMessage, config: dict[str, Any]) -> PreviewOutcome:
    order = make_order(msg.payload.model_dump(), host.ids.next("order"), host.clock())
    new_config = prepend_record(config, ORDERS_PATH, order)
    logger.info("Order %s placed by %s", order["id"], order["customerEmail"])
    return PreviewOutcome(preview=OrderSuccessPreview(), config=new_config, order=order)


_TRANSITIONS: dict[str, Callable[[PreviewHost, Any, dict[str, Any]], PreviewOutcome]] = {
    "navigate": _on_navigate,
    "viewProduct": _on_view_product,
    "viewCheckout": _on_view_checkout,
    "placeOrder": _on_place_order,
}
