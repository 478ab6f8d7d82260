"""Order bridge data models.

InboundEvent is the hosting-runtime view of one webhook delivery. Order,
ShippingAddress and LineItem model the subset of the Shopify order payload
the bridge reads; unknown fields are ignored.
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from efulfillment_bridge.errors import OrderValidationError


@dataclass(frozen=True)
class InboundEvent:
    """One webhook delivery: headers plus the untouched raw body."""

    headers: Mapping[str, str] = field(default_factory=dict)
    body: str | bytes | None = None

    @classmethod
    def from_lambda(cls, event: Mapping[str, Any]) -> InboundEvent:
        """Build from an API Gateway / Lambda proxy event.

        Bodies flagged ``isBase64Encoded`` are decoded to bytes so the HMAC
        is computed over what Shopify actually signed.
        """
        headers = event.get("headers") or {}
        body = event.get("body")
        if body and event.get("isBase64Encoded"):
            try:
                body = base64.b64decode(body, validate=True)
            except (binascii.Error, ValueError):
                # Undecodable body cannot carry a valid signature
                body = None
        return cls(headers=dict(headers), body=body)


class ShippingAddress(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    first_name: str | None = None
    last_name: str | None = None
    address1: str | None = None
    city: str | None = None
    province: str | None = None
    zip: str | None = None
    country_code: str | None = None


class LineItem(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    sku: str | None = None
    quantity: int = Field(default=0, ge=0)
    fulfillment_service: str | None = None


class Order(BaseModel):
    """A Shopify order as delivered by the orders/create webhook."""

    model_config = ConfigDict(extra="ignore")

    id: int | str
    test: bool = False
    shipping_address: ShippingAddress
    line_items: list[LineItem]


def parse_order(raw_body: str | bytes) -> Order:
    """Decode and validate a webhook body into an Order.

    Raises:
        OrderValidationError: on invalid JSON or a missing/mistyped field
    """
    try:
        return Order.model_validate_json(raw_body)
    except ValueError as exc:
        # pydantic.ValidationError subclasses ValueError
        raise OrderValidationError(f"Malformed Shopify order: {exc}") from exc
