"""Shared fixtures for the eFulfillment bridge test suite."""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
from typing import Any

import pytest

from efulfillment_bridge.config import FulfillmentSettings

WEBHOOK_SECRET = "shopify-test-secret"


@pytest.fixture
def settings() -> FulfillmentSettings:
    """Settings with fake merchant credentials and the default endpoint."""
    return FulfillmentSettings(
        webhook_secret=WEBHOOK_SECRET,
        merchant_id="M-1001",
        merchant_name="Test Merchant",
        merchant_token="tok-secret",
    )


@pytest.fixture
def sign():
    """Compute a valid X-Shopify-Hmac-SHA256 value for a body."""

    def _sign(body: str | bytes, secret: str = WEBHOOK_SECRET) -> str:
        if isinstance(body, str):
            body = body.encode("utf-8")
        digest = hmac.new(secret.encode(), body, hashlib.sha256).digest()
        return base64.b64encode(digest).decode()

    return _sign


@pytest.fixture
def make_order():
    """Factory for Shopify order payload dicts."""

    def _make(
        order_id: int | str = 1,
        test: bool = False,
        country_code: str = "US",
        line_items: list[dict[str, Any]] | None = None,
        **address: Any,
    ) -> dict[str, Any]:
        if line_items is None:
            line_items = [{"sku": "A1", "quantity": 2, "fulfillment_service": "other"}]
        shipping_address = {
            "first_name": "Ada",
            "last_name": "Lovelace",
            "address1": "1 Analytical Way",
            "city": "Portland",
            "province": "OR",
            "zip": "97201",
            "country_code": country_code,
        }
        shipping_address.update(address)
        return {
            "id": order_id,
            "test": test,
            "shipping_address": shipping_address,
            "line_items": line_items,
        }

    return _make


@pytest.fixture
def order_body(make_order) -> str:
    """JSON body of the default single-item US order."""
    return json.dumps(make_order())
