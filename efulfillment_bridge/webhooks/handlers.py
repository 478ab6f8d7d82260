"""Shopify orders/create webhook handlers — verify, transform, forward.

Each invocation:
1. Verifies the X-Shopify-Hmac-SHA256 signature over the raw body
2. Decodes and validates the order
3. Drops Printful line items and renders the rest as eFulfillment XML
4. POSTs the XML once and relays the partner's answer

Security contract:
- Signature failure -> 401 before the body is parsed, no outbound call
- Partner and transport error details are not echoed by the HTTP route
- Secrets, digests and customer addresses are never logged
- No state is shared between invocations
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from efulfillment_bridge.config import FulfillmentSettings, load_settings
from efulfillment_bridge.errors import (
    OrderValidationError,
    PartnerRejectedError,
    TransportError,
)
from efulfillment_bridge.fulfillment.forwarder import forward
from efulfillment_bridge.fulfillment.models import InboundEvent, parse_order
from efulfillment_bridge.fulfillment.transformer import transform
from efulfillment_bridge.webhooks.verification import normalize_headers, verify

logger = logging.getLogger(__name__)

ORDERS_CREATE_TOPIC = "orders/create"

UNAUTHORIZED_BODY = "Unauthorized - Invalid Shopify Webhook Signature"
MALFORMED_ORDER_BODY = "Bad Request - Malformed Shopify Order"
NO_ITEMS_BODY = "No efulfillment items"
IGNORED_TOPIC_BODY = "Ignored Shopify topic"
BAD_GATEWAY_BODY = "Bad Gateway"


@dataclass(frozen=True)
class WebhookResponse:
    status_code: int
    body: str

    def to_lambda(self) -> dict[str, Any]:
        return {"statusCode": self.status_code, "body": self.body}


def _log_webhook(topic: str, order_id: object, status: str) -> None:
    """Audit log for webhook activity."""
    logger.info(
        "WEBHOOK_AUDIT provider=shopify topic=%s order=%s status=%s",
        topic or "unknown",
        order_id,
        status,
    )


class OrderRelay:
    """Runs one webhook event through verify -> transform -> forward."""

    def __init__(
        self,
        settings: FulfillmentSettings,
        client: httpx.AsyncClient | None = None,
    ):
        self._settings = settings
        self._client = client

    async def handle(self, event: InboundEvent) -> WebhookResponse:
        """Process a single orders/create delivery.

        Returns:
            WebhookResponse for every outcome the bridge answers itself

        Raises:
            PartnerRejectedError: eFulfillment answered with a non-200 status
            TransportError: eFulfillment could not be reached
        """
        headers = normalize_headers(event.headers)
        topic = headers.get("x-shopify-topic", "")

        if not verify(headers, event.body, self._settings.webhook_secret):
            logger.error(UNAUTHORIZED_BODY)
            _log_webhook(topic, "unknown", "signature_failed")
            return WebhookResponse(401, UNAUTHORIZED_BODY)

        if topic and topic != ORDERS_CREATE_TOPIC:
            _log_webhook(topic, "unknown", "ignored_topic")
            return WebhookResponse(200, IGNORED_TOPIC_BODY)

        try:
            order = parse_order(event.body)
        except OrderValidationError:
            logger.error("Rejecting malformed Shopify order payload")
            _log_webhook(topic, "unknown", "invalid_order")
            return WebhookResponse(400, MALFORMED_ORDER_BODY)

        logger.info(
            "Verified Shopify order %s (%d line items, test=%s)",
            order.id,
            len(order.line_items),
            order.test,
        )

        result = transform(order, self._settings)
        if result.xml is None:
            logger.info(NO_ITEMS_BODY)
            _log_webhook(topic, order.id, "no_items")
            return WebhookResponse(200, NO_ITEMS_BODY)

        try:
            forwarded = await forward(result.xml, self._settings, client=self._client)
        except TransportError:
            logger.error("Error submitting order for Order ID: %s", order.id)
            _log_webhook(topic, order.id, "transport_error")
            raise

        if not forwarded.ok:
            logger.error(
                "Order submission failed for Order ID: %s, Status Code: %d",
                order.id,
                forwarded.status_code,
            )
            _log_webhook(topic, order.id, "partner_rejected")
            raise PartnerRejectedError(forwarded.status_code, forwarded.body)

        logger.info("Order submission successful for Order ID: %s", order.id)
        _log_webhook(topic, order.id, "forwarded")
        return WebhookResponse(200, forwarded.body)


# ── Lambda entrypoint ─────────────────────────────────────────────────────


async def send_order(
    event: Mapping[str, Any],
    context: Any = None,
    *,
    settings: FulfillmentSettings | None = None,
    client: httpx.AsyncClient | None = None,
) -> dict[str, Any]:
    """Handle an API Gateway proxy event carrying a Shopify webhook.

    Settings are read from the environment on every call unless given, so
    missing configuration fails the invocation before anything is verified.

    Raises:
        ConfigurationError: required environment variables are missing
        PartnerRejectedError: eFulfillment answered with a non-200 status
        TransportError: eFulfillment could not be reached
    """
    if settings is None:
        settings = load_settings()
    relay = OrderRelay(settings, client=client)
    response = await relay.handle(InboundEvent.from_lambda(event))
    return response.to_lambda()


def lambda_handler(event: Mapping[str, Any], context: Any = None) -> dict[str, Any]:
    """Synchronous wrapper for the AWS Lambda Python runtime."""
    return asyncio.run(send_order(event, context))


# ── FastAPI routes ────────────────────────────────────────────────────────


def register_webhook_routes(app: FastAPI) -> None:
    """Register the Shopify webhook route on the FastAPI app.

    Expects ``app.state.settings`` to hold FulfillmentSettings by the time
    a request arrives, and optionally ``app.state.http_client``.
    """

    @app.post("/webhooks/shopify/orders")
    async def shopify_orders_webhook(request: Request):
        """Receive Shopify orders/create webhooks (signature-verified)."""
        event = InboundEvent(headers=dict(request.headers), body=await request.body())
        relay = OrderRelay(
            request.app.state.settings,
            client=getattr(request.app.state, "http_client", None),
        )

        try:
            response = await relay.handle(event)
        except PartnerRejectedError as exc:
            return PlainTextResponse(exc.body, status_code=exc.status_code)
        except TransportError:
            return PlainTextResponse(BAD_GATEWAY_BODY, status_code=502)

        return PlainTextResponse(response.body, status_code=response.status_code)

    logger.info("Webhook routes registered: /webhooks/shopify/orders")
