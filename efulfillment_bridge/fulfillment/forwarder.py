"""eFulfillment order submission — single HTTPS POST of the order XML.

One attempt per invocation: no retry, no backoff, no idempotency key. A
webhook delivered twice is submitted twice.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from efulfillment_bridge.config import FulfillmentSettings
from efulfillment_bridge.errors import TransportError

logger = logging.getLogger(__name__)

XML_HEADERS = {"Content-Type": "text/xml"}


@dataclass(frozen=True)
class ForwardResult:
    """Status and raw body returned by eFulfillment."""

    status_code: int
    body: str

    @property
    def ok(self) -> bool:
        return self.status_code == 200


async def _post(client: httpx.AsyncClient, xml: str, settings: FulfillmentSettings) -> httpx.Response:
    return await client.post(
        settings.endpoint,
        content=xml.encode("utf-8"),
        headers=XML_HEADERS,
        timeout=settings.timeout,
    )


async def forward(
    xml: str,
    settings: FulfillmentSettings,
    client: httpx.AsyncClient | None = None,
) -> ForwardResult:
    """POST an OrderSubmitRequest document to eFulfillment.

    Args:
        xml: Rendered order document
        settings: Supplies the endpoint and timeout
        client: Optional client to send through; a fresh one is opened and
            closed for this call when omitted

    Returns:
        ForwardResult for any HTTP response, whatever its status

    Raises:
        TransportError: DNS, connection, TLS or timeout failure
    """
    try:
        if client is not None:
            response = await _post(client, xml, settings)
        else:
            async with httpx.AsyncClient() as own_client:
                response = await _post(own_client, xml, settings)
    except httpx.RequestError as exc:
        logger.error("eFulfillment request failed: %s", exc)
        raise TransportError(f"eFulfillment request failed: {exc}") from exc

    result = ForwardResult(status_code=response.status_code, body=response.text)
    logger.info("eFulfillment Response Status Code: %d", result.status_code)
    logger.debug("eFulfillment Response Body: %s", result.body)
    return result
