"""Exception hierarchy for the order bridge.

Authentication failures and the "nothing to forward" case are outcomes,
not exceptions. Everything here is terminal for the invocation.
"""

from __future__ import annotations

__all__ = [
    "ConfigurationError",
    "FulfillmentError",
    "OrderValidationError",
    "PartnerRejectedError",
    "TransportError",
]


class FulfillmentError(Exception):
    """Base class for all bridge failures."""

    pass


class ConfigurationError(FulfillmentError):
    """Required settings are missing or invalid."""

    pass


class OrderValidationError(FulfillmentError):
    """The webhook body is not a decodable Shopify order."""

    pass


class PartnerRejectedError(FulfillmentError):
    """eFulfillment answered with a non-200 status.

    Carries the partner's status and raw body so the caller can relay them
    unchanged.
    """

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"eFulfillment rejected order: HTTP {status_code}")
        self.status_code = status_code
        self.body = body

    def to_lambda(self) -> dict[str, object]:
        return {"statusCode": self.status_code, "body": self.body}


class TransportError(FulfillmentError):
    """The request to eFulfillment never produced an HTTP response."""

    pass
