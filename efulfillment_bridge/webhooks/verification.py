"""Shopify webhook signature verification — constant-time HMAC.

Security contract:
- Comparison uses hmac.compare_digest() on decoded digest bytes (constant-time)
- Missing body, header or secret -> verification fails (fail-closed)
- Malformed base64 or wrong digest length -> verification fails, never raises
- Only header names and a masked digest prefix are logged
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import logging
from collections.abc import Mapping

logger = logging.getLogger(__name__)

SHOPIFY_HMAC_HEADER = "x-shopify-hmac-sha256"

# SHA-256 digest size in bytes
_DIGEST_SIZE = hashlib.sha256().digest_size

# Characters of the received digest kept in log lines
_LOG_PREFIX_CHARS = 6


def _mask(value: str) -> str:
    if len(value) <= _LOG_PREFIX_CHARS:
        return "***"
    return value[:_LOG_PREFIX_CHARS] + "..."


def normalize_headers(headers: Mapping[str, str] | None) -> dict[str, str]:
    """Return a copy of headers with lowercase keys."""
    if not headers:
        return {}
    return {str(k).lower(): v for k, v in headers.items()}


def compute_signature(body: bytes, secret: str) -> str:
    """Base64-encoded HMAC-SHA256 of body, as Shopify sends it."""
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def _decode_signature(signature: str) -> bytes | None:
    try:
        decoded = base64.b64decode(signature, validate=True)
    except (binascii.Error, ValueError):
        return None
    if len(decoded) != _DIGEST_SIZE:
        return None
    return decoded


def verify(
    headers: Mapping[str, str] | None,
    raw_body: str | bytes | None,
    secret: str,
) -> bool:
    """Verify a Shopify webhook HMAC-SHA256 signature.

    Shopify sends: X-Shopify-Hmac-SHA256 header (base64-encoded HMAC-SHA256
    of the raw request body).

    Args:
        headers: Request headers, any key casing
        raw_body: Raw request body exactly as received
        secret: Shared webhook secret

    Returns:
        True if signature is valid
    """
    normalized = normalize_headers(headers)
    logger.debug("Incoming webhook header names: %s", sorted(normalized))

    if not secret:
        logger.warning("Webhook secret not set — rejecting webhook")
        return False

    if not raw_body:
        logger.error("Missing body in the event")
        return False

    signature = normalized.get(SHOPIFY_HMAC_HEADER)
    if not signature:
        logger.error("Missing HMAC header in the event")
        return False

    body = raw_body.encode("utf-8") if isinstance(raw_body, str) else raw_body

    received = _decode_signature(signature.strip())
    if received is None:
        logger.error("Malformed HMAC header: %s", _mask(signature))
        return False

    expected = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    valid = hmac.compare_digest(received, expected)

    logger.debug(
        "HMAC check received=%s calculated=%s valid=%s",
        _mask(signature),
        _mask(base64.b64encode(expected).decode("ascii")),
        valid,
    )
    return valid
