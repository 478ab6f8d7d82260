"""Runtime settings — merchant credentials, webhook secret, partner endpoint.

Security contract:
- Settings are read from the environment once per process (hosted app) or
  once per invocation (Lambda entrypoint), then passed explicitly
- Any missing required value raises ConfigurationError (fail-closed)
- Secret values are excluded from repr() so they never reach a log line
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from efulfillment_bridge.errors import ConfigurationError

logger = logging.getLogger(__name__)

EFULFILLMENT_ORDERS_URL = "https://fcp.efulfillmentservice.com:443/xml/orders/"
DEFAULT_TIMEOUT_SECONDS = 30.0

# Setting name -> environment variable
_REQUIRED_ENV = {
    "webhook_secret": "SHOPIFY_WEBHOOK_SECRET",
    "merchant_id": "MERCHANT_ID",
    "merchant_name": "MERCHANT_NAME",
    "merchant_token": "MERCHANT_TOKEN",
}


@dataclass(frozen=True)
class FulfillmentSettings:
    """Read-only configuration shared by every pipeline stage."""

    webhook_secret: str = field(repr=False)
    merchant_id: str
    merchant_name: str
    merchant_token: str = field(repr=False)
    endpoint: str = EFULFILLMENT_ORDERS_URL
    timeout: float = DEFAULT_TIMEOUT_SECONDS


def load_settings(environ: Mapping[str, str] | None = None) -> FulfillmentSettings:
    """Build settings from the environment.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Raises:
        ConfigurationError: if a required variable is unset or blank, or the
            timeout is not a positive number
    """
    env = os.environ if environ is None else environ

    values: dict[str, str] = {}
    missing: list[str] = []
    for name, var in _REQUIRED_ENV.items():
        value = env.get(var, "").strip()
        if not value:
            missing.append(var)
        values[name] = value

    if missing:
        logger.error("Missing required configuration: %s", ", ".join(missing))
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    endpoint = env.get("EFULFILLMENT_URL", "").strip() or EFULFILLMENT_ORDERS_URL

    raw_timeout = env.get("EFULFILLMENT_TIMEOUT", "").strip()
    timeout = DEFAULT_TIMEOUT_SECONDS
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ConfigurationError(
                f"EFULFILLMENT_TIMEOUT must be a number, got {raw_timeout!r}"
            ) from None
        if timeout <= 0:
            raise ConfigurationError("EFULFILLMENT_TIMEOUT must be positive")

    return FulfillmentSettings(endpoint=endpoint, timeout=timeout, **values)
