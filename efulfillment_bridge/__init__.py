"""Shopify orders/create webhook -> eFulfillment Service order bridge."""

__version__ = "0.1.0"
