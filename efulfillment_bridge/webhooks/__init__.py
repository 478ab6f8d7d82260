"""Webhook inbound system.

Receives Shopify orders/create webhooks. Each webhook is signature-verified,
transformed and forwarded to eFulfillment in the same invocation.
"""
