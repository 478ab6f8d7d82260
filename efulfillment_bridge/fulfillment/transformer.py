"""Shopify order -> eFulfillment OrderSubmitRequest XML.

Line items fulfilled by Printful ship through Printful's own integration and
are dropped here. The surviving items are rendered with ElementTree in the
fixed element order the eFulfillment parser expects; ElementTree escapes
``&``, ``<`` and ``>`` in text.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from collections.abc import Iterable
from dataclasses import dataclass

from efulfillment_bridge.config import FulfillmentSettings
from efulfillment_bridge.fulfillment.models import LineItem, Order

logger = logging.getLogger(__name__)

EXCLUDED_FULFILLMENT_SERVICE = "printful"

SCHEMA_VERSION = "0.6"
TEST_VERSION = "TEST"

DOMESTIC_COUNTRY = "US"
DOMESTIC_SHIPPING_METHOD = "USPS_MEDIA"
INTERNATIONAL_SHIPPING_METHOD = "EPGEPACKT"

# Characters XML 1.0 does not allow, even escaped
_XML_ILLEGAL_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")

# XML element -> ShippingAddress attribute, in document order
_ADDRESS_FIELDS = (
    ("FirstName", "first_name"),
    ("LastName", "last_name"),
    ("Address1", "address1"),
    ("City", "city"),
    ("State", "province"),
    ("PostalCode", "zip"),
    ("Country", "country_code"),
)


@dataclass(frozen=True)
class TransformResult:
    """Filtered order plus its XML, or xml=None when nothing is left to send."""

    eligible_order: Order
    xml: str | None


def filter_line_items(items: Iterable[LineItem]) -> list[LineItem]:
    """Drop Printful items, keeping the relative order of the rest."""
    return [
        item for item in items
        if item.fulfillment_service != EXCLUDED_FULFILLMENT_SERVICE
    ]


def shipping_method_for(country_code: str | None) -> str:
    if country_code == DOMESTIC_COUNTRY:
        return DOMESTIC_SHIPPING_METHOD
    return INTERNATIONAL_SHIPPING_METHOD


def version_for(order: Order) -> str:
    return TEST_VERSION if order.test else SCHEMA_VERSION


def _text(value: object) -> str:
    if value is None:
        return ""
    return _XML_ILLEGAL_CHARS.sub("", str(value))


def _add(parent: ET.Element, tag: str, value: object = None) -> ET.Element:
    child = ET.SubElement(parent, tag)
    child.text = _text(value)
    return child


def build_order_document(order: Order, settings: FulfillmentSettings) -> ET.Element:
    """Build the OrderSubmitRequest element tree for an already-filtered order."""
    root = ET.Element("OrderSubmitRequest")
    _add(root, "Version", version_for(order))
    _add(root, "MerchantId", settings.merchant_id)
    _add(root, "MerchantName", settings.merchant_name)
    _add(root, "MerchantToken", settings.merchant_token)

    order_list = ET.SubElement(root, "OrderList")
    order_el = ET.SubElement(order_list, "Order")
    _add(order_el, "OrderNumber", order.id)

    address = order.shipping_address
    _add(order_el, "ShippingMethod", shipping_method_for(address.country_code))

    address_el = ET.SubElement(order_el, "ShippingAddress")
    for tag, attr in _ADDRESS_FIELDS:
        _add(address_el, tag, getattr(address, attr))

    item_list = ET.SubElement(order_el, "ItemList")
    for item in order.line_items:
        item_el = ET.SubElement(item_list, "Item")
        _add(item_el, "Sku", item.sku)
        _add(item_el, "Quantity", item.quantity)

    return root


def render_order_xml(order: Order, settings: FulfillmentSettings) -> str:
    """Serialize the OrderSubmitRequest document for order."""
    root = build_order_document(order, settings)
    ET.indent(root)
    return ET.tostring(root, encoding="unicode", short_empty_elements=False)


def transform(order: Order, settings: FulfillmentSettings) -> TransformResult:
    """Filter the order's line items and render the eligible subset.

    Returns a TransformResult whose xml is None when every item was
    excluded; that is a normal outcome, not an error.
    """
    eligible = filter_line_items(order.line_items)
    eligible_order = order.model_copy(update={"line_items": eligible})

    dropped = len(order.line_items) - len(eligible)
    if dropped:
        logger.info(
            "Order %s: skipped %d %s line item(s)",
            order.id,
            dropped,
            EXCLUDED_FULFILLMENT_SERVICE,
        )

    if not eligible:
        return TransformResult(eligible_order=eligible_order, xml=None)

    return TransformResult(
        eligible_order=eligible_order,
        xml=render_order_xml(eligible_order, settings),
    )
