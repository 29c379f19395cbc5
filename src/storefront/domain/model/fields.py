"""Alias tables for the backend's loosely-shaped payloads.

The storefront backend has grown several spellings for the same logical
field (``price`` / ``salePrice`` / ``unitPrice``, ``discountAmount`` /
``discount_total`` / ``couponValue`` ...).  Each logical field gets exactly
one precedence tuple here; normalizers look values up through these tables
instead of repeating fallback chains inline.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

# --- Identity -----------------------------------------------------------------

ENTITY_ID = ("_id", "id")
PRODUCT_ID = ("_id", "id", "productId", "product_id")
ORDER_ID = ("_id", "id", "orderId")
PAYMENT_ID = ("_id", "id", "paymentId")
ADDRESS_ID = ("_id", "id", "addressId")

# --- Product / cart line ------------------------------------------------------

PRODUCT_NAME = ("name", "title", "productName")
UNIT_PRICE = ("price", "salePrice", "unitPrice")
LINE_QUANTITY = ("quantity", "qty")
IMAGE_REF = ("imageUrl", "image", "imageFilename", "imageKey")

# --- Payment method -----------------------------------------------------------

CARD_BRAND = ("brand", "cardBrand")
CARD_LAST4 = ("last4", "cardNumberMasked", "last_4", "lastFour")
EXP_MONTH = ("expMonth", "exp_month", "expiryMonth")
EXP_YEAR = ("expYear", "exp_year", "expiryYear")

# --- Order envelope -----------------------------------------------------------

ORDER_ITEMS = ("items", "orderItems", "products")
CREATED_AT = ("createdAt", "created", "created_at", "date")
ORDER_STATUS = ("status", "state")
ORDER_PAYMENT = ("paymentMethod", "payment", "payment_method")
ORDER_SHIPPING = ("shipping", "shippingAddress", "address")

# --- Order totals -------------------------------------------------------------

EXPLICIT_TOTAL = ("total", "amount")
SHIPPING_COST = ("shippingCost", "shipping_fee")
TAX = ("tax",)
SALE_PRICE = ("salePrice", "sale_price")
DISCOUNT_AMOUNT = (
    "discountAmount",
    "discount_amount",
    "discount_total",
    "discountValue",
    "couponValue",
    "couponAmount",
    "coupon_discount",
    "discount",
)
ADJUSTMENTS = ("adjustments", "adjustment", "rounding")


def first_truthy(raw: Mapping[str, Any], keys: tuple[str, ...], default: Any = None) -> Any:
    """Return the first value under *keys* that is set and non-empty.

    Zero, empty strings and None all fall through to the next alias, which
    is how the backend's clients have always read these payloads.
    """
    for key in keys:
        value = raw.get(key)
        if value:
            return value
    return default


def first_number(raw: Mapping[str, Any], keys: tuple[str, ...]) -> Decimal | None:
    """Return the first value under *keys* that parses as a number (zero included)."""
    for key in keys:
        value = to_decimal(raw.get(key))
        if value is not None:
            return value
    return None


def to_decimal(value: Any) -> Decimal | None:
    """Coerce a JSON number or numeric string to Decimal, else None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = Decimal(text)
        except InvalidOperation:
            return None
        return parsed if parsed.is_finite() else None
    return None


def to_int(value: Any, default: int) -> int:
    number = to_decimal(value)
    if number is None:
        return default
    return int(number)


def id_of(raw: Any, keys: tuple[str, ...] = ENTITY_ID) -> str | None:
    """Extract an id from a dict, or accept a bare string id."""
    if isinstance(raw, str):
        return raw or None
    if isinstance(raw, Mapping):
        value = first_truthy(raw, keys)
        return str(value) if value is not None else None
    return None
