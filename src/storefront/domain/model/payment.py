"""Payment method model and card-form validation.

The server is the authority for saved payment methods.  The client keeps
a small id-less summary as a fallback for offline / pre-save display; the
fallback is superseded the moment a server-backed id exists.

No card data beyond brand, last4 and expiry ever leaves the device: the
storefront tokenizes locally and never reaches a real processor.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping

from storefront.domain.exceptions import ValidationError
from storefront.domain.model import fields

CARD_NUMBER_LENGTH = 16
LOCAL_PROVIDER = "local"
LOCAL_TOKEN = "tok_local_123"
GENERIC_LABEL = "Saved payment"

_CVV = re.compile(r"^[0-9]{3}$")
_NON_DIGITS = re.compile(r"\D+")


def detect_brand(number: str) -> str:
    """Best-effort card brand from the number prefix; '' when unknown."""
    digits = _NON_DIGITS.sub("", number or "")
    if digits.startswith("4"):
        return "Visa"
    if re.match(r"^5[1-5]", digits):
        return "MasterCard"
    if re.match(r"^3[47]", digits):
        return "American Express"
    if digits.startswith("6"):
        return "Discover"
    return ""


@dataclass(frozen=True)
class PaymentMethod:
    brand: str
    last4: str
    exp_month: int | None = None
    exp_year: int | None = None
    id: str | None = None

    @property
    def is_server_backed(self) -> bool:
        return bool(self.id)

    @property
    def display_name(self) -> str:
        """Compact label: brand + last4 (e.g. ``MasterCard1841``)."""
        if self.brand and self.last4:
            return f"{self.brand}{self.last4[-4:]}"
        if self.brand:
            return self.brand
        if self.last4:
            return f"•••• {self.last4[-4:]}"
        return GENERIC_LABEL

    @property
    def order_reference(self) -> str:
        """Value sent as ``paymentMethod`` on an order: stable id, else brand."""
        return self.id or self.brand or "card"

    def to_raw(self) -> dict:
        raw: dict[str, Any] = {
            "brand": self.brand,
            "last4": self.last4,
            "expMonth": self.exp_month,
            "expYear": self.exp_year,
        }
        if self.id:
            raw["_id"] = self.id
        return raw

    def to_summary(self) -> dict:
        """Id-less local summary, the shape stored under ``@saved_payment``."""
        return {
            "cardBrand": self.brand,
            "cardNumberMasked": self.last4,
            "expMonth": self.exp_month,
            "expYear": self.exp_year,
        }

    @staticmethod
    def from_raw(raw: Mapping[str, Any]) -> PaymentMethod:
        """Parse either a server record or a local summary."""
        exp_month = fields.first_truthy(raw, fields.EXP_MONTH)
        exp_year = fields.first_truthy(raw, fields.EXP_YEAR)
        last4 = str(fields.first_truthy(raw, fields.CARD_LAST4, "") or "")
        if not last4 and isinstance(raw.get("cardNumber"), str):
            last4 = raw["cardNumber"][-4:]
        return PaymentMethod(
            id=fields.id_of(raw, fields.PAYMENT_ID),
            brand=str(
                fields.first_truthy(raw, fields.CARD_BRAND)
                or raw.get("type")
                or raw.get("provider")
                or ""
            ),
            last4=last4[-4:],
            exp_month=fields.to_int(exp_month, 0) or None,
            exp_year=fields.to_int(exp_year, 0) or None,
        )


def describe_payment(value: PaymentMethod | str | None) -> str:
    """Human-friendly label for whatever an order carries as its payment.

    Bare id strings (anything containing a digit) render generically;
    brand strings such as ``mastercard`` are capitalised.
    """
    if isinstance(value, PaymentMethod):
        return value.display_name
    if isinstance(value, str):
        text = re.sub(r"^[^a-zA-Z0-9]+", "", value.strip())
        if not text or any(ch.isdigit() for ch in text):
            return GENERIC_LABEL
        return text[0].upper() + text[1:]
    return GENERIC_LABEL


@dataclass(frozen=True)
class CardInput:
    """Raw values from the card form, prior to validation."""

    number: str
    cvv: str
    exp_month: str | int | None
    exp_year: str | int | None

    @property
    def digits(self) -> str:
        return _NON_DIGITS.sub("", self.number or "")

    @property
    def brand(self) -> str:
        return detect_brand(self.digits)

    @property
    def last4(self) -> str:
        return self.digits[-4:]

    def validate(self) -> None:
        """Reject malformed card input before any network call is made."""
        if not self.digits or not self.cvv or not self.exp_month or not self.exp_year:
            raise ValidationError("Card number, expiry month/year and CVV are required")
        if len(self.digits) != CARD_NUMBER_LENGTH:
            raise ValidationError(
                f"Card number must be exactly {CARD_NUMBER_LENGTH} digits"
            )
        if not _CVV.match(str(self.cvv)):
            raise ValidationError("CVV must be exactly 3 digits")
        month = fields.to_int(self.exp_month, 0)
        if not 1 <= month <= 12:
            raise ValidationError(f"Invalid expiry month: {self.exp_month!r}")
        if fields.to_int(self.exp_year, 0) <= 0:
            raise ValidationError(f"Invalid expiry year: {self.exp_year!r}")

    def to_create_payload(self) -> dict:
        """Body for POST /api/users/payment-methods (locally tokenized)."""
        return {
            "provider": LOCAL_PROVIDER,
            "token": LOCAL_TOKEN,
            "brand": self.brand or "card",
            "last4": self.last4,
            "expMonth": fields.to_int(self.exp_month, 0),
            "expYear": fields.to_int(self.exp_year, 0),
        }

    def to_update_payload(self) -> dict:
        """Body for PUT /api/users/payment-methods/:id (metadata only)."""
        return {
            "brand": self.brand,
            "last4": self.last4,
            "expMonth": fields.to_int(self.exp_month, 0),
            "expYear": fields.to_int(self.exp_year, 0),
        }

    def to_payment_method(self, method_id: str | None = None) -> PaymentMethod:
        return PaymentMethod(
            id=method_id,
            brand=self.brand,
            last4=self.last4,
            exp_month=fields.to_int(self.exp_month, 0) or None,
            exp_year=fields.to_int(self.exp_year, 0) or None,
        )
