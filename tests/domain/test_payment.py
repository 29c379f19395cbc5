"""Unit tests for payment methods and card input validation."""

import pytest

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.payment import (
    GENERIC_LABEL,
    CardInput,
    PaymentMethod,
    describe_payment,
    detect_brand,
)

VISA = "4242 4242 4242 4242"
MASTERCARD = "5555555555551841"


def _card(**overrides) -> CardInput:
    values = {"number": VISA, "cvv": "123", "exp_month": 12, "exp_year": 2030}
    values.update(overrides)
    return CardInput(**values)


# ── Card validation ──────────────────────────────────────────────────────────


class TestCardInputValidation:

    def test_valid_card_passes(self):
        _card().validate()

    def test_number_normalized_to_digits(self):
        card = _card()
        assert card.digits == "4242424242424242"
        assert card.last4 == "4242"

    def test_missing_fields_rejected(self):
        with pytest.raises(ValidationError, match="required"):
            _card(exp_month=None).validate()

    def test_short_number_rejected(self):
        with pytest.raises(ValidationError, match="exactly 16 digits"):
            _card(number="4242 4242").validate()

    def test_cvv_must_be_three_digits(self):
        with pytest.raises(ValidationError, match="CVV"):
            _card(cvv="12a").validate()

    def test_four_digit_cvv_rejected(self):
        with pytest.raises(ValidationError, match="CVV"):
            _card(cvv="1234").validate()

    def test_invalid_month_rejected(self):
        with pytest.raises(ValidationError, match="expiry month"):
            _card(exp_month=13).validate()

    def test_create_payload_is_locally_tokenized(self):
        payload = _card(number=MASTERCARD).to_create_payload()
        assert payload == {
            "provider": "local",
            "token": "tok_local_123",
            "brand": "MasterCard",
            "last4": "1841",
            "expMonth": 12,
            "expYear": 2030,
        }
        assert "cvv" not in payload


# ── Brand detection / display ────────────────────────────────────────────────


class TestPaymentDisplay:

    @pytest.mark.parametrize(
        "number, brand",
        [
            ("4111111111111111", "Visa"),
            ("5105105105105100", "MasterCard"),
            ("371449635398431", "American Express"),
            ("6011111111111117", "Discover"),
            ("9999999999999999", ""),
        ],
    )
    def test_detect_brand(self, number, brand):
        assert detect_brand(number) == brand

    def test_display_name_is_brand_plus_last4(self):
        method = PaymentMethod(brand="MasterCard", last4="1841", id="pm1")
        assert method.display_name == "MasterCard1841"

    def test_only_id_backed_methods_are_server_backed(self):
        assert PaymentMethod(brand="Visa", last4="4242", id="pm1").is_server_backed
        assert not PaymentMethod(brand="Visa", last4="4242").is_server_backed

    def test_bare_id_string_renders_generically(self):
        assert describe_payment("64f1c0ffee12") == GENERIC_LABEL

    def test_brand_string_is_capitalised(self):
        assert describe_payment("mastercard") == "Mastercard"

    def test_missing_payment_renders_generically(self):
        assert describe_payment(None) == GENERIC_LABEL


class TestPaymentMethodParsing:

    def test_from_server_record(self):
        method = PaymentMethod.from_raw(
            {"_id": "pm1", "brand": "Visa", "last4": "4242", "expMonth": 1, "expYear": 2031}
        )
        assert method == PaymentMethod(
            brand="Visa", last4="4242", exp_month=1, exp_year=2031, id="pm1"
        )

    def test_from_local_summary(self):
        method = PaymentMethod.from_raw(
            {"cardBrand": "Visa", "cardNumberMasked": "4242", "expMonth": 3, "expYear": 2029}
        )
        assert method.id is None
        assert method.display_name == "Visa4242"

    def test_summary_round_trip(self):
        method = PaymentMethod(brand="Visa", last4="4242", exp_month=3, exp_year=2029)
        assert PaymentMethod.from_raw(method.to_summary()) == method
