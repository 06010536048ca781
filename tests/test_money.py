"""
Tests for fixed-point money parsing
"""

import pytest
from decimal import Decimal
from datetime import date, datetime, timezone

from finance_tracker.exceptions import ValidationError
from finance_tracker.money import (
    format_money, parse_amount, parse_date, parse_decimal, parse_signed_amount, quantize
)


class TestQuantize:
    """Half-up rounding to fixed places"""

    def test_rounds_half_up(self):
        assert quantize(Decimal("10.005")) == Decimal("10.01")
        assert quantize(Decimal("10.004")) == Decimal("10.00")
        assert quantize(Decimal("-2.675")) == Decimal("-2.68")

    def test_share_places(self):
        assert quantize(Decimal("1.23456"), 4) == Decimal("1.2346")


class TestParseAmount:
    """Monetary input validation"""

    def test_accepts_strings_ints_and_decimals(self):
        assert parse_amount("12.5") == Decimal("12.50")
        assert parse_amount(7) == Decimal("7.00")
        assert parse_amount(Decimal("0.1")) == Decimal("0.10")
        assert parse_amount(" 3.00 ") == Decimal("3.00")

    def test_rejects_float(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_amount(12.5)
        assert "amount" in exc_info.value.field_errors

    def test_rejects_bool(self):
        with pytest.raises(ValidationError):
            parse_amount(True)

    def test_rejects_negative(self):
        with pytest.raises(ValidationError):
            parse_amount("-0.01")

    def test_zero_allowed_unless_positive(self):
        assert parse_amount("0") == Decimal("0.00")
        with pytest.raises(ValidationError):
            parse_amount("0", positive=True)

    @pytest.mark.parametrize("value", ["abc", "", "NaN", "Infinity", None])
    def test_rejects_malformed(self, value):
        with pytest.raises(ValidationError):
            parse_amount(value)

    @pytest.mark.parametrize("value", ["1e27", "1" + "0" * 29, 10 ** 30])
    def test_rejects_values_beyond_precision(self, value):
        with pytest.raises(ValidationError) as exc_info:
            parse_amount(value)
        assert exc_info.value.field_errors == {"amount": "out of range"}

    def test_largest_representable_amount(self):
        assert parse_amount("9" * 26) == Decimal("9" * 26 + ".00")

    def test_field_name_reported(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_amount("x", "target_amount")
        assert list(exc_info.value.field_errors) == ["target_amount"]

    def test_signed_amount_allows_negative(self):
        assert parse_signed_amount("-347.89", "initial_balance") == Decimal("-347.89")

    def test_maximum_bound(self):
        assert parse_decimal("1", "alert_threshold", maximum=Decimal("1")) == Decimal("1.00")
        with pytest.raises(ValidationError):
            parse_decimal("1.01", "alert_threshold", maximum=Decimal("1"))


class TestParseDate:
    """Date input validation"""

    def test_iso_string(self):
        assert parse_date("2024-03-05") == date(2024, 3, 5)

    def test_iso_datetime_string_truncated(self):
        assert parse_date("2024-03-05T10:15:00Z") == date(2024, 3, 5)

    def test_date_and_datetime_objects(self):
        assert parse_date(date(2024, 1, 1)) == date(2024, 1, 1)
        assert parse_date(datetime(2024, 1, 1, 12, tzinfo=timezone.utc)) == date(2024, 1, 1)

    def test_rejects_garbage(self):
        with pytest.raises(ValidationError):
            parse_date("yesterday")
        with pytest.raises(ValidationError):
            parse_date(None)


def test_format_money():
    assert format_money(Decimal("1234.5")) == "1,234.50"
