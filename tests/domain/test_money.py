"""
Money parsing and minor-unit storage tests.
"""

from decimal import Decimal

import pytest

from payments_kernel.db.types import (
    MAX_AMOUNT,
    from_minor_units,
    round_money,
    to_minor_units,
)
from payments_kernel.domain.money import parse_amount
from payments_kernel.exceptions import InvalidAmountError


class TestParseAmount:

    @pytest.mark.parametrize(
        "value, expected",
        [
            (Decimal("50"), Decimal("50.00")),
            (Decimal("0.01"), Decimal("0.01")),
            (7, Decimal("7.00")),
            ("12.3", Decimal("12.30")),
            ("1000000.99", Decimal("1000000.99")),
        ],
    )
    def test_valid_amounts(self, value, expected):
        parsed = parse_amount(value)

        assert parsed == expected
        assert parsed.as_tuple().exponent == -2

    @pytest.mark.parametrize(
        "value",
        [
            0, "0.00", "-1", Decimal("-0.01"), "0.001", "12.345", "Infinity", "NaN", "x", None,
            Decimal("1e30"), "1e20", "92233720368547758.08",
        ],
    )
    def test_invalid_amounts(self, value):
        with pytest.raises(InvalidAmountError) as exc_info:
            parse_amount(value)

        assert exc_info.value.code == "INVALID_AMOUNT"

    def test_largest_storable_amount_accepted(self):
        assert parse_amount(MAX_AMOUNT) == Decimal("92233720368547758.07")

    @pytest.mark.parametrize("value", [1.5, 0.1, True])
    def test_float_and_bool_refused(self, value):
        with pytest.raises(InvalidAmountError, match="refused"):
            parse_amount(value)


class TestMinorUnits:

    def test_to_minor_units(self):
        assert to_minor_units(Decimal("123.45")) == 12345
        assert to_minor_units(Decimal("0")) == 0

    def test_from_minor_units(self):
        assert from_minor_units(12345) == Decimal("123.45")
        assert from_minor_units(-1) == Decimal("-0.01")

    def test_sub_cent_refused(self):
        with pytest.raises(ValueError, match="Sub-cent"):
            to_minor_units(Decimal("0.005"))

    def test_outside_bigint_range_refused(self):
        assert to_minor_units(MAX_AMOUNT) == 2**63 - 1
        with pytest.raises(ValueError, match="storable range"):
            to_minor_units(MAX_AMOUNT + Decimal("0.01"))
        with pytest.raises(ValueError, match="storable range"):
            to_minor_units(-MAX_AMOUNT - Decimal("0.01"))

    def test_float_refused(self):
        with pytest.raises(ValueError, match="Float"):
            to_minor_units(0.1)


class TestHelpers:

    def test_round_money_half_up(self):
        assert round_money(Decimal("0.125")) == Decimal("0.13")
