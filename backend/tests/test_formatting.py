"""
Formatting Tests
================

Test the amount helpers used on money receipts and exports.
"""

from decimal import Decimal

from utils.formatting import amount_to_words, format_currency
from utils.money import amounts_equal, money


class TestFormatCurrency:

    def test_small_amounts(self):
        assert format_currency(Decimal("5")) == "Tk 5.00"
        assert format_currency(Decimal("999.999")) == "Tk 1,000.00"

    def test_lakh_grouping(self):
        assert format_currency(Decimal("1234567.8")) == "Tk 12,34,567.80"

    def test_negative(self):
        assert format_currency(Decimal("-1500"), symbol="BDT") == "-BDT 1,500.00"


class TestAmountToWords:

    def test_with_poisha(self):
        assert amount_to_words(Decimal("1250.50")) == "One Thousand Two Hundred Fifty Taka and Fifty Poisha Only"

    def test_zero(self):
        assert amount_to_words(Decimal("0")) == "Zero Taka Only"

    def test_lakh(self):
        assert amount_to_words(Decimal("200000")) == "Two Lakh Taka Only"


class TestMoney:

    def test_rounds_half_up(self):
        assert money(Decimal("2.345")) == Decimal("2.35")
        assert money(None) == Decimal("0.00")

    def test_tolerance(self):
        assert amounts_equal(Decimal("10.00"), Decimal("10.004"))
        assert not amounts_equal(Decimal("10.00"), Decimal("10.01"))
