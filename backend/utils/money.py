from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

# Two amounts closer than this are considered equal.
BALANCE_TOLERANCE = Decimal("0.01")


def money(value) -> Decimal:
    """
    Normalize a numeric value to a 2-decimal Decimal.

    - Accepts None, int, float, str, Decimal
    - None becomes 0.00
    - floats go through str() so 0.1 stays 0.1
    """
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def amounts_equal(a, b) -> bool:
    return abs(money(a) - money(b)) < BALANCE_TOLERANCE
