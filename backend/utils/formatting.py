from decimal import Decimal

from utils.money import money

CURRENCY_SYMBOL = "Tk"


def format_currency(amount: Decimal, symbol: str = CURRENCY_SYMBOL) -> str:
    """Group digits the South Asian way: 12,34,567.89."""
    amount = money(amount)
    sign = "-" if amount < 0 else ""
    integer_part, decimal_part = f"{abs(amount):.2f}".split(".")

    if len(integer_part) <= 3:
        return f"{sign}{symbol} {integer_part}.{decimal_part}"

    last_three = integer_part[-3:]
    remaining = integer_part[:-3]

    formatted_remaining = ""
    while len(remaining) > 2:
        formatted_remaining = "," + remaining[-2:] + formatted_remaining
        remaining = remaining[:-2]

    formatted_remaining = remaining + formatted_remaining

    return f"{sign}{symbol} {formatted_remaining},{last_three}.{decimal_part}"


UNITS = ["", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine", "Ten", "Eleven", "Twelve",
         "Thirteen", "Fourteen", "Fifteen", "Sixteen", "Seventeen", "Eighteen", "Nineteen"]
TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]


def _convert(num: int) -> str:
    if num < 20:
        return UNITS[num]
    elif num < 100:
        return TENS[num // 10] + (" " + UNITS[num % 10] if num % 10 != 0 else "")
    elif num < 1000:
        return UNITS[num // 100] + " Hundred" + (" " + _convert(num % 100) if num % 100 != 0 else "")
    elif num < 100000:
        return _convert(num // 1000) + " Thousand" + (" " + _convert(num % 1000) if num % 1000 != 0 else "")
    elif num < 10000000:
        return _convert(num // 100000) + " Lakh" + (" " + _convert(num % 100000) if num % 100000 != 0 else "")
    else:
        return _convert(num // 10000000) + " Crore" + (" " + _convert(num % 10000000) if num % 10000000 != 0 else "")


def amount_to_words(n: Decimal) -> str:
    """Spell out an amount for receipts: 1250.50 -> 'One Thousand Two Hundred Fifty Taka and Fifty Poisha Only'."""
    if n is None:
        return ""
    n = money(n)
    if n < 0:
        return "Minus " + amount_to_words(-n)

    integer_part = int(n)
    decimal_part = int((n - integer_part) * 100)

    result = (_convert(integer_part) if integer_part else "Zero") + " Taka"
    if decimal_part > 0:
        result += " and " + _convert(decimal_part) + " Poisha"

    return result + " Only"
