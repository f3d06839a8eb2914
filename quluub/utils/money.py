from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Number = Union[int, float, str, Decimal]

CENT = Decimal("0.01")

CURRENCY_SYMBOLS = {
    "USD": "$",
    "NGN": "₦",
}


def to_money(value: Number) -> Decimal:
    """Coerce to a two-place Decimal, rounding half up."""
    if isinstance(value, float):
        value = repr(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_minor_units(value: Number) -> int:
    """Amount in cents/kobo, the unit Stripe and Paystack expect."""
    return int(to_money(value) * 100)


def net_of_fee(amount: Number, fee: Number) -> Decimal:
    """Counselor share of a payment after the platform fee."""
    return to_money(to_money(amount) * (Decimal("1") - Decimal(str(fee))))


def format_currency(amount: Number, currency: str = "USD") -> str:
    """
    en-US style formatting, e.g. format_currency(1234.5, "usd") -> "$1,234.50".
    Unknown currencies fall back to the ISO code as a suffix.
    """
    code = (currency or "USD").upper()
    value = to_money(amount)
    sign = "-" if value < 0 else ""
    body = f"{abs(value):,.2f}"
    symbol = CURRENCY_SYMBOLS.get(code)
    if symbol is None:
        return f"{sign}{body} {code}"
    return f"{sign}{symbol}{body}"
