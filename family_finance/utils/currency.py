from __future__ import annotations

import math
import re

CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CAD": "CA$",
    "AUD": "A$",
    "INR": "₹",
}

_AMOUNT_NOISE = re.compile(r"[\s,$€£¥₹]")


def currency_symbol(currency: str) -> str:
    code = (currency or "").strip().upper()
    return CURRENCY_SYMBOLS.get(code, f"{code} " if code else "")


def round_currency(value: float, decimal_places: int = 2) -> float:
    """Round half away from zero, the way amounts are shown to users."""
    multiplier = 10 ** decimal_places
    rounded = math.floor(abs(value) * multiplier + 0.5) / multiplier
    return math.copysign(rounded, value) if rounded else 0.0


def format_currency(amount: float, currency: str = "USD", max_fraction_digits: int = 2) -> str:
    """Format e.g. 1234.5 USD as '$1,234.50'; negatives as '-$1,234.50'."""
    value = round_currency(amount, max_fraction_digits)
    sign = "-" if value < 0 else ""
    return f"{sign}{currency_symbol(currency)}{abs(value):,.{max_fraction_digits}f}"


def parse_amount_input(value: str | float | int | None) -> float | None:
    """
    Read an amount typed into a form: '1,250.00', '$80', 42.
    Returns None when the value is blank or not a finite number.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        cleaned = _AMOUNT_NOISE.sub("", value)
        if not cleaned:
            return None
        try:
            number = float(cleaned)
        except ValueError:
            return None
    if not math.isfinite(number):
        return None
    return number


def calculate_percentage_change(original: float, new: float) -> float:
    if original == 0:
        return 100.0 if new != 0 else 0.0
    return round_currency((new - original) / original * 100)
