"""Currency conversion against a fetched rate table."""

import math
import re
from typing import Any, Dict

from calc.errors import ValidationError


MAX_AMOUNT_LENGTH = 12


def sanitize_amount(raw: str) -> str:
    """Clean free-form amount text.

    Keeps digits and the first decimal point, prefixes ``0`` to a leading
    point and truncates to 12 characters. Returns an empty string when
    nothing numeric is left.
    """
    text = re.sub(r'[^\d.]', '', raw or '')
    if text.startswith('.'):
        text = '0' + text
    parts = text.split('.')
    if len(parts) > 2:
        text = parts[0] + '.' + ''.join(parts[1:])
    text = text[:MAX_AMOUNT_LENGTH]
    if not text or text == '.':
        return ''
    return text


def exchange(amount: Any, rates: Dict[str, float], to_currency: str) -> float:
    """Convert ``amount`` (in the rate table's base currency) to ``to_currency``.

    Negative amounts are clamped to zero.

    Raises:
        ValidationError: Non-numeric amount or no rate for the target currency
    """
    if isinstance(amount, bool):
        raise ValidationError("Amount must be a number")
    try:
        value = float(amount)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid amount: {amount!r}")
    if not math.isfinite(value):
        raise ValidationError("Amount must be a finite number")
    if value < 0:
        value = 0.0

    code = (to_currency or '').upper()
    rate = rates.get(code)
    if not rate:
        raise ValidationError(f"No exchange rate available for {code or 'empty currency'}")
    return value * rate


def cross_rate(rates: Dict[str, float], from_currency: str, to_currency: str) -> float:
    """Rate from one currency to another using a shared base table."""
    for code in (from_currency.upper(), to_currency.upper()):
        if not rates.get(code):
            raise ValidationError(f"No exchange rate available for {code}")
    return rates[to_currency.upper()] / rates[from_currency.upper()]
