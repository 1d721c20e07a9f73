"""Number-to-text formatting shared by the calculator modes.

Display strings, fixed-precision scientific output, locale-aware separators
for financial and currency values, and the exponential switch used for very
large exchange results.
"""

import math
from typing import Dict, Tuple, Union


# Thousands and decimal separators per locale
LOCALE_SEPARATORS: Dict[str, Tuple[str, str]] = {
    'en-US': (',', '.'),
    'en-GB': (',', '.'),
    'tr-TR': ('.', ','),
    'de-DE': ('.', ','),
    'fr-FR': (' ', ','),
}

DEFAULT_LOCALE = 'en-US'

# Exchange results above this switch to exponential notation
EXPONENTIAL_THRESHOLD = 999_999_999_999


def format_display(value: float) -> str:
    """Render a float the way the calculator display shows it.

    Whole numbers drop the trailing ``.0`` (``10.0`` -> ``"10"``); everything
    else uses the shortest round-tripping representation.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == int(value) and abs(value) < 1e21:
        return str(int(value))
    return repr(float(value))


def format_fixed(value: float, precision: int = 8) -> str:
    """Round to ``precision`` decimals and strip trailing zeros.

    Args:
        value: The value to render
        precision: Number of decimal places kept before stripping

    Returns:
        Text such as ``"1.41421356"`` or ``"0"``
    """
    if math.isnan(value) or math.isinf(value):
        return format_display(value)
    text = f"{value:.{precision}f}"
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    if text in ('-0', ''):
        text = '0'
    return text


def format_significant(value: float, digits: int = 6) -> str:
    """Render ``value`` with a fixed number of significant digits."""
    if value == 0:
        return f"{0:.{digits - 1}f}"
    exponent = math.floor(math.log10(abs(value)))
    if exponent < -6 or exponent >= digits:
        return f"{value:.{digits - 1}e}"
    decimals = max(digits - 1 - exponent, 0)
    return f"{value:.{decimals}f}"


def _separators(locale: str) -> Tuple[str, str]:
    return LOCALE_SEPARATORS.get(locale, LOCALE_SEPARATORS[DEFAULT_LOCALE])


def format_locale_number(value: Union[int, float],
                         min_fraction_digits: int = 2,
                         max_fraction_digits: int = 2,
                         locale: str = DEFAULT_LOCALE) -> str:
    """Format a number with locale thousands/decimal separators.

    Args:
        value: The number to format
        min_fraction_digits: Fraction digits always shown
        max_fraction_digits: Fraction digits shown at most (extra zeros stripped)
        locale: Locale tag, one of ``LOCALE_SEPARATORS``

    Returns:
        Formatted text, e.g. ``"1,234.50"`` (en-US) or ``"1.234,50"`` (tr-TR)
    """
    thousands, decimal = _separators(locale)
    text = f"{value:,.{max_fraction_digits}f}"
    if '.' in text:
        whole, fraction = text.split('.')
        while len(fraction) > min_fraction_digits and fraction.endswith('0'):
            fraction = fraction[:-1]
    else:
        whole, fraction = text, ''
    whole = whole.replace(',', thousands)
    if fraction:
        return f"{whole}{decimal}{fraction}"
    return whole


def format_currency(amount: float, symbol: str = '$', locale: str = DEFAULT_LOCALE) -> str:
    """Format a money amount with two decimals and a currency symbol."""
    formatted = format_locale_number(abs(amount), 2, 2, locale)
    sign = '-' if amount < 0 else ''
    if symbol in ('$', '€', '£'):
        return f"{sign}{symbol}{formatted}"
    return f"{sign}{formatted} {symbol}"


def format_exchange_result(value: float, locale: str = DEFAULT_LOCALE) -> str:
    """Format a converted currency amount.

    Values above ``EXPONENTIAL_THRESHOLD`` use exponential notation with two
    decimals; everything else gets locale separators and 2-4 fraction digits.
    """
    if value > EXPONENTIAL_THRESHOLD:
        return f"{value:.2e}"
    return format_locale_number(value, 2, 4, locale)
