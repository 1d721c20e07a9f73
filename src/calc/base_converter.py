"""Radix conversion and bitwise operations for programmer mode.

Bitwise operations work on a 32-bit two's-complement signed integer so the
results are reproducible regardless of Python's unbounded ints.
"""

from calc.errors import FormatError, ValidationError


DIGIT_ALPHABET = '0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ'
MIN_RADIX = 2
MAX_RADIX = 36

BIT_WIDTH = 32
_MASK = (1 << BIT_WIDTH) - 1
_SIGN_BIT = 1 << (BIT_WIDTH - 1)

BITWISE_OPERATIONS = {
    'NOT': 'NOT (Bitwise NOT)',
    'LSH': 'LSH (Left Shift)',
    'RSH': 'RSH (Right Shift)',
}


def _check_radix(radix: int) -> None:
    if isinstance(radix, bool) or not isinstance(radix, int) or not MIN_RADIX <= radix <= MAX_RADIX:
        raise ValidationError(f"Radix must be an integer between {MIN_RADIX} and {MAX_RADIX}: {radix}")


def digit_value(digit: str) -> int:
    """Return the numeric value of a single digit character, or -1."""
    if len(digit) != 1:
        return -1
    return DIGIT_ALPHABET.find(digit.upper())


def is_valid_digit(digit: str, radix: int) -> bool:
    """True if ``digit`` is a single character whose value is below ``radix``."""
    _check_radix(radix)
    value = digit_value(digit)
    return 0 <= value < radix


def parse_integer(digits: str, radix: int) -> int:
    """Parse a digit string (optionally signed) in ``radix``.

    Raises:
        FormatError: If the string is empty or holds a digit outside the radix
    """
    _check_radix(radix)
    text = digits.strip() if isinstance(digits, str) else ''
    negative = text.startswith('-')
    if negative or text.startswith('+'):
        text = text[1:]
    if not text:
        raise FormatError(f"Invalid number for base {radix}: '{digits}'")

    value = 0
    for char in text:
        char_value = digit_value(char)
        if not 0 <= char_value < radix:
            raise FormatError(f"Invalid digit '{char}' for base {radix}")
        value = value * radix + char_value
    return -value if negative else value


def to_base_string(value: int, radix: int) -> str:
    """Render an integer in ``radix`` using upper-case digits."""
    _check_radix(radix)
    if value == 0:
        return '0'
    negative = value < 0
    value = abs(value)
    chars = []
    while value:
        value, remainder = divmod(value, radix)
        chars.append(DIGIT_ALPHABET[remainder])
    if negative:
        chars.append('-')
    return ''.join(reversed(chars))


def convert_base(digits: str, from_radix: int, to_radix: int) -> str:
    """Convert a digit string from one radix to another.

    Args:
        digits: Number text valid in ``from_radix`` (case-insensitive)
        from_radix: Source radix (2-36)
        to_radix: Target radix (2-36)

    Returns:
        The same integer rendered in ``to_radix``, upper-cased

    Raises:
        FormatError: If ``digits`` has characters outside the source alphabet
        ValidationError: If a radix is out of range
    """
    _check_radix(to_radix)
    return to_base_string(parse_integer(digits, from_radix), to_radix)


def to_int32(value: int) -> int:
    """Wrap an integer to the signed 32-bit range."""
    value &= _MASK
    if value & _SIGN_BIT:
        value -= 1 << BIT_WIDTH
    return value


def apply_bitwise(digits: str, radix: int, operation: str) -> str:
    """Apply NOT, LSH or RSH to a display value and re-render it.

    The operand is truncated to 32 bits before the operation and the result
    wraps the same way (``LSH 7FFFFFFF`` gives ``-2``).
    """
    op = operation.upper()
    value = to_int32(parse_integer(digits, radix))
    if op == 'NOT':
        result = ~value
    elif op == 'LSH':
        result = value << 1
    elif op == 'RSH':
        result = value >> 1
    else:
        raise ValidationError(f"Unknown bitwise operation: {operation}")
    return to_base_string(to_int32(result), radix)
