"""Error types raised by the calculator core.

Every user-triggered computation raises one of these. Callers (the shell,
the calculator session and the MCP tools) catch ``CalculatorError``, report
its message and reset the active calculator state.
"""


class CalculatorError(Exception):
    """Base class for all recoverable calculator failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CalculatorError, ValueError):
    """Malformed or out-of-range input (non-numeric principal, unknown unit)."""


class DomainError(CalculatorError, ArithmeticError):
    """Mathematically undefined operation (divide by zero, log of zero)."""


class FormatError(CalculatorError, ValueError):
    """Input text in the wrong shape (bad date string, digit outside the radix)."""


class MarketDataError(Exception):
    """A price or exchange-rate lookup failed.

    Kept outside the ``CalculatorError`` tree so a failed fetch never triggers
    a calculator state reset.
    """
