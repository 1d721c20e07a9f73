"""State model for the calculator display.

The state is immutable; every transition in ``calc.arithmetic`` returns a
new instance built with ``dataclasses.replace``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


SUPPORTED_BASES = (2, 8, 10, 16)
DEFAULT_PRECISION = 8


class Operator(str, Enum):
    """Binary operators the evaluator can fold."""
    ADD = '+'
    SUBTRACT = '-'
    MULTIPLY = '×'
    DIVIDE = '÷'
    POWER = 'pow'
    ROOT = 'root'

    @classmethod
    def parse(cls, symbol: str) -> 'Operator':
        """Resolve an operator from its symbol or a keyboard alias."""
        key = symbol.strip()
        alias = OPERATOR_ALIASES.get(key.lower(), key)
        for op in cls:
            if op.value == alias:
                return op
        raise ValueError(f"Unknown operator: {symbol}")


OPERATOR_ALIASES = {
    '*': '×',
    'x': '×',
    '/': '÷',
    '^': 'pow',
    '**': 'pow',
    'yroot': 'root',
    '√y': 'root',
}


@dataclass(frozen=True)
class CalculatorState:
    """Everything the calculator display needs between key presses.

    ``new_number`` set to True means the next digit replaces the display
    instead of being appended to it.
    """
    display: str = '0'
    equation: str = ''
    operator: Optional[Operator] = None
    previous_value: float = 0.0
    new_number: bool = True
    memory: float = 0.0
    base: int = 10
    precision: int = DEFAULT_PRECISION
