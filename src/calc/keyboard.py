"""Keyboard shortcuts for the calculator and coin flip surfaces.

Key names follow the browser ``KeyboardEvent.key`` values (``Enter``,
``Escape``, ``' '``) so front ends can pass them straight through. Keys are
ignored while focus is inside a text input so a typed value is not handled
twice.
"""

from typing import Optional

from calc.arithmetic import Action, ActionType
from model.CalculatorState import Operator


KEY_OPERATORS = {
    '+': Operator.ADD,
    '-': Operator.SUBTRACT,
    '*': Operator.MULTIPLY,
    '/': Operator.DIVIDE,
}

COIN_FLIP_KEYS = (' ', 'Space', 'Spacebar')


def resolve_key(key: str, focus_in_text_input: bool = False,
                enabled: bool = True) -> Optional[Action]:
    """Map a key press to a calculator action, or None if it is not handled."""
    if not enabled or focus_in_text_input or not key:
        return None
    if len(key) == 1 and key.isdigit():
        return Action(ActionType.DIGIT, key)
    if key == '.':
        return Action(ActionType.DECIMAL)
    if key in KEY_OPERATORS:
        return Action(ActionType.OPERATOR, KEY_OPERATORS[key])
    if key in ('Enter', '='):
        return Action(ActionType.EQUALS)
    if key == 'Escape':
        return Action(ActionType.CLEAR)
    return None


def is_coin_flip_key(key: str, focus_in_text_input: bool = False) -> bool:
    return not focus_in_text_input and key in COIN_FLIP_KEYS
