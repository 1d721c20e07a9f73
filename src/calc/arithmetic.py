"""Arithmetic evaluator for the standard, scientific and programmer modes.

The evaluator is a small state machine. ``reduce(state, action)`` is a pure
transition: it returns a ``Transition`` holding the next ``CalculatorState``,
an optional ``HistoryEntry`` for completed calculations and an optional
notice for inputs that were ignored (an out-of-radix digit, for example).

Failures (divide by zero, log of a negative number, ...) are raised as
``DomainError``/``FormatError``/``ValidationError``; the caller decides how
to recover. ``calc.session.CalculatorSession`` resets the state.
"""

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Optional

from calc.base_converter import apply_bitwise, convert_base, is_valid_digit, parse_integer, to_base_string
from calc.errors import DomainError, FormatError, ValidationError
from calc.formatting import format_display, format_fixed
from model.CalculatorState import SUPPORTED_BASES, CalculatorState, Operator
from model.History import HistoryEntry


SCIENTIFIC_FUNCTIONS = ('sqrt', 'square', 'cube', 'sin', 'cos', 'tan', 'log', 'ln')
MAX_PRECISION = 15


class ActionType(Enum):
    DIGIT = 'digit'
    DECIMAL = 'decimal'
    OPERATOR = 'operator'
    EQUALS = 'equals'
    CLEAR = 'clear'
    MEMORY_CLEAR = 'MC'
    MEMORY_RECALL = 'MR'
    MEMORY_ADD = 'M+'
    MEMORY_SUBTRACT = 'M-'
    SCIENTIFIC = 'scientific'
    PERCENT = 'percent'
    SET_BASE = 'set_base'
    BITWISE = 'bitwise'
    SET_PRECISION = 'set_precision'


@dataclass(frozen=True)
class Action:
    """A user input event; ``payload`` depends on the action type."""
    type: ActionType
    payload: Any = None


@dataclass(frozen=True)
class Transition:
    """Result of applying one action."""
    state: CalculatorState
    entry: Optional[HistoryEntry] = None
    notice: Optional[str] = None


def calculate(a: float, b: float, op: Operator) -> float:
    """Apply a binary operator.

    Args:
        a: Left operand
        b: Right operand
        op: Operator to apply

    Returns:
        The result as a float

    Raises:
        DomainError: Division by zero, a root of non-positive degree or of a
            negative number, or a power with no real float result
    """
    if op == Operator.ADD:
        return a + b
    if op == Operator.SUBTRACT:
        return a - b
    if op == Operator.MULTIPLY:
        return a * b
    if op == Operator.DIVIDE:
        if b == 0:
            raise DomainError("Cannot divide by zero")
        return a / b
    if op == Operator.POWER:
        return _power(a, b)
    if op == Operator.ROOT:
        if b <= 0:
            raise DomainError("Root degree must be positive")
        if a < 0:
            raise DomainError("Cannot calculate root of negative number")
        return _power(a, 1 / b)
    raise ValidationError(f"Unknown operator: {op}")


def _power(a: float, b: float) -> float:
    try:
        return math.pow(a, b)
    except ValueError:
        raise DomainError(f"{format_display(a)} cannot be raised to {format_display(b)}")
    except OverflowError:
        raise DomainError("Result is too large")


def scientific(function: str, value: float) -> float:
    """Apply a unary scientific function; trig functions take degrees.

    Raises:
        DomainError: ``sqrt`` of a negative number, ``log``/``ln`` of a
            non-positive number
        ValidationError: Unknown function name
    """
    name = function.lower()
    if name == 'sqrt':
        if value < 0:
            raise DomainError("Cannot calculate square root of negative number")
        return math.sqrt(value)
    if name == 'square':
        return _power(value, 2)
    if name == 'cube':
        return _power(value, 3)
    if name == 'sin':
        return math.sin(math.radians(value))
    if name == 'cos':
        return math.cos(math.radians(value))
    if name == 'tan':
        return math.tan(math.radians(value))
    if name in ('log', 'log10'):
        if value <= 0:
            raise DomainError("Cannot calculate logarithm of non-positive number")
        return math.log10(value)
    if name == 'ln':
        if value <= 0:
            raise DomainError("Cannot calculate natural logarithm of non-positive number")
        return math.log(value)
    raise ValidationError(f"Unknown scientific function: {function}")


def parse_display(state: CalculatorState) -> float:
    """Read the display as a number in the active base."""
    if state.base == 10:
        try:
            return float(state.display)
        except ValueError:
            raise FormatError(f"Invalid number on display: '{state.display}'")
    return float(parse_integer(state.display, state.base))


def render_value(value: float, base: int) -> str:
    """Render a result for the display; non-decimal bases truncate to integers."""
    if base == 10:
        return format_display(value)
    if math.isnan(value) or math.isinf(value):
        raise DomainError("Result cannot be shown in base " + str(base))
    return to_base_string(int(value), base)


def _fold(state: CalculatorState) -> tuple:
    current = parse_display(state)
    result = calculate(state.previous_value, current, state.operator)
    display = render_value(result, state.base)
    calculation = (f"{render_value(state.previous_value, state.base)} "
                   f"{state.operator.value} {state.display}")
    return display, float(parse_display(replace(state, display=display))), HistoryEntry(calculation, display)


def input_digit(state: CalculatorState, digit: str) -> Transition:
    """Enter one digit; digits outside the active base are rejected."""
    if not isinstance(digit, str) or len(digit) != 1 or not is_valid_digit(digit, state.base):
        return Transition(state, notice=f"Digit '{digit}' is not valid in base {state.base}")
    digit = digit.upper()
    if state.new_number:
        return Transition(replace(state, display=digit, new_number=False))
    display = digit if state.display == '0' else state.display + digit
    return Transition(replace(state, display=display))


def input_decimal(state: CalculatorState) -> Transition:
    if state.base != 10:
        return Transition(state, notice="Decimal point is only available in base 10")
    if state.new_number:
        return Transition(replace(state, display='0.', new_number=False))
    if '.' in state.display:
        return Transition(state)
    return Transition(replace(state, display=state.display + '.'))


def apply_operator(state: CalculatorState, op: Operator) -> Transition:
    """Store ``op`` as the pending operator.

    With no pending operator the display becomes the left operand. With a
    pending operator and a completed second operand the pending operation is
    folded first. Pressing an operator twice in a row only swaps it.
    """
    entry = None
    if state.operator is None:
        state = replace(state, previous_value=parse_display(state))
    elif not state.new_number:
        display, result, entry = _fold(state)
        state = replace(state, display=display, previous_value=result)
    return Transition(
        replace(state, operator=op, new_number=True, equation=f"{state.display} {op.value}"),
        entry,
    )


def equals(state: CalculatorState) -> Transition:
    """Fold the pending operator; a no-op without a completed second operand."""
    if state.operator is None:
        return Transition(state)
    if state.new_number:
        return Transition(state, notice=f"Enter a number after '{state.operator.value}' before '='")
    display, result, entry = _fold(state)
    return Transition(
        replace(state, display=display, previous_value=result, operator=None,
                equation='', new_number=True),
        entry,
    )


def clear(state: CalculatorState) -> CalculatorState:
    """Reset the display; memory, base and precision survive."""
    return CalculatorState(memory=state.memory, base=state.base, precision=state.precision)


def apply_scientific(state: CalculatorState, function: str) -> Transition:
    current = parse_display(state)
    result = scientific(function, current)
    if state.base == 10:
        display = format_fixed(result, state.precision)
    else:
        display = render_value(result, state.base)
    entry = HistoryEntry(f"{function.lower()}({state.display})", display)
    return Transition(replace(state, display=display), entry)


def apply_percent(state: CalculatorState) -> Transition:
    current = parse_display(state)
    result = state.previous_value * current / 100
    display = render_value(result, state.base)
    entry = HistoryEntry(f"{format_display(state.previous_value)} * {state.display}%", display)
    return Transition(replace(state, display=display), entry)


def apply_memory(state: CalculatorState, action_type: ActionType) -> Transition:
    if action_type == ActionType.MEMORY_CLEAR:
        return Transition(replace(state, memory=0.0))
    if action_type == ActionType.MEMORY_RECALL:
        return Transition(replace(state, display=render_value(state.memory, state.base), new_number=True))
    current = parse_display(state)
    if action_type == ActionType.MEMORY_ADD:
        return Transition(replace(state, memory=state.memory + current))
    return Transition(replace(state, memory=state.memory - current))


def set_base(state: CalculatorState, base: int) -> Transition:
    """Switch radix, converting the display into the new base."""
    if base not in SUPPORTED_BASES:
        raise ValidationError(f"Base must be one of {', '.join(str(b) for b in SUPPORTED_BASES)}")
    source = state.display
    if state.base == 10 and not source.lstrip('-').isdigit():
        # Fractions are dropped, as in integer parsing
        value = parse_display(state)
        if math.isnan(value) or math.isinf(value):
            raise DomainError(f"'{source}' cannot be shown in base {base}")
        source = str(int(value))
    display = convert_base(source, state.base, base)
    entry = HistoryEntry(f"{state.display} (base {state.base} -> {base})", display)
    return Transition(replace(state, display=display, base=base, new_number=True), entry)


def apply_bitwise_op(state: CalculatorState, operation: str) -> Transition:
    display = apply_bitwise(state.display, state.base, operation)
    entry = HistoryEntry(f"{operation.upper()}({state.display})", display)
    return Transition(replace(state, display=display, new_number=True), entry)


def set_precision(state: CalculatorState, precision: Any) -> Transition:
    if isinstance(precision, bool) or not isinstance(precision, int) or not 0 <= precision <= MAX_PRECISION:
        raise ValidationError(f"Precision must be an integer between 0 and {MAX_PRECISION}")
    return Transition(replace(state, precision=precision))


def reduce(state: CalculatorState, action: Action) -> Transition:
    """Apply ``action`` to ``state`` and return the transition."""
    kind = action.type
    if kind == ActionType.DIGIT:
        return input_digit(state, action.payload)
    if kind == ActionType.DECIMAL:
        return input_decimal(state)
    if kind == ActionType.OPERATOR:
        if isinstance(action.payload, Operator):
            return apply_operator(state, action.payload)
        try:
            op = Operator.parse(str(action.payload))
        except ValueError as e:
            raise ValidationError(str(e))
        return apply_operator(state, op)
    if kind == ActionType.EQUALS:
        return equals(state)
    if kind == ActionType.CLEAR:
        return Transition(clear(state))
    if kind in (ActionType.MEMORY_CLEAR, ActionType.MEMORY_RECALL,
                ActionType.MEMORY_ADD, ActionType.MEMORY_SUBTRACT):
        return apply_memory(state, kind)
    if kind == ActionType.SCIENTIFIC:
        return apply_scientific(state, action.payload)
    if kind == ActionType.PERCENT:
        return apply_percent(state)
    if kind == ActionType.SET_BASE:
        return set_base(state, action.payload)
    if kind == ActionType.BITWISE:
        return apply_bitwise_op(state, action.payload)
    if kind == ActionType.SET_PRECISION:
        return set_precision(state, action.payload)
    raise ValidationError(f"Unsupported action: {kind}")
