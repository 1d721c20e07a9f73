"""Calculator session: state, history and error recovery.

A session wraps the pure reducer with the behaviour every surface needs:
completed calculations go into a 10-entry history (and an optional shared
global history), and any ``CalculatorError`` resets the state so the display
never shows a half-applied operation.
"""

from typing import Callable, List, Optional

from loguru import logger

from calc.arithmetic import Action, ActionType, Transition, clear, reduce
from calc.errors import CalculatorError
from model.CalculatorState import CalculatorState, Operator
from model.History import CALCULATOR_HISTORY_CAPACITY, HistoryBuffer, HistoryEntry


# Tokens accepted by ``press`` besides digits and operators
TOKEN_ACTIONS = {
    '=': ActionType.EQUALS,
    'AC': ActionType.CLEAR,
    'CLEAR': ActionType.CLEAR,
    '.': ActionType.DECIMAL,
    '%': ActionType.PERCENT,
    'MC': ActionType.MEMORY_CLEAR,
    'MR': ActionType.MEMORY_RECALL,
    'M+': ActionType.MEMORY_ADD,
    'M-': ActionType.MEMORY_SUBTRACT,
}

BITWISE_TOKENS = ('NOT', 'LSH', 'RSH')
SCIENTIFIC_TOKENS = ('SQRT', 'SQUARE', 'CUBE', 'SIN', 'COS', 'TAN', 'LOG', 'LN')
OPERATOR_TOKENS = ('+', '-', '×', '÷', '*', '/', '^', 'X', 'POW', 'ROOT')


class CalculatorSession:
    """Stateful wrapper around ``calc.arithmetic.reduce``."""

    def __init__(self, state: Optional[CalculatorState] = None,
                 history: Optional[HistoryBuffer] = None,
                 global_history: Optional[HistoryBuffer] = None,
                 on_entry: Optional[Callable[[HistoryEntry], None]] = None):
        """Create a session.

        Args:
            state: Starting state (defaults to a fresh display)
            history: Per-calculator history (defaults to 10 entries)
            global_history: Optional shared history that also receives entries
            on_entry: Optional callback run for every completed calculation
        """
        self.state = state or CalculatorState()
        self.history = history if history is not None else HistoryBuffer(CALCULATOR_HISTORY_CAPACITY)
        self.global_history = global_history
        self.on_entry = on_entry
        self.last_error: Optional[str] = None
        self.last_notice: Optional[str] = None
        self.notices: List[str] = []

    @property
    def display(self) -> str:
        return self.state.display

    def dispatch(self, action: Action) -> bool:
        """Apply one action.

        Returns:
            True on success; False if the action failed and the state was reset
        """
        self.last_notice = None
        try:
            transition: Transition = reduce(self.state, action)
        except CalculatorError as e:
            logger.warning("Calculator action {} failed: {}", action.type.name, e.message)
            self.last_error = e.message
            self.state = clear(self.state)
            return False

        self.last_error = None
        self.state = transition.state
        self.last_notice = transition.notice
        if transition.entry is not None:
            self._record(transition.entry)
        return True

    def _record(self, entry: HistoryEntry) -> None:
        self.history.append(entry)
        if self.global_history is not None:
            self.global_history.append(entry)
        if self.on_entry is not None:
            self.on_entry(entry)

    def press(self, tokens: List[str]) -> bool:
        """Feed a sequence of key tokens, e.g. ``['7', '+', '3', '=']``.

        Multi-digit tokens are entered one digit at a time. Processing stops
        at the first failing token. Notices from every key are kept in
        ``notices``.
        """
        self.notices = []
        for token in tokens:
            for action in token_to_actions(token):
                ok = self.dispatch(action)
                if self.last_notice:
                    self.notices.append(self.last_notice)
                if not ok:
                    return False
        return True

    def clear_history(self) -> None:
        self.history.clear()

    def reset(self) -> None:
        self.state = clear(self.state)


def token_to_actions(token: str) -> List[Action]:
    """Translate one shell/MCP key token into reducer actions."""
    text = token.strip()
    upper = text.upper()
    if not text:
        return []
    if upper in TOKEN_ACTIONS:
        return [Action(TOKEN_ACTIONS[upper])]
    if upper in OPERATOR_TOKENS:
        return [Action(ActionType.OPERATOR, Operator.parse(text.lower()))]
    if upper in SCIENTIFIC_TOKENS:
        return [Action(ActionType.SCIENTIFIC, upper.lower())]
    if upper in BITWISE_TOKENS:
        return [Action(ActionType.BITWISE, upper)]
    actions = []
    for char in text:
        if char == '.':
            actions.append(Action(ActionType.DECIMAL))
        else:
            actions.append(Action(ActionType.DIGIT, char))
    return actions
