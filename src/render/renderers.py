"""Renderer classes for displaying calculator results in the terminal.

Each renderer takes one result object from the calc or services layer and
prints it as a fixed-width table or summary block.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional

from calc.coin_flip import HEADS, TAILS, CoinFlipGame
from calc.date_math import DateDifference
from calc.financial import FinancialResult
from calc.formatting import DEFAULT_LOCALE, format_currency
from model.History import HistoryBuffer


class BaseRenderer(ABC):
    """Abstract base class for all renderers."""

    @abstractmethod
    def render(self, data: Any) -> None:
        """Render the data to output.

        Args:
            data: The result object to display
        """
        pass


class FinancialSummaryRenderer(BaseRenderer):
    """Renderer for a loan, mortgage or investment result."""

    def __init__(self, locale: str = DEFAULT_LOCALE):
        self.locale = locale

    def _money(self, amount: float) -> str:
        return format_currency(amount, locale=self.locale)

    def render(self, data: FinancialResult) -> None:
        print()
        print("=" * 60)
        print(f"{data.kind.upper() + ' SUMMARY':^60}")
        print("=" * 60)
        print(f"  {'Principal:':<30} {self._money(data.principal):>26}")
        print(f"  {'Annual Interest Rate:':<30} {data.annual_rate_percent:>25.2f}%")
        print(f"  {'Term (years):':<30} {data.years:>26g}")
        print("-" * 60)
        if data.kind == 'investment':
            print(f"  {'Future Value:':<30} {self._money(data.result):>26}")
            print(f"  {'Total Growth:':<30} {self._money(data.total_interest):>26}")
        else:
            print(f"  {'Monthly Payment:':<30} {self._money(data.result):>26}")
            print(f"  {'Total Paid:':<30} {self._money(data.total_paid):>26}")
            print(f"  {'Total Interest:':<30} {self._money(data.total_interest):>26}")
        print("=" * 60)
        print()


class AmortizationScheduleRenderer(BaseRenderer):
    """Renderer for the month-by-month payment schedule."""

    def __init__(self, max_rows: Optional[int] = None, locale: str = DEFAULT_LOCALE):
        """Initialize with an optional row limit.

        Args:
            max_rows: Show at most this many payments (all when None)
            locale: Locale for money formatting
        """
        self.max_rows = max_rows
        self.locale = locale

    def _money(self, amount: float) -> str:
        return format_currency(amount, locale=self.locale)

    def render(self, data: FinancialResult) -> None:
        if not data.schedule:
            print("No amortization schedule for this calculation")
            return

        money = self._money
        print()
        print(f"  {'#':>5} {'Payment':>16} {'Principal':>16} {'Interest':>16} {'Balance':>18}")
        print(f"  {'-' * 5} {'-' * 16} {'-' * 16} {'-' * 16} {'-' * 18}")
        rows = data.schedule if self.max_rows is None else data.schedule[:self.max_rows]
        for row in rows:
            print(f"  {row.payment_index:>5} {money(row.payment_amount):>16} "
                  f"{money(row.principal_portion):>16} {money(row.interest_portion):>16} "
                  f"{money(row.remaining_balance):>18}")
        hidden = len(data.schedule) - len(rows)
        if hidden > 0:
            print(f"  ... {hidden} more payments")
        print()


class HistoryRenderer(BaseRenderer):
    """Renderer for calculator history, newest first."""

    def render(self, data: HistoryBuffer) -> None:
        if len(data) == 0:
            print("No calculations yet")
            return
        for index, entry in enumerate(data, start=1):
            print(f"  {index:>3}. {entry.text:<40} {entry.timestamp:%H:%M:%S}")


class DateDifferenceRenderer(BaseRenderer):
    def render(self, data: DateDifference) -> None:
        print(f"  {'Total days:':<14} {data.total_days}")
        print(f"  {'Approximately:':<14} {data.describe()}")


class ActivityRenderer(BaseRenderer):
    """Renderer for a user's activity log."""

    def __init__(self, now: Optional[int] = None):
        """Initialize with the reference time for relative timestamps.

        Args:
            now: Epoch milliseconds; defaults to the current time
        """
        self.now = now

    def render(self, data: List[Any]) -> None:
        if not data:
            print("No activity recorded")
            return
        for activity in data:
            print(f"  [{activity.icon.value:<10}] {activity.description:<45} {activity.relative_time(self.now)}")


class CoinStatsRenderer(BaseRenderer):
    def render(self, data: CoinFlipGame) -> None:
        stats = data.stats
        print(f"  {'Heads:':<10} {stats.heads:>6} ({stats.ratio(HEADS) * 100:5.1f}%)")
        print(f"  {'Tails:':<10} {stats.tails:>6} ({stats.ratio(TAILS) * 100:5.1f}%)")
        print(f"  {'Total:':<10} {stats.total:>6}")
        if data.streak.side:
            print(f"  {'Streak:':<10} {data.streak.count} x {data.streak.side}")
        if len(data.history):
            print("  Recent: " + ' '.join(record.result[0].upper() for record in data.history))


# Registry mapping display names to renderer classes
RENDERER_REGISTRY = {
    'FinancialSummary': FinancialSummaryRenderer,
    'AmortizationSchedule': AmortizationScheduleRenderer,
    'History': HistoryRenderer,
    'DateDifference': DateDifferenceRenderer,
    'Activity': ActivityRenderer,
    'CoinStats': CoinStatsRenderer,
}
