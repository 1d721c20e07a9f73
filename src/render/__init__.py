"""Render module for calculator output display."""

from render.renderers import (
    BaseRenderer,
    FinancialSummaryRenderer,
    AmortizationScheduleRenderer,
    HistoryRenderer,
    DateDifferenceRenderer,
    ActivityRenderer,
    CoinStatsRenderer,
    RENDERER_REGISTRY,
)

__all__ = [
    'BaseRenderer',
    'FinancialSummaryRenderer',
    'AmortizationScheduleRenderer',
    'HistoryRenderer',
    'DateDifferenceRenderer',
    'ActivityRenderer',
    'CoinStatsRenderer',
    'RENDERER_REGISTRY',
]
