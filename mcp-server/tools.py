"""Calculator Suite Tools for MCP Server.

This module provides the tool implementations that wrap the calculator
core and expose it through MCP. Keypad sessions are kept in memory by
name so an assistant can continue a calculation across calls.
"""

import os
import sys
from typing import Any, Dict, List, Optional

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from calc.arithmetic import calculate as apply_operator, scientific as scientific_function
from calc.base_converter import apply_bitwise, convert_base as convert_radix
from calc.coin_flip import HEADS, TAILS, CoinFlipGame
from calc.date_math import add_period as shift_date, diff_days
from calc.errors import ValidationError
from calc.exchange import exchange as convert_currency
from calc.financial import calculate_financial
from calc.formatting import format_display, format_exchange_result, format_fixed, format_significant
from calc.session import CalculatorSession
from calc.unit_converter import UnitCategory, convert, find_category, units_for
from market.clients import ExchangeRateClient, QuoteClient
from market.rates import RateBook
from model.CalculatorState import CalculatorState, Operator
from model.History import GLOBAL_HISTORY_CAPACITY, HistoryBuffer
from settings import AppSettings


DEFAULT_SESSION = 'default'


class CalculatorTools:
    """Tools that wrap the calculator modes for MCP access."""

    def __init__(self, settings: AppSettings, rate_client: Optional[ExchangeRateClient] = None,
                 quote_client: Optional[QuoteClient] = None, coin: Optional[CoinFlipGame] = None):
        """Initialize with settings and optional injected clients.

        Args:
            settings: Loaded application settings
            rate_client: Exchange rate client (built from settings when omitted)
            quote_client: Quote client (built from settings when omitted)
            coin: Coin flip game (a fresh one when omitted)
        """
        self.settings = settings
        self.rate_client = rate_client or ExchangeRateClient(
            settings.exchange.api_key, settings.exchange.base_url
        )
        self.quote_client = quote_client or QuoteClient(
            settings.quotes.api_key,
            settings.quotes.stock_url,
            settings.quotes.crypto_url,
            request_delay=settings.quotes.request_delay_seconds,
        )
        self.rates = RateBook(
            self.rate_client,
            settings.exchange.default_from,
            max_age=settings.exchange.refresh_interval_seconds,
        )
        self.coin = coin or CoinFlipGame()
        self.global_history = HistoryBuffer(GLOBAL_HISTORY_CAPACITY)
        self.sessions: Dict[str, CalculatorSession] = {}

    def _session(self, name: Optional[str]) -> CalculatorSession:
        name = name or DEFAULT_SESSION
        if name not in self.sessions:
            self.sessions[name] = CalculatorSession(
                state=CalculatorState(precision=self.settings.precision),
                global_history=self.global_history,
            )
        return self.sessions[name]

    # Calculator

    def press_keys(self, keys: List[str], session: Optional[str] = None) -> dict:
        """Feed keys to a named keypad session and report the display."""
        calc = self._session(session)
        ok = calc.press([str(k) for k in keys])
        state = calc.state
        result = {
            "display": state.display,
            "equation": state.equation,
            "base": state.base,
            "memory": state.memory,
        }
        if calc.notices:
            result["notices"] = list(calc.notices)
        if not ok:
            result["error"] = calc.last_error
        return result

    def calculate(self, a: float, b: float, operator: str) -> dict:
        try:
            op = Operator.parse(operator)
        except ValueError as e:
            raise ValidationError(str(e))
        value = apply_operator(float(a), float(b), op)
        return {
            "expression": f"{format_display(float(a))} {op.value} {format_display(float(b))}",
            "result": format_display(value),
        }

    def scientific(self, function: str, value: float, precision: int = 8) -> dict:
        result = scientific_function(function, float(value))
        return {
            "function": function.lower(),
            "input": value,
            "result": format_fixed(result, precision),
        }

    def get_history(self, session: Optional[str] = None, scope: str = 'session') -> dict:
        history = self.global_history if scope == 'all' else self._session(session).history
        return {
            "scope": scope,
            "entries": history.map(lambda e: e.to_dict()),
        }

    def clear_history(self, session: Optional[str] = None) -> dict:
        self._session(session).clear_history()
        return {"cleared": True}

    # Programmer

    def convert_base(self, digits: str, from_base: int, to_base: int) -> dict:
        return {
            "input": digits,
            "from_base": from_base,
            "to_base": to_base,
            "result": convert_radix(digits, int(from_base), int(to_base)),
        }

    def bitwise(self, digits: str, base: int, operation: str) -> dict:
        return {
            "operation": operation.upper(),
            "input": digits,
            "base": base,
            "result": apply_bitwise(digits, int(base), operation),
        }

    # Finance

    def loan_payment(self, principal: float, annual_rate_percent: float, years: float,
                     kind: str = 'loan') -> dict:
        result = calculate_financial(kind, principal, annual_rate_percent, years)
        return {
            "kind": result.kind,
            "monthly_payment": round(result.result, 2),
            "number_of_payments": len(result.schedule),
            "total_paid": round(result.total_paid, 2),
            "total_interest": round(result.total_interest, 2),
        }

    def amortization_schedule(self, principal: float, annual_rate_percent: float, years: float,
                              max_rows: Optional[int] = None) -> dict:
        result = calculate_financial('loan', principal, annual_rate_percent, years)
        rows = result.schedule if max_rows is None else result.schedule[:max_rows]
        return {
            "monthly_payment": round(result.result, 2),
            "total_payments": len(result.schedule),
            "schedule": [
                {
                    "payment": row.payment_index,
                    "amount": round(row.payment_amount, 2),
                    "principal": round(row.principal_portion, 2),
                    "interest": round(row.interest_portion, 2),
                    "balance": round(row.remaining_balance, 2),
                }
                for row in rows
            ],
        }

    def future_value(self, principal: float, annual_rate_percent: float, years: float) -> dict:
        result = calculate_financial('investment', principal, annual_rate_percent, years)
        return {
            "principal": round(result.principal, 2),
            "future_value": round(result.result, 2),
            "growth": round(result.total_interest, 2),
        }

    # Dates

    def date_difference(self, start: str, end: str) -> dict:
        difference = diff_days(start, end)
        return {
            "total_days": difference.total_days,
            "years": difference.years,
            "months": difference.months,
            "days": difference.days,
            "description": difference.describe(),
        }

    def add_period(self, start: str, amount: int, unit: str) -> dict:
        return {
            "start": start,
            "amount": amount,
            "unit": unit,
            "result": shift_date(start, amount, unit).isoformat(),
        }

    # Conversion

    def convert_units(self, value: Any, from_unit: str, to_unit: str,
                      category: Optional[str] = None) -> dict:
        category = category or find_category(from_unit)
        if category is None:
            raise ValidationError(f"Unknown unit '{from_unit}'")
        result = convert(value, from_unit, to_unit, category)
        return {
            "value": value,
            "from_unit": from_unit,
            "to_unit": to_unit,
            "result": result,
            "formatted": format_significant(result),
        }

    def list_units(self, category: Optional[str] = None) -> dict:
        if category:
            return {category: units_for(category)}
        return {c.value: units_for(c) for c in UnitCategory}

    def start_rate_polling(self) -> bool:
        """Keep the rate table refreshed in the background when a key is set."""
        if not self.settings.exchange.api_key:
            return False
        self.rates.start()
        return True

    async def close(self) -> None:
        await self.rates.stop()
        await self.rate_client.close()
        await self.quote_client.close()

    async def exchange(self, amount: Any, from_currency: str, to_currency: str) -> dict:
        try:
            rate = await self.rates.rate(from_currency, to_currency)
        finally:
            # The poller reuses the client between refreshes
            if not self.rates.polling:
                await self.rate_client.close()
        value = convert_currency(amount, {to_currency.upper(): rate}, to_currency)
        return {
            "amount": amount,
            "from": from_currency.upper(),
            "to": to_currency.upper(),
            "rate": rate,
            "result": round(value, 4),
            "formatted": format_exchange_result(value, self.settings.locale),
        }

    async def get_quote(self, symbol: str, asset_type: str = 'stock') -> dict:
        try:
            if asset_type == 'crypto':
                quote = await self.quote_client.fetch_crypto(symbol.lower())
            else:
                quote = await self.quote_client.fetch_stock(symbol.upper())
        finally:
            await self.quote_client.close()
        if quote is None:
            return {"error": f"No quote available for {symbol}"}
        return vars(quote)

    async def popular_quotes(self) -> dict:
        """Quotes for the configured popular stocks and cryptocurrencies."""
        quotes = self.settings.quotes
        try:
            stocks, cryptos = await self.quote_client.fetch_many(quotes.popular_stocks, quotes.popular_cryptos)
        finally:
            await self.quote_client.close()
        return {
            "stocks": [vars(q) for q in stocks],
            "cryptos": [vars(q) for q in cryptos],
        }

    # Coin flip

    def flip_coin(self, count: int = 1) -> dict:
        if count < 1:
            raise ValidationError("Count must be at least 1")
        results = [self.coin.flip() for _ in range(count)]
        stats = self.coin.stats
        return {
            "results": results,
            "heads": stats.heads,
            "tails": stats.tails,
            "total": stats.total,
            "heads_ratio": round(stats.ratio(HEADS), 4),
            "tails_ratio": round(stats.ratio(TAILS), 4),
            "streak": {"side": self.coin.streak.side, "count": self.coin.streak.count},
        }
