#!/usr/bin/env python3
"""Interactive command shell for the calculator suite.

This module provides an interactive shell that keeps one calculator
session alive and exposes every calculator mode as a command: standard,
scientific and programmer keypad input, unit and base conversion, loan and
investment formulas, date math, currency exchange, market quotes and the
coin flip game. Signed-in users get their history and activity persisted.

Usage:
    python src/shell.py

Commands:
    press <keys...>               - Feed keys to the calculator
    convert <value> <from> <to>   - Convert between units
    loan <principal> <rate> <yrs> - Monthly payment and amortization
    datediff <date1> <date2>      - Days between two dates
    help                          - Show help message
    exit/quit                     - Exit the shell

Examples:
    > press 7 + 3 =
    > base 16
    > convert 100 m foot
    > loan 200000 6.5 30 --schedule
    > dateadd 2024-01-31 1 months
"""

import sys
import os
import asyncio
import cmd
import readline
import shlex

# Configure readline for tab completion
# This must be done before the cmd.Cmd class is used
try:
    if 'libedit' in readline.__doc__:
        readline.parse_and_bind("bind ^I rl_complete")
    else:
        readline.parse_and_bind("tab: complete")
except (AttributeError, TypeError):
    pass  # readline might not be fully available

# Add src directory to path for imports
sys.path.insert(0, os.path.dirname(__file__))

from calc.arithmetic import Action, ActionType
from calc.base_converter import apply_bitwise, convert_base
from calc.coin_flip import CoinFlipGame
from calc.date_math import PERIOD_UNITS, add_period, diff_days, subtract_period
from calc.errors import CalculatorError, MarketDataError
from calc.exchange import exchange, sanitize_amount
from calc.financial import calculate_financial
from calc.formatting import format_currency, format_exchange_result, format_significant
from calc.keyboard import is_coin_flip_key, resolve_key
from calc.session import CalculatorSession
from calc.unit_converter import UnitCategory, convert, find_category, units_for
from market.clients import ExchangeRateClient, QuoteClient
from market.rates import RateBook
from market.portfolio import AssetType, PortfolioItem, check_price_alerts, make_alert, portfolio_stats
from model.CalculatorState import CalculatorState
from model.History import GLOBAL_HISTORY_CAPACITY, HistoryBuffer
from render.renderers import (
    RENDERER_REGISTRY,
    ActivityRenderer,
    AmortizationScheduleRenderer,
    CoinStatsRenderer,
    DateDifferenceRenderer,
    FinancialSummaryRenderer,
    HistoryRenderer,
)
from services.activity_service import ActivityService, ActivityType, format_relative_time
from services.auth_service import AuthService
from services.data_service import DataService
from services.favorites_service import FavoritesService
from services.history_store import HistoryStore
from services.storage import JsonFileStore, KeyValueStore
from settings import AppSettings, load_settings


SAVED_VALUES = 'values'


async def _fetch(client, request):
    """Await one request, then close the client's own HTTP session.

    Each command runs in a fresh event loop, so a session must not outlive it.
    """
    try:
        return await request
    finally:
        await client.close()


class CalculatorShell(cmd.Cmd):
    """Interactive shell for the calculator suite."""

    intro = """
Calculator Suite Interactive Shell
==================================
Type 'help' for available commands.
Type 'exit' or 'quit' to exit.
"""
    prompt = '> '

    def __init__(self, settings: AppSettings = None, store: KeyValueStore = None,
                 coin: CoinFlipGame = None, rate_client: ExchangeRateClient = None,
                 quote_client: QuoteClient = None):
        super().__init__()
        self.settings = settings or load_settings()
        self.store = store if store is not None else JsonFileStore(self.settings.store_path)
        self.auth = AuthService(self.store)
        self.activities = ActivityService(self.store)
        self.favorites = FavoritesService(self.store)
        self.history_store = HistoryStore(self.store)
        self.saved = DataService(self.store)
        self.coin = coin or CoinFlipGame()
        self.rate_client = rate_client or ExchangeRateClient(
            self.settings.exchange.api_key, self.settings.exchange.base_url
        )
        self.quote_client = quote_client or QuoteClient(
            self.settings.quotes.api_key,
            self.settings.quotes.stock_url,
            self.settings.quotes.crypto_url,
            request_delay=self.settings.quotes.request_delay_seconds,
        )
        self.rate_book = RateBook(
            self.rate_client,
            self.settings.exchange.default_from,
            max_age=self.settings.exchange.refresh_interval_seconds,
        )
        self.global_history = HistoryBuffer(GLOBAL_HISTORY_CAPACITY)
        self.portfolio = []
        self.alerts = []
        self.session = self._new_session()

    def preloop(self):
        """Set up readline before entering the command loop."""
        try:
            readline.set_completer_delims(' \t\n')
            if 'libedit' in (readline.__doc__ or ''):
                readline.parse_and_bind("bind ^I rl_complete")
            else:
                readline.parse_and_bind("tab: complete")
        except (AttributeError, TypeError):
            pass  # readline might not be fully available

    def _new_session(self) -> CalculatorSession:
        """Calculator session bound to the signed-in user's saved history."""
        user = self.auth.current_user()
        history = self.history_store.load(user.id) if user else None
        return CalculatorSession(
            state=CalculatorState(precision=self.settings.precision),
            history=history,
            global_history=self.global_history,
            on_entry=self._on_history_entry,
        )

    def _on_history_entry(self, entry):
        """Persist the history and log the calculation for the signed-in user."""
        user = self.auth.current_user()
        if user is None:
            return
        self.history_store.save(user.id, self.session.history)
        activity = ActivityType.PROGRAMMING if self.session.state.base != 10 else ActivityType.CALCULATION
        self.activities.add_activity(user.id, activity, entry.text)

    def _log_activity(self, activity_type: ActivityType, description: str):
        user = self.auth.current_user()
        if user:
            self.activities.add_activity(user.id, activity_type, description)

    def _require_user(self):
        user = self.auth.current_user()
        if user is None:
            print("Not logged in. Use 'login <username> <password>' first.")
        return user

    def _split(self, arg: str) -> list:
        try:
            return shlex.split(arg)
        except ValueError as e:
            print(f"Error: {e}")
            return []

    def _show_display(self):
        state = self.session.state
        pending = f"  [{state.equation}]" if state.equation else ""
        base = f"  (base {state.base})" if state.base != 10 else ""
        print(f"{state.display}{pending}{base}")

    # Calculator

    def do_press(self, arg: str):
        """Feed keys to the calculator and show the display.

        Usage: press <key> [key ...]

        Keys: digits (0-9, A-F in base 16), '.', + - * / ^ root, =, %,
        AC, MC MR M+ M-, sqrt square cube sin cos tan log ln, NOT LSH RSH.
        """
        tokens = arg.split()
        if not tokens:
            print("Usage: press <key> [key ...]")
            return
        ok = self.session.press(tokens)
        for notice in self.session.notices:
            print(notice)
        if not ok:
            print(f"Error: {self.session.last_error}")
        self._show_display()

    def do_key(self, arg: str):
        """Send a single keyboard key (e.g. Enter, Escape, '+').

        Usage: key <key_name>
        """
        key = arg.strip()
        if is_coin_flip_key(key):
            self.do_flip('')
            return
        action = resolve_key(key, enabled=self.settings.keyboard_enabled)
        if action is None:
            print(f"Key not handled: {key!r}")
            return
        if not self.session.dispatch(action):
            print(f"Error: {self.session.last_error}")
        elif self.session.last_notice:
            print(self.session.last_notice)
        self._show_display()

    def do_display(self, arg: str):
        """Show the calculator display and pending equation."""
        self._show_display()
        if self.session.state.memory:
            print(f"Memory: {self.session.state.memory:g}")

    def do_history(self, arg: str):
        """Show calculator history.

        Usage: history [all]

        Without arguments shows this calculator's last 10 calculations;
        'all' shows the shared history across modes (last 50).
        """
        if arg.strip().lower() == 'all':
            HistoryRenderer().render(self.global_history)
        else:
            HistoryRenderer().render(self.session.history)

    def do_clearhistory(self, arg: str):
        """Clear the calculator history (and the saved copy when logged in)."""
        self.session.clear_history()
        user = self.auth.current_user()
        if user:
            self.history_store.clear(user.id)
        print("History cleared.")

    def do_base(self, arg: str):
        """Switch the display base.

        Usage: base <2|8|10|16>
        """
        try:
            base = int(arg.strip())
        except ValueError:
            print("Usage: base <2|8|10|16>")
            return
        if not self.session.dispatch(Action(ActionType.SET_BASE, base)):
            print(f"Error: {self.session.last_error}")
        self._show_display()

    def do_precision(self, arg: str):
        """Set the number of decimals for scientific results.

        Usage: precision <digits>
        """
        if not arg.strip():
            print(f"Precision: {self.session.state.precision}")
            return
        try:
            precision = int(arg.strip())
        except ValueError:
            print("Usage: precision <digits>")
            return
        if not self.session.dispatch(Action(ActionType.SET_PRECISION, precision)):
            print(f"Error: {self.session.last_error}")
            return
        print(f"Precision: {self.session.state.precision}")

    # Conversions

    def do_convert(self, arg: str):
        """Convert a value between units of the same category.

        Usage: convert <value> <from_unit> <to_unit> [category]

        The category is inferred from the source unit when omitted.
        """
        args = self._split(arg)
        if len(args) not in (3, 4):
            print("Usage: convert <value> <from_unit> <to_unit> [category]")
            return
        value, from_unit, to_unit = args[:3]
        category = args[3] if len(args) == 4 else find_category(from_unit)
        if category is None:
            print(f"Error: Unknown unit '{from_unit}'. Use 'units' to list units.")
            return
        try:
            result = convert(value, from_unit, to_unit, category)
        except CalculatorError as e:
            print(f"Error: {e.message}")
            return
        text = f"{value} {from_unit} = {format_significant(result)} {to_unit}"
        print(text)
        self._log_activity(ActivityType.CALCULATION, text)

    def do_units(self, arg: str):
        """List unit categories, or the units of one category.

        Usage: units [category]
        """
        if not arg.strip():
            for category in UnitCategory:
                print(f"  {category.value:<12} {', '.join(units_for(category))}")
            return
        try:
            print(', '.join(units_for(arg.strip())))
        except CalculatorError as e:
            print(f"Error: {e.message}")

    def do_radix(self, arg: str):
        """Convert a number between bases, or apply a 32-bit bitwise op.

        Usage: radix <digits> <from_base> <to_base>
               radix <NOT|LSH|RSH> <digits> <base>
        """
        args = arg.split()
        if len(args) != 3:
            print("Usage: radix <digits> <from_base> <to_base>")
            return
        try:
            if args[0].upper() in ('NOT', 'LSH', 'RSH'):
                result = apply_bitwise(args[1], int(args[2]), args[0])
            else:
                result = convert_base(args[0], int(args[1]), int(args[2]))
        except ValueError as e:
            message = e.message if isinstance(e, CalculatorError) else "Bases must be whole numbers"
            print(f"Error: {message}")
            return
        print(result)
        self._log_activity(ActivityType.PROGRAMMING, f"{arg.strip()} -> {result}")

    # Finance

    def _financial(self, kind: str, arg: str):
        args = self._split(arg)
        show_schedule = '--schedule' in args
        args = [a for a in args if a != '--schedule']
        if len(args) != 3:
            print(f"Usage: {kind} <principal> <annual_rate_percent> <years>")
            return None
        try:
            result = calculate_financial(kind, *args)
        except CalculatorError as e:
            print(f"Error: {e.message}")
            return None
        FinancialSummaryRenderer(self.settings.locale).render(result)
        if show_schedule:
            AmortizationScheduleRenderer(locale=self.settings.locale).render(result)
        return result

    def do_loan(self, arg: str):
        """Monthly loan payment with an optional amortization schedule.

        Usage: loan <principal> <annual_rate_percent> <years> [--schedule]
        """
        result = self._financial('loan', arg)
        if result:
            self._log_activity(ActivityType.INVESTMENT,
                               f"Loan of {format_currency(result.principal)}: "
                               f"{format_currency(result.result)}/month")

    def do_mortgage(self, arg: str):
        """Monthly mortgage payment with an optional amortization schedule.

        Usage: mortgage <principal> <annual_rate_percent> <years> [--schedule]
        """
        result = self._financial('mortgage', arg)
        if result:
            self._log_activity(ActivityType.INVESTMENT,
                               f"Mortgage of {format_currency(result.principal)}: "
                               f"{format_currency(result.result)}/month")

    def do_invest(self, arg: str):
        """Future value of a monthly-compounded investment.

        Usage: invest <principal> <annual_rate_percent> <years>
        """
        result = self._financial('investment', arg)
        if result:
            self._log_activity(ActivityType.INVESTMENT,
                               f"Investment of {format_currency(result.principal)} grows to "
                               f"{format_currency(result.result)}")

    # Dates

    def do_datediff(self, arg: str):
        """Days between two dates.

        Usage: datediff <YYYY-MM-DD> <YYYY-MM-DD>
        """
        args = arg.split()
        if len(args) != 2:
            print("Usage: datediff <YYYY-MM-DD> <YYYY-MM-DD>")
            return
        try:
            difference = diff_days(args[0], args[1])
        except CalculatorError as e:
            print(f"Error: {e.message}")
            return
        DateDifferenceRenderer().render(difference)
        self._log_activity(ActivityType.DATE, f"{args[0]} to {args[1]}: {difference.total_days} days")

    def _shift(self, arg: str, forwards: bool):
        args = arg.split()
        if len(args) != 3:
            verb = 'dateadd' if forwards else 'datesub'
            print(f"Usage: {verb} <YYYY-MM-DD> <amount> <{'|'.join(PERIOD_UNITS)}>")
            return
        start, amount, unit = args
        try:
            amount = int(amount)
        except ValueError:
            print(f"Error: Amount must be a whole number: {amount!r}")
            return
        try:
            shifted = add_period(start, amount, unit) if forwards else subtract_period(start, amount, unit)
        except CalculatorError as e:
            print(f"Error: {e.message}")
            return
        print(shifted.isoformat())
        sign = '+' if forwards else '-'
        self._log_activity(ActivityType.DATE, f"{start} {sign} {amount} {unit} = {shifted.isoformat()}")

    def do_dateadd(self, arg: str):
        """Add days, months or years to a date.

        Usage: dateadd <YYYY-MM-DD> <amount> <days|months|years>
        """
        self._shift(arg, True)

    def do_datesub(self, arg: str):
        """Subtract days, months or years from a date.

        Usage: datesub <YYYY-MM-DD> <amount> <days|months|years>
        """
        self._shift(arg, False)

    # Exchange and market data

    def do_exchange(self, arg: str):
        """Convert money using live exchange rates.

        Usage: exchange <amount> [from] [to]

        Currencies default to the configured pair. Requires EXCHANGE_API_KEY.
        """
        args = arg.split()
        if not args:
            print("Usage: exchange <amount> [from] [to]")
            return
        amount = sanitize_amount(args[0])
        from_currency = (args[1] if len(args) > 1 else self.settings.exchange.default_from).upper()
        to_currency = (args[2] if len(args) > 2 else self.settings.exchange.default_to).upper()
        if not amount:
            print("Error: Enter a numeric amount")
            return
        try:
            rate = asyncio.run(_fetch(self.rate_client, self.rate_book.rate(from_currency, to_currency)))
            value = exchange(amount, {to_currency: rate}, to_currency)
        except MarketDataError as e:
            print(f"Error: {e}")
            return
        except CalculatorError as e:
            print(f"Error: {e.message}")
            return
        text = (f"{amount} {from_currency} = "
                f"{format_exchange_result(value, self.settings.locale)} {to_currency}")
        print(text)
        self._log_activity(ActivityType.EXCHANGE, text)

    def do_quote(self, arg: str):
        """Show a live stock or crypto quote.

        Usage: quote <symbol> [--crypto]

        Crypto uses CoinGecko ids (bitcoin, ethereum, ...).
        """
        args = arg.split()
        if not args:
            print("Usage: quote <symbol> [--crypto]")
            return
        symbol = args[0]
        if '--crypto' in args:
            quote = asyncio.run(_fetch(self.quote_client, self.quote_client.fetch_crypto(symbol.lower())))
        else:
            quote = asyncio.run(_fetch(self.quote_client, self.quote_client.fetch_stock(symbol.upper())))
        if quote is None:
            print(f"No quote available for {symbol}")
            return
        star = ' *' if self.favorites.is_favorite(quote.symbol) else ''
        print(f"{quote.symbol}{star}: {format_currency(quote.price)} "
              f"({quote.change:+.2f}, {quote.change_percent:+.2f}%)")
        for alert in check_price_alerts(self.alerts, quote.symbol, quote.price):
            print(f"Price Alert! {alert.describe()}")
        self._log_activity(ActivityType.INVESTMENT, f"Checked {quote.symbol} at {format_currency(quote.price)}")

    def do_popular(self, arg: str):
        """Show quotes for the configured popular stocks and cryptocurrencies."""
        quotes = self.settings.quotes
        if not quotes.popular_stocks and not quotes.popular_cryptos:
            print("No popular symbols configured")
            return
        stocks, cryptos = asyncio.run(
            _fetch(self.quote_client, self.quote_client.fetch_many(quotes.popular_stocks, quotes.popular_cryptos))
        )
        if not stocks and not cryptos:
            print("No quotes available")
            return
        for quote in stocks + cryptos:
            star = ' *' if self.favorites.is_favorite(quote.symbol) else ''
            print(f"  {quote.symbol + star:<10} {format_currency(quote.price):>14} {quote.change_percent:+7.2f}%")

    def do_favorites(self, arg: str):
        """List favourite ticker symbols."""
        favorites = self.favorites.list()
        print(', '.join(favorites) if favorites else "No favorites yet")

    def do_favorite(self, arg: str):
        """Toggle a ticker symbol as favourite.

        Usage: favorite <symbol>
        """
        if not arg.strip():
            print("Usage: favorite <symbol>")
            return
        added = self.favorites.toggle(arg.strip())
        print(f"{arg.strip().upper()} {'added to' if added else 'removed from'} favorites")

    def do_alert(self, arg: str):
        """Add a price alert checked on every quote.

        Usage: alert <symbol> <above|below> <price>
        """
        args = arg.split()
        if len(args) != 3:
            print("Usage: alert <symbol> <above|below> <price>")
            return
        try:
            alert = make_alert(*args)
        except CalculatorError as e:
            print(f"Error: {e.message}")
            return
        self.alerts.append(alert)
        print(f"Will notify when {alert.symbol} goes {alert.direction.value} ${alert.price}")

    def do_portfolio(self, arg: str):
        """Manage and value the portfolio.

        Usage: portfolio add <symbol> <quantity> <avg_price> [stock|crypto]
               portfolio

        Valuation fetches live quotes for every holding.
        """
        args = arg.split()
        if args and args[0] == 'add':
            if len(args) not in (4, 5):
                print("Usage: portfolio add <symbol> <quantity> <avg_price> [stock|crypto]")
                return
            try:
                asset_type = AssetType(args[4].lower()) if len(args) == 5 else AssetType.STOCK
                item = PortfolioItem(args[1].upper(), float(args[2]), float(args[3]), asset_type)
            except ValueError:
                print("Error: Quantity and price must be numbers; type is stock or crypto")
                return
            self.portfolio.append(item)
            print(f"Added {item.quantity:g} {item.symbol} at {format_currency(item.avg_price)}")
            return

        if not self.portfolio:
            print("Portfolio is empty")
            return
        stocks = [i.symbol for i in self.portfolio if i.type == AssetType.STOCK]
        cryptos = [i.symbol.lower() for i in self.portfolio if i.type == AssetType.CRYPTO]
        stock_quotes, crypto_quotes = asyncio.run(
            _fetch(self.quote_client, self.quote_client.fetch_many(stocks, cryptos))
        )
        stats = portfolio_stats(self.portfolio, stock_quotes, crypto_quotes)
        print(f"  {'Total Value:':<20} {format_currency(stats.total_value, locale=self.settings.locale)}")
        print(f"  {'Daily P/L:':<20} {format_currency(stats.daily_profit_loss, locale=self.settings.locale)}")

    # Saved values

    def do_save(self, arg: str):
        """Save the current display for the logged-in user.

        Usage: save [note]
        """
        user = self._require_user()
        if user is None:
            return
        state = self.session.state
        note = arg.strip()
        self.saved.save_data(user.id, SAVED_VALUES, {'value': state.display, 'base': state.base, 'note': note})
        print(f"Saved {state.display}" + (f" ({note})" if note else ""))

    def do_saved(self, arg: str):
        """List the logged-in user's saved values."""
        user = self._require_user()
        if user is None:
            return
        items = self.saved.get_data(user.id, SAVED_VALUES)
        if not items:
            print("No saved values")
            return
        for item in reversed(items):
            data = item.data if isinstance(item.data, dict) else {'value': item.data}
            base = data.get('base', 10)
            value = data.get('value', '') + (f" (base {base})" if base != 10 else '')
            print(f"  {value:<24} {data.get('note', ''):<24} {format_relative_time(item.timestamp)}")

    def do_clearsaved(self, arg: str):
        """Delete the logged-in user's saved values."""
        user = self._require_user()
        if user is None:
            return
        self.saved.clear_data(user.id, SAVED_VALUES)
        print("Saved values cleared.")

    # Coin flip

    def do_flip(self, arg: str):
        """Flip a coin.

        Usage: flip [count]
        """
        try:
            count = int(arg.strip()) if arg.strip() else 1
        except ValueError:
            print("Usage: flip [count]")
            return
        results = [self.coin.flip() for _ in range(max(count, 0))]
        print(' '.join(results))
        if results:
            self._log_activity(ActivityType.COIN_FLIP, f"Flipped {len(results)} coin(s): {results[-1]}")

    def do_flipstats(self, arg: str):
        """Show coin flip statistics."""
        CoinStatsRenderer().render(self.coin)

    def do_flipreset(self, arg: str):
        """Reset coin flip statistics."""
        self.coin.reset()
        print("Coin flip statistics reset.")

    # Accounts

    def do_register(self, arg: str):
        """Create an account.

        Usage: register <username> <password>
        """
        args = self._split(arg)
        if len(args) != 2:
            print("Usage: register <username> <password>")
            return
        try:
            created = self.auth.register(*args)
        except CalculatorError as e:
            print(f"Error: {e.message}")
            return
        print("Account created." if created else f"Username '{args[0]}' is already taken.")

    def do_login(self, arg: str):
        """Log in and restore saved calculator history.

        Usage: login <username> <password>
        """
        args = self._split(arg)
        if len(args) != 2:
            print("Usage: login <username> <password>")
            return
        if not self.auth.login(*args):
            print("Invalid username or password.")
            return
        self.session = self._new_session()
        print(f"Logged in as {args[0]}.")

    def do_logout(self, arg: str):
        """Log out."""
        self.auth.logout()
        self.session = self._new_session()
        print("Logged out.")

    def do_whoami(self, arg: str):
        """Show the logged-in user."""
        user = self.auth.current_user()
        print(user.username if user else "Not logged in.")

    def do_activity(self, arg: str):
        """Show recent activity for the logged-in user.

        Usage: activity [all]
        """
        user = self._require_user()
        if user is None:
            return
        if arg.strip().lower() == 'all':
            items = self.activities.get_user_activities(user.id)
        else:
            items = self.activities.get_recent_activities(user.id)
        ActivityRenderer().render(items)

    def do_stats(self, arg: str):
        """Show activity counts for today, this week and this month."""
        user = self._require_user()
        if user is None:
            return
        stats = self.activities.get_activity_stats(user.id)
        print(f"  {'Today:':<12} {stats.today}")
        print(f"  {'This week:':<12} {stats.this_week}")
        print(f"  {'This month:':<12} {stats.this_month}")

    def do_renderers(self, arg: str):
        """List the available output renderers."""
        for name in RENDERER_REGISTRY:
            print(f"  {name}")

    def do_exit(self, arg: str):
        """Exit the shell."""
        print("Goodbye!")
        return True

    def do_quit(self, arg: str):
        """Exit the shell."""
        return self.do_exit(arg)

    def do_EOF(self, arg: str):
        """Handle Ctrl+D to exit."""
        print()  # Print newline for clean exit
        return self.do_exit(arg)

    def emptyline(self):
        """Do nothing on empty line."""
        pass

    def default(self, line: str):
        """Handle unknown commands."""
        print(f"Unknown command: {line}")
        print("Type 'help' for available commands.")

    def complete_convert(self, text, line, begidx, endidx):
        """Tab completion for unit names."""
        names = [unit for category in UnitCategory for unit in units_for(category)]
        return [n for n in names if n.startswith(text)]

    def complete_units(self, text, line, begidx, endidx):
        return [c.value for c in UnitCategory if c.value.startswith(text)]


def main():
    shell = CalculatorShell()
    shell.cmdloop()


if __name__ == "__main__":
    main()
