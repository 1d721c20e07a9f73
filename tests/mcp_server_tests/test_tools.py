"""Tests for the MCP server tools module."""

import asyncio
import os
import sys
import pytest

# Add src and mcp-server to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../src')))
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../mcp-server')))

from tools import CalculatorTools, DEFAULT_SESSION
from calc.arithmetic import Action, ActionType
from calc.coin_flip import CoinFlipGame
from calc.errors import DomainError, FormatError, MarketDataError, ValidationError
from market.clients import StockQuote
from settings import AppSettings


class FakeRandom:
    def __init__(self, values):
        self.values = list(values)

    def random(self):
        return self.values.pop(0)


class FakeRateClient:
    def __init__(self, rates=None, error=None):
        self.rates = rates or {}
        self.error = error
        self.closed = 0
        self.requested = []

    async def fetch_rates(self, base='USD'):
        self.requested.append(base)
        if self.error:
            raise self.error
        return self.rates

    async def close(self):
        self.closed += 1


class FakeQuoteClient:
    def __init__(self, quote=None):
        self.quote = quote
        self.closed = 0

    async def fetch_stock(self, symbol):
        return self.quote if self.quote and self.quote.symbol == symbol else None

    async def fetch_crypto(self, coin_id):
        return None

    async def fetch_many(self, stocks, cryptos):
        self.requested = (list(stocks), list(cryptos))
        found = [self.quote] if self.quote and self.quote.symbol in stocks else []
        return found, []

    async def close(self):
        self.closed += 1


@pytest.fixture
def tools():
    return CalculatorTools(
        AppSettings(),
        rate_client=FakeRateClient({'USD': 1.0, 'EUR': 0.9, 'JPY': 150.0}),
        quote_client=FakeQuoteClient(StockQuote('AAPL', 190.5, 2.5, 1.33, 191.0, 187.2, 188.0)),
        coin=CoinFlipGame(FakeRandom([0.1, 0.2, 0.9])),
    )


class TestPressKeys:
    """Tests for keypad sessions."""

    def test_simple_calculation(self, tools):
        result = tools.press_keys(['12', '+', '30', '='])
        assert result['display'] == '42'
        assert result['equation'] == ''
        assert result['base'] == 10

    def test_sessions_continue_across_calls(self, tools):
        tools.press_keys(['5', '*'])
        result = tools.press_keys(['4', '='])
        assert result['display'] == '20'

    def test_named_sessions_are_independent(self, tools):
        tools.press_keys(['5', '*'], session='a')
        result = tools.press_keys(['9'], session='b')
        assert result['equation'] == ''
        assert set(tools.sessions) == {'a', 'b'}

    def test_default_session_name(self, tools):
        tools.press_keys(['1'])
        assert DEFAULT_SESSION in tools.sessions

    def test_error_reported(self, tools):
        result = tools.press_keys(['1', '/', '0', '='])
        assert result['error'] == 'Cannot divide by zero'
        assert result['display'] == '0'

    def test_notice_reported(self, tools):
        tools._session('bin').dispatch(Action(ActionType.SET_BASE, 2))
        result = tools.press_keys(['1', '2'], session='bin')
        assert result['display'] == '1'
        assert len(result['notices']) == 1
        assert 'not valid in base 2' in result['notices'][0]

    def test_every_notice_reported(self, tools):
        tools._session('bin').dispatch(Action(ActionType.SET_BASE, 2))
        result = tools.press_keys(['2', '1', '3', '+', '='], session='bin')
        assert len(result['notices']) == 3
        assert 'error' not in result

    def test_no_notices_key_when_quiet(self, tools):
        assert 'notices' not in tools.press_keys(['1', '+', '1', '='])

    def test_numeric_keys_accepted(self, tools):
        assert tools.press_keys([7, '+', 1, '='])['display'] == '8'


class TestCalculatorTools:
    def test_calculate(self, tools):
        assert tools.calculate(6, 4, '/') == {'expression': '6 ÷ 4', 'result': '1.5'}

    def test_calculate_unknown_operator(self, tools):
        with pytest.raises(ValidationError):
            tools.calculate(1, 2, 'mod')

    def test_calculate_domain_error(self, tools):
        with pytest.raises(DomainError):
            tools.calculate(1, 0, '/')

    def test_scientific(self, tools):
        result = tools.scientific('SQRT', 2, 4)
        assert result['function'] == 'sqrt'
        assert result['result'] == '1.4142'

    def test_history_scopes(self, tools):
        tools.press_keys(['1', '+', '1', '='], session='a')
        tools.press_keys(['2', '+', '2', '='], session='b')
        session_history = tools.get_history('a')
        assert [e['result'] for e in session_history['entries']] == ['2']
        all_history = tools.get_history(scope='all')
        assert [e['result'] for e in all_history['entries']] == ['4', '2']

    def test_clear_history(self, tools):
        tools.press_keys(['1', '+', '1', '='])
        assert tools.clear_history() == {'cleared': True}
        assert tools.get_history()['entries'] == []


class TestProgrammerTools:
    def test_convert_base(self, tools):
        assert tools.convert_base('255', 10, 16)['result'] == 'FF'

    def test_convert_base_invalid_digit(self, tools):
        with pytest.raises(FormatError):
            tools.convert_base('19', 8, 10)

    def test_bitwise(self, tools):
        result = tools.bitwise('7FFFFFFF', 16, 'lsh')
        assert result['operation'] == 'LSH'
        assert result['result'] == '-2'


class TestFinanceTools:
    def test_loan_payment(self, tools):
        result = tools.loan_payment(100000, 6, 30)
        assert result['monthly_payment'] == pytest.approx(599.55, abs=0.01)
        assert result['number_of_payments'] == 360
        assert result['total_interest'] == pytest.approx(result['total_paid'] - 100000, abs=0.05)

    def test_mortgage_kind(self, tools):
        assert tools.loan_payment(100000, 6, 30, 'mortgage')['kind'] == 'mortgage'

    def test_amortization_schedule_rows(self, tools):
        result = tools.amortization_schedule(100000, 6, 30, max_rows=2)
        assert result['total_payments'] == 360
        assert len(result['schedule']) == 2
        assert result['schedule'][0]['interest'] == 500.0

    def test_future_value(self, tools):
        result = tools.future_value(1000, 12, 1)
        assert result['future_value'] == pytest.approx(1126.83, abs=0.01)
        assert result['growth'] == pytest.approx(126.83, abs=0.01)

    def test_invalid_loan(self, tools):
        with pytest.raises(ValidationError):
            tools.loan_payment(0, 6, 30)


class TestDateAndUnitTools:
    def test_date_difference(self, tools):
        result = tools.date_difference('2024-01-01', '2024-03-01')
        assert result['total_days'] == 60
        assert result['description'] == '0 years, 2 months, 0 days'

    def test_add_period(self, tools):
        assert tools.add_period('2024-01-31', 1, 'months')['result'] == '2024-02-29'

    def test_convert_units_infers_category(self, tools):
        result = tools.convert_units(100, 'C', 'F')
        assert result['result'] == pytest.approx(212)
        assert result['formatted'] == '212.000'

    def test_convert_units_unknown(self, tools):
        with pytest.raises(ValidationError):
            tools.convert_units(1, 'parsec', 'm')

    def test_list_units(self, tools):
        assert tools.list_units('temperature') == {'temperature': ['C', 'F', 'K']}
        assert set(tools.list_units()) == {'length', 'mass', 'temperature', 'area', 'volume', 'time'}


class TestMarketTools:
    @pytest.mark.asyncio
    async def test_exchange(self, tools):
        result = await tools.exchange(100, 'usd', 'jpy')
        assert result['result'] == 15000
        assert result['rate'] == 150.0
        assert result['formatted'] == '15,000.00'
        assert tools.rate_client.closed == 1

    @pytest.mark.asyncio
    async def test_exchange_failure_closes_client(self):
        client = FakeRateClient(error=MarketDataError("offline"))
        tools = CalculatorTools(AppSettings(), rate_client=client)
        with pytest.raises(MarketDataError):
            await tools.exchange(1, 'USD', 'EUR')
        assert client.closed == 1

    @pytest.mark.asyncio
    async def test_get_quote(self, tools):
        result = await tools.get_quote('aapl')
        assert result['symbol'] == 'AAPL'
        assert result['price'] == 190.5
        assert tools.quote_client.closed == 1

    @pytest.mark.asyncio
    async def test_get_quote_missing(self, tools):
        result = await tools.get_quote('bitcoin', 'crypto')
        assert result == {'error': 'No quote available for bitcoin'}

    @pytest.mark.asyncio
    async def test_exchange_reuses_fresh_table(self, tools):
        await tools.exchange(100, 'USD', 'JPY')
        result = await tools.exchange(9, 'EUR', 'JPY')
        assert tools.rate_client.requested == ['USD']
        assert result['rate'] == pytest.approx(150 / 0.9)
        assert result['result'] == pytest.approx(1500)

    @pytest.mark.asyncio
    async def test_exchange_unknown_currency(self, tools):
        with pytest.raises(ValidationError):
            await tools.exchange(1, 'USD', 'XYZ')

    def test_rate_polling_needs_api_key(self, tools):
        assert tools.start_rate_polling() is False
        assert not tools.rates.polling

    @pytest.mark.asyncio
    async def test_rate_polling_runs_until_close(self):
        settings = AppSettings()
        settings.exchange.api_key = 'key'
        settings.exchange.refresh_interval_seconds = 60
        client = FakeRateClient({'USD': 1.0, 'EUR': 0.9})
        tools = CalculatorTools(settings, rate_client=client, quote_client=FakeQuoteClient())
        assert tools.start_rate_polling()
        await asyncio.sleep(0.01)
        assert client.requested == ['USD']
        result = await tools.exchange(10, 'usd', 'eur')
        assert result['result'] == 9
        assert client.requested == ['USD']
        assert client.closed == 0
        await tools.close()
        assert not tools.rates.polling
        assert client.closed == 1

    @pytest.mark.asyncio
    async def test_popular_quotes_use_configured_lists(self, tools):
        tools.settings.quotes.popular_stocks = ['AAPL', 'MSFT']
        tools.settings.quotes.popular_cryptos = ['bitcoin']
        result = await tools.popular_quotes()
        assert tools.quote_client.requested == (['AAPL', 'MSFT'], ['bitcoin'])
        assert [q['symbol'] for q in result['stocks']] == ['AAPL']
        assert result['cryptos'] == []
        assert tools.quote_client.closed == 1


class TestCoinTools:
    def test_flip_coin(self, tools):
        result = tools.flip_coin(3)
        assert result['results'] == ['heads', 'heads', 'tails']
        assert (result['heads'], result['tails'], result['total']) == (2, 1, 3)
        assert result['heads_ratio'] == pytest.approx(0.6667)
        assert result['streak'] == {'side': 'tails', 'count': 1}

    def test_flip_coin_count_must_be_positive(self, tools):
        with pytest.raises(ValidationError):
            tools.flip_coin(0)
