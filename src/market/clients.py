"""HTTP clients for exchange rates and stock/crypto quotes.

Both clients accept an existing ``aiohttp.ClientSession`` so callers (and
tests) control its lifetime; otherwise they lazily open their own and close
it in ``close()``.
"""

import asyncio
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import aiohttp
from loguru import logger

from calc.errors import MarketDataError


REQUEST_TIMEOUT_SECONDS = 30
DEFAULT_REQUEST_DELAY = 0.2


@dataclass
class StockQuote:
    symbol: str
    price: float
    change: float
    change_percent: float
    high: float
    low: float
    prev_close: float


@dataclass
class CryptoQuote:
    symbol: str
    price: float
    change: float
    change_percent: float
    high_24h: float
    low_24h: float
    market_cap: float
    volume: float
    coin_id: str = ''


class _HttpClient:
    def __init__(self, session: Optional[aiohttp.ClientSession] = None):
        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def _get_json(self, url: str, params: Optional[dict] = None) -> Tuple[int, dict]:
        session = await self._get_session()
        async with session.get(
            url,
            params=params,
            timeout=aiohttp.ClientTimeout(total=REQUEST_TIMEOUT_SECONDS),
        ) as response:
            return response.status, await response.json()

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()


class ExchangeRateClient(_HttpClient):
    """Latest rates from exchangerate-api.com (v6)."""

    def __init__(self, api_key: Optional[str], base_url: str = 'https://v6.exchangerate-api.com/v6',
                 session: Optional[aiohttp.ClientSession] = None):
        super().__init__(session)
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')

    async def fetch_rates(self, base: str = 'USD') -> Dict[str, float]:
        """Fetch conversion rates from ``base`` to every listed currency.

        Returns:
            Currency code to rate, sorted by code

        Raises:
            MarketDataError: Missing API key, network failure or an
                unsuccessful response
        """
        if not self.api_key:
            raise MarketDataError("Exchange rate API key is not configured")

        url = f"{self.base_url}/{self.api_key}/latest/{base.upper()}"
        try:
            status, data = await self._get_json(url)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("Exchange rate request failed: {}", e)
            raise MarketDataError(f"Could not reach the exchange rate service: {e}") from e

        if status != 200 or data.get('result') != 'success':
            reason = data.get('error-type') or data.get('error') or f"HTTP {status}"
            logger.warning("Exchange rate service returned an error: {}", reason)
            raise MarketDataError(f"Exchange rates unavailable: {reason}")

        rates = data.get('conversion_rates') or {}
        return {code: float(rates[code]) for code in sorted(rates)}


class QuoteClient(_HttpClient):
    """Stock quotes from Finnhub and crypto quotes from CoinGecko."""

    def __init__(self, api_key: Optional[str] = None,
                 stock_url: str = 'https://finnhub.io/api/v1',
                 crypto_url: str = 'https://api.coingecko.com/api/v3',
                 session: Optional[aiohttp.ClientSession] = None,
                 request_delay: float = DEFAULT_REQUEST_DELAY):
        super().__init__(session)
        self.api_key = api_key
        self.stock_url = stock_url.rstrip('/')
        self.crypto_url = crypto_url.rstrip('/')
        self.request_delay = request_delay

    async def fetch_stock(self, symbol: str) -> Optional[StockQuote]:
        """Current quote for a ticker, or None when unavailable."""
        if not self.api_key:
            logger.warning("Stock quote API key is not configured")
            return None
        try:
            status, data = await self._get_json(
                f"{self.stock_url}/quote", params={'symbol': symbol, 'token': self.api_key}
            )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("Stock quote request for {} failed: {}", symbol, e)
            return None

        if status != 200 or not data.get('c') or data.get('error'):
            logger.debug("No stock quote for {} (HTTP {})", symbol, status)
            return None
        return StockQuote(
            symbol=symbol.upper(),
            price=float(data['c']),
            change=float(data.get('d') or 0),
            change_percent=float(data.get('dp') or 0),
            high=float(data.get('h') or 0),
            low=float(data.get('l') or 0),
            prev_close=float(data.get('pc') or 0),
        )

    async def fetch_crypto(self, coin_id: str) -> Optional[CryptoQuote]:
        """Current market data for a CoinGecko coin id, or None when unavailable."""
        params = {
            'localization': 'false',
            'tickers': 'false',
            'community_data': 'false',
            'developer_data': 'false',
            'sparkline': 'false',
        }
        try:
            status, data = await self._get_json(f"{self.crypto_url}/coins/{coin_id}", params=params)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("Crypto quote request for {} failed: {}", coin_id, e)
            return None

        market = data.get('market_data') if status == 200 else None
        if not market:
            logger.debug("No crypto quote for {} (HTTP {})", coin_id, status)
            return None
        try:
            return CryptoQuote(
                symbol=str(data.get('symbol', coin_id)).upper(),
                price=float(market['current_price']['usd']),
                change=float(market.get('price_change_24h') or 0),
                change_percent=float(market.get('price_change_percentage_24h') or 0),
                high_24h=float(market['high_24h']['usd']),
                low_24h=float(market['low_24h']['usd']),
                market_cap=float(market['market_cap']['usd']),
                volume=float(market['total_volume']['usd']),
                coin_id=coin_id,
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.debug("Malformed crypto payload for {}: {}", coin_id, e)
            return None

    async def fetch_many(self, stocks: List[str], cryptos: List[str]
                         ) -> Tuple[List[StockQuote], List[CryptoQuote]]:
        """Fetch quotes one at a time, pausing between requests.

        Symbols that cannot be fetched are left out of the result.
        """
        stock_quotes: List[StockQuote] = []
        crypto_quotes: List[CryptoQuote] = []
        first = True
        for symbol in stocks:
            if not first:
                await asyncio.sleep(self.request_delay)
            first = False
            quote = await self.fetch_stock(symbol)
            if quote:
                stock_quotes.append(quote)
        for coin_id in cryptos:
            if not first:
                await asyncio.sleep(self.request_delay)
            first = False
            quote = await self.fetch_crypto(coin_id)
            if quote:
                crypto_quotes.append(quote)
        return stock_quotes, crypto_quotes
