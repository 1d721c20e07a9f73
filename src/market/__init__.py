from market.clients import CryptoQuote, ExchangeRateClient, QuoteClient, StockQuote
from market.portfolio import (
    AlertDirection,
    AssetType,
    PortfolioItem,
    PortfolioStats,
    PriceAlert,
    check_price_alerts,
    make_alert,
    portfolio_stats,
)
from market.poller import RatePoller
from market.rates import RateBook

__all__ = [
    'CryptoQuote',
    'ExchangeRateClient',
    'QuoteClient',
    'StockQuote',
    'AlertDirection',
    'AssetType',
    'PortfolioItem',
    'PortfolioStats',
    'PriceAlert',
    'check_price_alerts',
    'make_alert',
    'portfolio_stats',
    'RatePoller',
    'RateBook',
]
