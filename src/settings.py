"""Application settings.

Defaults live in ``reference/settings.json`` at the workspace root. A
different file can be selected with ``CALC_SUITE_SETTINGS``, and a few
values can be overridden directly from the environment:

    CALC_SUITE_DATA_DIR   directory for the persisted key/value store
    CALC_SUITE_LOCALE     locale used for money and exchange formatting
    EXCHANGE_API_KEY      exchangerate-api.com key (name set in the file)
    FINNHUB_API_KEY       finnhub.io key (name set in the file)
"""

import json
import os
from dataclasses import dataclass, field
from typing import List, Optional

from loguru import logger


# Path to the default settings file (in the reference directory at workspace root)
DEFAULT_SETTINGS_PATH = os.path.normpath(
    os.path.join(os.path.dirname(__file__), '..', 'reference', 'settings.json')
)


@dataclass
class ExchangeSettings:
    base_url: str = 'https://v6.exchangerate-api.com/v6'
    api_key: Optional[str] = None
    refresh_interval_seconds: float = 300.0
    default_from: str = 'USD'
    default_to: str = 'EUR'


@dataclass
class QuoteSettings:
    stock_url: str = 'https://finnhub.io/api/v1'
    crypto_url: str = 'https://api.coingecko.com/api/v3'
    api_key: Optional[str] = None
    request_delay_seconds: float = 0.2
    popular_stocks: List[str] = field(default_factory=list)
    popular_cryptos: List[str] = field(default_factory=list)


@dataclass
class AppSettings:
    """All configurable values of the calculator suite."""
    locale: str = 'en-US'
    precision: int = 8
    data_dir: str = os.path.expanduser('~/.calc-suite')
    keyboard_enabled: bool = True
    exchange: ExchangeSettings = field(default_factory=ExchangeSettings)
    quotes: QuoteSettings = field(default_factory=QuoteSettings)

    @property
    def store_path(self) -> str:
        """Location of the JSON key/value store."""
        return os.path.join(self.data_dir, 'store.json')


def _read_settings_file(path: str) -> dict:
    if not os.path.exists(path):
        logger.warning("Settings file not found: {}; using defaults", path)
        return {}
    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        logger.warning("Could not load settings from {}: {}", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Settings file {} does not hold an object; using defaults", path)
        return {}
    return data


def load_settings(path: Optional[str] = None) -> AppSettings:
    """Load settings from JSON and apply environment overrides.

    Args:
        path: Settings file; defaults to ``CALC_SUITE_SETTINGS`` or
              ``reference/settings.json``

    Returns:
        Populated AppSettings
    """
    path = path or os.environ.get('CALC_SUITE_SETTINGS') or DEFAULT_SETTINGS_PATH
    raw = _read_settings_file(path)
    exchange_raw = raw.get('exchange', {})
    quotes_raw = raw.get('quotes', {})

    exchange = ExchangeSettings(
        base_url=exchange_raw.get('baseUrl', ExchangeSettings.base_url),
        api_key=os.environ.get(exchange_raw.get('apiKeyEnv', 'EXCHANGE_API_KEY')),
        refresh_interval_seconds=float(exchange_raw.get('refreshIntervalSeconds', 300)),
        default_from=exchange_raw.get('defaultFrom', 'USD'),
        default_to=exchange_raw.get('defaultTo', 'EUR'),
    )
    quotes = QuoteSettings(
        stock_url=quotes_raw.get('stockUrl', QuoteSettings.stock_url),
        crypto_url=quotes_raw.get('cryptoUrl', QuoteSettings.crypto_url),
        api_key=os.environ.get(quotes_raw.get('apiKeyEnv', 'FINNHUB_API_KEY')),
        request_delay_seconds=float(quotes_raw.get('requestDelaySeconds', 0.2)),
        popular_stocks=list(quotes_raw.get('popularStocks', [])),
        popular_cryptos=list(quotes_raw.get('popularCryptos', [])),
    )

    data_dir = os.environ.get('CALC_SUITE_DATA_DIR') or raw.get('dataDir', '~/.calc-suite')
    return AppSettings(
        locale=os.environ.get('CALC_SUITE_LOCALE') or raw.get('locale', 'en-US'),
        precision=int(raw.get('precision', 8)),
        data_dir=os.path.expanduser(data_dir),
        keyboard_enabled=bool(raw.get('keyboardEnabled', True)),
        exchange=exchange,
        quotes=quotes,
    )
