"""Portfolio valuation and price alerts over fetched quotes."""

from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence, Union

from calc.errors import ValidationError
from market.clients import CryptoQuote, StockQuote


class AssetType(str, Enum):
    STOCK = 'stock'
    CRYPTO = 'crypto'


class AlertDirection(str, Enum):
    ABOVE = 'above'
    BELOW = 'below'


@dataclass
class PortfolioItem:
    symbol: str
    quantity: float
    avg_price: float
    type: AssetType = AssetType.STOCK


@dataclass
class PriceAlert:
    symbol: str
    direction: AlertDirection
    price: float
    active: bool = True

    def describe(self) -> str:
        return f"{self.symbol} is now {self.direction.value} ${self.price}"


@dataclass
class PortfolioStats:
    total_value: float = 0.0
    daily_profit_loss: float = 0.0


def make_alert(symbol: str, direction: str, price) -> PriceAlert:
    try:
        parsed_direction = AlertDirection(direction.lower())
    except ValueError:
        raise ValidationError("Alert direction must be 'above' or 'below'")
    try:
        parsed_price = float(price)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid alert price: {price!r}")
    return PriceAlert(symbol.upper(), parsed_direction, parsed_price)


def portfolio_stats(items: Sequence[PortfolioItem], stocks: Sequence[StockQuote],
                    cryptos: Sequence[CryptoQuote]) -> PortfolioStats:
    """Current value and change since the previous close.

    Stocks compare against the quoted previous close; crypto against the
    price 24 hours ago (current price minus the 24h change). Crypto holdings
    match a quote by ticker or by CoinGecko id. Holdings with no
    quote are skipped.
    """
    stock_by_symbol = {q.symbol: q for q in stocks}
    crypto_by_symbol = {}
    for q in cryptos:
        crypto_by_symbol[q.symbol] = q
        if q.coin_id:
            crypto_by_symbol[q.coin_id.upper()] = q
    stats = PortfolioStats()

    for item in items:
        if item.type == AssetType.STOCK:
            quote: Union[StockQuote, CryptoQuote, None] = stock_by_symbol.get(item.symbol)
            if quote is None:
                continue
            previous = quote.prev_close * item.quantity
        else:
            quote = crypto_by_symbol.get(item.symbol)
            if quote is None:
                continue
            previous = (quote.price - quote.change) * item.quantity

        current = quote.price * item.quantity
        stats.total_value += current
        stats.daily_profit_loss += current - previous
    return stats


def check_price_alerts(alerts: Sequence[PriceAlert], symbol: str, price: float) -> List[PriceAlert]:
    """Active alerts for ``symbol`` whose threshold ``price`` has crossed."""
    triggered = []
    for alert in alerts:
        if not alert.active or alert.symbol != symbol:
            continue
        if alert.direction == AlertDirection.ABOVE and price >= alert.price:
            triggered.append(alert)
        elif alert.direction == AlertDirection.BELOW and price <= alert.price:
            triggered.append(alert)
    return triggered
