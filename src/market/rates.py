"""Cached exchange-rate table.

One table of rates for a base currency is kept in memory. Any pair whose
currencies are both listed is answered from it through ``cross_rate``, so
switching between currencies does not refetch while the table is fresh.
``start()`` keeps the table current with a ``RatePoller`` for long-running
processes; short-lived callers simply refetch once it has gone stale.
"""

import time
from typing import Callable, Dict, Optional

from loguru import logger

from calc.exchange import cross_rate
from market.clients import ExchangeRateClient
from market.poller import DEFAULT_REFRESH_INTERVAL, RatePoller


class RateBook:
    def __init__(self, client: ExchangeRateClient, base: str = 'USD',
                 max_age: float = DEFAULT_REFRESH_INTERVAL,
                 clock: Callable[[], float] = time.monotonic):
        """Create an empty rate book.

        Args:
            client: Client used to fetch rate tables
            base: Currency the table is fetched for
            max_age: Seconds a table is reused, also the polling interval
            clock: Monotonic time source
        """
        self.client = client
        self.base = base.upper()
        self.max_age = max_age
        self.clock = clock
        self.rates: Dict[str, float] = {}
        self.updated_at: Optional[float] = None
        self._poller = RatePoller(self.refresh, max_age)

    @property
    def fresh(self) -> bool:
        return self.updated_at is not None and self.clock() - self.updated_at < self.max_age

    @property
    def polling(self) -> bool:
        return self._poller.running

    async def load(self, base: str) -> Dict[str, float]:
        """Fetch the table for ``base`` and make it the cached one."""
        rates = dict(await self.client.fetch_rates(base))
        rates.setdefault(base.upper(), 1.0)
        self.base = base.upper()
        self.rates = rates
        self.updated_at = self.clock()
        logger.debug("Loaded {} exchange rates for {}", len(rates), self.base)
        return rates

    async def refresh(self) -> None:
        await self.load(self.base)

    async def rate(self, from_currency: str, to_currency: str) -> float:
        """Rate from one currency to another.

        Raises:
            MarketDataError: The table could not be fetched
            ValidationError: A currency is not listed
        """
        source = from_currency.upper()
        target = to_currency.upper()
        if not (self.fresh and source in self.rates and target in self.rates):
            await self.load(source)
        return cross_rate(self.rates, source, target)

    def start(self) -> None:
        """Refresh now and every ``max_age`` seconds on the running loop."""
        self._poller.start()

    async def stop(self) -> None:
        await self._poller.stop()
