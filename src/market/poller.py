"""Periodic refresh on the running event loop."""

import asyncio
from typing import Awaitable, Callable, Optional

from loguru import logger


DEFAULT_REFRESH_INTERVAL = 300.0


class RatePoller:
    """Run ``refresh`` now and then every ``interval`` seconds until stopped.

    A failing refresh is logged and the poller keeps going. After ``stop()``
    returns no further refresh runs.
    """

    def __init__(self, refresh: Callable[[], Awaitable[None]],
                 interval: float = DEFAULT_REFRESH_INTERVAL):
        self.refresh = refresh
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        while True:
            try:
                await self.refresh()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error("Scheduled refresh failed: {}", e)
            await asyncio.sleep(self.interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

