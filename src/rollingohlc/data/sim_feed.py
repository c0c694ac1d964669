"""Simulation Data Feed."""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from decimal import Decimal

from rollingohlc.data.market_data import BookTicker

logger = logging.getLogger(__name__)

SPREAD = Decimal("0.01")


class SimBookTickerFeed:
    """
    Generates synthetic book tickers for dry runs.
    Produces a random walk of the ask price with a fixed spread.
    """

    def __init__(
        self,
        symbol: str,
        callback: Callable[[BookTicker], Awaitable[None]],
        start_price: Decimal = Decimal("30000.00"),
        step: Decimal = Decimal("0.50"),
        interval_ms: int = 1000,
        start_time: int = 0,
        max_ticks: int | None = None,
        sleep_sec: float = 0.0,
        seed: int | None = None,
    ):
        self.symbol = symbol
        self.callback = callback
        self.current_price = start_price
        self.step = step
        self.interval_ms = interval_ms
        self.max_ticks = max_ticks
        self.sleep_sec = sleep_sec
        self._timestamp = start_time
        self._update_id = 0
        self._random = random.Random(seed)
        self._running = False

    @property
    def ticks_sent(self) -> int:
        return self._update_id

    def next_tick(self) -> BookTicker:
        """Advance the walk by one step and build the tick."""
        change = self.step * self._random.choice([-2, -1, 0, 1, 2])
        self.current_price = max(self.current_price + change, self.step)
        self._update_id += 1
        self._timestamp += self.interval_ms

        qty = Decimal(self._random.randint(1, 500)) / Decimal("100")
        return BookTicker(
            event_type="bookTicker",
            update_id=self._update_id,
            symbol=self.symbol,
            bid_price=f"{self.current_price - SPREAD:.2f}",
            bid_qty=f"{qty:.2f}",
            ask_price=f"{self.current_price:.2f}",
            ask_qty=f"{qty:.2f}",
            transaction_time=self._timestamp,
            event_time=self._timestamp,
        )

    async def start(self) -> None:
        """Start generating ticks."""
        self._running = True
        logger.info(f"SimBookTickerFeed started for {self.symbol}")

        while self._running:
            if self.max_ticks is not None and self._update_id >= self.max_ticks:
                break

            await self.callback(self.next_tick())
            await asyncio.sleep(self.sleep_sec)

        self._running = False
        logger.info(f"SimBookTickerFeed finished after {self._update_id} ticks")

    def stop(self) -> None:
        """Stop generation."""
        self._running = False
        logger.info("SimBookTickerFeed stopped")
