"""Rolling-window OHLC aggregation.

Keeps a time-bounded buffer of book tickers and, once enough samples are in
the window, splits the buffer into contiguous chunks and computes an OHLC bar
of the ask price for each chunk on a thread pool.
"""

from __future__ import annotations

import logging
import math
import os
import re
from collections import deque
from collections.abc import Sequence
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from decimal import Decimal

from rollingohlc.constants import MAX_PRICE_EXPONENT, MIN_SAMPLES
from rollingohlc.data.bars import OHLCBar, format_price
from rollingohlc.data.market_data import BookTicker

logger = logging.getLogger(__name__)

PRICE_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?\Z", re.ASCII)


class InvalidPriceError(ValueError):
    """Raised when a tick's ask price cannot be parsed as a finite decimal."""

    def __init__(self, tick: BookTicker, raw: str):
        self.tick = tick
        self.raw = raw
        super().__init__(
            f"Invalid ask price {raw!r} for {tick.symbol} "
            f"(update_id={tick.update_id}, T={tick.transaction_time})"
        )


@dataclass(frozen=True)
class WindowEntry:
    """A buffered tick together with its parsed ask price."""

    tick: BookTicker
    ask: Decimal

    @property
    def timestamp(self) -> int:
        return self.tick.transaction_time


def parse_price(tick: BookTicker) -> Decimal:
    """
    Parse the ask price of a tick, raising InvalidPriceError on bad input.

    Only plain decimal literals are accepted: no padding, underscores, NaN or
    infinity, and the magnitude must stay within double range.
    """
    raw = tick.ask_price
    if not isinstance(raw, str) or not PRICE_PATTERN.match(raw):
        raise InvalidPriceError(tick, raw)
    try:
        value = Decimal(raw)
    except ArithmeticError:
        raise InvalidPriceError(tick, raw) from None
    if not value.is_finite() or (value and abs(value.adjusted()) > MAX_PRICE_EXPONENT):
        raise InvalidPriceError(tick, raw)
    return value


def partition_chunks(length: int, parallelism: int) -> list[tuple[int, int]]:
    """
    Split `length` items into contiguous [start, end) ranges.

    chunk_count = min(length, parallelism) and every chunk holds
    ceil(length / chunk_count) items except possibly the last, so fewer than
    chunk_count ranges can come back (e.g. 5 items over 4 workers -> 2, 2, 1).
    """
    if length <= 0:
        return []
    chunk_count = min(length, max(parallelism, 1))
    chunk_size = math.ceil(length / chunk_count)
    return [(start, min(start + chunk_size, length)) for start in range(0, length, chunk_size)]


def aggregate_chunk(entries: Sequence[WindowEntry], symbol: str) -> OHLCBar:
    """Compute the OHLC bar of one non-empty chunk."""
    asks = [entry.ask for entry in entries]
    return OHLCBar(
        symbol=symbol,
        timestamp=entries[-1].timestamp,
        open=format_price(asks[0]),
        high=format_price(max(asks)),
        low=format_price(min(asks)),
        close=format_price(asks[-1]),
    )


class RollingOHLC:
    """
    Time-windowed OHLC aggregator for a single symbol stream.

    Each `update` evicts ticks older than `window_size` relative to the new
    tick, appends it and, when at least `min_samples` ticks are buffered,
    appends one bar per chunk to the history and returns the last one.

    Ticks must arrive with non-decreasing transaction time and share one
    symbol. Violations are logged but not rejected; bars always carry the
    symbol of the tick that triggered them.

    The thread pool is either injected (and left open) or created on first
    use and released by `close()`.
    """

    def __init__(
        self,
        window_size: int,
        parallelism: int | None = None,
        executor: Executor | None = None,
        min_samples: int = MIN_SAMPLES,
    ):
        if window_size < 0:
            raise ValueError(f"window_size must be non-negative, got: {window_size}")
        if parallelism is None:
            parallelism = os.cpu_count() or 1
        if parallelism < 1:
            raise ValueError(f"parallelism must be at least 1, got: {parallelism}")
        if min_samples < 1:
            raise ValueError(f"min_samples must be at least 1, got: {min_samples}")

        self.window_size = window_size
        self.parallelism = parallelism
        self.min_samples = min_samples

        self._buffer: deque[WindowEntry] = deque()
        self._history: list[OHLCBar] = []

        self._executor = executor
        self._owns_executor = executor is None

        self._active = False
        self._symbol: str | None = None
        self._warned_symbol = False
        self._warned_order = False

    def __enter__(self) -> RollingOHLC:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __len__(self) -> int:
        return len(self._buffer)

    @property
    def history(self) -> tuple[OHLCBar, ...]:
        """All bars computed so far, in emission order."""
        return tuple(self._history)

    @property
    def window(self) -> tuple[BookTicker, ...]:
        """Ticks currently retained in the window, oldest first."""
        return tuple(entry.tick for entry in self._buffer)

    def update(self, tick: BookTicker) -> OHLCBar | None:
        """
        Feed one tick into the window.

        Returns:
            The bar of the last chunk, or None while fewer than `min_samples`
            ticks are in the window.

        Raises:
            InvalidPriceError: If the ask price is malformed. The window and
                history are left untouched.
        """
        ask = parse_price(tick)
        self._check_preconditions(tick)

        self._evict(tick.transaction_time)
        self._buffer.append(WindowEntry(tick=tick, ask=ask))

        if len(self._buffer) < self.min_samples:
            if self._active:
                logger.debug(
                    f"{tick.symbol}: window dropped below {self.min_samples} ticks "
                    f"at T={tick.transaction_time}"
                )
                self._active = False
            return None

        if not self._active:
            logger.debug(
                f"{tick.symbol}: window reached {self.min_samples} ticks at T={tick.transaction_time}"
            )
            self._active = True

        bars = self._aggregate(tuple(self._buffer), tick.symbol)
        self._history.extend(bars)
        return bars[-1]

    def close(self) -> None:
        """Release the owned thread pool, if one was started."""
        if self._owns_executor and self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def _evict(self, timestamp: int) -> None:
        # Saturating: early ticks keep everything instead of going negative.
        if timestamp < self.window_size:
            return
        cutoff = timestamp - self.window_size
        while self._buffer and self._buffer[0].timestamp < cutoff:
            self._buffer.popleft()

    def _aggregate(self, snapshot: tuple[WindowEntry, ...], symbol: str) -> list[OHLCBar]:
        chunks = [snapshot[start:end] for start, end in partition_chunks(len(snapshot), self.parallelism)]
        if len(chunks) == 1:
            return [aggregate_chunk(chunks[0], symbol)]

        executor = self._get_executor()
        return list(executor.map(aggregate_chunk, chunks, [symbol] * len(chunks)))

    def _get_executor(self) -> Executor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.parallelism, thread_name_prefix="rolling-ohlc"
            )
        return self._executor

    def _check_preconditions(self, tick: BookTicker) -> None:
        if self._symbol is None:
            self._symbol = tick.symbol
        elif tick.symbol != self._symbol and not self._warned_symbol:
            logger.warning(
                f"Aggregator for {self._symbol} received a tick for {tick.symbol}; "
                "bars will be labelled with the triggering tick's symbol"
            )
            self._warned_symbol = True

        if self._buffer and tick.transaction_time < self._buffer[-1].timestamp and not self._warned_order:
            logger.warning(
                f"{tick.symbol}: out-of-order tick T={tick.transaction_time} "
                f"after T={self._buffer[-1].timestamp}"
            )
            self._warned_order = True
