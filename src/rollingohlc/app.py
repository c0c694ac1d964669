"""rollingohlc application driver."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

from rollingohlc.aggregation.rolling import InvalidPriceError, RollingOHLC
from rollingohlc.config_loader import AppConfig
from rollingohlc.constants import LOG_FORMAT, LOG_FORMAT_JSON, RecordErrorPolicy
from rollingohlc.data.bars import OHLCBar
from rollingohlc.data.market_data import BookTicker
from rollingohlc.data.reader import BookTickerReader
from rollingohlc.data.sim_feed import SimBookTickerFeed
from rollingohlc.output.writer import OHLCWriter

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    """Counters for one pass over a tick stream."""

    ticks_read: int = 0
    ticks_skipped: int = 0
    bars_emitted: int = 0
    output_path: Path | None = None

    def __str__(self) -> str:
        text = (
            f"Processed {self.ticks_read} ticks ({self.ticks_skipped} skipped), "
            f"emitted {self.bars_emitted} bars"
        )
        if self.output_path is not None:
            text += f" -> {self.output_path}"
        return text


def setup_logging(config: AppConfig) -> None:
    fmt = LOG_FORMAT_JSON if config.environment.log_json else LOG_FORMAT
    logging.basicConfig(level=config.environment.log_level.value, format=fmt)


class RollingOHLCApp:
    """Wires the reader, the aggregator and the writer together."""

    def __init__(
        self,
        config: AppConfig | None = None,
        echo: Callable[[str], None] | None = None,
    ):
        self.config = config or AppConfig()
        self.echo = echo or print
        self.writer = OHLCWriter()

    def build_aggregator(self) -> RollingOHLC:
        cfg = self.config.aggregator
        return RollingOHLC(
            window_size=cfg.window_size,
            parallelism=cfg.parallelism,
            min_samples=cfg.min_samples,
        )

    def run(self) -> RunSummary:
        """Aggregate the configured input file and write the JSON output."""
        io = self.config.io
        logger.info(
            f"Aggregating {io.input_path} with window={self.config.aggregator.window_size}"
        )

        reader = BookTickerReader(io.input_path, on_error=io.on_invalid_record)
        summary = RunSummary()

        with self.build_aggregator() as aggregator:
            self._consume(aggregator, reader, summary)
            history = aggregator.history

        summary.ticks_read = reader.read
        summary.ticks_skipped += reader.skipped
        summary.bars_emitted = len(history)

        if io.print_bars:
            self._print_bars(history)

        summary.output_path = self.writer.write_json(history, io.output_path)
        logger.info(str(summary))
        return summary

    def simulate(self, count: int) -> RunSummary:
        """Feed `count` synthetic ticks through an aggregator."""
        sim = self.config.simulation
        summary = RunSummary()

        with self.build_aggregator() as aggregator:

            async def on_tick(tick: BookTicker) -> None:
                self._process(aggregator, tick, summary)

            feed = SimBookTickerFeed(
                symbol=sim.symbol,
                callback=on_tick,
                start_price=sim.start_price,
                step=sim.step,
                interval_ms=sim.interval_ms,
                max_ticks=count,
                seed=sim.seed,
            )
            asyncio.run(feed.start())
            history = aggregator.history

        summary.ticks_read = feed.ticks_sent
        summary.bars_emitted = len(history)

        if self.config.io.print_bars:
            self._print_bars(history)

        logger.info(str(summary))
        return summary

    def _consume(
        self, aggregator: RollingOHLC, ticks: Iterable[BookTicker], summary: RunSummary
    ) -> None:
        for tick in ticks:
            self._process(aggregator, tick, summary)

    def _process(self, aggregator: RollingOHLC, tick: BookTicker, summary: RunSummary) -> None:
        try:
            aggregator.update(tick)
        except InvalidPriceError as e:
            if self.config.io.on_invalid_price == RecordErrorPolicy.FAIL:
                raise
            summary.ticks_skipped += 1
            logger.warning(f"Skipping tick: {e}")

    def _print_bars(self, bars: Iterable[OHLCBar]) -> None:
        for line in self.writer.render_lines(bars):
            self.echo(line)
