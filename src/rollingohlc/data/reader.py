"""Line-oriented book ticker input."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

from rollingohlc.constants import RecordErrorPolicy
from rollingohlc.data.market_data import BookTicker, InvalidRecordError

logger = logging.getLogger(__name__)


class BookTickerReader:
    """
    Reads one JSON book ticker per line.

    Blank lines are ignored. Malformed lines are skipped with a warning or
    raised, depending on `on_error`.

    Usage:
        reader = BookTickerReader("data.txt")
        for tick in reader:
            ...
        reader.skipped  # number of bad lines dropped
    """

    def __init__(
        self,
        path: str | Path,
        on_error: RecordErrorPolicy = RecordErrorPolicy.SKIP,
    ):
        self.path = Path(path)
        self.on_error = RecordErrorPolicy(on_error)
        self.read = 0
        self.skipped = 0

    def __iter__(self) -> Iterator[BookTicker]:
        if not self.path.exists():
            raise FileNotFoundError(f"Input file not found: {self.path}")

        # Decoded per line: undecodable bytes are a bad record.
        with open(self.path, "rb") as f:
            for line_no, raw in enumerate(f, start=1):
                raw = raw.strip()
                if not raw:
                    continue

                try:
                    tick = self._parse_line(raw)
                except InvalidRecordError as e:
                    if self.on_error == RecordErrorPolicy.FAIL:
                        raise InvalidRecordError(f"{self.path}:{line_no}: {e}") from e
                    self.skipped += 1
                    logger.warning(f"Skipping {self.path}:{line_no}: {e}")
                    continue

                self.read += 1
                yield tick

    @staticmethod
    def _parse_line(raw: bytes) -> BookTicker:
        try:
            line = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidRecordError(f"Invalid UTF-8: {e}") from e
        return BookTicker.from_json(line)
