"""OHLC output: JSON document and console lines."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from rollingohlc.data.bars import OHLCBar

logger = logging.getLogger(__name__)


class OHLCWriter:
    """Serializes bar history as a single JSON array and renders console lines."""

    def __init__(self, indent: int | None = None):
        self.indent = indent

    def dumps(self, bars: Iterable[OHLCBar]) -> str:
        return json.dumps([bar.to_dict() for bar in bars], indent=self.indent)

    def write_json(self, bars: Iterable[OHLCBar], path: str | Path) -> Path:
        """Write all bars to `path` as one JSON array. Returns the path written."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        bars = list(bars)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.dumps(bars))

        logger.info(f"Wrote {len(bars)} bars to {path}")
        return path

    @staticmethod
    def load_json(path: str | Path) -> list[OHLCBar]:
        """Read back a document produced by `write_json`."""
        with open(path, encoding="utf-8") as f:
            return [OHLCBar.from_dict(item) for item in json.load(f)]

    @staticmethod
    def render_lines(bars: Iterable[OHLCBar]) -> Iterator[str]:
        for bar in bars:
            yield str(bar)
