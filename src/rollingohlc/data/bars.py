"""Bar data structure."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from rollingohlc.constants import PRICE_DECIMALS


def format_price(value: Decimal) -> str:
    """Render a price with a fixed number of fractional digits, never in exponent form."""
    return f"{value:.{PRICE_DECIMALS}f}"


@dataclass(frozen=True)
class OHLCBar:
    """OHLC summary of ask prices over one chunk of the rolling window."""

    symbol: str
    timestamp: int
    open: str
    high: str
    low: str
    close: str

    def __str__(self) -> str:
        return (
            f"Symbol: {self.symbol}, Timestamp: {self.timestamp}, "
            f"Open: {self.open}, High: {self.high}, Low: {self.low}, Close: {self.close}"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "timestamp": self.timestamp,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OHLCBar:
        return cls(
            symbol=data["symbol"],
            timestamp=int(data["timestamp"]),
            open=data["open"],
            high=data["high"],
            low=data["low"],
            close=data["close"],
        )
