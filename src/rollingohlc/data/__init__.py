"""Input and output records."""

from rollingohlc.data.bars import OHLCBar, format_price
from rollingohlc.data.market_data import BookTicker, InvalidRecordError

__all__ = [
    "BookTicker",
    "InvalidRecordError",
    "OHLCBar",
    "format_price",
]
