"""Rolling-window aggregation."""

from rollingohlc.aggregation.rolling import (
    InvalidPriceError,
    RollingOHLC,
    aggregate_chunk,
    parse_price,
    partition_chunks,
)

__all__ = [
    "InvalidPriceError",
    "RollingOHLC",
    "aggregate_chunk",
    "parse_price",
    "partition_chunks",
]
