"""Output sinks for computed bars."""

from rollingohlc.output.writer import OHLCWriter

__all__ = ["OHLCWriter"]
