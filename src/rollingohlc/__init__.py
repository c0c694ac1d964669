"""Rolling-window OHLC aggregation over book ticker streams."""

__version__ = "0.1.0"
