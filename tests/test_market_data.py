"""Tests for input and output records."""

from __future__ import annotations

import json

import pytest

from rollingohlc.data.bars import OHLCBar, format_price
from rollingohlc.data.market_data import BookTicker, InvalidRecordError

RAW = {
    "e": "bookTicker",
    "u": 400900217,
    "s": "BNBUSDT",
    "b": "25.35190000",
    "B": "31.21000000",
    "a": "25.36520000",
    "A": "40.66000000",
    "T": 1568014460891,
    "E": 1568014460893,
}


class TestBookTicker:
    def test_from_dict(self) -> None:
        tick = BookTicker.from_dict(RAW)

        assert tick.event_type == "bookTicker"
        assert tick.update_id == 400900217
        assert tick.symbol == "BNBUSDT"
        assert tick.bid_price == "25.35190000"
        assert tick.ask_price == "25.36520000"
        assert tick.ask_qty == "40.66000000"
        assert tick.timestamp == 1568014460891
        assert tick.event_time == 1568014460893

    def test_from_json_and_back(self) -> None:
        tick = BookTicker.from_json(json.dumps(RAW))
        assert tick.to_dict() == RAW
        assert json.loads(tick.to_json()) == RAW

    def test_numeric_prices_are_kept_as_strings(self) -> None:
        tick = BookTicker.from_dict({**RAW, "a": 25.5})
        assert tick.ask_price == "25.5"

    def test_missing_field(self) -> None:
        data = {k: v for k, v in RAW.items() if k != "T"}
        with pytest.raises(InvalidRecordError, match="Missing field"):
            BookTicker.from_dict(data)

    @pytest.mark.parametrize("value", ["1568014460891", 1.5, True, -1])
    def test_bad_timestamp(self, value) -> None:
        with pytest.raises(InvalidRecordError, match="'T'"):
            BookTicker.from_dict({**RAW, "T": value})

    def test_invalid_json(self) -> None:
        with pytest.raises(InvalidRecordError, match="Invalid JSON"):
            BookTicker.from_json("{not json")

    def test_not_an_object(self) -> None:
        with pytest.raises(InvalidRecordError, match="JSON object"):
            BookTicker.from_json("[1, 2, 3]")

    def test_invalid_record_is_value_error(self) -> None:
        assert issubclass(InvalidRecordError, ValueError)


class TestOHLCBar:
    def test_str_matches_console_format(self) -> None:
        bar = OHLCBar("BTCUSD", 30, "100.000000", "102.000000", "99.000000", "101.000000")
        assert str(bar) == (
            "Symbol: BTCUSD, Timestamp: 30, Open: 100.000000, High: 102.000000, "
            "Low: 99.000000, Close: 101.000000"
        )

    def test_dict_keys(self) -> None:
        bar = OHLCBar("BTCUSD", 30, "1.000000", "2.000000", "0.500000", "1.500000")
        data = bar.to_dict()
        assert list(data) == ["symbol", "timestamp", "open", "high", "low", "close"]
        assert OHLCBar.from_dict(data) == bar

    def test_format_price(self) -> None:
        from decimal import Decimal

        assert format_price(Decimal("25.3652")) == "25.365200"
        assert format_price(Decimal("1E-7")) == "0.000000"
        assert format_price(Decimal("12345678.9")) == "12345678.900000"
