"""Market data structures and types."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

# Wire key -> attribute name, in the order the exchange sends them.
WIRE_FIELDS: dict[str, str] = {
    "e": "event_type",
    "u": "update_id",
    "s": "symbol",
    "b": "bid_price",
    "B": "bid_qty",
    "a": "ask_price",
    "A": "ask_qty",
    "T": "transaction_time",
    "E": "event_time",
}

_INT_FIELDS = ("u", "T", "E")


class InvalidRecordError(ValueError):
    """Raised when an input record is structurally invalid or missing a field."""


@dataclass(frozen=True)
class BookTicker:
    """
    Best bid/ask update for one symbol.

    Prices and quantities are the decimal strings received on the wire and are
    passed through untouched. Only `transaction_time`, `symbol` and `ask_price`
    are read by the aggregator.
    """

    event_type: str
    update_id: int
    symbol: str
    bid_price: str
    bid_qty: str
    ask_price: str
    ask_qty: str
    transaction_time: int
    event_time: int

    @property
    def timestamp(self) -> int:
        """Transaction timestamp used for windowing."""
        return self.transaction_time

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire-key dictionary."""
        return {key: getattr(self, attr) for key, attr in WIRE_FIELDS.items()}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BookTicker:
        """
        Create a BookTicker from a wire-key dictionary.

        Raises:
            InvalidRecordError: If a key is missing or an integer field is not an integer.
        """
        if not isinstance(data, dict):
            raise InvalidRecordError(f"Expected a JSON object, got {type(data).__name__}")

        missing = [key for key in WIRE_FIELDS if key not in data]
        if missing:
            raise InvalidRecordError(f"Missing field(s): {', '.join(missing)}")

        values: dict[str, Any] = {}
        for key, attr in WIRE_FIELDS.items():
            value = data[key]
            if key in _INT_FIELDS:
                if isinstance(value, bool) or not isinstance(value, int):
                    raise InvalidRecordError(f"Field '{key}' must be an integer, got {value!r}")
                if value < 0:
                    raise InvalidRecordError(f"Field '{key}' must be non-negative, got {value}")
            else:
                value = str(value)
            values[attr] = value

        return cls(**values)

    @classmethod
    def from_json(cls, json_str: str) -> BookTicker:
        """Deserialize from a single JSON object."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise InvalidRecordError(f"Invalid JSON: {e}") from e
        return cls.from_dict(data)
