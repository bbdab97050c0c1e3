# src/models/history_entry.py

"""Immutable price-change event recorded in the history log."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from src.models.tracked_item import parse_timestamp


@dataclass(frozen=True)
class HistoryEntry:
    """A single detected price change for a tracked product."""

    date: datetime
    name: str
    old_price: int
    new_price: int
    change_percent: float

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-compatible dict."""
        return {
            "date": self.date.isoformat(),
            "name": self.name,
            "old_price": self.old_price,
            "new_price": self.new_price,
            "change_percent": self.change_percent,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HistoryEntry":
        """Rebuild an entry from :meth:`to_dict` output."""
        date = parse_timestamp(data.get("date"))
        if date is None:
            msg = f"History entry without a date: {data!r}"
            raise ValueError(msg)
        return cls(
            date=date,
            name=str(data.get("name", "")),
            old_price=int(data["old_price"]),
            new_price=int(data["new_price"]),
            change_percent=float(data["change_percent"]),
        )
