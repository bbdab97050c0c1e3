# src/models/tracked_item.py

"""Tracked product model persisted in the key-value store."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from src.config.settings import Settings


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp written by :meth:`TrackedItem.to_dict`."""
    if not value:
        return None
    parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class TrackedItem:
    """A product page the user asked to watch.

    ``current_price`` is in minor units (cents).  A freshly added item is
    *pending*: it carries the placeholder name and a zero price until the
    first successful extraction resolves it.
    """

    url: str
    name: str = Settings.PENDING_NAME
    current_price: int = 0
    image: str | None = None
    last_checked: datetime | None = None
    added_at: datetime = field(default_factory=utc_now)

    @property
    def is_pending(self) -> bool:
        """True until the first extraction has filled in the details."""
        return self.name == Settings.PENDING_NAME

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-compatible dict."""
        return {
            "url": self.url,
            "name": self.name,
            "current_price": self.current_price,
            "image": self.image,
            "last_checked": (
                self.last_checked.isoformat()
                if self.last_checked
                else None
            ),
            "added_at": self.added_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TrackedItem":
        """Rebuild an item from :meth:`to_dict` output."""
        return cls(
            url=str(data["url"]),
            name=str(data.get("name") or Settings.PENDING_NAME),
            current_price=int(data.get("current_price", 0) or 0),
            image=data.get("image") or None,
            last_checked=parse_timestamp(data.get("last_checked")),
            added_at=parse_timestamp(data.get("added_at")) or utc_now(),
        )
