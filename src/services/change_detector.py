# src/services/change_detector.py

"""Decide what a new price observation means for a tracked item."""

import dataclasses
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from src.config.settings import Settings
from src.filters.price_normalizer import (
    format_major,
    format_percent,
    normalize_price,
)
from src.models.extracted_record import ExtractedRecord
from src.models.history_entry import HistoryEntry
from src.models.notification import Notification
from src.models.tracked_item import TrackedItem, utc_now

logger = logging.getLogger("price_watch.detector")


@dataclass
class ChangeResult:
    """Outcome of evaluating one observation."""

    item: TrackedItem
    history_entry: HistoryEntry | None = None
    notification: Notification | None = None


def percent_change(old: int, new: int) -> float:
    """Signed percentage change from *old* to *new*, rounded half-up to 2dp."""
    ratio = Decimal(new - old) / Decimal(old) * 100
    return float(ratio.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def drop_notification(
    name: str, change: float, new_price: int,
) -> Notification:
    """Build the price-drop alert shown to the user."""
    return Notification(
        title="Price Drop!",
        body=(
            f"{name} dropped {format_percent(abs(change))}% to "
            f"{Settings.CURRENCY_SYMBOL}{format_major(new_price)}!"
        ),
    )


def evaluate(
    item: TrackedItem,
    record: ExtractedRecord,
    now: datetime | None = None,
) -> ChangeResult:
    """Compare *record* against *item* and return the updated state.

    The first observation of a pending item only establishes the
    baseline.  Later observations that differ from the stored price
    produce a history entry, plus a notification when the drop reaches
    ``Settings.DROP_ALERT_THRESHOLD``.

    Raises:
        PriceNormalizationError: if the record's price is unusable.
    """
    checked_at = now or utc_now()
    new_price = normalize_price(record.raw_price)

    if item.is_pending:
        resolved = dataclasses.replace(
            item,
            name=record.title or Settings.UNKNOWN_PRODUCT_NAME,
            image=record.image,
            current_price=new_price,
            last_checked=checked_at,
        )
        logger.info(
            "Resolved %s as %r at %d cents",
            item.url,
            resolved.name,
            new_price,
        )
        return ChangeResult(item=resolved)

    old_price = item.current_price
    if new_price == old_price:
        return ChangeResult(
            item=dataclasses.replace(item, last_checked=checked_at),
        )

    updated = dataclasses.replace(
        item, current_price=new_price, last_checked=checked_at,
    )
    if old_price == 0:
        logger.info(
            "Established price for %s at %d cents", item.url, new_price,
        )
        return ChangeResult(item=updated)

    change = percent_change(old_price, new_price)
    entry = HistoryEntry(
        date=checked_at,
        name=item.name,
        old_price=old_price,
        new_price=new_price,
        change_percent=change,
    )
    logger.info(
        "Price change for %r: %d -> %d (%s%%)",
        item.name,
        old_price,
        new_price,
        format_percent(change),
    )

    notification = None
    if change <= Settings.DROP_ALERT_THRESHOLD:
        notification = drop_notification(item.name, change, new_price)

    return ChangeResult(
        item=updated, history_entry=entry, notification=notification,
    )
