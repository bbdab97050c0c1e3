# src/filters/price_normalizer.py

"""Raw price to integer minor units (cents)."""

import logging
import math
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

logger = logging.getLogger("price_watch.filters")

# Whole numbers above this are assumed to already be in cents
_MINOR_UNIT_FLOOR = 1000

_NON_PRICE_CHARS_RE = re.compile(r"[^0-9.]")
_LEADING_NUMBER_RE = re.compile(r"\d+(?:\.\d*)?|\.\d+")


class PriceNormalizationError(ValueError):
    """Raised when a raw price cannot be turned into cents."""


def _to_decimal(raw: Any) -> Decimal:
    """Parse *raw* into a finite, non-negative Decimal."""
    if isinstance(raw, bool):
        msg = f"Boolean is not a price: {raw!r}"
        raise PriceNormalizationError(msg)

    if isinstance(raw, str):
        cleaned = _NON_PRICE_CHARS_RE.sub("", raw)
        match = _LEADING_NUMBER_RE.match(cleaned)
        if not match:
            msg = f"No number in price text: {raw!r}"
            raise PriceNormalizationError(msg)
        return Decimal(match.group(0))

    if isinstance(raw, int):
        value = Decimal(raw)
    elif isinstance(raw, float):
        if not math.isfinite(raw):
            msg = f"Price is not finite: {raw!r}"
            raise PriceNormalizationError(msg)
        # repr() round-trips, so 19.99 stays 19.99 instead of 19.989999...
        value = Decimal(repr(raw))
    elif isinstance(raw, Decimal):
        value = raw
    else:
        msg = f"Unsupported price type {type(raw).__name__}: {raw!r}"
        raise PriceNormalizationError(msg)

    if not value.is_finite() or value < 0:
        msg = f"Price out of range: {raw!r}"
        raise PriceNormalizationError(msg)
    return value


def normalize_price(raw: Any) -> int:
    """Convert a raw price (text or number) to integer cents.

    Text keeps only digits and the decimal point before parsing.  A
    whole number greater than 1000 is taken to be in cents already and
    is returned unchanged; anything else is treated as major units and
    multiplied by 100, rounding half-up.

    Raises:
        PriceNormalizationError: if *raw* does not contain a usable price.
    """
    try:
        value = _to_decimal(raw)
    except InvalidOperation as exc:
        msg = f"Unparseable price: {raw!r}"
        raise PriceNormalizationError(msg) from exc

    if value == value.to_integral_value() and value > _MINOR_UNIT_FLOOR:
        return int(value)

    cents = (value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    logger.debug("Normalised price %r -> %d cents", raw, int(cents))
    return int(cents)


def format_major(cents: int) -> str:
    """Format minor units as a two-decimal major-unit amount."""
    return f"{cents / 100:.2f}"


def format_percent(value: float) -> str:
    """Format a percentage without trailing zeros (-5.0 -> '-5')."""
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def has_price(value: Any) -> bool:
    """True when *value* looks like a present price (0, "" and None do not)."""
    if isinstance(value, str):
        return bool(value.strip())
    return value is not None and value is not False and value != 0
