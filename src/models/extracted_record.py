# src/models/extracted_record.py

"""Transient extraction result passed from the extractor to the tracker."""

from dataclasses import dataclass
from typing import Any


@dataclass
class ExtractedRecord:
    """Product details read from one fetched page.

    ``raw_price`` is kept exactly as found on the page (text or number);
    the tracker normalises it to cents.
    """

    title: str
    raw_price: Any
    canonical_url: str
    image: str | None = None
