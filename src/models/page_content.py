# src/models/page_content.py

"""Fetched page handed from a fetch handle to the extractor."""

from dataclasses import dataclass


@dataclass
class PageContent:
    """Markup of a loaded product page."""

    url: str
    html: str
