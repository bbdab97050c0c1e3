# src/extractors/json_ld.py

"""schema.org Product objects from JSON-LD blocks."""

from typing import Any

from bs4 import BeautifulSoup

from src.extractors.base_strategy import BaseStrategy
from src.filters.price_normalizer import has_price
from src.models.extracted_record import ExtractedRecord
from src.models.page_content import PageContent


def _is_product(item: dict[str, Any]) -> bool:
    """True when ``@type`` names a Product (string or list form)."""
    kind = item.get("@type")
    return isinstance(kind, (str, list)) and "Product" in kind


def _offer_price(offers: Any) -> Any:
    """Price of a single offer object or the first offer of a list."""
    if isinstance(offers, dict):
        return offers.get("price")
    if isinstance(offers, list) and offers:
        first = offers[0]
        if isinstance(first, dict):
            return first.get("price")
    return None


class JsonLdStrategy(BaseStrategy):
    """Read ``<script type="application/ld+json">`` Product markup."""

    def __init__(self) -> None:
        super().__init__("json_ld")

    def _extract(
        self, page: PageContent, soup: BeautifulSoup,
    ) -> ExtractedRecord | None:
        for data in self._iter_script_json(soup):
            items: list[Any] = data if isinstance(data, list) else [data]
            for item in items:
                if not isinstance(item, dict) or not _is_product(item):
                    continue
                raw_price = _offer_price(item.get("offers"))
                if not has_price(raw_price):
                    continue
                image = item.get("image")
                if isinstance(image, list):
                    image = image[0] if image else None
                return self._record(
                    page, item.get("name"), raw_price, image,
                )
        return None
