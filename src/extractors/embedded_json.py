# src/extractors/embedded_json.py

"""Product data embedded as plain JSON script blocks (Shopify themes)."""

from typing import Any

from bs4 import BeautifulSoup

from src.extractors.base_strategy import BaseStrategy
from src.filters.price_normalizer import has_price
from src.models.extracted_record import ExtractedRecord
from src.models.page_content import PageContent


class EmbeddedJsonStrategy(BaseStrategy):
    """Read ``<script type="application/json">`` product objects.

    Shopify themes embed the product as JSON with ``title``, a
    ``variants`` list and ``price`` in cents.  The first variant's
    price wins over the top-level one.
    """

    def __init__(self) -> None:
        super().__init__("embedded_json")

    @staticmethod
    def _first_variant_price(data: dict[str, Any]) -> Any:
        """Return the first variant's price, if any."""
        variants = data.get("variants")
        if isinstance(variants, list) and variants:
            first = variants[0]
            if isinstance(first, dict):
                return first.get("price")
        return None

    @staticmethod
    def _image(data: dict[str, Any]) -> Any:
        """Prefer ``featured_image``, fall back to the first of ``images``."""
        featured = data.get("featured_image")
        if featured:
            return featured
        images = data.get("images")
        if isinstance(images, list) and images:
            return images[0]
        return None

    def _extract(
        self, page: PageContent, soup: BeautifulSoup,
    ) -> ExtractedRecord | None:
        for data in self._iter_script_json(soup):
            if not isinstance(data, dict):
                continue
            if not (data.get("price") or data.get("variants")):
                continue

            raw_price = self._first_variant_price(data)
            if not has_price(raw_price):
                raw_price = data.get("price")
            if not has_price(raw_price):
                self.logger.debug(
                    "[%s] Product block without a price on %s",
                    self.strategy_name,
                    page.url,
                )
                continue

            return self._record(
                page, data.get("title"), raw_price, self._image(data),
            )
        return None
