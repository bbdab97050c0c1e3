# src/extractors/product_extractor.py

"""Chain of extraction strategies tried in fixed priority order."""

import logging

from bs4 import BeautifulSoup

from src.extractors.base_strategy import BaseStrategy
from src.extractors.dom_heuristic import DomHeuristicStrategy
from src.extractors.embedded_json import EmbeddedJsonStrategy
from src.extractors.json_ld import JsonLdStrategy
from src.models.extracted_record import ExtractedRecord
from src.models.page_content import PageContent

logger = logging.getLogger("price_watch.extract")


class ProductExtractor:
    """Return the first record produced by any strategy.

    Order: embedded JSON, JSON-LD, then the DOM heuristic.
    """

    def __init__(
        self, strategies: list[BaseStrategy] | None = None,
    ) -> None:
        if strategies is None:
            strategies = [
                EmbeddedJsonStrategy(),
                JsonLdStrategy(),
                DomHeuristicStrategy(),
            ]
        self.strategies: list[BaseStrategy] = strategies

    def extract(self, page: PageContent) -> ExtractedRecord | None:
        """Extract a product record from *page*, or ``None`` if nothing matched."""
        soup = BeautifulSoup(page.html, "lxml")
        for strategy in self.strategies:
            record = strategy.extract(page, soup)
            if record is not None:
                logger.debug(
                    "Extracted %r via %s from %s",
                    record.title,
                    strategy.strategy_name,
                    page.url,
                )
                return record
        logger.info("No extraction strategy matched %s", page.url)
        return None
