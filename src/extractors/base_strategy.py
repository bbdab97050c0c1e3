# src/extractors/base_strategy.py

"""Abstract base class for all page extraction strategies."""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from src.config.settings import Settings
from src.filters.url_normalizer import canonicalize_url
from src.models.extracted_record import ExtractedRecord
from src.models.page_content import PageContent


class BaseStrategy(ABC):
    """One way of reading a product out of a fetched page.

    Strategies never raise: a strategy that cannot find a product, or
    trips over malformed markup, returns ``None`` so the extractor can
    fall through to the next one.
    """

    def __init__(self, strategy_name: str) -> None:
        self.strategy_name = strategy_name
        self.logger = logging.getLogger(
            f"price_watch.extract.{strategy_name}"
        )
        self.settings = Settings()
        self.selectors: dict[str, str] = self._load_selectors()

    def _load_selectors(self) -> dict[str, str]:
        """Load CSS selectors for this strategy from selectors.json."""
        with open(self.settings.SELECTORS_PATH) as f:
            all_selectors: dict[str, Any] = json.load(f)
        result: dict[str, str] = all_selectors.get(
            self.strategy_name, {}
        )
        return result

    def _iter_script_json(self, soup: BeautifulSoup) -> list[Any]:
        """Decode every script block matched by the ``scripts`` selector.

        Blocks that are not valid JSON are skipped.
        """
        blocks: list[Any] = []
        for tag in soup.select(self.selectors.get("scripts", "script")):
            text = tag.string or tag.get_text()
            if not text.strip():
                continue
            try:
                blocks.append(json.loads(text))
            except json.JSONDecodeError as exc:
                self.logger.debug(
                    "[%s] Skipping malformed script block: %s",
                    self.strategy_name,
                    exc,
                )
        return blocks

    @staticmethod
    def _absolute(page_url: str, ref: Any) -> str | None:
        """Resolve an image reference against the page URL."""
        if not ref or not isinstance(ref, str):
            return None
        return urljoin(page_url, ref.strip())

    def _record(
        self,
        page: PageContent,
        title: Any,
        raw_price: Any,
        image: Any,
    ) -> ExtractedRecord:
        """Build the record shared by all strategies."""
        return ExtractedRecord(
            title=str(title).strip() if title else "",
            raw_price=raw_price,
            canonical_url=canonicalize_url(page.url),
            image=self._absolute(page.url, image),
        )

    def extract(
        self, page: PageContent, soup: BeautifulSoup,
    ) -> ExtractedRecord | None:
        """Run the strategy, converting unexpected errors into a miss."""
        try:
            return self._extract(page, soup)
        except Exception as exc:
            self.logger.debug(
                "[%s] Extraction error on %s: %s",
                self.strategy_name,
                page.url,
                exc,
                exc_info=True,
            )
            return None

    @abstractmethod
    def _extract(
        self, page: PageContent, soup: BeautifulSoup,
    ) -> ExtractedRecord | None:
        """Return a record, or ``None`` when this strategy finds nothing."""
        ...
