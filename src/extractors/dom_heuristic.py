# src/extractors/dom_heuristic.py

"""Last-resort extraction from well-known CSS classes."""

from bs4 import BeautifulSoup

from src.extractors.base_strategy import BaseStrategy
from src.models.extracted_record import ExtractedRecord
from src.models.page_content import PageContent


class DomHeuristicStrategy(BaseStrategy):
    """Read price, heading and image straight from the DOM."""

    def __init__(self) -> None:
        super().__init__("dom_heuristic")

    def _title(self, soup: BeautifulSoup) -> str:
        """Primary heading text, falling back to the document title."""
        heading = soup.select_one(self.selectors["title"])
        if heading is not None:
            text = heading.get_text(strip=True)
            if text:
                return text
        if soup.title is not None:
            return soup.title.get_text(strip=True)
        return ""

    def _extract(
        self, page: PageContent, soup: BeautifulSoup,
    ) -> ExtractedRecord | None:
        price_el = soup.select_one(self.selectors["price"])
        if price_el is None:
            return None

        image_el = soup.select_one(self.selectors["image"])
        image = image_el.get("src") if image_el is not None else None

        return self._record(
            page,
            self._title(soup),
            price_el.get_text().strip(),
            image,
        )
