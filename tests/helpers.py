# tests/helpers.py

"""Fakes shared by the tracker and CLI tests."""

import asyncio
import json

from src.extractors.product_extractor import ProductExtractor
from src.models.extracted_record import ExtractedRecord
from src.models.notification import Notification
from src.models.page_content import PageContent
from src.services.fetch_provider import FetchHandle, FetchProvider
from src.services.notifier import NotificationSink

SHOP = "https://shop.example.com"


def product_url(slug: str) -> str:
    """Build a product page URL on the fake shop."""
    return f"{SHOP}/products/{slug}"


def json_ld_page(
    name: str, price: str, image: str = "/img/p.jpg",
) -> str:
    """Minimal product page carrying a JSON-LD Product block."""
    data = {
        "@context": "https://schema.org",
        "@type": "Product",
        "name": name,
        "image": [image],
        "offers": {"@type": "Offer", "price": price},
    }
    return (
        "<html><head><title>Shop</title>"
        '<script type="application/ld+json">'
        f"{json.dumps(data)}</script></head><body></body></html>"
    )


class FakeFetchProvider(FetchProvider):
    """Serves canned pages; unknown URLs never finish loading."""

    def __init__(
        self,
        pages: dict[str, str] | None = None,
        failing: set[str] | None = None,
    ) -> None:
        self.pages = pages or {}
        self.failing = failing or set()
        self.opened: list[FetchHandle] = []
        self.close_calls = 0

    def open(self, url: str) -> FetchHandle:
        handle = FetchHandle(url)
        self.opened.append(handle)
        loop = asyncio.get_running_loop()
        if url in self.pages:
            loop.call_soon(
                handle.complete, PageContent(url=url, html=self.pages[url])
            )
        elif url in self.failing:
            loop.call_soon(handle.complete, None)
        return handle

    def close(self, handle: FetchHandle) -> None:
        self.close_calls += 1
        super().close(handle)


class RecordingNotifier(NotificationSink):
    """Collects notifications instead of printing them."""

    def __init__(self) -> None:
        self.sent: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.sent.append(notification)


class CountingExtractor(ProductExtractor):
    """ProductExtractor that counts how often it runs."""

    def __init__(self) -> None:
        super().__init__()
        self.calls = 0

    def extract(self, page: PageContent) -> ExtractedRecord | None:
        self.calls += 1
        return super().extract(page)
