# src/filters/url_normalizer.py

"""Canonical product URLs used as the tracked-item key."""

from urllib.parse import urlparse, urlunparse

from src.config.settings import Settings


class InvalidProductUrlError(ValueError):
    """Raised when a URL cannot be tracked as a product page."""


def canonicalize_url(raw_url: str) -> str:
    """Strip the query string and fragment to get a stable product URL."""
    parsed = urlparse(raw_url.strip())
    return urlunparse((
        parsed.scheme,
        parsed.netloc,
        parsed.path,
        parsed.params,
        "",  # drop query
        "",  # drop fragment
    ))


def validate_product_url(raw_url: str) -> str:
    """Return the canonical URL or raise :class:`InvalidProductUrlError`.

    A trackable URL is absolute http(s) and its path contains the
    configured product marker (``/products/`` on Shopify storefronts).
    """
    url = canonicalize_url(raw_url)
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        msg = f"Not an absolute http(s) URL: {raw_url!r}"
        raise InvalidProductUrlError(msg)
    if Settings.PRODUCT_PATH_MARKER not in parsed.path:
        msg = (
            f"Not a product page (expected "
            f"'{Settings.PRODUCT_PATH_MARKER}' in the path): {raw_url!r}"
        )
        raise InvalidProductUrlError(msg)
    return url
