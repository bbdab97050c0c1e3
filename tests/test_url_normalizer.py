# tests/test_url_normalizer.py

"""Tests for canonical product URLs."""

import unittest

from src.filters.url_normalizer import (
    InvalidProductUrlError,
    canonicalize_url,
    validate_product_url,
)


class TestCanonicalizeUrl(unittest.TestCase):
    """canonicalize_url strips the query string and fragment."""

    def test_strips_query(self) -> None:
        """Variant and tracking params are removed."""
        url = "https://shop.example.com/products/mug?variant=42&utm_source=x"
        self.assertEqual(
            canonicalize_url(url), "https://shop.example.com/products/mug",
        )

    def test_strips_fragment(self) -> None:
        """Fragments are removed."""
        url = "https://shop.example.com/products/mug#reviews"
        self.assertNotIn("#", canonicalize_url(url))

    def test_preserves_path(self) -> None:
        """A clean URL is unchanged."""
        url = "https://shop.example.com/collections/all/products/mug"
        self.assertEqual(canonicalize_url(url), url)

    def test_trims_whitespace(self) -> None:
        """Pasted URLs with surrounding spaces are cleaned."""
        self.assertEqual(
            canonicalize_url("  https://a.com/products/x?y=1 \n"),
            "https://a.com/products/x",
        )

    def test_empty_url(self) -> None:
        """Empty string canonicalises cleanly."""
        self.assertEqual(canonicalize_url(""), "")


class TestValidateProductUrl(unittest.TestCase):
    """validate_product_url accepts only absolute product pages."""

    def test_accepts_product_page(self) -> None:
        """A product URL is returned in canonical form."""
        self.assertEqual(
            validate_product_url("https://a.com/products/x?v=1"),
            "https://a.com/products/x",
        )

    def test_rejects_non_product_path(self) -> None:
        """Collection or home pages are rejected."""
        with self.assertRaises(InvalidProductUrlError):
            validate_product_url("https://a.com/collections/all")

    def test_rejects_relative_url(self) -> None:
        """URLs without scheme and host are rejected."""
        with self.assertRaises(InvalidProductUrlError):
            validate_product_url("/products/x")

    def test_rejects_other_schemes(self) -> None:
        """Only http and https are trackable."""
        with self.assertRaises(InvalidProductUrlError):
            validate_product_url("ftp://a.com/products/x")


if __name__ == "__main__":
    unittest.main()
