# tests/test_value_extractor.py

"""Tests for price extraction and anchor lookup."""

import unittest
from pathlib import Path

from bs4 import BeautifulSoup

from src.extractors.value_extractor import ValueExtractor

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def _load_soup(fixture_name: str, price_text: str | None = None) -> BeautifulSoup:
    """Parse a fixture page, optionally swapping the displayed price."""
    html = (FIXTURES_DIR / fixture_name).read_text(encoding="utf-8")
    if price_text is not None:
        html = html.replace("450 000 €", price_text)
    return BeautifulSoup(html, "lxml")


class TestParsePriceText(unittest.TestCase):
    """Verify digit stripping and integer parsing."""

    def test_spaced_euro_amount(self) -> None:
        """Grouping spaces and currency sign are dropped."""
        self.assertEqual(
            ValueExtractor.parse_price_text("450 000 €"), 450000,
        )

    def test_other_separators(self) -> None:
        """Dots, commas and no-break spaces are all non-digits."""
        self.assertEqual(
            ValueExtractor.parse_price_text("1.250.000 €"), 1250000,
        )
        self.assertEqual(
            ValueExtractor.parse_price_text("€ 1,299"), 1299,
        )

    def test_no_digits_returns_none(self) -> None:
        """Text without digits is not a zero price."""
        for text in ("Prix sur demande", "€", "   ", ""):
            with self.subTest(text=text):
                self.assertIsNone(
                    ValueExtractor.parse_price_text(text)
                )

    def test_none_returns_none(self) -> None:
        """Missing text yields None."""
        self.assertIsNone(ValueExtractor.parse_price_text(None))

    def test_zero_is_a_value(self) -> None:
        """A literal zero parses; readiness decides what it means."""
        self.assertEqual(ValueExtractor.parse_price_text("0 €"), 0)


class TestValueExtractor(unittest.TestCase):
    """Verify DOM lookups against fixture pages."""

    def setUp(self) -> None:
        """Create an extractor using the bundled selectors."""
        self.extractor = ValueExtractor()

    def test_selectors_loaded(self) -> None:
        """Both the price and anchor selectors are configured."""
        self.assertIn("price", self.extractor.selectors)
        self.assertIn("anchor", self.extractor.selectors)

    def test_extracts_price_from_ready_page(self) -> None:
        """The price node at the structural position is parsed."""
        soup = _load_soup("listing_ready.html")
        self.assertEqual(self.extractor.extract(soup), 450000)

    def test_loading_page_returns_none(self) -> None:
        """A page still rendering has no price yet."""
        soup = _load_soup("listing_loading.html")
        self.assertIsNone(self.extractor.extract(soup))

    def test_price_without_digits_returns_none(self) -> None:
        """A rendered node without digits is not ready."""
        soup = _load_soup("listing_ready.html", "Prix sur demande")
        self.assertIsNone(self.extractor.extract(soup))

    def test_anchor_present(self) -> None:
        """The info block is found on a ready page."""
        soup = _load_soup("listing_ready.html")
        self.assertTrue(self.extractor.has_anchor(soup))
        anchor = self.extractor.find_anchor(soup)
        self.assertIsNotNone(anchor)
        assert anchor is not None
        self.assertIn("info-block", anchor.get("class", []))

    def test_anchor_missing(self) -> None:
        """Pages without the info block report no anchor."""
        soup = _load_soup("listing_no_anchor.html")
        self.assertFalse(self.extractor.has_anchor(soup))
        self.assertEqual(self.extractor.extract(soup), 450000)

    def test_unknown_source_has_no_selectors(self) -> None:
        """An unconfigured source never finds a price."""
        extractor = ValueExtractor(source_name="nowhere")
        soup = _load_soup("listing_ready.html")
        self.assertIsNone(extractor.extract(soup))
        self.assertFalse(extractor.has_anchor(soup))


if __name__ == "__main__":
    unittest.main()
