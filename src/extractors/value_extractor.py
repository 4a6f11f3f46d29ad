# src/extractors/value_extractor.py

"""Extract the displayed listing price and locate the anchor region."""

import json
import logging
import re
from typing import Any

from bs4 import BeautifulSoup, Tag

from src.config.settings import Settings

_NON_DIGITS = re.compile(r"\D")


class ValueExtractor:
    """Reads the current price from a rendered listing document.

    Structural selectors come from ``selectors.json`` under the
    configured source key, so a layout change only touches config.
    """

    def __init__(self, source_name: str | None = None) -> None:
        self.settings = Settings()
        self.source_name = source_name or self.settings.LISTING_SOURCE
        self.logger = logging.getLogger(
            "listing_tracker.extractor"
        )
        self.selectors: dict[str, str] = self._load_selectors()

    def _load_selectors(self) -> dict[str, str]:
        """Load CSS selectors for this source from selectors.json."""
        with open(self.settings.SELECTORS_PATH, encoding="utf-8") as f:
            all_selectors: dict[str, Any] = json.load(f)
        result: dict[str, str] = all_selectors.get(
            self.source_name, {}
        )
        return result

    @staticmethod
    def parse_price_text(text: str | None) -> int | None:
        """Turn display text like ``'450 000 €'`` into ``450000``.

        Every non-digit character is dropped.  Text without any digit
        yields ``None`` rather than zero.
        """
        if not text:
            return None
        digits = _NON_DIGITS.sub("", text)
        if not digits:
            return None
        return int(digits, 10)

    def find_price_node(self, soup: BeautifulSoup) -> Tag | None:
        """Return the first node at the price position, if rendered."""
        selector = self.selectors.get("price")
        if not selector:
            self.logger.error(
                "[%s] No price selector configured", self.source_name
            )
            return None
        return soup.select_one(selector)

    def extract(self, soup: BeautifulSoup) -> int | None:
        """Return the displayed price, or ``None`` if not ready."""
        node = self.find_price_node(soup)
        if node is None:
            return None
        return self.parse_price_text(node.get_text())

    def find_anchor(self, soup: BeautifulSoup) -> Tag | None:
        """Return the region the history chart is inserted after."""
        selector = self.selectors.get("anchor")
        if not selector:
            return None
        return soup.select_one(selector)

    def has_anchor(self, soup: BeautifulSoup) -> bool:
        """Check whether the anchor region is present."""
        return self.find_anchor(soup) is not None
