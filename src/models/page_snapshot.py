# src/models/page_snapshot.py

"""Snapshot of a listing page as delivered to the page watcher."""

from dataclasses import dataclass
from urllib.parse import urlparse

from bs4 import BeautifulSoup


@dataclass
class PageSnapshot:
    """One observed state of the listing document."""

    url: str
    soup: BeautifulSoup
    fingerprint: str = ""

    @property
    def path(self) -> str:
        """Navigation path of the page (no query or fragment)."""
        return urlparse(self.url).path
