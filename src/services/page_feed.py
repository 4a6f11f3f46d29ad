# src/services/page_feed.py

"""Polls a listing URL and yields a snapshot each time the page changes."""

import asyncio
import hashlib
import logging
from collections.abc import AsyncIterator
from typing import Any

import cloudscraper  # type: ignore[import-untyped]
from bs4 import BeautifulSoup
from curl_cffi import requests as curl_requests

from src.config.settings import Settings
from src.models.page_snapshot import PageSnapshot


def fingerprint(soup: BeautifulSoup) -> str:
    """Hash the document body so any added/removed node shows up."""
    root = soup.body or soup
    return hashlib.sha1(
        str(root).encode("utf-8"), usedforsecurity=False
    ).hexdigest()


class PageFeed:
    """Async stream of mutation batches for one listing page.

    Each poll fetches the page; a snapshot is yielded the first time
    and whenever the body changes.  Fetch failures count as "nothing
    changed" and the feed keeps polling until ``max_polls``.
    """

    def __init__(
        self,
        url: str,
        poll_interval: float | None = None,
        max_polls: int | None = None,
        session: Any = None,
    ) -> None:
        self.url = url
        self.settings = Settings()
        self.logger = logging.getLogger("listing_tracker.feed")
        self.poll_interval = (
            self.settings.WATCH_POLL_INTERVAL
            if poll_interval is None
            else poll_interval
        )
        self.max_polls = (
            self.settings.WATCH_MAX_POLLS
            if max_polls is None
            else max_polls
        )
        if self.max_polls < 1:
            raise ValueError(f"max_polls must be >= 1, got {self.max_polls}")
        self.session = session or curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )
        self._request_timeout: int = self.settings.REQUEST_TIMEOUT
        self._last_fingerprint: str | None = None

    def _fetch_html(self) -> str | None:
        """Fetch the page, falling back to cloudscraper on failure."""
        headers: dict[str, str] = dict(self.settings.DEFAULT_HEADERS)
        try:
            resp = self.session.get(
                self.url,
                headers=headers,
                timeout=self._request_timeout,
            )
            if resp.status_code == 200:
                text: str = resp.text
                return text
            self.logger.warning(
                "HTTP %d fetching %s", resp.status_code, self.url,
            )
        except Exception as exc:
            self.logger.warning(
                "Request error fetching %s: %s",
                self.url,
                exc,
                exc_info=True,
            )

        self.logger.info(
            "curl_cffi failed, falling back to cloudscraper",
        )
        try:
            _cs: Any = cloudscraper
            scraper: Any = _cs.create_scraper()
            fallback_resp: Any = scraper.get(
                self.url,
                headers=headers,
                timeout=self._request_timeout,
            )
            if fallback_resp.status_code == 200:
                return str(fallback_resp.text)
            self.logger.warning(
                "cloudscraper got HTTP %d for %s",
                fallback_resp.status_code,
                self.url,
            )
        except Exception as exc:
            self.logger.error(
                "cloudscraper fallback also failed: %s",
                exc,
                exc_info=True,
            )
        return None

    def poll_once(self) -> PageSnapshot | None:
        """Fetch once; return a snapshot only if the page changed."""
        html = self._fetch_html()
        if html is None:
            return None
        soup = BeautifulSoup(html, "lxml")
        digest = fingerprint(soup)
        if digest == self._last_fingerprint:
            return None
        self._last_fingerprint = digest
        return PageSnapshot(url=self.url, soup=soup, fingerprint=digest)

    def __aiter__(self) -> AsyncIterator[PageSnapshot]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[PageSnapshot]:
        for poll in range(self.max_polls):
            if poll:
                await asyncio.sleep(self.poll_interval)
            snapshot = await asyncio.to_thread(self.poll_once)
            if snapshot is not None:
                self.logger.debug(
                    "Poll %d: page changed (%s)",
                    poll + 1,
                    snapshot.fingerprint[:12],
                )
                yield snapshot
        self.logger.info(
            "Stopped watching %s after %d polls",
            self.url,
            self.max_polls,
        )

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()
