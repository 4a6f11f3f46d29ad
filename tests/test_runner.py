# tests/test_runner.py

"""Tests for the headless watch and history runners."""

import unittest
from collections.abc import AsyncIterator
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock, patch

from bs4 import BeautifulSoup

from src.cli.runner import run_show_history, watch_listing
from src.models.observation import HistoryEntry
from src.models.page_snapshot import PageSnapshot
from src.services.tracker_client import HistoryResult, ReportResult

FIXTURES_DIR = Path(__file__).parent / "fixtures"

LISTING_URL = "https://www.athome.lu/vente/maison/foo/id-1"


class _FakeFeed:
    """Feed stub yielding fixture snapshots."""

    def __init__(self, fixtures: list[str]) -> None:
        self.fixtures = fixtures
        self.closed = False

    async def _iterate(self) -> AsyncIterator[PageSnapshot]:
        for name in self.fixtures:
            html = (FIXTURES_DIR / name).read_text(encoding="utf-8")
            yield PageSnapshot(
                url=LISTING_URL, soup=BeautifulSoup(html, "lxml"),
            )

    def __aiter__(self) -> AsyncIterator[PageSnapshot]:
        return self._iterate()

    def close(self) -> None:
        self.closed = True


class TestWatchListing(unittest.IsolatedAsyncioTestCase):
    """Verify the watch runner exit codes."""

    async def test_rejects_non_listing_url(self) -> None:
        """Non-listing URLs exit with 2 before any network use."""
        with patch("src.cli.runner.TrackerClient") as mock_client_cls:
            code = await watch_listing("https://www.athome.lu/vente/")
        self.assertEqual(code, 2)
        mock_client_cls.assert_not_called()

    @patch("src.cli.runner.TrackerClient")
    @patch("src.cli.runner.PageFeed")
    async def test_ready_page_reports_and_exits_zero(
        self, mock_feed_cls: MagicMock, mock_client_cls: MagicMock,
    ) -> None:
        """A page that becomes ready is reported once."""
        feed = _FakeFeed(["listing_loading.html", "listing_ready.html"])
        mock_feed_cls.return_value = feed
        client = mock_client_cls.return_value
        client.report.return_value = ReportResult(status="ok")
        client.fetch_history.return_value = HistoryResult(status="empty")

        code = await watch_listing(LISTING_URL, open_browser=False)

        self.assertEqual(code, 0)
        client.report.assert_called_once_with("foo/id-1", 450000)
        self.assertTrue(feed.closed)
        client.close.assert_called_once()

    @patch("src.cli.runner.TrackerClient")
    @patch("src.cli.runner.PageFeed")
    async def test_never_ready_exits_one(
        self, mock_feed_cls: MagicMock, mock_client_cls: MagicMock,
    ) -> None:
        """A feed that ends before readiness is a failure."""
        mock_feed_cls.return_value = _FakeFeed(["listing_loading.html"])

        code = await watch_listing(LISTING_URL, open_browser=False)

        self.assertEqual(code, 1)
        mock_client_cls.return_value.report.assert_not_called()


class TestShowHistory(unittest.TestCase):
    """Verify the history runner exit codes."""

    @patch("src.cli.runner.TrackerClient")
    def test_failed_fetch_exits_one(self, mock_client_cls: MagicMock) -> None:
        """A failed fetch is an error for the history command."""
        mock_client_cls.return_value.fetch_history.return_value = (
            HistoryResult(status="failed", http_status=500)
        )
        self.assertEqual(run_show_history("foo/id-1", open_browser=False), 1)

    @patch("src.cli.runner.TrackerClient")
    def test_empty_history_exits_zero(self, mock_client_cls: MagicMock) -> None:
        """No history yet is not an error."""
        mock_client_cls.return_value.fetch_history.return_value = (
            HistoryResult(status="empty")
        )
        self.assertEqual(run_show_history("foo/id-1", open_browser=False), 0)

    @patch("src.cli.runner.export_history_chart")
    @patch("src.cli.runner.TrackerClient")
    def test_history_is_charted(
        self, mock_client_cls: MagicMock, mock_export: MagicMock,
    ) -> None:
        """Stored points are printed and exported as a chart."""
        mock_client_cls.return_value.fetch_history.return_value = (
            HistoryResult(
                status="ok",
                entries=[
                    HistoryEntry(
                        timestamp=datetime(2024, 2, 1, tzinfo=timezone.utc),
                        price=460000,
                    ),
                    HistoryEntry(
                        timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
                        price=480000,
                    ),
                ],
            )
        )
        mock_export.return_value = None

        code = run_show_history("foo/id-1", open_browser=False)

        self.assertEqual(code, 0)
        series = mock_export.call_args[0][0]
        self.assertEqual(series.values, [480000, 460000])
        self.assertEqual(series.labels, ["01/01/2024", "01/02/2024"])


if __name__ == "__main__":
    unittest.main()
