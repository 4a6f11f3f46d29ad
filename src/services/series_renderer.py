# src/services/series_renderer.py

"""Turn stored price history into a chart inside the listing page."""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from bs4 import BeautifulSoup, Tag

from src.models.observation import HistoryEntry
from src.models.series import ChartSeries
from src.services.tracker_client import TrackerClient
from src.storage.chart_exporter import draw_chart, export_page, inject_notice

logger = logging.getLogger("listing_tracker.renderer")


def format_label(entry: HistoryEntry) -> str:
    """Format an entry's timestamp as ``DD/MM/YYYY``."""
    ts = entry.timestamp
    return f"{ts.day:02d}/{ts.month:02d}/{ts.year}"


def build_series(entries: list[HistoryEntry]) -> ChartSeries:
    """Project history entries into parallel label/value lists.

    Entries are stably sorted by timestamp first, so input that is
    already in order keeps its order (ties included).
    """
    ordered = sorted(entries, key=lambda e: e.timestamp)
    return ChartSeries(
        labels=[format_label(e) for e in ordered],
        values=[e.price for e in ordered],
    )


@dataclass
class RenderOutcome:
    """What a render pass ended up doing."""

    status: str  # "drawn", "no_history", "failed"
    series: ChartSeries | None = None
    page_path: Path | None = None
    message: str = ""


class SeriesRenderer:
    """Fetches history and fills the injected chart wrapper."""

    def __init__(
        self,
        client: TrackerClient,
        export: bool = True,
        open_browser: bool = False,
    ) -> None:
        self.client = client
        self.export = export
        self.open_browser = open_browser

    def render_entries(
        self,
        soup: BeautifulSoup,
        wrapper: Tag,
        entries: list[HistoryEntry],
    ) -> RenderOutcome:
        """Draw *entries* into *wrapper*, or the notice when empty."""
        if not entries:
            inject_notice(wrapper, soup)
            logger.info("No price history yet, notice shown")
            return RenderOutcome(status="no_history")

        series = build_series(entries)
        draw_chart(wrapper, series)
        return RenderOutcome(status="drawn", series=series)

    async def render(
        self,
        identity: str,
        soup: BeautifulSoup,
        wrapper: Tag,
    ) -> RenderOutcome:
        """Fetch *identity*'s history and render it into the page.

        Never raises; unexpected failures are logged and reported as
        a ``"failed"`` outcome.
        """
        try:
            history = await asyncio.to_thread(
                self.client.fetch_history, identity
            )
            outcome = self.render_entries(soup, wrapper, history.entries)
            if self.export:
                outcome.page_path = await asyncio.to_thread(
                    export_page, soup, identity, self.open_browser,
                )
            return outcome
        except Exception as exc:
            logger.error(
                "Rendering history for %s failed: %s",
                identity,
                exc,
                exc_info=True,
            )
            return RenderOutcome(status="failed", message=str(exc))
