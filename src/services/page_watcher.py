# src/services/page_watcher.py

"""Watches a changing listing page and fires one sync+render cycle.

Each incoming snapshot is a mutation batch.  Per batch the watcher
extracts identity, price and anchor, then asks the pure
:func:`evaluate_readiness` whether to fire.  The render marker on
:class:`PageSession` is set before any task is scheduled, so batches
arriving while the report or history fetch is pending are no-ops.
"""

import asyncio
import logging
from collections.abc import AsyncIterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from src.config.settings import Settings
from src.extractors.identity_extractor import extract_identity
from src.extractors.value_extractor import ValueExtractor
from src.models.page_snapshot import PageSnapshot
from src.services.series_renderer import RenderOutcome, SeriesRenderer
from src.services.tracker_client import ReportResult, TrackerClient
from src.storage.chart_exporter import inject_container

logger = logging.getLogger("listing_tracker.watcher")

IDLE = "idle"
WATCHING = "watching"
FIRED = "fired"


@dataclass(frozen=True)
class Readiness:
    """Decision for a single mutation batch."""

    ready: bool
    reason: str  # "ready", "already_injected", "no_identity", ...


def evaluate_readiness(
    identity: str | None,
    value: int | None,
    anchor_present: bool,
    injected: bool,
) -> Readiness:
    """Decide whether a batch should trigger report + render.

    A zero price counts as not ready: the listing still shows a
    placeholder.
    """
    if injected:
        return Readiness(False, "already_injected")
    if not identity:
        return Readiness(False, "no_identity")
    if value is None or value <= 0:
        return Readiness(False, "no_value")
    if not anchor_present:
        return Readiness(False, "no_anchor")
    return Readiness(True, "ready")


@dataclass
class PageSession:
    """State owned by one watched navigation.

    ``injected`` is the render marker: set once, never cleared.
    """

    url: str
    injected: bool = False
    identity: str | None = None
    price: int | None = None
    fired_at: datetime | None = None
    report_result: ReportResult | None = None
    render_outcome: RenderOutcome | None = None
    batches_seen: int = 0

    def mark_injected(self, identity: str, price: int) -> None:
        """Set the render marker for this session."""
        self.injected = True
        self.identity = identity
        self.price = price
        self.fired_at = datetime.now()


class PageWatcher:
    """Drives a :class:`PageSession` from ``idle`` to ``fired``."""

    def __init__(
        self,
        session: PageSession,
        client: TrackerClient,
        renderer: SeriesRenderer,
        extractor: ValueExtractor | None = None,
    ) -> None:
        self.session = session
        self.client = client
        self.renderer = renderer
        self.extractor = extractor or ValueExtractor()
        self.state: str = IDLE
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def fired(self) -> bool:
        return self.state == FIRED

    def handle_batch(self, snapshot: PageSnapshot) -> bool:
        """Evaluate one mutation batch; return True if it fired.

        Must run inside the event loop; outside one it logs an error
        and leaves the marker unset.  Never raises.
        """
        self.session.batches_seen += 1
        if self.state == IDLE:
            self.state = WATCHING
        try:
            identity = extract_identity(snapshot.path)
            value = self.extractor.extract(snapshot.soup)
            anchor = self.extractor.find_anchor(snapshot.soup)
            injected = self.session.injected or (
                snapshot.soup.find(id=Settings.RENDER_MARKER_ID)
                is not None
            )
        except Exception as exc:
            logger.error(
                "Extraction failed on batch %d: %s",
                self.session.batches_seen,
                exc,
                exc_info=True,
            )
            return False

        decision = evaluate_readiness(
            identity, value, anchor is not None, injected,
        )
        if (
            not decision.ready
            or identity is None
            or value is None
            or anchor is None
        ):
            if decision.reason == "no_anchor":
                logger.warning(
                    "Could not find the anchor region to insert "
                    "the chart after; retrying on next change",
                )
            else:
                logger.debug(
                    "Batch %d not ready: %s",
                    self.session.batches_seen,
                    decision.reason,
                )
            return False

        try:
            loop = asyncio.get_running_loop()
            wrapper = inject_container(snapshot.soup, anchor)
        except Exception as exc:
            logger.error(
                "Could not start report/render for %s: %s",
                identity,
                exc,
                exc_info=True,
            )
            return False

        self.session.mark_injected(identity, value)
        self.state = FIRED
        logger.info(
            "Listing %s ready at %d, reporting and rendering",
            identity,
            value,
        )

        self._spawn(loop, self._report(identity, value))
        self._spawn(loop, self._render(identity, snapshot, wrapper))
        return True

    def _spawn(
        self, loop: asyncio.AbstractEventLoop, coro: Any,
    ) -> None:
        """Schedule *coro* and keep a reference until it finishes."""
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _report(self, identity: str, value: int) -> None:
        self.session.report_result = await asyncio.to_thread(
            self.client.report, identity, value
        )

    async def _render(
        self, identity: str, snapshot: PageSnapshot, wrapper: Any,
    ) -> None:
        self.session.render_outcome = await self.renderer.render(
            identity, snapshot.soup, wrapper,
        )

    async def drain(self) -> None:
        """Wait for in-flight report/render tasks."""
        if not self._tasks:
            return
        results = await asyncio.gather(
            *list(self._tasks), return_exceptions=True
        )
        for result in results:
            if isinstance(result, Exception):
                logger.error(
                    "Background task failed: %s",
                    result,
                    exc_info=result,
                )

    async def watch(
        self,
        feed: AsyncIterable[PageSnapshot],
        stop_on_fire: bool = False,
    ) -> PageSession:
        """Consume *feed* until it ends (or the watcher fires)."""
        if self.state == IDLE:
            self.state = WATCHING
        logger.info("Watching %s", self.session.url)
        try:
            async for snapshot in feed:
                self.handle_batch(snapshot)
                if stop_on_fire and self.fired:
                    break
        finally:
            await self.drain()
        return self.session
