# src/cli/runner.py

"""Headless runners for watching a listing and showing its history."""

import asyncio
import logging

from rich.console import Console
from rich.table import Table

from src.extractors.identity_extractor import identity_from_url
from src.services.page_feed import PageFeed
from src.services.page_watcher import PageSession, PageWatcher
from src.services.series_renderer import SeriesRenderer, build_series
from src.services.tracker_client import TrackerClient
from src.storage.chart_exporter import export_history_chart

logger = logging.getLogger("listing_tracker.cli")

# Status messages go to stderr so stdout stays clean
_err = Console(stderr=True)


async def watch_listing(
    url: str,
    open_browser: bool = True,
    max_polls: int | None = None,
) -> int:
    """Watch *url* until it fires once; return an exit code."""
    if identity_from_url(url) is None:
        _err.print(f"[red]Not a listing URL: {url}[/red]")
        return 2

    client = TrackerClient()
    feed = PageFeed(url, max_polls=max_polls)
    renderer = SeriesRenderer(client, open_browser=open_browser)
    watcher = PageWatcher(PageSession(url=url), client, renderer)

    _err.print(f"[bold]Watching:[/bold] {url}")
    try:
        session = await watcher.watch(feed, stop_on_fire=True)
    finally:
        feed.close()
        client.close()

    if not session.injected:
        _err.print(
            f"[yellow]Listing never became ready after "
            f"{session.batches_seen} page change(s).[/yellow]"
        )
        return 1

    _err.print(
        f"[green]✓ {session.identity} observed at "
        f"{session.price:,}€[/green]"
    )
    report = session.report_result
    if report is not None and not report.ok:
        _err.print(
            f"[red]Report failed: {report.http_status or ''} "
            f"{report.message}[/red]"
        )
    outcome = session.render_outcome
    if outcome is not None:
        if outcome.status == "no_history":
            _err.print("[yellow]No price history available.[/yellow]")
        elif outcome.status == "failed":
            _err.print(f"[red]Render failed: {outcome.message}[/red]")
        if outcome.page_path is not None:
            _err.print(f"[dim]Saved page → {outcome.page_path}[/dim]")
    return 0


def _print_history(identity: str, labels: list[str], values: list[int]) -> None:
    """Render a Rich table of history points to stdout."""
    table = Table(
        title=f"Price History: {identity}",
        show_lines=False,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Date")
    table.add_column("Price", justify="right", style="green")
    table.add_column("Change", justify="right")

    previous: int | None = None
    for idx, (label, value) in enumerate(zip(labels, values), 1):
        if previous is None or value == previous:
            change = "—"
        elif value > previous:
            change = f"[red]+{value - previous:,}€[/red]"
        else:
            change = f"[green]-{previous - value:,}€[/green]"
        table.add_row(str(idx), label, f"{value:,}€", change)
        previous = value

    Console().print(table)


def run_show_history(identity: str, open_browser: bool = True) -> int:
    """Print and chart the stored history for *identity*."""
    client = TrackerClient()
    try:
        result = client.fetch_history(identity)
    finally:
        client.close()

    if result.status == "failed":
        _err.print(
            f"[red]Could not fetch history: "
            f"{result.http_status or ''} {result.message}[/red]"
        )
        return 1
    if not result.entries:
        _err.print("[yellow]No price history available.[/yellow]")
        return 0

    series = build_series(result.entries)
    _print_history(identity, series.labels, series.values)
    path = export_history_chart(
        series, identity, open_browser=open_browser,
    )
    if path is not None:
        _err.print(f"[dim]Chart saved → {path}[/dim]")
    return 0


def run_watch(
    url: str,
    open_browser: bool = True,
    max_polls: int | None = None,
) -> int:
    """Synchronous wrapper around :func:`watch_listing`."""
    return asyncio.run(
        watch_listing(url, open_browser=open_browser, max_polls=max_polls)
    )
