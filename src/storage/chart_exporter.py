# src/storage/chart_exporter.py

"""Build the Plotly price chart and inject it into the listing page."""

import importlib
import logging
import re
import webbrowser
from datetime import datetime
from pathlib import Path
from types import ModuleType
from typing import Any

from bs4 import BeautifulSoup, Tag

from src.config.settings import Settings
from src.models.series import ChartSeries

logger = logging.getLogger("listing_tracker.chart")

_CHARTS_DIR: Path = Settings.DATA_DIR / "charts"

_plotly_go: ModuleType | None = None


def _get_plotly_go() -> ModuleType:
    """Import plotly.graph_objects lazily, once per process."""
    global _plotly_go
    if _plotly_go is None:
        _plotly_go = importlib.import_module("plotly.graph_objects")
        logger.debug("Plotly loaded")
    return _plotly_go


def _ensure_charts_dir() -> Path:
    """Create charts directory if it doesn't exist."""
    _CHARTS_DIR.mkdir(parents=True, exist_ok=True)
    return _CHARTS_DIR


def build_figure(
    series: ChartSeries,
    height: int | None = Settings.CHART_HEIGHT_PX,
    title: str | None = None,
) -> Any:
    """Build the styled line chart for a prepared series.

    The embedded page chart uses a fixed compact height; standalone
    exports pass ``height=None`` and a title.
    """
    go = _get_plotly_go()
    suffix = Settings.CHART_CURRENCY_SUFFIX

    fig: Any = go.Figure()
    fig.add_trace(go.Scatter(
        x=series.labels,
        y=series.values,
        mode="lines+markers",
        name=f"Price ({suffix})",
        fill="tozeroy",
        fillcolor=Settings.CHART_FILL_COLOR,
        line={
            "color": Settings.CHART_LINE_COLOR,
            "width": 2,
            "shape": "spline",
            "smoothing": 0.25,
        },
        marker={
            "color": Settings.CHART_LINE_COLOR,
            "size": 6,
            "line": {"color": "#fff", "width": 1},
        },
        hovertemplate=(
            "%{x}<br>"
            f"%{{y:,.0f}}{suffix}"
            "<extra></extra>"
        ),
    ))

    fig.update_layout(
        height=height,
        title=title,
        showlegend=False,
        template="plotly_white",
        margin={"l": 10, "r": 10, "t": 10, "b": 10},
        hoverlabel={
            "bgcolor": "#333",
            "font": {"color": "#eee"},
        },
    )
    fig.update_xaxes(
        type="category",
        nticks=Settings.CHART_MAX_X_TICKS,
        tickfont={"size": 12, "color": "#666"},
        gridcolor="rgba(0,0,0,0.03)",
    )
    fig.update_yaxes(
        ticksuffix=suffix,
        tickformat=",d",
        rangemode="normal",
        tickfont={"size": 12, "color": "#666"},
        gridcolor="rgba(0,0,0,0.05)",
    )
    return fig


def figure_fragment(fig: Any, div_id: str) -> str:
    """Render a figure as an embeddable HTML fragment."""
    fragment: str = fig.to_html(
        full_html=False,
        include_plotlyjs="cdn",
        div_id=div_id,
    )
    return fragment


def _build_container(soup: BeautifulSoup) -> tuple[Tag, Tag]:
    """Create the titled container and its inner chart wrapper."""
    container = soup.new_tag(
        "div", attrs={"class": "characteristics-container"},
    )
    title = soup.new_tag(
        "h2", attrs={"class": "characteristics-main-title"},
    )
    title.string = Settings.CHART_TITLE
    container.append(title)

    wrapper = soup.new_tag("div", attrs={
        "class": "price-history-wrapper",
        "style": (
            "margin-top:10px;background:#ffffff;border:none;"
            "border-radius:8px;padding:10px;width:100%;"
            "box-sizing:border-box"
        ),
    })
    container.append(wrapper)
    return container, wrapper


def inject_container(soup: BeautifulSoup, anchor: Tag) -> Tag:
    """Insert an empty chart container after *anchor*; return the wrapper.

    The wrapper carries the render marker id so a second injection
    into the same document can be detected.
    """
    container, wrapper = _build_container(soup)
    wrapper["id"] = Settings.RENDER_MARKER_ID
    anchor.insert_after(container)
    return wrapper


def inject_notice(wrapper: Tag, soup: BeautifulSoup) -> None:
    """Append the "no history" notice to an injected wrapper."""
    note = soup.new_tag("div", attrs={"class": "price-history-note"})
    note.string = Settings.NO_HISTORY_NOTICE
    wrapper.append(note)


def draw_chart(
    wrapper: Tag,
    series: ChartSeries,
) -> None:
    """Draw *series* into an injected wrapper."""
    fig = build_figure(series)
    fragment = figure_fragment(
        fig, f"{Settings.RENDER_MARKER_ID}-plot",
    )
    wrapper.append(BeautifulSoup(fragment, "html.parser"))
    logger.info("Chart drawn with %d points", len(series))


def _slugify(identity: str) -> str:
    """Make a filesystem-safe name from a listing identity."""
    return re.sub(r"[^A-Za-z0-9_-]+", "_", identity).strip("_")[:60]


def export_page(
    soup: BeautifulSoup,
    identity: str,
    open_browser: bool = False,
) -> Path:
    """Write the augmented listing page to the charts directory."""
    charts_dir = _ensure_charts_dir()
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filepath = charts_dir / f"{_slugify(identity)}_{stamp}.html"
    filepath.write_text(str(soup), encoding="utf-8")
    logger.info("Listing page with chart saved to %s", filepath)

    if open_browser:
        webbrowser.open(filepath.as_uri())
    return filepath


def export_history_chart(
    series: ChartSeries,
    identity: str,
    open_browser: bool = True,
) -> Path | None:
    """Export a standalone HTML chart for *identity*'s history."""
    if not series:
        logger.warning("No history to chart for %s", identity)
        return None

    fig = build_figure(
        series,
        height=None,
        title=f"{Settings.CHART_TITLE}: {identity}",
    )
    charts_dir = _ensure_charts_dir()
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filepath = charts_dir / f"history_{_slugify(identity)}_{stamp}.html"
    fig.write_html(str(filepath))
    logger.info("History chart saved to %s", filepath)

    if open_browser:
        webbrowser.open(filepath.as_uri())
    return filepath
