# src/config/settings.py

"""Central configuration for the listing_tracker engine."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the listing_tracker engine."""

    # --- Remote store ---
    API_BASE: str = os.getenv(
        "TRACKER_API_BASE",
        "https://athome-lu-tracker.red-limit-7cac.workers.dev/api",
    ).rstrip("/")
    REQUEST_TIMEOUT: int = 15           # Seconds before a request times out

    # --- Page watching ---
    WATCH_POLL_INTERVAL: float = 2.0    # Seconds between page polls
    WATCH_MAX_POLLS: int = 30           # Polls before the feed gives up
    LISTING_SOURCE: str = "athome"      # Key into selectors.json
    RENDER_MARKER_ID: str = "price-history-chart"

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "fr-LU,fr;q=0.9,en;q=0.8",
        "sec-ch-ua": (
            '"Google Chrome";v="131", '
            '"Chromium";v="131", '
            '"Not_A Brand";v="24"'
        ),
        "sec-ch-ua-mobile": "?0",
        "sec-ch-ua-platform": '"Windows"',
        "sec-fetch-dest": "document",
        "sec-fetch-mode": "navigate",
        "sec-fetch-site": "none",
        "sec-fetch-user": "?1",
        "Upgrade-Insecure-Requests": "1",
    }

    # --- Chart style ---
    CHART_TITLE: str = "Price History"
    CHART_LINE_COLOR: str = "#e4002b"
    CHART_FILL_COLOR: str = "rgba(0, 150, 136, 0.15)"
    CHART_MAX_X_TICKS: int = 6
    CHART_HEIGHT_PX: int = 180
    CHART_CURRENCY_SUFFIX: str = "€"
    NO_HISTORY_NOTICE: str = "No price history available."

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    SELECTORS_PATH: Path = BASE_DIR / "src" / "config" / "selectors.json"
    DATA_DIR: Path = BASE_DIR / "data"
    LOGS_DIR: Path = BASE_DIR / "logs"
