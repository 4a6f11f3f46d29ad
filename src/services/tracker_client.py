# src/services/tracker_client.py

"""HTTP client for the remote price store (record + history)."""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

from curl_cffi import requests as curl_requests

from src.config.settings import Settings
from src.models.observation import HistoryEntry, Observation

logger = logging.getLogger("listing_tracker.sync")


@dataclass
class ReportResult:
    """Outcome of a single ``/record`` call."""

    status: str  # "ok", "failed"
    http_status: int | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status == "ok"


@dataclass
class HistoryResult:
    """Outcome of a ``/history`` call.

    ``entries`` is empty for both "no history yet" and failures; the
    ``status`` field tells them apart for callers that care.
    """

    status: str  # "ok", "empty", "failed"
    entries: list[HistoryEntry] = field(
        default_factory=lambda: list[HistoryEntry]()
    )
    http_status: int | None = None
    message: str = ""


def parse_timestamp(raw: object) -> datetime | None:
    """Parse an ISO-8601 string or epoch-milliseconds number."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        try:
            return datetime.fromtimestamp(raw / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if not isinstance(raw, str) or not raw.strip():
        return None
    text = raw.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    # Naive values are store-side UTC; keeps every entry comparable
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_history_item(item: object) -> HistoryEntry | None:
    """Convert one JSON history item, or ``None`` if malformed."""
    if not isinstance(item, dict):
        return None
    timestamp = parse_timestamp(item.get("timestamp"))
    raw_price = item.get("price")
    if timestamp is None or isinstance(raw_price, bool):
        return None
    if isinstance(raw_price, float) and raw_price.is_integer():
        raw_price = int(raw_price)
    if not isinstance(raw_price, int):
        return None
    return HistoryEntry(timestamp=timestamp, price=raw_price)


class TrackerClient:
    """Reports observations and fetches stored history.

    Neither operation raises: transport errors and non-2xx statuses
    are logged and returned as ``"failed"`` results.
    """

    def __init__(
        self,
        api_base: str | None = None,
        session: Any = None,
    ) -> None:
        self.settings = Settings()
        self.api_base = (api_base or self.settings.API_BASE).rstrip("/")
        self.session = session or curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )
        self._request_timeout: int = self.settings.REQUEST_TIMEOUT

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()

    def report(self, identity: str, price: int) -> ReportResult:
        """POST one observation to ``{base}/record``."""
        observation = Observation(identity=identity, price=price)
        payload = observation.to_payload()
        url = f"{self.api_base}/record"
        try:
            resp = self.session.post(
                url,
                headers={"Content-Type": "application/json"},
                json=payload,
                timeout=self._request_timeout,
            )
        except Exception as exc:
            logger.error(
                "Network error reporting %s: %s",
                identity,
                exc,
                exc_info=True,
            )
            return ReportResult(status="failed", message=str(exc))

        body = resp.text
        logger.info(
            "Sent %s (status %d): %s",
            payload,
            resp.status_code,
            body[:200],
        )
        if not 200 <= resp.status_code < 300:
            logger.warning(
                "Server error %d while recording %s: %s",
                resp.status_code,
                identity,
                body[:200],
            )
            return ReportResult(
                status="failed",
                http_status=resp.status_code,
                message=body[:200],
            )
        return ReportResult(
            status="ok", http_status=resp.status_code,
        )

    def fetch_history(self, identity: str) -> HistoryResult:
        """GET the stored series for *identity*; empty on any failure."""
        url = (
            f"{self.api_base}/history?id={quote(identity, safe='')}"
        )
        try:
            resp = self.session.get(
                url,
                headers={"Accept": "application/json"},
                timeout=self._request_timeout,
            )
        except Exception as exc:
            logger.error(
                "Failed to fetch history for %s: %s",
                identity,
                exc,
                exc_info=True,
            )
            return HistoryResult(status="failed", message=str(exc))

        if not 200 <= resp.status_code < 300:
            logger.warning(
                "History request for %s failed with %d: %s",
                identity,
                resp.status_code,
                resp.text[:200],
            )
            return HistoryResult(
                status="failed",
                http_status=resp.status_code,
                message=resp.text[:200],
            )

        try:
            data: Any = json.loads(resp.text)
        except (ValueError, TypeError, RecursionError) as exc:
            logger.warning(
                "Malformed history body for %s: %s", identity, exc,
            )
            return HistoryResult(
                status="failed",
                http_status=resp.status_code,
                message="malformed body",
            )

        if not isinstance(data, list):
            logger.warning(
                "History for %s is not a list (%s)",
                identity,
                type(data).__name__,
            )
            return HistoryResult(
                status="failed",
                http_status=resp.status_code,
                message="malformed body",
            )

        entries: list[HistoryEntry] = []
        skipped = 0
        for item in data:
            entry = parse_history_item(item)
            if entry is None:
                skipped += 1
                continue
            entries.append(entry)
        if skipped:
            logger.warning(
                "Skipped %d malformed history items for %s",
                skipped,
                identity,
            )

        logger.debug(
            "Fetched %d history entries for %s", len(entries), identity,
        )
        return HistoryResult(
            status="ok" if entries else "empty",
            entries=entries,
            http_status=resp.status_code,
        )
