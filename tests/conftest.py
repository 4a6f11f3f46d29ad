# tests/conftest.py

"""Shared pytest fixtures for the listing tracker tests."""

from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest


@pytest.fixture(autouse=True)
def charts_dir(tmp_path: Path) -> Generator[Path, None, None]:
    """Send exported charts to a temp dir and never open a browser."""
    target = tmp_path / "charts"
    with patch(
        "src.storage.chart_exporter._CHARTS_DIR", target,
    ), patch("src.storage.chart_exporter.webbrowser"):
        yield target
