# src/config/logging_config.py

"""Per-run timestamped logging configuration for listing_tracker.

Each watch or history run gets its own log file inside ``logs/``, named
after the launch time (e.g. ``logs/watch_20260214_153045.log``).  Every
``listing_tracker.*`` logger writes into that file, while only warnings
and errors reach the console.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from src.config.settings import Settings

_ROOT_LOGGER = "listing_tracker"

_DETAILED_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(module)s:%(funcName)s:%(lineno)d | "
    "%(message)s"
)

_CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | [tracker] %(message)s"

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    prefix: str = "watch",
    console_level: int = logging.WARNING,
) -> Path:
    """Initialise the ``listing_tracker`` logger for the current run.

    Args:
        prefix: Leading part of the log file name.
        console_level: Minimum level echoed to stderr.

    Returns:
        The :class:`~pathlib.Path` of this run's log file.
    """
    logs_dir: Path = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = logs_dir / f"{prefix}_{timestamp}.log"

    root_logger = logging.getLogger(_ROOT_LOGGER)
    root_logger.setLevel(logging.DEBUG)

    # Repeated calls (tests, history after watch) keep the first handlers
    if root_logger.handlers:
        return log_file

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_DETAILED_FORMAT, datefmt=_DATE_FORMAT)
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(
        logging.Formatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)
    )

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    root_logger.info("Logging initialised, log file: %s", log_file)
    return log_file
