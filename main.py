# main.py

"""Entry point for listing_tracker (watch a listing or show its history)."""

import argparse
import logging
import sys

from src.config.logging_config import setup_logging

logger = logging.getLogger("listing_tracker.main")


def _positive_int(raw: str) -> int:
    """argparse type for counts that must be at least 1."""
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {raw!r}")
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return value


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="listing_tracker",
        description=(
            "Track athome.lu listing prices and chart their history."
        ),
    )
    parser.add_argument(
        "url",
        nargs="?",
        default=None,
        help="Listing URL to watch (e.g. https://www.athome.lu/vente/...).",
    )
    parser.add_argument(
        "--history",
        default=None,
        metavar="IDENTITY",
        help="Show stored history for an identity like 'slug/id-123'.",
    )
    parser.add_argument(
        "--max-polls",
        type=_positive_int,
        default=None,
        dest="max_polls",
        help="Give up watching after this many page polls.",
    )
    parser.add_argument(
        "--no-browser",
        action="store_false",
        default=True,
        dest="open_browser",
        help="Do not open the exported chart in a browser.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Route to the watcher (URL given) or history view (--history)."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.history is None and args.url is None:
        parser.error("give a listing URL or --history IDENTITY")

    log_file = setup_logging(
        prefix="history" if args.history else "watch",
    )
    logger.info("listing_tracker starting, log file: %s", log_file)

    from src.cli.runner import run_show_history, run_watch

    try:
        if args.history is not None:
            exit_code = run_show_history(
                args.history, open_browser=args.open_browser,
            )
        else:
            exit_code = run_watch(
                args.url,
                open_browser=args.open_browser,
                max_polls=args.max_polls,
            )
    except Exception:
        logger.critical("Fatal error", exc_info=True)
        raise
    finally:
        logger.info("listing_tracker shutting down")
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
