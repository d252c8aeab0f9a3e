# main.py

"""Entry point for the price_tracker worker."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from price_tracker.config.logging_config import setup_logging
from price_tracker.config.settings import Settings

logger = logging.getLogger("price_tracker.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="price_tracker",
        description="Batch price-drop tracker for product pages.",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        default=False,
        help="Run a single batch, print its summary and exit.",
    )
    parser.add_argument(
        "--check",
        default=None,
        metavar="URL",
        help="Fetch and parse one product URL, then exit.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        dest="dry_run",
        help="Log price drops instead of sending Telegram messages.",
    )
    parser.add_argument(
        "--no-server",
        action="store_false",
        default=True,
        dest="serve",
        help="Do not start the liveness HTTP endpoint.",
    )
    parser.add_argument(
        "--items",
        default=None,
        help="Path to the tracking list (default: books.txt).",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=None,
        dest="batch_size",
        help="Items per batch.",
    )
    parser.add_argument(
        "--pause",
        type=float,
        default=None,
        help="Seconds to wait between batches.",
    )
    return parser


def _apply_overrides(settings: Settings, args: argparse.Namespace) -> None:
    """Copy CLI overrides onto the settings instance."""
    if args.items is not None:
        settings.ITEMS_FILE = Path(args.items)
    if args.batch_size is not None:
        settings.BATCH_SIZE = args.batch_size
    if args.pause is not None:
        settings.BATCH_PAUSE = args.pause


def main() -> None:
    """Route to a single check, a single batch or the forever loop."""
    log_file = setup_logging()
    logger.info("price_tracker starting, log file: %s", log_file)

    args = _build_parser().parse_args()
    settings = Settings()
    _apply_overrides(settings, args)

    from price_tracker.cli.runner import run_check, run_once, run_worker

    if args.check:
        sys.exit(run_check(settings, args.check))
    if args.once:
        sys.exit(asyncio.run(run_once(settings, args.dry_run)))

    serve = args.serve and settings.LIVENESS_ENABLED
    try:
        exit_code = asyncio.run(run_worker(settings, args.dry_run, serve))
    except KeyboardInterrupt:
        exit_code = 0
    finally:
        logger.info("price_tracker shutting down")
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
