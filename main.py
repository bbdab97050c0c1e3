# main.py

"""Entry point for the price_watch tracker (watcher or one-shot commands)."""

import argparse
import asyncio
import logging
import sys

from src.config.logging_config import setup_logging
from src.config.settings import Settings

logger = logging.getLogger("price_watch.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="price_watch",
        description="Track product prices and alert on drops.",
        epilog=(
            f"Without options the watcher checks every "
            f"{Settings.CHECK_INTERVAL_HOURS:g} hours until stopped."
        ),
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--add",
        metavar="URL",
        default=None,
        help="Start tracking a product page URL.",
    )
    group.add_argument(
        "--remove",
        metavar="URL_OR_INDEX",
        default=None,
        help="Stop tracking a product (index as shown by --list).",
    )
    group.add_argument(
        "--list",
        action="store_true",
        default=False,
        dest="list_items",
        help="Show tracked products.",
    )
    group.add_argument(
        "--check",
        action="store_true",
        default=False,
        help="Check all prices once and exit.",
    )
    group.add_argument(
        "--history",
        action="store_true",
        default=False,
        help="Show the most recent price changes.",
    )
    group.add_argument(
        "--export-csv",
        action="store_true",
        default=False,
        dest="export_csv",
        help="Export the price history to CSV.",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        dest="output_dir",
        help="Directory for --export-csv (default: exports/).",
    )
    return parser


def _run_watch() -> None:
    """Run the periodic watcher until interrupted."""
    from src.cli.runner import run_watch

    try:
        asyncio.run(run_watch())
    except KeyboardInterrupt:
        logger.info("Watcher interrupted by user")
    except Exception:
        logger.critical("Fatal error in watcher", exc_info=True)
        raise
    finally:
        logger.info("price_watch watcher shutting down")


def _run_command(args: argparse.Namespace) -> None:
    """Run a one-shot command and exit with its status."""
    from src.cli import runner

    if args.add:
        coro = runner.run_add(args.add)
    elif args.remove:
        coro = runner.run_remove(args.remove)
    elif args.list_items:
        coro = runner.run_list()
    elif args.check:
        coro = runner.run_check()
    elif args.history:
        coro = runner.run_history()
    else:
        coro = runner.run_export(args.output_dir)

    sys.exit(asyncio.run(coro))


def main() -> None:
    """Route to the watcher (no options) or a one-shot command."""
    parser = _build_parser()
    args = parser.parse_args()

    watching = not any((
        args.add,
        args.remove,
        args.list_items,
        args.check,
        args.history,
        args.export_csv,
    ))
    log_file = setup_logging(label="watch" if watching else "run")
    logger.info("price_watch starting, log file: %s", log_file)

    if watching:
        _run_watch()
    else:
        _run_command(args)


if __name__ == "__main__":
    main()
