# src/config/logging_config.py

"""Per-run logging for the tracker and its scheduler.

Every launch writes one file, ``logs/<label>_<timestamp>.log``, shared
by two logger trees:

* ``price_watch.*`` at DEBUG: fetch cycles, extraction misses, store
  writes and alerts.
* ``apscheduler.*`` at WARNING: missed runs and job errors raised
  inside the scheduler, which would otherwise go nowhere.

The watcher labels its files ``watch`` and one-shot commands use
``run``, so a long-lived watcher log is easy to tell apart.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from src.config.settings import Settings

_DETAILED_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(module)s:%(funcName)s:%(lineno)d | "
    "%(message)s"
)

_CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

APP_LOGGER = "price_watch"
SCHEDULER_LOGGER = "apscheduler"

# Logger tree -> level captured in the run log
ROUTED_LOGGERS: dict[str, int] = {
    APP_LOGGER: logging.DEBUG,
    SCHEDULER_LOGGER: logging.WARNING,
}


def current_log_file() -> Path | None:
    """Return the run log already attached to the app logger, if any."""
    for handler in logging.getLogger(APP_LOGGER).handlers:
        if isinstance(handler, logging.FileHandler):
            return Path(handler.baseFilename)
    return None


def setup_logging(
    label: str = "run",
    logs_dir: Path | None = None,
    console_level: int = logging.WARNING,
) -> Path:
    """Route the app and scheduler loggers into a fresh run log.

    Args:
        label: File name prefix, ``run`` for commands, ``watch`` for
            the periodic watcher.
        logs_dir: Directory for the log file; defaults to
            ``Settings.LOGS_DIR``.
        console_level: Minimum level echoed to stderr.

    Returns:
        The path of the log file in use.  A second call in the same
        process keeps the first call's handlers and returns its file.
    """
    existing = current_log_file()
    if existing is not None:
        return existing

    target_dir: Path = logs_dir or Settings.LOGS_DIR
    target_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = target_dir / f"{label}_{timestamp}.log"

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

    for name, level in ROUTED_LOGGERS.items():
        routed = logging.getLogger(name)
        routed.setLevel(level)
        routed.addHandler(file_handler)
        routed.addHandler(console_handler)

    logging.getLogger(APP_LOGGER).info(
        "Logging initialised, log file: %s (scheduler at %s)",
        log_file,
        logging.getLevelName(ROUTED_LOGGERS[SCHEDULER_LOGGER]),
    )
    return log_file
