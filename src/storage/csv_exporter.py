# src/storage/csv_exporter.py

"""Export the price history as a CSV table."""

import csv
import io
import logging
from datetime import datetime
from pathlib import Path

from src.config.settings import Settings
from src.filters.price_normalizer import format_major, format_percent
from src.models.history_entry import HistoryEntry

logger = logging.getLogger("price_watch.export")

CSV_HEADER: list[str] = [
    "Date", "Product", "Old Price", "New Price", "Change %",
]


def format_history_csv(entries: list[HistoryEntry]) -> str:
    """Render history entries as CSV text.

    Fields containing the delimiter, a quote or a line break are
    quoted, with embedded quotes doubled.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for e in entries:
        writer.writerow([
            e.date.isoformat(),
            e.name,
            format_major(e.old_price),
            format_major(e.new_price),
            format_percent(e.change_percent),
        ])
    return buf.getvalue()


class CsvExporter:
    """Writes history exports to disk."""

    def __init__(self, exports_dir: Path | None = None) -> None:
        self.exports_dir: Path = exports_dir or Settings.EXPORTS_DIR
        self.exports_dir.mkdir(parents=True, exist_ok=True)
        logger.debug("CsvExporter initialised, exports_dir=%s", self.exports_dir)

    def export_history(self, entries: list[HistoryEntry]) -> Path:
        """Write *entries* to ``price_history_<date>.csv`` and return the path."""
        stamp = datetime.now().strftime("%Y-%m-%d")
        filepath = self.exports_dir / f"price_history_{stamp}.csv"

        with open(filepath, "w", newline="", encoding="utf-8") as f:
            f.write(format_history_csv(entries))

        logger.info(
            "Exported %d history entries to %s", len(entries), filepath,
        )
        return filepath
