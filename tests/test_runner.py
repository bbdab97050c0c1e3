# tests/test_runner.py

"""Tests for the headless CLI commands."""

import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import patch

from helpers import FakeFetchProvider, RecordingNotifier, json_ld_page, product_url
from src.cli import runner
from src.models.history_entry import HistoryEntry
from src.services.price_tracker import PriceTracker
from src.storage.history_log import HistoryLog
from src.storage.kv_store import MemoryStore
from src.storage.tracked_store import TrackedItemStore

URL = product_url("widget")


def _entry() -> HistoryEntry:
    return HistoryEntry(
        date=datetime(2026, 10, 2, tzinfo=timezone.utc),
        name="Widget",
        old_price=2000,
        new_price=1900,
        change_percent=-5.0,
    )


class TestRunner(unittest.IsolatedAsyncioTestCase):
    """run_* commands against an in-memory store."""

    def setUp(self) -> None:
        self.kv = MemoryStore()
        self.fetcher = FakeFetchProvider(
            pages={URL: json_ld_page("Widget", "20.00")},
        )
        patcher = patch(
            "src.cli.runner.PriceTracker",
            side_effect=lambda kv: PriceTracker(
                kv,
                fetcher=self.fetcher,
                notifier=RecordingNotifier(),
                settle_delay=0,
            ),
        )
        patcher.start()
        self.addCleanup(patcher.stop)

    async def test_list_empty(self) -> None:
        """Listing nothing succeeds."""
        self.assertEqual(await runner.run_list(kv=self.kv), 0)

    async def test_list_with_items(self) -> None:
        """Pending and resolved items both render."""
        await TrackedItemStore(self.kv).add(URL)
        await TrackedItemStore(self.kv).add(product_url("other"))
        self.assertEqual(await runner.run_list(kv=self.kv), 0)

    async def test_add_resolves_product(self) -> None:
        """--add tracks the URL and waits for the first check."""
        self.assertEqual(await runner.run_add(URL, kv=self.kv), 0)
        item = await TrackedItemStore(self.kv).find_by_url(URL)
        assert item is not None
        self.assertEqual(item.name, "Widget")
        self.assertEqual(item.current_price, 2000)

    async def test_add_unreachable_product_still_tracked(self) -> None:
        """A page that fails to load leaves a pending item."""
        url = product_url("offline")
        self.fetcher.failing.add(url)
        self.assertEqual(await runner.run_add(url, kv=self.kv), 0)
        item = await TrackedItemStore(self.kv).find_by_url(url)
        assert item is not None
        self.assertTrue(item.is_pending)

    async def test_add_invalid_url(self) -> None:
        """Non-product URLs exit with 1."""
        code = await runner.run_add("https://shop.example.com/about", kv=self.kv)
        self.assertEqual(code, 1)
        self.assertEqual(await TrackedItemStore(self.kv).list(), [])

    async def test_add_duplicate(self) -> None:
        """Already tracked URLs exit with 1."""
        await TrackedItemStore(self.kv).add(URL)
        self.assertEqual(await runner.run_add(URL, kv=self.kv), 1)

    async def test_remove_by_index(self) -> None:
        """Indexes are 1-based as printed by --list."""
        await TrackedItemStore(self.kv).add(URL)
        self.assertEqual(await runner.run_remove("1", kv=self.kv), 0)
        self.assertEqual(await TrackedItemStore(self.kv).list(), [])

    async def test_remove_by_url(self) -> None:
        """A URL key removes the matching item."""
        await TrackedItemStore(self.kv).add(URL)
        self.assertEqual(await runner.run_remove(URL, kv=self.kv), 0)

    async def test_remove_unknown(self) -> None:
        """Unknown keys exit with 1."""
        await TrackedItemStore(self.kv).add(URL)
        self.assertEqual(await runner.run_remove("5", kv=self.kv), 1)
        self.assertEqual(await runner.run_remove("0", kv=self.kv), 1)
        self.assertEqual(len(await TrackedItemStore(self.kv).list()), 1)

    async def test_check_without_items(self) -> None:
        """Nothing to check is not an error."""
        self.assertEqual(await runner.run_check(kv=self.kv), 0)
        self.assertEqual(self.fetcher.opened, [])

    async def test_check_updates_items(self) -> None:
        """--check runs a pass and waits for it."""
        await TrackedItemStore(self.kv).add(URL)
        self.assertEqual(await runner.run_check(kv=self.kv), 0)
        item = await TrackedItemStore(self.kv).find_by_url(URL)
        assert item is not None
        self.assertFalse(item.is_pending)

    async def test_history_empty(self) -> None:
        """An empty history prints the placeholder."""
        self.assertEqual(await runner.run_history(kv=self.kv), 0)

    async def test_history_with_entries(self) -> None:
        """History renders the table."""
        await HistoryLog(self.kv).append(_entry())
        self.assertEqual(await runner.run_history(kv=self.kv), 0)

    async def test_export_empty(self) -> None:
        """Nothing to export exits with 1."""
        self.assertEqual(await runner.run_export(kv=self.kv), 1)

    async def test_export_writes_file(self) -> None:
        """--export-csv writes into the requested directory."""
        await HistoryLog(self.kv).append(_entry())
        out_dir = Path(tempfile.mkdtemp()) / "csv"
        code = await runner.run_export(str(out_dir), kv=self.kv)
        self.assertEqual(code, 0)
        files = list(out_dir.glob("price_history_*.csv"))
        self.assertEqual(len(files), 1)
        self.assertIn("Widget", files[0].read_text(encoding="utf-8"))

    async def test_commands_open_sqlite_store_by_default(self) -> None:
        """Without an injected store the on-disk database is used."""
        from src.config.settings import Settings

        self.assertEqual(await runner.run_list(), 0)
        self.assertTrue(Settings.STORE_PATH.exists())


class TestChangeBadge(unittest.TestCase):
    """Colour and sign of the change column."""

    def test_drop_is_green(self) -> None:
        """Drops show their own sign in green."""
        self.assertEqual(runner._change_text(-5.0), "[green]-5%[/green]")

    def test_rise_is_red_with_plus(self) -> None:
        """Rises get an explicit plus sign in red."""
        self.assertEqual(runner._change_text(12.5), "[red]+12.5%[/red]")

    def test_flat_change_is_neutral(self) -> None:
        """A change that rounds to zero is neither a rise nor a drop."""
        self.assertEqual(runner._change_text(0.0), "[dim]0%[/dim]")
        self.assertEqual(runner._change_text(-0.0), "[dim]0%[/dim]")
        self.assertEqual(runner._change_text(0.001), "[dim]0%[/dim]")


if __name__ == "__main__":
    unittest.main()
