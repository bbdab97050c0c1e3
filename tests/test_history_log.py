# tests/test_history_log.py

"""Tests for the bounded history log."""

import asyncio
import unittest
from datetime import datetime, timedelta, timezone

from src.models.history_entry import HistoryEntry
from src.storage.history_log import HistoryLog
from src.storage.kv_store import MemoryStore

START = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _entry(n: int) -> HistoryEntry:
    return HistoryEntry(
        date=START + timedelta(hours=n),
        name=f"Item {n}",
        old_price=1000,
        new_price=900,
        change_percent=-10.0,
    )


class TestHistoryLog(unittest.IsolatedAsyncioTestCase):
    """append / all / recent."""

    def setUp(self) -> None:
        self.kv = MemoryStore()
        self.log = HistoryLog(self.kv)

    async def test_empty(self) -> None:
        """A fresh log has no entries."""
        self.assertEqual(await self.log.all(), [])
        self.assertEqual(await self.log.recent(), [])

    async def test_append_keeps_order(self) -> None:
        """all() returns insertion order."""
        for n in range(3):
            await self.log.append(_entry(n))
        names = [e.name for e in await self.log.all()]
        self.assertEqual(names, ["Item 0", "Item 1", "Item 2"])

    async def test_cap_evicts_oldest(self) -> None:
        """The 101st append drops the first entry."""
        for n in range(101):
            await self.log.append(_entry(n))
        entries = await self.log.all()
        self.assertEqual(len(entries), 100)
        self.assertEqual(entries[0].name, "Item 1")
        self.assertEqual(entries[-1].name, "Item 100")

    async def test_custom_limit(self) -> None:
        """The retention cap is configurable."""
        log = HistoryLog(MemoryStore(), limit=3)
        for n in range(5):
            await log.append(_entry(n))
        self.assertEqual(
            [e.name for e in await log.all()],
            ["Item 2", "Item 3", "Item 4"],
        )

    async def test_recent_sorts_newest_first(self) -> None:
        """recent() orders by date, not insertion."""
        for n in (2, 0, 1):
            await self.log.append(_entry(n))
        names = [e.name for e in await self.log.recent()]
        self.assertEqual(names, ["Item 2", "Item 1", "Item 0"])

    async def test_recent_limit(self) -> None:
        """recent(limit) truncates after sorting."""
        for n in range(30):
            await self.log.append(_entry(n))
        newest = await self.log.recent(20)
        self.assertEqual(len(newest), 20)
        self.assertEqual(newest[0].name, "Item 29")
        self.assertEqual(newest[-1].name, "Item 10")

    async def test_concurrent_appends_all_land(self) -> None:
        """Appends are serialised."""
        await asyncio.gather(*(self.log.append(_entry(n)) for n in range(25)))
        self.assertEqual(len(await self.log.all()), 25)

    async def test_entries_survive_serialisation(self) -> None:
        """Entries are stored as plain dicts and read back intact."""
        await self.log.append(_entry(5))
        raw = self.kv.get("price_history")
        self.assertIsInstance(raw[0], dict)
        self.assertEqual((await self.log.all())[0], _entry(5))


if __name__ == "__main__":
    unittest.main()
