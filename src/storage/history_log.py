# src/storage/history_log.py

"""Bounded, append-only ledger of price changes."""

import asyncio
import logging

from src.config.settings import Settings
from src.models.history_entry import HistoryEntry
from src.storage.kv_store import KeyValueStore

logger = logging.getLogger("price_watch.history")


class HistoryLog:
    """Keeps the newest ``limit`` entries, evicting the oldest first."""

    def __init__(
        self,
        kv: KeyValueStore,
        limit: int = Settings.HISTORY_LIMIT,
        key: str = Settings.HISTORY_KEY,
    ) -> None:
        self._kv = kv
        self._key = key
        self.limit = limit
        self._lock = asyncio.Lock()

    async def _read(self) -> list[HistoryEntry]:
        raw = await asyncio.to_thread(self._kv.get, self._key)
        return [HistoryEntry.from_dict(d) for d in raw or []]

    async def append(self, entry: HistoryEntry) -> None:
        """Append *entry* and trim the log to the retention cap."""
        async with self._lock:
            entries = await self._read()
            entries.append(entry)
            evicted = max(0, len(entries) - self.limit)
            if evicted:
                entries = entries[evicted:]
                logger.debug("Evicted %d old history entries", evicted)
            await asyncio.to_thread(
                self._kv.set,
                self._key,
                [e.to_dict() for e in entries],
            )

    async def all(self) -> list[HistoryEntry]:
        """Return every retained entry in insertion order."""
        return await self._read()

    async def recent(self, limit: int | None = None) -> list[HistoryEntry]:
        """Return entries newest first, optionally truncated to *limit*."""
        entries = sorted(
            await self._read(), key=lambda e: e.date, reverse=True,
        )
        return entries if limit is None else entries[:limit]
