# src/storage/tracked_store.py

"""Tracked products, unique by canonical URL."""

import asyncio
import logging
from collections.abc import Callable

from src.config.settings import Settings
from src.filters.url_normalizer import canonicalize_url
from src.models.tracked_item import TrackedItem
from src.storage.kv_store import KeyValueStore

logger = logging.getLogger("price_watch.store")

ItemMutator = Callable[[TrackedItem], TrackedItem | None]


class AlreadyTrackedError(Exception):
    """Raised when adding a URL that is already being tracked."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Already tracking {url}")
        self.url = url


class TrackedItemStore:
    """Async facade over the ``tracked_items`` collection.

    Every item lives in one JSON list under a single key, so all writes
    go through a collection lock.  :meth:`update_in_place` additionally
    holds a per-URL lock for the whole read-modify-write, so concurrent
    checks of the same product queue up instead of overwriting each
    other.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        key: str = Settings.TRACKED_ITEMS_KEY,
    ) -> None:
        self._kv = kv
        self._key = key
        self._collection_lock = asyncio.Lock()
        self._url_locks: dict[str, asyncio.Lock] = {}

    # ── Private helpers ──────────────────────────────────

    def _url_lock(self, url: str) -> asyncio.Lock:
        lock = self._url_locks.get(url)
        if lock is None:
            lock = self._url_locks[url] = asyncio.Lock()
        return lock

    async def _read(self) -> list[TrackedItem]:
        raw = await asyncio.to_thread(self._kv.get, self._key)
        return [TrackedItem.from_dict(d) for d in raw or []]

    async def _write(self, items: list[TrackedItem]) -> None:
        await asyncio.to_thread(
            self._kv.set, self._key, [i.to_dict() for i in items],
        )

    # ── Public API ───────────────────────────────────────

    async def list(self) -> list[TrackedItem]:
        """Return all tracked items in insertion order."""
        return await self._read()

    async def find_by_url(self, url: str) -> TrackedItem | None:
        """Return the item tracked under *url* (canonicalised first)."""
        canonical = canonicalize_url(url)
        for item in await self._read():
            if item.url == canonical:
                return item
        return None

    async def add(self, url: str) -> TrackedItem:
        """Start tracking *url* as a pending item.

        Raises:
            AlreadyTrackedError: if the canonical URL is already tracked.
        """
        canonical = canonicalize_url(url)
        async with self._collection_lock:
            items = await self._read()
            if any(i.url == canonical for i in items):
                raise AlreadyTrackedError(canonical)
            item = TrackedItem(url=canonical)
            items.append(item)
            await self._write(items)
        logger.info("Now tracking %s", canonical)
        return item

    async def remove(self, key: int | str) -> TrackedItem | None:
        """Stop tracking an item given its list index or its URL."""
        async with self._collection_lock:
            items = await self._read()
            if isinstance(key, int):
                if not 0 <= key < len(items):
                    return None
                removed = items.pop(key)
            else:
                canonical = canonicalize_url(key)
                matches = [i for i in items if i.url == canonical]
                if not matches:
                    return None
                removed = matches[0]
                items = [i for i in items if i.url != canonical]
            await self._write(items)
        self._url_locks.pop(removed.url, None)
        logger.info("Stopped tracking %s", removed.url)
        return removed

    async def update_in_place(
        self, url: str, mutator: ItemMutator,
    ) -> TrackedItem | None:
        """Apply *mutator* to the item for *url* and persist the result.

        The mutator receives the current item and returns its
        replacement, or ``None`` to leave the store untouched.  Returns
        the stored item, or ``None`` when *url* is not tracked or the
        mutator declined.  Exceptions raised by the mutator propagate
        and nothing is written.
        """
        canonical = canonicalize_url(url)
        # Locks exist only for tracked URLs; stray records allocate nothing
        if canonical not in self._url_locks:
            if await self.find_by_url(canonical) is None:
                logger.debug("Update for untracked %s skipped", canonical)
                return None
        async with self._url_lock(canonical):
            async with self._collection_lock:
                items = await self._read()
                for idx, item in enumerate(items):
                    if item.url == canonical:
                        break
                else:
                    return None

                updated = mutator(item)
                if updated is None:
                    return None
                items[idx] = updated
                await self._write(items)
                return updated
