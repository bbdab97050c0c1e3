# src/services/price_tracker.py

"""Orchestrates fetch-extract-update cycles for every tracked product."""

import asyncio
import logging
from collections.abc import Coroutine
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from src.config.settings import Settings
from src.extractors.product_extractor import ProductExtractor
from src.filters.price_normalizer import PriceNormalizationError, has_price
from src.filters.url_normalizer import validate_product_url
from src.models.extracted_record import ExtractedRecord
from src.models.tracked_item import TrackedItem
from src.services.change_detector import ChangeResult, evaluate
from src.services.fetch_provider import (
    CurlFetchProvider,
    FetchHandle,
    FetchProvider,
)
from src.services.notifier import ConsoleNotifier, NotificationSink
from src.storage.history_log import HistoryLog
from src.storage.kv_store import KeyValueStore
from src.storage.tracked_store import TrackedItemStore

logger = logging.getLogger("price_watch.tracker")


class CycleState(Enum):
    """Where a single check cycle is (or where it stopped)."""

    IDLE = auto()
    FETCHING = auto()
    EXTRACTING = auto()
    UPDATING = auto()
    TIMED_OUT = auto()


@dataclass
class CycleReport:
    """Summary of one fetch-extract-update cycle."""

    url: str
    state: CycleState = CycleState.IDLE
    handle_id: int | None = None
    record: ExtractedRecord | None = None
    updated: bool = False
    error: str = ""

    @property
    def timed_out(self) -> bool:
        return self.state is CycleState.TIMED_OUT


class PriceTracker:
    """Runs check cycles and feeds their results into the store.

    Cycles are fire-and-forget: :meth:`request_check` schedules a pass
    and returns at once, and each tracked product gets its own task,
    fetch handle and failsafe timer.  :meth:`wait_idle` lets callers
    that need completion (the CLI, tests) wait for everything in flight.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        fetcher: FetchProvider | None = None,
        notifier: NotificationSink | None = None,
        extractor: ProductExtractor | None = None,
        settle_delay: float | None = None,
        failsafe_timeout: float | None = None,
    ) -> None:
        self.settings = Settings()
        self.items = TrackedItemStore(kv)
        self.history = HistoryLog(kv)
        self.fetcher = fetcher or CurlFetchProvider()
        self.notifier = notifier or ConsoleNotifier()
        self.extractor = extractor or ProductExtractor()
        self.settle_delay = (
            self.settings.SETTLE_DELAY
            if settle_delay is None
            else settle_delay
        )
        self.failsafe_timeout = (
            self.settings.FAILSAFE_TIMEOUT
            if failsafe_timeout is None
            else failsafe_timeout
        )
        self._tasks: set[asyncio.Task[Any]] = set()

    # ── Private helpers ──────────────────────────────────

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        """Start *coro* as a background task and keep a reference to it."""
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _failsafe(self, handle: FetchHandle, report: CycleReport) -> None:
        """Timer callback: force-close a handle that outlived its budget."""
        if handle.closed:
            return
        logger.warning(
            "[%d] Failsafe closing %s after %.1fs",
            handle.handle_id,
            handle.url,
            self.failsafe_timeout,
        )
        report.state = CycleState.TIMED_OUT
        self.fetcher.close(handle)

    async def _fetch_and_extract(
        self, report: CycleReport,
    ) -> ExtractedRecord | None:
        """Open the page, let it settle, extract, and always release the handle."""
        loop = asyncio.get_running_loop()
        report.state = CycleState.FETCHING
        handle = self.fetcher.open(report.url)
        report.handle_id = handle.handle_id
        timer = loop.call_later(
            self.failsafe_timeout, self._failsafe, handle, report,
        )
        try:
            await handle.wait_settled()
            if handle.closed:
                report.state = CycleState.TIMED_OUT
                return None
            if handle.content is None:
                logger.info(
                    "[%d] Load failed for %s", handle.handle_id, report.url,
                )
                report.state = CycleState.IDLE
                return None

            await asyncio.sleep(self.settle_delay)
            if handle.closed:
                report.state = CycleState.TIMED_OUT
                return None

            report.state = CycleState.EXTRACTING
            record = await asyncio.to_thread(
                self.extractor.extract, handle.content,
            )
            if report.timed_out:
                return None
            return record
        finally:
            timer.cancel()
            self.fetcher.close(handle)

    async def _apply_record(
        self, record: ExtractedRecord,
    ) -> TrackedItem | None:
        """Run the change detector for *record* under the item's lock."""
        if not has_price(record.raw_price):
            logger.debug(
                "Ignoring record without a price for %s",
                record.canonical_url,
            )
            return None

        results: list[ChangeResult] = []

        def mutate(item: TrackedItem) -> TrackedItem:
            result = evaluate(item, record)
            results.append(result)
            return result.item

        try:
            updated = await self.items.update_in_place(
                record.canonical_url, mutate,
            )
        except PriceNormalizationError as exc:
            logger.warning(
                "Rejected price %r for %s: %s",
                record.raw_price,
                record.canonical_url,
                exc,
            )
            return None

        if updated is None:
            logger.debug(
                "Record for untracked URL %s dropped",
                record.canonical_url,
            )
            return None

        result = results[-1]
        if result.history_entry is not None:
            await self.history.append(result.history_entry)
        if result.notification is not None:
            self.notifier.notify(result.notification)
        return updated

    # ── Check cycles ─────────────────────────────────────

    async def check_item(self, url: str) -> CycleReport:
        """Run one full cycle for *url*.  Never raises."""
        report = CycleReport(url=url)
        try:
            record = await self._fetch_and_extract(report)
            if report.timed_out:
                return report
            if record is None:
                report.state = CycleState.IDLE
                return report

            report.record = record
            report.state = CycleState.UPDATING
            report.updated = await self._apply_record(record) is not None
            report.state = CycleState.IDLE
        except Exception as exc:
            report.error = str(exc)
            logger.error(
                "Check cycle failed for %s: %s", url, exc, exc_info=True,
            )
        return report

    async def check_all(self) -> list[asyncio.Task[Any]]:
        """Launch a cycle for every tracked item without waiting for them."""
        items = await self.items.list()
        logger.info("Starting check pass over %d items", len(items))
        return [self._spawn(self.check_item(i.url)) for i in items]

    async def wait_idle(self) -> None:
        """Wait until no check pass or cycle is in flight."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ── Inbound requests ─────────────────────────────────

    def request_check(self) -> dict[str, str]:
        """Schedule a check pass over all items and acknowledge at once."""
        self._spawn(self.check_all())
        return {"status": "started"}

    async def item_extracted(
        self, record: ExtractedRecord,
    ) -> TrackedItem | None:
        """Feed an extraction reported from elsewhere into the pipeline."""
        return await self._apply_record(record)

    async def add_product(self, url: str) -> TrackedItem:
        """Validate and track *url*, then kick off a check pass.

        Raises:
            InvalidProductUrlError: if *url* is not a product page.
            AlreadyTrackedError: if the product is already tracked.
        """
        canonical = validate_product_url(url)
        item = await self.items.add(canonical)
        self.request_check()
        return item

    async def remove_product(self, key: int | str) -> TrackedItem | None:
        """Stop tracking by list index or URL."""
        return await self.items.remove(key)

    async def aclose(self) -> None:
        """Wait for in-flight cycles and release the fetcher."""
        await self.wait_idle()
        await self.fetcher.aclose()
