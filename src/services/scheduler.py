# src/services/scheduler.py

"""Periodic price-check trigger built on APScheduler."""

import logging
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from src.config.settings import Settings
from src.services.price_tracker import PriceTracker

logger = logging.getLogger("price_watch.scheduler")

JOB_ID = "check_prices"


class PriceCheckScheduler:
    """Fires :meth:`PriceTracker.request_check` on a fixed interval.

    A tick only schedules the pass; the cycles themselves run as
    independent tasks, so a slow product never delays the next tick.
    """

    def __init__(
        self,
        tracker: PriceTracker,
        interval_hours: float | None = None,
        run_on_start: bool | None = None,
    ) -> None:
        self.tracker = tracker
        self.interval_hours = (
            Settings.CHECK_INTERVAL_HOURS
            if interval_hours is None
            else interval_hours
        )
        self.run_on_start = (
            Settings.CHECK_ON_START
            if run_on_start is None
            else run_on_start
        )
        self.scheduler = AsyncIOScheduler(timezone="UTC")
        self.ticks: int = 0

    async def _tick(self) -> None:
        """Scheduled job body."""
        self.ticks += 1
        ack = self.tracker.request_check()
        logger.info("Scheduled check #%d: %s", self.ticks, ack["status"])

    def start(self) -> None:
        """Register the interval job and start the scheduler.

        Must be called from inside a running event loop.
        """
        if self.scheduler.running:
            logger.warning("Scheduler already running")
            return
        next_run = (
            datetime.now(timezone.utc) if self.run_on_start else None
        )
        job_kwargs = {"next_run_time": next_run} if next_run else {}
        self.scheduler.add_job(
            self._tick,
            IntervalTrigger(hours=self.interval_hours),
            id=JOB_ID,
            replace_existing=True,
            coalesce=True,
            max_instances=1,
            **job_kwargs,
        )
        self.scheduler.start()
        logger.info(
            "Scheduler started: every %.1fh (run on start: %s)",
            self.interval_hours,
            self.run_on_start,
        )

    def stop(self) -> None:
        """Shut the scheduler down without waiting for running jobs."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")
