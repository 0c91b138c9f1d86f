"""
Poll scheduler driving the event indexer on a fixed interval.
"""

import asyncio
from typing import Any, Dict, Optional
from datetime import datetime, timezone
from dataclasses import dataclass, asdict
from enum import Enum

import structlog

from stablelink.core.config import settings
from stablelink.indexer.core import EventIndexer, PassResult, create_event_indexer


logger = structlog.get_logger(__name__)


class SchedulerStatus(Enum):
    """Status of the poll scheduler."""
    STOPPED = "stopped"
    IDLE = "idle"
    RUNNING = "running"


@dataclass
class SchedulerStats:
    """Statistics for scheduled indexing passes."""
    total_runs: int = 0
    successful_runs: int = 0
    failed_runs: int = 0
    skipped_ticks: int = 0
    start_time: Optional[datetime] = None
    last_run: Optional[datetime] = None
    last_error: Optional[str] = None
    last_result: Optional[Dict[str, Any]] = None


class PollScheduler:
    """
    Runs one indexing pass per tick.

    A tick that arrives while a pass is still running is skipped. A failed
    pass is logged and counted, and the scheduler goes back to idle.
    """

    def __init__(self, indexer: EventIndexer, interval: Optional[float] = None):
        self.logger = logger.bind(service="poll_scheduler")
        self.status = SchedulerStatus.STOPPED
        self.stats = SchedulerStats()

        self.indexer = indexer
        self.interval = interval or settings.indexer_poll_interval

        # Control flags
        self._running = False
        self._should_stop = False
        self._scheduler_task: Optional[asyncio.Task] = None
        self._pass_task: Optional[asyncio.Task] = None

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.shutdown()

    async def initialize(self):
        """
        Initialize the indexer behind the scheduler.

        Never fatal: if the chain or database is unreachable now, every
        pass creates the checkpoint itself, so the first tick retries.
        """
        self.stats.start_time = datetime.now(timezone.utc)
        try:
            await self.indexer.initialize()
            self.logger.info("Poll scheduler initialized", interval=self.interval)

        except Exception as e:
            self.stats.last_error = str(e)
            self.logger.warning(
                "Indexer initialization failed, retrying on next tick",
                error=str(e),
                error_type=type(e).__name__
            )

    async def start(self):
        """Start ticking. The first pass runs immediately."""
        if self._running:
            self.logger.warning("Poll scheduler already running")
            return

        self._should_stop = False
        self._running = True
        self.status = SchedulerStatus.IDLE
        self._scheduler_task = asyncio.create_task(self._scheduler_loop())

        self.logger.info("Poll scheduler started", interval=self.interval)

    async def stop(self):
        """Stop ticking and cancel a pass in progress."""
        if not self._running and self._scheduler_task is None:
            return

        self.logger.info("Stopping poll scheduler")
        self._should_stop = True
        self._running = False

        for task in (self._scheduler_task, self._pass_task):
            if task and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass

        self._scheduler_task = None
        self._pass_task = None
        self.status = SchedulerStatus.STOPPED
        self.logger.info("Poll scheduler stopped")

    async def shutdown(self):
        """Stop the scheduler and release the indexer."""
        await self.stop()
        await self.indexer.shutdown()
        self.logger.info("Poll scheduler shutdown complete")

    async def _scheduler_loop(self):
        """Main scheduler loop."""
        while not self._should_stop:
            try:
                self.trigger()
                await asyncio.sleep(self.interval)

            except asyncio.CancelledError:
                self.logger.info("Poll scheduler loop cancelled")
                break

    def trigger(self) -> Optional[asyncio.Task]:
        """
        Launch a pass unless one is already running.

        The status flips to running before the task is created, so a second
        trigger in the same tick sees it.

        Returns:
            The pass task, or None if the tick was skipped
        """
        if self.status == SchedulerStatus.RUNNING:
            self.stats.skipped_ticks += 1
            self.logger.warning(
                "Previous pass still running, skipping tick",
                skipped_ticks=self.stats.skipped_ticks
            )
            return None

        self.status = SchedulerStatus.RUNNING
        self._pass_task = asyncio.create_task(self._execute_pass())
        return self._pass_task

    async def run_once(self) -> Optional[PassResult]:
        """Run a pass now and wait for it. Returns None if one was already running."""
        task = self.trigger()
        if task is None:
            return None
        return await task

    async def _execute_pass(self) -> Optional[PassResult]:
        self.stats.total_runs += 1
        self.stats.last_run = datetime.now(timezone.utc)

        try:
            result = await self.indexer.run_pass()
            self.stats.successful_runs += 1
            self.stats.last_result = asdict(result)
            return result

        except asyncio.CancelledError:
            raise

        except Exception as e:
            self.stats.failed_runs += 1
            self.stats.last_error = str(e)
            self.logger.error(
                "Indexing pass failed",
                error=str(e),
                error_type=type(e).__name__,
                failed_runs=self.stats.failed_runs
            )
            return None

        finally:
            self.status = SchedulerStatus.IDLE if self._running else SchedulerStatus.STOPPED

    async def get_status(self) -> Dict[str, Any]:
        """Get scheduler status, statistics and indexer status."""
        return {
            "status": self.status.value,
            "running": self._running,
            "interval": self.interval,
            "stats": asdict(self.stats),
            "indexer": await self.indexer.get_status(),
        }


# Global scheduler instance
_poll_scheduler: Optional[PollScheduler] = None


async def get_poll_scheduler() -> PollScheduler:
    """Get or create a global poll scheduler instance."""
    global _poll_scheduler
    if _poll_scheduler is None:
        indexer = await create_event_indexer()
        scheduler = PollScheduler(indexer)
        await scheduler.initialize()
        _poll_scheduler = scheduler
    return _poll_scheduler


def peek_poll_scheduler() -> Optional[PollScheduler]:
    """Global scheduler if one was created, without creating it."""
    return _poll_scheduler


async def shutdown_poll_scheduler():
    """Shutdown the global poll scheduler instance."""
    global _poll_scheduler
    if _poll_scheduler:
        await _poll_scheduler.shutdown()
        _poll_scheduler = None
