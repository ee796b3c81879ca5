"""Batch scheduler for vendor scrape tasks.

This module drives one full scraping run:
- loads the vendor registry and the vendor URL task list from the record store
- runs tasks in fixed-size batches, all tasks of a batch concurrently
- appends a price record for every successful scrape
- pauses a randomized delay between batches to keep the request rate low
"""

import asyncio
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, List, Optional

import structlog

from pricewatch.core.exceptions import RecordStoreError
from pricewatch.schemas import PriceRecord, Vendor, VendorURLTask
from pricewatch.scrapers.base import ScrapeStatus
from pricewatch.scrapers.vendor_scraper import VendorScraper
from pricewatch.stores.base import RecordStore

logger = structlog.get_logger(__name__)

DelayPolicy = Callable[[], float]

DEFAULT_BATCH_SIZE = 5


def uniform_delay(
    min_seconds: float = 1.0,
    max_seconds: float = 4.0,
    rng: Optional[random.Random] = None,
) -> DelayPolicy:
    """Build a delay policy drawing uniformly from [min_seconds, max_seconds].

    Args:
        min_seconds: Lower bound of the pause
        max_seconds: Upper bound of the pause
        rng: Random source (defaults to the module-level one)

    Returns:
        Zero-argument callable returning a pause in seconds
    """
    if min_seconds < 0 or max_seconds < min_seconds:
        raise ValueError(f"Invalid delay range: {min_seconds}-{max_seconds}")
    source = rng or random

    def policy() -> float:
        return source.uniform(min_seconds, max_seconds)

    return policy


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class RunSummary:
    """Counters for one scheduler run."""

    total_tasks: int = 0
    batches: int = 0
    succeeded: int = 0
    blocked: int = 0
    not_found: int = 0
    errors: int = 0
    skipped: int = 0  # Unknown vendor, never navigated
    crashed: int = 0  # Unexpected exception outside the scrape task
    persisted: int = 0
    write_failures: int = 0

    def record(self, status: ScrapeStatus) -> None:
        if status is ScrapeStatus.SUCCESS:
            self.succeeded += 1
        elif status is ScrapeStatus.BLOCKED:
            self.blocked += 1
        elif status is ScrapeStatus.NOT_FOUND:
            self.not_found += 1
        else:
            self.errors += 1

    def as_dict(self) -> Dict[str, int]:
        return {
            "total_tasks": self.total_tasks,
            "batches": self.batches,
            "succeeded": self.succeeded,
            "blocked": self.blocked,
            "not_found": self.not_found,
            "errors": self.errors,
            "skipped": self.skipped,
            "crashed": self.crashed,
            "persisted": self.persisted,
            "write_failures": self.write_failures,
        }


class BatchScheduler:
    """Runs every vendor URL task once, in paced concurrent batches.

    This scheduler:
    - Never lets one task's failure cancel or delay its batch siblings
    - Never starts batch N+1 before every task of batch N has settled
    - Skips tasks whose vendor is missing from the registry
    - Persists only successful scrapes, one append per success
    """

    def __init__(
        self,
        store: RecordStore,
        scraper: VendorScraper,
        batch_size: int = DEFAULT_BATCH_SIZE,
        delay_policy: Optional[DelayPolicy] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """Initialize the scheduler.

        Args:
            store: Record store for reading tasks and appending prices
            scraper: Scraper used for each task URL
            batch_size: Number of tasks run concurrently per batch
            delay_policy: Returns the pause between batches (default 1-4s uniform)
            sleep: Awaitable sleep function, replaceable in tests
            clock: Returns the timestamp stored on each price record
        """
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.store = store
        self.scraper = scraper
        self.batch_size = batch_size
        self.delay_policy = delay_policy or uniform_delay()
        self._sleep = sleep
        self._clock = clock
        self.logger = logger.bind(service="batch_scheduler")

    async def run(self) -> RunSummary:
        """Execute one full scraping run.

        Returns:
            RunSummary with per-outcome counters

        Raises:
            RecordStoreError: If the vendor registry or task list cannot be read
        """
        vendors = await self.store.fetch_vendors()
        tasks = await self.store.fetch_tasks()
        return await self.run_tasks(vendors, tasks)

    async def run_tasks(
        self,
        vendors: List[Vendor],
        tasks: List[VendorURLTask],
    ) -> RunSummary:
        """Execute a run over an already loaded registry and task list.

        Args:
            vendors: Vendor registry
            tasks: Vendor URL tasks, in store order

        Returns:
            RunSummary with per-outcome counters
        """
        summary = RunSummary()
        summary.total_tasks = len(tasks)

        if not tasks:
            self.logger.warning("no_tasks_found")
            return summary

        registry = {str(vendor.id): vendor for vendor in vendors}
        batches = self._split(tasks)
        self.logger.info(
            "run_started",
            tasks=len(tasks),
            vendors=len(registry),
            batches=len(batches),
            batch_size=self.batch_size,
        )

        for index, batch in enumerate(batches, start=1):
            await self._run_batch(index, batch, registry, summary)
            summary.batches += 1

            if index < len(batches):
                delay = self.delay_policy()
                self.logger.info("batch_pause", seconds=round(delay, 2))
                await self._sleep(delay)

        self.logger.info("run_completed", **summary.as_dict())
        return summary

    def _split(self, tasks: List[VendorURLTask]) -> List[List[VendorURLTask]]:
        return [
            tasks[i:i + self.batch_size]
            for i in range(0, len(tasks), self.batch_size)
        ]

    async def _run_batch(
        self,
        index: int,
        batch: List[VendorURLTask],
        registry: Dict[str, Vendor],
        summary: RunSummary,
    ) -> None:
        """Run one batch and return only once every task has settled."""
        self.logger.info("batch_started", batch=index, size=len(batch))

        async with asyncio.TaskGroup() as group:
            for task in batch:
                group.create_task(self._run_task_safely(task, registry, summary))

        self.logger.info("batch_finished", batch=index, size=len(batch))

    async def _run_task_safely(
        self,
        task: VendorURLTask,
        registry: Dict[str, Vendor],
        summary: RunSummary,
    ) -> None:
        """Wrapper that keeps an unexpected exception from cancelling the batch."""
        try:
            await self._run_task(task, registry, summary)
        except Exception as e:
            summary.crashed += 1
            self.logger.error(
                "task_crashed",
                url=task.url,
                error=str(e),
                exc_info=True,
            )

    async def _run_task(
        self,
        task: VendorURLTask,
        registry: Dict[str, Vendor],
        summary: RunSummary,
    ) -> None:
        log = self.logger.bind(
            url=task.url,
            vendor_id=task.vendor_id,
            product_id=task.product_id,
        )

        vendor = registry.get(str(task.vendor_id))
        if vendor is None:
            summary.skipped += 1
            log.warning("vendor_not_found")
            return

        log.info("task_processing", vendor=vendor.name)
        outcome = await self.scraper.scrape(task.url)
        summary.record(outcome.status)

        if not outcome.ok:
            log.warning("task_unsuccessful", status=outcome.status.value, error=outcome.error)
            return

        record = PriceRecord(
            product_id=task.product_id,
            vendor_id=task.vendor_id,
            price=outcome.result.price,
            availability=outcome.result.availability,
            scraped_at=self._clock(),
        )
        try:
            await self.store.append_price(record)
        except RecordStoreError as e:
            summary.write_failures += 1
            log.error("price_record_write_failed", error=str(e))
            return

        summary.persisted += 1
        log.info(
            "price_record_saved",
            price=str(record.price),
            availability=record.availability,
        )
