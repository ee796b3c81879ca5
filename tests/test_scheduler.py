"""Tests for BatchScheduler: batching, pacing, fault isolation, persistence."""

import random
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from pricewatch.core.exceptions import RecordStoreError
from pricewatch.schemas import Vendor, VendorURLTask
from pricewatch.scrapers.base import ExtractionResult, ScrapeOutcome
from pricewatch.scrapers.scheduler import BatchScheduler, RunSummary, uniform_delay
from pricewatch.scrapers.vendor_scraper import VendorScraper
from tests.conftest import FakeBrowser, FakePage, InMemoryStore, ScriptedScraper

VENDORS = [Vendor(id=1, name="Galaxus"), Vendor(id=2, name="Brack")]
SUCCESS = ScrapeOutcome.success(ExtractionResult(Decimal("49.90"), True, "css_selectors"))


def make_tasks(count: int, vendor_id=1):
    return [
        VendorURLTask(url=f"https://shop.example.com/p/{i}", vendor_id=vendor_id, product_id=i)
        for i in range(count)
    ]


class StepClock:
    """Returns a strictly increasing timestamp per call."""

    def __init__(self):
        self.now = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        self.now += timedelta(seconds=1)
        return self.now


def make_scheduler(store, scraper, fake_sleep, **kwargs) -> BatchScheduler:
    kwargs.setdefault("delay_policy", lambda: 2.5)
    return BatchScheduler(store, scraper, sleep=fake_sleep, **kwargs)


# ============================================================================
# BATCHING AND PACING
# ============================================================================

class TestBatching:
    async def test_twelve_tasks_make_three_batches(self, fake_sleep):
        store = InMemoryStore(VENDORS, make_tasks(12))
        scraper = ScriptedScraper(default=SUCCESS)

        summary = await make_scheduler(store, scraper, fake_sleep).run()

        assert summary.batches == 3
        assert summary.total_tasks == 12
        assert len(scraper.calls) == 12

    async def test_pause_between_batches_only(self, fake_sleep):
        store = InMemoryStore(VENDORS, make_tasks(11))
        scraper = ScriptedScraper(default=SUCCESS)

        await make_scheduler(store, scraper, fake_sleep).run()

        # 3 batches, no pause after the last one
        assert fake_sleep.calls == [2.5, 2.5]

    async def test_single_batch_never_pauses(self, fake_sleep):
        store = InMemoryStore(VENDORS, make_tasks(5))

        summary = await make_scheduler(store, ScriptedScraper(default=SUCCESS), fake_sleep).run()

        assert summary.batches == 1
        assert fake_sleep.calls == []

    async def test_next_batch_waits_for_previous(self, fake_sleep):
        tasks = make_tasks(10)
        store = InMemoryStore(VENDORS, tasks)
        scraper = ScriptedScraper(default=SUCCESS)

        await make_scheduler(store, scraper, fake_sleep).run()

        first_batch = {task.url for task in tasks[:5]}
        second_batch = {task.url for task in tasks[5:]}
        last_end_first = max(
            i for i, (kind, url) in enumerate(scraper.events) if kind == "end" and url in first_batch
        )
        first_start_second = min(
            i for i, (kind, url) in enumerate(scraper.events) if kind == "start" and url in second_batch
        )
        assert last_end_first < first_start_second

    async def test_batch_tasks_run_concurrently(self, fake_sleep):
        tasks = make_tasks(5)
        scraper = ScriptedScraper(default=SUCCESS)

        await make_scheduler(InMemoryStore(VENDORS, tasks), scraper, fake_sleep).run()

        # Every task starts before any task of the batch finishes
        kinds = [kind for kind, _ in scraper.events]
        assert kinds == ["start"] * 5 + ["end"] * 5

    async def test_custom_batch_size(self, fake_sleep):
        store = InMemoryStore(VENDORS, make_tasks(7))

        summary = await make_scheduler(
            store, ScriptedScraper(default=SUCCESS), fake_sleep, batch_size=2
        ).run()

        assert summary.batches == 4
        assert len(fake_sleep.calls) == 3

    def test_invalid_batch_size(self):
        with pytest.raises(ValueError):
            BatchScheduler(InMemoryStore(), ScriptedScraper(), batch_size=0)


# ============================================================================
# FAULT ISOLATION
# ============================================================================

class TestFaultIsolation:
    async def test_crashing_task_does_not_affect_siblings(self, fake_sleep):
        tasks = make_tasks(5)
        scraper = ScriptedScraper(
            outcomes={tasks[2].url: RuntimeError("boom")},
            default=SUCCESS,
        )
        store = InMemoryStore(VENDORS, tasks)

        summary = await make_scheduler(store, scraper, fake_sleep).run()

        assert summary.crashed == 1
        assert summary.succeeded == 4
        assert len(store.records) == 4
        assert tasks[2].product_id not in {record.product_id for record in store.records}

    async def test_failed_batch_does_not_stop_run(self, fake_sleep):
        tasks = make_tasks(10)
        scraper = ScriptedScraper(
            outcomes={task.url: RuntimeError("boom") for task in tasks[:5]},
            default=SUCCESS,
        )
        store = InMemoryStore(VENDORS, tasks)

        summary = await make_scheduler(store, scraper, fake_sleep).run()

        assert summary.crashed == 5
        assert summary.persisted == 5

    async def test_mixed_outcomes_counted(self, fake_sleep):
        tasks = make_tasks(4)
        scraper = ScriptedScraper(outcomes={
            tasks[0].url: SUCCESS,
            tasks[1].url: ScrapeOutcome.blocked(),
            tasks[2].url: ScrapeOutcome.not_found(),
            tasks[3].url: ScrapeOutcome.failed(TimeoutError("slow")),
        })
        store = InMemoryStore(VENDORS, tasks)

        summary = await make_scheduler(store, scraper, fake_sleep).run()

        assert (summary.succeeded, summary.blocked, summary.not_found, summary.errors) == (1, 1, 1, 1)
        assert [record.product_id for record in store.records] == [tasks[0].product_id]

    async def test_real_scraper_errors_are_contained(self, fake_sleep, chain):
        browser = FakeBrowser(FakePage(goto_error=TimeoutError("Timeout 45000ms exceeded")))
        scraper = VendorScraper(browser, chain=chain)
        store = InMemoryStore(VENDORS, make_tasks(3))

        summary = await make_scheduler(store, scraper, fake_sleep).run()

        assert summary.errors == 3
        assert store.records == []
        assert all(context.closed for context in browser.contexts)


# ============================================================================
# VENDOR LOOKUP AND PERSISTENCE
# ============================================================================

class TestPersistence:
    async def test_unknown_vendor_skipped_without_navigation(self, fake_sleep):
        known = make_tasks(1, vendor_id=1)
        orphan = [VendorURLTask(url="https://other.example.com/p/9", vendor_id=99, product_id=9)]
        scraper = ScriptedScraper(default=SUCCESS)
        store = InMemoryStore(VENDORS, known + orphan)

        summary = await make_scheduler(store, scraper, fake_sleep).run()

        assert summary.skipped == 1
        assert scraper.calls == [known[0].url]
        assert len(store.records) == 1

    async def test_vendor_lookup_across_id_types(self, fake_sleep):
        tasks = [VendorURLTask(url="https://shop.example.com/p/1", vendor_id="2", product_id="abc")]
        store = InMemoryStore(VENDORS, tasks)

        summary = await make_scheduler(store, ScriptedScraper(default=SUCCESS), fake_sleep).run()

        assert summary.skipped == 0
        assert store.records[0].vendor_id == "2"
        assert store.records[0].product_id == "abc"

    async def test_record_contents(self, fake_sleep):
        tasks = [VendorURLTask(url="https://www.galaxus.ch/p/1", vendor_id=1, product_id=42)]
        store = InMemoryStore(VENDORS, tasks)
        clock = StepClock()

        await make_scheduler(store, ScriptedScraper(default=SUCCESS), fake_sleep, clock=clock).run()

        record = store.records[0]
        assert record.product_id == 42
        assert record.vendor_id == 1
        assert record.price == Decimal("49.90")
        assert record.availability is True
        assert record.scraped_at == clock.now

    async def test_two_runs_append_two_records(self, fake_sleep):
        tasks = make_tasks(1)
        store = InMemoryStore(VENDORS, tasks)
        scheduler = make_scheduler(store, ScriptedScraper(default=SUCCESS), fake_sleep, clock=StepClock())

        await scheduler.run()
        await scheduler.run()

        assert len(store.records) == 2
        assert store.records[0].scraped_at < store.records[1].scraped_at

    async def test_write_failure_counted_and_run_continues(self, fake_sleep):
        store = InMemoryStore(
            VENDORS,
            make_tasks(3),
            write_error=RecordStoreError("insert into product_prices", "HTTP 500"),
        )

        summary = await make_scheduler(store, ScriptedScraper(default=SUCCESS), fake_sleep).run()

        assert summary.write_failures == 3
        assert summary.persisted == 0
        assert summary.succeeded == 3


# ============================================================================
# TASK LIST
# ============================================================================

class TestTaskList:
    async def test_empty_task_list(self, fake_sleep):
        scraper = ScriptedScraper(default=SUCCESS)

        summary = await make_scheduler(InMemoryStore(VENDORS, []), scraper, fake_sleep).run()

        assert summary == RunSummary()
        assert scraper.calls == []
        assert fake_sleep.calls == []

    async def test_run_tasks_uses_given_lists(self, fake_sleep):
        # The store would fail any read; preloaded lists bypass it
        store = InMemoryStore(read_error=RecordStoreError("read of vendors", "HTTP 503"))
        scraper = ScriptedScraper(default=SUCCESS)
        tasks = make_tasks(2)

        summary = await make_scheduler(store, scraper, fake_sleep).run_tasks(VENDORS, tasks)

        assert summary.persisted == 2
        assert scraper.calls == [task.url for task in tasks]

    async def test_read_failure_raises(self, fake_sleep):
        store = InMemoryStore(read_error=RecordStoreError("read of vendor_urls", "HTTP 401"))
        scraper = ScriptedScraper(default=SUCCESS)

        with pytest.raises(RecordStoreError):
            await make_scheduler(store, scraper, fake_sleep).run()

        assert scraper.calls == []


# ============================================================================
# DELAY POLICY
# ============================================================================

class TestUniformDelay:
    def test_within_bounds(self):
        policy = uniform_delay(1.0, 4.0, rng=random.Random(3))
        assert all(1.0 <= policy() <= 4.0 for _ in range(100))

    def test_fixed_delay(self):
        assert uniform_delay(2.0, 2.0)() == 2.0

    @pytest.mark.parametrize("low,high", [(-1.0, 2.0), (3.0, 1.0)])
    def test_invalid_range(self, low, high):
        with pytest.raises(ValueError):
            uniform_delay(low, high)
