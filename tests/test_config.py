"""Tests for settings, exceptions and the runner exit status."""

import pytest
from pydantic import ValidationError

from pricewatch import runner
from pricewatch.config import Settings
from pricewatch.core.exceptions import ConfigurationError, NavigationError, RecordStoreError
from pricewatch.schemas import Vendor, VendorURLTask
from pricewatch.scrapers.scheduler import RunSummary
from tests.conftest import InMemoryStore


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestSettings:
    def test_defaults(self):
        config = make_settings()

        assert config.BATCH_SIZE == 5
        assert config.BATCH_DELAY_MIN_SECONDS == 1.0
        assert config.BATCH_DELAY_MAX_SECONDS == 4.0
        assert config.NAVIGATION_TIMEOUT_MS == 45000
        assert config.STRUCTURED_DATA_ATTEMPTS == 3

    @pytest.mark.parametrize(
        "raw",
        ["postgresql://user:pw@db.example.com:5432/prices", "postgres://user:pw@db.example.com:5432/prices"],
    )
    def test_postgres_url_uses_asyncpg(self, raw):
        config = make_settings(DATABASE_URL=raw)
        assert config.DATABASE_URL == "postgresql+asyncpg://user:pw@db.example.com:5432/prices"

    def test_validators_apply_to_environment(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgres://user:pw@db.example.com/prices")
        monkeypatch.setenv("BATCH_DELAY_MIN_SECONDS", "2.0")
        monkeypatch.setenv("BATCH_DELAY_MAX_SECONDS", "3.0")

        config = make_settings()

        assert config.DATABASE_URL == "postgresql+asyncpg://user:pw@db.example.com/prices"
        assert (config.BATCH_DELAY_MIN_SECONDS, config.BATCH_DELAY_MAX_SECONDS) == (2.0, 3.0)

    def test_sqlite_url_unchanged(self):
        config = make_settings(DATABASE_URL="sqlite+aiosqlite:///./local.db")
        assert config.DATABASE_URL == "sqlite+aiosqlite:///./local.db"

    def test_delay_range_checked(self):
        with pytest.raises(ValidationError):
            make_settings(BATCH_DELAY_MIN_SECONDS=5.0, BATCH_DELAY_MAX_SECONDS=1.0)

    def test_batch_size_positive(self):
        with pytest.raises(ValidationError):
            make_settings(BATCH_SIZE=0)

    def test_missing_supabase_credentials(self):
        config = make_settings(RECORD_STORE="supabase", SUPABASE_URL="https://x.supabase.co", SUPABASE_KEY="")

        with pytest.raises(ConfigurationError) as exc_info:
            config.validate_credentials()

        assert "SUPABASE_KEY" in exc_info.value.message
        assert "SUPABASE_URL" not in exc_info.value.message

    def test_supabase_credentials_present(self):
        make_settings(SUPABASE_URL="https://x.supabase.co", SUPABASE_KEY="k").validate_credentials()

    def test_database_store_needs_no_supabase(self):
        make_settings(RECORD_STORE="database", SUPABASE_URL="", SUPABASE_KEY="").validate_credentials()


class TestExceptions:
    def test_record_store_error_message(self):
        error = RecordStoreError("read of vendors", "HTTP 503")
        assert error.operation == "read of vendors"
        assert str(error) == "Record store read of vendors failed: HTTP 503"

    def test_navigation_error_message(self):
        assert "no response" in str(NavigationError("https://a.example"))
        assert "status 404" in str(NavigationError("https://a.example", status=404))


class FakeBrowserManager:
    """Stands in for BrowserManager and records every launch."""

    launches = []

    def __init__(self, headless=True):
        self.headless = headless

    async def __aenter__(self):
        FakeBrowserManager.launches.append(self.headless)
        return object()

    async def __aexit__(self, exc_type, exc, tb):
        return None


VENDORS = [Vendor(id=1, name="Galaxus")]
TASKS = [VendorURLTask(url="https://www.galaxus.ch/p/1", vendor_id=1, product_id=1)]


class TestRun:
    """Test runner.run exit status with the browser and store swapped out."""

    @pytest.fixture
    def patched(self, monkeypatch):
        monkeypatch.setattr(FakeBrowserManager, "launches", [])
        scheduled = []

        def install(store, summary=None):
            monkeypatch.setattr(runner, "create_record_store", lambda config: store)
            monkeypatch.setattr(runner, "BrowserManager", FakeBrowserManager)

            async def fake_run_tasks(self, vendors, tasks):
                scheduled.append((vendors, tasks))
                return summary or RunSummary(total_tasks=len(tasks))

            monkeypatch.setattr(runner.BatchScheduler, "run_tasks", fake_run_tasks)
            return scheduled

        return install

    async def test_completed_run_exits_zero(self, patched):
        store = InMemoryStore(VENDORS, TASKS)
        scheduled = patched(store, summary=RunSummary(total_tasks=1, succeeded=1, persisted=1))

        assert await runner.run(make_settings(HEADLESS=True)) == 0
        assert scheduled == [(VENDORS, TASKS)]
        assert FakeBrowserManager.launches == [True]
        assert store.closed

    async def test_unreadable_task_list_exits_one_without_browser(self, patched):
        store = InMemoryStore(read_error=RecordStoreError("read of vendor_urls", "HTTP 401"))
        scheduled = patched(store)

        assert await runner.run(make_settings()) == 1
        assert scheduled == []
        assert FakeBrowserManager.launches == []
        assert store.closed

    async def test_empty_task_list_never_launches_browser(self, patched):
        store = InMemoryStore(VENDORS, [])
        scheduled = patched(store)

        assert await runner.run(make_settings()) == 0
        assert scheduled == []
        assert FakeBrowserManager.launches == []
        assert store.closed
