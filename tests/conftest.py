"""Pytest configuration and shared fixtures.

Browser objects are replaced by small fakes exposing only the Playwright
calls the scraper makes; no test starts a real browser or opens a socket.
"""

import asyncio
from typing import List, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from pricewatch.models import Base
from pricewatch.scrapers.base import ScrapeOutcome
from pricewatch.scrapers.chain import ExtractionChain
from pricewatch.scrapers.strategies import default_strategies
from pricewatch.stores.base import RecordStore
from pricewatch.stores.database import DatabaseRecordStore


@pytest.fixture
def anyio_backend():
    """Use asyncio as the async backend for tests."""
    return "asyncio"


# ============================================================================
# PLAYWRIGHT FAKES
# ============================================================================

class FakeRequest:
    def __init__(self, resource_type: str):
        self.resource_type = resource_type


class FakeRoute:
    def __init__(self, resource_type: str):
        self.request = FakeRequest(resource_type)
        self.aborted = False
        self.continued = False

    async def abort(self):
        self.aborted = True

    async def continue_(self):
        self.continued = True


class FakePage:
    """Page whose HTML can change between ``content()`` calls."""

    def __init__(
        self,
        html="<html><body></body></html>",
        body_text: str = "",
        response: object = "ok",
        goto_error: Optional[Exception] = None,
    ):
        self._html = list(html) if isinstance(html, list) else [html]
        self.body_text = body_text
        self.response = response
        self.goto_error = goto_error
        self.url = "about:blank"
        self.goto_calls: List[dict] = []
        self.content_calls = 0

    async def goto(self, url, wait_until=None, timeout=None):
        self.goto_calls.append({"url": url, "wait_until": wait_until, "timeout": timeout})
        if self.goto_error is not None:
            raise self.goto_error
        self.url = url
        return self.response

    async def inner_text(self, selector):
        assert selector == "body"
        return self.body_text

    async def content(self):
        index = min(self.content_calls, len(self._html) - 1)
        self.content_calls += 1
        return self._html[index]


class FakeContext:
    def __init__(self, page: FakePage, close_error: Optional[Exception] = None):
        self.page = page
        self.close_error = close_error
        self.routes: List[tuple] = []
        self.closed = False

    async def route(self, pattern, handler):
        self.routes.append((pattern, handler))

    async def new_page(self):
        return self.page

    async def close(self):
        self.closed = True
        if self.close_error is not None:
            raise self.close_error


class FakeBrowser:
    """Hands out one FakeContext per ``new_context`` call."""

    def __init__(self, page: Optional[FakePage] = None, context_error: Optional[Exception] = None):
        self.page = page
        self.context_error = context_error
        self.contexts: List[FakeContext] = []
        self.user_agents: List[str] = []

    async def new_context(self, user_agent=None):
        self.user_agents.append(user_agent)
        if self.context_error is not None:
            raise self.context_error
        page = self.page or FakePage()
        context = FakeContext(page)
        self.contexts.append(context)
        return context


class FakeSleep:
    """Records requested pauses instead of sleeping."""

    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def fake_sleep() -> FakeSleep:
    return FakeSleep()


@pytest.fixture
def chain(fake_sleep) -> ExtractionChain:
    """Default strategy chain that never really sleeps between retries."""
    return ExtractionChain(default_strategies(), retry_wait_seconds=1.0, sleep=fake_sleep)


# ============================================================================
# STORE AND SCRAPER FAKES
# ============================================================================

class InMemoryStore(RecordStore):
    """Record store keeping everything in lists."""

    def __init__(self, vendors=None, tasks=None, read_error=None, write_error=None):
        self.vendors = list(vendors or [])
        self.tasks = list(tasks or [])
        self.read_error = read_error
        self.write_error = write_error
        self.records = []
        self.closed = False

    async def fetch_vendors(self):
        if self.read_error is not None:
            raise self.read_error
        return list(self.vendors)

    async def fetch_tasks(self):
        if self.read_error is not None:
            raise self.read_error
        return list(self.tasks)

    async def append_price(self, record):
        if self.write_error is not None:
            raise self.write_error
        self.records.append(record)

    async def close(self):
        self.closed = True


class ScriptedScraper:
    """Returns a preset outcome (or raises a preset exception) per URL.

    Every call logs ("start", url) and ("end", url) around a yield to the
    event loop so tests can check how calls interleave.
    """

    def __init__(self, outcomes=None, default: Optional[ScrapeOutcome] = None):
        self.outcomes = outcomes or {}
        self.default = default
        self.events: List[tuple] = []
        self.calls: List[str] = []

    async def scrape(self, url):
        self.calls.append(url)
        self.events.append(("start", url))
        await asyncio.sleep(0)
        self.events.append(("end", url))

        outcome = self.outcomes.get(url, self.default)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


# ============================================================================
# DATABASE
# ============================================================================

@pytest_asyncio.fixture
async def db_store():
    """DatabaseRecordStore over an in-memory SQLite database."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )
    store = DatabaseRecordStore(session_factory, engine=engine)

    yield store

    await store.close()
