"""Ordered extraction strategy chain.

The chain owns the page-reading side of extraction: it snapshots the
rendered page, offers each applicable strategy the snapshot in priority
order and returns the first result. Strategies that declare more than one
attempt get a fresh snapshot per attempt, spaced by a fixed wait.
"""

import asyncio
from typing import Awaitable, Callable, List, Optional, Protocol, Sequence, Tuple

import structlog
from tenacity import AsyncRetrying, retry_if_result, stop_after_attempt, wait_fixed

from pricewatch.scrapers.base import ExtractionResult, ExtractionStrategy, PageSnapshot
from pricewatch.scrapers.strategies import default_strategies

logger = structlog.get_logger(__name__)


class PageSource(Protocol):
    """Anything that can produce the current rendered state of a page."""

    async def snapshot(self) -> PageSnapshot:
        ...


class PlaywrightPageSource:
    """PageSource backed by a live Playwright page."""

    def __init__(self, page):
        self._page = page

    async def snapshot(self) -> PageSnapshot:
        html = await self._page.content()
        return PageSnapshot(url=self._page.url, html=html)


class ExtractionChain:
    """Runs extraction strategies in a fixed order until one succeeds."""

    def __init__(
        self,
        strategies: Optional[Sequence[ExtractionStrategy]] = None,
        retry_wait_seconds: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize the chain.

        Args:
            strategies: Strategies in priority order (defaults to default_strategies())
            retry_wait_seconds: Pause between attempts of a multi-attempt strategy
            sleep: Awaitable sleep function, replaceable in tests
        """
        self.strategies: List[ExtractionStrategy] = list(
            strategies if strategies is not None else default_strategies()
        )
        self._retry_wait_seconds = retry_wait_seconds
        self._sleep = sleep

    async def extract(self, source: PageSource) -> Optional[ExtractionResult]:
        """Return the first strategy result for the page, or None if all miss."""
        snapshot = await source.snapshot()
        log = logger.bind(url=snapshot.url)

        for strategy in self.strategies:
            if not strategy.matches(snapshot.url):
                continue

            log.info("strategy_attempt", strategy=strategy.name)
            result, snapshot = await self._run_strategy(strategy, source, snapshot)
            if result is not None:
                log.info(
                    "strategy_matched",
                    strategy=strategy.name,
                    price=str(result.price),
                    availability=result.availability,
                )
                return result
            log.info("strategy_missed", strategy=strategy.name)

        log.warning("no_strategy_matched")
        return None

    async def _run_strategy(
        self,
        strategy: ExtractionStrategy,
        source: PageSource,
        snapshot: PageSnapshot,
    ) -> Tuple[Optional[ExtractionResult], PageSnapshot]:
        """Run one strategy, re-snapshotting the page between attempts.

        Returns:
            The result (or None) and the most recent snapshot, which later
            strategies reuse.
        """
        if strategy.attempts <= 1:
            return strategy.extract(snapshot), snapshot

        latest = snapshot
        attempted = False

        async def attempt() -> Optional[ExtractionResult]:
            nonlocal latest, attempted
            if attempted:
                latest = await source.snapshot()
            attempted = True
            return strategy.extract(latest)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(strategy.attempts),
            wait=wait_fixed(self._retry_wait_seconds),
            retry=retry_if_result(lambda result: result is None),
            retry_error_callback=lambda retry_state: None,
            before_sleep=lambda retry_state: logger.info(
                "strategy_retry",
                strategy=strategy.name,
                attempt=retry_state.attempt_number,
                max_attempts=strategy.attempts,
            ),
            sleep=self._sleep,
        )
        result = await retrying(attempt)
        return result, latest
