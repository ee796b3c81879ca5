"""Single product page scrape: context, navigation, block check, extraction."""

from typing import Callable, Optional

import structlog

from pricewatch.core.exceptions import NavigationError
from pricewatch.scrapers.base import ScrapeOutcome
from pricewatch.scrapers.chain import ExtractionChain, PlaywrightPageSource
from pricewatch.scrapers.utils.block_detector import is_blocked
from pricewatch.scrapers.utils.resource_filter import handle_route
from pricewatch.scrapers.utils.user_agents import get_random_user_agent

logger = structlog.get_logger(__name__)

DEFAULT_NAVIGATION_TIMEOUT_MS = 45000


class VendorScraper:
    """Scrapes one vendor product URL per call.

    Each call opens its own browser context with a freshly picked user
    agent and closes it before returning, whatever the outcome. ``scrape``
    never raises: every failure becomes a ScrapeOutcome.
    """

    def __init__(
        self,
        browser,
        chain: Optional[ExtractionChain] = None,
        navigation_timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS,
        user_agent_picker: Callable[[], str] = get_random_user_agent,
    ):
        """Initialize the scraper.

        Args:
            browser: Shared Playwright Browser (anything with ``new_context``)
            chain: Extraction chain (defaults to the standard strategy order)
            navigation_timeout_ms: Upper bound for ``page.goto``
            user_agent_picker: Returns the user agent for each new context
        """
        self._browser = browser
        self.chain = chain or ExtractionChain()
        self._navigation_timeout_ms = navigation_timeout_ms
        self._pick_user_agent = user_agent_picker

    async def scrape(self, url: str) -> ScrapeOutcome:
        """Scrape a product page.

        Args:
            url: Vendor product page URL

        Returns:
            ScrapeOutcome with status success, blocked, not_found or error
        """
        log = logger.bind(url=url)
        log.info("scrape_started")

        try:
            context = await self._browser.new_context(user_agent=self._pick_user_agent())
        except Exception as e:
            log.error("browser_context_failed", error=str(e))
            return ScrapeOutcome.failed(e)

        try:
            await context.route("**/*", handle_route)
            page = await context.new_page()

            response = await page.goto(
                url,
                wait_until="networkidle",
                timeout=self._navigation_timeout_ms,
            )
            if response is None:
                raise NavigationError(url)

            body_text = await page.inner_text("body")
            if is_blocked(body_text):
                log.warning("block_detected")
                return ScrapeOutcome.blocked()

            result = await self.chain.extract(PlaywrightPageSource(page))
            if result is None:
                log.warning("scrape_not_found")
                return ScrapeOutcome.not_found()

            log.info(
                "scrape_succeeded",
                strategy=result.strategy,
                price=str(result.price),
                availability=result.availability,
            )
            return ScrapeOutcome.success(result)

        except Exception as e:
            log.error("scrape_failed", error=str(e), error_type=type(e).__name__)
            return ScrapeOutcome.failed(e)

        finally:
            await self._release(context, log)

    async def _release(self, context, log) -> None:
        """Close the browser context; a failing close is logged, not raised."""
        try:
            await context.close()
        except Exception as e:
            log.warning("browser_context_close_failed", error=str(e))
