"""One scraping run: load tasks, scrape every vendor URL, record prices.

Usage:
    pricewatch
    python -m pricewatch

All configuration comes from environment variables (or .env), see
pricewatch.config.Settings.
"""

import asyncio
import sys

import structlog

from pricewatch.config import Settings, settings
from pricewatch.core.exceptions import ConfigurationError, RecordStoreError
from pricewatch.core.logging import configure_logging
from pricewatch.scrapers.chain import ExtractionChain
from pricewatch.scrapers.scheduler import BatchScheduler, uniform_delay
from pricewatch.scrapers.strategies import default_strategies
from pricewatch.scrapers.utils.browser_manager import BrowserManager
from pricewatch.scrapers.vendor_scraper import VendorScraper
from pricewatch.stores import create_record_store

logger = structlog.get_logger(__name__)


async def run(config: Settings) -> int:
    """Execute a single run.

    Args:
        config: Application settings

    Returns:
        Process exit status: 0 on completion, 1 if the task list could not be read
    """
    chain = ExtractionChain(
        default_strategies(structured_data_attempts=config.STRUCTURED_DATA_ATTEMPTS),
        retry_wait_seconds=config.STRUCTURED_DATA_RETRY_SECONDS,
    )

    async with create_record_store(config) as store:
        try:
            vendors = await store.fetch_vendors()
            tasks = await store.fetch_tasks()
        except RecordStoreError as e:
            logger.error("task_list_unavailable", error=e.message)
            return 1

        if not tasks:
            logger.warning("no_tasks_found")
            return 0

        # Chromium is only started once there is something to scrape
        async with BrowserManager(headless=config.HEADLESS) as browser:
            scraper = VendorScraper(
                browser,
                chain=chain,
                navigation_timeout_ms=config.NAVIGATION_TIMEOUT_MS,
            )
            scheduler = BatchScheduler(
                store,
                scraper,
                batch_size=config.BATCH_SIZE,
                delay_policy=uniform_delay(
                    config.BATCH_DELAY_MIN_SECONDS,
                    config.BATCH_DELAY_MAX_SECONDS,
                ),
            )
            summary = await scheduler.run_tasks(vendors, tasks)

    logger.info("scraping_completed", **summary.as_dict())
    return 0


def main() -> None:
    """Console entry point."""
    configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)

    try:
        settings.validate_credentials()
    except ConfigurationError as e:
        logger.error("configuration_invalid", error=e.message)
        sys.exit(1)

    sys.exit(asyncio.run(run(settings)))


if __name__ == "__main__":
    main()
