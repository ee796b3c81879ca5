"""Manual scraper runner for testing and debugging extraction.

Scrapes product URLs with the full pipeline (resource filter, block
detection, strategy chain) and prints what was found. Nothing is written
to the record store.

Usage:
    python scripts/run_scraper.py https://www.galaxus.ch/de/s1/product/123
    python scripts/run_scraper.py URL [URL ...] --headed
    python scripts/run_scraper.py URL --strategy css_selectors
"""

import argparse
import asyncio
from typing import List, Optional

from pricewatch.config import settings
from pricewatch.core.logging import configure_logging
from pricewatch.scrapers.base import ScrapeOutcome, ScrapeStatus
from pricewatch.scrapers.chain import ExtractionChain
from pricewatch.scrapers.strategies import default_strategies
from pricewatch.scrapers.utils.browser_manager import BrowserManager
from pricewatch.scrapers.vendor_scraper import VendorScraper


async def run_scraper(urls: List[str], headless: bool = True, strategy: Optional[str] = None):
    """Scrape each URL in turn and display the outcome.

    Args:
        urls: Product page URLs
        headless: Run Chromium without a window
        strategy: Restrict the chain to a single strategy name
    """
    strategies = default_strategies(settings.STRUCTURED_DATA_ATTEMPTS)
    if strategy:
        strategies = [s for s in strategies if s.name == strategy]
        if not strategies:
            names = ", ".join(s.name for s in default_strategies())
            print(f"\n❌ Error: Unknown strategy '{strategy}'")
            print(f"   Available: {names}\n")
            return

    chain = ExtractionChain(strategies, retry_wait_seconds=settings.STRUCTURED_DATA_RETRY_SECONDS)

    async with BrowserManager(headless=headless) as browser:
        scraper = VendorScraper(
            browser,
            chain=chain,
            navigation_timeout_ms=settings.NAVIGATION_TIMEOUT_MS,
        )
        for url in urls:
            print(f"\n{'='*70}")
            print(f"  {url[:66]}")
            print(f"{'='*70}")
            outcome = await scraper.scrape(url)
            _print_outcome(outcome)


def _print_outcome(outcome: ScrapeOutcome) -> None:
    if outcome.status is ScrapeStatus.SUCCESS:
        result = outcome.result
        print(f"  ✅ Price: {result.price}")
        print(f"  📦 Available: {'yes' if result.availability else 'no'}")
        print(f"  🔍 Strategy: {result.strategy}")
    elif outcome.status is ScrapeStatus.BLOCKED:
        print("  🚨 Blocked by a bot interstitial")
    elif outcome.status is ScrapeStatus.NOT_FOUND:
        print("  ⚠️  No strategy found a price")
    else:
        print(f"  ❌ Error: {outcome.error}")


def main():
    """Parse arguments and run the scraper."""
    parser = argparse.ArgumentParser(
        description="Scrape product URLs without persisting results",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/run_scraper.py https://www.brack.ch/some-product-123
  python scripts/run_scraper.py URL --headed
  python scripts/run_scraper.py URL --strategy structured_data
        """,
    )
    parser.add_argument("urls", nargs="+", metavar="URL", help="Product page URL(s)")
    parser.add_argument(
        "--headed",
        action="store_true",
        help="Show the browser window",
    )
    parser.add_argument(
        "--strategy",
        help="Only run this strategy (structured_data, css_selectors, galaxus_meta, brack_utag)",
    )
    args = parser.parse_args()

    configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)
    asyncio.run(run_scraper(args.urls, headless=not args.headed, strategy=args.strategy))


if __name__ == "__main__":
    main()
