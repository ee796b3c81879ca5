"""Extraction pipeline and vendor scrape task."""

from pricewatch.scrapers.base import (
    ExtractionResult,
    ExtractionStrategy,
    PageSnapshot,
    ScrapeOutcome,
    ScrapeStatus,
)
from pricewatch.scrapers.chain import ExtractionChain, PlaywrightPageSource
from pricewatch.scrapers.vendor_scraper import VendorScraper

__all__ = [
    "ExtractionChain",
    "ExtractionResult",
    "ExtractionStrategy",
    "PageSnapshot",
    "PlaywrightPageSource",
    "ScrapeOutcome",
    "ScrapeStatus",
    "VendorScraper",
]
