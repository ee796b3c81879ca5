"""Playwright browser lifecycle manager.

One Chromium instance is shared by every scrape task of a run; each task
opens its own context from it so cookies and storage never leak between
vendors.
"""

import asyncio
from typing import Optional

import structlog
from playwright.async_api import async_playwright, Browser, Playwright

logger = structlog.get_logger(__name__)

CHROMIUM_ARGS = [
    "--disable-http2",
    "--disable-blink-features=AutomationControlled",
    "--no-sandbox",
    "--disable-setuid-sandbox",
]


class BrowserManager:
    """Starts and stops the shared Chromium browser.

    Usable as an async context manager:

        async with BrowserManager(headless=True) as browser:
            context = await browser.new_context(...)
    """

    def __init__(self, headless: bool = True):
        self._headless = headless
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._lock = asyncio.Lock()

    @property
    def browser(self) -> Browser:
        if self._browser is None:
            raise RuntimeError("BrowserManager.start() has not been called")
        return self._browser

    async def start(self) -> Browser:
        """Launch the browser. Safe to call more than once."""
        async with self._lock:
            if self._browser:
                return self._browser
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self._headless,
                args=CHROMIUM_ARGS,
            )
            logger.info("browser_started", headless=self._headless)
            return self._browser

    async def stop(self) -> None:
        """Close the browser and the Playwright driver."""
        async with self._lock:
            if self._browser:
                await self._browser.close()
                self._browser = None
            if self._playwright:
                await self._playwright.stop()
                self._playwright = None
            logger.info("browser_stopped")

    async def __aenter__(self) -> Browser:
        return await self.start()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()
