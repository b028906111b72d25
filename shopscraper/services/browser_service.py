"""
Wrapper for the Playwright browser.
A ScraperPage pairs a live page with the extraction oracle, so scrapers
can navigate, scroll and extract through one handle.
"""
from typing import Optional, Type, TypeVar

from playwright.async_api import async_playwright, Browser, BrowserContext, Page, Playwright
from playwright.async_api import Error as PlaywrightError
from pydantic import BaseModel

from shopscraper.errors import NavigationError
from shopscraper.config import config
from shopscraper.logger import logger
from shopscraper.services.ai_service import ExtractionService


T = TypeVar("T", bound=BaseModel)


class ScraperPage:
    """Page handle used by the scrape operations."""

    def __init__(self, page: Page, extractor: ExtractionService):
        self.page = page
        self.extractor = extractor

    @property
    def url(self) -> str:
        return self.page.url

    async def goto(self, url: str):
        try:
            await self.page.goto(url, timeout=config.NAVIGATION_TIMEOUT_MS,
                                 wait_until="domcontentloaded")
        except PlaywrightError as e:
            raise NavigationError(f"Failed to load {url}: {e}") from e

    async def wait(self, ms: int):
        await self.page.wait_for_timeout(ms)

    async def scroll_to(self, fraction: float):
        """Scroll to a fraction of the document height to trigger lazy content."""
        try:
            await self.page.evaluate(
                "fraction => window.scrollTo(0, document.body.scrollHeight * fraction)",
                fraction
            )
        except PlaywrightError as e:
            raise NavigationError(f"Failed to scroll {self.page.url}: {e}") from e

    async def text(self) -> str:
        try:
            return await self.page.inner_text("body")
        except PlaywrightError as e:
            raise NavigationError(f"Failed to read page text from {self.page.url}: {e}") from e

    async def extract(self, instruction: str, schema: Type[T]) -> T:
        """Ask the oracle for `schema` populated from the current page."""
        page_text = await self.text()
        return await self.extractor.extract(instruction, schema, page_text, url=self.page.url)


class BrowserService:
    """
    Owns the Playwright process, browser and context.
    Use as an async context manager so the browser is always closed.
    """

    def __init__(self, extractor: ExtractionService, headless: Optional[bool] = None):
        self.extractor = extractor
        self.headless = config.HEADLESS if headless is None else headless
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def start(self):
        """Start Chromium with a desktop user agent."""
        self.playwright = await async_playwright().start()
        try:
            self.browser = await self.playwright.chromium.launch(headless=self.headless)
            self.context = await self.browser.new_context(
                user_agent=config.USER_AGENT,
                locale="en-US",
                viewport={"width": 1366, "height": 900},
            )
        except PlaywrightError as e:
            await self.close()
            raise NavigationError(f"Failed to start browser: {e}") from e

        logger.info(f"Browser started (headless={self.headless})")

    async def new_page(self) -> ScraperPage:
        if self.context is None:
            raise NavigationError("Browser not started")
        page = await self.context.new_page()
        return ScraperPage(page, self.extractor)

    async def close(self):
        """Close the browser. Safe to call more than once."""
        try:
            if self.context:
                context, self.context = self.context, None
                await context.close()
        finally:
            try:
                if self.browser:
                    browser, self.browser = self.browser, None
                    await browser.close()
            finally:
                if self.playwright:
                    playwright, self.playwright = self.playwright, None
                    await playwright.stop()
                    logger.info("Browser closed")
