"""
Rendered fetch strategy: load pages in a headless browser so that
script-built content is present in the HTML snapshot.
"""
import logging
import time
from typing import Optional

from playwright.async_api import Browser, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from newswatch.core.config import Settings, get_settings
from newswatch.crawler.base import CrawlResult, FetchStrategy, PageFetcher, UserAgentRotator

logger = logging.getLogger(__name__)


class RenderedFetcher(PageFetcher):
    """
    Headless Chromium fetcher using Playwright.

    After navigation it waits for network quiescence for a bounded time;
    if the page never settles the snapshot is taken anyway.
    """

    strategy = FetchStrategy.RENDERED

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.handler_timeout_seconds = self.settings.RENDERED_FETCH_TIMEOUT_SECONDS
        self.ua_rotator = UserAgentRotator(self.settings.USER_AGENTS)
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    async def start(self) -> None:
        """Launch the browser."""
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=self.settings.BROWSER_HEADLESS,
        )
        logger.info("Headless browser launched")

    async def close(self) -> None:
        """Close the browser and stop Playwright."""
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def wait_for_network_idle(self, page) -> None:
        """Best-effort wait for network quiescence; timeouts are ignored."""
        try:
            await page.wait_for_load_state(
                "networkidle",
                timeout=self.settings.NETWORK_IDLE_TIMEOUT_SECONDS * 1000,
            )
        except PlaywrightError:
            logger.debug(f"Network did not settle on {page.url}, continuing")

    async def fetch(self, url: str) -> CrawlResult:
        if self._browser is None:
            raise RuntimeError("Fetcher not started. Use 'async with' or call start()")

        start_time = time.monotonic()
        context = await self._browser.new_context(user_agent=self.ua_rotator.get_user_agent())
        try:
            page = await context.new_page()
            response = await page.goto(
                url,
                timeout=self.settings.RENDERED_FETCH_TIMEOUT_SECONDS * 1000,
                wait_until="domcontentloaded",
            )
            status_code = response.status if response is not None else None
            if response is not None and not response.ok:
                return CrawlResult(
                    url=url,
                    success=False,
                    status_code=status_code,
                    error=f"HTTP {status_code}",
                    response_time_ms=(time.monotonic() - start_time) * 1000,
                )

            await self.wait_for_network_idle(page)
            html = await page.content()
            return CrawlResult(
                url=url,
                success=True,
                status_code=status_code,
                content=html,
                loaded_url=page.url,
                response_time_ms=(time.monotonic() - start_time) * 1000,
            )
        except PlaywrightError as e:
            return CrawlResult(url=url, success=False, error=f"Browser error: {e}")
        finally:
            await context.close()
