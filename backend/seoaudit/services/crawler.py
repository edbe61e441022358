"""
Site Crawler

Headless browser crawler built on Playwright. Renders each page, records
console errors and network resources while navigating, then hands the
serialized DOM to the extractor for links and JSON-LD.

Pages of one site are fetched serially in breadth-first order, bounded by
max_pages.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass, field
from urllib.parse import urlparse

from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Response,
)

from seoaudit.config import settings
from seoaudit.core.exceptions import PageFetchError
from seoaudit.models.crawl import CrawlResult, ResourceInfo
from seoaudit.services.extractor import (
    classify_resource,
    extract_page_data,
    normalize_headers,
    parse_content_length,
)
from seoaudit.utils.url_utils import normalize_url

logger = logging.getLogger(__name__)


@dataclass
class CrawlConfig:
    """Configuration for a site crawl."""
    max_pages: int = field(default_factory=lambda: settings.CRAWL_MAX_PAGES)
    timeout_ms: int = field(default_factory=lambda: settings.CRAWL_NAVIGATION_TIMEOUT_MS)
    wait_until: str = field(default_factory=lambda: settings.CRAWL_WAIT_UNTIL)
    link_limit: int = field(default_factory=lambda: settings.CRAWL_LINK_LIMIT)
    request_delay_ms: int = field(default_factory=lambda: settings.CRAWL_REQUEST_DELAY_MS)
    viewport_width: int = 1920
    viewport_height: int = 1080
    user_agent: str = field(default_factory=lambda: settings.USER_AGENT)
    browser_type: str = field(default_factory=lambda: settings.BROWSER_TYPE)
    headless: bool = field(default_factory=lambda: settings.BROWSER_HEADLESS)
    browser_args: list[str] = field(default_factory=lambda: settings.browser_args_list)
    ignore_https_errors: bool = True
    screenshot_full_page: bool = True


class SiteCrawler:
    """
    Browser-driven site crawler.

    One instance owns one browser session. Use it as an async context manager,
    or pair initialize() with close() yourself.
    """

    def __init__(self, config: CrawlConfig | None = None):
        self.config = config or CrawlConfig()
        self._playwright = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    @property
    def is_running(self) -> bool:
        return self._browser is not None

    async def initialize(self):
        """Start the browser session."""
        if self._browser is not None:
            return

        logger.info(f"Starting Playwright {self.config.browser_type} browser")
        self._playwright = await async_playwright().start()

        try:
            browser_launcher = getattr(self._playwright, self.config.browser_type)
            self._browser = await browser_launcher.launch(
                headless=self.config.headless,
                args=self.config.browser_args,
            )
            self._context = await self._browser.new_context(
                viewport={"width": self.config.viewport_width, "height": self.config.viewport_height},
                user_agent=self.config.user_agent,
                ignore_https_errors=self.config.ignore_https_errors,
            )
        except BaseException:
            await self.close()
            raise

        logger.info("Playwright browser started successfully")

    async def close(self):
        """Release the browser session. Safe to call more than once."""
        if self._playwright is None:
            return

        context, self._context = self._context, None
        browser, self._browser = self._browser, None
        playwright, self._playwright = self._playwright, None

        if context:
            try:
                await context.close()
            except Exception as e:
                logger.warning(f"Error closing browser context: {e}")
        if browser:
            try:
                await browser.close()
            except Exception as e:
                logger.warning(f"Error closing browser: {e}")
        try:
            await playwright.stop()
        except Exception as e:
            logger.warning(f"Error stopping Playwright: {e}")

        logger.info("Playwright browser stopped")

    async def crawl_page(
        self,
        url: str,
        take_screenshot: bool = False,
        domain: str | None = None,
    ) -> CrawlResult:
        """
        Fetch and render a single page.

        Args:
            url: URL to fetch
            take_screenshot: Capture a PNG of the rendered page
            domain: Hostname that decides internal vs external links.
                Defaults to the hostname of `url`.

        Raises:
            PageFetchError: navigation failed or timed out
        """
        if not self._context:
            await self.initialize()

        domain = domain or urlparse(url).hostname or ""
        console_errors: list[str] = []
        resources: list[ResourceInfo] = []

        def on_console(msg):
            if msg.type == "error":
                console_errors.append(msg.text)

        def on_response(response: Response):
            resources.append(
                ResourceInfo(
                    type=classify_resource(response.request.resource_type),
                    url=response.url,
                    size=parse_content_length(response.headers),
                )
            )

        page: Page | None = None
        try:
            page = await self._context.new_page()
            page.on("console", on_console)
            page.on("response", on_response)

            start_time = time.time()
            response = await page.goto(
                url,
                timeout=self.config.timeout_ms,
                wait_until=self.config.wait_until,
            )
            load_time = int((time.time() - start_time) * 1000)

            final_url = page.url
            html = await page.content()

            screenshot = None
            if take_screenshot:
                screenshot = await page.screenshot(full_page=self.config.screenshot_full_page)

        except PlaywrightError as e:
            raise PageFetchError(url, str(e)) from e

        finally:
            if page:
                await page.close()

        extracted = extract_page_data(html, final_url, domain, link_limit=self.config.link_limit)

        return CrawlResult(
            url=url,
            final_url=final_url,
            status_code=response.status if response else 0,
            headers=normalize_headers(response.headers if response else {}),
            html=html,
            load_time=load_time,
            page_size=len(html.encode("utf-8")),
            resources=resources,
            internal_links=extracted.internal_links,
            external_links=extracted.external_links,
            json_ld_data=extracted.json_ld_data,
            console_errors=console_errors,
            screenshot=screenshot,
        )

    async def crawl_website(self, start_url: str, max_pages: int | None = None) -> list[CrawlResult]:
        """
        Breadth-first crawl of a site starting at `start_url`.

        Stops once `max_pages` pages have been fetched. Page failures are
        logged and skipped; an empty list means nothing could be fetched.
        """
        max_pages = self.config.max_pages if max_pages is None else max_pages
        start_url = normalize_url(start_url)
        domain = urlparse(start_url).hostname or ""

        logger.info(f"Starting crawl of {start_url} (max {max_pages} pages)")

        results: list[CrawlResult] = []
        visited: set[str] = set()
        queued: set[str] = {start_url}
        queue: deque[str] = deque([start_url])

        while queue and len(results) < max_pages:
            url = queue.popleft()
            queued.discard(url)
            if url in visited:
                continue
            visited.add(url)

            if results and self.config.request_delay_ms > 0:
                await asyncio.sleep(self.config.request_delay_ms / 1000)

            try:
                result = await self.crawl_page(url, take_screenshot=not results, domain=domain)
            except PageFetchError as e:
                logger.warning(str(e))
                continue

            results.append(result)
            logger.debug(f"Crawled {url} ({result.status_code}, {len(results)}/{max_pages})")

            for link in result.internal_links:
                if len(results) + len(queue) >= max_pages:
                    break
                if link not in visited and link not in queued:
                    queue.append(link)
                    queued.add(link)

        logger.info(f"Crawl of {start_url} finished: {len(results)} pages")
        return results
