"""
Unit tests for the site crawler.

Tests crawling functionality including:
- Browser lifecycle (initialize/close, context manager)
- Single page fetch with console, resource and link capture
- Breadth-first traversal with dedupe and the page cap
- Page-level failure handling
"""
import logging

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from playwright.async_api import TimeoutError as PlaywrightTimeout

from seoaudit.core.exceptions import InvalidURLError, PageFetchError
from seoaudit.models.crawl import CrawlResult, ResourceType
from seoaudit.services.crawler import CrawlConfig, SiteCrawler


def make_mock_page(
    html: str,
    status: int = 200,
    headers: dict | None = None,
    final_url: str | None = None,
    console: list | None = None,
    responses: list | None = None,
):
    """Playwright page double that fires registered listeners during goto()."""
    page = MagicMock()
    handlers = {}
    page.on = MagicMock(side_effect=lambda event, callback: handlers.setdefault(event, callback))

    async def goto(url, timeout=None, wait_until=None):
        for msg in console or []:
            handlers["console"](msg)
        for resp in responses or []:
            handlers["response"](resp)
        page.url = final_url or url
        response = MagicMock()
        response.status = status
        response.headers = headers if headers is not None else {"content-type": "text/html"}
        return response

    page.goto = AsyncMock(side_effect=goto)
    page.content = AsyncMock(return_value=html)
    page.screenshot = AsyncMock(return_value=b"\x89PNG")
    page.close = AsyncMock()
    return page


def make_console_message(msg_type: str, text: str):
    msg = MagicMock()
    msg.type = msg_type
    msg.text = text
    return msg


def make_network_response(url: str, resource_type: str, content_length: str | None = None):
    resp = MagicMock()
    resp.url = url
    resp.headers = {"content-length": content_length} if content_length else {}
    resp.request.resource_type = resource_type
    return resp


def crawler_with_page(page) -> SiteCrawler:
    crawler = SiteCrawler(CrawlConfig(max_pages=10))
    crawler._context = MagicMock()
    crawler._context.new_page = AsyncMock(return_value=page)
    return crawler


class TestCrawlConfig:
    """Test CrawlConfig dataclass."""

    def test_default_config(self):
        """Defaults come from settings."""
        config = CrawlConfig()

        assert config.max_pages == 25
        assert config.timeout_ms == 30000
        assert config.wait_until == "networkidle"
        assert config.link_limit == 50
        assert config.browser_type == "chromium"
        assert config.headless is True
        assert "--no-sandbox" in config.browser_args

    def test_custom_config(self):
        config = CrawlConfig(max_pages=5, timeout_ms=10000, request_delay_ms=250)

        assert config.max_pages == 5
        assert config.timeout_ms == 10000
        assert config.request_delay_ms == 250


class TestBrowserLifecycle:
    """Test browser session acquisition and release."""

    @pytest.fixture
    def mock_playwright(self):
        playwright = MagicMock()
        browser = MagicMock()
        context = MagicMock()
        context.close = AsyncMock()
        browser.new_context = AsyncMock(return_value=context)
        browser.close = AsyncMock()
        playwright.chromium.launch = AsyncMock(return_value=browser)
        playwright.stop = AsyncMock()

        with patch("seoaudit.services.crawler.async_playwright") as mock_async_playwright:
            mock_async_playwright.return_value.start = AsyncMock(return_value=playwright)
            yield playwright, browser, context

    @pytest.mark.asyncio
    async def test_initialize_launches_browser(self, mock_playwright):
        playwright, browser, _ = mock_playwright
        crawler = SiteCrawler()

        await crawler.initialize()

        assert crawler.is_running is True
        playwright.chromium.launch.assert_awaited_once()
        assert playwright.chromium.launch.call_args.kwargs["headless"] is True
        browser.new_context.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_initialize_is_idempotent(self, mock_playwright):
        playwright, _, _ = mock_playwright
        crawler = SiteCrawler()

        await crawler.initialize()
        await crawler.initialize()

        playwright.chromium.launch.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, mock_playwright):
        playwright, browser, context = mock_playwright
        crawler = SiteCrawler()
        await crawler.initialize()

        await crawler.close()
        await crawler.close()

        context.close.assert_awaited_once()
        browser.close.assert_awaited_once()
        playwright.stop.assert_awaited_once()
        assert crawler.is_running is False

    @pytest.mark.asyncio
    async def test_close_without_initialize(self):
        crawler = SiteCrawler()
        await crawler.close()

        assert crawler.is_running is False

    @pytest.mark.asyncio
    async def test_context_manager_closes_on_error(self, mock_playwright):
        playwright, browser, _ = mock_playwright

        with pytest.raises(RuntimeError):
            async with SiteCrawler() as crawler:
                assert crawler.is_running is True
                raise RuntimeError("job cancelled")

        browser.close.assert_awaited_once()
        playwright.stop.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_continues_past_failing_steps(self, mock_playwright, caplog):
        playwright, browser, context = mock_playwright
        context.close.side_effect = RuntimeError("context already gone")
        browser.close.side_effect = RuntimeError("browser crashed")
        crawler = SiteCrawler()
        await crawler.initialize()

        with caplog.at_level(logging.WARNING, logger="seoaudit.services.crawler"):
            await crawler.close()

        browser.close.assert_awaited_once()
        playwright.stop.assert_awaited_once()
        assert crawler.is_running is False
        assert "Error closing browser context: context already gone" in caplog.text
        assert "Error closing browser: browser crashed" in caplog.text

    @pytest.mark.asyncio
    async def test_context_manager_keeps_original_error(self, mock_playwright):
        _, _, context = mock_playwright
        context.close.side_effect = RuntimeError("context already gone")

        with pytest.raises(ValueError, match="bad page"):
            async with SiteCrawler():
                raise ValueError("bad page")

    @pytest.mark.asyncio
    async def test_failed_launch_releases_playwright(self, mock_playwright):
        playwright, _, _ = mock_playwright
        playwright.chromium.launch.side_effect = RuntimeError("no browser binary")
        crawler = SiteCrawler()

        with pytest.raises(RuntimeError):
            await crawler.initialize()

        playwright.stop.assert_awaited_once()
        assert crawler.is_running is False


class TestCrawlPage:
    """Test single page fetch."""

    @pytest.mark.asyncio
    async def test_builds_crawl_result(self):
        html = """
        <html><body>
            <a href="/about">About</a>
            <a href="https://other.com/">Other</a>
            <script type="application/ld+json">{"@type": "Organization"}</script>
        </body></html>
        """
        page = make_mock_page(
            html,
            headers={"Content-Type": "text/html", "X-Frame-Options": "DENY"},
            final_url="https://example.com/home",
            console=[make_console_message("error", "Uncaught TypeError"), make_console_message("log", "hi")],
            responses=[
                make_network_response("https://example.com/app.js", "script", "5000"),
                make_network_response("https://example.com/logo.png", "image"),
                make_network_response("https://example.com/api", "fetch", "12"),
            ],
        )
        crawler = crawler_with_page(page)

        result = await crawler.crawl_page("https://example.com/")

        assert isinstance(result, CrawlResult)
        assert result.url == "https://example.com/"
        assert result.final_url == "https://example.com/home"
        assert result.status_code == 200
        assert result.headers["x-frame-options"] == "DENY"
        assert result.html == html
        assert result.page_size == len(html.encode("utf-8"))
        assert result.console_errors == ["Uncaught TypeError"]
        assert [(r.type, r.size) for r in result.resources] == [
            (ResourceType.SCRIPT, 5000),
            (ResourceType.IMAGE, 0),
            (ResourceType.OTHER, 12),
        ]
        assert result.internal_links == ["https://example.com/about"]
        assert result.external_links == ["https://other.com/"]
        assert result.json_ld_data == [{"@type": "Organization"}]
        assert result.screenshot is None
        page.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_navigation_options(self):
        page = make_mock_page("<html></html>")
        crawler = crawler_with_page(page)

        await crawler.crawl_page("https://example.com/")

        kwargs = page.goto.call_args.kwargs
        assert kwargs["timeout"] == 30000
        assert kwargs["wait_until"] == "networkidle"

    @pytest.mark.asyncio
    async def test_screenshot(self):
        page = make_mock_page("<html></html>")
        crawler = crawler_with_page(page)

        result = await crawler.crawl_page("https://example.com/", take_screenshot=True)

        assert result.screenshot == b"\x89PNG"
        page.screenshot.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_internal_links_use_crawl_domain(self):
        html = '<a href="https://example.com/a">A</a><a href="https://www.example.com/b">B</a>'
        page = make_mock_page(html, final_url="https://www.example.com/")
        crawler = crawler_with_page(page)

        result = await crawler.crawl_page("https://example.com/", domain="example.com")

        assert result.internal_links == ["https://example.com/a"]
        assert result.external_links == ["https://www.example.com/b"]

    @pytest.mark.asyncio
    async def test_timeout_raises_page_fetch_error(self):
        page = make_mock_page("<html></html>")
        page.goto = AsyncMock(side_effect=PlaywrightTimeout("Timeout 30000ms exceeded"))
        crawler = crawler_with_page(page)

        with pytest.raises(PageFetchError) as exc_info:
            await crawler.crawl_page("https://example.com/slow")

        assert exc_info.value.url == "https://example.com/slow"
        assert "Timeout" in exc_info.value.reason
        page.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_response(self):
        page = make_mock_page("<html></html>")

        async def goto(url, timeout=None, wait_until=None):
            page.url = url
            return None

        page.goto = AsyncMock(side_effect=goto)
        crawler = crawler_with_page(page)

        result = await crawler.crawl_page("https://example.com/")

        assert result.status_code == 0
        assert result.headers == {}


class TestCrawlWebsite:
    """Test breadth-first traversal."""

    SITE = {
        "https://example.com/": ["https://example.com/a", "https://example.com/b"],
        "https://example.com/a": ["https://example.com/c", "https://example.com/"],
        "https://example.com/b": ["https://example.com/a", "https://example.com/d"],
        "https://example.com/c": [],
        "https://example.com/d": ["https://example.com/e"],
        "https://example.com/e": [],
    }

    def make_crawler(self, failing: set[str] | None = None) -> SiteCrawler:
        failing = failing or set()
        crawler = SiteCrawler(CrawlConfig(max_pages=25))

        async def fake_crawl_page(url, take_screenshot=False, domain=None):
            if url in failing:
                raise PageFetchError(url, "net::ERR_CONNECTION_REFUSED")
            return CrawlResult(
                url=url,
                final_url=url,
                status_code=200,
                headers={},
                html="<html></html>",
                load_time=100,
                page_size=13,
                internal_links=list(self.SITE.get(url, [])),
                screenshot=b"png" if take_screenshot else None,
            )

        crawler.crawl_page = AsyncMock(side_effect=fake_crawl_page)
        return crawler

    @pytest.mark.asyncio
    async def test_breadth_first_order(self):
        crawler = self.make_crawler()

        results = await crawler.crawl_website("https://example.com", 10)

        assert [r.url for r in results] == [
            "https://example.com/",
            "https://example.com/a",
            "https://example.com/b",
            "https://example.com/c",
            "https://example.com/d",
            "https://example.com/e",
        ]

    @pytest.mark.asyncio
    async def test_no_duplicates(self):
        crawler = self.make_crawler()

        results = await crawler.crawl_website("https://example.com/", 10)
        urls = [r.url for r in results]

        assert len(urls) == len(set(urls))
        assert crawler.crawl_page.await_count == len(urls)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("max_pages", [1, 2, 3, 5])
    async def test_respects_max_pages(self, max_pages):
        crawler = self.make_crawler()

        results = await crawler.crawl_website("https://example.com/", max_pages)

        assert len(results) == max_pages

    @pytest.mark.asyncio
    async def test_max_pages_defaults_to_config(self):
        crawler = self.make_crawler()
        crawler.config.max_pages = 2

        results = await crawler.crawl_website("https://example.com/")

        assert len(results) == 2

    @pytest.mark.asyncio
    async def test_screenshot_only_first_page(self):
        crawler = self.make_crawler()

        results = await crawler.crawl_website("https://example.com/", 3)

        assert results[0].screenshot == b"png"
        assert all(r.screenshot is None for r in results[1:])

    @pytest.mark.asyncio
    async def test_page_failure_is_skipped(self):
        crawler = self.make_crawler(failing={"https://example.com/a"})

        results = await crawler.crawl_website("https://example.com/", 10)
        urls = [r.url for r in results]

        assert "https://example.com/a" not in urls
        assert "https://example.com/b" in urls
        # /a failed, so /c is never discovered
        assert "https://example.com/c" not in urls

    @pytest.mark.asyncio
    async def test_start_page_failure_returns_empty(self):
        crawler = self.make_crawler(failing={"https://example.com/"})

        results = await crawler.crawl_website("https://example.com/", 10)

        assert results == []

    @pytest.mark.asyncio
    async def test_invalid_start_url(self):
        crawler = self.make_crawler()

        with pytest.raises(InvalidURLError):
            await crawler.crawl_website("", 10)

    @pytest.mark.asyncio
    async def test_request_delay_between_pages(self):
        crawler = self.make_crawler()
        crawler.config.request_delay_ms = 200

        with patch("seoaudit.services.crawler.asyncio.sleep", new=AsyncMock()) as mock_sleep:
            results = await crawler.crawl_website("https://example.com/", 3)

        assert len(results) == 3
        assert mock_sleep.await_count == 2
        mock_sleep.assert_awaited_with(0.2)
