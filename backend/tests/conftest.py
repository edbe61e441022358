"""
Pytest configuration and fixtures for seoaudit tests.
"""
from typing import Callable

import httpx
import pytest

from seoaudit.models import (
    AuditRuleContext,
    CrawlResult,
    PerformanceMetrics,
    ResourceInfo,
    ResourceType,
)
from seoaudit.services.extractor import extract_page_data

from fixtures.sample_pages import (
    LOCAL_BUSINESS_HTML,
    MINIMAL_PAGE_HTML,
    MULTIPLE_H1_HTML,
    PERFECT_PAGE_HTML,
)

SECURE_HEADERS = {
    "content-type": "text/html; charset=utf-8",
    "strict-transport-security": "max-age=31536000; includeSubDomains",
    "content-security-policy": "default-src 'self'",
    "x-frame-options": "SAMEORIGIN",
    "x-content-type-options": "nosniff",
    "referrer-policy": "strict-origin-when-cross-origin",
}


# ============================================================================
# Page Fixtures
# ============================================================================

@pytest.fixture
def make_crawl_result() -> Callable[..., CrawlResult]:
    """
    Factory for CrawlResult.

    Links and JSON-LD are extracted from `html` unless given explicitly.
    """
    def _make(
        html: str = PERFECT_PAGE_HTML,
        url: str = "https://example.com/perfect-page",
        **overrides,
    ) -> CrawlResult:
        final_url = overrides.pop("final_url", url)
        extracted = extract_page_data(html, final_url, "example.com")
        fields = {
            "url": url,
            "final_url": final_url,
            "status_code": 200,
            "headers": dict(SECURE_HEADERS),
            "html": html,
            "load_time": 850,
            "page_size": len(html.encode("utf-8")),
            "resources": [],
            "internal_links": extracted.internal_links,
            "external_links": extracted.external_links,
            "json_ld_data": extracted.json_ld_data,
        }
        fields.update(overrides)
        return CrawlResult(**fields)

    return _make


@pytest.fixture
def make_context(make_crawl_result) -> Callable[..., AuditRuleContext]:
    """Factory for a single-page AuditRuleContext."""
    def _make(html: str = PERFECT_PAGE_HTML, performance: PerformanceMetrics | None = None, **overrides):
        page = make_crawl_result(html=html, **overrides)
        return AuditRuleContext(
            page=page,
            all_pages=[page],
            project_domain="example.com",
            performance=performance,
        )

    return _make


@pytest.fixture
def perfect_page(make_crawl_result) -> CrawlResult:
    return make_crawl_result()


@pytest.fixture
def minimal_page(make_crawl_result) -> CrawlResult:
    return make_crawl_result(html=MINIMAL_PAGE_HTML, url="https://example.com/", headers={})


@pytest.fixture
def multiple_h1_html() -> str:
    return MULTIPLE_H1_HTML


@pytest.fixture
def local_business_html() -> str:
    return LOCAL_BUSINESS_HTML


@pytest.fixture
def sample_resources() -> list[ResourceInfo]:
    return [
        ResourceInfo(type=ResourceType.SCRIPT, url="https://example.com/app.js", size=120_000),
        ResourceInfo(type=ResourceType.STYLESHEET, url="https://example.com/app.css", size=30_000),
        ResourceInfo(type=ResourceType.IMAGE, url="https://example.com/hero.jpg", size=250_000),
    ]


# ============================================================================
# Performance Fixtures
# ============================================================================

@pytest.fixture
def good_performance() -> PerformanceMetrics:
    return PerformanceMetrics(
        url="https://example.com/perfect-page",
        performance_score=95,
        lcp_ms=1800,
        cls=0.05,
        inp_ms=120,
        fcp_ms=900,
        tbt_ms=80,
    )


@pytest.fixture
def poor_performance() -> PerformanceMetrics:
    return PerformanceMetrics(
        url="https://example.com/perfect-page",
        performance_score=35,
        lcp_ms=5200,
        cls=0.4,
        tbt_ms=900,
        opportunities=[
            {"id": "unused-javascript", "title": "Reduce unused JavaScript", "savings_ms": 1200},
            {"id": "offscreen-images", "title": "Defer offscreen images", "savings_ms": 600},
        ],
    )


# ============================================================================
# HTTP Fixtures
# ============================================================================

@pytest.fixture
def make_transport() -> Callable[[dict], httpx.MockTransport]:
    """
    httpx.MockTransport answering by URL path.

    Values are (status, body) tuples or exceptions to raise. Unknown paths get 404.
    """
    def _make(routes: dict) -> httpx.MockTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            route = routes.get(request.url.path)
            if route is None:
                return httpx.Response(404, text="Not Found")
            if isinstance(route, Exception):
                raise route
            status, body = route
            return httpx.Response(status, text=body)

        return httpx.MockTransport(handler)

    return _make
