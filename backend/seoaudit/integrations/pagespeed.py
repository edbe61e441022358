"""
Google PageSpeed Insights API client.

Supplies Core Web Vitals and the Lighthouse performance score that the
performance rules read from the audit context.
"""
import logging
from typing import Any

import httpx

from seoaudit.config import settings
from seoaudit.models.audit import PerformanceMetrics

logger = logging.getLogger(__name__)

# Core Web Vitals thresholds (milliseconds or ratio)
CWV_THRESHOLDS = {
    "lcp": {"good": 2500, "needs_improvement": 4000},
    "cls": {"good": 0.1, "needs_improvement": 0.25},
    "inp": {"good": 200, "needs_improvement": 500},
    # Lab proxy for INP
    "tbt": {"good": 200, "needs_improvement": 600},
}

OPPORTUNITY_IDS = [
    "render-blocking-resources",
    "unused-css-rules",
    "unused-javascript",
    "modern-image-formats",
    "offscreen-images",
    "unminified-css",
    "unminified-javascript",
    "uses-optimized-images",
    "uses-responsive-images",
    "uses-text-compression",
    "server-response-time",
    "redirects",
    "uses-rel-preconnect",
    "font-display",
    "lcp-lazy-loaded",
]


def rate_metric(name: str, value: float | None) -> str | None:
    """'good', 'needs_improvement' or 'poor' for a CWV value; None when unmeasured."""
    if value is None:
        return None
    thresholds = CWV_THRESHOLDS[name]
    if value <= thresholds["good"]:
        return "good"
    if value <= thresholds["needs_improvement"]:
        return "needs_improvement"
    return "poor"


class PageSpeedClient:
    """HTTP client for Google PageSpeed Insights API."""

    BASE_URL = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"

    def __init__(
        self,
        api_key: str | None = None,
        timeout: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.PAGESPEED_API_KEY
        self.timeout = timeout or settings.PAGESPEED_TIMEOUT
        self._transport = transport

    async def analyze(self, url: str, strategy: str | None = None) -> PerformanceMetrics | None:
        """
        Analyze a URL with PageSpeed Insights.

        Returns None on any failure; a missing measurement never aborts an audit.
        """
        strategy = strategy or settings.PAGESPEED_STRATEGY
        params = {
            "url": url,
            "strategy": strategy,
            "category": "performance",
        }
        # Keyless requests work at a lower quota
        if self.api_key:
            params["key"] = self.api_key

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                logger.info(f"[PSI] Analyzing {url} ({strategy})")
                response = await client.get(self.BASE_URL, params=params)
                response.raise_for_status()
                data = response.json()

        except httpx.TimeoutException:
            logger.warning(f"[PSI] Timeout analyzing {url}")
            return None
        except httpx.HTTPStatusError as e:
            error_msg = f"HTTP {e.response.status_code}"
            if e.response.status_code == 429:
                error_msg = "Rate limit exceeded"
            elif e.response.status_code == 400:
                error_msg = "Invalid URL or request"
            logger.warning(f"[PSI] Error analyzing {url}: {error_msg}")
            return None
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"[PSI] Unexpected error analyzing {url}: {e}")
            return None

        try:
            return self._parse_response(data, url, strategy)
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning(f"[PSI] Malformed response for {url}: {e}")
            return None

    def _parse_response(self, data: dict, url: str, strategy: str) -> PerformanceMetrics:
        """
        Parse PSI API response into PerformanceMetrics.

        Sections the API leaves out or sends as null read as empty.
        """
        if not isinstance(data, dict):
            raise TypeError(f"expected a JSON object, got {type(data).__name__}")
        lighthouse = data.get("lighthouseResult") or {}
        audits = lighthouse.get("audits") or {}

        categories = lighthouse.get("categories") or {}
        score = (categories.get("performance") or {}).get("score")
        performance_score = int(round(score * 100)) if score is not None else None

        cls = _numeric(audits, "cumulative-layout-shift")

        return PerformanceMetrics(
            url=url,
            strategy=strategy,
            performance_score=performance_score,
            lcp_ms=_numeric_ms(audits, "largest-contentful-paint"),
            cls=round(cls, 3) if cls is not None else None,
            inp_ms=self._extract_field_inp(data.get("loadingExperience") or {}),
            fcp_ms=_numeric_ms(audits, "first-contentful-paint"),
            tbt_ms=_numeric_ms(audits, "total-blocking-time"),
            ttfb_ms=_numeric_ms(audits, "server-response-time"),
            speed_index_ms=_numeric_ms(audits, "speed-index"),
            opportunities=self._extract_opportunities(audits),
        )

    def _extract_field_inp(self, loading_experience: dict) -> int | None:
        """INP is field-only (CrUX); lab runs have no interaction."""
        metric = (loading_experience.get("metrics") or {}).get("INTERACTION_TO_NEXT_PAINT") or {}
        percentile = metric.get("percentile")
        return int(percentile) if percentile is not None else None

    def _extract_opportunities(self, audits: dict) -> list[dict[str, Any]]:
        """Extract optimization opportunities from audits."""
        opportunities = []

        for audit_id in OPPORTUNITY_IDS:
            audit = audits.get(audit_id) or {}

            # Only include if there's a potential savings
            if audit.get("score") is not None and audit["score"] < 1:
                details = audit.get("details") or {}
                savings_ms = details.get("overallSavingsMs") or audit.get("numericValue") or 0
                savings_bytes = details.get("overallSavingsBytes") or 0

                opportunities.append({
                    "id": audit_id,
                    "title": audit.get("title", audit_id),
                    "savings_ms": int(savings_ms),
                    "savings_bytes": int(savings_bytes),
                    "display_value": audit.get("displayValue", ""),
                })

        # Sort by potential savings (ms first, then bytes)
        opportunities.sort(key=lambda x: (x["savings_ms"], x["savings_bytes"]), reverse=True)

        return opportunities


def _numeric(audits: dict, audit_id: str) -> float | None:
    value = (audits.get(audit_id) or {}).get("numericValue")
    return float(value) if value is not None else None


def _numeric_ms(audits: dict, audit_id: str) -> int | None:
    value = _numeric(audits, audit_id)
    return int(value) if value is not None else None
