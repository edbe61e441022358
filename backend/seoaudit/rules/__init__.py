"""
The audit rule catalog.

default_rules() returns fresh instances in catalog order. Category weight
sums: technical 35, onpage 25, structured-data 20, performance 15,
local-seo 5.
"""
import httpx

from seoaudit.rules.base import AuditRule
from seoaudit.rules.technical import (
    HttpStatusRule,
    HttpsRule,
    CanonicalRule,
    RobotsTxtRule,
    SitemapRule,
    SecurityHeadersRule,
    MobileFriendlyRule,
    CoreWebVitalsRule,
)
from seoaudit.rules.onpage import (
    TitleTagRule,
    MetaDescriptionRule,
    H1TagRule,
    WordCountRule,
    ImageAltTextRule,
    OpenGraphRule,
    LinksRule,
)
from seoaudit.rules.structured_data import (
    JsonLdRule,
    OrganizationSchemaRule,
    ProductSchemaRule,
    ArticleSchemaRule,
    LocalBusinessSchemaRule,
)
from seoaudit.rules.performance import (
    LoadTimeRule,
    PageSizeRule,
    RequestCountRule,
    PageSpeedScoreRule,
)
from seoaudit.rules.local_seo import (
    NapConsistencyRule,
    GoogleMapsRule,
    BusinessProfileRule,
)


def default_rules(transport: httpx.AsyncBaseTransport | None = None) -> list[AuditRule]:
    """
    Build the full rule catalog.

    Args:
        transport: Optional httpx transport for the rules that fetch
            robots.txt and sitemaps themselves.
    """
    return [
        # Technical (35 points)
        HttpStatusRule(),
        HttpsRule(),
        CanonicalRule(),
        RobotsTxtRule(transport=transport),
        SitemapRule(transport=transport),
        SecurityHeadersRule(),
        MobileFriendlyRule(),
        CoreWebVitalsRule(),

        # On-Page (25 points)
        TitleTagRule(),
        MetaDescriptionRule(),
        H1TagRule(),
        WordCountRule(),
        ImageAltTextRule(),
        OpenGraphRule(),
        LinksRule(),

        # Structured Data (20 points)
        JsonLdRule(),
        OrganizationSchemaRule(),
        ProductSchemaRule(),
        ArticleSchemaRule(),
        LocalBusinessSchemaRule(),

        # Performance (15 points)
        LoadTimeRule(),
        PageSizeRule(),
        RequestCountRule(),
        PageSpeedScoreRule(),

        # Local SEO (5 points)
        NapConsistencyRule(),
        GoogleMapsRule(),
        BusinessProfileRule(),
    ]


__all__ = [
    "AuditRule",
    "default_rules",
    "HttpStatusRule",
    "HttpsRule",
    "CanonicalRule",
    "RobotsTxtRule",
    "SitemapRule",
    "SecurityHeadersRule",
    "MobileFriendlyRule",
    "CoreWebVitalsRule",
    "TitleTagRule",
    "MetaDescriptionRule",
    "H1TagRule",
    "WordCountRule",
    "ImageAltTextRule",
    "OpenGraphRule",
    "LinksRule",
    "JsonLdRule",
    "OrganizationSchemaRule",
    "ProductSchemaRule",
    "ArticleSchemaRule",
    "LocalBusinessSchemaRule",
    "LoadTimeRule",
    "PageSizeRule",
    "RequestCountRule",
    "PageSpeedScoreRule",
    "NapConsistencyRule",
    "GoogleMapsRule",
    "BusinessProfileRule",
]
