from seoaudit.integrations.pagespeed import PageSpeedClient, rate_metric

__all__ = ["PageSpeedClient", "rate_metric"]
