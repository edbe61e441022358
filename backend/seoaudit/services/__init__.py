"""
Crawl-and-audit services: extractor, crawler, rule engine, scoring and the
end-to-end audit runner.
"""
