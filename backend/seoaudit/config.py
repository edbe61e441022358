from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    PROJECT_NAME: str = "seoaudit"
    VERSION: str = "0.1.0"

    LOG_LEVEL: str = "INFO"

    # Crawler
    CRAWL_MAX_PAGES: int = 25
    CRAWL_NAVIGATION_TIMEOUT_MS: int = 30000
    CRAWL_WAIT_UNTIL: str = "networkidle"  # load, domcontentloaded, networkidle
    CRAWL_LINK_LIMIT: int = 50
    CRAWL_REQUEST_DELAY_MS: int = 0

    # Headless browser
    BROWSER_TYPE: str = "chromium"  # chromium, firefox, webkit
    BROWSER_HEADLESS: bool = True
    BROWSER_ARGS: str = "--no-sandbox,--disable-setuid-sandbox"
    USER_AGENT: str = "SEOAuditBot/1.0 (+https://github.com/seoaudit/seoaudit; site audit)"

    # robots.txt / sitemap checks
    HTTP_CHECK_TIMEOUT: int = 10

    # PageSpeed Insights (optional, external metrics)
    PAGESPEED_ENABLED: bool = False
    PAGESPEED_API_KEY: str = ""
    PAGESPEED_TIMEOUT: int = 60
    PAGESPEED_STRATEGY: str = "mobile"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def browser_args_list(self) -> List[str]:
        return [a.strip() for a in self.BROWSER_ARGS.split(",") if a.strip()]


settings = Settings()
