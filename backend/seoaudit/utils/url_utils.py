"""
URL helpers shared by the crawler, the extractor and the rules.
"""
import re
from urllib.parse import urldefrag, urlparse, urlunparse

from seoaudit.core.exceptions import InvalidURLError

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


def normalize_url(url: str) -> str:
    """
    Normalize a URL for crawling and dedupe.

    Adds https:// when no scheme is given, lower-cases scheme and host,
    drops the fragment and strips a trailing slash unless the path is the root.
    """
    normalized = (url or "").strip()
    if not normalized:
        raise InvalidURLError(url)

    if not _SCHEME_RE.match(normalized):
        normalized = "https://" + normalized

    normalized, _ = urldefrag(normalized)
    parsed = urlparse(normalized)
    if not parsed.hostname:
        raise InvalidURLError(url)

    path = parsed.path or "/"
    if path != "/" and path.endswith("/"):
        path = path.rstrip("/") or "/"

    return urlunparse((
        parsed.scheme.lower(),
        parsed.netloc.lower(),
        path,
        parsed.params,
        parsed.query,
        "",
    ))


def extract_domain(url: str) -> str:
    """Hostname of a URL (no port, lower-case)."""
    return urlparse(normalize_url(url)).hostname or ""


def is_same_domain(url1: str, url2: str) -> bool:
    try:
        return extract_domain(url1) == extract_domain(url2)
    except InvalidURLError:
        return False


def is_valid_url(url: str) -> bool:
    try:
        normalize_url(url)
        return True
    except InvalidURLError:
        return False


def extract_pathname(url: str) -> str:
    try:
        return urlparse(normalize_url(url)).path
    except InvalidURLError:
        return ""


def origin(url: str) -> str:
    """scheme://host[:port] of a URL."""
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"
