"""
Page Extractor

Pure functions that turn a rendered DOM snapshot and response metadata into
structured facts:
- Same-document internal/external links (deduplicated, capped)
- JSON-LD payloads that parse as valid JSON
- Lower-cased response headers
- Resource kind classification for network responses
- Visible text and schema.org node lookup used by the rules
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Comment

from seoaudit.core.exceptions import InvalidURLError
from seoaudit.models.crawl import ResourceType
from seoaudit.utils.url_utils import normalize_url

logger = logging.getLogger(__name__)

DEFAULT_LINK_LIMIT = 50

# Playwright request.resource_type -> ResourceType
_RESOURCE_TYPES = {
    "image": ResourceType.IMAGE,
    "script": ResourceType.SCRIPT,
    "stylesheet": ResourceType.STYLESHEET,
    "font": ResourceType.FONT,
}


@dataclass
class ExtractedPageData:
    internal_links: list[str] = field(default_factory=list)
    external_links: list[str] = field(default_factory=list)
    json_ld_data: list[Any] = field(default_factory=list)


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "lxml")


def _as_soup(html_or_soup: str | BeautifulSoup) -> BeautifulSoup:
    if isinstance(html_or_soup, BeautifulSoup):
        return html_or_soup
    return parse_html(html_or_soup)


def classify_resource(resource_type: str) -> ResourceType:
    return _RESOURCE_TYPES.get((resource_type or "").lower(), ResourceType.OTHER)


def parse_content_length(headers: dict[str, str]) -> int:
    """Size in bytes from a content-length header; 0 when missing or invalid."""
    value = normalize_headers(headers).get("content-length")
    if not value:
        return 0
    try:
        return max(0, int(value))
    except ValueError:
        return 0


def normalize_headers(headers: dict[str, str] | None) -> dict[str, str]:
    return {k.lower(): v for k, v in (headers or {}).items()}


def extract_links(
    html_or_soup: str | BeautifulSoup,
    page_url: str,
    domain: str,
    limit: int = DEFAULT_LINK_LIMIT,
) -> tuple[list[str], list[str]]:
    """
    Collect absolute http(s) links from <a href> elements.

    A link is internal iff its hostname equals `domain`. Both lists keep
    document order, are deduplicated and capped at `limit`.
    """
    soup = _as_soup(html_or_soup)
    domain = (domain or "").lower()

    base_url = page_url
    base_tag = soup.find("base", href=True)
    if base_tag:
        base_url = urljoin(page_url, base_tag["href"])

    internal: list[str] = []
    external: list[str] = []
    seen: set[str] = set()

    for a in soup.find_all("a", href=True):
        href = a.get("href", "").strip()
        if not href:
            continue

        absolute = urljoin(base_url, href)
        if urlparse(absolute).scheme not in ("http", "https"):
            continue

        try:
            link = normalize_url(absolute)
        except InvalidURLError:
            continue

        if link in seen:
            continue
        seen.add(link)

        if urlparse(link).hostname == domain:
            internal.append(link)
        else:
            external.append(link)

    return internal[:limit], external[:limit]


def extract_json_ld(html_or_soup: str | BeautifulSoup) -> list[Any]:
    """Parsed payloads of every <script type="application/ld+json">. Malformed blocks are dropped."""
    soup = _as_soup(html_or_soup)
    blocks = []
    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        try:
            blocks.append(json.loads(script.string or script.get_text() or ""))
        except (json.JSONDecodeError, TypeError):
            logger.debug("Dropping malformed JSON-LD block")
    return blocks


def extract_page_data(
    html: str,
    page_url: str,
    domain: str,
    link_limit: int = DEFAULT_LINK_LIMIT,
) -> ExtractedPageData:
    soup = parse_html(html)
    internal, external = extract_links(soup, page_url, domain, limit=link_limit)
    return ExtractedPageData(
        internal_links=internal,
        external_links=external,
        json_ld_data=extract_json_ld(soup),
    )


def visible_text(
    soup: BeautifulSoup,
    exclude: tuple[str, ...] = ("script", "style", "noscript", "template"),
) -> str:
    """
    Body text with excluded elements skipped. Text nodes are joined without a
    separator, so inline markup never splits a word. Does not modify the soup.
    """
    root = soup.body or soup
    parts = []
    for text in root.find_all(string=True):
        if isinstance(text, Comment):
            continue
        if any(parent.name in exclude for parent in text.parents):
            continue
        parts.append(str(text))
    return "".join(parts)


def count_words(text: str) -> int:
    return len(text.split())


def iter_json_ld_nodes(json_ld_data: list[Any]) -> Iterator[dict]:
    """Yield every top-level schema node, including items of arrays and @graph."""
    for block in json_ld_data:
        items = block if isinstance(block, list) else [block]
        for item in items:
            if not isinstance(item, dict):
                continue
            yield item
            graph = item.get("@graph")
            if isinstance(graph, list):
                for node in graph:
                    if isinstance(node, dict):
                        yield node


def schema_types(node: dict) -> list[str]:
    value = node.get("@type")
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [v for v in value if isinstance(v, str)]
    return []


def find_schema(json_ld_data: list[Any], matches: Callable[[str], bool]) -> dict | None:
    """First schema node with an @type accepted by `matches`."""
    for node in iter_json_ld_nodes(json_ld_data):
        if any(matches(t) for t in schema_types(node)):
            return node
    return None
