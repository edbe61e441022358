"""
Crawl data model: what the crawler produces for each fetched page.
"""
from dataclasses import dataclass, field, asdict
from enum import Enum as PyEnum
from typing import Any


class ResourceType(str, PyEnum):
    IMAGE = "image"
    SCRIPT = "script"
    STYLESHEET = "stylesheet"
    FONT = "font"
    OTHER = "other"


@dataclass(frozen=True)
class ResourceInfo:
    type: ResourceType
    url: str
    size: int = 0  # bytes, 0 when content-length is unknown


@dataclass(frozen=True)
class CrawlResult:
    """A fetched and rendered page. Read-only once produced."""
    url: str
    final_url: str
    status_code: int
    headers: dict[str, str]
    html: str
    load_time: int  # ms
    page_size: int  # bytes of the serialized DOM
    resources: list[ResourceInfo] = field(default_factory=list)
    internal_links: list[str] = field(default_factory=list)
    external_links: list[str] = field(default_factory=list)
    json_ld_data: list[Any] = field(default_factory=list)
    console_errors: list[str] = field(default_factory=list)
    screenshot: bytes | None = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data.pop("screenshot", None)
        data["has_screenshot"] = self.screenshot is not None
        data["resources"] = [
            {"type": r.type.value, "url": r.url, "size": r.size} for r in self.resources
        ]
        return data
