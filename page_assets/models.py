"""Data models used throughout the analysis pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple


@dataclass
class ImageDetail:
    """Per-bucket tally of discovered images."""

    count: int = 0
    total_size: int = 0
    sources: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "totalSize": self.total_size,
            "sources": list(self.sources),
        }


class ImageInventory:
    """Images grouped by type bucket (``.png``, ``.unknown``, ...).

    ``count`` tracks every classified candidate routed to a bucket, while
    ``sources`` only lists each resolved source once per bucket. Sizes are
    only ever added, never recomputed.
    """

    def __init__(self) -> None:
        self._buckets: Dict[str, ImageDetail] = {}

    def _bucket(self, key: str) -> ImageDetail:
        detail = self._buckets.get(key)
        if detail is None:
            detail = ImageDetail()
            self._buckets[key] = detail
        return detail

    def record(self, key: str, source: str, size: int = 0) -> None:
        """Attribute one classified candidate to ``key``."""
        detail = self._bucket(key)
        detail.count += 1
        if source not in detail.sources:
            detail.sources.append(source)
        if size > 0:
            detail.total_size += size

    def add_size(self, key: str, size: int) -> None:
        if size <= 0:
            return
        self._bucket(key).total_size += size

    def get(self, key: str) -> Optional[ImageDetail]:
        return self._buckets.get(key)

    def items(self) -> Iterator[Tuple[str, ImageDetail]]:
        return iter(list(self._buckets.items()))

    def __contains__(self, key: object) -> bool:
        return key in self._buckets

    def __getitem__(self, key: str) -> ImageDetail:
        return self._buckets[key]

    def __len__(self) -> int:
        return len(self._buckets)

    @property
    def total_count(self) -> int:
        return sum(detail.count for detail in self._buckets.values())

    @property
    def total_size(self) -> int:
        return sum(detail.total_size for detail in self._buckets.values())

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {key: detail.to_dict() for key, detail in self._buckets.items()}


@dataclass
class Classification:
    """Outcome of classifying a single raw candidate."""

    bucket: str
    source: str
    size: int = 0


@dataclass
class LinkDetails:
    """Anchor links found on a page, split by hostname."""

    internal_links: List[str] = field(default_factory=list)
    external_links: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "internalLinks": list(self.internal_links),
            "externalLinks": list(self.external_links),
        }


@dataclass
class FetchedPage:
    """HTML retrieved for a URL along with the URL it finally resolved to."""

    requested_url: str
    final_url: str
    html: str


@dataclass
class PageReport:
    """Full asset report for one page."""

    requested_url: str
    final_url: str
    images: ImageInventory
    links: LinkDetails

    def to_dict(self) -> Dict[str, Any]:
        return {
            "requestedUrl": self.requested_url,
            "finalUrl": self.final_url,
            "images": self.images.to_dict(),
            "links": self.links.to_dict(),
            "summary": {
                "imageCount": self.images.total_count,
                "totalSize": self.images.total_size,
            },
        }
