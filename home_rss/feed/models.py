"""Value types passed between the fetcher, the extractor and the stores."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class FeedDescriptor:
    """One feed advertised by a page (``<link rel="alternate">``)."""

    href: str
    title: Optional[str] = None

    @property
    def label(self) -> str:
        return self.title or self.href


@dataclass(frozen=True)
class FeedEntry:
    """A parsed feed entry before normalization.

    ``title`` and ``summary`` may still contain markup. Each enclosure only
    carries the attributes present in the document, so a missing ``url`` or
    ``type`` shows up as a missing key.
    """

    link: str = ""
    title: str = ""
    summary: str = ""
    enclosures: Tuple[Mapping[str, str], ...] = ()


@dataclass(frozen=True)
class ParsedFeed:
    title: str = ""
    link: str = ""
    items: List[FeedEntry] = field(default_factory=list)


@dataclass(frozen=True)
class FeedItem:
    """A normalized list row as stored in a dataset."""

    url: str
    title: str
    description: str
    image_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "url": self.url,
            "title": self.title,
            "description": self.description,
        }
        if self.image_url is not None:
            data["image_url"] = self.image_url
        return data


__all__ = ["FeedDescriptor", "FeedEntry", "FeedItem", "ParsedFeed"]
