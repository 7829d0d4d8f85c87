"""Turn parsed feed entries into list rows."""

from __future__ import annotations

from typing import List, Mapping, Optional, Sequence

from ..utils.text import html_to_text
from .models import FeedItem, ParsedFeed

IMAGE_TYPE_PREFIX = "image/"


def select_image_url(enclosures: Sequence[Mapping[str, str]]) -> Optional[str]:
    """Return the URL of the first image enclosure, or ``None``.

    Enclosures lacking either ``url`` or ``type`` are ambiguous and skipped.
    The first match wins even if a later one would be a better fit.
    """

    for enclosure in enclosures:
        if "url" not in enclosure or "type" not in enclosure:
            continue
        if enclosure["type"].startswith(IMAGE_TYPE_PREFIX):
            return enclosure["url"]
    return None


def extract_items(feed: ParsedFeed) -> List[FeedItem]:
    """Normalize every entry of ``feed``, preserving feed order."""

    items: List[FeedItem] = []
    for entry in feed.items:
        items.append(
            FeedItem(
                url=entry.link,
                title=html_to_text(entry.title),
                description=html_to_text(entry.summary),
                image_url=select_image_url(entry.enclosures),
            )
        )
    return items


__all__ = ["IMAGE_TYPE_PREFIX", "extract_items", "select_image_url"]
