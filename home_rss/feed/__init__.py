"""Feed download, parsing and item extraction."""

from .extract import extract_items, select_image_url
from .fetch import fetch_feed
from .models import FeedDescriptor, FeedEntry, FeedItem, ParsedFeed
from .parser import parse_feed

__all__ = [
    "FeedDescriptor",
    "FeedEntry",
    "FeedItem",
    "ParsedFeed",
    "extract_items",
    "fetch_feed",
    "parse_feed",
    "select_image_url",
]
