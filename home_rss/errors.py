"""Exception hierarchy for the feed panels add-on."""

from __future__ import annotations


class HomeRssError(RuntimeError):
    """Base class for errors raised by this package."""


class FeedParseError(HomeRssError):
    """Raised when a feed document cannot be parsed."""


class StorageError(HomeRssError):
    """Raised when a dataset or preference file cannot be read or written."""


class PanelError(HomeRssError):
    """Raised by the panel registry for invalid lifecycle transitions."""


__all__ = ["FeedParseError", "HomeRssError", "PanelError", "StorageError"]
