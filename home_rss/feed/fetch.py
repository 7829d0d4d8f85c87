"""Best-effort feed download.

Every way a fetch can go wrong (unsafe URL, transport error, non-success
status, oversized body, unparsable document, feed without entries) yields
``None``. None of these is a diagnostic: the caller simply has no feed to work
with this time.
"""

from __future__ import annotations

import logging
from typing import Optional

import requests

from .. import config
from ..errors import FeedParseError
from ..utils.http import fetch_content_safe, session_with_retries
from .models import ParsedFeed
from .parser import parse_feed

log = logging.getLogger(__name__)

FEED_ACCEPT = (
    "application/rss+xml, application/atom+xml, application/rdf+xml, "
    "application/xml;q=0.9, text/xml;q=0.9, */*;q=0.8"
)


def build_session() -> requests.Session:
    settings = config.build_settings()
    return session_with_retries(
        settings.user_agent,
        timeout=settings.http_timeout,
        total=settings.http_retries,
    )


def _download(session: requests.Session, url: str, timeout: Optional[int], max_bytes: int) -> Optional[bytes]:
    try:
        return fetch_content_safe(
            session,
            url,
            max_bytes=max_bytes,
            timeout=timeout,
            headers={"Accept": FEED_ACCEPT},
        )
    except requests.RequestException as exc:
        log.debug("Feed download failed for %s: %s", url, exc)
    except ValueError as exc:
        log.debug("Feed download rejected for %s: %s", url, exc)
    return None


def fetch_feed(
    url: str,
    *,
    session: Optional[requests.Session] = None,
    timeout: Optional[int] = None,
    max_bytes: Optional[int] = None,
) -> Optional[ParsedFeed]:
    """GET ``url`` and parse it as a feed; ``None`` if there is nothing usable."""

    limit = max_bytes if max_bytes is not None else config.build_settings().max_feed_bytes
    if session is None:
        with build_session() as own_session:
            body = _download(own_session, url, timeout, limit)
    else:
        body = _download(session, url, timeout, limit)

    if body is None:
        return None

    try:
        feed = parse_feed(body, base_url=url)
    except FeedParseError as exc:
        log.debug("Feed at %s could not be parsed: %s", url, exc)
        return None

    if not feed.items:
        log.debug("Feed at %s has no entries", url)
        return None
    return feed


__all__ = ["FEED_ACCEPT", "build_session", "fetch_feed"]
