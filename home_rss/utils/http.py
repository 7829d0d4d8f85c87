"""HTTP helpers for configuring :mod:`requests` sessions."""

from __future__ import annotations

import logging
import re
from typing import Any
from urllib.parse import urlparse

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

# Feeds are fetched once per request; retries are opt-in.
_DEFAULT_RETRY_OPTIONS: dict[str, Any] = {
    "total": 0,
    "backoff_factor": 0.6,
    "status_forcelist": (429, 500, 502, 503, 504),
    "allowed_methods": ("GET",),
    "raise_on_status": False,
}

# Default timeout in seconds if none is provided
DEFAULT_TIMEOUT = 20

# 10 MiB is far beyond any real-world feed.
DEFAULT_MAX_BYTES = 10 * 1024 * 1024

MAX_REDIRECTS = 10

log = logging.getLogger(__name__)


class TimeoutHTTPAdapter(HTTPAdapter):
    """HTTPAdapter that enforces a default timeout."""

    def __init__(self, *args: Any, timeout: int | None = None, **kwargs: Any) -> None:
        self.timeout = timeout
        super().__init__(*args, **kwargs)

    def send(self, request: requests.PreparedRequest, **kwargs: Any) -> requests.Response:
        if kwargs.get("timeout") is None:
            kwargs["timeout"] = self.timeout
        return super().send(request, **kwargs)


def session_with_retries(
    user_agent: str, timeout: int = DEFAULT_TIMEOUT, **retry_opts: Any
) -> requests.Session:
    """Return a :class:`requests.Session` pre-configured with retries and a default timeout.

    Args:
        user_agent: User-Agent header that should be sent with every request.
        timeout: Default timeout in seconds for requests (default: 20).
        **retry_opts: Additional keyword arguments forwarded to
            :class:`urllib3.util.retry.Retry`.
    """

    options = {**_DEFAULT_RETRY_OPTIONS, **retry_opts}
    session = requests.Session()
    session.max_redirects = MAX_REDIRECTS
    retry = Retry(**options)
    adapter = TimeoutHTTPAdapter(max_retries=retry, timeout=timeout)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.update({"User-Agent": user_agent})
    return session


# Block control characters and whitespace in URLs to prevent log injection
_UNSAFE_URL_CHARS = re.compile(r"[\s\x00-\x1f\x7f]")

MAX_URL_LENGTH = 2048


def validate_http_url(url: str | None) -> str | None:
    """Ensure the given URL is valid and uses http or https.

    Returns the URL (stripped) if valid, or ``None`` if invalid/empty/wrong
    scheme, too long, carrying embedded credentials or containing control
    characters.
    """
    if not url:
        return None

    candidate = url.strip()
    if not candidate or len(candidate) > MAX_URL_LENGTH:
        return None

    if _UNSAFE_URL_CHARS.search(candidate):
        return None

    try:
        parsed = urlparse(candidate)
    except ValueError:
        return None
    if parsed.scheme.lower() not in ("http", "https"):
        return None
    # Credentials in URLs would end up in logs and in the preference file.
    if parsed.username or parsed.password:
        return None
    if not parsed.hostname:
        return None
    return candidate


def fetch_content_safe(
    session: requests.Session,
    url: str,
    max_bytes: int = DEFAULT_MAX_BYTES,
    timeout: int | None = None,
    **kwargs: Any,
) -> bytes:
    """Fetch URL content with a size limit.

    Raises:
        ValueError: If URL is invalid, or Content-Length/body size exceeds max_bytes.
        requests.RequestException: For network errors and non-success statuses.
    """
    if not validate_http_url(url):
        raise ValueError(f"Unsafe or invalid URL: {url}")

    with session.get(url, stream=True, timeout=timeout, **kwargs) as r:
        r.raise_for_status()

        content_length = r.headers.get("Content-Length")
        if content_length and content_length.isdigit() and int(content_length) > max_bytes:
            raise ValueError(f"Content-Length exceeds {max_bytes} bytes")

        chunks = []
        received = 0
        for chunk in r.iter_content(chunk_size=8192):
            chunks.append(chunk)
            received += len(chunk)
            if received > max_bytes:
                raise ValueError(f"Response too large (> {max_bytes} bytes)")
        return b"".join(chunks)
