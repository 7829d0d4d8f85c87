"""Environment variable helpers and a small ``.env`` loader.

The CLI calls :func:`load_env_file` before :mod:`home_rss.config` re-reads
the environment, so a local ``.env`` can point the data directory or the HTTP
settings somewhere else.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Dict, MutableMapping, Optional, Tuple

__all__ = [
    "get_int_env",
    "get_str_env",
    "load_env_file",
]

log = logging.getLogger(__name__)


def get_int_env(name: str, default: int) -> int:
    """Return ``name`` as ``int``; unset or unparsable values give ``default``."""

    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except (ValueError, TypeError) as e:
        log.warning(
            "Invalid value %s=%r, using default %d (%s: %s)",
            name,
            raw,
            default,
            type(e).__name__,
            e,
        )
        return default


def get_str_env(name: str, default: str) -> str:
    """Return the stripped value of ``name`` or ``default`` when unset/blank."""

    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip() or default


_ASSIGNMENT_RE = re.compile(r"^(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*)$")
# An unquoted value ends at a '#' that starts the value or follows whitespace.
_INLINE_COMMENT_RE = re.compile(r"(?:^|\s)#.*$")


def _parse_line(line: str) -> Optional[Tuple[str, str]]:
    line = line.strip()
    if not line or line.startswith("#"):
        return None
    match = _ASSIGNMENT_RE.match(line)
    if match is None:
        return None

    key, value = match.group(1), match.group(2).strip()
    quote = value[:1]
    if quote in ("'", '"'):
        closing = value.find(quote, 1)
        if closing > 0:
            return key, value[1:closing]
        return key, value
    return key, _INLINE_COMMENT_RE.sub("", value).strip()


def load_env_file(
    path: Path,
    *,
    override: bool = False,
    environ: MutableMapping[str, str] | None = None,
) -> Dict[str, str]:
    """Copy the assignments of ``path`` into ``environ`` (``os.environ`` by default).

    Variables that are already set win unless ``override`` is true. Returns
    everything parsed from the file; a missing or unreadable file gives ``{}``.
    """

    env = environ if environ is not None else os.environ
    if not path.is_file():
        return {}

    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as exc:
        log.warning("Cannot read env file %s, skipping it (%s)", path, exc)
        return {}

    parsed: Dict[str, str] = {}
    for line in lines:
        assignment = _parse_line(line)
        if assignment is not None:
            key, value = assignment
            parsed[key] = value

    for key, value in parsed.items():
        if override or key not in env:
            env[key] = value
    return parsed
