"""Configuration for the feed panels add-on.

Values are read from the environment once at import time; tests and the CLI
call :func:`refresh_from_env` after changing variables.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .utils.env import get_int_env, get_str_env
from .utils.http import DEFAULT_MAX_BYTES, DEFAULT_TIMEOUT

PANEL_IDS_PREF = "home.rss.panelIds"
DATASET_IDS_PREF = "home.rss.datasetIds"
FEED_SOURCES_PREF = "home.rss.feeds"

DEFAULT_DATA_DIR = Path("data")
DEFAULT_USER_AGENT = "home-rss/1.0"
DEFAULT_UNINSTALL_WORKERS = 4


@dataclass(frozen=True)
class HomeRssPaths:
    """Resolved file-system paths for the local host collaborators."""

    data_dir: Path
    prefs_path: Path
    dataset_dir: Path
    panels_path: Path
    log_dir: Path


@dataclass(frozen=True)
class HomeRssSettings:
    """Network and worker settings derived from environment variables."""

    user_agent: str
    http_timeout: int
    http_retries: int
    max_feed_bytes: int
    uninstall_workers: int


def _env_path(name: str, default: Path) -> Path:
    raw = (os.getenv(name) or "").strip()
    return Path(raw) if raw else default


def _load_from_env() -> None:
    global LOG_LEVEL, LOG_FORMAT, LOG_DIR_PATH, LOG_MAX_BYTES, LOG_BACKUP_COUNT
    global DATA_DIR, PREFS_PATH, DATASET_DIR, PANELS_PATH
    global USER_AGENT, HTTP_TIMEOUT, HTTP_RETRIES, MAX_FEED_BYTES, UNINSTALL_WORKERS

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    LOG_FORMAT = os.getenv("LOG_FORMAT", "plain").strip().lower()
    LOG_DIR_PATH = _env_path("LOG_DIR", Path("log"))
    LOG_MAX_BYTES = max(get_int_env("LOG_MAX_BYTES", 1_000_000), 0)
    LOG_BACKUP_COUNT = max(get_int_env("LOG_BACKUP_COUNT", 5), 0)

    DATA_DIR = _env_path("HOME_RSS_DATA_DIR", DEFAULT_DATA_DIR)
    PREFS_PATH = _env_path("HOME_RSS_PREFS_PATH", DATA_DIR / "prefs.json")
    DATASET_DIR = _env_path("HOME_RSS_DATASET_DIR", DATA_DIR / "datasets")
    PANELS_PATH = _env_path("HOME_RSS_PANELS_PATH", DATA_DIR / "panels.json")

    USER_AGENT = get_str_env("HOME_RSS_USER_AGENT", DEFAULT_USER_AGENT)
    HTTP_TIMEOUT = max(get_int_env("HOME_RSS_HTTP_TIMEOUT", DEFAULT_TIMEOUT), 1)
    HTTP_RETRIES = max(get_int_env("HOME_RSS_HTTP_RETRIES", 0), 0)
    MAX_FEED_BYTES = max(get_int_env("HOME_RSS_MAX_FEED_BYTES", DEFAULT_MAX_BYTES), 1)
    UNINSTALL_WORKERS = max(
        get_int_env("HOME_RSS_UNINSTALL_WORKERS", DEFAULT_UNINSTALL_WORKERS), 1
    )


_load_from_env()


def refresh_from_env() -> None:
    """Re-evaluate all configuration values from environment variables."""

    _load_from_env()


def build_paths() -> HomeRssPaths:
    """Return the resolved filesystem paths for the current environment."""

    return HomeRssPaths(
        data_dir=DATA_DIR,
        prefs_path=PREFS_PATH,
        dataset_dir=DATASET_DIR,
        panels_path=PANELS_PATH,
        log_dir=LOG_DIR_PATH,
    )


def build_settings() -> HomeRssSettings:
    """Assemble the active settings based on environment variables."""

    return HomeRssSettings(
        user_agent=USER_AGENT,
        http_timeout=HTTP_TIMEOUT,
        http_retries=HTTP_RETRIES,
        max_feed_bytes=MAX_FEED_BYTES,
        uninstall_workers=UNINSTALL_WORKERS,
    )


__all__ = [
    "DATASET_IDS_PREF",
    "FEED_SOURCES_PREF",
    "HomeRssPaths",
    "HomeRssSettings",
    "PANEL_IDS_PREF",
    "build_paths",
    "build_settings",
    "refresh_from_env",
]
