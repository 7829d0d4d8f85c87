"""Durable bookkeeping of the panel and dataset ids this add-on created.

Each category is a JSON array of strings stored under one preference key. The
list is only ever appended to; uninstall reads it back to know what to tear
down. Anything that does not parse as an array of strings is treated as an
empty list so that a corrupt preference never blocks install or uninstall.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from ..config import DATASET_IDS_PREF, FEED_SOURCES_PREF, PANEL_IDS_PREF

log = logging.getLogger(__name__)

CATEGORIES = (PANEL_IDS_PREF, DATASET_IDS_PREF)


def _parse_id_list(raw: Optional[str], category: str) -> List[str]:
    if raw is None:
        return []
    try:
        ids = json.loads(raw)
    except (TypeError, ValueError):
        log.debug("Registry %s is not valid JSON, treating it as empty", category)
        return []
    if not isinstance(ids, list) or not all(isinstance(i, str) for i in ids):
        log.debug("Registry %s is not a list of strings, treating it as empty", category)
        return []
    return ids


class IdRegistry:
    """Append-only id lists on top of a scalar preference store.

    ``append`` is a read-modify-write of the whole list without a lock that
    spans both steps: two overlapping appends to the same category can lose
    one id (last writer wins).
    """

    def __init__(self, prefs: Any) -> None:
        self.prefs = prefs

    def read_all(self, category: str) -> List[str]:
        return _parse_id_list(self.prefs.get_string(category), category)

    def append(self, category: str, item_id: str) -> None:
        ids = self.read_all(category)
        ids.append(item_id)
        self.prefs.set_string(category, json.dumps(ids))

    def clear(self, category: str) -> None:
        self.prefs.remove(category)

    def panel_ids(self) -> List[str]:
        return self.read_all(PANEL_IDS_PREF)

    def dataset_ids(self) -> List[str]:
        return self.read_all(DATASET_IDS_PREF)


class FeedSourceMap:
    """Maps dataset ids to the feed they were created from, for refreshes."""

    def __init__(self, prefs: Any, key: str = FEED_SOURCES_PREF) -> None:
        self.prefs = prefs
        self.key = key

    def read_all(self) -> Dict[str, Dict[str, Optional[str]]]:
        raw = self.prefs.get_string(self.key)
        if raw is None:
            return {}
        try:
            sources = json.loads(raw)
        except (TypeError, ValueError):
            log.debug("Feed source map is not valid JSON, treating it as empty")
            return {}
        if not isinstance(sources, dict):
            return {}
        return {
            str(dataset_id): entry
            for dataset_id, entry in sources.items()
            if isinstance(entry, dict) and isinstance(entry.get("href"), str)
        }

    def get(self, dataset_id: str) -> Optional[Dict[str, Optional[str]]]:
        return self.read_all().get(dataset_id)

    def record(self, dataset_id: str, *, href: str, title: Optional[str], panel_id: str) -> None:
        sources = self.read_all()
        sources[dataset_id] = {"href": href, "title": title, "panel_id": panel_id}
        self.prefs.set_string(self.key, json.dumps(sources, sort_keys=True))

    def clear(self) -> None:
        self.prefs.remove(self.key)


__all__ = ["CATEGORIES", "FeedSourceMap", "IdRegistry"]
