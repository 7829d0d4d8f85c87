from __future__ import annotations

import sys
from pathlib import Path

import pytest

root = Path(__file__).resolve().parents[1]
if str(root) not in sys.path:
    sys.path.insert(0, str(root))

from home_rss.panels import LocalPanelRegistry  # noqa: E402
from home_rss.storage import MemoryDatasetStore, MemoryPreferenceStore  # noqa: E402

from helpers import RecordingOpener, SequentialIds  # noqa: E402


@pytest.fixture
def prefs() -> MemoryPreferenceStore:
    return MemoryPreferenceStore()


@pytest.fixture
def datasets() -> MemoryDatasetStore:
    return MemoryDatasetStore()


@pytest.fixture
def panels(tmp_path: Path) -> LocalPanelRegistry:
    return LocalPanelRegistry(tmp_path / "panels.json")


@pytest.fixture
def ids() -> SequentialIds:
    return SequentialIds()


@pytest.fixture
def opener() -> RecordingOpener:
    return RecordingOpener()
