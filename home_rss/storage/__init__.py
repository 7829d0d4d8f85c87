"""Storage backends: preferences, id registries and datasets."""

from .datasets import FileDatasetStore, MemoryDatasetStore, delete_dataset, replace_dataset
from .prefs import JsonPreferenceStore, MemoryPreferenceStore
from .registry import FeedSourceMap, IdRegistry

__all__ = [
    "FeedSourceMap",
    "FileDatasetStore",
    "IdRegistry",
    "JsonPreferenceStore",
    "MemoryDatasetStore",
    "MemoryPreferenceStore",
    "delete_dataset",
    "replace_dataset",
]
