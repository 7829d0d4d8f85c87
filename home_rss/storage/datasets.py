"""Dataset storage and the clear-then-write synchronizer.

A dataset handle offers ``delete_all()`` and ``save(items)``. ``save`` adds
rows to whatever the dataset already holds, which is why a refresh has to
delete first. :func:`replace_dataset` runs both steps in order; between them
the dataset is observably empty and a failure in either step is propagated
without rollback.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Union

from ..errors import StorageError
from ..feed.models import FeedItem
from ..utils.files import atomic_write, sanitize_filename

log = logging.getLogger(__name__)

Row = Dict[str, Any]


def _to_row(item: Union[FeedItem, Mapping[str, Any]]) -> Row:
    if isinstance(item, FeedItem):
        return item.to_dict()
    return dict(item)


class FileDatasetHandle:
    def __init__(self, dataset_id: str, path: Path, lock: threading.Lock) -> None:
        self.dataset_id = dataset_id
        self.path = path
        self._lock = lock

    def _read(self) -> List[Row]:
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                payload = json.load(fh)
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as exc:
            raise StorageError(f"Could not read dataset {self.dataset_id}: {exc}") from exc
        if not isinstance(payload, list):
            raise StorageError(f"Dataset {self.dataset_id} does not contain a JSON array")
        return payload

    def load(self) -> List[Row]:
        with self._lock:
            return self._read()

    def delete_all(self) -> None:
        with self._lock:
            try:
                self.path.unlink()
            except FileNotFoundError:
                pass
            except OSError as exc:
                raise StorageError(f"Could not delete dataset {self.dataset_id}: {exc}") from exc

    def save(self, items: Iterable[Union[FeedItem, Mapping[str, Any]]]) -> None:
        rows = [_to_row(item) for item in items]
        with self._lock:
            current = self._read()
            current.extend(rows)
            try:
                with atomic_write(self.path) as fh:
                    json.dump(current, fh, ensure_ascii=False, indent=2)
            except OSError as exc:
                raise StorageError(f"Could not save dataset {self.dataset_id}: {exc}") from exc


class FileDatasetStore:
    """One JSON array file per dataset below ``root``."""

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root)
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _path(self, dataset_id: str) -> Path:
        return self.root / f"{sanitize_filename(dataset_id)}.json"

    def get_handle(self, dataset_id: str) -> FileDatasetHandle:
        with self._locks_guard:
            lock = self._locks.setdefault(dataset_id, threading.Lock())
        return FileDatasetHandle(dataset_id, self._path(dataset_id), lock)

    def load(self, dataset_id: str) -> List[Row]:
        return self.get_handle(dataset_id).load()

    def exists(self, dataset_id: str) -> bool:
        return self._path(dataset_id).exists()


class MemoryDatasetHandle:
    def __init__(self, store: "MemoryDatasetStore", dataset_id: str) -> None:
        self._store = store
        self.dataset_id = dataset_id

    def load(self) -> List[Row]:
        with self._store._lock:
            return list(self._store._data.get(self.dataset_id, []))

    def delete_all(self) -> None:
        with self._store._lock:
            self._store._data.pop(self.dataset_id, None)

    def save(self, items: Iterable[Union[FeedItem, Mapping[str, Any]]]) -> None:
        rows = [_to_row(item) for item in items]
        with self._store._lock:
            self._store._data.setdefault(self.dataset_id, []).extend(rows)


class MemoryDatasetStore:
    """Process-local dataset store."""

    def __init__(self) -> None:
        self._data: Dict[str, List[Row]] = {}
        self._lock = threading.Lock()

    def get_handle(self, dataset_id: str) -> MemoryDatasetHandle:
        return MemoryDatasetHandle(self, dataset_id)

    def load(self, dataset_id: str) -> List[Row]:
        return self.get_handle(dataset_id).load()

    def exists(self, dataset_id: str) -> bool:
        with self._lock:
            return dataset_id in self._data


def replace_dataset(store: Any, dataset_id: str, items: Sequence[Union[FeedItem, Mapping[str, Any]]]) -> None:
    """Replace the contents of ``dataset_id`` with ``items``.

    Two sequential steps, delete then save. Not atomic: a concurrent reader
    can see the dataset empty in between.
    """

    handle = store.get_handle(dataset_id)
    handle.delete_all()
    handle.save(items)
    log.debug("Dataset %s now holds %d items", dataset_id, len(items))


def delete_dataset(store: Any, dataset_id: str) -> None:
    store.get_handle(dataset_id).delete_all()


__all__ = [
    "FileDatasetStore",
    "MemoryDatasetStore",
    "delete_dataset",
    "replace_dataset",
]
