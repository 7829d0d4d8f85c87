"""Scalar string preferences.

The ID registry only needs ``get_string``/``set_string``/``remove``. Two
implementations are provided: :class:`JsonPreferenceStore`, a single JSON
object on disk that survives restarts, and :class:`MemoryPreferenceStore` for
embedding and tests.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Dict, Optional, Union

from ..errors import StorageError
from ..utils.files import atomic_write
from ..utils.locking import file_lock

log = logging.getLogger(__name__)


class MemoryPreferenceStore:
    """Process-local preference store."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get_string(self, key: str) -> Optional[str]:
        with self._lock:
            return self._values.get(key)

    def set_string(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"Preference {key!r} must be a string, got {type(value).__name__}")
        with self._lock:
            self._values[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._values)


class JsonPreferenceStore:
    """Preferences kept as one JSON object in ``path``.

    Reads and writes are serialized through an advisory lock on a sidecar
    ``.lock`` file; the data file itself is replaced atomically. A missing or
    corrupt file reads as an empty store.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._lock_path = self.path.with_name(self.path.name + ".lock")

    def _open_lock(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        return self._lock_path.open("a+", encoding="utf-8")

    def _load(self) -> Dict[str, str]:
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                payload = json.load(fh)
        except FileNotFoundError:
            return {}
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            log.warning("Preference file %s is corrupt, treating it as empty: %s", self.path, exc)
            return {}
        except OSError as exc:
            log.warning("Could not read preference file %s: %s", self.path, exc)
            return {}
        if not isinstance(payload, dict):
            log.warning(
                "Preference file %s does not contain a JSON object (found %s)",
                self.path,
                type(payload).__name__,
            )
            return {}
        return {str(k): v for k, v in payload.items() if isinstance(v, str)}

    def _store(self, values: Dict[str, str]) -> None:
        try:
            with atomic_write(self.path, permissions=0o600) as fh:
                json.dump(values, fh, ensure_ascii=False, indent=2, sort_keys=True)
        except OSError as exc:
            raise StorageError(f"Could not write preference file {self.path}: {exc}") from exc

    def get_string(self, key: str) -> Optional[str]:
        try:
            with self._open_lock() as lock_file, file_lock(lock_file, exclusive=False):
                return self._load().get(key)
        except OSError as exc:
            log.warning("Could not lock preference file %s: %s", self.path, exc)
            return self._load().get(key)

    def set_string(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"Preference {key!r} must be a string, got {type(value).__name__}")
        try:
            with self._open_lock() as lock_file, file_lock(lock_file, exclusive=True):
                values = self._load()
                values[key] = value
                self._store(values)
        except OSError as exc:
            raise StorageError(f"Could not update preference {key!r}: {exc}") from exc

    def remove(self, key: str) -> None:
        try:
            with self._open_lock() as lock_file, file_lock(lock_file, exclusive=True):
                values = self._load()
                if values.pop(key, None) is not None:
                    self._store(values)
        except OSError as exc:
            raise StorageError(f"Could not remove preference {key!r}: {exc}") from exc

    def keys(self) -> list[str]:
        return sorted(self._load())


__all__ = ["JsonPreferenceStore", "MemoryPreferenceStore"]
