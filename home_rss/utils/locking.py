"""Cross-platform advisory locks for the preference file."""

from __future__ import annotations

import errno
import logging
import os
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator

try:  # pragma: no cover - platform dependent
    import fcntl  # type: ignore
except ModuleNotFoundError:  # pragma: no cover
    fcntl = None  # type: ignore

try:  # pragma: no cover - platform dependent
    import msvcrt  # type: ignore
except ModuleNotFoundError:  # pragma: no cover
    msvcrt = None  # type: ignore

log = logging.getLogger(__name__)

# flock() is per open file description, so threads of one process need their
# own lock per path on top of the OS lock.
_PATH_LOCKS: Dict[str, threading.Lock] = {}
_PATH_REFS: Dict[str, int] = {}
_PATH_LOCKS_GUARD = threading.Lock()


def _path_lock(path: str) -> threading.Lock:
    with _PATH_LOCKS_GUARD:
        lock = _PATH_LOCKS.get(path)
        if lock is None:
            lock = _PATH_LOCKS[path] = threading.Lock()
            _PATH_REFS[path] = 0
        _PATH_REFS[path] += 1
        return lock


def _drop_path_lock(path: str) -> None:
    with _PATH_LOCKS_GUARD:
        _PATH_REFS[path] -= 1
        if _PATH_REFS[path] <= 0:
            _PATH_LOCKS.pop(path, None)
            _PATH_REFS.pop(path, None)


def _os_lock(fileobj: Any, exclusive: bool) -> None:
    if fcntl is not None:  # pragma: no branch - simple POSIX case
        flag = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        while True:
            try:
                fcntl.flock(fileobj.fileno(), flag)
                return
            except OSError as exc:  # pragma: no cover - rare EINTR handling
                if exc.errno != errno.EINTR:
                    raise
    elif msvcrt is not None:  # pragma: no cover - Windows fallback
        fileobj.seek(0)
        msvcrt.locking(fileobj.fileno(), msvcrt.LK_LOCK, 1)


def _os_unlock(fileobj: Any) -> None:
    if fcntl is not None:  # pragma: no branch - simple POSIX case
        fcntl.flock(fileobj.fileno(), fcntl.LOCK_UN)
    elif msvcrt is not None:  # pragma: no cover - Windows fallback
        fileobj.seek(0)
        msvcrt.locking(fileobj.fileno(), msvcrt.LK_UNLCK, 1)


@contextmanager
def file_lock(fileobj: Any, *, exclusive: bool) -> Iterator[None]:
    """Hold a thread lock and an OS file lock on ``fileobj`` for the block."""

    path = os.path.abspath(fileobj.name) if hasattr(fileobj, "name") else None
    thread_lock = _path_lock(path) if path else None
    if thread_lock is not None:
        thread_lock.acquire()

    locked = False
    try:
        try:
            _os_lock(fileobj, exclusive)
            locked = True
        except OSError as exc:  # pragma: no cover - lock failures are rare
            log.debug("File lock failed (%s), continuing without lock.", exc)
        yield
    finally:
        if locked:
            try:
                _os_unlock(fileobj)
            except OSError as exc:  # pragma: no cover - release failures are rare
                log.debug("File lock could not be released: %s", exc)
        if thread_lock is not None:
            thread_lock.release()
            _drop_path_lock(path)  # type: ignore[arg-type]


__all__ = ["file_lock"]
