"""File utility helpers."""
from __future__ import annotations

import hashlib
import os
import re
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Any, Iterator, Optional, Union


@contextmanager
def atomic_write(
    path: Union[str, Path],
    mode: str = "w",
    encoding: Optional[str] = "utf-8",
    permissions: int = 0o644,
    newline: Optional[str] = None,
) -> Iterator[IO[Any]]:
    """Safe atomic file write using a temporary file.

    Readers either see the previous content or the complete new content, never
    a partially written file.

    Args:
        path: Target file path.
        mode: Open mode ('w' for text, 'wb' for binary).
        encoding: Text encoding (default: 'utf-8'). Ignored if binary mode.
        permissions: File permissions (default: 0o644).
                     Use 0o600 for preference files.
        newline: Newline control (passed to open).
    """
    target = Path(path).resolve()
    target.parent.mkdir(parents=True, exist_ok=True)

    text_mode = "b" not in mode
    if not text_mode:
        encoding = None
        newline = None

    # A unique name keeps concurrent writers and crashed runs from colliding.
    tmp_path = target.with_name(f"{target.name}.{uuid.uuid4().hex}.tmp")

    f: Optional[IO[Any]] = None
    try:
        f = open(tmp_path, mode, encoding=encoding, newline=newline)
        yield f
        f.flush()
        os.fsync(f.fileno())
        f.close()
        f = None

        try:
            os.chmod(tmp_path, permissions)
        except OSError:
            pass

        os.replace(tmp_path, target)
    except Exception:
        if f is not None:
            try:
                f.close()
            except OSError:
                pass
        if os.path.exists(tmp_path):
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


def sanitize_filename(filename_id: str) -> str:
    """Return a path-safe file stem for ``filename_id``.

    Identifiers that are already safe (UUIDs) are kept verbatim; anything else
    is reduced to safe characters plus a short hash so that distinct ids never
    collapse onto the same file.
    """
    raw = str(filename_id)
    if raw and not _UNSAFE_FILENAME_CHARS.search(raw):
        return raw
    safe_base = _UNSAFE_FILENAME_CHARS.sub("_", raw)
    id_hash = hashlib.sha256(raw.encode("utf-8")).hexdigest()[:6]
    return f"{safe_base}_{id_hash}"
