"""
LivePen Kernel -- Storage Layer

Key-value persistence for the buffer store. Values are JSON text, keyed by
two fixed keys. Implement with a JSON directory for local use, Postgres for
shared deployments (see postgres_storage), or in-memory for tests.

Every adapter reports failures as StorageError so the store can treat them
as fatal to a single operation only.
"""

from __future__ import annotations

import asyncio
import os
import re
import tempfile
from pathlib import Path

BUFFERS_KEY = "live-editor-files"
SELECTION_KEY = "live-editor-active-files"

_KEY_RE = re.compile(r"^[A-Za-z0-9._-]{1,128}$")


class StorageError(Exception):
    """A persistence read or write failed."""
    pass


# ---------------------------------------------------------------------------
# Storage protocol
# ---------------------------------------------------------------------------


class KeyValueStorage:
    """
    Abstract storage interface.
    Absent keys read as None; callers treat that as "empty".
    """

    async def get(self, key: str) -> str | None:
        """Fetch the value for a key. Returns None if not found."""
        raise NotImplementedError

    async def put(self, key: str, value: str) -> None:
        """Write the value for a key, replacing any previous value."""
        raise NotImplementedError

    async def delete(self, key: str) -> None:
        """Remove a key. Missing keys are ignored."""
        raise NotImplementedError

    async def close(self) -> None:
        """Release any held resources."""
        return None


class MemoryStorage(KeyValueStorage):
    """In-memory storage for testing."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def put(self, key: str, value: str) -> None:
        self.data[key] = value

    async def delete(self, key: str) -> None:
        self.data.pop(key, None)


class FileStorage(KeyValueStorage):
    """
    One JSON file per key inside a data directory.

    Writes go to a private temp file first and are moved into place with
    os.replace, so a crash mid-write leaves the previous value intact. Disk
    IO runs in a worker thread; writes and deletes are serialized in call
    order, so the last put issued is the value left on disk.
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)
        self._write_lock = asyncio.Lock()

    def _path(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    async def get(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return await asyncio.to_thread(_read_text, path)
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    async def put(self, key: str, value: str) -> None:
        path = self._path(key)
        async with self._write_lock:
            try:
                await asyncio.to_thread(_write_text_atomic, path, value)
            except OSError as e:
                raise StorageError(f"Failed to write {path}: {e}") from e

    async def delete(self, key: str) -> None:
        path = self._path(key)
        async with self._write_lock:
            try:
                await asyncio.to_thread(path.unlink, True)
            except OSError as e:
                raise StorageError(f"Failed to delete {path}: {e}") from e


def _read_text(path: Path) -> str | None:
    if not path.exists():
        return None
    return path.read_text(encoding="utf-8")


def _write_text_atomic(path: Path, value: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        dir=path.parent,
        prefix=path.name + ".",
        suffix=".tmp",
        delete=False,
    ) as tmp:
        tmp.write(value)
    try:
        os.replace(tmp.name, path)
    except OSError:
        os.unlink(tmp.name)
        raise
