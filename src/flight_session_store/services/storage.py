"""Durable key-value storage backends for session checkpoints."""

import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when a storage backend fails to read, write or delete."""


class KeyValueStore(Protocol):
    """Small synchronous app-local key-value store."""

    def get(self, key: str) -> bytes | None: ...

    def set(self, key: str, value: bytes) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryKeyValueStore:
    """Dict-backed store. Survives store instances, not processes."""

    def __init__(self):
        self.data: dict[str, bytes] = {}

    def get(self, key: str) -> bytes | None:
        return self.data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self.data[key] = bytes(value)

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileKeyValueStore:
    """Stores each key as ``<key>.json`` inside a directory.

    Writes go to a temp file in the same directory and are moved into place
    with ``os.replace``, so a process killed mid-write leaves either the old
    record or the new one.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _key_path(self, key: str) -> Path:
        """Get path to the file holding a key."""
        if not key or "/" in key or "\\" in key or key in (".", ".."):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> bytes | None:
        path = self._key_path(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def set(self, key: str, value: bytes) -> None:
        path = self._key_path(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise StorageError(f"Failed to write {path}: {e}") from e

    def delete(self, key: str) -> None:
        path = self._key_path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to delete {path}: {e}") from e
        logger.debug(f"Deleted storage key {key}")
