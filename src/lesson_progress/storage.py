"""Asynchronous key-value stores backing the freshness cache."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Protocol

from .errors import StorageError

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Protocol for string persistence keyed by a fixed name.

    Implementations raise on failure; callers decide how to recover.
    """

    async def get(self, key: str) -> str | None:
        """Load the value for key.

        Returns:
            The stored string, or None if nothing was stored yet.
        """
        ...

    async def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        ...


class MemoryStore:
    """In-memory store for tests and ephemeral sessions.

    Not persistent - data lost on process restart.
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._storage: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._storage.get(key)

    async def set(self, key: str, value: str) -> None:
        self._storage[key] = value

    def clear(self) -> None:
        """Clear all stored data (testing helper)."""
        self._storage.clear()


class FileStore:
    """JSON file store holding every key in one document.

    Writes go to a temp file that is then renamed over the original,
    so a crash mid-write leaves the previous contents intact.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Cannot read {self._path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"{self._path} does not contain a JSON object")
        return data

    def _write(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value

        self._path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            temp_path.replace(self._path)
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink()
            raise StorageError(f"Cannot write {self._path}: {e}") from e
        logger.debug("Wrote key %r to %s", key, self._path)

    async def get(self, key: str) -> str | None:
        data = await asyncio.to_thread(self._read_all)
        value = data.get(key)
        if value is not None and not isinstance(value, str):
            raise StorageError(f"Value for {key!r} in {self._path} is not a string")
        return value

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write, key, value)
