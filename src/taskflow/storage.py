"""Key-value storage backends.

The task store only needs an asynchronous, single-key ``get``/``set`` API.
Two backends are provided: a JSON file holding a map of keys to string
values, and an in-memory dict for tests and throwaway sessions.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredValue:
    """A value read back from storage."""

    value: str


class KeyValueStorage(Protocol):
    """Asynchronous string key-value API."""

    async def get(self, key: str) -> StoredValue | None: ...

    async def set(self, key: str, value: str) -> None: ...


class MemoryStorage:
    """Dict-backed storage. Nothing survives the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> StoredValue | None:
        if key not in self.data:
            return None
        return StoredValue(self.data[key])

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileStorage:
    """Storage backed by a single JSON object file.

    File I/O runs in a worker thread so the event loop stays responsive.
    Writes are serialized with a lock and replace the file atomically, so
    concurrent saves land in the order they were scheduled.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def get(self, key: str) -> StoredValue | None:
        data = await asyncio.to_thread(self._read)
        if data is None or key not in data:
            return None
        value = data[key]
        if not isinstance(value, str):
            raise ValueError(f"Value for {key!r} in {self._path} is not a string")
        return StoredValue(value)

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            await asyncio.to_thread(self._write_key, key, value)

    def _read(self) -> dict | None:
        """Read the whole map. Missing file reads as None."""
        if not self._path.exists():
            return None

        with open(self._path, encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Storage file {self._path} does not contain a JSON object")
        return data

    def _write_key(self, key: str, value: str) -> None:
        try:
            data = self._read() or {}
        except (OSError, ValueError) as e:
            logger.warning("Replacing unreadable storage file %s: %s", self._path, e)
            data = {}

        data[key] = value

        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug("Wrote key %s to %s (%d bytes)", key, self._path, len(value))
