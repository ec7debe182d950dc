"""Persistent task store.

Loads and saves the whole task list as one JSON string under a fixed key.
The store is a best-effort cache: load problems read as "no tasks" and save
problems are logged, never raised to the caller.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence

from pydantic import ValidationError

from taskflow.models import Task
from taskflow.storage import KeyValueStorage

logger = logging.getLogger(__name__)

STORAGE_KEY = "todo-tasks"


def serialize_tasks(tasks: Sequence[Task]) -> str:
    """Serialize tasks to the persisted JSON array format."""
    return json.dumps([task.model_dump(mode="json") for task in tasks], separators=(",", ":"))


def parse_tasks(payload: str) -> list[Task]:
    """Parse the persisted JSON array, skipping entries that fail validation.

    Raises:
        ValueError: If the payload is not JSON or not a JSON array.
    """
    data = json.loads(payload)
    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON array, got {type(data).__name__}")

    tasks: list[Task] = []
    for index, raw in enumerate(data):
        try:
            tasks.append(Task.model_validate(raw))
        except ValidationError as e:
            logger.warning("Skipping invalid stored task at index %d: %s", index, e)
    return tasks


class TaskStore:
    """Adapter between the task list and a key-value storage backend."""

    def __init__(self, storage: KeyValueStorage, key: str = STORAGE_KEY) -> None:
        self._storage = storage
        self._key = key

    @property
    def storage(self) -> KeyValueStorage:
        return self._storage

    async def load(self) -> list[Task]:
        """Load the stored task list, or an empty list if none is usable."""
        try:
            result = await self._storage.get(self._key)
        except Exception:
            logger.warning("Could not read saved tasks; starting empty", exc_info=True)
            return []

        if result is None or not result.value:
            logger.info("No saved tasks found")
            return []

        try:
            tasks = parse_tasks(result.value)
        except ValueError as e:
            logger.warning("Saved tasks are unreadable; starting empty: %s", e)
            return []

        logger.info("Loaded %d task(s)", len(tasks))
        return tasks

    async def save(self, tasks: Sequence[Task]) -> None:
        """Overwrite the stored task list with a full snapshot."""
        try:
            await self._storage.set(self._key, serialize_tasks(tasks))
        except Exception:
            logger.exception("Error saving tasks")
            return

        logger.debug("Saved %d task(s)", len(tasks))
