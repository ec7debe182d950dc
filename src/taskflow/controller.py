"""Task list controller.

The controller is the single owner of the in-memory task list, the active
filter and the input buffer. Every mutation is a synchronous state change;
persisting the result is scheduled afterwards as a detached asyncio task
whose failure is only logged.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timezone

from taskflow.models import (
    FILTERS,
    Filter,
    Task,
    TaskView,
    epoch_millis,
    iso_timestamp,
    matches_filter,
    normalize_title,
)
from taskflow.store import TaskStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TaskListController:
    """Owns the task list and exposes its operations."""

    def __init__(
        self,
        store: TaskStore | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialise an empty controller.

        Args:
            store: Where to load from and save to. None keeps everything in memory.
            clock: Source of "now" for new tasks (must return aware datetimes).
        """
        self._store = store
        self._clock = clock or _utcnow
        self._tasks: list[Task] = []
        self._filter: Filter = "all"
        self._loaded = False
        self._changed_since_start = False
        self._pending_saves: set[asyncio.Task[None]] = set()
        self.input_buffer = ""

    @property
    def tasks(self) -> list[Task]:
        """A copy of the task list in insertion order."""
        return list(self._tasks)

    @property
    def filter(self) -> Filter:
        return self._filter

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def pending_saves(self) -> int:
        """Number of saves scheduled but not yet finished."""
        return len(self._pending_saves)

    # -------------------- startup / shutdown --------------------

    async def load(self) -> None:
        """Seed the task list from the store, once.

        Tasks added while the load was in flight are kept: stored tasks whose
        ids are not already present go first, then the newer tasks, and the
        merged list is saved.
        """
        if self._loaded:
            return
        if self._store is None:
            self._loaded = True
            return

        stored = await self._store.load()

        if self._loaded:
            # Another load finished while this one was waiting.
            return
        self._loaded = True

        if not self._changed_since_start:
            self._tasks = list(stored)
            return

        present = {task.id for task in self._tasks}
        carried = [task for task in stored if task.id not in present]
        logger.info(
            "Merging %d stored task(s) with %d added during startup",
            len(carried),
            len(self._tasks),
        )
        self._tasks = carried + self._tasks
        self._schedule_save()

    async def flush(self) -> None:
        """Wait for every in-flight save to finish."""
        while self._pending_saves:
            await asyncio.gather(*list(self._pending_saves), return_exceptions=True)

    # -------------------- mutations --------------------

    def add_task(self, raw_input: str) -> Task | None:
        """Append a new task. Empty or over-long titles are ignored."""
        title = normalize_title(raw_input)
        if title is None:
            return None

        now = self._clock()
        task = Task(id=epoch_millis(now), title=title, completed=False, createdAt=iso_timestamp(now))
        self._tasks.append(task)
        self.input_buffer = ""
        self._changed()
        logger.debug("Added task %s", task.id)
        return task

    def submit(self) -> Task | None:
        """Add the contents of the input buffer."""
        return self.add_task(self.input_buffer)

    def toggle_task(self, task_id: int) -> bool:
        """Flip completion of the task with this id. Unknown ids are ignored."""
        found = False
        updated: list[Task] = []
        for task in self._tasks:
            if task.id == task_id:
                task = task.model_copy(update={"completed": not task.completed})
                found = True
            updated.append(task)

        if not found:
            return False

        self._tasks = updated
        self._changed()
        return True

    def delete_task(self, task_id: int) -> bool:
        """Remove the task with this id. Unknown ids are ignored."""
        remaining = [task for task in self._tasks if task.id != task_id]
        if len(remaining) == len(self._tasks):
            return False

        self._tasks = remaining
        self._changed()
        return True

    def clear_completed(self) -> int:
        """Remove every completed task, returning how many went."""
        remaining = [task for task in self._tasks if not task.completed]
        removed = len(self._tasks) - len(remaining)
        if removed:
            self._tasks = remaining
            self._changed()
        return removed

    def set_filter(self, filter_name: str) -> bool:
        """Select which tasks the view shows. Unknown names are ignored."""
        if filter_name not in FILTERS:
            logger.debug("Ignoring unknown filter %r", filter_name)
            return False
        self._filter = filter_name  # type: ignore[assignment]
        return True

    # -------------------- queries --------------------

    def find(self, task_id: int) -> Task | None:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def derived_view(self) -> TaskView:
        """Counts, percentage and the filtered list for the current state."""
        completed = sum(1 for task in self._tasks if task.completed)
        return TaskView(
            filter=self._filter,
            filtered_tasks=[task for task in self._tasks if matches_filter(task, self._filter)],
            total_tasks=len(self._tasks),
            completed_tasks=completed,
        )

    # -------------------- persistence --------------------

    def _changed(self) -> None:
        self._changed_since_start = True
        if self._store is not None and not self._loaded:
            # Saving now would overwrite the stored list before load() reads it.
            # load() merges and saves once it has the stored tasks.
            return
        self._schedule_save()

    def _schedule_save(self) -> None:
        if self._store is None:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop; changes were not saved")
            return

        snapshot = tuple(self._tasks)
        save = loop.create_task(self._store.save(snapshot))
        self._pending_saves.add(save)
        save.add_done_callback(self._save_finished)

    def _save_finished(self, save: asyncio.Task[None]) -> None:
        self._pending_saves.discard(save)
        if save.cancelled():
            return
        error = save.exception()
        if error is not None:
            logger.error("Background save failed", exc_info=error)
