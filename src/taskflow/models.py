"""Task models and the derived view."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator

Filter = Literal["all", "active", "completed"]

FILTERS: tuple[Filter, ...] = ("all", "active", "completed")
MAX_TITLE_LENGTH = 100

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class Task(BaseModel):
    """A single to-do item.

    Field names match the persisted JSON format, so ``createdAt`` stays
    camelCase.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    completed: bool = False
    createdAt: str

    @field_validator("title")
    @classmethod
    def _check_title(cls, value: str) -> str:
        title = normalize_title(value)
        if title is None:
            raise ValueError(f"title must be 1-{MAX_TITLE_LENGTH} characters once trimmed")
        return title


def normalize_title(raw: str) -> str | None:
    """Trim a raw title, returning None if it is empty or too long."""
    title = raw.strip()
    if not title or len(title) > MAX_TITLE_LENGTH:
        return None
    return title


def epoch_millis(moment: datetime) -> int:
    """Milliseconds since the Unix epoch for an aware datetime."""
    return (moment - _EPOCH) // timedelta(milliseconds=1)


def iso_timestamp(moment: datetime) -> str:
    """Format an aware datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def completion_percentage(completed: int, total: int) -> int:
    """Percentage of completed tasks, rounded half up. 0 for an empty list."""
    if total <= 0:
        return 0
    # Integer form of floor(completed / total * 100 + 0.5)
    return (completed * 200 + total) // (2 * total)


@dataclass(frozen=True)
class TaskView:
    """Derived, read-only view of the task list."""

    filter: Filter
    filtered_tasks: list[Task] = field(default_factory=list)
    total_tasks: int = 0
    completed_tasks: int = 0

    @property
    def active_tasks(self) -> int:
        return self.total_tasks - self.completed_tasks

    @property
    def completion_percentage(self) -> int:
        return completion_percentage(self.completed_tasks, self.total_tasks)

    def count_for(self, filter_name: Filter) -> int:
        """Badge count shown next to a filter tab."""
        if filter_name == "active":
            return self.active_tasks
        if filter_name == "completed":
            return self.completed_tasks
        return self.total_tasks


def matches_filter(task: Task, filter_name: Filter) -> bool:
    """Whether a task is visible under the given filter."""
    if filter_name == "active":
        return not task.completed
    if filter_name == "completed":
        return task.completed
    return True
