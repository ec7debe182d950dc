"""Shared fixtures for taskflow tests."""

from __future__ import annotations

import logging
import os
from collections.abc import Generator
from pathlib import Path

import pytest
from rich.logging import RichHandler

from taskflow.storage import MemoryStorage
from taskflow.store import TaskStore

from .fakes import FakeClock


@pytest.fixture(autouse=True)
def restore_root_logging() -> Generator[None, None, None]:
    """Drop handlers installed by setup_logging during a test."""
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    try:
        yield
    finally:
        for h in list(root.handlers):
            if h not in before and isinstance(h, (RichHandler, logging.FileHandler)):
                root.removeHandler(h)
                h.close()
        root.setLevel(level)
        logging.captureWarnings(False)


@pytest.fixture
def temp_project(tmp_path: Path) -> Generator[Path, None, None]:
    """Create a temporary project directory and change to it."""
    original_dir = os.getcwd()
    os.chdir(tmp_path)
    try:
        yield tmp_path
    finally:
        os.chdir(original_dir)


@pytest.fixture
def temp_taskflow_dir(temp_project: Path) -> Path:
    """Create a temporary .taskflow directory."""
    taskflow_dir = temp_project / ".taskflow"
    taskflow_dir.mkdir()
    return taskflow_dir


@pytest.fixture
def clock() -> FakeClock:
    """A clock starting at 2026-10-19T08:30:00.000Z."""
    return FakeClock()


@pytest.fixture
def memory_storage() -> MemoryStorage:
    """Empty in-memory storage."""
    return MemoryStorage()


@pytest.fixture
def memory_store(memory_storage: MemoryStorage) -> TaskStore:
    """Task store over empty in-memory storage."""
    return TaskStore(memory_storage)


@pytest.fixture
def sample_tasks_data() -> list[dict]:
    """Persisted tasks in the stored JSON shape."""
    return [
        {
            "id": 1760862600000,
            "title": "Buy milk",
            "completed": True,
            "createdAt": "2025-10-19T08:30:00.000Z",
        },
        {
            "id": 1760862600001,
            "title": "Walk dog",
            "completed": False,
            "createdAt": "2025-10-19T08:30:00.001Z",
        },
    ]
