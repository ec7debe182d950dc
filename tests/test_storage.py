"""Tests for taskflow.storage module."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest

from taskflow.storage import JsonFileStorage, MemoryStorage, StoredValue


class TestMemoryStorage:
    """Tests for MemoryStorage."""

    @pytest.mark.asyncio
    async def test_missing_key(self) -> None:
        """Test absent keys read as None."""
        assert await MemoryStorage().get("todo-tasks") is None

    @pytest.mark.asyncio
    async def test_set_then_get(self) -> None:
        """Test values read back as written."""
        storage = MemoryStorage()
        await storage.set("todo-tasks", "[]")
        assert await storage.get("todo-tasks") == StoredValue("[]")

    @pytest.mark.asyncio
    async def test_initial_data_is_copied(self) -> None:
        """Test the initial mapping is not shared."""
        initial = {"k": "v"}
        storage = MemoryStorage(initial)
        await storage.set("k", "w")
        assert initial == {"k": "v"}


class TestJsonFileStorage:
    """Tests for JsonFileStorage."""

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path: Path) -> None:
        """Test a missing file reads as absent."""
        storage = JsonFileStorage(tmp_path / "store.json")
        assert await storage.get("todo-tasks") is None

    @pytest.mark.asyncio
    async def test_missing_key(self, tmp_path: Path) -> None:
        """Test an absent key in an existing file reads as None."""
        path = tmp_path / "store.json"
        path.write_text('{"other": "x"}')
        assert await JsonFileStorage(path).get("todo-tasks") is None

    @pytest.mark.asyncio
    async def test_set_creates_file_and_directory(self, tmp_path: Path) -> None:
        """Test set creates the parent directory and file."""
        path = tmp_path / "nested" / "store.json"
        storage = JsonFileStorage(path)
        await storage.set("todo-tasks", "[]")

        assert json.loads(path.read_text()) == {"todo-tasks": "[]"}
        assert await storage.get("todo-tasks") == StoredValue("[]")

    @pytest.mark.asyncio
    async def test_set_preserves_other_keys(self, tmp_path: Path) -> None:
        """Test writing one key leaves the others alone."""
        path = tmp_path / "store.json"
        path.write_text('{"other": "keep"}')
        await JsonFileStorage(path).set("todo-tasks", "[]")

        assert json.loads(path.read_text()) == {"other": "keep", "todo-tasks": "[]"}

    @pytest.mark.asyncio
    async def test_set_overwrites_in_full(self, tmp_path: Path) -> None:
        """Test a second write replaces the first."""
        storage = JsonFileStorage(tmp_path / "store.json")
        await storage.set("todo-tasks", "[1]")
        await storage.set("todo-tasks", "[]")
        assert await storage.get("todo-tasks") == StoredValue("[]")

    @pytest.mark.asyncio
    async def test_no_temp_files_left(self, tmp_path: Path) -> None:
        """Test atomic writes clean up after themselves."""
        storage = JsonFileStorage(tmp_path / "store.json")
        await storage.set("todo-tasks", "[]")
        assert [p.name for p in tmp_path.iterdir()] == ["store.json"]

    @pytest.mark.asyncio
    async def test_concurrent_sets_land_in_order(self, tmp_path: Path) -> None:
        """Test overlapping writes leave the last scheduled value."""
        storage = JsonFileStorage(tmp_path / "store.json")
        await asyncio.gather(*(storage.set("todo-tasks", f"[{i}]") for i in range(10)))
        assert await storage.get("todo-tasks") == StoredValue("[9]")

    @pytest.mark.asyncio
    async def test_corrupt_file_raises_on_get(self, tmp_path: Path) -> None:
        """Test unreadable files surface as errors on read."""
        path = tmp_path / "store.json"
        path.write_text("{not json")
        with pytest.raises(ValueError):
            await JsonFileStorage(path).get("todo-tasks")

    @pytest.mark.asyncio
    async def test_non_object_file_raises_on_get(self, tmp_path: Path) -> None:
        """Test a JSON file that isn't an object is rejected."""
        path = tmp_path / "store.json"
        path.write_text("[1, 2]")
        with pytest.raises(ValueError):
            await JsonFileStorage(path).get("todo-tasks")

    @pytest.mark.asyncio
    async def test_non_string_value_raises(self, tmp_path: Path) -> None:
        """Test stored values must be strings."""
        path = tmp_path / "store.json"
        path.write_text('{"todo-tasks": [1, 2]}')
        with pytest.raises(ValueError):
            await JsonFileStorage(path).get("todo-tasks")

    @pytest.mark.asyncio
    async def test_corrupt_file_replaced_on_set(self, tmp_path: Path) -> None:
        """Test a write recovers from an unreadable file."""
        path = tmp_path / "store.json"
        path.write_text("{not json")
        storage = JsonFileStorage(path)
        await storage.set("todo-tasks", "[]")
        assert await storage.get("todo-tasks") == StoredValue("[]")
