"""Configuration models for taskflow.

Everything lives under ``.taskflow/`` in the working directory unless the
config file or the command line says otherwise.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

TASKFLOW_DIR = Path(".taskflow")
CONFIG_FILE = TASKFLOW_DIR / "config.json"
STORE_FILE = TASKFLOW_DIR / "store.json"
LOG_FILE = TASKFLOW_DIR / "taskflow.log"


class StorageConfig(BaseModel):
    """Configuration for the key-value storage backend."""

    backend: Literal["file", "memory"] = "file"
    path: str = str(STORE_FILE)


class LoggingConfig(BaseModel):
    """Configuration for diagnostics logging."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    file: str | None = str(LOG_FILE)


class DisplayConfig(BaseModel):
    """Configuration for terminal rendering."""

    show_ids: bool = True
    char_warning_threshold: int = 80


class TaskflowConfig(BaseModel):
    """Main configuration for taskflow."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)

    @classmethod
    def load(cls, path: Path | None = None) -> TaskflowConfig:
        """Read the config file, or return defaults when there is none.

        Raises:
            pydantic.ValidationError: The file is not valid JSON or holds bad values.
        """
        config_file = path or CONFIG_FILE
        if not config_file.is_file():
            return cls()
        return cls.model_validate_json(config_file.read_text())

    def save(self, path: Path | None = None) -> None:
        config_file = path or CONFIG_FILE
        config_file.parent.mkdir(parents=True, exist_ok=True)
        config_file.write_text(self.model_dump_json(indent=2) + "\n")
