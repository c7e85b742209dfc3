from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Mapping, Protocol

from pydantic_core import to_jsonable_python


class StorageBackend(Protocol):
    """Abstraction for persisting and restoring state."""

    def load_state(self) -> Mapping[str, object]:
        """Return a mapping representing the stored state."""

    def save_state(self, state: Mapping[str, object]) -> None:
        """Persist the provided state mapping."""


DEFAULT_STATE_FILENAME = "goals_tracker_state.json"
TRACKER_FOLDER_NAME = "GoalsTracker"
DATA_DIR_ENV_VAR = "GOALS_TRACKER_DATA_DIR"


def resolve_data_directory(path: str | Path | None = None, *, env: Mapping[str, str] | None = None) -> Path:
    """Resolve the directory holding the state file."""

    if path is not None:
        explicit_path = Path(path).expanduser()
        if explicit_path.is_dir():
            return explicit_path
        return explicit_path.parent

    env_map: Mapping[str, str] = env if env is not None else os.environ
    configured = env_map.get(DATA_DIR_ENV_VAR)
    if configured:
        return Path(configured).expanduser()

    return Path(".data") / TRACKER_FOLDER_NAME


def resolve_state_file_path(path: str | Path | None = None, *, env: Mapping[str, str] | None = None) -> Path:
    """Resolve the state file path from an explicit path or the environment."""

    if path is not None:
        explicit_path = Path(path).expanduser()
        if explicit_path.is_dir():
            return explicit_path / DEFAULT_STATE_FILENAME
        return explicit_path

    return resolve_data_directory(env=env) / DEFAULT_STATE_FILENAME


class FileStorageBackend:
    """Persist state to a JSON file on disk."""

    def __init__(self, path: str | Path | None = None, *, env: Mapping[str, str] | None = None) -> None:
        self.path = resolve_state_file_path(path, env=env)
        self._last_fingerprint: str | None = None

    def load_state(self) -> Mapping[str, object]:
        if not self.path.exists():
            return {}

        with self.path.open("r", encoding="utf-8") as file_handle:
            return json.load(file_handle)

    def save_state(self, state: Mapping[str, object]) -> None:
        serialized = json.dumps(state, default=to_jsonable_python, ensure_ascii=False, sort_keys=True)
        if serialized == self._last_fingerprint:
            return

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as file_handle:
            file_handle.write(serialized)

        self._last_fingerprint = serialized


__all__ = [
    "DATA_DIR_ENV_VAR",
    "DEFAULT_STATE_FILENAME",
    "FileStorageBackend",
    "StorageBackend",
    "TRACKER_FOLDER_NAME",
    "resolve_data_directory",
    "resolve_state_file_path",
]
