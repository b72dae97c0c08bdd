import json
import logging
import os
import tempfile
import threading
from typing import Any

logger = logging.getLogger(__name__)


class LocalSnapshotFile:
    """Read-only snapshot document shipped next to the application."""

    def __init__(self, file_path: str) -> None:
        self._file_path = file_path

    @property
    def file_path(self) -> str:
        return self._file_path

    def read(self) -> Any:
        with open(self._file_path, encoding="utf-8") as f:
            return json.load(f)


class JsonSettingsStore:
    _path_locks: dict[str, threading.RLock] = {}
    _path_locks_guard = threading.Lock()

    def __init__(self, file_path: str = "settings.json") -> None:
        self._file_path = file_path
        abs_path = os.path.abspath(file_path)
        with self._path_locks_guard:
            if abs_path not in self._path_locks:
                self._path_locks[abs_path] = threading.RLock()
            self._lock = self._path_locks[abs_path]

    def load(self) -> dict:
        with self._lock:
            try:
                with open(self._file_path, encoding="utf-8") as f:
                    data = json.load(f)
            except FileNotFoundError:
                return {}
            except json.JSONDecodeError:
                logger.warning("Failed to parse settings from %s, using defaults", self._file_path)
                return {}
        if not isinstance(data, dict):
            logger.warning("Settings root in %s is not an object, using defaults", self._file_path)
            return {}
        return data

    def get(self, key: str, default: Any = None) -> Any:
        return self.load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            data = self.load()
            data[key] = value
            self._save(data)

    def _save(self, data: dict) -> None:
        with self._lock:
            directory = os.path.dirname(self._file_path) or "."
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".settings_", suffix=".json", dir=directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                os.replace(tmp_path, self._file_path)
            finally:
                try:
                    if os.path.exists(tmp_path):
                        os.remove(tmp_path)
                except OSError:
                    logger.exception("Failed to cleanup temporary file during save: %s", tmp_path)
