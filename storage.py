import os
import json
import logging
import tempfile
import threading
from contextlib import contextmanager
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Any, Mapping, Optional

from errors import StorageError

try:
    import fcntl
except ImportError:  # Windows
    fcntl = None

logger = logging.getLogger(__name__)


def ensure_dir(path: str):
    Path(path).mkdir(parents=True, exist_ok=True)


class SettingsStore(ABC):
    """
    Key/value store for string settings such as consumer_key and access_token.

    Implementations must have durably committed a write by the time
    update() returns.
    """

    @abstractmethod
    def get_string(self, key: str) -> str:
        """Return the value for key, or "" if it is not set."""

    @abstractmethod
    def update(self, settings: Mapping[str, Any]) -> None:
        """Merge settings into the store and persist them."""


class MemorySettingsStore(SettingsStore):
    """Process-local store, mainly for tests and one-off scripts."""

    def __init__(self, initial: Optional[Mapping[str, Any]] = None):
        self._lock = threading.Lock()
        self._settings: Dict[str, Any] = dict(initial or {})

    def get_string(self, key: str) -> str:
        with self._lock:
            value = self._settings.get(key)
        return str(value) if value is not None else ""

    def update(self, settings: Mapping[str, Any]) -> None:
        with self._lock:
            self._settings.update(settings)


class JSONSettingsStore(SettingsStore):
    """
    Settings persisted as a single JSON object on disk.

    update() holds an exclusive flock on "<path>.lock" around its
    read-modify-write, so processes sharing the file do not lose each
    other's keys. Without fcntl (Windows) only threads are serialized.
    """

    def __init__(self, path: str):
        self.path = path
        self.lock_path = path + ".lock"
        self._lock = threading.Lock()

    @contextmanager
    def _file_lock(self):
        if fcntl is None:
            yield
            return
        try:
            ensure_dir(os.path.dirname(os.path.abspath(self.lock_path)))
            lock_file = open(self.lock_path, "a")
        except OSError as e:
            raise StorageError(f"failed to open lock file {self.lock_path}: {e}") from e
        try:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            yield
        finally:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)
            lock_file.close()

    def _load(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"failed to read settings from {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"settings file {self.path} does not hold an object")
        return data

    def get_string(self, key: str) -> str:
        with self._lock:
            value = self._load().get(key)
        return str(value) if value is not None else ""

    def update(self, settings: Mapping[str, Any]) -> None:
        with self._lock, self._file_lock():
            data = self._load()
            data.update(settings)
            self._write(data)
        logger.debug(f"Saved settings {sorted(settings)} to {self.path}")

    def _write(self, data: Dict[str, Any]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        try:
            ensure_dir(directory)
            fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False, indent=2)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"failed to write settings to {self.path}: {e}") from e
