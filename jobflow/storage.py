"""Whole-snapshot persistence keyed by collection name (JSON files with file locking)."""
from __future__ import annotations

import copy
import fcntl
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

from jobflow.log import get_logger

log = get_logger(__name__)

JOBS_KEY = "jobs"
RESUME_KEY = "resume"
SETTINGS_KEY = "settings"
COLLECTION_KEYS: tuple[str, ...] = (JOBS_KEY, RESUME_KEY, SETTINGS_KEY)


class StorageError(Exception):
    """Raised by load() when a snapshot exists but cannot be decoded."""


class Storage(Protocol):
    def load(self, key: str) -> Any | None: ...

    def save(self, key: str, snapshot: Any) -> None: ...


def _lock(f, exclusive: bool = True) -> None:
    """Advisory file lock (Unix fcntl)."""
    try:
        op = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        fcntl.flock(f.fileno(), op)
    except (OSError, AttributeError):
        pass


def _unlock(f) -> None:
    try:
        fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    except (OSError, AttributeError):
        pass


class JsonFileStorage:
    """One ``jobflow_<key>.json`` file per collection under *data_dir*."""

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = Path(data_dir)

    def path_for(self, key: str) -> Path:
        if key not in COLLECTION_KEYS:
            raise KeyError(f"Unknown collection {key!r}")
        return self.data_dir / f"jobflow_{key}.json"

    def load(self, key: str) -> Any | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                _lock(f, exclusive=False)
                try:
                    raw = f.read()
                finally:
                    _unlock(f)
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(f"Cannot read {path.name}: {exc}") from exc
        if not raw.strip():
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageError(f"Corrupt snapshot in {path.name}: {exc}") from exc

    def save(self, key: str, snapshot: Any) -> None:
        path = self.path_for(key)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(snapshot, ensure_ascii=False, indent=2)
        # write-then-rename so a crash never leaves half a snapshot behind
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.stem}.", suffix=".tmp", dir=self.data_dir)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                _lock(f)
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
                _unlock(f)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        log.debug("Saved %s → %s", key, path.name)


class MemoryStorage:
    """In-process storage; snapshots are deep-copied in both directions."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial or {})
        self.saves: list[str] = []

    def load(self, key: str) -> Any | None:
        return copy.deepcopy(self._data.get(key))

    def save(self, key: str, snapshot: Any) -> None:
        self._data[key] = copy.deepcopy(snapshot)
        self.saves.append(key)
