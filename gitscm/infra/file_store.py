"""
Record file infrastructure for gitscm.

Keeps one JSON object of per-key records (such as the per-project revision
records) in a single file. Reads always go to disk so that a record written
by one process is seen by the next. Changes are read-modify-write cycles
done under an exclusive lock on a sidecar ``.lock`` file and end with an
atomic rename, so concurrent writers never lose each other's updates and
readers never see a half-written file.
"""

import fcntl
import json
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional
import logging

logger = logging.getLogger(__name__)


class FileStore:
    """
    JSON record file with locked updates.

    Example:
        store = FileStore(Path("~/.gitscm/revisions.json"))
        store.setdefault("myproject", {"last_built_revision": None})
        store.update("myproject", lambda record: {**record, "last_built_revision": "3f2a..."})
    """

    def __init__(self, path: Path):
        self.path = Path(path).expanduser()
        self.lock_path = self.path.with_name(self.path.name + ".lock")

    @contextmanager
    def _locked(self) -> Iterator[None]:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.lock_path, "a") as lock:
            fcntl.flock(lock.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(lock.fileno(), fcntl.LOCK_UN)

    def _load(self) -> Dict[str, Any]:
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Ignoring unreadable record file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring {self.path}: top level is not an object")
            return {}
        return data

    def _dump(self, data: Dict[str, Any]) -> None:
        fd, temp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.",
                                         suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(data, f, indent=2, sort_keys=True, ensure_ascii=False)
                f.write("\n")
            os.replace(temp_name, self.path)
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise

    def read(self) -> Dict[str, Any]:
        """All records; a missing or unreadable file reads as empty."""
        return self._load()

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def keys(self) -> List[str]:
        return list(self._load())

    def update(self, key: str, change: Callable[[Optional[Any]], Any]) -> Any:
        """
        Replace the record under ``key`` with ``change(current)``.

        ``current`` is None when there is no record yet.

        Returns:
            The stored record
        """
        with self._locked():
            data = self._load()
            value = change(data.get(key))
            data[key] = value
            self._dump(data)
        return value

    def put(self, key: str, value: Any) -> None:
        self.update(key, lambda _: value)

    def setdefault(self, key: str, default: Any) -> Any:
        """Record under ``key``, storing ``default`` first if there is none."""
        with self._locked():
            data = self._load()
            if key in data:
                return data[key]
            data[key] = default
            self._dump(data)
        return default

    def delete(self, key: str) -> bool:
        """Remove the record under ``key``; False if there was none."""
        with self._locked():
            data = self._load()
            if key not in data:
                return False
            del data[key]
            self._dump(data)
        return True
