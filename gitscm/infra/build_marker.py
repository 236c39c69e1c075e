"""
Build-in-progress markers for gitscm.

A checkout drops a small JSON marker for its project and leaves it in place
until the build's outcome is reported, so that polls running in other
processes see the project as building and skip their cycle. The marker also
remembers the revision the checkout prepared; that revision, not whatever
the remote branch points at later, is what gets recorded as built.

Markers belong to an owner process (by default the one that wrote them).
A marker whose owner has died is stale and is ignored.
"""

import json
import os
import time
from pathlib import Path
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)


class BuildMarkers:
    """
    Advisory per-project "is building" flags kept as files.

    This is a guard, not a lock: two processes can still both decide to
    build. Callers are expected to schedule one build per project.

    Example:
        markers = BuildMarkers(Path("~/.gitscm/building"))
        markers.mark("myproject", revision="3f2a9c...")
        ...  # polls of myproject now report no changes
        revision = markers.pending_revision("myproject")
        markers.clear("myproject")
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory).expanduser()

    def _marker_path(self, project: str) -> Path:
        safe = project.replace(os.sep, "_")
        return self.directory / f"{safe}.json"

    def _read(self, path: Path) -> Optional[Dict[str, Any]]:
        try:
            with open(path, "r") as f:
                data = json.load(f)
            if isinstance(data, dict):
                return data
        except FileNotFoundError:
            return None
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Failed to read build marker {path}: {e}")
        return None

    @staticmethod
    def _process_alive(pid: Any) -> bool:
        if not isinstance(pid, int) or pid <= 0:
            return False
        try:
            # Signal 0 only checks that the process exists
            os.kill(pid, 0)
        except ProcessLookupError:
            return False
        except PermissionError:
            return True
        except OSError:
            return False
        return True

    def is_building(self, project: str) -> bool:
        """True while the owner of the marker for ``project`` is alive."""
        path = self._marker_path(project)
        data = self._read(path)
        if data is None:
            return False
        if self._process_alive(data.get("pid")):
            return True
        logger.info(f"Removing stale build marker for {project} (owner {data.get('pid')} is gone)")
        self._remove(path)
        return False

    def mark(self, project: str, revision: Optional[str] = None, owner: Optional[int] = None) -> None:
        """
        Mark ``project`` as building.

        Args:
            project: Project name
            revision: Revision the build works on, once known
            owner: PID whose lifetime bounds the build (default: this process)
        """
        self.directory.mkdir(parents=True, exist_ok=True)
        data = {
            "project": project,
            "pid": owner if owner is not None else os.getpid(),
            "revision": revision,
            "started_at": time.time(),
        }
        with open(self._marker_path(project), "w") as f:
            json.dump(data, f, indent=2)

    def pending_revision(self, project: str) -> Optional[str]:
        """Revision stored with the marker of ``project``, if any."""
        data = self._read(self._marker_path(project))
        if data is None:
            return None
        return data.get("revision")

    def clear(self, project: str) -> None:
        self._remove(self._marker_path(project))

    def _remove(self, path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
