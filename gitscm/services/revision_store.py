"""
Revision store service for gitscm.

Persists the last successfully built revision of each project in a JSON
file, one record per project:

    {"myproject": {"last_built_revision": "3f2a9c..."}}
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import logging

from ..domain.revision import RevisionRecord
from ..infra.file_store import FileStore

logger = logging.getLogger(__name__)


class RevisionStore:
    """
    Per-project last-built revision records.

    Reads and writes go straight to the backing FileStore, so a record
    saved here is visible to the next process. Creating and updating a
    record happen under the store's lock.
    """

    def __init__(self, store: Union[FileStore, Path, str]):
        if not isinstance(store, FileStore):
            store = FileStore(Path(store))
        self.store = store

    def get(self, project: str) -> Optional[RevisionRecord]:
        """Record of ``project``, or None if it has never been created."""
        data = self.store.get(project)
        if data is None:
            return None
        return RevisionRecord.from_dict(data)

    def get_or_create(self, project: str) -> RevisionRecord:
        """Record of ``project``, creating an empty one on first use."""
        return RevisionRecord.from_dict(self.store.setdefault(project, RevisionRecord().to_dict()))

    def save(self, project: str, record: RevisionRecord) -> None:
        self.store.put(project, record.to_dict())

    def set_last_built(self, project: str, revision: Optional[str]) -> RevisionRecord:
        """Record ``revision`` as the last successful build of ``project``."""
        def change(current: Optional[Dict[str, Any]]) -> Dict[str, Any]:
            record = RevisionRecord.from_dict(current)
            record.last_built_revision = revision
            return record.to_dict()

        data = self.store.update(project, change)
        logger.info(f"Recorded {revision} as last built revision of {project}")
        return RevisionRecord.from_dict(data)

    def projects(self) -> List[str]:
        return sorted(self.store.keys())
