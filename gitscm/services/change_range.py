"""
Change range extraction for gitscm.
"""

from pathlib import Path
from typing import Optional, Union
import logging

from ..domain.change import ChangeSet
from ..infra.git_client import GitClient
from .changelog import parse_changelog

logger = logging.getLogger(__name__)


class ChangeRangeExtractor:
    """Builds the ChangeSet of the commits in ``from..to``."""

    def __init__(self, git_client: Optional[GitClient] = None):
        self.git = git_client or GitClient()

    def changes_between(
        self,
        from_revision: Optional[str],
        to_revision: Optional[str],
        workspace: Union[str, Path]
    ) -> ChangeSet:
        """
        Commits reachable from ``to_revision`` but not from ``from_revision``.

        Without both revisions (a project's first build) there is nothing
        to compare and no log is extracted.
        """
        if not from_revision or not to_revision:
            logger.debug("No previous revision, skipping change log")
            return ChangeSet()
        if from_revision == to_revision:
            return ChangeSet()

        raw = self.git.log(workspace, from_revision, to_revision)
        changes = parse_changelog(raw)
        logger.info(f"{len(changes)} change(s) between {from_revision} and {to_revision}")
        return changes
