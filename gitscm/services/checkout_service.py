"""
Build checkout service for gitscm.

Prepares a project's workspace for a build: converges the workspace,
works out which commits are new since the last successful build and writes
them to the change log file. Recording the built revision is a separate
step, taken by the caller once the build has succeeded.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union
import logging

from ..domain.change import ChangeSet
from ..domain.repository import RepositoryConfig
from ..domain.workspace import CheckoutResult
from ..exit_codes import GitCommandError
from .change_range import ChangeRangeExtractor
from .changelog import write_changelog
from .revision_store import RevisionStore
from .workspace_sync import WorkspaceSynchronizer

logger = logging.getLogger(__name__)


@dataclass
class BuildCheckout:
    """Workspace state and change information for one build."""
    result: CheckoutResult
    revision: Optional[str] = None
    previous_revision: Optional[str] = None
    changes: ChangeSet = field(default_factory=ChangeSet)
    changelog: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.result.success

    def to_dict(self) -> Dict[str, Any]:
        result = self.result.to_dict()
        result['revision'] = self.revision
        result['previous_revision'] = self.previous_revision
        result['changes'] = len(self.changes)
        if self.changelog:
            result['changelog'] = self.changelog
        return result


class CheckoutService:
    """
    Checkout side of a build.

    Example:
        service = CheckoutService(WorkspaceSynchronizer(git), RevisionStore(path))
        checkout = service.checkout("myproject", config, workspace, "changelog.txt")
        if checkout.success and run_build():
            service.record_build("myproject", checkout.revision)
    """

    def __init__(
        self,
        synchronizer: WorkspaceSynchronizer,
        revisions: RevisionStore,
        extractor: Optional[ChangeRangeExtractor] = None
    ):
        self.sync = synchronizer
        self.revisions = revisions
        self.extractor = extractor or ChangeRangeExtractor(synchronizer.git)

    def checkout(
        self,
        project: str,
        config: RepositoryConfig,
        workspace: Union[str, Path],
        changelog_path: Optional[Union[str, Path]] = None,
        parameters: Optional[Mapping[str, str]] = None
    ) -> BuildCheckout:
        """
        Converge ``workspace`` and collect the changes since the last build.

        When the branch cannot be integrated the returned checkout is
        unsuccessful and no change log is written.
        """
        result = self.sync.converge(config, workspace, parameters)
        if not result.success:
            return BuildCheckout(result=result)

        previous = self.revisions.get_or_create(project).last_built_revision
        revision = self.sync.git.rev_parse(workspace, result.branch)
        changes = self.extractor.changes_between(previous, revision, workspace)

        changelog = None
        if changelog_path is not None:
            write_changelog(changelog_path, changes)
            changelog = str(changelog_path)

        return BuildCheckout(
            result=result,
            revision=revision,
            previous_revision=previous,
            changes=changes,
            changelog=changelog,
        )

    def record_build(self, project: str, revision: Optional[str]) -> None:
        """Remember ``revision`` as the last successful build of ``project``."""
        self.revisions.set_last_built(project, revision)

    def env_vars(
        self,
        config: RepositoryConfig,
        workspace: Union[str, Path],
        parameters: Optional[Mapping[str, str]] = None
    ) -> Dict[str, str]:
        """
        GIT_REVISION and GIT_REVISION_SHORT for the project's branch.

        Variables whose revision cannot be looked up are left out.
        """
        env = {}
        branch, _ = self.sync.resolve_branches(config, parameters)
        try:
            revision = self.sync.git.rev_parse(workspace, branch)
            if revision:
                env['GIT_REVISION'] = revision
            short = self.sync.git.rev_parse(workspace, branch, short=True)
            if short:
                env['GIT_REVISION_SHORT'] = short
        except GitCommandError as e:
            logger.debug(f"Cannot resolve {branch} for build environment: {e}")
        return env
