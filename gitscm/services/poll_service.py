"""
Poll service for gitscm.

Decides whether a project has new work to build by comparing the remote
tip of its branch with the last revision that was built successfully.
"""

from pathlib import Path
from typing import Mapping, Optional, Protocol, Union
import logging

from ..domain.repository import RepositoryConfig
from ..domain.workspace import PollResult
from .revision_store import RevisionStore
from .workspace_sync import WorkspaceSynchronizer

logger = logging.getLogger(__name__)


class BuildStatus(Protocol):
    """Host capability telling whether a project is currently building."""

    def is_building(self, project: str) -> bool:
        ...


class PollService:
    """
    Poll decision engine.

    Only clones and fetches the workspace; checkout, merge and clean are
    left to the build. The revision store is read, never updated.

    Example:
        poller = PollService(WorkspaceSynchronizer(), RevisionStore(path), BuildMarkers(dir))
        if poller.should_build("myproject", config, workspace):
            trigger_build()
    """

    def __init__(
        self,
        synchronizer: WorkspaceSynchronizer,
        revisions: RevisionStore,
        build_status: BuildStatus
    ):
        self.sync = synchronizer
        self.revisions = revisions
        self.build_status = build_status

    def poll(
        self,
        project: str,
        config: RepositoryConfig,
        workspace: Union[str, Path],
        parameters: Optional[Mapping[str, str]] = None
    ) -> PollResult:
        """
        Run one poll cycle for ``project``.

        Returns:
            PollResult; ``changes`` is True iff the remote tip exists and
            differs from the last built revision
        """
        logger.info(f"Poll for changes in {project}")
        if self.build_status.is_building(project):
            logger.info(f"{project} is building, skipping poll")
            return PollResult(project=project, changes=False, reason="build in progress")

        self.sync.ensure_cloned_and_fetched(config, workspace)
        branch, _ = self.sync.resolve_branches(config, parameters)

        tip = self.sync.git.rev_parse(workspace, branch)
        last = self.revisions.get_or_create(project).last_built_revision
        logger.info(f"tip = {tip}, last = {last}")

        if tip is None:
            return PollResult(project=project, changes=False, last_built=last, branch=branch,
                              reason=f"branch {branch} not found in {config.source}")

        return PollResult(project=project, changes=tip != last, tip=tip,
                          last_built=last, branch=branch)

    def should_build(
        self,
        project: str,
        config: RepositoryConfig,
        workspace: Union[str, Path],
        parameters: Optional[Mapping[str, str]] = None
    ) -> bool:
        return self.poll(project, config, workspace, parameters).changes
