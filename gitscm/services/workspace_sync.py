"""
Workspace synchronization service for gitscm.

Drives a build workspace from whatever state it is in to a checkout of the
configured branch (optionally merged onto a merge target) at the fetched
tip. Every step that is already satisfied is skipped, so convergence can be
repeated safely: a second run only fetches and checks out again.

    ABSENT -> CLONED_STALE -> SYNCED -> CHECKED_OUT [-> MERGED] [-> CLEAN]
"""

from pathlib import Path
from typing import List, Mapping, Optional, Tuple, Union
import logging

from ..domain.repository import RepositoryConfig
from ..domain.workspace import WorkspaceState, CheckoutStatus, CheckoutResult
from ..exit_codes import MergeError
from ..infra.git_client import GitClient
from .parameters import Substitutor, substitute

logger = logging.getLogger(__name__)

INTEGRATION_FAILED_REASON = "Branch not suitable for integration as it does not merge cleanly"


class WorkspaceSynchronizer:
    """
    Converges a workspace onto a project's configured branch.

    Infrastructure failures (clone, fetch, checkout, submodules, clean)
    raise GitCommandError. A merge that does not apply cleanly is returned
    as a CheckoutResult with status INTEGRATION_FAILED instead.

    Example:
        sync = WorkspaceSynchronizer(GitClient())
        result = sync.converge(config, "/var/builds/myproject")
        if not result.success:
            print(result.reason)
    """

    def __init__(
        self,
        git_client: Optional[GitClient] = None,
        substitutor: Substitutor = substitute
    ):
        self.git = git_client or GitClient()
        self.substitute = substitutor

    def probe(self, workspace: Union[str, Path]) -> WorkspaceState:
        """State of ``workspace`` before any remote refs are updated."""
        if self.git.has_local_repo(workspace):
            return WorkspaceState.CLONED_STALE
        return WorkspaceState.ABSENT

    def ensure_cloned_and_fetched(
        self,
        config: RepositoryConfig,
        workspace: Union[str, Path]
    ) -> List[WorkspaceState]:
        """
        Make sure ``workspace`` holds a clone with up-to-date remote refs.

        Returns:
            States entered, in order
        """
        transitions = []
        Path(workspace).mkdir(parents=True, exist_ok=True)

        if self.probe(workspace) == WorkspaceState.ABSENT:
            logger.info(f"Cloning {config.source} into {workspace}")
            self.git.clone(workspace, config.source)
            if self.git.has_submodules(workspace):
                self.git.submodule_init(workspace)
            transitions.append(WorkspaceState.CLONED_STALE)

        # Always fetch, a fresh clone included, so branch tips are current
        self.git.fetch(workspace)
        transitions.append(WorkspaceState.SYNCED)
        return transitions

    def resolve_branches(
        self,
        config: RepositoryConfig,
        parameters: Optional[Mapping[str, str]] = None
    ) -> Tuple[str, Optional[str]]:
        """
        Expand the branch names of ``config``.

        Returns:
            (branch, merge_target); merge_target is None when no merge
            should happen, including when it expands to ``branch`` itself
        """
        branch = self.substitute(parameters, config.branch)
        if not config.merge:
            return branch, None

        merge_target = self.substitute(parameters, config.merge_target)
        if not merge_target:
            logger.warning(f"Merging is enabled but no merge target is set; building {branch} as is")
            return branch, None
        if merge_target == branch:
            return branch, None
        return branch, merge_target

    def converge(
        self,
        config: RepositoryConfig,
        workspace: Union[str, Path],
        parameters: Optional[Mapping[str, str]] = None
    ) -> CheckoutResult:
        """
        Bring ``workspace`` to a buildable checkout of ``config``.

        Args:
            config: Project repository configuration
            workspace: Directory of the working copy (created if missing)
            parameters: Build parameters used to expand branch names

        Returns:
            CheckoutResult; status INTEGRATION_FAILED when the branch does
            not merge cleanly onto the merge target
        """
        workspace = str(workspace)
        transitions = self.ensure_cloned_and_fetched(config, workspace)
        branch, merge_target = self.resolve_branches(config, parameters)

        if merge_target is None:
            logger.info(f"Checking out {branch}")
            self._checkout(workspace, branch)
            transitions.append(WorkspaceState.CHECKED_OUT)
            state = WorkspaceState.CHECKED_OUT
            checked_out = branch
        else:
            logger.info(f"Merging {branch} onto {merge_target}")
            self._checkout(workspace, merge_target)
            transitions.append(WorkspaceState.CHECKED_OUT)
            checked_out = merge_target
            try:
                self.git.merge(workspace, branch)
            except MergeError as e:
                logger.warning(f"{INTEGRATION_FAILED_REASON}: {e}")
                return CheckoutResult(
                    status=CheckoutStatus.INTEGRATION_FAILED,
                    workspace=workspace,
                    branch=branch,
                    checked_out=checked_out,
                    merge_target=merge_target,
                    state=WorkspaceState.CHECKED_OUT,
                    transitions=transitions,
                    reason=INTEGRATION_FAILED_REASON,
                )
            transitions.append(WorkspaceState.MERGED)
            state = WorkspaceState.MERGED

        if config.clean:
            logger.info(f"Cleaning workspace {workspace}")
            self.git.clean(workspace)
            transitions.append(WorkspaceState.CLEAN)
            state = WorkspaceState.CLEAN

        return CheckoutResult(
            status=CheckoutStatus.SUCCESS,
            workspace=workspace,
            branch=branch,
            checked_out=checked_out,
            merge_target=merge_target,
            state=state,
            transitions=transitions,
        )

    def _checkout(self, workspace: str, branch: str) -> None:
        self.git.checkout(workspace, branch)
        if self.git.has_submodules(workspace):
            self.git.submodule_update(workspace)
