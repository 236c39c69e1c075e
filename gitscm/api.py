"""
High-level Python API for gitscm.

Wires configuration, the git client and the services together so a build
host only has to name a project.

Example:
    import gitscm

    scm = gitscm.GitSCM()

    # Is there anything new to build?
    if scm.poll("myproject").changes:
        checkout = scm.checkout("myproject", changelog="build/changelog.txt")
        if checkout.success:
            scm.finish_build("myproject", success=run_build())

    # Low-level access to services
    scm.synchronizer
    scm.poller
    scm.revisions
"""

from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union
import logging

from .config import (
    load_config,
    get_project_config,
    get_state_directory,
    get_workspace,
)
from .domain import ChangeSet, PollResult
from .exit_codes import CommandError
from .infra import GitClient, FileStore, BuildMarkers
from .services import (
    RevisionStore,
    WorkspaceSynchronizer,
    PollService,
    ChangeRangeExtractor,
    CheckoutService,
    BuildCheckout,
)

logger = logging.getLogger(__name__)


class GitSCM:
    """
    Facade over the gitscm services for configured projects.

    Build parameters passed to a call are layered over the defaults in
    the ``parameters`` config section.
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        git_client: Optional[GitClient] = None,
        config_path: Optional[Union[str, Path]] = None
    ):
        """
        Initialize GitSCM.

        Args:
            config: Full config dict (overrides file if provided)
            git_client: GitClient instance (built from config if None)
            config_path: Path to config file (default: ~/.gitscm/config.json)
        """
        self.config = config if config is not None else load_config(config_path)

        git_settings = self.config.get('git', {})
        self.git = git_client or GitClient(
            executable=git_settings.get('executable', 'git'),
            timeout=git_settings.get('timeout_seconds', 600),
            remote=git_settings.get('remote', 'origin'),
            user_name=git_settings.get('user_name') or None,
            user_email=git_settings.get('user_email') or None,
        )

        state_dir = get_state_directory(self.config)
        self.revisions = RevisionStore(FileStore(state_dir / 'revisions.json'))
        self.markers = BuildMarkers(state_dir / 'building')

        self.synchronizer = WorkspaceSynchronizer(self.git)
        self.extractor = ChangeRangeExtractor(self.git)
        self.poller = PollService(self.synchronizer, self.revisions, self.markers)
        self.checkouts = CheckoutService(self.synchronizer, self.revisions, self.extractor)

    def _parameters(self, parameters: Optional[Mapping[str, str]]) -> Dict[str, str]:
        merged = dict(self.config.get('parameters') or {})
        merged.update(parameters or {})
        return merged

    def workspace(self, project: str, workspace: Optional[str] = None) -> Path:
        return get_workspace(self.config, project, workspace)

    def poll(
        self,
        project: str,
        workspace: Optional[str] = None,
        parameters: Optional[Mapping[str, str]] = None
    ) -> PollResult:
        """Run one poll cycle for ``project``."""
        return self.poller.poll(
            project,
            get_project_config(self.config, project),
            self.workspace(project, workspace),
            self._parameters(parameters),
        )

    def checkout(
        self,
        project: str,
        workspace: Optional[str] = None,
        changelog: Optional[Union[str, Path]] = None,
        parameters: Optional[Mapping[str, str]] = None,
        owner: Optional[int] = None
    ) -> BuildCheckout:
        """
        Prepare the workspace of ``project`` for a build.

        The project is marked as building from here until finish_build(),
        so concurrent polls skip it and cannot move the revision that gets
        recorded. A checkout that fails or cannot integrate its branch
        clears the mark again.

        Args:
            owner: PID of the process running the build; the mark is
                dropped as stale once it exits (default: this process)
        """
        repo_config = get_project_config(self.config, project)
        self.markers.mark(project, owner=owner)
        try:
            checkout = self.checkouts.checkout(
                project,
                repo_config,
                self.workspace(project, workspace),
                changelog,
                self._parameters(parameters),
            )
        except BaseException:
            self.markers.clear(project)
            raise

        if checkout.success:
            self.markers.mark(project, revision=checkout.revision, owner=owner)
        else:
            self.markers.clear(project)
        return checkout

    def changes(
        self,
        project: str,
        from_revision: Optional[str],
        to_revision: Optional[str],
        workspace: Optional[str] = None
    ) -> ChangeSet:
        """Commits of ``project`` between two revisions."""
        get_project_config(self.config, project)
        return self.extractor.changes_between(
            from_revision, to_revision, self.workspace(project, workspace)
        )

    def last_built(self, project: str) -> Optional[str]:
        return self.revisions.get_or_create(project).last_built_revision

    def record_build(self, project: str, revision: Optional[str]) -> None:
        """Remember ``revision`` as the last successful build of ``project``."""
        self.checkouts.record_build(project, revision)

    def pending_revision(self, project: str) -> Optional[str]:
        """Revision prepared by checkout() whose build has not finished."""
        return self.markers.pending_revision(project)

    def finish_build(self, project: str, success: bool = True) -> Optional[str]:
        """
        End the build started by checkout().

        On success the revision that checkout() prepared is recorded as
        built. Either way the project stops being marked as building.

        Returns:
            The prepared revision

        Raises:
            CommandError: if ``success`` is set but no checkout of the
                project is waiting for its build result
        """
        get_project_config(self.config, project)
        revision = self.markers.pending_revision(project)
        if success:
            if revision is None:
                raise CommandError(
                    f"No checkout of {project} is waiting for a build result "
                    f"(run 'gitscm checkout {project}' first)"
                )
            self.record_build(project, revision)
        self.markers.clear(project)
        return revision

    def env_vars(
        self,
        project: str,
        workspace: Optional[str] = None,
        parameters: Optional[Mapping[str, str]] = None
    ) -> Dict[str, str]:
        return self.checkouts.env_vars(
            get_project_config(self.config, project),
            self.workspace(project, workspace),
            self._parameters(parameters),
        )
