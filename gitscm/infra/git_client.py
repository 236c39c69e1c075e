"""
Git client infrastructure for gitscm.

Provides a clean abstraction over git command execution.
All git operations go through this client, making them:
- Easy to mock for testing
- Consistent in error handling
- Isolated from the synchronization and poll logic

Every primitive raises GitCommandError when git fails, except merge(),
whose failure is the expected MergeError, and rev_parse(), which returns
None for refs that do not exist.
"""

import os
import subprocess
from typing import Optional, Dict, Tuple, Sequence
from pathlib import Path
import logging

from ..exit_codes import GitCommandError, MergeError

logger = logging.getLogger(__name__)


class GitClient:
    """
    Abstraction over git commands.

    Branch names are resolved against the remote-tracking refs first so
    that checkouts and lookups see the fetched tip rather than a stale
    local branch.

    Example:
        client = GitClient()
        if not client.has_local_repo(workspace):
            client.clone(workspace, "https://example.com/project.git")
        client.fetch(workspace)
        tip = client.rev_parse(workspace, "master")
    """

    def __init__(
        self,
        executable: str = "git",
        timeout: int = 600,
        remote: str = "origin",
        user_name: Optional[str] = None,
        user_email: Optional[str] = None,
    ):
        """
        Initialize GitClient.

        Args:
            executable: Path to the git executable (default: "git")
            timeout: Command timeout in seconds (default: 600)
            remote: Name of the remote the workspace tracks
            user_name: Committer name used for merge commits
            user_email: Committer email used for merge commits
        """
        self.executable = executable or "git"
        self.timeout = timeout
        self.remote = remote
        self.user_name = user_name
        self.user_email = user_email

    def _run(
        self,
        args: Sequence[str],
        cwd,
        check: bool = False,
        env: Optional[Dict[str, str]] = None,
        **context
    ) -> Tuple[Optional[str], int]:
        """
        Run a git command.

        Args:
            args: Arguments passed to git
            cwd: Working directory
            check: Raise GitCommandError on non-zero exit
            env: Variables added to the inherited environment
            context: Extra diagnostic fields for GitCommandError

        Returns:
            Tuple of (stdout, returncode)
        """
        cmd = [self.executable] + list(args)
        try:
            result = subprocess.run(
                cmd,
                cwd=str(cwd),
                capture_output=True,
                text=True,
                timeout=self.timeout,
                env={**os.environ, **env} if env else None
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"Git command timed out: {' '.join(cmd)}")
            if check:
                raise GitCommandError(
                    f"git {args[0]} timed out after {self.timeout}s",
                    command=cmd, workspace=str(cwd), **context
                )
            return None, -1
        except OSError as e:
            logger.error(f"Git command failed: {' '.join(cmd)} - {e}")
            if check:
                raise GitCommandError(
                    f"git {args[0]} could not be run: {e}",
                    command=cmd, workspace=str(cwd), **context
                ) from e
            return None, -1

        output = result.stdout
        if check and result.returncode != 0:
            raise GitCommandError(
                f"git {args[0]} failed with exit code {result.returncode}",
                command=cmd,
                returncode=result.returncode,
                stderr=result.stderr or result.stdout,
                workspace=str(cwd),
                **context
            )

        return output.strip() if output else None, result.returncode

    def _remote_ref(self, branch: str) -> str:
        return f"refs/remotes/{self.remote}/{branch}"

    def _ref_exists(self, path, ref: str) -> bool:
        _, code = self._run(["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"], cwd=path)
        return code == 0

    def _resolve(self, path, branch: str) -> str:
        """Prefer the remote-tracking ref of ``branch`` when it exists."""
        remote_ref = self._remote_ref(branch)
        if self._ref_exists(path, remote_ref):
            return remote_ref
        return branch

    def has_local_repo(self, path) -> bool:
        """Check if path holds a git clone."""
        return (Path(path) / ".git").exists()

    def has_submodules(self, path) -> bool:
        """Check if the checked out tree declares submodules."""
        return (Path(path) / ".gitmodules").exists()

    def clone(self, path, source: str) -> None:
        """Clone ``source`` into the (empty) directory ``path``."""
        self._run(["clone", "--origin", self.remote, source, "."], cwd=path,
                  check=True, source=source)

    def fetch(self, path) -> None:
        """Fetch remote branches and prune deleted ones."""
        self._run(["fetch", "--prune", self.remote], cwd=path, check=True,
                  remote=self.remote)

    def checkout(self, path, branch: str) -> None:
        """
        Check out ``branch`` at its fetched tip.

        A local branch of the same name is reset to the remote-tracking
        ref; names without a remote-tracking ref (tags, revisions) are
        checked out as given.
        """
        remote_ref = self._remote_ref(branch)
        if self._ref_exists(path, remote_ref):
            args = ["checkout", "--force", "-B", branch, remote_ref]
        else:
            args = ["checkout", "--force", branch]
        self._run(args, cwd=path, check=True, branch=branch)

    def merge(self, path, branch: str) -> None:
        """
        Merge ``branch`` into the current branch.

        Raises:
            MergeError: if the merge does not complete cleanly; the merge
                is aborted so the current branch is left untouched
        """
        env = None
        if self.user_name and self.user_email:
            env = {
                "GIT_AUTHOR_NAME": self.user_name,
                "GIT_AUTHOR_EMAIL": self.user_email,
                "GIT_COMMITTER_NAME": self.user_name,
                "GIT_COMMITTER_EMAIL": self.user_email,
            }
        args = ["merge", "--no-edit", self._resolve(path, branch)]
        try:
            self._run(args, cwd=path, check=True, env=env, branch=branch)
        except GitCommandError as e:
            _, code = self._run(["merge", "--abort"], cwd=path)
            if code != 0:
                logger.debug(f"git merge --abort exited with {code} in {path}")
            raise MergeError(
                f"{branch} does not merge cleanly",
                command=e.command,
                returncode=e.returncode,
                stderr=e.stderr,
                workspace=e.workspace,
                branch=branch,
            ) from e

    def submodule_init(self, path) -> None:
        self._run(["submodule", "init"], cwd=path, check=True)

    def submodule_update(self, path) -> None:
        self._run(["submodule", "update", "--init", "--recursive"], cwd=path, check=True)

    def clean(self, path) -> None:
        """Remove untracked and ignored files and directories."""
        self._run(["clean", "-fdx"], cwd=path, check=True)

    def rev_parse(self, path, branch: str, short: bool = False) -> Optional[str]:
        """
        Resolve ``branch`` to a revision id.

        Returns:
            Full (or abbreviated) revision id, or None if the name does
            not resolve to a commit
        """
        for ref in (self._remote_ref(branch), branch):
            args = ["rev-parse", "--verify", "--quiet"]
            if short:
                args.append("--short")
            args.append(f"{ref}^{{commit}}")
            output, code = self._run(args, cwd=path)
            if code == 0 and output:
                return output.strip()
            if code not in (0, 1):
                raise GitCommandError(
                    f"git rev-parse failed with exit code {code}",
                    command=[self.executable] + args,
                    returncode=code,
                    workspace=str(path),
                    branch=branch,
                )
        return None

    def log(self, path, from_revision: str, to_revision: str) -> str:
        """
        Raw log of the commits in ``from_revision..to_revision``.

        The output uses ``--pretty=raw`` headers and ``--name-status``
        path lines, the format read by the change log parser.
        """
        output, _ = self._run(
            ["log", "--pretty=raw", "--name-status", "--no-renames", "--no-color",
             f"{from_revision}..{to_revision}"],
            cwd=path,
            check=True,
            from_revision=from_revision,
            to_revision=to_revision,
        )
        return output or ""

    def version(self) -> str:
        """Version string reported by the git executable."""
        output, _ = self._run(["--version"], cwd=Path.cwd(), check=True)
        return output or ""

