"""
Tests for GitClient and the synchronizer against real git repositories.

Each test builds a small upstream repository in a temporary directory and
works on a clone of it.
"""

import os
import shutil
import subprocess

import pytest

from gitscm.domain import RepositoryConfig, WorkspaceState, CheckoutStatus
from gitscm.exit_codes import GitCommandError, MergeError
from gitscm.infra.git_client import GitClient
from gitscm.services.changelog import parse_changelog
from gitscm.services.workspace_sync import WorkspaceSynchronizer

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")

IDENTITY = {
    "GIT_AUTHOR_NAME": "Jane Doe",
    "GIT_AUTHOR_EMAIL": "jane@example.com",
    "GIT_COMMITTER_NAME": "Jane Doe",
    "GIT_COMMITTER_EMAIL": "jane@example.com",
}


def git(cwd, *args):
    result = subprocess.run(
        ["git", *args], cwd=str(cwd), capture_output=True, text=True,
        env={**os.environ, **IDENTITY}, check=True
    )
    return result.stdout.strip()


def commit_file(repo, name, content, message):
    (repo / name).write_text(content)
    git(repo, "add", name)
    git(repo, "commit", "-q", "-m", message)
    return git(repo, "rev-parse", "HEAD")


@pytest.fixture
def upstream(tmp_path):
    """Repository with 'main' and a 'feature' branch one commit ahead."""
    repo = tmp_path / "upstream"
    repo.mkdir()
    git(repo, "init", "-q")
    git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
    commit_file(repo, "a.txt", "one\n", "Initial commit")
    git(repo, "checkout", "-q", "-b", "feature")
    commit_file(repo, "b.txt", "feature\n", "Add feature file")
    git(repo, "checkout", "-q", "main")
    return repo


@pytest.fixture
def client():
    return GitClient(user_name="gitscm", user_email="gitscm@localhost")


@pytest.fixture
def workspace(tmp_path, upstream, client):
    ws = tmp_path / "ws"
    ws.mkdir()
    client.clone(ws, str(upstream))
    return ws


class TestGitClient:
    """Tests for the primitive git operations."""

    def test_clone(self, workspace, client, upstream):
        assert client.has_local_repo(workspace)
        assert not client.has_submodules(workspace)
        assert client.rev_parse(workspace, "main") == git(upstream, "rev-parse", "main")

    def test_clone_failure(self, tmp_path, client):
        ws = tmp_path / "ws"
        ws.mkdir()
        with pytest.raises(GitCommandError) as exc_info:
            client.clone(ws, str(tmp_path / "does-not-exist"))
        assert exc_info.value.returncode != 0
        assert exc_info.value.command[:2] == ["git", "clone"]

    def test_rev_parse_unknown_branch(self, workspace, client):
        assert client.rev_parse(workspace, "no-such-branch") is None

    def test_rev_parse_short(self, workspace, client):
        full = client.rev_parse(workspace, "feature")
        short = client.rev_parse(workspace, "feature", short=True)
        assert full.startswith(short)
        assert len(short) < len(full)

    def test_rev_parse_outside_repository(self, tmp_path, client):
        plain = tmp_path / "plain"
        plain.mkdir()
        with pytest.raises(GitCommandError):
            client.rev_parse(plain, "main")

    def test_fetch_sees_new_commits(self, workspace, client, upstream):
        before = client.rev_parse(workspace, "main")
        new = commit_file(upstream, "a.txt", "two\n", "Second commit")

        assert client.rev_parse(workspace, "main") == before
        client.fetch(workspace)
        assert client.rev_parse(workspace, "main") == new

    def test_fetch_outside_repository(self, tmp_path, client):
        plain = tmp_path / "plain"
        plain.mkdir()
        with pytest.raises(GitCommandError):
            client.fetch(plain)

    def test_checkout_remote_branch(self, workspace, client):
        client.checkout(workspace, "feature")
        assert git(workspace, "rev-parse", "--abbrev-ref", "HEAD") == "feature"
        assert (workspace / "b.txt").exists()

    def test_checkout_resets_to_fetched_tip(self, workspace, client, upstream):
        client.checkout(workspace, "main")
        new = commit_file(upstream, "a.txt", "two\n", "Second commit")
        client.fetch(workspace)

        client.checkout(workspace, "main")

        assert git(workspace, "rev-parse", "HEAD") == new
        assert (workspace / "a.txt").read_text() == "two\n"

    def test_checkout_unknown_branch(self, workspace, client):
        with pytest.raises(GitCommandError):
            client.checkout(workspace, "no-such-branch")

    def test_log(self, workspace, client, upstream):
        old = client.rev_parse(workspace, "main")
        new = commit_file(upstream, "c.txt", "c\n", "Add c\n\nWith a body.")
        client.fetch(workspace)

        changes = parse_changelog(client.log(workspace, old, new))

        assert len(changes) == 1
        entry = changes[0]
        assert entry.id == new
        assert entry.author == "Jane Doe"
        assert entry.summary == "Add c"
        assert "With a body." in entry.message
        assert entry.affected_paths == frozenset({"c.txt"})

    def test_log_empty_range(self, workspace, client):
        head = client.rev_parse(workspace, "main")
        assert client.log(workspace, head, head) == ""

    def test_merge(self, workspace, client, upstream):
        commit_file(upstream, "a.txt", "two\n", "Advance main")
        client.fetch(workspace)
        client.checkout(workspace, "main")

        client.merge(workspace, "feature")

        assert (workspace / "b.txt").exists()
        assert (workspace / "a.txt").read_text() == "two\n"
        assert git(workspace, "log", "-1", "--format=%cn") == "gitscm"

    def test_merge_conflict_is_aborted(self, workspace, client, upstream):
        git(upstream, "checkout", "-q", "feature")
        commit_file(upstream, "a.txt", "feature side\n", "Change a on feature")
        git(upstream, "checkout", "-q", "main")
        commit_file(upstream, "a.txt", "main side\n", "Change a on main")
        client.fetch(workspace)
        client.checkout(workspace, "main")
        head = git(workspace, "rev-parse", "HEAD")

        with pytest.raises(MergeError) as exc_info:
            client.merge(workspace, "feature")

        assert exc_info.value.context["branch"] == "feature"
        assert git(workspace, "rev-parse", "HEAD") == head
        assert git(workspace, "status", "--porcelain") == ""
        assert (workspace / "a.txt").read_text() == "main side\n"

    def test_clean(self, workspace, client):
        client.checkout(workspace, "main")
        (workspace / "build").mkdir()
        (workspace / "build" / "out.o").write_text("x")
        (workspace / "scratch.txt").write_text("x")

        client.clean(workspace)

        assert not (workspace / "build").exists()
        assert not (workspace / "scratch.txt").exists()
        assert (workspace / "a.txt").exists()

    def test_version(self, client):
        assert client.version().startswith("git version")

    def test_missing_executable(self, tmp_path):
        client = GitClient(executable=str(tmp_path / "no-git"))
        with pytest.raises(GitCommandError):
            client.version()
        with pytest.raises(GitCommandError):
            client.rev_parse(tmp_path, "main")


class TestConvergeWithGit:
    """End-to-end convergence against a real upstream."""

    def test_fresh_checkout(self, tmp_path, upstream, client):
        sync = WorkspaceSynchronizer(client)
        config = RepositoryConfig(source=str(upstream), branch="feature")
        ws = tmp_path / "build-ws"

        result = sync.converge(config, ws)

        assert result.success
        assert result.transitions[0] == WorkspaceState.CLONED_STALE
        assert git(ws, "rev-parse", "--abbrev-ref", "HEAD") == "feature"

    def test_merge_onto_target(self, tmp_path, upstream, client):
        commit_file(upstream, "a.txt", "two\n", "Advance main")
        sync = WorkspaceSynchronizer(client)
        config = RepositoryConfig(source=str(upstream), branch="feature", merge=True,
                                  merge_target="main", clean=True)
        ws = tmp_path / "build-ws"

        result = sync.converge(config, ws)

        assert result.success
        assert result.state == WorkspaceState.CLEAN
        assert git(ws, "rev-parse", "--abbrev-ref", "HEAD") == "main"
        assert (ws / "b.txt").exists()

    def test_conflicting_branch_not_integrated(self, tmp_path, upstream, client):
        git(upstream, "checkout", "-q", "feature")
        commit_file(upstream, "a.txt", "feature side\n", "Change a on feature")
        git(upstream, "checkout", "-q", "main")
        commit_file(upstream, "a.txt", "main side\n", "Change a on main")
        sync = WorkspaceSynchronizer(client)
        config = RepositoryConfig(source=str(upstream), branch="feature", merge=True,
                                  merge_target="main")
        ws = tmp_path / "build-ws"

        result = sync.converge(config, ws)

        assert result.status == CheckoutStatus.INTEGRATION_FAILED
        assert git(ws, "rev-parse", "--abbrev-ref", "HEAD") == "main"
        assert (ws / "a.txt").read_text() == "main side\n"

    def test_converge_twice(self, tmp_path, upstream, client):
        sync = WorkspaceSynchronizer(client)
        config = RepositoryConfig(source=str(upstream), branch="main")
        ws = tmp_path / "build-ws"

        sync.converge(config, ws)
        result = sync.converge(config, ws)

        assert result.success
        assert result.transitions == [WorkspaceState.SYNCED, WorkspaceState.CHECKED_OUT]
