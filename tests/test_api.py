"""Tests for the GitSCM facade."""

import pytest
from unittest.mock import MagicMock

from gitscm.api import GitSCM
from gitscm.config import get_default_config
from gitscm.exit_codes import CommandError, ConfigError, GitCommandError
from gitscm.infra.git_client import GitClient

TIP = "3f2a9c0000000000000000000000000000000000"


@pytest.fixture
def config(tmp_path):
    config = get_default_config()
    config["general"]["state_directory"] = str(tmp_path / "state")
    config["general"]["workspace_root"] = str(tmp_path / "workspaces")
    config["parameters"] = {"BRANCH": "develop"}
    config["projects"] = {"proj": {"source": "https://example.com/proj.git", "branch": "$BRANCH"}}
    return config


@pytest.fixture
def git():
    client = MagicMock(spec=GitClient)
    client.has_local_repo.return_value = True
    client.has_submodules.return_value = False
    client.rev_parse.return_value = TIP
    return client


@pytest.fixture
def scm(config, git):
    return GitSCM(config=config, git_client=git)


def test_workspace_defaults_to_workspace_root(scm, tmp_path):
    assert scm.workspace("proj") == tmp_path / "workspaces" / "proj"


def test_config_parameters_used_as_defaults(scm, git):
    result = scm.poll("proj")

    assert result.branch == "develop"
    assert result.changes is True


def test_call_parameters_override_config(scm, git):
    assert scm.poll("proj", parameters={"BRANCH": "release"}).branch == "release"


def test_record_build_stops_changes(scm):
    scm.record_build("proj", TIP)

    assert scm.last_built("proj") == TIP
    assert scm.poll("proj").changes is False


def test_checkout_keeps_project_building_until_finished(scm, git):
    seen = []
    git.checkout.side_effect = lambda ws, branch: seen.append(scm.markers.is_building("proj"))

    checkout = scm.checkout("proj")

    assert checkout.success
    assert seen == [True]
    assert scm.markers.is_building("proj")
    assert scm.pending_revision("proj") == TIP


def test_poll_skipped_while_building(scm, git):
    scm.markers.mark("proj")
    try:
        result = scm.poll("proj")
    finally:
        scm.markers.clear("proj")

    assert result.changes is False
    git.fetch.assert_not_called()


def test_failed_checkout_clears_marker(scm, git):
    git.checkout.side_effect = GitCommandError("checkout failed", returncode=1)

    with pytest.raises(GitCommandError):
        scm.checkout("proj")

    assert not scm.markers.is_building("proj")


def test_finish_build_records_checked_out_revision(scm, git):
    scm.checkout("proj")
    git.rev_parse.return_value = "b" * 40

    assert scm.finish_build("proj") == TIP
    assert scm.last_built("proj") == TIP
    assert not scm.markers.is_building("proj")


def test_finish_build_failure_records_nothing(scm, git):
    scm.checkout("proj")

    assert scm.finish_build("proj", success=False) == TIP
    assert scm.last_built("proj") is None
    assert not scm.markers.is_building("proj")


def test_finish_build_without_checkout(scm):
    with pytest.raises(CommandError):
        scm.finish_build("proj")
    assert scm.last_built("proj") is None


def test_unknown_project(scm):
    with pytest.raises(ConfigError):
        scm.poll("missing")


def test_git_client_built_from_config(config):
    config["git"]["remote"] = "upstream"
    config["git"]["timeout_seconds"] = 30

    scm = GitSCM(config=config)

    assert scm.git.remote == "upstream"
    assert scm.git.timeout == 30
    assert scm.git.user_name == "gitscm"
