"""
gitscm - Keep build workspaces in sync with git and decide when to build.

gitscm prepares a project's workspace from a remote git repository,
decides whether a poll cycle found new commits to build, and turns the
commit history between two builds into structured change entries.

Quick Start:
    import gitscm

    # Uses ~/.gitscm/config.json (or $GITSCM_CONFIG)
    scm = gitscm.GitSCM()

    # Anything new on the project's branch?
    result = scm.poll("myproject")
    print(result.tip, result.last_built, result.changes)

    # Prepare the workspace and write the change log
    checkout = scm.checkout("myproject", changelog="changelog.txt")
    for entry in checkout.changes:
        print(entry.id, entry.author, entry.summary)

    # Record the checked out revision once the build succeeded
    # (or pass success=False to just end the build)
    scm.finish_build("myproject", success=True)

Domain Objects:
    RepositoryConfig - Source, branch, merge and clean settings of a project
    ChangeEntry / ChangeSet - Commits between two revisions
    RevisionRecord - Last successfully built revision
    CheckoutResult / PollResult - Outcomes of checkout and poll

Services:
    WorkspaceSynchronizer - Clone, fetch, checkout, merge, clean
    PollService - Poll decision
    ChangeRangeExtractor - Change sets between revisions
    CheckoutService - Workspace and change log for a build
    RevisionStore - Last built revision per project
"""

__version__ = "0.3.0"

# High-level API
from .api import GitSCM

# Domain objects
from .domain import (
    RepositoryConfig,
    GitWebBrowser,
    ChangeEntry,
    ChangeSet,
    RevisionRecord,
    WorkspaceState,
    CheckoutStatus,
    CheckoutResult,
    PollResult,
)

# Services (for advanced use)
from .services import (
    WorkspaceSynchronizer,
    PollService,
    ChangeRangeExtractor,
    CheckoutService,
    RevisionStore,
    parse_commit,
    parse_changelog,
)

# Configuration
from .config import load_config, save_config

__all__ = [
    # Version
    "__version__",
    # High-level API
    "GitSCM",
    # Domain objects
    "RepositoryConfig",
    "GitWebBrowser",
    "ChangeEntry",
    "ChangeSet",
    "RevisionRecord",
    "WorkspaceState",
    "CheckoutStatus",
    "CheckoutResult",
    "PollResult",
    # Services
    "WorkspaceSynchronizer",
    "PollService",
    "ChangeRangeExtractor",
    "CheckoutService",
    "RevisionStore",
    "parse_commit",
    "parse_changelog",
    # Configuration
    "load_config",
    "save_config",
]
