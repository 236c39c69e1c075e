"""
Service layer for gitscm.

Contains the synchronization and decision logic that orchestrates domain
objects and infrastructure:
- WorkspaceSynchronizer: Clone, fetch, checkout, merge and clean a workspace
- PollService: Decide whether a project has new work to build
- ChangeRangeExtractor: Commits between two revisions
- CheckoutService: Prepare a workspace and change log for a build
- RevisionStore: Last successfully built revision per project

Services are the primary API for commands to use.
"""

from .revision_store import RevisionStore
from .workspace_sync import WorkspaceSynchronizer
from .poll_service import PollService, BuildStatus
from .change_range import ChangeRangeExtractor
from .checkout_service import CheckoutService, BuildCheckout
from .changelog import parse_commit, parse_changelog, write_changelog, read_changelog
from .parameters import substitute

__all__ = [
    'RevisionStore',
    'WorkspaceSynchronizer',
    'PollService',
    'BuildStatus',
    'ChangeRangeExtractor',
    'CheckoutService',
    'BuildCheckout',
    'parse_commit',
    'parse_changelog',
    'write_changelog',
    'read_changelog',
    'substitute',
]
