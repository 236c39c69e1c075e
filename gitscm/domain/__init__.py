"""
Domain layer for gitscm.

Contains pure domain objects with no I/O or side effects:
- RepositoryConfig: Where a project's sources live and how to check them out
- ChangeEntry / ChangeSet: Commits between two revisions
- RevisionRecord: Last successfully built revision of a project
- WorkspaceState / CheckoutResult / PollResult: Outcomes of sync and poll

These objects provide serialization methods for JSONL output.
"""

from .repository import RepositoryConfig, GitWebBrowser
from .change import ChangeEntry, ChangeSet
from .revision import RevisionRecord
from .workspace import WorkspaceState, CheckoutStatus, CheckoutResult, PollResult

__all__ = [
    'RepositoryConfig',
    'GitWebBrowser',
    'ChangeEntry',
    'ChangeSet',
    'RevisionRecord',
    'WorkspaceState',
    'CheckoutStatus',
    'CheckoutResult',
    'PollResult',
]
