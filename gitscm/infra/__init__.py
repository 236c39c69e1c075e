"""
Infrastructure layer for gitscm.

Contains abstractions for external systems:
- GitClient: Git command execution (the primitive repository operations)
- FileStore: Locked JSON record file
- BuildMarkers: Per-project "build in progress" flags

These provide clean interfaces that can be mocked for testing.
"""

from .git_client import GitClient
from .file_store import FileStore
from .build_marker import BuildMarkers

__all__ = [
    'GitClient',
    'FileStore',
    'BuildMarkers',
]
