"""
Workspace state and operation result domain objects for gitscm.

WorkspaceState is never stored: the synchronizer derives it by probing the
workspace and records the states it passes through in a CheckoutResult.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Optional


class WorkspaceState(Enum):
    """Conceptual states of a build workspace."""
    ABSENT = "absent"              # No local clone
    CLONED_STALE = "cloned_stale"  # Clone exists, remote refs not updated
    SYNCED = "synced"              # Fetch completed
    CHECKED_OUT = "checked_out"    # Target branch checked out
    MERGED = "merged"              # Target branch merged onto merge target
    CLEAN = "clean"                # Untracked and ignored files removed


class CheckoutStatus(Enum):
    """Outcome of a workspace convergence."""
    SUCCESS = "success"
    INTEGRATION_FAILED = "integration_failed"


@dataclass
class CheckoutResult:
    """
    Result of converging a workspace.

    ``branch`` is the expanded branch to build; ``checked_out`` is the
    branch the workspace is on afterwards (the merge target when merging).
    """
    status: CheckoutStatus
    workspace: str
    branch: str
    checked_out: str
    merge_target: Optional[str] = None
    state: WorkspaceState = WorkspaceState.CHECKED_OUT
    transitions: List[WorkspaceState] = field(default_factory=list)
    reason: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == CheckoutStatus.SUCCESS

    @property
    def merged(self) -> bool:
        return self.merge_target is not None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'status': self.status.value,
            'workspace': self.workspace,
            'branch': self.branch,
            'checked_out': self.checked_out,
            'state': self.state.value,
            'transitions': [s.value for s in self.transitions],
        }
        if self.merge_target is not None:
            result['merge_target'] = self.merge_target
        if self.reason:
            result['reason'] = self.reason
        return result


@dataclass
class PollResult:
    """Outcome of one poll cycle."""
    project: str
    changes: bool
    tip: Optional[str] = None
    last_built: Optional[str] = None
    branch: Optional[str] = None
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'project': self.project,
            'changes': self.changes,
            'tip': self.tip,
            'last_built': self.last_built,
        }
        if self.branch is not None:
            result['branch'] = self.branch
        if self.reason:
            result['reason'] = self.reason
        return result
