"""
Revision record domain object for gitscm.
"""

from dataclasses import dataclass
from typing import Optional, Dict, Any


@dataclass
class RevisionRecord:
    """
    Last successfully built revision of a project.

    Created empty on first poll or checkout; only updated after a build
    has been judged successful.
    """
    last_built_revision: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {'last_built_revision': self.last_built_revision}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'RevisionRecord':
        if not data:
            return cls()
        return cls(last_built_revision=data.get('last_built_revision'))
