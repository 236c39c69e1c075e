"""
Change domain objects for gitscm.

A ChangeEntry is one commit as recorded in the change log; a ChangeSet is
the ordered list of entries between two revisions.
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any, FrozenSet, Iterator, Tuple, Iterable

from .repository import GitWebBrowser


@dataclass(frozen=True)
class ChangeEntry:
    """
    One commit parsed from the change log.

    Fields are None when the corresponding line was not present in the
    input. ``author`` is the committer's identity, not the original author.
    """
    id: Optional[str] = None
    author: Optional[str] = None
    message: Optional[str] = None
    affected_paths: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def summary(self) -> str:
        """First line of the message."""
        if not self.message:
            return ""
        return self.message.split('\n', 1)[0]

    def to_dict(self, browser: Optional[GitWebBrowser] = None) -> Dict[str, Any]:
        result = {
            'id': self.id,
            'author': self.author,
            'message': self.message,
            'affected_paths': sorted(self.affected_paths),
        }
        if browser:
            if self.id:
                result['link'] = browser.changeset_link(self.id)
            result['path_links'] = {
                path: browser.file_link(path, self.id) for path in result['affected_paths']
            }
        return result


class ChangeSet:
    """
    Ordered collection of ChangeEntry objects.

    Entries keep the order in which git emitted them.
    """

    def __init__(self, entries: Iterable[ChangeEntry] = ()):
        self._entries: Tuple[ChangeEntry, ...] = tuple(entries)

    @property
    def entries(self) -> Tuple[ChangeEntry, ...]:
        return self._entries

    @property
    def affected_paths(self) -> FrozenSet[str]:
        """Union of the paths touched by every entry."""
        paths = set()
        for entry in self._entries:
            paths.update(entry.affected_paths)
        return frozenset(paths)

    def is_empty(self) -> bool:
        return not self._entries

    def __iter__(self) -> Iterator[ChangeEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> ChangeEntry:
        return self._entries[index]

    def __eq__(self, other) -> bool:
        if not isinstance(other, ChangeSet):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"ChangeSet({list(self._entries)!r})"
