"""
Repository configuration domain objects for gitscm.

RepositoryConfig describes where a project's sources live and how its
workspace should be prepared. It is created once from configuration and
never mutated.
"""

from dataclasses import dataclass
from typing import Optional, Dict, Any
from urllib.parse import quote


@dataclass(frozen=True)
class GitWebBrowser:
    """Links into a gitweb instance for changesets and files."""
    url: str

    def changeset_link(self, revision: str) -> str:
        """Link to the commit page of ``revision``."""
        return f"{self._base()}a=commit;h={quote(revision)}"

    def file_link(self, path: str, revision: Optional[str] = None) -> str:
        """Link to ``path`` as of ``revision`` (or the default branch)."""
        link = f"{self._base()}a=blob;f={quote(path)}"
        if revision:
            link += f";hb={quote(revision)}"
        return link

    def _base(self) -> str:
        # gitweb separates query parameters with ';'
        if '?' not in self.url:
            return self.url + '?'
        if self.url.endswith(('?', ';', '&')):
            return self.url
        return self.url + ';'

    def to_dict(self) -> Dict[str, Any]:
        return {'type': 'gitweb', 'url': self.url}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional['GitWebBrowser']:
        if not data or not data.get('url'):
            return None
        return cls(url=data['url'])


@dataclass(frozen=True)
class RepositoryConfig:
    """
    Per-project source configuration.

    Attributes:
        source: Remote location, a URL or a local path
        branch: Branch to build; may contain ``$NAME`` build parameters
        clean: Remove untracked and ignored files after checkout
        merge: Merge ``branch`` onto ``merge_target`` before building
        merge_target: Branch that ``branch`` is integrated into
        browser: Optional repository browser for links
    """
    source: str
    branch: str = "master"
    clean: bool = False
    merge: bool = False
    merge_target: str = ""
    browser: Optional[GitWebBrowser] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'source': self.source,
            'branch': self.branch,
            'clean': self.clean,
            'merge': self.merge,
            'merge_target': self.merge_target,
        }
        if self.browser:
            result['browser'] = self.browser.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RepositoryConfig':
        return cls(
            source=data['source'],
            branch=data.get('branch') or "master",
            clean=bool(data.get('clean', False)),
            merge=bool(data.get('merge', False)),
            merge_target=data.get('merge_target') or "",
            browser=GitWebBrowser.from_dict(data.get('browser')),
        )
