"""
Change log parsing and writing for gitscm.

The change log is the raw output of ``git log --pretty=raw --name-status``:

    commit 3f2a9c...
    tree 91bc...
    parent 77d0...
    author Jane Doe <jane@example.com> 1234567890 +0000
    committer Jane Doe <jane@example.com> 1234567890 +0000

        Fix bug

    M<TAB>src/file.go

Parsing never fails: lines that do not match a known shape are ignored and
missing fields stay unset.
"""

from pathlib import Path
from typing import Iterable, List, Optional, Union
import logging

from ..domain.change import ChangeEntry, ChangeSet

logger = logging.getLogger(__name__)

COMMIT_PREFIX = "commit "
COMMITTER_PREFIX = "committer "
MESSAGE_INDENT = "    "

# Added, Copied, Deleted, Modified, Renamed, Type changed
PATH_STATUSES = frozenset("ACDMRT")

_IGNORED_PREFIXES = ("tree ", "parent ", "author ")


def _committer_identity(line: str) -> str:
    """
    Identity part of a ``committer`` line.

    Everything between the prefix and the first " <". Display names that
    themselves contain " <" are cut short; existing change logs rely on
    this rule so it is kept as is.
    """
    end = line.find(" <")
    if end < 0:
        return line[len(COMMITTER_PREFIX):].strip()
    return line[len(COMMITTER_PREFIX):end]


def parse_commit(lines: Iterable[str]) -> ChangeEntry:
    """
    Parse the lines of one commit into a ChangeEntry.

    Empty input gives an entry with every field unset.
    """
    lines = [line.rstrip('\r\n') for line in lines]
    if not lines:
        return ChangeEntry()

    commit_id: Optional[str] = None
    author: Optional[str] = None
    message = ""
    paths = set()

    for line in lines:
        if not line:
            continue
        if line.startswith(COMMIT_PREFIX):
            tokens = line[len(COMMIT_PREFIX):].split()
            if tokens:
                commit_id = tokens[0]
        elif line.startswith(_IGNORED_PREFIXES):
            # committer identity wins over author
            continue
        elif line.startswith(COMMITTER_PREFIX):
            author = _committer_identity(line)
        elif line.startswith(MESSAGE_INDENT):
            message += line[len(MESSAGE_INDENT):] + "\n"
        elif len(line) > 2 and line[1] == "\t" and line[0] in PATH_STATUSES:
            paths.add(line[2:])

    return ChangeEntry(
        id=commit_id,
        author=author,
        message=message,
        affected_paths=frozenset(paths),
    )


def split_commits(lines: Iterable[str]) -> List[List[str]]:
    """
    Split log lines into one group per commit.

    A group starts at each ``commit `` line; anything before the first
    commit line is dropped.
    """
    groups: List[List[str]] = []
    current: Optional[List[str]] = None
    for line in lines:
        line = line.rstrip('\r\n')
        if line.startswith(COMMIT_PREFIX):
            current = [line]
            groups.append(current)
        elif current is not None:
            current.append(line)
        elif line.strip():
            logger.debug(f"Ignoring log line before first commit: {line!r}")
    return groups


def parse_changelog(log: Union[str, Iterable[str]]) -> ChangeSet:
    """Parse raw multi-commit log output into a ChangeSet, keeping git's order."""
    if isinstance(log, str):
        log = log.splitlines()
    return ChangeSet(parse_commit(group) for group in split_commits(log))


def format_entry(entry: ChangeEntry) -> List[str]:
    """
    Lines that parse back into ``entry``.

    Path status letters are not kept by ChangeEntry, so every path is
    written as modified.
    """
    lines = [f"{COMMIT_PREFIX}{entry.id}"]
    if entry.author is not None:
        lines.append(f"{COMMITTER_PREFIX}{entry.author} <> 0 +0000")
    lines.append("")
    if entry.message:
        body = entry.message[:-1] if entry.message.endswith("\n") else entry.message
        lines.extend(MESSAGE_INDENT + text for text in body.split("\n"))
        lines.append("")
    lines.extend(f"M\t{path}" for path in sorted(entry.affected_paths))
    return lines


def format_changelog(changes: Iterable[ChangeEntry]) -> str:
    blocks = []
    for entry in changes:
        if not entry.id:
            logger.debug("Skipping change entry without a revision id")
            continue
        blocks.append("\n".join(format_entry(entry)))
    return "\n\n".join(blocks) + ("\n" if blocks else "")


def write_changelog(path: Union[str, Path], changes: Iterable[ChangeEntry]) -> None:
    """Write ``changes`` to the change log file at ``path``."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(format_changelog(changes), encoding="utf-8")


def read_changelog(path: Union[str, Path]) -> ChangeSet:
    """Parse a change log file; a missing file is an empty ChangeSet."""
    path = Path(path)
    if not path.exists():
        return ChangeSet()
    return parse_changelog(path.read_text(encoding="utf-8"))
