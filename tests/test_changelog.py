"""Tests for change log parsing and writing."""

import pytest

from gitscm.domain import ChangeEntry, ChangeSet
from gitscm.services.changelog import (
    parse_commit,
    parse_changelog,
    split_commits,
    format_changelog,
    write_changelog,
    read_changelog,
)


SINGLE_COMMIT = [
    "commit abc123",
    "tree 91bc0000",
    "parent 77d00000",
    "author Someone Else <else@example.com> 1234567890 +0000",
    "committer Jane Doe <jane@example.com> 1234567890 +0000",
    "",
    "    Fix bug",
    "",
    "M\tsrc/file.go",
]

TWO_COMMITS = """commit 1111111111111111111111111111111111111111
tree aaaa
parent 2222222222222222222222222222222222222222
author Jane Doe <jane@example.com> 1700000100 +0100
committer Jane Doe <jane@example.com> 1700000100 +0100

    Add login form
    
    Includes validation.

A\tweb/login.html
M\tweb/app.js

commit 2222222222222222222222222222222222222222
tree bbbb
author John Roe <john@example.com> 1700000000 +0100
committer John Roe <john@example.com> 1700000000 +0100

    Remove legacy page

D\tweb/legacy.html
"""


class TestParseCommit:
    """Tests for parse_commit."""

    def test_single_commit(self):
        entry = parse_commit(SINGLE_COMMIT)
        assert entry.id == "abc123"
        assert entry.author == "Jane Doe"
        assert entry.message == "Fix bug\n"
        assert entry.affected_paths == frozenset({"src/file.go"})

    def test_empty_input_gives_unset_fields(self):
        entry = parse_commit([])
        assert entry == ChangeEntry()
        assert entry.id is None
        assert entry.author is None
        assert entry.message is None
        assert entry.affected_paths == frozenset()

    def test_committer_wins_over_author(self):
        entry = parse_commit(SINGLE_COMMIT)
        assert entry.author != "Someone Else"

    def test_author_only_leaves_author_unset(self):
        entry = parse_commit([
            "commit abc123",
            "author Someone Else <else@example.com> 1234567890 +0000",
        ])
        assert entry.author is None

    def test_missing_message_is_empty_string(self):
        entry = parse_commit(["commit abc123", "M\ta.txt"])
        assert entry.message == ""

    def test_multi_line_message(self):
        entry = parse_commit([
            "commit abc123",
            "    First line",
            "    ",
            "    Second paragraph",
        ])
        assert entry.message == "First line\n\nSecond paragraph\n"
        assert entry.summary == "First line"

    def test_duplicate_paths_collapse(self):
        entry = parse_commit([
            "commit abc123",
            "M\tsrc/a.py",
            "M\tsrc/a.py",
            "A\tsrc/b.py",
        ])
        assert entry.affected_paths == frozenset({"src/a.py", "src/b.py"})

    def test_path_with_spaces(self):
        entry = parse_commit(["commit abc123", "A\tdocs/read me.txt"])
        assert entry.affected_paths == frozenset({"docs/read me.txt"})

    def test_unrecognized_lines_ignored(self):
        entry = parse_commit([
            "commit abc123",
            "gpgsig -----BEGIN PGP SIGNATURE-----",
            "X\tnot-a-status.txt",
            "Merge: 1234 5678",
            "M\tkept.txt",
        ])
        assert entry.id == "abc123"
        assert entry.affected_paths == frozenset({"kept.txt"})

    def test_commit_line_extra_tokens(self):
        entry = parse_commit(["commit abc123 (from def456)"])
        assert entry.id == "abc123"

    def test_committer_without_email(self):
        entry = parse_commit(["commit abc123", "committer build robot"])
        assert entry.author == "build robot"

    def test_committer_name_cut_at_first_bracket(self):
        entry = parse_commit([
            "commit abc123",
            "committer Odd <Name> <odd@example.com> 1234567890 +0000",
        ])
        assert entry.author == "Odd"

    def test_crlf_line_endings(self):
        entry = parse_commit([line + "\r\n" for line in SINGLE_COMMIT])
        assert entry.id == "abc123"
        assert entry.author == "Jane Doe"
        assert entry.affected_paths == frozenset({"src/file.go"})


class TestParseChangelog:
    """Tests for splitting and parsing multi-commit logs."""

    def test_two_commits_in_log_order(self):
        changes = parse_changelog(TWO_COMMITS)
        assert len(changes) == 2
        assert [entry.id[:4] for entry in changes] == ["1111", "2222"]

        first = changes[0]
        assert first.author == "Jane Doe"
        assert first.message == "Add login form\n\nIncludes validation.\n"
        assert first.affected_paths == frozenset({"web/login.html", "web/app.js"})

        second = changes[1]
        assert second.author == "John Roe"
        assert second.affected_paths == frozenset({"web/legacy.html"})

    def test_empty_log(self):
        changes = parse_changelog("")
        assert changes.is_empty()
        assert changes == ChangeSet()

    def test_accepts_line_iterable(self):
        changes = parse_changelog(iter(SINGLE_COMMIT))
        assert len(changes) == 1
        assert changes[0].id == "abc123"

    def test_lines_before_first_commit_dropped(self):
        groups = split_commits(["warning: something", "", "commit abc", "    msg"])
        assert groups == [["commit abc", "    msg"]]

    def test_split_starts_group_at_each_commit(self):
        groups = split_commits(TWO_COMMITS.splitlines())
        assert len(groups) == 2
        assert groups[0][0].startswith("commit 1111")
        assert groups[1][0].startswith("commit 2222")

    def test_affected_paths_union(self):
        changes = parse_changelog(TWO_COMMITS)
        assert changes.affected_paths == frozenset(
            {"web/login.html", "web/app.js", "web/legacy.html"}
        )


class TestChangelogFile:
    """Tests for writing and reading back change log files."""

    def test_write_then_read(self, tmp_path):
        changes = parse_changelog(TWO_COMMITS)
        path = tmp_path / "build" / "changelog.txt"

        write_changelog(path, changes)
        assert path.exists()

        assert read_changelog(path) == changes

    def test_written_format(self, tmp_path):
        path = tmp_path / "changelog.txt"
        write_changelog(path, parse_commit_list(SINGLE_COMMIT))

        text = path.read_text()
        assert text.startswith("commit abc123\n")
        assert "committer Jane Doe <> 0 +0000" in text
        assert "    Fix bug" in text
        assert "M\tsrc/file.go" in text

    def test_empty_changes_write_empty_file(self, tmp_path):
        path = tmp_path / "changelog.txt"
        write_changelog(path, ChangeSet())
        assert path.read_text() == ""
        assert read_changelog(path).is_empty()

    def test_missing_file_reads_empty(self, tmp_path):
        assert read_changelog(tmp_path / "nope.txt").is_empty()

    def test_entries_without_id_skipped(self):
        text = format_changelog([ChangeEntry(), ChangeEntry(id="abc", message="")])
        assert text == "commit abc\n\n"

    @pytest.mark.parametrize("message", ["one line\n", "a\n\nb\n"])
    def test_message_survives(self, tmp_path, message):
        entry = ChangeEntry(id="abc", author="Jane Doe", message=message,
                            affected_paths=frozenset({"x"}))
        path = tmp_path / "changelog.txt"
        write_changelog(path, [entry])
        assert read_changelog(path)[0] == entry


def parse_commit_list(lines):
    return [parse_commit(lines)]
