"""Tests for build parameter substitution."""

import pytest

from gitscm.services.parameters import substitute, parse_parameters


class TestSubstitute:

    @pytest.mark.parametrize("template,expected", [
        ("$BRANCH", "feature/x"),
        ("${BRANCH}", "feature/x"),
        ("origin-$BRANCH", "origin-feature/x"),
        ("${BRANCH}-fix", "feature/x-fix"),
        ("master", "master"),
        ("$UNKNOWN", "$UNKNOWN"),
        ("${UNKNOWN}", "${UNKNOWN}"),
        ("", ""),
    ])
    def test_expansion(self, template, expected):
        assert substitute({"BRANCH": "feature/x"}, template) == expected

    def test_no_context_leaves_template(self):
        assert substitute(None, "$BRANCH") == "$BRANCH"

    def test_multiple_references(self):
        assert substitute({"A": "x", "B": "y"}, "$A/$B") == "x/y"

    def test_values_are_not_rescanned(self):
        assert substitute({"A": "$B", "B": "y"}, "$A") == "$B"


class TestParseParameters:

    def test_parse(self):
        assert parse_parameters(["BRANCH=main", "EMPTY=", "EQ=a=b"]) == {
            "BRANCH": "main",
            "EMPTY": "",
            "EQ": "a=b",
        }

    def test_none(self):
        assert parse_parameters(None) == {}

    @pytest.mark.parametrize("value", ["BRANCH", "=main"])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_parameters([value])
