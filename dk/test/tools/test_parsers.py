"""Tests for dk.tools.parsers module."""

from __future__ import annotations

import pytest

from dk.tools.parsers import first_line, parser_for_category, regex, semver


class TestFirstLine:
    def test_skips_blank_lines(self) -> None:
        assert first_line("\n\n  git version 2.42.0\nextra") == "git version 2.42.0"

    def test_empty(self) -> None:
        assert first_line("  \n ") is None


class TestSemver:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("psql (PostgreSQL) 16.1", "16.1"),
            ("Google Chrome 120.0.6099.130", "120.0.6099.130"),
            ("node v20.10.0", "20.10.0"),
            ("1.2.3-beta.1 (build)", "1.2.3-beta.1"),
        ],
    )
    def test_extracts(self, text: str, expected: str) -> None:
        assert semver(text) == expected

    def test_no_version(self) -> None:
        assert semver("no digits here") is None


class TestRegex:
    def test_capture_group(self) -> None:
        parse = regex(r"go version go(\S+)")
        assert parse("go version go1.21.5 windows/amd64") == "1.21.5"

    def test_whole_match_without_group(self) -> None:
        assert regex(r"\d+\.\d+")("rustc 1.74.1") == "1.74"

    def test_case_insensitive_by_default(self) -> None:
        assert regex(r"python (\S+)")("Python 3.12.1") == "3.12.1"

    def test_no_match(self) -> None:
        assert regex(r"nvim v(\S+)")("garbage") is None


class TestParserForCategory:
    def test_browsers_use_semver(self) -> None:
        assert parser_for_category("browsers") is semver

    def test_default_is_first_line(self) -> None:
        assert parser_for_category("vcs") is first_line
