"""Tests for dk.platform.paths module."""

from __future__ import annotations

from pathlib import Path

import pytest

from dk.platform.paths import clear_caches, expand_path_pattern, expand_placeholders


@pytest.fixture(autouse=True)
def _fresh_caches() -> None:
    clear_caches()


class TestExpandPlaceholders:
    def test_windows_style(self) -> None:
        env = {"LOCALAPPDATA": r"C:\Users\me\AppData\Local"}
        assert (
            expand_placeholders(r"%LOCALAPPDATA%\Programs\Git", env)
            == r"C:\Users\me\AppData\Local\Programs\Git"
        )

    def test_windows_names_are_case_insensitive(self) -> None:
        env = {"PROGRAMFILES": r"C:\Program Files"}
        assert expand_placeholders(r"%ProgramFiles%\Git", env) == r"C:\Program Files\Git"

    def test_parenthesised_name(self) -> None:
        env = {"ProgramFiles(x86)": r"C:\Program Files (x86)"}
        assert expand_placeholders(r"%ProgramFiles(x86)%\Edge", env) == r"C:\Program Files (x86)\Edge"

    def test_posix_styles(self) -> None:
        env = {"HOME": "/home/me", "GOROOT": "/opt/go"}
        assert expand_placeholders("$HOME/.cargo/bin", env) == "/home/me/.cargo/bin"
        assert expand_placeholders("${GOROOT}/bin", env) == "/opt/go/bin"

    def test_unset_variable_yields_none(self) -> None:
        assert expand_placeholders(r"%ProgramFiles(x86)%\Mozilla", {}) is None

    def test_empty_variable_yields_none(self) -> None:
        assert expand_placeholders("$EMPTY/bin", {"EMPTY": ""}) is None

    def test_tilde(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        import dk.platform.paths as paths

        monkeypatch.setattr(paths, "home", lambda: tmp_path)
        assert expand_placeholders("~/.cargo/bin", {}) == f"{tmp_path}/.cargo/bin"

    def test_plain_path_unchanged(self) -> None:
        assert expand_placeholders("/usr/local/go/bin/go", {}) == "/usr/local/go/bin/go"


class TestExpandPathPattern:
    def test_existing_file(self, tmp_path: Path) -> None:
        exe = tmp_path / "tool"
        exe.write_text("", encoding="utf-8")
        assert expand_path_pattern("$ROOT/tool", {"ROOT": str(tmp_path)}) == [exe]

    def test_missing_file(self, tmp_path: Path) -> None:
        assert expand_path_pattern(str(tmp_path / "missing"), {}) == []

    def test_glob_highest_version_first(self, tmp_path: Path) -> None:
        for version in ("9", "10", "16"):
            (tmp_path / "PostgreSQL" / version / "bin").mkdir(parents=True)

        matches = expand_path_pattern(str(tmp_path / "PostgreSQL" / "*" / "bin"), {})

        assert [m.parent.name for m in matches] == ["16", "10", "9"]

    def test_unset_variable_matches_nothing(self) -> None:
        assert expand_path_pattern("%NOT_SET_ANYWHERE%/bin", {}) == []
