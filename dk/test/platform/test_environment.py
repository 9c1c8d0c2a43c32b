"""Tests for dk.platform.environment module."""

from __future__ import annotations

import sys

import pytest

from dk.platform.environment import persisted_path_entries


@pytest.mark.skipif(sys.platform == "win32", reason="registry is present on Windows")
def test_empty_off_windows() -> None:
    assert persisted_path_entries() == []


@pytest.mark.skipif(sys.platform != "win32", reason="requires the Windows registry")
def test_windows_entries_exclude_current_path() -> None:
    import os

    current = {os.path.normcase(p.rstrip("\\/")) for p in os.environ["PATH"].split(os.pathsep)}
    for entry in persisted_path_entries():
        assert os.path.normcase(entry.rstrip("\\/")) not in current
