"""Tool detection.

Finds a tool by probing, in order:
1. The current PATH, for each executable name
2. The descriptor's well-known install paths
3. The persisted PATH (Windows registry), which picks up tools installed
   after this process started

and then reads the version from the resolved binary.
"""

from __future__ import annotations

import os
import shutil
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING

from dk.core.config import DEFAULT_PROBE_TIMEOUT
from dk.core.result import Err
from dk.platform.detection import Platform, detect_platform
from dk.platform.environment import persisted_path_entries
from dk.platform.paths import expand_path_pattern
from dk.tools.model import DetectionResult
from dk.tools.parsers import UNKNOWN_VERSION, parser_for_category

if TYPE_CHECKING:
    from dk.platform.process import CommandRunner
    from dk.tools.descriptor import ToolDescriptor

__all__ = ["Detector", "Which"]

type Which = Callable[..., str | None]


class Detector:
    """Determines whether a tool is present, where, and which version.

    detect() never raises: unexpected failures come back as a result with
    status ERROR so callers can always render something.
    """

    def __init__(
        self,
        *,
        runner: CommandRunner,
        platform: Platform | None = None,
        probe_timeout: float = DEFAULT_PROBE_TIMEOUT,
        which: Which = shutil.which,
        persisted_path: Callable[[], list[str]] = persisted_path_entries,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._runner = runner
        self._platform = platform or detect_platform()
        self._probe_timeout = probe_timeout
        self._which = which
        self._persisted_path = persisted_path
        self._env = env

    @property
    def platform(self) -> Platform:
        return self._platform

    def detect(self, descriptor: ToolDescriptor) -> DetectionResult:
        """Detect a tool."""
        try:
            return self._detect(descriptor)
        except Exception as e:  # noqa: BLE001
            return DetectionResult.failed(f"{type(e).__name__}: {e}")

    def _detect(self, descriptor: ToolDescriptor) -> DetectionResult:
        exe = self._find_on_path(descriptor)
        install_path: Path | None = None

        if exe is None:
            install_path = self._find_in_common_paths(descriptor)
            if install_path is not None:
                exe = self._executable_in(install_path, descriptor)

        if exe is None and install_path is None:
            exe = self._find_on_persisted_path(descriptor)

        if exe is None and install_path is None:
            return DetectionResult.not_found()

        return DetectionResult.verified(
            version=self._probe_version(descriptor, exe),
            executable_path=exe,
            install_path=install_path,
        )

    def _find_on_path(self, descriptor: ToolDescriptor) -> Path | None:
        for name in descriptor.executables:
            found = self._which(name)
            if found:
                return Path(found).absolute()
        return None

    def _find_in_common_paths(self, descriptor: ToolDescriptor) -> Path | None:
        for pattern in descriptor.common_paths:
            matches = expand_path_pattern(pattern, self._env)
            if matches:
                return matches[0]
        return None

    def _find_on_persisted_path(self, descriptor: ToolDescriptor) -> Path | None:
        entries = self._persisted_path()
        if not entries:
            return None
        search = os.pathsep.join(entries)
        for name in descriptor.executables:
            found = self._which(name, path=search)
            if found:
                return Path(found).absolute()
        return None

    def _executable_in(self, path: Path, descriptor: ToolDescriptor) -> Path | None:
        """Find a runnable binary for a common-path hit.

        A file hit is the binary itself; for a directory, look for the
        executable names in it and in its bin/ subdirectory.
        """
        if path.is_file():
            return path
        if not path.is_dir():
            return None
        for name in descriptor.executables:
            for folder in (path, path / "bin"):
                candidate = folder / self._platform.exe_name(name)
                if candidate.is_file():
                    return candidate
        return None

    def _probe_version(self, descriptor: ToolDescriptor, exe: Path | None) -> str | None:
        probe = descriptor.version
        if probe is None:
            return None
        if exe is None:
            return UNKNOWN_VERSION

        result = self._runner.run([str(exe), *probe.args], timeout=self._probe_timeout)
        if isinstance(result, Err):
            return UNKNOWN_VERSION

        parser = probe.parser or parser_for_category(descriptor.category)
        return parser(result.value.text) or UNKNOWN_VERSION
