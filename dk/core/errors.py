"""Error codes for CLI exit status.

Scripts that wrap dk only distinguish success from failure, so there are
exactly two codes. Usage errors (unknown tool or group, bad config) and
per-tool failures both exit with FAILURE.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands. Values must remain stable."""

    OK = 0
    FAILURE = 1

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @classmethod
    def from_success(cls, ok: bool) -> "ErrorCode":
        """Map a boolean outcome to an exit code."""
        return cls.OK if ok else cls.FAILURE
