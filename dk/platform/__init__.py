"""Platform abstraction layer."""

from .detection import (
    Platform,
    detect_platform,
    is_windows,
)
from .paths import (
    expand_path_pattern,
    expand_placeholders,
    home,
    user_config_dir,
)
from .process import (
    CommandRunner,
    ProcessError,
    ProcessOutput,
    SubprocessRunner,
)

__all__ = [
    # detection
    "Platform",
    "detect_platform",
    "is_windows",
    # paths
    "expand_path_pattern",
    "expand_placeholders",
    "home",
    "user_config_dir",
    # process
    "CommandRunner",
    "ProcessError",
    "ProcessOutput",
    "SubprocessRunner",
]
