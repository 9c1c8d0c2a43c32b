"""Typed configuration loading and access.

The config file is optional. It tunes backend priority, subprocess
timeouts and the post-install settle window:

    [backends]
    order = ["winget", "choco", "scoop", "manual"]

    [timeouts]
    probe = 15.0
    install = 1800.0

    [settle]
    attempts = 3
    delay = 2.0
    backoff = 2.0
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_float, get_int, get_str_list, get_table

__all__ = [
    "BackendsConfig",
    "Config",
    "ConfigError",
    "SettleConfig",
    "TimeoutsConfig",
    "CONFIG_ENV_VAR",
    "DEFAULT_BACKEND_ORDER",
    "default_config_path",
    "load_config",
    "load_config_or_default",
]

CONFIG_ENV_VAR = "DK_CONFIG"

DEFAULT_BACKEND_ORDER: tuple[str, ...] = ("winget", "choco", "scoop", "manual")

# Version probes and smoke tests should answer quickly; installers may not.
DEFAULT_PROBE_TIMEOUT = 15.0
DEFAULT_INSTALL_TIMEOUT = 30 * 60.0

DEFAULT_SETTLE_ATTEMPTS = 3
DEFAULT_SETTLE_DELAY = 2.0
DEFAULT_SETTLE_BACKOFF = 2.0


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class BackendsConfig:
    """Backend priority, highest first."""

    order: tuple[str, ...] = DEFAULT_BACKEND_ORDER


@dataclass(frozen=True, slots=True)
class TimeoutsConfig:
    """Subprocess timeouts in seconds."""

    probe: float = DEFAULT_PROBE_TIMEOUT
    install: float = DEFAULT_INSTALL_TIMEOUT


@dataclass(frozen=True, slots=True)
class SettleConfig:
    """Detection retries after a backend reports success.

    Attributes:
        attempts: Total detection attempts (at least 2)
        delay: Seconds to wait before the second attempt
        backoff: Multiplier applied to the delay after each retry
    """

    attempts: int = DEFAULT_SETTLE_ATTEMPTS
    delay: float = DEFAULT_SETTLE_DELAY
    backoff: float = DEFAULT_SETTLE_BACKOFF

    def delays(self) -> list[float]:
        """Return the waits between consecutive detection attempts."""
        out: list[float] = []
        current = self.delay
        for _ in range(max(2, self.attempts) - 1):
            out.append(current)
            current *= self.backoff
        return out


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    backends: BackendsConfig = field(default_factory=BackendsConfig)
    timeouts: TimeoutsConfig = field(default_factory=TimeoutsConfig)
    settle: SettleConfig = field(default_factory=SettleConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML).

        Raises:
            ValueError: If a value is present but out of range or unknown.
        """
        backends: StrDict = get_table(data, "backends") or {}
        timeouts: StrDict = get_table(data, "timeouts") or {}
        settle: StrDict = get_table(data, "settle") or {}

        order = get_str_list(backends, "order")
        if order is not None:
            unknown = [name for name in order if name not in DEFAULT_BACKEND_ORDER]
            if unknown:
                raise ValueError(f"unknown backend(s) in backends.order: {', '.join(unknown)}")
            if not order:
                raise ValueError("backends.order must name at least one backend")

        probe = get_float(timeouts, "probe")
        install = get_float(timeouts, "install")
        for key, value in (("probe", probe), ("install", install)):
            if value is not None and value <= 0:
                raise ValueError(f"timeouts.{key} must be positive")

        attempts = get_int(settle, "attempts")
        if attempts is not None and attempts < 2:
            raise ValueError("settle.attempts must be >= 2")
        delay = get_float(settle, "delay")
        if delay is not None and delay < 0:
            raise ValueError("settle.delay must be >= 0")
        backoff = get_float(settle, "backoff")
        if backoff is not None and backoff < 1:
            raise ValueError("settle.backoff must be >= 1")

        return cls(
            backends=BackendsConfig(
                order=tuple(dict.fromkeys(order)) if order else DEFAULT_BACKEND_ORDER,
            ),
            timeouts=TimeoutsConfig(
                probe=probe or DEFAULT_PROBE_TIMEOUT,
                install=install or DEFAULT_INSTALL_TIMEOUT,
            ),
            settle=SettleConfig(
                attempts=attempts or DEFAULT_SETTLE_ATTEMPTS,
                delay=DEFAULT_SETTLE_DELAY if delay is None else delay,
                backoff=backoff or DEFAULT_SETTLE_BACKOFF,
            ),
        )


def default_config_path() -> Path:
    """Return the config path: $DK_CONFIG, else the user config dir."""
    env = os.environ.get(CONFIG_ENV_VAR)
    if env:
        return Path(env).expanduser()

    from dk.platform.paths import user_config_dir

    return user_config_dir() / "config.toml"


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Like load_config, but a missing file yields the default Config.

    A file that exists but does not parse is still an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)
