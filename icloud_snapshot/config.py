"""Environment based configuration for icloud-snapshot."""

import os
import sys
from pathlib import Path
from typing import Mapping, Optional

from .exceptions import ConfigError

# Seconds between two status queries while waiting for a download
DEFAULT_POLL_INTERVAL: float = 0.5

# iCloud Drive keeps every container below this directory on macOS
DEFAULT_ICLOUD_ROOT: Path = Path.home() / "Library" / "Mobile Documents"

PROVIDER_CHOICES = ("auto", "icloud", "local")

ENV_POLL_INTERVAL = "ICLOUD_SNAPSHOT_POLL_INTERVAL"
ENV_POLL_TIMEOUT = "ICLOUD_SNAPSHOT_POLL_TIMEOUT"
ENV_ROOTS = "ICLOUD_SNAPSHOT_ROOTS"
ENV_PROVIDER = "ICLOUD_SNAPSHOT_PROVIDER"


def _parse_seconds(name: str, value: str) -> float:
    try:
        seconds = float(value)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number of seconds, got {value!r}") from e
    if seconds <= 0:
        raise ConfigError(f"{name} must be greater than zero, got {value!r}")
    return seconds


class Config:
    """Settings resolved from the environment.

    There is no configuration file. Command line options take precedence
    over the values read here.
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        """Initialize configuration.

        Args:
            environ: Mapping to read variables from (defaults to os.environ)
        """
        self._environ = os.environ if environ is None else environ

    @property
    def poll_interval(self) -> float:
        """Seconds to sleep between status queries."""
        value = self._environ.get(ENV_POLL_INTERVAL)
        if not value:
            return DEFAULT_POLL_INTERVAL
        return _parse_seconds(ENV_POLL_INTERVAL, value)

    @property
    def poll_timeout(self) -> Optional[float]:
        """Seconds to wait for a single download, None to wait forever."""
        value = self._environ.get(ENV_POLL_TIMEOUT)
        if not value:
            return None
        return _parse_seconds(ENV_POLL_TIMEOUT, value)

    @property
    def icloud_roots(self) -> list[Path]:
        """Directories whose contents are backed by iCloud Drive."""
        value = self._environ.get(ENV_ROOTS)
        if not value:
            return [DEFAULT_ICLOUD_ROOT]
        return [Path(p).expanduser() for p in value.split(os.pathsep) if p]

    @property
    def provider(self) -> str:
        """Name of the storage provider to use."""
        value = self._environ.get(ENV_PROVIDER, "auto").strip().lower() or "auto"
        if value not in PROVIDER_CHOICES:
            raise ConfigError(
                f"{ENV_PROVIDER} must be one of {', '.join(PROVIDER_CHOICES)}, "
                f"got {value!r}"
            )
        return value

    def resolve_provider_name(self, name: Optional[str] = None) -> str:
        """Resolve ``auto`` to a concrete provider for this platform."""
        name = name or self.provider
        if name == "auto":
            return "icloud" if sys.platform == "darwin" else "local"
        return name


config = Config()
