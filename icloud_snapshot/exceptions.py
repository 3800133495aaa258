"""Exceptions raised by icloud-snapshot."""

from pathlib import Path
from typing import Optional, Union

PathLike = Union[str, Path]


class SnapshotError(Exception):
    """Base exception for all snapshot errors."""


class ConfigError(SnapshotError):
    """Invalid configuration value (environment or command line)."""


class SourceDirectoryError(SnapshotError):
    """The source directory is missing or cannot be read."""


class DestinationDirectoryError(SnapshotError):
    """The snapshot root directory cannot be created."""


class ProviderError(SnapshotError):
    """Base exception for errors reported by a storage provider."""

    def __init__(self, message: str, path: Optional[PathLike] = None):
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class StatusQueryError(ProviderError):
    """Remote status of an entry could not be queried.

    ``kind`` is ``"not-found"`` when the entry does not exist (neither under
    its real name nor as a placeholder) and ``"io"`` for any other failure.
    """

    NOT_FOUND = "not-found"
    IO = "io"

    def __init__(
        self, message: str, path: Optional[PathLike] = None, kind: str = IO
    ):
        super().__init__(message, path)
        self.kind = kind

    @property
    def is_not_found(self) -> bool:
        return self.kind == self.NOT_FOUND


class MaterializationError(ProviderError):
    """The provider refused or failed a materialization request."""


class ReleaseError(ProviderError):
    """The provider failed to release a materialized local copy."""


class MaterializationTimeoutError(ProviderError):
    """A materialization did not complete within the configured timeout."""


class MaterializationCancelledError(ProviderError):
    """Waiting for a materialization was cancelled."""


class UnsupportedPlaceholderError(SnapshotError):
    """A placeholder name cannot be mapped to a local name.

    Raised for placeholders of names that themselves start with the marker
    character (``..name.icloud``), which the provider does not handle.
    """

    def __init__(self, name: str):
        super().__init__(f"Unsupported placeholder name: {name}")
        self.name = name
