"""Storage providers that report and change the download state of files.

The snapshot engine only needs three operations from a provider: query the
remote status of a path, request that a remote file be downloaded, and
release a downloaded copy. Providers implement the ``StorageProvider``
protocol; ``ICloudDriveProvider`` drives iCloud Drive on macOS through
``brctl`` and ``LocalProvider`` treats every file as local.
"""

import logging
import os
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Protocol, Union

from .config import config
from .exceptions import (
    ConfigError,
    MaterializationError,
    ProviderError,
    ReleaseError,
    StatusQueryError,
)
from .naming import is_placeholder_name, placeholder_name

logger = logging.getLogger(__name__)

# BSD st_flags bit set on files whose content has not been downloaded
SF_DATALESS = 0x40000000


class DownloadState(str, Enum):
    """Download state of a remote-backed file."""

    NOT_DOWNLOADED = "not-downloaded"
    """Only the placeholder exists locally"""

    DOWNLOADING = "downloading"
    """A download was requested and has not finished"""

    CURRENT = "current"
    """The local copy is complete and up to date"""


@dataclass(frozen=True)
class RemoteStatus:
    """Snapshot of the remote state of one path at query time."""

    is_remote_backed: bool
    download_state: DownloadState

    @property
    def is_current(self) -> bool:
        return self.download_state == DownloadState.CURRENT

    @property
    def needs_materialization(self) -> bool:
        """True for remote-backed files that cannot be read yet."""
        return self.is_remote_backed and not self.is_current

    @classmethod
    def local(cls) -> "RemoteStatus":
        """Status of a plain local file."""
        return cls(is_remote_backed=False, download_state=DownloadState.CURRENT)


class StatusProvider(Protocol):
    def query(self, path: Path) -> RemoteStatus:
        """Return the current status of ``path``.

        Raises:
            StatusQueryError: If the status cannot be determined
        """
        ...


class Materializer(Protocol):
    def request_materialization(self, path: Path) -> None:
        """Ask the provider to download ``path``; may return before it is done."""
        ...

    def release(self, path: Path) -> None:
        """Release the downloaded copy of ``path``, keeping it in the cloud."""
        ...


class StorageProvider(StatusProvider, Materializer, Protocol):
    """Status queries and materialization control for one storage tier."""


Runner = Callable[..., subprocess.CompletedProcess]


class ICloudDriveProvider:
    """iCloud Drive provider for macOS.

    Paths below one of ``roots`` are remote-backed. The status is derived
    from a fresh ``lstat`` on every query, so repeated queries always see
    the current state of the file system:

    - a placeholder (``.name.icloud``), or a missing real name whose
      placeholder exists, is downloading while a download request is
      pending and not downloaded otherwise
    - an existing real name is downloading while it is still dataless and
      current afterwards

    A pending request is forgotten once the file is seen current or is
    released, so an evicted file reads as not downloaded again.
    """

    def __init__(
        self,
        roots: Optional[list[Path]] = None,
        brctl: str = "brctl",
        runner: Runner = subprocess.run,
    ):
        """Initialize the iCloud Drive provider.

        Args:
            roots: Directories backed by iCloud Drive (defaults to config)
            brctl: Name or path of the ``brctl`` executable
            runner: Function used to run ``brctl`` (subprocess.run signature)
        """
        if roots is None:
            roots = config.icloud_roots
        self.roots = [
            Path(os.path.realpath(Path(root).expanduser())) for root in roots
        ]
        self.brctl = brctl
        self._runner = runner
        self._requested: set[Path] = set()

    def is_remote_backed(self, path: Path) -> bool:
        """Check if ``path`` lies below one of the iCloud roots."""
        parent = Path(os.path.realpath(Path(path).parent))
        for root in self.roots:
            if parent == root or root in parent.parents:
                return True
        return False

    def query(self, path: Path) -> RemoteStatus:
        path = Path(path)
        if not self.is_remote_backed(path):
            if not os.path.lexists(path):
                raise StatusQueryError(
                    f"No such file: {path}", path, kind=StatusQueryError.NOT_FOUND
                )
            return RemoteStatus.local()

        try:
            stat = os.lstat(path)
        except FileNotFoundError:
            stat = None
        except OSError as e:
            raise StatusQueryError(f"Cannot stat {path}: {e}", path) from e

        if stat is not None:
            if is_placeholder_name(path.name):
                return RemoteStatus(True, self._pending_state(path))
            if getattr(stat, "st_flags", 0) & SF_DATALESS:
                return RemoteStatus(True, DownloadState.DOWNLOADING)
            self._requested.discard(self._placeholder_for(path))
            return RemoteStatus(True, DownloadState.CURRENT)

        placeholder = self._placeholder_for(path)
        if os.path.lexists(placeholder):
            return RemoteStatus(True, self._pending_state(placeholder))

        raise StatusQueryError(
            f"No such file or placeholder: {path}",
            path,
            kind=StatusQueryError.NOT_FOUND,
        )

    def _placeholder_for(self, path: Path) -> Path:
        if is_placeholder_name(path.name):
            return path
        return path.with_name(placeholder_name(path.name))

    def _pending_state(self, placeholder: Path) -> DownloadState:
        if placeholder in self._requested:
            return DownloadState.DOWNLOADING
        return DownloadState.NOT_DOWNLOADED

    def request_materialization(self, path: Path) -> None:
        path = Path(path)
        self._run("download", path, MaterializationError)
        self._requested.add(self._placeholder_for(path))

    def release(self, path: Path) -> None:
        path = Path(path)
        self._run("evict", path, ReleaseError)
        self._requested.discard(self._placeholder_for(path))

    def _run(
        self, action: str, path: Path, error_class: type[ProviderError]
    ) -> None:
        command = [self.brctl, action, str(path)]
        logger.debug("Running %s", " ".join(command))
        try:
            self._runner(command, check=True, capture_output=True, text=True)
        except FileNotFoundError as e:
            raise error_class(f"{self.brctl} is not available: {e}", path) from e
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or e.stdout or "").strip()
            if not detail:
                detail = f"exit status {e.returncode}"
            raise error_class(f"brctl {action} failed: {detail}", path) from e


class LocalProvider:
    """Provider for plain directories: every file is local and current."""

    def query(self, path: Path) -> RemoteStatus:
        path = Path(path)
        if not os.path.lexists(path):
            raise StatusQueryError(
                f"No such file: {path}", path, kind=StatusQueryError.NOT_FOUND
            )
        return RemoteStatus.local()

    def request_materialization(self, path: Path) -> None:
        raise MaterializationError(f"File is not remote-backed: {path}", path)

    def release(self, path: Path) -> None:
        raise ReleaseError(f"File is not remote-backed: {path}", path)


def get_provider(
    name: Optional[str] = None, roots: Optional[list[Path]] = None
) -> Union[ICloudDriveProvider, LocalProvider]:
    """Create the provider called ``name`` (``auto``, ``icloud`` or ``local``).

    Raises:
        ConfigError: If the name is unknown
    """
    resolved = config.resolve_provider_name(name)
    if resolved == "icloud":
        return ICloudDriveProvider(roots=roots)
    if resolved == "local":
        return LocalProvider()
    raise ConfigError(f"Unknown provider: {name}")
