"""Snapshot operations: copying files and controlling local copies."""

import logging
import os
import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from ..output import OutputFormatter
from ..provider import StorageProvider
from ..utils import format_size
from .totals import RunTotals

logger = logging.getLogger(__name__)


class CopyStatus(str, Enum):
    """Result of copying one file."""

    COPIED = "copied"
    SKIPPED_EXISTS = "skipped-exists"
    FAILED = "failed"


@dataclass
class CopyOutcome:
    """Outcome of a single file snapshot."""

    status: CopyStatus
    target: Path
    bytes_copied: int = 0
    reason: Optional[str] = None

    @classmethod
    def copied(cls, target: Path, size: int) -> "CopyOutcome":
        return cls(CopyStatus.COPIED, target, bytes_copied=size)

    @classmethod
    def skipped(cls, target: Path) -> "CopyOutcome":
        return cls(CopyStatus.SKIPPED_EXISTS, target)

    @classmethod
    def failed(cls, target: Path, reason: str) -> "CopyOutcome":
        return cls(CopyStatus.FAILED, target, reason=reason)


class SnapshotOperations:
    """Unified operations on source files with a common interface."""

    def __init__(self, provider: StorageProvider, output: OutputFormatter):
        """Initialize snapshot operations.

        Args:
            provider: Storage provider for materialize/release requests
            output: Output formatter for status lines
        """
        self.provider = provider
        self.output = output

    def copy_file(
        self,
        source: Path,
        dest: Path,
        overwrite: bool,
        totals: RunTotals,
    ) -> CopyOutcome:
        """Copy a readable file to the snapshot.

        An existing destination file is left untouched unless ``overwrite``
        is set. The copy is not atomic: a failure may leave a partial file.

        Args:
            source: Local, readable file
            dest: Destination file path
            overwrite: Replace an existing destination file
            totals: Run totals updated with the outcome

        Returns:
            CopyOutcome describing what happened
        """
        if os.path.lexists(dest) and not overwrite:
            self.output.info(f"file exists: {dest} will be skipped")
            totals.files_skipped += 1
            return CopyOutcome.skipped(dest)

        # copy2 would write into the directory instead of replacing it
        if os.path.isdir(dest):
            reason = "destination is a directory"
            self.output.error(f"could not snapshot file: {dest} error: {reason}")
            totals.files_failed += 1
            totals.errors += 1
            return CopyOutcome.failed(dest, reason)

        try:
            shutil.copy2(source, dest)
            size = os.stat(dest).st_size
        except OSError as e:
            self.output.error(f"could not snapshot file: {dest} error: {e}")
            totals.files_failed += 1
            totals.errors += 1
            return CopyOutcome.failed(dest, str(e))

        totals.add_copied(size)
        self.output.debug(
            f"copy file size: {format_size(size)} "
            f"total copy: {format_size(totals.bytes_copied)}"
        )
        return CopyOutcome.copied(dest, size)

    def request_materialization(self, path: Path) -> None:
        """Ask the provider to download ``path`` (does not wait)."""
        logger.debug(f"Requesting download of {path}")
        self.provider.request_materialization(path)

    def release(self, path: Path) -> None:
        """Release the local copy of ``path`` back to the cloud."""
        logger.debug(f"Releasing {path}")
        self.provider.release(path)
