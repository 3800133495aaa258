"""Releasing downloaded copies of a whole tree."""

import logging
from pathlib import Path
from typing import Optional

from ..exceptions import ProviderError, StatusQueryError
from ..output import OutputFormatter
from ..provider import StorageProvider
from .operations import SnapshotOperations
from .scanner import DirectoryScanner
from .totals import RunTotals

logger = logging.getLogger(__name__)


class SnapshotEvictor:
    """Walks a tree and releases every downloaded remote-backed file.

    Only files that are remote-backed and current are released. Local
    files and files that are not downloaded are skipped, releasing them is
    not defined by the provider.
    """

    def __init__(
        self,
        provider: StorageProvider,
        output: OutputFormatter,
        scanner: Optional[DirectoryScanner] = None,
    ):
        self.provider = provider
        self.output = output
        self.operations = SnapshotOperations(provider, output)
        self.scanner = scanner or DirectoryScanner()

    def evict(self, directory: Path, totals: RunTotals) -> None:
        """Release all downloaded files below ``directory``.

        Args:
            directory: Root of the tree to evict
            totals: Run totals updated with released files and errors
        """
        stack = [Path(directory)]
        while stack:
            current = stack.pop()
            self.output.info(f"evict dir: {current}")

            try:
                entries = self.scanner.list_directory(current)
            except OSError as e:
                self.output.error(f"could not list directory: {current} error: {e}")
                totals.errors += 1
                continue

            subdirs = []
            for entry in entries:
                if entry.is_dir:
                    subdirs.append(entry.path)
                elif entry.is_file:
                    self.evict_file(entry.path, totals)
                else:
                    self.output.warning(
                        f"not a regular file: {entry.path}, will be skipped"
                    )

            # Reversed so directories are visited in listing order
            stack.extend(reversed(subdirs))

    def evict_file(self, path: Path, totals: RunTotals) -> bool:
        """Release a single file if it is remote-backed and downloaded.

        Args:
            path: File to release
            totals: Run totals updated with the result

        Returns:
            True if the file was released
        """
        self.output.info(f"evict file: {path}")

        try:
            status = self.provider.query(path)
            if not status.is_remote_backed:
                self.output.info(f"file is local: {path}, will be skipped")
                return False
            if not status.is_current:
                self.output.info(f"file is not downloaded: {path}, will be skipped")
                return False

            self.operations.release(path)
        except (ProviderError, OSError) as e:
            if isinstance(e, StatusQueryError) and e.is_not_found:
                self.output.warning(f"file no longer exists: {path}, will be skipped")
                return False
            self.output.error(f"could not evict file: {path} error: {e}")
            totals.errors += 1
            return False

        totals.files_released += 1
        return True
