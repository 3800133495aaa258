"""Core snapshot engine for mirroring a source tree."""

import logging
import os
import threading
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn

from ..config import DEFAULT_POLL_INTERVAL
from ..exceptions import (
    DestinationDirectoryError,
    MaterializationCancelledError,
    ProviderError,
    SourceDirectoryError,
    UnsupportedPlaceholderError,
)
from ..output import OutputFormatter
from ..provider import RemoteStatus, StorageProvider
from ..utils import format_duration, format_size
from .comparator import FileComparator, SnapshotAction, SnapshotDecision
from .evictor import SnapshotEvictor
from .job import SnapshotJob
from .operations import CopyOutcome, SnapshotOperations
from .scanner import DirectoryScanner
from .totals import RunTotals
from .waiter import MaterializationWaiter

logger = logging.getLogger(__name__)


class SnapshotEngine:
    """Core snapshot engine that orchestrates eviction and copying."""

    def __init__(
        self,
        provider: StorageProvider,
        output: Optional[OutputFormatter] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        poll_timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
        waiter: Optional[MaterializationWaiter] = None,
    ):
        """Initialize snapshot engine.

        Args:
            provider: Storage provider for status and materialization
            output: Output formatter for displaying progress/status
            poll_interval: Seconds between download status queries
            poll_timeout: Seconds to wait for one download, None for no limit
            cancel_event: Event that cancels a pending download wait
            waiter: Custom waiter (overrides the poll settings)
        """
        self.provider = provider
        self.output = output or OutputFormatter()
        self.operations = SnapshotOperations(provider, self.output)
        self.scanner = DirectoryScanner()
        self.comparator = FileComparator()
        self.evictor = SnapshotEvictor(provider, self.output, self.scanner)
        self.waiter = waiter or MaterializationWaiter(
            provider,
            self.output,
            poll_interval=poll_interval,
            timeout=poll_timeout,
            cancel_event=cancel_event,
        )

    def run(self, job: SnapshotJob, now: Optional[datetime] = None) -> RunTotals:
        """Run the phases of a snapshot job.

        Eviction of the whole source tree completes before any file is
        copied, so it never releases files the snapshot is about to fetch.

        Args:
            job: Snapshot job to run
            now: Timestamp for timecoded snapshots (defaults to now)

        Returns:
            Totals of the run

        Raises:
            SourceDirectoryError: If the source directory cannot be read
            DestinationDirectoryError: If the snapshot root cannot be created

        Examples:
            >>> engine = SnapshotEngine(LocalProvider())
            >>> totals = engine.run(SnapshotJob(Path("/src"), Path("/snap")))
            >>> print(f"Copied {totals.files_copied} files")
        """
        self._validate_source(job.source)
        destination = job.resolve_destination(now)
        totals = RunTotals()

        self.output.info(
            f"snapshot icloud directory: {job.source} to {destination}"
        )
        start = time.monotonic()

        try:
            if job.evict:
                self.evictor.evict(job.source, totals)

            if not job.skip_snapshot:
                self._create_root(destination, totals)
                self.snapshot(job.source, destination, totals, overwrite=job.overwrite)
        except (KeyboardInterrupt, MaterializationCancelledError):
            self.output.warning("snapshot cancelled by user")
            raise

        totals.elapsed = time.monotonic() - start
        self.output.info(f"snapshot completed in: {format_duration(totals.elapsed)}")
        self.output.debug(
            f"copied {totals.files_copied} file(s), "
            f"skipped {totals.files_skipped}, failed {totals.files_failed}, "
            f"released {totals.files_released}, "
            f"total copy: {format_size(totals.bytes_copied)}"
        )
        logger.debug("Run totals: %s", totals.to_dict())
        return totals

    def _validate_source(self, source: Path) -> None:
        if not source.exists():
            raise SourceDirectoryError(f"Source directory does not exist: {source}")
        if not source.is_dir():
            raise SourceDirectoryError(f"Source path is not a directory: {source}")
        if not os.access(source, os.R_OK | os.X_OK):
            raise SourceDirectoryError(f"Source directory is not readable: {source}")

    def _create_root(self, destination: Path, totals: RunTotals) -> None:
        if destination.is_dir():
            return
        self.output.info(f"- create dir: {destination}")
        try:
            destination.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DestinationDirectoryError(
                f"Could not create snapshot directory: {destination} error: {e}"
            ) from e
        totals.directories_created += 1

    def snapshot(
        self,
        source_dir: Path,
        dest_dir: Path,
        totals: RunTotals,
        overwrite: bool = False,
    ) -> None:
        """Mirror ``source_dir`` into ``dest_dir``.

        The tree is walked depth first. Each destination directory is
        created before its source is listed; a directory that cannot be
        created or listed is skipped together with its subtree.

        Args:
            source_dir: Directory to copy from
            dest_dir: Directory to copy into
            totals: Run totals updated while copying
            overwrite: Replace files that already exist at the destination
        """
        stack = [(Path(source_dir), Path(dest_dir))]
        while stack:
            source, dest = stack.pop()
            subdirs = self._snapshot_directory(source, dest, totals, overwrite)
            # Reversed so directories are visited in listing order
            stack.extend(reversed(subdirs))

    def _snapshot_directory(
        self,
        source: Path,
        dest: Path,
        totals: RunTotals,
        overwrite: bool,
    ) -> list[tuple[Path, Path]]:
        """Snapshot the files of one directory.

        Returns:
            (source, destination) pairs of the subdirectories still to visit
        """
        self.output.info(f"copy dir: {source}")

        if not dest.is_dir():
            self.output.info(f"- create dir: {dest}")
            try:
                dest.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                self.output.error(
                    f"could not snapshot directory: {source} error: {e}"
                )
                totals.errors += 1
                return []
            totals.directories_created += 1

        try:
            entries = self.scanner.list_directory(source)
        except OSError as e:
            self.output.error(f"could not snapshot directory: {source} error: {e}")
            totals.errors += 1
            return []

        subdirs = []
        for entry in entries:
            if entry.is_dir:
                subdirs.append((entry.path, dest / entry.name))
            elif entry.is_file:
                self.snapshot_file(entry.path, dest, totals, overwrite)
            else:
                self.output.warning(
                    f"not a regular file: {entry.path}, will be skipped"
                )
        return subdirs

    def snapshot_file(
        self,
        source: Path,
        dest_dir: Path,
        totals: RunTotals,
        overwrite: bool = False,
    ) -> CopyOutcome:
        """Snapshot a single file into ``dest_dir``.

        Local and already downloaded files are copied directly. Remote
        files are downloaded, copied and released again.

        Args:
            source: File in the source tree
            dest_dir: Destination directory
            totals: Run totals updated with the outcome
            overwrite: Replace an existing destination file

        Returns:
            CopyOutcome for this file
        """
        self.output.info(f"snapshot file: {source}")

        status = self._query_status(source)
        try:
            decision = self.comparator.decide(source, status, dest_dir)
        except UnsupportedPlaceholderError as e:
            self.output.error(f"could not snapshot file: {source} error: {e}")
            totals.files_failed += 1
            totals.errors += 1
            return CopyOutcome.failed(Path(dest_dir, source.name), str(e))

        logger.debug(f"{source}: {decision.action.value} ({decision.reason})")

        if decision.action == SnapshotAction.SKIP:
            self.output.info(f"file exists: {decision.target} will be skipped")
            totals.files_skipped += 1
            return CopyOutcome.skipped(decision.target)

        if decision.action == SnapshotAction.MATERIALIZE:
            return self._materialize_and_copy(decision, totals, overwrite)

        self.output.info(f"- local file exists: {source}")
        return self.operations.copy_file(
            decision.local_path, decision.target, overwrite, totals
        )

    def _query_status(self, source: Path) -> Optional[RemoteStatus]:
        try:
            return self.provider.query(source)
        except (ProviderError, OSError) as e:
            self.output.warning(
                f"could not query status of file: {source} error: {e}, "
                "treating as local"
            )
            return None

    def _materialize_and_copy(
        self,
        decision: SnapshotDecision,
        totals: RunTotals,
        overwrite: bool,
    ) -> CopyOutcome:
        """Download a remote file, copy it and release the local copy."""
        source = decision.source
        local_path = decision.local_path

        self.output.info(f"- download file: {source}")
        try:
            self.operations.request_materialization(source)
            self._wait_for_download(local_path)
        except (ProviderError, OSError) as e:
            if isinstance(e, MaterializationCancelledError):
                raise
            self.output.error(f"- could not download file: {source} error: {e}")
            totals.files_failed += 1
            totals.errors += 1
            return CopyOutcome.failed(decision.target, str(e))

        self.output.info(f"- copy file: {local_path}")
        outcome = self.operations.copy_file(
            local_path, decision.target, overwrite, totals
        )

        self.output.info(f"- remove download file: {local_path}")
        try:
            self.operations.release(local_path)
        except (ProviderError, OSError) as e:
            self.output.error(
                f"- could not remove download file: {local_path} error: {e}"
            )
            totals.errors += 1
        else:
            totals.files_released += 1

        return outcome

    def _wait_for_download(self, local_path: Path) -> int:
        """Wait for a download, with a spinner when drawing to a terminal."""
        if not self.output.progress_enabled:
            return self.waiter.wait(local_path)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=self.output.console,
            transient=True,
        ) as progress:
            progress.add_task(
                f"Waiting for download: {escape(local_path.name)}", total=None
            )
            return self.waiter.wait(local_path)
