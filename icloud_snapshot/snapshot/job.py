"""Snapshot job definition."""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..utils import format_timecode


@dataclass
class SnapshotJob:
    """What to snapshot, where to, and which phases to run."""

    source: Path
    """Directory to snapshot (usually inside iCloud Drive)"""

    destination: Path
    """Directory that receives the snapshot"""

    timecode: bool = False
    """Snapshot into a timestamp named subdirectory of destination"""

    overwrite: bool = False
    """Replace files that already exist at the destination"""

    evict: bool = False
    """Release all downloaded source files before snapshotting"""

    skip_snapshot: bool = False
    """Do not copy any files (useful together with evict)"""

    def __post_init__(self) -> None:
        self.source = Path(self.source).expanduser()
        self.destination = Path(self.destination).expanduser()

    def resolve_destination(self, now: Optional[datetime] = None) -> Path:
        """Return the directory files are copied into.

        Args:
            now: Timestamp for timecoded snapshots (defaults to now)

        Returns:
            Destination path, with a timecode subdirectory if requested

        Examples:
            >>> job = SnapshotJob(Path("/src"), Path("/snap"), timecode=True)
            >>> job.resolve_destination(datetime(2025, 1, 5, 10, 30, 0))
            PosixPath('/snap/05-Jan-25_10_30_00')
        """
        if self.timecode:
            return self.destination / format_timecode(now)
        return self.destination
