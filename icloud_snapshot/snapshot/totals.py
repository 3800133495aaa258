"""Run totals for one snapshot invocation."""

from dataclasses import asdict, dataclass


@dataclass
class RunTotals:
    """Counters accumulated while a snapshot runs.

    Created by the engine at the start of a run, passed by reference to
    every walker and read once when the run is over.
    """

    bytes_copied: int = 0
    """Total size of all files copied to the destination"""

    files_copied: int = 0
    files_skipped: int = 0
    files_failed: int = 0

    files_released: int = 0
    """Local copies released back to the cloud (eviction and cleanup)"""

    directories_created: int = 0

    errors: int = 0
    """Per-entry errors that were logged and skipped"""

    elapsed: float = 0.0
    """Wall clock duration of the run in seconds"""

    def add_copied(self, size: int) -> None:
        self.files_copied += 1
        self.bytes_copied += size

    def to_dict(self) -> dict:
        """Convert totals to a dictionary."""
        return asdict(self)
