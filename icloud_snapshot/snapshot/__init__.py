"""Snapshot engine for icloud-snapshot - evict, download and copy trees."""

from .comparator import FileComparator, SnapshotAction, SnapshotDecision
from .engine import SnapshotEngine
from .evictor import SnapshotEvictor
from .job import SnapshotJob
from .operations import CopyOutcome, CopyStatus, SnapshotOperations
from .scanner import DirectoryScanner, EntryKind, TreeEntry
from .totals import RunTotals
from .waiter import MaterializationWaiter

__all__ = [
    "SnapshotEngine",
    "SnapshotEvictor",
    "SnapshotJob",
    "SnapshotOperations",
    "CopyOutcome",
    "CopyStatus",
    "DirectoryScanner",
    "EntryKind",
    "TreeEntry",
    "FileComparator",
    "SnapshotAction",
    "SnapshotDecision",
    "MaterializationWaiter",
    "RunTotals",
]
