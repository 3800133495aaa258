"""Directory listing for snapshot walks."""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)


class EntryKind(str, Enum):
    """Kind of a directory entry."""

    FILE = "file"
    DIRECTORY = "directory"
    OTHER = "other"
    """Symlinks, sockets, devices and entries that could not be inspected"""


@dataclass(frozen=True)
class TreeEntry:
    """A single entry found while listing a directory."""

    path: Path
    """Path of the entry (parent directory joined with its name)"""

    kind: EntryKind

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def is_file(self) -> bool:
        return self.kind == EntryKind.FILE

    @property
    def is_dir(self) -> bool:
        return self.kind == EntryKind.DIRECTORY


def _entry_kind(item: os.DirEntry) -> EntryKind:
    # Symlinks are never followed so a walk cannot leave the source tree
    if item.is_symlink():
        return EntryKind.OTHER
    if item.is_dir(follow_symlinks=False):
        return EntryKind.DIRECTORY
    if item.is_file(follow_symlinks=False):
        return EntryKind.FILE
    return EntryKind.OTHER


class DirectoryScanner:
    """Lists directories one level at a time.

    Walks are driven by the caller so that every directory can be mirrored
    at the destination before its contents are processed.

    Examples:
        >>> scanner = DirectoryScanner()
        >>> for entry in scanner.list_directory(Path("/icloud/docs")):
        ...     print(entry.kind.value, entry.name)
    """

    def list_directory(self, directory: Path) -> list[TreeEntry]:
        """List the direct children of a directory, sorted by name.

        Args:
            directory: Directory to list

        Returns:
            List of TreeEntry objects

        Raises:
            OSError: If the directory cannot be listed
        """
        entries: list[TreeEntry] = []
        with os.scandir(directory) as items:
            for item in items:
                try:
                    kind = _entry_kind(item)
                except OSError as e:
                    logger.debug(f"Cannot inspect {item.path}: {e}")
                    kind = EntryKind.OTHER
                entries.append(TreeEntry(path=Path(directory, item.name), kind=kind))

        entries.sort(key=lambda entry: entry.name)
        return entries
