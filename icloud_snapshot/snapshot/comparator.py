"""Per-file snapshot decisions."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from ..naming import derive_local_name
from ..provider import RemoteStatus


class SnapshotAction(str, Enum):
    """Actions that can be taken for a source file."""

    COPY = "copy"
    """File is readable locally, copy it as is"""

    MATERIALIZE = "materialize"
    """Download the file, copy the local copy, then release it"""

    SKIP = "skip"
    """A snapshot of the file already exists at the destination"""


@dataclass
class SnapshotDecision:
    """Represents a decision about how to snapshot a file."""

    action: SnapshotAction
    """Action to take"""

    reason: str
    """Human-readable reason for this decision"""

    source: Path
    """File as found in the source tree"""

    local_path: Path
    """Path the readable content is copied from"""

    target: Path
    """Destination path of the snapshot copy"""


class FileComparator:
    """Decides how a source file reaches the destination directory."""

    def decide(
        self,
        source: Path,
        status: Optional[RemoteStatus],
        dest_dir: Path,
    ) -> SnapshotDecision:
        """Determine the action for one file.

        Args:
            source: Path of the file in the source tree
            status: Remote status of the file, None if it could not be queried
            dest_dir: Destination directory mirroring the source's parent

        Returns:
            SnapshotDecision for this file

        Raises:
            UnsupportedPlaceholderError: If the placeholder name cannot be
                mapped to a local name
        """
        if status is None:
            return self._copy(
                source, dest_dir, "Status unavailable, treating as local"
            )

        if not status.needs_materialization:
            if status.is_remote_backed:
                reason = "Downloaded file is current"
            else:
                reason = "Local file"
            return self._copy(source, dest_dir, reason)

        local_name = derive_local_name(source.name)
        local_path = Path(source.parent, local_name)
        target = Path(dest_dir, local_name)

        if target.exists():
            return SnapshotDecision(
                action=SnapshotAction.SKIP,
                reason="Snapshot already exists",
                source=source,
                local_path=local_path,
                target=target,
            )

        return SnapshotDecision(
            action=SnapshotAction.MATERIALIZE,
            reason=f"Remote file is {status.download_state.value}",
            source=source,
            local_path=local_path,
            target=target,
        )

    def _copy(self, source: Path, dest_dir: Path, reason: str) -> SnapshotDecision:
        return SnapshotDecision(
            action=SnapshotAction.COPY,
            reason=reason,
            source=source,
            local_path=source,
            target=Path(dest_dir, source.name),
        )
