"""CLI interface for icloud-snapshot."""

import logging
from pathlib import Path
from typing import Any, Optional

import click

from .config import PROVIDER_CHOICES, config
from .exceptions import ConfigError, SnapshotError
from .output import OutputFormatter, setup_logging
from .provider import get_provider
from .snapshot import SnapshotEngine, SnapshotJob

logger = logging.getLogger(__name__)


def _check_seconds(option: str, value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    if value <= 0:
        raise ConfigError(f"{option} must be greater than zero")
    return value


@click.command()
@click.argument("source_dir", type=click.Path(path_type=Path))
@click.argument("dest_dir", type=click.Path(path_type=Path))
@click.option(
    "--timecode-snapshot",
    is_flag=True,
    help="Snapshot into a subdirectory named after the current time",
)
@click.option(
    "--overwrite-files",
    is_flag=True,
    help="Overwrite files that already exist in the snapshot",
)
@click.option(
    "--evict-files",
    is_flag=True,
    help="Release downloaded source files before the snapshot",
)
@click.option(
    "--skip-snapshot-files",
    is_flag=True,
    help="Do not copy any files (e.g. only evict)",
)
@click.option("--debug", is_flag=True, help="Print debug information")
@click.option(
    "--provider",
    type=click.Choice(PROVIDER_CHOICES),
    default=None,
    help="Storage provider (default: auto, iCloud Drive on macOS)",
)
@click.option(
    "--poll-interval",
    type=float,
    default=None,
    help="Seconds between download status checks (default: 0.5)",
)
@click.option(
    "--poll-timeout",
    type=float,
    default=None,
    help="Give up on a download after this many seconds (default: wait forever)",
)
@click.option("--quiet", "-q", is_flag=True, help="Only print warnings and errors")
@click.version_option(package_name="icloud-snapshot")
@click.pass_context
def main(
    ctx: Any,
    source_dir: Path,
    dest_dir: Path,
    timecode_snapshot: bool,
    overwrite_files: bool,
    evict_files: bool,
    skip_snapshot_files: bool,
    debug: bool,
    provider: Optional[str],
    poll_interval: Optional[float],
    poll_timeout: Optional[float],
    quiet: bool,
) -> None:
    """Copy an iCloud directory to a snapshot directory for archival purposes.

    Files that only exist in iCloud are downloaded, copied and released
    again, so the snapshot does not leave them on the local disk.

    SOURCE_DIR: iCloud directory to snapshot
    DEST_DIR: Snapshot directory

    Examples:
        icloud-snapshot ~/iCloud/Photos /Volumes/Backup/Photos
        icloud-snapshot ./docs /Volumes/Backup/docs --timecode-snapshot
        icloud-snapshot ./docs /tmp/unused --evict-files --skip-snapshot-files
    """
    out = OutputFormatter(quiet=quiet, debug=debug)
    setup_logging(debug)

    try:
        interval = _check_seconds("--poll-interval", poll_interval)
        if interval is None:
            interval = config.poll_interval
        timeout = _check_seconds("--poll-timeout", poll_timeout)
        if timeout is None:
            timeout = config.poll_timeout
        storage = get_provider(provider)
    except ConfigError as e:
        out.error(str(e))
        ctx.exit(1)
        return  # Unreachable, but helps type checker

    logger.debug(
        "Using %s with poll interval %ss, timeout %s",
        type(storage).__name__,
        interval,
        timeout,
    )

    engine = SnapshotEngine(
        storage,
        out,
        poll_interval=interval,
        poll_timeout=timeout,
    )
    job = SnapshotJob(
        source=source_dir,
        destination=dest_dir,
        timecode=timecode_snapshot,
        overwrite=overwrite_files,
        evict=evict_files,
        skip_snapshot=skip_snapshot_files,
    )

    try:
        engine.run(job)
    except SnapshotError as e:
        out.error(str(e))
        ctx.exit(1)


if __name__ == "__main__":
    main()
