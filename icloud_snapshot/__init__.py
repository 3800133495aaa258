"""icloud-snapshot - copy an iCloud Drive directory to a snapshot directory."""

from .exceptions import (
    ConfigError,
    DestinationDirectoryError,
    MaterializationCancelledError,
    MaterializationError,
    MaterializationTimeoutError,
    ProviderError,
    ReleaseError,
    SnapshotError,
    SourceDirectoryError,
    StatusQueryError,
    UnsupportedPlaceholderError,
)
from .naming import derive_local_name, is_placeholder_name, placeholder_name
from .provider import (
    DownloadState,
    ICloudDriveProvider,
    LocalProvider,
    RemoteStatus,
    StorageProvider,
    get_provider,
)
from .snapshot import RunTotals, SnapshotEngine, SnapshotJob

__all__ = [
    "SnapshotEngine",
    "SnapshotJob",
    "RunTotals",
    "DownloadState",
    "RemoteStatus",
    "StorageProvider",
    "ICloudDriveProvider",
    "LocalProvider",
    "get_provider",
    "derive_local_name",
    "is_placeholder_name",
    "placeholder_name",
    "SnapshotError",
    "ConfigError",
    "SourceDirectoryError",
    "DestinationDirectoryError",
    "ProviderError",
    "StatusQueryError",
    "MaterializationError",
    "MaterializationTimeoutError",
    "MaterializationCancelledError",
    "ReleaseError",
    "UnsupportedPlaceholderError",
]
