"""Placeholder naming used by iCloud Drive.

A file that has not been downloaded is stored on disk under a placeholder
name: the real name prefixed with a dot and suffixed with ``.icloud``, so
``report.pdf`` appears as ``.report.pdf.icloud`` until it is materialized.
"""

from pathlib import Path

from .exceptions import UnsupportedPlaceholderError

MARKER_PREFIX = "."
MARKER_SUFFIX = ".icloud"


def is_placeholder_name(name: str) -> bool:
    """Check if a file name carries both placeholder markers.

    Examples:
        >>> is_placeholder_name(".c.txt.icloud")
        True
        >>> is_placeholder_name("c.txt")
        False
        >>> is_placeholder_name(".icloud")
        False
    """
    return (
        name.startswith(MARKER_PREFIX)
        and name.endswith(MARKER_SUFFIX)
        and len(name) > len(MARKER_PREFIX) + len(MARKER_SUFFIX)
    )


def placeholder_name(name: str) -> str:
    """Return the placeholder name the provider uses for ``name``."""
    return f"{MARKER_PREFIX}{name}{MARKER_SUFFIX}"


def derive_local_name(name: str) -> str:
    """Derive the materialized file name from an on-disk name.

    Exactly one leading marker and one trailing suffix are removed. Names
    that are not placeholders are returned unchanged.

    Args:
        name: File name as listed on disk

    Returns:
        The name the file will have once it is downloaded

    Raises:
        UnsupportedPlaceholderError: If the placeholder wraps a name that
            itself starts with the marker (e.g. ``..profile.icloud``)

    Examples:
        >>> derive_local_name(".c.txt.icloud")
        'c.txt'
        >>> derive_local_name("notes.icloud.txt")
        'notes.icloud.txt'
    """
    if not is_placeholder_name(name):
        return name

    local_name = name[len(MARKER_PREFIX) : -len(MARKER_SUFFIX)]
    if local_name.startswith(MARKER_PREFIX):
        raise UnsupportedPlaceholderError(name)
    return local_name


def derive_local_path(path: Path) -> Path:
    """Return a freshly built path to the materialized copy of ``path``."""
    return Path(path.parent, derive_local_name(path.name))
