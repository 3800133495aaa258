"""Shared fixtures: an in-memory stand-in for iCloud Drive."""

import logging
from pathlib import Path
from unittest.mock import Mock

import pytest

from icloud_snapshot.exceptions import (
    MaterializationError,
    ReleaseError,
    StatusQueryError,
    UnsupportedPlaceholderError,
)
from icloud_snapshot.naming import (
    derive_local_path,
    is_placeholder_name,
    placeholder_name,
)
from icloud_snapshot.output import OutputFormatter
from icloud_snapshot.provider import DownloadState, RemoteStatus


class FakeICloud:
    """Simulates iCloud Drive on a real temporary directory.

    Files below ``root`` are remote-backed. A requested download completes
    after ``polls_until_current`` status queries of the local name: the
    content is written and the placeholder removed. Releasing a file turns
    it back into a placeholder.
    """

    def __init__(self, root: Path, polls_until_current: int = 2):
        self.root = root
        self.polls_until_current = polls_until_current
        self.contents: dict[Path, bytes] = {}
        self.states: dict[Path, DownloadState] = {}
        self.events: list[tuple[str, Path]] = []
        self.queried: list[Path] = []
        self.fail_queries: set[Path] = set()
        self.fail_next_queries = 0
        self.fail_requests = False
        self.fail_release = False
        self._pending: dict[Path, int] = {}

    @property
    def requests(self) -> list[Path]:
        return [path for event, path in self.events if event == "request"]

    @property
    def releases(self) -> list[Path]:
        return [path for event, path in self.events if event == "release"]

    def add_placeholder(self, directory: Path, name: str, content: bytes) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        placeholder = directory / placeholder_name(name)
        placeholder.write_bytes(b"")
        self.contents[directory / name] = content
        return placeholder

    def add_file(
        self,
        path: Path,
        content: bytes,
        state: DownloadState = DownloadState.CURRENT,
    ) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        self.states[path] = state
        return path

    def _is_remote(self, path: Path) -> bool:
        return path == self.root or self.root in path.parents

    def _finish_download(self, local: Path) -> None:
        local.write_bytes(self.contents.pop(local))
        placeholder = local.with_name(placeholder_name(local.name))
        if placeholder.exists():
            placeholder.unlink()
        self.states[local] = DownloadState.CURRENT
        del self._pending[local]

    def query(self, path: Path) -> RemoteStatus:
        self.queried.append(path)
        if self.fail_next_queries > 0:
            self.fail_next_queries -= 1
            raise StatusQueryError("status temporarily unavailable", path)
        if path in self.fail_queries:
            raise StatusQueryError("status unavailable", path)

        if not self._is_remote(path):
            if not path.exists():
                raise StatusQueryError("missing", path, kind="not-found")
            return RemoteStatus.local()

        if is_placeholder_name(path.name):
            try:
                pending = derive_local_path(path) in self._pending
            except UnsupportedPlaceholderError:
                pending = False
            state = (
                DownloadState.DOWNLOADING if pending else DownloadState.NOT_DOWNLOADED
            )
            return RemoteStatus(True, state)

        if path in self._pending:
            self._pending[path] -= 1
            if self._pending[path] > 0:
                return RemoteStatus(True, DownloadState.DOWNLOADING)
            self._finish_download(path)

        if not path.exists():
            raise StatusQueryError("missing", path, kind="not-found")
        return RemoteStatus(True, self.states.get(path, DownloadState.CURRENT))

    def request_materialization(self, path: Path) -> None:
        self.events.append(("request", path))
        if self.fail_requests:
            raise MaterializationError("download refused", path)
        local = derive_local_path(path)
        if local in self.contents:
            self._pending[local] = self.polls_until_current

    def release(self, path: Path) -> None:
        self.events.append(("release", path))
        if self.fail_release:
            raise ReleaseError("evict failed", path)
        if path.exists() and not is_placeholder_name(path.name):
            self.contents[path] = path.read_bytes()
            path.unlink()
            path.with_name(placeholder_name(path.name)).write_bytes(b"")
            self.states.pop(path, None)


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    """Source tree, backed by the fake iCloud."""
    path = tmp_path / "icloud"
    path.mkdir()
    return path


@pytest.fixture
def dest_dir(tmp_path: Path) -> Path:
    return tmp_path / "snapshot"


@pytest.fixture
def fake_icloud(source_dir: Path) -> FakeICloud:
    return FakeICloud(source_dir)


@pytest.fixture
def mock_output():
    """Create a mock output formatter."""
    output = Mock(spec=OutputFormatter)
    output.quiet = True
    output.progress_enabled = False
    return output


def messages(mock_method: Mock) -> list[str]:
    """Messages passed to a mocked OutputFormatter method."""
    return [call.args[0] for call in mock_method.call_args_list]


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo logging configuration done by CLI invocations."""
    yield
    logger = logging.getLogger("icloud_snapshot")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
