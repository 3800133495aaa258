"""Unit tests for SnapshotEvictor."""

from unittest.mock import patch

import pytest
from conftest import messages

from icloud_snapshot.provider import DownloadState, LocalProvider
from icloud_snapshot.snapshot.evictor import SnapshotEvictor
from icloud_snapshot.snapshot.totals import RunTotals


@pytest.fixture
def evictor(fake_icloud, mock_output):
    return SnapshotEvictor(fake_icloud, mock_output)


class TestSnapshotEvictor:
    """Tests for tree eviction."""

    def test_releases_only_downloaded_files(
        self, evictor, fake_icloud, source_dir, mock_output
    ):
        """A current file is released, a placeholder is left alone."""
        a = fake_icloud.add_file(source_dir / "a.txt", b"alpha")
        fake_icloud.add_placeholder(source_dir, "b.txt", b"bravo")
        totals = RunTotals()

        evictor.evict(source_dir, totals)

        assert fake_icloud.releases == [a]
        assert totals.files_released == 1
        assert totals.errors == 0
        assert any(
            "file is not downloaded" in m for m in messages(mock_output.info)
        )

    def test_nested_directories(self, evictor, fake_icloud, source_dir, mock_output):
        one = fake_icloud.add_file(source_dir / "x" / "one.txt", b"1")
        two = fake_icloud.add_file(source_dir / "x" / "y" / "two.txt", b"2")
        three = fake_icloud.add_file(source_dir / "z" / "three.txt", b"3")
        totals = RunTotals()

        evictor.evict(source_dir, totals)

        assert fake_icloud.releases == [one, two, three]
        assert totals.files_released == 3
        dirs = [m for m in messages(mock_output.info) if m.startswith("evict dir:")]
        assert len(dirs) == 4

    def test_downloading_file_skipped(self, evictor, fake_icloud, source_dir):
        fake_icloud.add_file(source_dir / "e.txt", b"e", DownloadState.DOWNLOADING)

        evictor.evict(source_dir, RunTotals())

        assert fake_icloud.releases == []

    def test_local_files_skipped(self, mock_output, tmp_path):
        (tmp_path / "plain.txt").write_text("local")
        evictor = SnapshotEvictor(LocalProvider(), mock_output)
        totals = RunTotals()

        evictor.evict(tmp_path, totals)

        assert totals.files_released == 0
        assert totals.errors == 0
        assert any("file is local" in m for m in messages(mock_output.info))

    def test_query_error_is_logged(
        self, evictor, fake_icloud, source_dir, mock_output
    ):
        a = fake_icloud.add_file(source_dir / "a.txt", b"alpha")
        b = fake_icloud.add_file(source_dir / "b.txt", b"bravo")
        fake_icloud.fail_queries.add(a)
        totals = RunTotals()

        evictor.evict(source_dir, totals)

        assert fake_icloud.releases == [b]
        assert totals.errors == 1
        assert "could not evict file" in messages(mock_output.error)[0]

    def test_vanished_file_is_not_an_error(
        self, evictor, fake_icloud, source_dir, mock_output
    ):
        """A file removed after listing is skipped with a warning."""
        totals = RunTotals()

        released = evictor.evict_file(source_dir / "gone.txt", totals)

        assert released is False
        assert totals.errors == 0
        assert fake_icloud.releases == []
        mock_output.warning.assert_called_once_with(
            f"file no longer exists: {source_dir / 'gone.txt'}, will be skipped"
        )
        mock_output.error.assert_not_called()

    def test_release_error_is_logged(self, evictor, fake_icloud, source_dir):
        fake_icloud.add_file(source_dir / "a.txt", b"alpha")
        fake_icloud.fail_release = True
        totals = RunTotals()

        evictor.evict(source_dir, totals)

        assert totals.files_released == 0
        assert totals.errors == 1

    def test_unlistable_directory(
        self, evictor, fake_icloud, source_dir, mock_output
    ):
        (source_dir / "locked").mkdir()
        b = fake_icloud.add_file(source_dir / "open" / "b.txt", b"bravo")
        original = evictor.scanner.list_directory

        def failing_list(directory):
            if directory.name == "locked":
                raise PermissionError("denied")
            return original(directory)

        with patch.object(evictor.scanner, "list_directory", side_effect=failing_list):
            totals = RunTotals()
            evictor.evict(source_dir, totals)

        assert fake_icloud.releases == [b]
        assert totals.errors == 1
        assert "could not list directory" in messages(mock_output.error)[0]

    def test_evict_file_return_value(self, evictor, fake_icloud, source_dir):
        a = fake_icloud.add_file(source_dir / "a.txt", b"alpha")
        placeholder = fake_icloud.add_placeholder(source_dir, "b.txt", b"bravo")

        assert evictor.evict_file(a, RunTotals()) is True
        assert evictor.evict_file(placeholder, RunTotals()) is False
