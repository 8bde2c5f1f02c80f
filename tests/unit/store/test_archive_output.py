"""Unit tests for archive destinations."""

from __future__ import annotations

from pathlib import Path
import stat

import pytest

from core.errors import BucketTarPersistError
from store.archive_output import AtomicArchiveFile, DiscardSink


def test_commit_moves_archive_into_place(tmp_path: Path) -> None:
    """Committed bytes should appear at the destination with mode 0644."""
    destination = tmp_path / "out.tar.gz"

    with AtomicArchiveFile(destination) as output:
        output.write(b"archive")
        committed_path = output.commit()

    assert (committed_path, destination.read_bytes(), output.bytes_written) == (
        destination,
        b"archive",
        7,
    )
    assert stat.S_IMODE(destination.stat().st_mode) == 0o644
    assert sorted(path.name for path in tmp_path.iterdir()) == ["out.tar.gz"]


def test_uncommitted_archive_is_discarded(tmp_path: Path) -> None:
    """Leaving the context on error should remove the temporary file."""
    destination = tmp_path / "out.tar.gz"

    with pytest.raises(RuntimeError):
        with AtomicArchiveFile(destination) as output:
            output.write(b"partial")
            raise RuntimeError("fetch failed")

    assert list(tmp_path.iterdir()) == []


def test_writes_after_discard_are_dropped(tmp_path: Path) -> None:
    """Late writes from finalizing encoders should not fail."""
    output = AtomicArchiveFile(tmp_path / "out.tar.gz")
    output.open()
    output.discard()

    assert output.write(b"trailer") == 7
    assert output.bytes_written == 0


def test_open_fails_for_missing_directory(tmp_path: Path) -> None:
    """A destination in a missing directory should raise a persist error."""
    output = AtomicArchiveFile(tmp_path / "missing" / "out.tar.gz")

    with pytest.raises(BucketTarPersistError, match="writing tar/gzip archive to"):
        output.open()

    assert not (tmp_path / "missing").exists()


def test_discard_sink_counts_bytes() -> None:
    """The discard sink should count every written byte."""
    sink = DiscardSink()

    sink.write(b"abc")
    sink.write(b"defgh")

    assert sink.bytes_written == 8
