"""Unit tests for bucket archive orchestration."""

from __future__ import annotations

from pathlib import Path
import tarfile

import pytest

from core.config import ArchiverConfig
from core.errors import BucketTarConfigError, BucketTarLevelError, BucketTarListingError
from core.types import ArchiveOptions
from fake_object_store import FIXED_LAST_MODIFIED, FakeObjectStore
from ingest.pipeline import ArchivePipelineRunner, archive_bucket


def _read_members(archive_path: Path) -> list[tuple[str, int, bytes]]:
    with tarfile.open(archive_path, "r:gz") as archive:
        return [
            (member.name, member.size, archive.extractfile(member).read())
            for member in archive.getmembers()
        ]


def test_archive_bucket_writes_levels_in_order(nested_store, tmp_path: Path) -> None:
    """Root leaves should be archived before child-level leaves."""
    output_path = tmp_path / "bucket.tar.gz"
    options = ArchiveOptions(source_uri="s3://bucket/root", output_path=str(output_path))

    result = archive_bucket(options, ArchiverConfig(), store=nested_store)

    assert _read_members(output_path) == [("x", 5, b"hello"), ("sub/y", 5, b"world")]
    assert (result.object_count, result.payload_bytes) == (2, 10)
    assert result.archive_bytes == output_path.stat().st_size


def test_archive_bucket_sets_entry_metadata(nested_store, tmp_path: Path) -> None:
    """Entries should be regular 0644 files stamped with the store time."""
    output_path = tmp_path / "meta.tar.gz"
    options = ArchiveOptions(source_uri="s3://bucket/root/", output_path=str(output_path))

    archive_bucket(options, ArchiverConfig(), store=nested_store)

    with tarfile.open(output_path, "r:gz") as archive:
        member = archive.getmember("x")
    assert (member.isreg(), member.mode, member.mtime) == (
        True,
        0o644,
        int(FIXED_LAST_MODIFIED.timestamp()),
    )
    assert member.pax_headers["ctime"] == str(int(FIXED_LAST_MODIFIED.timestamp()))


def test_archive_bucket_writes_valid_empty_archive(tmp_path: Path) -> None:
    """An empty namespace should still produce a readable archive."""
    output_path = tmp_path / "empty.tar.gz"
    options = ArchiveOptions(source_uri="s3://bucket/nothing", output_path=str(output_path))

    result = archive_bucket(options, ArchiverConfig(), store=FakeObjectStore({}))

    assert (_read_members(output_path), result.object_count) == ([], 0)


def test_archive_bucket_leaves_destination_untouched_on_fetch_failure(tmp_path: Path) -> None:
    """A single failed fetch should persist nothing."""
    output_path = tmp_path / "bucket.tar.gz"
    output_path.write_bytes(b"previous archive")
    store = FakeObjectStore(
        {"root/x": b"hello", "root/sub/y": b"world"},
        failing_keys=("root/sub/y",),
    )
    options = ArchiveOptions(source_uri="s3://bucket/root", output_path=str(output_path))

    with pytest.raises(BucketTarLevelError):
        archive_bucket(options, ArchiverConfig(), store=store)

    assert output_path.read_bytes() == b"previous archive"
    assert sorted(path.name for path in tmp_path.iterdir()) == ["bucket.tar.gz"]


def test_archive_bucket_creates_nothing_on_listing_failure(tmp_path: Path) -> None:
    """A listing failure should leave no output file behind."""
    output_path = tmp_path / "bucket.tar.gz"
    store = FakeObjectStore({"root/x": b"x"}, failing_prefixes=("root/",))
    options = ArchiveOptions(source_uri="s3://bucket/root", output_path=str(output_path))

    with pytest.raises(BucketTarListingError):
        archive_bucket(options, ArchiverConfig(), store=store)

    assert list(tmp_path.iterdir()) == []


def test_archive_bucket_archives_whole_bucket_for_empty_prefix(tmp_path: Path) -> None:
    """A bucket URI without a prefix should archive full keys."""
    output_path = tmp_path / "all.tar.gz"
    store = FakeObjectStore({"top.txt": b"t", "dir/inner.txt": b"i"})
    options = ArchiveOptions(source_uri="s3://bucket", output_path=str(output_path))

    archive_bucket(options, ArchiverConfig(), store=store)

    assert [name for name, _, _ in _read_members(output_path)] == ["top.txt", "dir/inner.txt"]


def test_archive_bucket_fails_on_slash_key_with_payload(tmp_path: Path) -> None:
    """A non-empty key ending in a slash should fail the run instead of vanishing."""
    output_path = tmp_path / "bucket.tar.gz"
    store = FakeObjectStore({"root/x": b"hello", "root/notes/": b"real payload"})
    options = ArchiveOptions(source_uri="s3://bucket/root", output_path=str(output_path))

    with pytest.raises(BucketTarLevelError, match="root/notes/"):
        archive_bucket(options, ArchiverConfig(), store=store)

    assert list(tmp_path.iterdir()) == []


def test_archive_bucket_fails_on_doubled_slash_key(tmp_path: Path) -> None:
    """A key with an empty path segment should not become an absolute member name."""
    output_path = tmp_path / "bucket.tar.gz"
    store = FakeObjectStore({"root//x": b"hello"})
    options = ArchiveOptions(source_uri="s3://bucket/root", output_path=str(output_path))

    with pytest.raises(BucketTarLevelError, match="root//x"):
        archive_bucket(options, ArchiverConfig(), store=store)

    assert list(tmp_path.iterdir()) == []


def test_runner_rejects_zero_worker_override() -> None:
    """An explicit zero worker override should be rejected, not replaced by config."""
    options = ArchiveOptions(
        source_uri="s3://bucket/root",
        output_path="out.tar.gz",
        max_fetch_workers=0,
    )

    with pytest.raises(BucketTarConfigError, match="max fetch workers 0"):
        ArchivePipelineRunner(options, ArchiverConfig(), store=FakeObjectStore({}))


def test_runner_rejects_invalid_overrides() -> None:
    """Worker and compression overrides should be validated up front."""
    options = ArchiveOptions(
        source_uri="s3://bucket/root",
        output_path="out.tar.gz",
        compression_level=12,
    )

    with pytest.raises(BucketTarConfigError):
        ArchivePipelineRunner(options, ArchiverConfig(), store=FakeObjectStore({}))


def test_runner_logs_start_and_completion(nested_store, fake_logger, tmp_path: Path) -> None:
    """Runs should log start and completion events."""
    options = ArchiveOptions(
        source_uri="s3://bucket/root",
        output_path=str(tmp_path / "logged.tar.gz"),
    )
    runner = ArchivePipelineRunner(
        options, ArchiverConfig(), store=nested_store, logger=fake_logger
    )

    runner.run()

    names = fake_logger.names()
    assert names[0] == "archive_started" and names[-1] == "archive_completed"
