"""Unit tests for the tar writer benchmark."""

from __future__ import annotations

import io
import tarfile

import pytest

from bench.tar_benchmark import generate_entries, parse_byte_size, run_tar_benchmark
from core.errors import BucketTarConfigError
from core.types import BenchmarkOptions
from store.archive_writer import write_archive


@pytest.mark.parametrize(
    ("raw_value", "expected"),
    [("512", 512), ("10KB", 10_000), ("1MiB", 1024 * 1024), ("1.5 kb", 1500), ("2GB", 2 * 10**9)],
)
def test_parse_byte_size_understands_units(raw_value: str, expected: int) -> None:
    """Byte sizes should accept decimal and binary units."""
    assert parse_byte_size(raw_value) == expected


@pytest.mark.parametrize("raw_value", ["", "ten", "5 parsecs", "-3KB"])
def test_parse_byte_size_rejects_garbage(raw_value: str) -> None:
    """Unparseable sizes should raise a config error."""
    with pytest.raises(BucketTarConfigError):
        parse_byte_size(raw_value)


def test_generate_entries_names_and_sizes() -> None:
    """Synthetic entries should be numbered and sized as requested."""
    entries = generate_entries(3, 64)

    assert [(entry.name, entry.size) for entry in entries] == [("0", 64), ("1", 64), ("2", 64)]


def test_run_tar_benchmark_discard_counts_bytes(fake_logger) -> None:
    """The benchmark should write N*S payload bytes into whole tar records."""
    options = BenchmarkOptions(entry_count=4, entry_size=1000, discard=True)

    result = run_tar_benchmark(options, logger=fake_logger)

    assert (result.payload_bytes, len(result.samples)) == (4000, 4)
    assert result.tar_bytes % tarfile.RECORDSIZE == 0
    assert result.tar_bytes > result.payload_bytes
    assert fake_logger.names().count("benchmark_entry") == 4


def test_run_tar_benchmark_memory_sink_matches_discard(fake_logger) -> None:
    """Memory and discard sinks should see the same tar byte count."""
    memory = run_tar_benchmark(BenchmarkOptions(3, 700, discard=False), logger=fake_logger)
    discard = run_tar_benchmark(BenchmarkOptions(3, 700, discard=True), logger=fake_logger)

    assert memory.tar_bytes == discard.tar_bytes


def test_per_entry_header_overhead_is_fixed() -> None:
    """Every synthetic entry should cost the same header bytes."""
    buffer = io.BytesIO()
    write_archive(buffer, generate_entries(6, 300))

    buffer.seek(0)
    with tarfile.open(fileobj=buffer, mode="r:") as archive:
        members = archive.getmembers()
    overheads = {member.offset_data - member.offset for member in members}
    assert (len(members), len(overheads)) == (6, 1)
    assert sum(member.size for member in members) == 6 * 300


@pytest.mark.parametrize(("count", "size"), [(0, 10), (3, 0)])
def test_run_tar_benchmark_rejects_empty_runs(count: int, size: int, fake_logger) -> None:
    """Benchmarks need at least one entry of at least one byte."""
    with pytest.raises(BucketTarConfigError):
        run_tar_benchmark(BenchmarkOptions(count, size), logger=fake_logger)
