"""Tar writer micro-benchmark.

This module feeds synthetic entries through the archive writer and
samples process memory before and after every entry write.
"""

from __future__ import annotations

from datetime import datetime, timezone
import io
import os
import re
import time
from typing import Any

import humanize
import psutil

from core.errors import BucketTarConfigError
from core.logging_config import get_logger
from core.types import BenchmarkOptions, BenchmarkResult, BenchmarkSample, FetchedObject
from store.archive_output import DiscardSink
from store.archive_writer import TarArchiveWriter

_BYTE_SIZE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([a-zA-Z]*)\s*$")
_BYTE_SIZE_UNITS = {
    "": 1,
    "b": 1,
    "k": 1000,
    "kb": 1000,
    "kib": 1024,
    "m": 1000**2,
    "mb": 1000**2,
    "mib": 1024**2,
    "g": 1000**3,
    "gb": 1000**3,
    "gib": 1024**3,
}


def parse_byte_size(raw_value: str) -> int:
    """Parse a human byte size such as ``512``, ``10KB`` or ``1.5MiB``.

    Raises:
        BucketTarConfigError: If the value or unit is not recognized.
    """
    match = _BYTE_SIZE_PATTERN.match(raw_value)
    unit = match.group(2).lower() if match else ""
    if match is None or unit not in _BYTE_SIZE_UNITS:
        raise BucketTarConfigError(
            f"Invalid byte size '{raw_value}': expected a number with an optional "
            "B, KB, KiB, MB, MiB, GB or GiB unit."
        )
    return int(float(match.group(1)) * _BYTE_SIZE_UNITS[unit])


def generate_entries(count: int, size: int) -> list[FetchedObject]:
    """Build ``count`` entries named ``0..count-1`` with random payloads."""
    last_modified = datetime.now(timezone.utc)
    return [
        FetchedObject(name=str(index), data=os.urandom(size), last_modified=last_modified)
        for index in range(count)
    ]


def run_tar_benchmark(options: BenchmarkOptions, logger: Any | None = None) -> BenchmarkResult:
    """Write synthetic entries through the tar writer and sample memory.

    Args:
        options: Entry count, entry size and sink selection.
        logger: Optional structured logger.

    Returns:
        Memory samples, byte counts and duration.

    Raises:
        BucketTarConfigError: If count or size is not positive.
        BucketTarArchiveError: If the tar writer fails.
    """
    _validate_options(options)
    log = logger or get_logger(__name__)
    process = psutil.Process()
    log.info(
        "benchmark_started",
        entries=options.entry_count,
        entry_size=humanize.naturalsize(options.entry_size),
        sink="discard" if options.discard else "memory",
    )
    setup_bytes = _resident_bytes(process)
    entries = generate_entries(options.entry_count, options.entry_size)
    start_bytes = _resident_bytes(process)
    sink: Any = DiscardSink() if options.discard else io.BytesIO()
    samples: list[BenchmarkSample] = []
    started_at = time.monotonic()
    writer = TarArchiveWriter(sink, logger=log)
    for index, entry in enumerate(entries):
        before_bytes = _resident_bytes(process)
        writer.add(entry)
        samples.append(
            BenchmarkSample(
                index=index, before_bytes=before_bytes, after_bytes=_resident_bytes(process)
            )
        )
    writer.close()
    duration_seconds = time.monotonic() - started_at
    result = BenchmarkResult(
        options=options,
        setup_bytes=setup_bytes,
        start_bytes=start_bytes,
        teardown_bytes=_resident_bytes(process),
        samples=tuple(samples),
        payload_bytes=writer.payload_bytes,
        tar_bytes=_sink_size(sink),
        duration_seconds=duration_seconds,
    )
    _log_benchmark_result(log, result)
    return result


def _validate_options(options: BenchmarkOptions) -> None:
    """Validate benchmark entry count and size."""
    if options.entry_count < 1:
        raise BucketTarConfigError(
            f"Invalid entry count {options.entry_count}: specify at least 1 file to tar."
        )
    if options.entry_size < 1:
        raise BucketTarConfigError(
            f"Invalid entry size {options.entry_size}: specify at least 1 byte per file."
        )


def _resident_bytes(process: psutil.Process) -> int:
    return process.memory_info().rss


def _sink_size(sink: Any) -> int:
    if isinstance(sink, DiscardSink):
        return sink.bytes_written
    return sink.getbuffer().nbytes


def _log_benchmark_result(logger: Any, result: BenchmarkResult) -> None:
    """Log setup, per-entry and teardown memory samples."""
    logger.info("benchmark_setup", rss=humanize.naturalsize(result.setup_bytes))
    logger.info("benchmark_starting", rss=humanize.naturalsize(result.start_bytes))
    for sample in result.samples:
        logger.info(
            "benchmark_entry",
            index=sample.index,
            before_rss=humanize.naturalsize(sample.before_bytes),
            after_rss=humanize.naturalsize(sample.after_bytes),
        )
    logger.info(
        "benchmark_completed",
        rss=humanize.naturalsize(result.teardown_bytes),
        tar_size=humanize.naturalsize(result.tar_bytes),
        payload_size=humanize.naturalsize(result.payload_bytes),
        elapsed_seconds=round(result.duration_seconds, 3),
    )
