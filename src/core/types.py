"""Shared typed models.

This module defines immutable data models used by the listing, fetch,
archive, and benchmark layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class FetchedObject:
    """One retrieved unit of content.

    Attributes:
        name: Path relative to the traversal root, forward-slash separated.
        data: Fully materialized object payload.
        last_modified: Store timestamp used as the archive modification time.
    """

    name: str
    data: bytes
    last_modified: datetime

    @property
    def size(self) -> int:
        """Payload length in bytes."""
        return len(self.data)


@dataclass(frozen=True)
class ListedKey:
    """One leaf key reported by a listing call.

    Attributes:
        key: Fully-qualified object key.
        size: Object size reported by the store.
        last_modified: Store timestamp, as a datetime or RFC 3339 string.
    """

    key: str
    size: int
    last_modified: datetime | str


@dataclass(frozen=True)
class ListingPage:
    """One page returned by a delimited listing call.

    Attributes:
        leaf_keys: Direct leaves at the listed path.
        common_prefixes: Delimiter-grouped child prefixes.
        truncated: Whether the store has more results for this path.
        next_token: Continuation token for the next page, if truncated.
    """

    leaf_keys: tuple[ListedKey, ...]
    common_prefixes: tuple[str, ...]
    truncated: bool = False
    next_token: str | None = None


@dataclass(frozen=True)
class NamespaceLevel:
    """All leaves and child prefixes found at one namespace path.

    Attributes:
        path: Listed path prefix.
        leaf_keys: Leaf keys in store order.
        child_prefixes: Child prefixes in store order.
    """

    path: str
    leaf_keys: tuple[ListedKey, ...]
    child_prefixes: tuple[str, ...]

    @property
    def total_size(self) -> int:
        """Sum of store-reported leaf sizes."""
        return sum(listed_key.size for listed_key in self.leaf_keys)


@dataclass(frozen=True)
class ArchiveOptions:
    """Archive command options.

    Attributes:
        source_uri: ``s3://bucket/prefix`` namespace to archive.
        output_path: Local destination for the ``.tar.gz`` archive.
        max_fetch_workers: Optional override of the configured worker bound.
        compression_level: Optional override of the configured gzip level.
    """

    source_uri: str
    output_path: str
    max_fetch_workers: int | None = None
    compression_level: int | None = None


@dataclass(frozen=True)
class ArchiveResult:
    """Archive run outcome.

    Attributes:
        output_path: Persisted archive path.
        object_count: Number of archive entries.
        payload_bytes: Sum of fetched payload sizes.
        archive_bytes: Size of the persisted compressed archive.
    """

    output_path: str
    object_count: int
    payload_bytes: int
    archive_bytes: int


@dataclass(frozen=True)
class BenchmarkOptions:
    """Tar benchmark options.

    Attributes:
        entry_count: Number of synthetic entries to archive.
        entry_size: Payload size of each entry in bytes.
        discard: Write the tar stream to a discarding sink instead of memory.
    """

    entry_count: int
    entry_size: int
    discard: bool = False


@dataclass(frozen=True)
class BenchmarkSample:
    """Process memory observed around one entry write.

    Attributes:
        index: Zero-based entry index.
        before_bytes: Resident set size before writing the entry.
        after_bytes: Resident set size after writing the entry.
    """

    index: int
    before_bytes: int
    after_bytes: int


@dataclass(frozen=True)
class BenchmarkResult:
    """Tar benchmark measurements.

    Attributes:
        options: Options the benchmark ran with.
        setup_bytes: Resident set size before generating entries.
        start_bytes: Resident set size after generating entries.
        teardown_bytes: Resident set size after closing the archive.
        samples: Per-entry memory samples.
        payload_bytes: Sum of entry payload sizes written.
        tar_bytes: Uncompressed tar bytes written to the sink.
        duration_seconds: Wall-clock duration of the archive writes.
    """

    options: BenchmarkOptions
    setup_bytes: int
    start_bytes: int
    teardown_bytes: int
    samples: tuple[BenchmarkSample, ...]
    payload_bytes: int
    tar_bytes: int
    duration_seconds: float
