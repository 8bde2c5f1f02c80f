"""Public SDK surface for bucket-tar.

This module provides a stable import path for library users.
It re-exports the archive and benchmark entry points and typed models.
"""

from __future__ import annotations

from bench.tar_benchmark import run_tar_benchmark
from core.config import ArchiverConfig
from core.logging_config import configure_logging
from core.types import (
    ArchiveOptions,
    ArchiveResult,
    BenchmarkOptions,
    BenchmarkResult,
    FetchedObject,
)
from ingest.level_fetcher import LevelFetcher
from ingest.object_store import ObjectStoreClient, S3ObjectStore
from ingest.path_walker import PathWalker
from ingest.pipeline import archive_bucket
from store.archive_writer import TarArchiveWriter, write_archive

__all__ = [
    "ArchiveOptions",
    "ArchiveResult",
    "ArchiverConfig",
    "BenchmarkOptions",
    "BenchmarkResult",
    "FetchedObject",
    "LevelFetcher",
    "ObjectStoreClient",
    "PathWalker",
    "S3ObjectStore",
    "TarArchiveWriter",
    "archive_bucket",
    "configure_logging",
    "run_tar_benchmark",
    "write_archive",
]
