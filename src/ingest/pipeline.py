"""Bucket archive orchestration.

This module coordinates namespace walking, per-level fetches, tar
encoding, gzip compression, and the all-or-nothing output file.
"""

from __future__ import annotations

import time
from typing import Any

import humanize

from core.config import ArchiverConfig, validate_compression_level, validate_max_fetch_workers
from core.logging_config import get_logger
from core.s3_uri import S3Location, parse_s3_uri
from core.types import ArchiveOptions, ArchiveResult
from ingest.level_fetcher import LevelFetcher
from ingest.object_store import ObjectStoreClient, S3ObjectStore
from ingest.path_walker import PathWalker
from store.archive_output import AtomicArchiveFile
from store.archive_writer import TarArchiveWriter
from store.compression import GzipCompressor


class ArchivePipelineRunner:
    """Runner for one bucket-to-archive execution."""

    def __init__(
        self,
        options: ArchiveOptions,
        config: ArchiverConfig,
        store: ObjectStoreClient | None = None,
        logger: Any | None = None,
    ) -> None:
        self._options = options
        self._config = config
        self._location = parse_s3_uri(options.source_uri)
        self._store = store
        self._logger = logger or get_logger(__name__)
        self._max_workers = validate_max_fetch_workers(
            config.max_fetch_workers
            if options.max_fetch_workers is None
            else options.max_fetch_workers
        )
        self._compression_level = validate_compression_level(
            config.compression_level
            if options.compression_level is None
            else options.compression_level
        )

    def run(self) -> ArchiveResult:
        """Archive every object under the source prefix and persist it."""
        started_at = time.monotonic()
        root = self._location.root
        walker = self._build_walker()
        self._logger.info(
            "archive_started",
            bucket=self._location.bucket,
            root=root,
            output_path=self._options.output_path,
            max_fetch_workers=self._max_workers,
        )
        with AtomicArchiveFile(self._options.output_path) as output:
            compressor = GzipCompressor(output, self._compression_level)
            writer = TarArchiveWriter(compressor, logger=self._logger)
            for level_objects in walker.iter_levels(root):
                writer.add_all(level_objects)
            writer.close()
            compressor.close()
            output_path = output.commit()
        result = ArchiveResult(
            output_path=str(output_path),
            object_count=writer.entry_count,
            payload_bytes=writer.payload_bytes,
            archive_bytes=output.bytes_written,
        )
        _log_archive_completion(self._logger, self._location, result, started_at)
        return result

    def _build_walker(self) -> PathWalker:
        store = self._store or S3ObjectStore.from_config(self._config, self._location.bucket)
        fetcher = LevelFetcher(
            store,
            max_workers=self._max_workers,
            fail_fast=self._config.fail_fast,
            logger=self._logger,
        )
        return PathWalker(
            store,
            fetcher,
            page_size=self._config.list_page_size,
            logger=self._logger,
        )


def archive_bucket(
    options: ArchiveOptions,
    config: ArchiverConfig,
    store: ObjectStoreClient | None = None,
) -> ArchiveResult:
    """Archive an S3 prefix into a local ``.tar.gz`` file.

    Args:
        options: Archive request options.
        config: Runtime configuration.
        store: Optional object store; a boto3-backed store is built if omitted.

    Returns:
        Persisted archive summary.

    Raises:
        BucketTarConfigError: If the source URI or overrides are invalid.
        BucketTarListingError: If any namespace level cannot be listed.
        BucketTarLevelError: If any fetch fails.
        BucketTarArchiveError: If tar encoding fails.
        BucketTarCompressionError: If gzip compression fails.
        BucketTarPersistError: If the output file cannot be written.
    """
    runner = ArchivePipelineRunner(options, config, store=store)
    return runner.run()


def _log_archive_completion(
    logger: Any,
    location: S3Location,
    result: ArchiveResult,
    started_at: float,
) -> None:
    """Log pipeline completion with contextual metadata."""
    logger.info(
        "archive_completed",
        source_uri=location.uri(),
        output_path=result.output_path,
        objects=result.object_count,
        payload_size=humanize.naturalsize(result.payload_bytes),
        archive_size=humanize.naturalsize(result.archive_bytes),
        elapsed_seconds=round(time.monotonic() - started_at, 3),
    )
