"""Archive command wiring for bucket-tar CLI."""

from __future__ import annotations

import argparse
from typing import Any

from core.config import ArchiverConfig
from core.constants import DEFAULT_OUTPUT_PATH
from core.types import ArchiveOptions
from ingest.pipeline import archive_bucket


def add_archive_command(subparsers: Any) -> None:
    """Register archive subcommand."""
    parser = subparsers.add_parser(
        "archive",
        help="Fetch every object under an S3 prefix into a .tar.gz file",
    )
    parser.add_argument("source", help="A URL of the form s3://bucketname/path/to/files")
    parser.add_argument(
        "--output",
        default=DEFAULT_OUTPUT_PATH,
        help="Path to save the tar/gzip archive of the source prefix",
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        help="Override BUCKET_TAR_MAX_FETCH_WORKERS for this command",
    )
    parser.add_argument(
        "--compression-level",
        type=int,
        help="Override BUCKET_TAR_COMPRESSION_LEVEL for this command",
    )


def run_archive_command(config: ArchiverConfig, args: argparse.Namespace) -> int:
    """Execute the archive pipeline and print a summary."""
    options = ArchiveOptions(
        source_uri=args.source,
        output_path=args.output,
        max_fetch_workers=args.max_workers,
        compression_level=args.compression_level,
    )
    result = archive_bucket(options, config)
    print(f"output_path={result.output_path}")
    print(f"objects={result.object_count}")
    print(f"payload_bytes={result.payload_bytes}")
    print(f"archive_bytes={result.archive_bytes}")
    return 0
