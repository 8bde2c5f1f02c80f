"""bucket-tar CLI entry points.
This module exposes the archive and bench commands.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
import sys
from typing import Sequence

from cli.archive_command import add_archive_command, run_archive_command
from cli.bench_command import add_bench_command, run_bench_command
from core.config import ArchiverConfig
from core.constants import SUPPORTED_LOG_LEVELS
from core.errors import BucketTarError
from core.logging_config import configure_logging, get_logger


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="bucket-tar",
        description="Archive an S3 prefix into a gzip-compressed tar file",
    )
    parser.add_argument(
        "--log-level",
        choices=SUPPORTED_LOG_LEVELS,
        help="Override BUCKET_TAR_LOG_LEVEL for this command",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    add_archive_command(subparsers)
    add_bench_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the bucket-tar CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = _build_config(args.log_level)
    except BucketTarError as error:
        print(f"error={error}", file=sys.stderr)
        return 2
    configure_logging(config.log_level)
    try:
        if args.command == "archive":
            return run_archive_command(config, args)
        if args.command == "bench":
            return run_bench_command(config, args)
    except BucketTarError as error:
        get_logger(__name__).error(f"{args.command}_failed", error=str(error))
        print(f"error={error}", file=sys.stderr)
        return 2
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_config(log_level: str | None) -> ArchiverConfig:
    """Build runtime config with an optional log-level override."""
    config = ArchiverConfig.from_env()
    if log_level:
        config = replace(config, log_level=log_level)
    return config
