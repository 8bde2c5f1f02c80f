"""Core constants used across bucket-tar modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

S3_URI_SCHEME = "s3://"
KEY_DELIMITER = "/"
DEFAULT_FILE_MODE = 0o644
DEFAULT_OUTPUT_PATH = "bucket.tar.gz"
DEFAULT_MAX_FETCH_WORKERS = 16
DEFAULT_LIST_PAGE_SIZE = 1000
MAX_LIST_PAGE_SIZE = 1000
DEFAULT_CONNECT_TIMEOUT_SECONDS = 10.0
DEFAULT_READ_TIMEOUT_SECONDS = 60.0
DEFAULT_COMPRESSION_LEVEL = 6
DEFAULT_LOG_LEVEL = "info"
SUPPORTED_LOG_LEVELS = ("debug", "info", "warning", "error")
TEMP_ARCHIVE_PREFIX = ".bucket-tar-"
TEMP_ARCHIVE_SUFFIX = ".partial"
BENCHMARK_PLOT_FILE_TEMPLATE = "tar_bench_n{count}_size{size}.svg"
