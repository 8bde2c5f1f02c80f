"""Runtime configuration model for bucket-tar.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os

from core.constants import (
    DEFAULT_COMPRESSION_LEVEL,
    DEFAULT_CONNECT_TIMEOUT_SECONDS,
    DEFAULT_LIST_PAGE_SIZE,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_FETCH_WORKERS,
    DEFAULT_READ_TIMEOUT_SECONDS,
    MAX_LIST_PAGE_SIZE,
    SUPPORTED_LOG_LEVELS,
)
from core.errors import BucketTarConfigError

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass(frozen=True)
class ArchiverConfig:
    """Validated runtime configuration.

    Attributes:
        s3_region: Optional AWS region for the boto3 session.
        s3_profile: Optional AWS profile for boto3 session initialization.
        s3_endpoint_url: Optional S3-compatible endpoint, e.g. a MinIO server.
        max_fetch_workers: Upper bound on concurrent fetches per level.
        list_page_size: Maximum keys requested per listing call.
        connect_timeout_seconds: Deadline for establishing a store connection.
        read_timeout_seconds: Deadline for each store read.
        compression_level: Gzip compression level in [0, 9].
        fail_fast: Cancel pending sibling fetches after the first failure.
        log_level: Minimum structured log level.
    """

    s3_region: str | None = None
    s3_profile: str | None = None
    s3_endpoint_url: str | None = None
    max_fetch_workers: int = DEFAULT_MAX_FETCH_WORKERS
    list_page_size: int = DEFAULT_LIST_PAGE_SIZE
    connect_timeout_seconds: float = DEFAULT_CONNECT_TIMEOUT_SECONDS
    read_timeout_seconds: float = DEFAULT_READ_TIMEOUT_SECONDS
    compression_level: int = DEFAULT_COMPRESSION_LEVEL
    fail_fast: bool = True
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> "ArchiverConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            BucketTarConfigError: If environment values are invalid.
        """
        return cls(
            s3_region=os.getenv("BUCKET_TAR_S3_REGION"),
            s3_profile=os.getenv("BUCKET_TAR_S3_PROFILE"),
            s3_endpoint_url=os.getenv("BUCKET_TAR_S3_ENDPOINT_URL"),
            max_fetch_workers=_parse_bounded_int(
                "BUCKET_TAR_MAX_FETCH_WORKERS", DEFAULT_MAX_FETCH_WORKERS, 1, None
            ),
            list_page_size=_parse_bounded_int(
                "BUCKET_TAR_LIST_PAGE_SIZE", DEFAULT_LIST_PAGE_SIZE, 1, MAX_LIST_PAGE_SIZE
            ),
            connect_timeout_seconds=_parse_positive_float(
                "BUCKET_TAR_CONNECT_TIMEOUT", DEFAULT_CONNECT_TIMEOUT_SECONDS
            ),
            read_timeout_seconds=_parse_positive_float(
                "BUCKET_TAR_READ_TIMEOUT", DEFAULT_READ_TIMEOUT_SECONDS
            ),
            compression_level=_parse_bounded_int(
                "BUCKET_TAR_COMPRESSION_LEVEL", DEFAULT_COMPRESSION_LEVEL, 0, 9
            ),
            fail_fast=_parse_bool("BUCKET_TAR_FAIL_FAST", True),
            log_level=_parse_log_level(os.getenv("BUCKET_TAR_LOG_LEVEL", DEFAULT_LOG_LEVEL)),
        )


def validate_max_fetch_workers(value: int) -> int:
    """Validate a fetch worker bound from env or CLI input."""
    if value < 1:
        raise BucketTarConfigError(
            f"Invalid max fetch workers {value}: expected value >= 1. "
            "Use a positive worker count."
        )
    return value


def validate_compression_level(value: int) -> int:
    """Validate a gzip compression level from env or CLI input."""
    if not 0 <= value <= 9:
        raise BucketTarConfigError(
            f"Invalid compression level {value}: expected value in [0, 9]. "
            "Use 0 for no compression or 9 for best compression."
        )
    return value


def _parse_bounded_int(name: str, default: int, minimum: int, maximum: int | None) -> int:
    """Parse an integer environment value within bounds.

    Args:
        name: Environment variable name.
        default: Value used when the variable is unset.
        minimum: Inclusive lower bound.
        maximum: Optional inclusive upper bound.

    Returns:
        Parsed integer.

    Raises:
        BucketTarConfigError: If value is not an integer or out of bounds.
    """
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        value = int(raw_value)
    except ValueError as error:
        raise BucketTarConfigError(
            f"Invalid {name} value: expected integer, got '{raw_value}'. "
            f"Set {name} to a numeric value."
        ) from error
    if value < minimum or (maximum is not None and value > maximum):
        upper = "" if maximum is None else f" and <= {maximum}"
        raise BucketTarConfigError(
            f"Invalid {name} value {value}: expected value >= {minimum}{upper}."
        )
    return value


def _parse_positive_float(name: str, default: float) -> float:
    """Parse a strictly positive float environment value."""
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        value = float(raw_value)
    except ValueError as error:
        raise BucketTarConfigError(
            f"Invalid {name} value: expected number of seconds, got '{raw_value}'."
        ) from error
    if value <= 0:
        raise BucketTarConfigError(f"Invalid {name} value {value}: expected value > 0.")
    return value


def _parse_bool(name: str, default: bool) -> bool:
    """Parse a boolean flag environment value."""
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    normalized = raw_value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise BucketTarConfigError(
        f"Invalid {name} value: expected one of {_TRUE_VALUES + _FALSE_VALUES}, "
        f"got '{raw_value}'."
    )


def _parse_log_level(raw_value: str) -> str:
    """Parse the log level environment value."""
    normalized = raw_value.strip().lower()
    if normalized not in SUPPORTED_LOG_LEVELS:
        raise BucketTarConfigError(
            f"Invalid BUCKET_TAR_LOG_LEVEL value '{raw_value}': "
            f"expected one of {SUPPORTED_LOG_LEVELS}."
        )
    return normalized
