"""bucket-tar exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each pipeline stage raises a specific error type for debuggability.
"""

from __future__ import annotations


class BucketTarError(Exception):
    """Base exception for all bucket-tar failures."""


class BucketTarConfigError(BucketTarError):
    """Raised for invalid runtime configuration or source URIs."""


class BucketTarDependencyError(BucketTarError):
    """Raised when an optional runtime dependency is missing."""


class BucketTarListingError(BucketTarError):
    """Raised when a namespace level cannot be listed."""


class BucketTarFetchError(BucketTarError):
    """Raised when a single object cannot be fetched."""


class BucketTarLevelError(BucketTarError):
    """Raised when one or more fetches of a namespace level fail.

    Attributes:
        failures: Messages of every collected per-key failure.
        path: Listed path of the failed level, when known.
    """

    def __init__(self, failures: list[str] | tuple[str, ...], path: str | None = None) -> None:
        self.failures = tuple(failures)
        self.path = path
        message = f"{len(self.failures)} errors: {','.join(self.failures)}"
        if path is not None:
            message = f"fetching content of keys at '{path}', {message}"
        super().__init__(message)


class BucketTarArchiveError(BucketTarError):
    """Raised for tar header, payload, or finalize failures."""


class BucketTarCompressionError(BucketTarError):
    """Raised for gzip stream write or close failures."""


class BucketTarPersistError(BucketTarError):
    """Raised when the archive cannot be persisted to its destination."""
