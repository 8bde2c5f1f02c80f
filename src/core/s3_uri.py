"""S3 URI parsing helpers.

This module centralizes namespace URI parsing for the archive pipeline.
It keeps URI validation behavior consistent across CLI and SDK callers.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.constants import KEY_DELIMITER, S3_URI_SCHEME
from core.errors import BucketTarConfigError


@dataclass(frozen=True)
class S3Location:
    """Parsed S3 location model."""

    bucket: str
    prefix: str

    @property
    def root(self) -> str:
        """Traversal root: the prefix with exactly one trailing delimiter, or empty."""
        stripped_prefix = self.prefix.strip(KEY_DELIMITER)
        if not stripped_prefix:
            return ""
        return stripped_prefix + KEY_DELIMITER

    def uri(self) -> str:
        """Render the location back into ``s3://bucket/prefix`` form."""
        return f"{S3_URI_SCHEME}{self.bucket}/{self.prefix}"


def parse_s3_uri(uri: str) -> S3Location:
    """Parse and validate an S3 URI.

    Args:
        uri: URI in format ``s3://bucket`` or ``s3://bucket/prefix``.

    Returns:
        Parsed bucket and prefix pair. The prefix may be empty, which
        addresses the whole bucket.

    Raises:
        BucketTarConfigError: If the scheme or bucket name is missing.
    """
    if not uri.startswith(S3_URI_SCHEME):
        _raise_uri_error(uri, "expected the s3:// scheme")
    stripped_uri = uri.removeprefix(S3_URI_SCHEME)
    bucket, _, prefix = stripped_uri.partition("/")
    if not bucket:
        _raise_uri_error(uri, "bucket name is empty")
    return S3Location(bucket=bucket, prefix=prefix)


def _raise_uri_error(uri: str, reason: str) -> None:
    """Raise an invalid URI error.

    Args:
        uri: Invalid URI value.
        reason: Short description of the problem.

    Raises:
        BucketTarConfigError: Always.
    """
    raise BucketTarConfigError(
        f"Invalid S3 URI '{uri}': {reason}. "
        "Provide a URI of the form s3://bucketname/path/to/files."
    )
