"""Object store access for namespace walks.

This module defines the listing/fetch interface the walker depends on
and its boto3-backed S3 implementation.
"""

from __future__ import annotations

from typing import Any, Protocol

import boto3
from botocore.config import Config

from core.config import ArchiverConfig
from core.types import ListedKey, ListingPage


class ObjectStoreClient(Protocol):
    """Read-only object store used by the walker and fetchers.

    Implementations must be safe for concurrent ``get`` calls.
    """

    def list(
        self,
        prefix: str,
        delimiter: str,
        token: str | None,
        max_keys: int,
    ) -> ListingPage:
        """List one page of leaves and common prefixes under ``prefix``."""
        ...

    def get(self, key: str) -> bytes:
        """Fetch the full payload of one key."""
        ...


class S3ObjectStore:
    """Object store client backed by a boto3 S3 client."""

    def __init__(self, s3_client: Any, bucket: str) -> None:
        self._s3_client = s3_client
        self._bucket = bucket

    @property
    def bucket(self) -> str:
        """Bucket name all keys are resolved against."""
        return self._bucket

    @classmethod
    def from_config(cls, config: ArchiverConfig, bucket: str) -> "S3ObjectStore":
        """Build a store for ``bucket`` from runtime config."""
        return cls(create_s3_client(config), bucket)

    def list(
        self,
        prefix: str,
        delimiter: str,
        token: str | None,
        max_keys: int,
    ) -> ListingPage:
        """List one page via ``list_objects_v2``.

        Args:
            prefix: Key prefix to list.
            delimiter: Grouping delimiter for common prefixes.
            token: Continuation token from a previous truncated page.
            max_keys: Page size cap.

        Returns:
            Parsed listing page.
        """
        request: dict[str, Any] = {
            "Bucket": self._bucket,
            "Prefix": prefix,
            "Delimiter": delimiter,
            "MaxKeys": max_keys,
        }
        if token:
            request["ContinuationToken"] = token
        response = self._s3_client.list_objects_v2(**request)
        leaf_keys = tuple(
            ListedKey(
                key=item["Key"],
                size=int(item.get("Size", 0)),
                last_modified=item["LastModified"],
            )
            for item in response.get("Contents", [])
        )
        common_prefixes = tuple(item["Prefix"] for item in response.get("CommonPrefixes", []))
        return ListingPage(
            leaf_keys=leaf_keys,
            common_prefixes=common_prefixes,
            truncated=bool(response.get("IsTruncated", False)),
            next_token=response.get("NextContinuationToken"),
        )

    def get(self, key: str) -> bytes:
        """Fetch one object body via ``get_object``."""
        response = self._s3_client.get_object(Bucket=self._bucket, Key=key)
        body = response["Body"]
        try:
            return body.read()
        finally:
            body.close()


def create_s3_client(config: ArchiverConfig) -> Any:
    """Create a boto3 S3 client for concurrent fetches.

    Args:
        config: Runtime config with session, endpoint and deadline settings.

    Returns:
        Boto3 S3 client whose connection pool fits the fetch worker bound.
    """
    session = boto3.session.Session(**_build_boto3_session_kwargs(config))
    client_config = Config(
        connect_timeout=config.connect_timeout_seconds,
        read_timeout=config.read_timeout_seconds,
        max_pool_connections=config.max_fetch_workers,
    )
    client_kwargs: dict[str, Any] = {"config": client_config}
    if config.s3_endpoint_url:
        client_kwargs["endpoint_url"] = config.s3_endpoint_url
    return session.client("s3", **client_kwargs)


def _build_boto3_session_kwargs(config: ArchiverConfig) -> dict[str, str]:
    """Build boto3 Session kwargs from config.

    Args:
        config: Runtime config.

    Returns:
        Session keyword arguments.
    """
    kwargs: dict[str, str] = {}
    if config.s3_profile:
        kwargs["profile_name"] = config.s3_profile
    if config.s3_region:
        kwargs["region_name"] = config.s3_region
    return kwargs
