"""Concurrent fetch of one namespace level.

This module fetches every leaf key of a level on a bounded thread pool
and either returns all objects or fails the whole level.
"""

from __future__ import annotations

from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from datetime import datetime, timezone
import re
import time
from typing import Any, Sequence

import humanize

from core.constants import DEFAULT_MAX_FETCH_WORKERS, KEY_DELIMITER
from core.errors import BucketTarFetchError, BucketTarLevelError
from core.logging_config import get_logger
from core.types import FetchedObject, ListedKey
from ingest.object_store import ObjectStoreClient

_RFC3339_PATTERN = re.compile(
    r"(?P<date>\d{4}-\d{2}-\d{2})[Tt](?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?(?P<offset>[Zz]|[+-]\d{2}:\d{2})"
)
_INVALID_NAME_SEGMENTS = frozenset({"", ".", ".."})


class LevelFetcher:
    """Fetch all leaf keys of one level, aggregate-or-fail."""

    def __init__(
        self,
        store: ObjectStoreClient,
        max_workers: int = DEFAULT_MAX_FETCH_WORKERS,
        fail_fast: bool = True,
        logger: Any | None = None,
    ) -> None:
        self._store = store
        self._max_workers = max_workers
        self._fail_fast = fail_fast
        self._logger = logger or get_logger(__name__)

    def fetch_all(self, root: str, keys: Sequence[ListedKey]) -> list[FetchedObject]:
        """Fetch ``keys`` concurrently and name them relative to ``root``.

        Args:
            root: Traversal root used for relative object names.
            keys: Leaf keys of one level.

        Returns:
            Fetched objects sorted by relative name.

        Raises:
            BucketTarLevelError: If any key fails to fetch. Objects fetched
                successfully at the same level are discarded.
        """
        if not keys:
            return []
        started_at = time.monotonic()
        worker_count = min(self._max_workers, len(keys))
        executor = ThreadPoolExecutor(max_workers=worker_count, thread_name_prefix="fetch")
        try:
            futures = [executor.submit(self._fetch_one, root, listed_key) for listed_key in keys]
            if self._fail_fast:
                _, not_done = wait(futures, return_when=FIRST_EXCEPTION)
                for future in not_done:
                    future.cancel()
        finally:
            executor.shutdown(wait=True)
        fetched_objects, failures = _collect_results(futures)
        if failures:
            self._logger.error("level_fetch_failed", root=root, failed=len(failures))
            raise BucketTarLevelError(failures)
        fetched_objects.sort(key=lambda fetched: fetched.name)
        self._logger.info(
            "level_fetched",
            root=root,
            objects=len(fetched_objects),
            workers=worker_count,
            elapsed_seconds=round(time.monotonic() - started_at, 3),
        )
        return fetched_objects

    def _fetch_one(self, root: str, listed_key: ListedKey) -> FetchedObject:
        """Fetch one key and build its fetched object."""
        last_modified = parse_last_modified(listed_key.last_modified)
        name = relative_object_name(root, listed_key.key)
        started_at = time.monotonic()
        try:
            data = self._store.get(listed_key.key)
        except Exception as error:
            raise BucketTarFetchError(f"failed fetch of '{listed_key.key}': {error}") from error
        self._logger.debug(
            "object_fetched",
            name=name,
            key=listed_key.key,
            size=humanize.naturalsize(len(data)),
            elapsed_seconds=round(time.monotonic() - started_at, 3),
        )
        return FetchedObject(name=name, data=data, last_modified=last_modified)


def relative_object_name(root: str, key: str) -> str:
    """Compute the archive name of ``key`` relative to the traversal root.

    Args:
        root: Traversal root prefix; empty for the whole bucket.
        key: Fully-qualified object key.

    Returns:
        Forward-slash separated relative name.

    Raises:
        BucketTarFetchError: If the key does not lie strictly under ``root``,
            or its relative name has an empty, ``.`` or ``..`` segment.
    """
    base = root.rstrip(KEY_DELIMITER)
    if not base:
        name = key
    elif key.startswith(base + KEY_DELIMITER):
        name = key[len(base) + 1 :]
    else:
        name = ""
    if not name.strip(KEY_DELIMITER):
        raise BucketTarFetchError(
            f"failed to find relative path for '{key}': key is not under root '{root}'"
        )
    if any(segment in _INVALID_NAME_SEGMENTS for segment in name.split(KEY_DELIMITER)):
        raise BucketTarFetchError(
            f"failed to find relative path for '{key}': name '{name}' has an empty, "
            "'.' or '..' segment"
        )
    return name


def parse_last_modified(value: datetime | str) -> datetime:
    """Parse a store-reported modification time.

    Args:
        value: Datetime from boto3, or an RFC 3339 string with a ``T``
            separator and a ``Z`` or ``+HH:MM`` offset. Naive datetimes are UTC.

    Returns:
        Timezone-aware datetime.

    Raises:
        BucketTarFetchError: If the string form is malformed.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    match = _RFC3339_PATTERN.fullmatch(value) if isinstance(value, str) else None
    if match is None:
        raise BucketTarFetchError(f"failed to parse time of '{value}': not an RFC 3339 timestamp")
    # Nanosecond fractions are truncated to the microseconds datetime can hold.
    fraction = (match.group("fraction") or "")[:6].ljust(6, "0")
    offset = match.group("offset").upper().replace("Z", "+00:00")
    try:
        return datetime.fromisoformat(
            f"{match.group('date')}T{match.group('time')}.{fraction}{offset}"
        )
    except ValueError as error:
        raise BucketTarFetchError(f"failed to parse time of '{value}': {error}") from error


def _collect_results(
    futures: list[Future[FetchedObject]],
) -> tuple[list[FetchedObject], list[str]]:
    """Split finished futures into fetched objects and failure messages."""
    fetched_objects: list[FetchedObject] = []
    failures: list[str] = []
    for future in futures:
        if future.cancelled():
            continue
        error = future.exception()
        if error is None:
            fetched_objects.append(future.result())
        else:
            failures.append(str(error))
    return fetched_objects, failures
