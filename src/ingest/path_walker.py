"""Recursive namespace traversal.

This module walks an object store prefix depth-first, one delimited
listing per level, and hands each level's leaves to a level fetcher.
"""

from __future__ import annotations

from typing import Any, Iterator

import humanize

from core.constants import DEFAULT_LIST_PAGE_SIZE, KEY_DELIMITER
from core.errors import BucketTarLevelError, BucketTarListingError
from core.logging_config import get_logger
from core.types import FetchedObject, ListedKey, NamespaceLevel
from ingest.level_fetcher import LevelFetcher
from ingest.object_store import ObjectStoreClient


class PathWalker:
    """Depth-first, pre-order walker over delimiter-grouped prefixes."""

    def __init__(
        self,
        store: ObjectStoreClient,
        fetcher: LevelFetcher,
        page_size: int = DEFAULT_LIST_PAGE_SIZE,
        logger: Any | None = None,
    ) -> None:
        self._store = store
        self._fetcher = fetcher
        self._page_size = page_size
        self._logger = logger or get_logger(__name__)

    def walk(self, root: str, current_path: str | None = None) -> list[FetchedObject]:
        """Fetch every object under ``current_path``, named relative to ``root``.

        Args:
            root: Traversal root used for relative names.
            current_path: Path to start from; defaults to ``root``.

        Returns:
            All fetched objects. Each level's leaves precede its children's.

        Raises:
            BucketTarListingError: If any level cannot be listed.
            BucketTarLevelError: If any level has fetch failures.
        """
        fetched_objects: list[FetchedObject] = []
        for level_objects in self.iter_levels(root, current_path):
            fetched_objects.extend(level_objects)
        return fetched_objects

    def iter_levels(
        self,
        root: str,
        current_path: str | None = None,
        depth: int = 0,
    ) -> Iterator[list[FetchedObject]]:
        """Yield each level's fetched objects in depth-first pre-order.

        A level is yielded only after all of its fetches have joined, and
        its child prefixes are listed only after it has been yielded.
        """
        path = root if current_path is None else current_path
        level = self.list_level(path)
        self._log_level(level, depth)
        try:
            level_objects = self._fetcher.fetch_all(root, level.leaf_keys)
        except BucketTarLevelError as error:
            raise BucketTarLevelError(error.failures, path=path) from error
        yield level_objects
        for child_prefix in level.child_prefixes:
            yield from self.iter_levels(root, child_prefix, depth + 1)

    def list_level(self, path: str) -> NamespaceLevel:
        """List all leaves and child prefixes directly under ``path``.

        Truncated listings are paged through until complete.

        Raises:
            BucketTarListingError: If a listing call fails or returns a child
                prefix that does not extend ``path``.
        """
        leaf_keys: list[ListedKey] = []
        child_prefixes: list[str] = []
        token: str | None = None
        while True:
            try:
                page = self._store.list(path, KEY_DELIMITER, token, self._page_size)
            except Exception as error:
                raise BucketTarListingError(
                    f"couldn't list bucket at path '{path}': {error}"
                ) from error
            leaf_keys.extend(
                listed_key for listed_key in page.leaf_keys if not _is_directory_marker(listed_key)
            )
            child_prefixes.extend(page.common_prefixes)
            if not page.truncated:
                break
            if not page.next_token:
                raise BucketTarListingError(
                    f"couldn't list bucket at path '{path}': truncated page without a "
                    "continuation token"
                )
            token = page.next_token
        _validate_child_prefixes(path, child_prefixes)
        return NamespaceLevel(
            path=path,
            leaf_keys=tuple(leaf_keys),
            child_prefixes=tuple(child_prefixes),
        )

    def _log_level(self, level: NamespaceLevel, depth: int) -> None:
        for listed_key in level.leaf_keys:
            self._logger.debug(
                "key_listed",
                key=listed_key.key,
                size=humanize.naturalsize(listed_key.size),
                depth=depth,
            )
        self._logger.info(
            "level_listed",
            path=level.path,
            depth=depth,
            keys=len(level.leaf_keys),
            total_size=humanize.naturalsize(level.total_size),
            folders=list(level.child_prefixes),
        )


def _is_directory_marker(listed_key: ListedKey) -> bool:
    """Return whether a key is a zero-payload folder placeholder."""
    return listed_key.key.endswith(KEY_DELIMITER) and listed_key.size == 0


def _validate_child_prefixes(path: str, child_prefixes: list[str]) -> None:
    """Reject child prefixes that would not make the walk progress."""
    for child_prefix in child_prefixes:
        if len(child_prefix) <= len(path) or not child_prefix.startswith(path):
            raise BucketTarListingError(
                f"couldn't list bucket at path '{path}': child prefix '{child_prefix}' "
                "does not extend the listed path"
            )
