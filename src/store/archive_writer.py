"""Tar encoding of fetched objects.

This module serializes fetched objects into a streaming PAX tar archive.
Header and payload writes are separate failure points per entry.
"""

from __future__ import annotations

from datetime import datetime, timezone
import io
import os
import tarfile
from typing import Any, BinaryIO, Iterable

from core.constants import DEFAULT_FILE_MODE
from core.errors import BucketTarArchiveError
from core.logging_config import get_logger
from core.types import FetchedObject

_TAR_FORMAT = tarfile.PAX_FORMAT
_TAR_ENCODING = "utf-8"
_TAR_ERRORS = "surrogateescape"


def build_tar_info(
    fetched: FetchedObject,
    now: datetime | None = None,
    file_mode: int = DEFAULT_FILE_MODE,
) -> tarfile.TarInfo:
    """Derive the tar header of one fetched object.

    Args:
        fetched: Object to describe.
        now: Access time to record; defaults to the current time.
        file_mode: Permission bits for the entry.

    Returns:
        Regular-file tar header owned by the effective uid/gid.
    """
    access_time = now or datetime.now(timezone.utc)
    modified_seconds = int(fetched.last_modified.timestamp())
    tar_info = tarfile.TarInfo(name=fetched.name)
    tar_info.size = fetched.size
    tar_info.mode = file_mode
    tar_info.mtime = modified_seconds
    tar_info.type = tarfile.REGTYPE
    tar_info.uid = os.geteuid()
    tar_info.gid = os.getegid()
    tar_info.pax_headers = {
        "atime": str(int(access_time.timestamp())),
        "ctime": str(modified_seconds),
    }
    return tar_info


class TarArchiveWriter:
    """Streaming tar writer over a binary sink."""

    def __init__(
        self,
        stream: BinaryIO | Any,
        file_mode: int = DEFAULT_FILE_MODE,
        logger: Any | None = None,
    ) -> None:
        self._file_mode = file_mode
        self._logger = logger or get_logger(__name__)
        self._tar = tarfile.open(
            fileobj=stream,
            mode="w|",
            format=_TAR_FORMAT,
            encoding=_TAR_ENCODING,
            errors=_TAR_ERRORS,
        )
        self.entry_count = 0
        self.payload_bytes = 0

    def __enter__(self) -> "TarArchiveWriter":
        return self

    def __exit__(self, exc_type: Any, exc: Any, traceback: Any) -> None:
        if exc_type is None:
            self.close()

    def add(self, fetched: FetchedObject) -> None:
        """Append one header+payload entry.

        Raises:
            BucketTarArchiveError: If the header cannot be encoded or the
                entry cannot be written.
        """
        tar_info = build_tar_info(fetched, file_mode=self._file_mode)
        try:
            tar_info.tobuf(_TAR_FORMAT, _TAR_ENCODING, _TAR_ERRORS)
        except (ValueError, tarfile.TarError) as error:
            raise BucketTarArchiveError(
                f"writing header of '{fetched.name}', {error}"
            ) from error
        try:
            self._tar.addfile(tar_info, io.BytesIO(fetched.data))
        except (OSError, ValueError, tarfile.TarError) as error:
            raise BucketTarArchiveError(
                f"writing content of '{fetched.name}', {error}"
            ) from error
        self.entry_count += 1
        self.payload_bytes += fetched.size

    def add_all(self, objects: Iterable[FetchedObject]) -> None:
        """Append entries in iteration order."""
        for fetched in objects:
            self.add(fetched)

    def close(self) -> None:
        """Write the terminator blocks and record padding.

        Raises:
            BucketTarArchiveError: If the archive cannot be finalized.
        """
        try:
            self._tar.close()
        except (OSError, ValueError, tarfile.TarError) as error:
            raise BucketTarArchiveError(f"closing tar archive, {error}") from error
        self._logger.debug(
            "tar_closed", entries=self.entry_count, payload_bytes=self.payload_bytes
        )


def write_archive(stream: BinaryIO | Any, entries: Iterable[FetchedObject]) -> int:
    """Write ``entries`` as one complete tar archive.

    Args:
        stream: Binary sink receiving the archive bytes.
        entries: Objects in archive order.

    Returns:
        Number of entries written.

    Raises:
        BucketTarArchiveError: On any header, payload, or finalize failure.
    """
    writer = TarArchiveWriter(stream)
    writer.add_all(entries)
    writer.close()
    return writer.entry_count
