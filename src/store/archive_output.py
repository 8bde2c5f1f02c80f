"""Archive destinations.

This module persists archives all-or-nothing: bytes stream into a
temporary sibling file that only replaces the destination on commit.
It also provides the discarding sink used by the benchmark.
"""

from __future__ import annotations

import os
from pathlib import Path
import tempfile
from typing import Any

from core.constants import DEFAULT_FILE_MODE, TEMP_ARCHIVE_PREFIX, TEMP_ARCHIVE_SUFFIX
from core.errors import BucketTarPersistError


class AtomicArchiveFile:
    """Writable destination that appears at ``path`` only after commit."""

    def __init__(self, path: str | Path, file_mode: int = DEFAULT_FILE_MODE) -> None:
        self.path = Path(path).expanduser()
        self._file_mode = file_mode
        self._handle: Any = None
        self._temp_path: Path | None = None
        self._committed = False
        self._discarded = False
        self.bytes_written = 0

    def __enter__(self) -> "AtomicArchiveFile":
        self.open()
        return self

    def __exit__(self, exc_type: Any, exc: Any, traceback: Any) -> None:
        if not self._committed:
            self.discard()

    def open(self) -> None:
        """Create the temporary file next to the destination.

        Raises:
            BucketTarPersistError: If the destination directory is not writable.
        """
        try:
            file_descriptor, temp_name = tempfile.mkstemp(
                prefix=TEMP_ARCHIVE_PREFIX,
                suffix=TEMP_ARCHIVE_SUFFIX,
                dir=self.path.parent,
            )
        except OSError as error:
            raise self._persist_error(error) from error
        self._temp_path = Path(temp_name)
        self._handle = os.fdopen(file_descriptor, "wb")

    def write(self, data: bytes) -> int:
        """Append bytes to the temporary file.

        Bytes written after ``discard`` are dropped, so encoders
        finalized during cleanup cannot touch the removed file.

        Raises:
            BucketTarPersistError: If the write fails.
        """
        if self._discarded:
            return len(data)
        try:
            written = self._handle.write(data)
        except OSError as error:
            raise self._persist_error(error) from error
        self.bytes_written += written
        return written

    def flush(self) -> None:
        """Flush buffered bytes to the temporary file."""
        if self._discarded:
            return
        try:
            self._handle.flush()
        except OSError as error:
            raise self._persist_error(error) from error

    def commit(self) -> Path:
        """Sync the temporary file and move it onto the destination.

        Returns:
            Final destination path.

        Raises:
            BucketTarPersistError: If syncing or renaming fails.
        """
        try:
            self._handle.flush()
            os.fsync(self._handle.fileno())
            self._handle.close()
            os.chmod(self._temp_path, self._file_mode)
            os.replace(self._temp_path, self.path)
        except OSError as error:
            raise self._persist_error(error) from error
        self._committed = True
        return self.path

    def discard(self) -> None:
        """Close and remove the temporary file, leaving the destination untouched."""
        self._discarded = True
        if self._handle is not None and not self._handle.closed:
            self._handle.close()
        if self._temp_path is not None:
            self._temp_path.unlink(missing_ok=True)

    def _persist_error(self, error: OSError) -> BucketTarPersistError:
        return BucketTarPersistError(
            f"writing tar/gzip archive to '{self.path}', {error}. "
            "Check that the destination directory exists and is writable."
        )


class DiscardSink:
    """Binary sink that drops bytes and counts them."""

    def __init__(self) -> None:
        self.bytes_written = 0

    def write(self, data: bytes) -> int:
        self.bytes_written += len(data)
        return len(data)

    def flush(self) -> None:
        return None
