"""Streaming gzip stage for tar archives."""

from __future__ import annotations

import gzip
import shutil
from typing import Any, BinaryIO

from core.constants import DEFAULT_COMPRESSION_LEVEL
from core.errors import BucketTarCompressionError

_COPY_CHUNK_SIZE = 1024 * 1024


class GzipCompressor:
    """Writable gzip stream over a binary destination.

    The gzip header carries no file name and a zero mtime, so equal
    input bytes always compress to equal output bytes.
    """

    def __init__(
        self,
        destination: BinaryIO | Any,
        level: int = DEFAULT_COMPRESSION_LEVEL,
    ) -> None:
        self._gzip_file = gzip.GzipFile(
            filename="",
            mode="wb",
            compresslevel=level,
            fileobj=destination,
            mtime=0,
        )
        self.bytes_in = 0

    def write(self, data: bytes) -> int:
        """Compress and forward ``data``.

        Raises:
            BucketTarCompressionError: If the gzip stream rejects the write.
        """
        try:
            written = self._gzip_file.write(data)
        except (OSError, ValueError) as error:
            raise BucketTarCompressionError(
                f"writing tared objects to gzip stream, {error}"
            ) from error
        self.bytes_in += written
        return written

    def close(self) -> None:
        """Flush the compressor and write the gzip trailer.

        Raises:
            BucketTarCompressionError: If the trailer cannot be written.
        """
        try:
            self._gzip_file.close()
        except (OSError, ValueError) as error:
            raise BucketTarCompressionError(f"closing gzip stream, {error}") from error


def compress_stream(
    source: BinaryIO,
    destination: BinaryIO | Any,
    level: int = DEFAULT_COMPRESSION_LEVEL,
) -> int:
    """Compress a complete archive stream into ``destination``.

    Args:
        source: Readable archive bytes.
        destination: Binary sink for gzip output.
        level: Gzip compression level.

    Returns:
        Number of uncompressed bytes consumed.
    """
    compressor = GzipCompressor(destination, level)
    shutil.copyfileobj(source, compressor, _COPY_CHUNK_SIZE)
    compressor.close()
    return compressor.bytes_in
