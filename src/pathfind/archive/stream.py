"""Chunked gzip compression and overwrite-safe file writing.

Both operations walk the buffer in a fixed number of slices so that a
progress bar can advance while multi-gigabyte archives are processed.
"""
from __future__ import annotations

import contextlib
import gzip
import io
import logging
import math
import os
import tempfile
import zlib
from pathlib import Path
from typing import Iterator, Optional

from pathfind.exceptions import ArchiveWriteError, CompressionError, OverwriteError
from pathfind.progress import ProgressFactory, make_progress

logger = logging.getLogger(__name__)

NUM_CHUNKS = 100


class ChunkedBuffer:
    """Re-iterable sequence of fixed-size slices over a byte buffer.

    The slice size is ``ceil(len(data) / num_chunks) + pad``; the last
    slice is clipped to whatever remains. An empty buffer has no slices.
    Slices are memoryviews, so nothing is copied.
    """

    def __init__(self, data: bytes, num_chunks: int = NUM_CHUNKS, pad: int = 0) -> None:
        if num_chunks < 1:
            raise ValueError("num_chunks must be at least 1")
        self.data = data
        self.num_chunks = num_chunks
        self.chunk_size = math.ceil(len(data) / num_chunks) + pad

    def __iter__(self) -> Iterator[memoryview]:
        view = memoryview(self.data)
        for offset in range(0, len(view), max(self.chunk_size, 1)):
            yield view[offset : offset + self.chunk_size]

    def __len__(self) -> int:
        if not self.data:
            return 0
        return math.ceil(len(self.data) / self.chunk_size)


def iter_chunks(data: bytes, num_chunks: int = NUM_CHUNKS, pad: int = 0) -> Iterator[memoryview]:
    return iter(ChunkedBuffer(data, num_chunks, pad))


def compress_data(data: bytes, progress: Optional[ProgressFactory] = None) -> bytes:
    """gzip ``data``, feeding the encoder one chunk at a time.

    Args:
        data: Raw bytes (normally a serialised tar archive)
        progress: Progress bar factory; one tick per chunk

    Returns:
        The complete gzip stream. An empty input gives a valid gzip
        stream with an empty payload.

    Raises:
        CompressionError: If the encoder fails. No partial output is returned.
    """
    progress = progress or make_progress
    chunks = ChunkedBuffer(data)
    out = io.BytesIO()

    with progress("gzipping", len(chunks)) as pb:
        try:
            with gzip.GzipFile(fileobj=out, mode="wb") as gz:
                for chunk in chunks:
                    gz.write(chunk)
                    pb.update(1)
        except (OSError, ValueError, zlib.error) as exc:
            raise CompressionError(f"gzip compression failed: {exc}") from exc

    compressed = out.getvalue()
    logger.debug("compressed %d bytes to %d bytes", len(data), len(compressed))
    return compressed


def check_overwrite(path: str | Path, force: bool) -> None:
    """Refuse to go on if ``path`` exists and overwriting wasn't forced.

    Raises:
        ArchiveWriteError: If ``path`` is a directory, forced or not
        OverwriteError: If the file exists and ``force`` is False
    """
    path = Path(path)
    if path.is_dir():
        raise ArchiveWriteError(path, "destination is a directory")
    if not force and path.is_file():
        raise OverwriteError(path)


@contextlib.contextmanager
def atomic_output(destination: str | Path) -> Iterator[str]:
    """Yield a temporary path next to ``destination``.

    The temporary file is moved over ``destination`` when the block
    finishes cleanly and deleted if it raises, so a failed write never
    leaves a truncated file under the final name.
    """
    destination = Path(destination)
    umask = os.umask(0)
    os.umask(umask)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{destination.name}.", suffix=".tmp", dir=destination.parent
    )
    os.close(fd)
    try:
        yield tmp_name
        # mkstemp creates 0600 files; give the output the usual permissions
        os.chmod(tmp_name, 0o666 & ~umask)
        os.replace(tmp_name, destination)
    finally:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(tmp_name)


def write_data(
    data: bytes,
    destination: str | Path,
    force: bool = False,
    progress: Optional[ProgressFactory] = None,
) -> Path:
    """Write ``data`` to ``destination`` in chunks.

    Args:
        data: Bytes to write
        destination: Output file
        force: Replace an existing file
        progress: Progress bar factory; one tick per chunk

    Returns:
        The destination path

    Raises:
        OverwriteError: If the destination exists and ``force`` is False
        ArchiveWriteError: On any filesystem error
    """
    destination = Path(destination)
    check_overwrite(destination, force)

    progress = progress or make_progress
    chunks = ChunkedBuffer(data, pad=1)

    try:
        with atomic_output(destination) as tmp_name, open(tmp_name, "wb") as fh:
            with progress("writing", len(chunks)) as pb:
                for chunk in chunks:
                    fh.write(chunk)
                    pb.update(1)
    except OSError as exc:
        raise ArchiveWriteError(destination, exc.strerror or exc) from exc

    logger.debug("wrote %d bytes to %s", len(data), destination)
    return destination


__all__ = [
    "NUM_CHUNKS",
    "ChunkedBuffer",
    "iter_chunks",
    "compress_data",
    "check_overwrite",
    "atomic_output",
    "write_data",
]
