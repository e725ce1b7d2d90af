"""Run the archive pipeline: collect, build, compress, write, report.

Tar and zip runs share the same steps and differ only in how the
finished container gets to disk:

- tar: serialise in memory, gzip unless told not to, write in chunks
- zip: let zipfile write (and compress) each member itself
"""
from __future__ import annotations

import logging
import sys
import tempfile
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Sequence, TextIO

from pathfind.archive.builder import STATS_ENTRY, TarContainer, ZipContainer, build_tar, build_zip
from pathfind.archive.collect import collect_files
from pathfind.archive.stats import stats_to_csv, write_stats_csv
from pathfind.archive.stream import atomic_output, check_overwrite, compress_data, write_data
from pathfind.archive.types import ArchiveFormat, ArchiveRequest
from pathfind.exceptions import ArchiveWriteError
from pathfind.progress import ProgressFactory, make_progress

logger = logging.getLogger(__name__)


def _write_tar(
    container: TarContainer,
    destination: Path,
    request: ArchiveRequest,
    progress: ProgressFactory,
) -> None:
    # serialising can't report progress, so just say what's going on
    logger.info("Building tar file...")
    output = container.to_bytes()

    if request.compress_tar:
        output = compress_data(output, progress=progress)

    write_data(output, destination, force=request.force, progress=progress)


def _write_zip(
    container: ZipContainer,
    destination: Path,
    request: ArchiveRequest,
    progress: ProgressFactory,
) -> None:
    check_overwrite(destination, request.force)
    logger.info("Writing zip file...")

    try:
        with atomic_output(destination) as tmp_name:
            container.write(tmp_name)
    except (OSError, zipfile.BadZipFile, ValueError) as exc:
        raise ArchiveWriteError(destination, f"error while writing zip file: {exc}") from exc


@dataclass(frozen=True)
class ArchiveStrategy:
    """How one archive format is built and written."""
    fmt: ArchiveFormat
    build: Callable[..., Any]
    write: Callable[[Any, Path, ArchiveRequest, ProgressFactory], None]


STRATEGIES: dict[ArchiveFormat, ArchiveStrategy] = {
    ArchiveFormat.TAR: ArchiveStrategy(ArchiveFormat.TAR, build_tar, _write_tar),
    ArchiveFormat.ZIP: ArchiveStrategy(ArchiveFormat.ZIP, build_zip, _write_zip),
}


def check_outputs(request: ArchiveRequest) -> None:
    """Fail fast if any output file would be overwritten.

    Uses the same check as the writers, on the same paths, so the early
    answer and the write-time answer agree.
    """
    for path in request.output_paths():
        check_overwrite(path, request.force)


def make_archive(
    request: ArchiveRequest,
    lanes: Sequence,
    fmt: ArchiveFormat,
    out: Optional[TextIO] = None,
    progress: Optional[ProgressFactory] = None,
) -> list[str]:
    """Archive the data files for ``lanes`` in the given format.

    The stats CSV lives in a temporary directory that is removed when
    the archive has been written, whether or not that worked.

    Returns:
        The manifest printed to ``out``: one source path per archived
        file, then ``stats.csv``
    """
    out = out or sys.stdout
    progress = progress or make_progress
    strategy = STRATEGIES[fmt]
    archive_filename = request.archive_filename(fmt)

    logger.info("Archiving data to '%s'", archive_filename)

    result = collect_files(lanes, filetype=request.filetype, progress=progress)

    with tempfile.TemporaryDirectory(prefix="pathfind_") as temp_dir:
        stats_file = None
        if result.stats:
            stats_file = write_stats_csv(result.stats, Path(temp_dir) / STATS_ENTRY)

        container = strategy.build(
            result.files,
            stats_file,
            request.renamed_id,
            rename=request.rename,
            progress=progress,
        )
        strategy.write(container, archive_filename, request, progress)

    # only list what made it into the archive
    archived = set(container.sources())
    manifest = [entry.source_path for entry in result.files if entry.source_path in archived]

    # the temp dir is gone now, so list the stats file by its archive name
    if stats_file is not None and str(stats_file) in archived:
        manifest.append(STATS_ENTRY)

    for line in manifest:
        print(line, file=out)
    return manifest


def make_stats(
    request: ArchiveRequest,
    lanes: Sequence,
    progress: Optional[ProgressFactory] = None,
) -> Path:
    """Write the lanes' statistics to ``request.stats_filename``."""
    if request.stats_filename is None:
        raise ValueError("no stats filename in request")
    result = collect_files(lanes, filetype=request.filetype, progress=progress)
    csv_text = stats_to_csv(result.stats)
    path = write_data(
        csv_text.encode("utf-8"), request.stats_filename, force=request.force, progress=progress
    )
    logger.info("Wrote statistics to '%s'", path)
    return path


def run_archives(
    request: ArchiveRequest,
    lanes: Sequence,
    out: Optional[TextIO] = None,
    progress: Optional[ProgressFactory] = None,
) -> dict[ArchiveFormat, list[str]]:
    """Produce every output the request asks for.

    Checks all output paths before touching any lane, then builds each
    archive format in turn and finally the standalone stats file.

    Returns:
        Manifest for each archive format written
    """
    check_outputs(request)

    manifests = {}
    for fmt in request.formats:
        manifests[fmt] = make_archive(request, lanes, fmt, out=out, progress=progress)

    if request.stats_filename is not None:
        make_stats(request, lanes, progress=progress)

    return manifests


__all__ = [
    "ArchiveStrategy",
    "STRATEGIES",
    "check_outputs",
    "make_archive",
    "make_stats",
    "run_archives",
]
