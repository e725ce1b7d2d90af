"""Gather the files and statistics for a list of lanes."""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from pathfind.archive.types import CollectionResult, FileEntry
from pathfind.exceptions import PathFindError
from pathfind.lane import NameEditor
from pathfind.progress import ProgressFactory, make_progress

logger = logging.getLogger(__name__)


def collect_files(
    lanes: Sequence,
    filetype: Optional[str] = None,
    progress: Optional[ProgressFactory] = None,
) -> CollectionResult:
    """Collect (file, edited name) pairs and stats rows for the lanes.

    If the lanes weren't searched for a specific filetype, they only know
    their directory, so each one is asked to find its default type of
    data file here. Lanes that can edit names (see NameEditor) get to
    rename their files; everyone else's names pass through unchanged.

    The stats header comes from the first lane. All lanes in one run are
    assumed to share the same stats columns.

    Args:
        lanes: Lanes to collect from, in output order
        filetype: Filetype the lanes were already searched for, if any
        progress: Progress bar factory; one tick per lane

    Returns:
        CollectionResult with one FileEntry per file and the stats table

    Raises:
        PathFindError: If ``lanes`` is empty
    """
    if not lanes:
        raise PathFindError("no lanes to collect files from")

    progress = progress or make_progress
    files: list[FileEntry] = []
    stats = [list(lanes[0].stats_headers())]

    with progress("collecting files", len(lanes)) as pb:
        for lane in lanes:
            if filetype is None:
                lane.find_files(getattr(lane, "default_filetype", "fastq"))

            for path in lane.all_files():
                edited = lane.edit_name(path) if isinstance(lane, NameEditor) else path
                files.append(FileEntry(source_path=str(path), archive_name=str(edited)))

            stats.extend(list(row) for row in lane.stats())
            pb.update(1)

    logger.debug("collected %d files from %d lanes", len(files), len(lanes))
    return CollectionResult(files=files, stats=stats)


__all__ = ["collect_files"]
