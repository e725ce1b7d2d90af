"""Archive tooling for found lanes.

Collects the data files for a set of lanes and packages them, with a
stats.csv, into a tar (optionally gzipped) or zip archive.

Example:
    >>> from pathfind.archive import ArchiveFormat, ArchiveRequest, run_archives
    >>> request = ArchiveRequest(id="10018_1", formats=(ArchiveFormat.TAR,))
    >>> manifests = run_archives(request, lanes)
"""
from pathfind.archive.types import (
    ArchiveFormat,
    ArchiveRequest,
    CollectionResult,
    FileEntry,
    StatsTable,
    validate_stats_table,
)
from pathfind.archive.naming import (
    renamed_id,
    strip_root,
    to_archive_name,
    to_posix,
)
from pathfind.archive.stream import (
    NUM_CHUNKS,
    ChunkedBuffer,
    atomic_output,
    check_overwrite,
    compress_data,
    iter_chunks,
    write_data,
)
from pathfind.archive.collect import collect_files
from pathfind.archive.builder import (
    STATS_ENTRY,
    TarContainer,
    ZipContainer,
    build_tar,
    build_zip,
)
from pathfind.archive.stats import stats_to_csv, write_stats_csv
from pathfind.archive.orchestrator import (
    STRATEGIES,
    ArchiveStrategy,
    check_outputs,
    make_archive,
    make_stats,
    run_archives,
)

__all__ = [
    # Types
    "ArchiveFormat",
    "ArchiveRequest",
    "CollectionResult",
    "FileEntry",
    "StatsTable",
    "validate_stats_table",
    # Naming
    "renamed_id",
    "strip_root",
    "to_archive_name",
    "to_posix",
    # Compression and writing
    "NUM_CHUNKS",
    "ChunkedBuffer",
    "atomic_output",
    "check_overwrite",
    "compress_data",
    "iter_chunks",
    "write_data",
    # Collection and building
    "collect_files",
    "STATS_ENTRY",
    "TarContainer",
    "ZipContainer",
    "build_tar",
    "build_zip",
    "stats_to_csv",
    "write_stats_csv",
    # Orchestration
    "STRATEGIES",
    "ArchiveStrategy",
    "check_outputs",
    "make_archive",
    "make_stats",
    "run_archives",
]
