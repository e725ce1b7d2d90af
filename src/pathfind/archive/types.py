"""Type definitions for archive operations.

Provides the dataclasses passed between the collection, building and
writing stages of an archive run.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pathfind.archive.naming import renamed_id
from pathfind.exceptions import StatsSchemaError

# Row 0 is the header; every other row is one lane (or one assembly).
StatsTable = list[list[Any]]


class ArchiveFormat(Enum):
    """Container formats an archive run can produce."""

    TAR = "tar"
    ZIP = "zip"


@dataclass(frozen=True)
class FileEntry:
    """A single file destined for an archive.

    Attributes:
        source_path: Absolute path of the file on disk
        archive_name: Name to use inside the archive. Straight out of
            collection this is the lane-edited name; the builder derives the
            final root-relative entry name from it.

    Example:
        >>> entry = FileEntry(
        ...     source_path="/data/10018_1#3/10018_1#3_1.fastq.gz",
        ...     archive_name="/data/10018_1#3/10018_1#3_1.fastq.gz",
        ... )
    """
    source_path: str
    archive_name: str


@dataclass
class CollectionResult:
    """Files and statistics gathered from a list of lanes."""
    files: list[FileEntry] = field(default_factory=list)
    stats: StatsTable = field(default_factory=list)


@dataclass(frozen=True)
class ArchiveRequest:
    """Resolved options for one run.

    Built once after argument parsing and read by every stage; nothing in
    the pipeline mutates it.

    Attributes:
        id: Logical ID searched for (lane name, sample, study...)
        formats: Archive formats to produce, in order
        tar_filename: Explicit tar output path, or None for the default
        zip_filename: Explicit zip output path, or None for the default
        compress_tar: gzip the tar archive
        rename: Convert hashes to underscores in archived file names
        force: Overwrite existing output files
        filetype: File type the lane search was restricted to, if any
        prefix: Prefix for default output filenames
        stats_filename: Write a standalone stats CSV here, if set
    """
    id: str
    formats: tuple[ArchiveFormat, ...] = ()
    tar_filename: Optional[Path] = None
    zip_filename: Optional[Path] = None
    compress_tar: bool = True
    rename: bool = False
    force: bool = False
    filetype: Optional[str] = None
    prefix: str = "pf"
    stats_filename: Optional[Path] = None

    @property
    def renamed_id(self) -> str:
        return renamed_id(self.id)

    def archive_filename(self, fmt: ArchiveFormat) -> Path:
        """Return the output path for the given format.

        Uses the explicit filename if one was given, otherwise builds
        ``<prefix>_<renamed id>.<ext>``.
        """
        if fmt is ArchiveFormat.TAR:
            if self.tar_filename is not None:
                return Path(self.tar_filename)
            ext = "tar.gz" if self.compress_tar else "tar"
        else:
            if self.zip_filename is not None:
                return Path(self.zip_filename)
            ext = "zip"
        return Path(f"{self.prefix}_{self.renamed_id}.{ext}")

    def output_paths(self) -> list[Path]:
        """Every file this run will write."""
        paths = [self.archive_filename(fmt) for fmt in self.formats]
        if self.stats_filename is not None:
            paths.append(Path(self.stats_filename))
        return paths


def validate_stats_table(table: StatsTable) -> StatsTable:
    """Check that every data row has as many fields as the header.

    Raises:
        StatsSchemaError: If a row is wider or narrower than the header
    """
    if not table:
        return table
    width = len(table[0])
    for i, row in enumerate(table[1:], start=1):
        if len(row) != width:
            raise StatsSchemaError(
                f"stats row {i} has {len(row)} fields; header has {width}"
            )
    return table


__all__ = [
    "StatsTable",
    "ArchiveFormat",
    "FileEntry",
    "CollectionResult",
    "ArchiveRequest",
    "validate_stats_table",
]
