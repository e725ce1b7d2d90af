"""Archive entry naming.

Archive entries are root-relative, forward-slash paths under a single
folder named after the search ID.
"""
from __future__ import annotations

import logging
from pathlib import PurePath, PurePosixPath

logger = logging.getLogger(__name__)


def renamed_id(id_: str) -> str:
    """Convert hashes to underscores in an ID, e.g. ``10018_1#3`` -> ``10018_1_3``."""
    return id_.replace("#", "_")


def to_posix(path: str | PurePath) -> str:
    """Return ``path`` in forward-slash form, whatever the host convention."""
    return PurePath(path).as_posix()


def strip_root(path: str | PurePath) -> str:
    """Drop leading slashes; tar and zip store entries relative to the root."""
    return to_posix(path).lstrip("/")


def to_archive_name(
    source_path: str | PurePath,
    folder_prefix: str,
    rename_enabled: bool = False,
) -> str:
    """Build the in-archive name for a file.

    Takes the basename of ``source_path``, replaces ``#`` with ``_`` if
    ``rename_enabled`` is set, and puts the result under ``folder_prefix``.

    Args:
        source_path: Path (or lane-edited name) of the file
        folder_prefix: Top-level folder inside the archive
        rename_enabled: Convert hashes to underscores in the basename

    Returns:
        Root-relative, forward-slash archive name

    Example:
        >>> to_archive_name("/data/10018_1#3/10018_1#3.fastq", "10018_1", True)
        '10018_1/10018_1_3.fastq'
    """
    basename = PurePath(source_path).name
    if rename_enabled:
        basename = basename.replace("#", "_")

    new_name = strip_root(PurePosixPath(to_posix(folder_prefix), basename))

    logger.debug("renaming |%s| to |%s|", to_posix(source_path), new_name)
    return new_name


__all__ = ["renamed_id", "to_posix", "strip_root", "to_archive_name"]
