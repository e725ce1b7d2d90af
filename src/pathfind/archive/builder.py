"""In-memory tar and zip containers.

Files are added to a tar archive under their own (root-relative) paths
and then renamed in place to their final names, so a file whose rename
fails still ends up in the archive. Zip members are named up front.
"""
from __future__ import annotations

import io
import logging
import os
import tarfile
import zipfile
from pathlib import Path
from typing import Optional, Sequence

from pathfind.archive.naming import strip_root, to_archive_name
from pathfind.archive.types import FileEntry
from pathfind.exceptions import ArchiveBuildError
from pathfind.progress import ProgressFactory, make_progress

logger = logging.getLogger(__name__)

STATS_ENTRY = "stats.csv"


class TarContainer:
    """A tar archive held in memory until it's serialised.

    Members are staged as TarInfo headers so that they can be renamed
    after being added; file contents are read when ``to_bytes`` is called.
    """

    def __init__(self) -> None:
        self._buffer = io.BytesIO()
        self._tar = tarfile.open(fileobj=self._buffer, mode="w", dereference=True)
        self._members: list[tuple[tarfile.TarInfo, str]] = []
        self._index: dict[str, int] = {}
        self._closed = False

    def __len__(self) -> int:
        return len(self._members)

    def names(self) -> list[str]:
        return [info.name for info, _ in self._members]

    def add_file(self, source: str | Path, arcname: Optional[str] = None) -> bool:
        """Stage a file; stored as its root-relative path unless ``arcname`` is given."""
        source = str(source)
        if not os.path.isfile(source):
            logger.warning("couldn't add '%s' to archive; not a file", source)
            return False
        info = self._tar.gettarinfo(source, arcname=arcname or strip_root(source))
        if info.name in self._index:
            logger.warning("duplicate entry '%s' in archive", info.name)
        self._index[info.name] = len(self._members)
        self._members.append((info, source))
        return True

    def rename(self, old_name: str, new_name: str) -> bool:
        """Rename a staged entry. Returns False if ``old_name`` isn't there."""
        idx = self._index.pop(old_name, None)
        if idx is None:
            return False
        if new_name in self._index:
            logger.warning("duplicate entry '%s' in archive", new_name)
        self._members[idx][0].name = new_name
        self._index[new_name] = idx
        return True

    def sources(self) -> list[str]:
        """Source paths of the members that are (or will be) in the archive."""
        return [source for _, source in self._members]

    def to_bytes(self) -> bytes:
        """Write every staged member and return the finished archive.

        A staged file that can no longer be opened is left out with a
        warning, like one that was missing when it was added.

        Raises:
            ArchiveBuildError: If a file can't be read in full once opened,
                e.g. because it shrank after staging
        """
        if not self._closed:
            written = []
            for info, source in self._members:
                try:
                    fh = open(source, "rb")
                except OSError as exc:
                    logger.warning(
                        "couldn't read '%s'; leaving it out of the archive: %s",
                        source, exc.strerror or exc,
                    )
                    continue
                with fh:
                    try:
                        self._tar.addfile(info, fh)
                    except OSError as exc:
                        raise ArchiveBuildError(source, exc.strerror or exc) from exc
                written.append((info, source))

            self._members = written
            self._index = {info.name: i for i, (info, _) in enumerate(written)}
            self._tar.close()
            self._closed = True
        return self._buffer.getvalue()


class ZipContainer:
    """A list of zip members, written out in one go."""

    def __init__(self, compression: int = zipfile.ZIP_DEFLATED) -> None:
        self.compression = compression
        self._members: list[tuple[str, str]] = []
        self._names: set[str] = set()

    def __len__(self) -> int:
        return len(self._members)

    def names(self) -> list[str]:
        return [arcname for _, arcname in self._members]

    def add_file(self, source: str | Path, arcname: str) -> bool:
        source = str(source)
        if not os.path.isfile(source):
            logger.warning("couldn't add '%s' to archive; not a file", source)
            return False
        arcname = strip_root(arcname)
        if arcname in self._names:
            logger.warning("duplicate entry '%s' in archive", arcname)
        self._names.add(arcname)
        self._members.append((source, arcname))
        return True

    def sources(self) -> list[str]:
        return [source for source, _ in self._members]

    def write(self, path: str | Path) -> None:
        """Write the zip file; sources that can no longer be read are left out."""
        written = []
        with zipfile.ZipFile(path, "w", compression=self.compression) as z:
            for source, arcname in self._members:
                if not os.access(source, os.R_OK):
                    logger.warning("couldn't read '%s'; leaving it out of the archive", source)
                    continue
                z.write(source, arcname=arcname)
                written.append((source, arcname))
        self._members = written
        self._names = {arcname for _, arcname in written}


def build_tar(
    files: Sequence[FileEntry],
    stats_file: Optional[str | Path],
    folder_prefix: str,
    rename: bool = False,
    progress: Optional[ProgressFactory] = None,
) -> TarContainer:
    """Build an in-memory tar archive.

    Each file goes in under ``<folder_prefix>/<basename>``, the basename
    taken from the lane-edited name and hash-converted if ``rename`` is
    set. The stats file, if any, goes in as ``<folder_prefix>/stats.csv``.
    """
    progress = progress or make_progress
    tar = TarContainer()

    with progress("adding files", len(files)) as pb:
        for entry in files:
            if not tar.add_file(entry.source_path):
                pb.update(1)
                continue

            # entries are stored without the leading slash, so look them up that way
            trimmed = strip_root(entry.source_path)
            new_name = to_archive_name(entry.archive_name, folder_prefix, rename)

            if not tar.rename(trimmed, new_name):
                logger.warning("couldn't rename '%s' in archive", trimmed)
            pb.update(1)

    if stats_file is not None:
        tar.add_file(stats_file, arcname=f"{strip_root(folder_prefix)}/{STATS_ENTRY}")

    return tar


def build_zip(
    files: Sequence[FileEntry],
    stats_file: Optional[str | Path],
    folder_prefix: str,
    rename: bool = False,
    progress: Optional[ProgressFactory] = None,
) -> ZipContainer:
    """Build a zip archive description; naming follows ``build_tar``."""
    progress = progress or make_progress
    zip_ = ZipContainer()

    with progress("adding files", len(files)) as pb:
        for entry in files:
            zip_.add_file(entry.source_path, to_archive_name(entry.archive_name, folder_prefix, rename))
            pb.update(1)

    if stats_file is not None:
        zip_.add_file(stats_file, f"{strip_root(folder_prefix)}/{STATS_ENTRY}")

    return zip_


__all__ = ["STATS_ENTRY", "TarContainer", "ZipContainer", "build_tar", "build_zip"]
