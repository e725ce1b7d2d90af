# src/pathfind/exceptions.py
from __future__ import annotations

from pathlib import Path


class PathFindError(Exception):
    """Base class for all pathfind errors."""

    pass


class ConfigError(PathFindError):
    """Raised for missing or invalid configuration."""

    pass


class OverwriteError(PathFindError):
    """Raised when an output file exists and overwriting was not forced."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(
            f'output file "{self.path}" already exists; not overwriting. '
            'Use "-F" to force overwriting'
        )


class ArchiveWriteError(PathFindError):
    """Raised when an archive or data file cannot be written."""

    def __init__(self, path: str | Path, reason: object) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"couldn't write output file ({self.path}): {reason}")


class ArchiveBuildError(PathFindError):
    """Raised when a staged file can't be read back into the archive."""

    def __init__(self, path: str | Path, reason: object) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"couldn't add file to archive ({self.path}): {reason}")


class CompressionError(PathFindError):
    """Raised when the gzip encoder fails."""

    pass


class StatsSchemaError(PathFindError):
    """Raised when a stats row does not match the header width."""

    pass


__all__ = [
    "PathFindError",
    "ConfigError",
    "OverwriteError",
    "ArchiveWriteError",
    "ArchiveBuildError",
    "CompressionError",
    "StatsSchemaError",
]
