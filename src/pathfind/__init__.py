# src/pathfind/__init__.py
from __future__ import annotations

from .exceptions import (
    PathFindError,
    ConfigError,
    OverwriteError,
    ArchiveWriteError,
    ArchiveBuildError,
    CompressionError,
    StatsSchemaError,
)
from .lane import Lane, AssemblyLane, LaneRecord, NameEditor

__all__ = [
    # Errors
    "PathFindError", "ConfigError", "OverwriteError", "ArchiveWriteError", "ArchiveBuildError",
    "CompressionError", "StatsSchemaError",

    # Lanes
    "Lane", "AssemblyLane", "LaneRecord", "NameEditor",
]
__version__ = "0.1.0"
