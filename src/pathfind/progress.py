# src/pathfind/progress.py
"""Progress bars for long-running steps.

Bars go to stderr so that stdout stays clean for file listings.
"""
from __future__ import annotations

import os
import sys
from typing import Any, Callable, Optional

from tqdm import tqdm

# Anything with update()/close() and context-manager support will do.
ProgressFactory = Callable[[str, int], Any]


def progress_enabled() -> bool:
    """Show bars only on an interactive stderr, unless PATHFIND_NO_PROGRESS is set."""
    if os.environ.get("PATHFIND_NO_PROGRESS"):
        return False
    return sys.stderr.isatty()


def make_progress(desc: str, total: int, enabled: Optional[bool] = None) -> tqdm:
    """Create a tqdm bar on stderr.

    Args:
        desc: Label shown next to the bar
        total: Number of expected ticks
        enabled: Force the bar on or off; default follows progress_enabled()
    """
    if enabled is None:
        enabled = progress_enabled()
    return tqdm(
        total=total,
        desc=desc,
        unit="",
        file=sys.stderr,
        leave=False,
        disable=not enabled,
    )


class NullProgress:
    """Counts ticks without drawing anything."""

    def __init__(self, desc: str = "", total: int = 0) -> None:
        self.desc = desc
        self.total = total
        self.n = 0
        self.closed = False

    def update(self, n: int = 1) -> None:
        self.n += n

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "NullProgress":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class RecordingProgress:
    """Factory that hands out NullProgress bars and keeps them for inspection."""

    def __init__(self) -> None:
        self.bars: list[NullProgress] = []

    def __call__(self, desc: str, total: int) -> NullProgress:
        bar = NullProgress(desc, total)
        self.bars.append(bar)
        return bar

    def ticks(self, desc: str) -> int:
        return sum(b.n for b in self.bars if b.desc == desc)


def null_progress(desc: str, total: int) -> NullProgress:
    return NullProgress(desc, total)


__all__ = [
    "ProgressFactory",
    "progress_enabled",
    "make_progress",
    "NullProgress",
    "RecordingProgress",
    "null_progress",
]
