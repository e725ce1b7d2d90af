"""Write lane statistics as CSV."""
from __future__ import annotations

from pathlib import Path

import pandas as pd

from pathfind.archive.types import StatsTable, validate_stats_table


def stats_to_csv(table: StatsTable, delimiter: str = ",") -> str:
    """Render a stats table (header row first) as CSV text."""
    validate_stats_table(table)
    if not table:
        return ""
    # object columns keep ints as ints when some rows are None
    df = pd.DataFrame(table[1:], columns=table[0], dtype=object)
    return df.to_csv(index=False, sep=delimiter, lineterminator="\n")


def write_stats_csv(table: StatsTable, path: str | Path, delimiter: str = ",") -> Path:
    path = Path(path)
    path.write_text(stats_to_csv(table, delimiter), encoding="utf-8")
    return path


__all__ = ["stats_to_csv", "write_stats_csv"]
