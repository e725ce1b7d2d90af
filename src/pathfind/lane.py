# src/pathfind/lane.py
"""Lanes: one sequencing run (or sub-run) and the files it has on disk."""
from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Protocol, TextIO, runtime_checkable

logger = logging.getLogger(__name__)

# Glob patterns used to find each type of data file in a lane directory
FILETYPE_PATTERNS: dict[str, tuple[str, ...]] = {
    "fastq": ("*.fastq.gz", "*.fastq"),
    "bam": ("*.bam",),
    "pacbio": ("*.h5",),
    "corrected": ("*.corrected.fastq.gz",),
}

ASSEMBLERS: tuple[str, ...] = ("iva", "pacbio", "spades", "velvet")

ASSEMBLY_FILES: dict[str, tuple[str, ...]] = {
    "scaffold": ("scaffolds.scaffolded.fa",),
    "contigs": ("contigs.fa",),
    "all": ("scaffolds.scaffolded.fa", "contigs.fa"),
}


@runtime_checkable
class NameEditor(Protocol):
    """Lanes that rename their files before they go into an archive."""

    def edit_name(self, path: str) -> str:
        ...


@dataclass(frozen=True)
class LaneRecord:
    """One row from the tracking database."""
    name: str
    hierarchy_name: str
    study_id: str
    sample: str
    library: str
    species: str
    technology: str = "SLX"
    raw_reads: Optional[int] = None
    raw_bases: Optional[int] = None
    qc_status: Optional[str] = None


@dataclass
class Lane:
    """A lane found by the Finder.

    ``storage_path`` is the lane's directory in the data hierarchy, or None
    if the hierarchy root for its database doesn't exist.
    """
    record: LaneRecord
    storage_path: Optional[Path] = None
    files: list[Path] = field(default_factory=list)
    filetype: Optional[str] = None

    default_filetype = "fastq"

    @property
    def name(self) -> str:
        return self.record.name

    def find_files(self, filetype: str) -> list[Path]:
        """Look for data files of the given type in the lane directory."""
        if filetype not in FILETYPE_PATTERNS:
            raise ValueError(
                f"unknown filetype '{filetype}'; must be one of {sorted(FILETYPE_PATTERNS)}"
            )
        self.filetype = filetype
        self.files = []
        if self.storage_path is None or not self.storage_path.is_dir():
            logger.debug("no directory for lane %s", self.name)
            return self.files

        found: set[Path] = set()
        for pattern in FILETYPE_PATTERNS[filetype]:
            found.update(p for p in self.storage_path.glob(pattern) if p.is_file())
        self.files = sorted(found)
        logger.debug("found %d %s files for lane %s", len(self.files), filetype, self.name)
        return self.files

    def all_files(self) -> list[str]:
        return [str(p) for p in self.files]

    def stats_headers(self) -> list[str]:
        return ["Study ID", "Sample", "Lane", "Species", "Reads", "Bases", "QC status"]

    def stats(self) -> list[list[Any]]:
        r = self.record
        return [[r.study_id, r.sample, r.name, r.species, r.raw_reads, r.raw_bases, r.qc_status]]

    def print_paths(self, out: Optional[TextIO] = None) -> None:
        """Print found files, or the lane directory if no search was made."""
        out = out or sys.stdout
        if self.filetype is None:
            if self.storage_path is not None:
                print(self.storage_path, file=out)
            return
        for path in self.files:
            print(path, file=out)


@dataclass
class AssemblyLane(Lane):
    """A lane whose interesting files are assemblies rather than reads.

    Assemblies live in ``<lane dir>/<assembler>_assembly/``. Files are
    renamed on archiving so that assemblies from different lanes and
    assemblers don't collide, e.g.
    ``10018_1#3/iva_assembly/contigs.fa`` -> ``10018_1#3.contigs_iva.fa``.
    """
    assemblers: tuple[str, ...] = ASSEMBLERS

    default_filetype = "scaffold"

    def find_files(self, filetype: str) -> list[Path]:
        if filetype not in ASSEMBLY_FILES:
            raise ValueError(
                f"unknown assembly type '{filetype}'; must be one of {sorted(ASSEMBLY_FILES)}"
            )
        self.filetype = filetype
        self.files = []
        if self.storage_path is None:
            return self.files

        for assembler in self.assemblers:
            assembly_dir = self.storage_path / f"{assembler}_assembly"
            for filename in ASSEMBLY_FILES[filetype]:
                path = assembly_dir / filename
                if path.is_file():
                    self.files.append(path)
        return self.files

    def edit_name(self, path: str) -> str:
        p = Path(path)
        assembler = p.parent.name.removesuffix("_assembly")
        return str(p.with_name(f"{self.name}.{p.stem}_{assembler}{p.suffix}"))

    def stats_headers(self) -> list[str]:
        return ["Study ID", "Sample", "Lane", "Assembler", "Assembly file", "File size"]

    def stats(self) -> list[list[Any]]:
        r = self.record
        rows = []
        for path in self.files:
            assembler = path.parent.name.removesuffix("_assembly")
            rows.append([r.study_id, r.sample, r.name, assembler, path.name, path.stat().st_size])
        return rows


__all__ = [
    "FILETYPE_PATTERNS",
    "ASSEMBLERS",
    "ASSEMBLY_FILES",
    "NameEditor",
    "LaneRecord",
    "Lane",
    "AssemblyLane",
]
