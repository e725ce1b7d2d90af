"""
Shared fixtures.

Provides stand-in lanes for the archive pipeline tests and a small SQLite
tracking database, with a matching data hierarchy on disk, for the
finder and CLI tests.
"""
from pathlib import Path

import pytest
import yaml
from sqlalchemy import create_engine, text

from pathfind.config import ConnectionParams, Settings
from pathfind.progress import RecordingProgress

SPECIES = "Streptococcus pneumoniae"
STUDY_ID = 607


class FakeLane:
    """Lane stand-in with a fixed file list and a 4-column stats schema."""

    default_filetype = "fastq"

    def __init__(self, name, files):
        self.name = name
        self.files = [str(f) for f in files]
        self.find_calls = []

    def find_files(self, filetype):
        self.find_calls.append(filetype)
        return self.files

    def all_files(self):
        return list(self.files)

    def stats_headers(self):
        return ["Lane", "Files", "Reads", "Bases"]

    def stats(self):
        return [[self.name, len(self.files), 100, 1000]]


class EditingLane(FakeLane):
    """FakeLane that prefixes its file names with the lane name."""

    def edit_name(self, path):
        p = Path(path)
        return str(p.with_name(f"{self.name}.{p.name}"))


def _write_lane_files(lane_dir: Path, names: list[str]) -> list[Path]:
    lane_dir.mkdir(parents=True, exist_ok=True)
    paths = []
    for name in names:
        p = lane_dir / name
        p.write_bytes(f"@{name}\nACGT\n+\nIIII\n".encode() * 50)
        paths.append(p)
    return paths


@pytest.fixture
def progress() -> RecordingProgress:
    return RecordingProgress()


@pytest.fixture
def fake_lanes(tmp_path: Path) -> list[FakeLane]:
    """Three lanes with two fastq files each."""
    lanes = []
    for i in range(1, 4):
        name = f"10018_1#{i}"
        files = _write_lane_files(
            tmp_path / "data" / name, [f"{name}_1.fastq", f"{name}_2.fastq"]
        )
        lanes.append(FakeLane(name, files))
    return lanes


# -----------------------------
# Tracking database
# -----------------------------
_SCHEMA = [
    "CREATE TABLE species (species_id INTEGER PRIMARY KEY, name TEXT)",
    "CREATE TABLE individual (individual_id INTEGER PRIMARY KEY, species_id INTEGER)",
    "CREATE TABLE latest_project (project_id INTEGER PRIMARY KEY, ssid INTEGER, name TEXT, hierarchy_name TEXT)",
    "CREATE TABLE latest_sample (sample_id INTEGER PRIMARY KEY, project_id INTEGER, "
    "individual_id INTEGER, name TEXT, hierarchy_name TEXT)",
    "CREATE TABLE latest_library (library_id INTEGER PRIMARY KEY, sample_id INTEGER, "
    "name TEXT, hierarchy_name TEXT, seq_tech TEXT)",
    "CREATE TABLE latest_lane (lane_id INTEGER PRIMARY KEY, library_id INTEGER, name TEXT, "
    "hierarchy_name TEXT, raw_reads INTEGER, raw_bases INTEGER, qc_status TEXT)",
]

_ROWS = [
    f"INSERT INTO species VALUES (1, '{SPECIES}')",
    "INSERT INTO individual VALUES (1, 1)",
    f"INSERT INTO latest_project VALUES (1, {STUDY_ID}, 'Study 607', 'Study_607')",
    "INSERT INTO latest_sample VALUES (1, 1, 1, 'ERS001', 'ERS001')",
    "INSERT INTO latest_sample VALUES (2, 1, 1, 'ERS002', 'ERS002')",
    "INSERT INTO latest_library VALUES (1, 1, 'LIB1', 'LIB1', 'SLX')",
    "INSERT INTO latest_library VALUES (2, 2, 'LIB2', 'LIB2', 'SLX')",
    "INSERT INTO latest_lane VALUES (1, 1, '10018_1#1', '10018_1#1', 1000, 100000, 'passed')",
    "INSERT INTO latest_lane VALUES (2, 1, '10018_1#2', '10018_1#2', 2000, 200000, 'passed')",
    "INSERT INTO latest_lane VALUES (3, 1, '10018_1#3', '10018_1#3', 3000, 300000, 'pending')",
    "INSERT INTO latest_lane VALUES (4, 2, '5008_5#1', '5008_5#1', 4000, 400000, 'failed')",
]


def lane_dir(db_root: Path, sample: str, library: str, lane: str) -> Path:
    return (
        db_root / "prokaryotes" / "seq-pipelines" / "Streptococcus" / "pneumoniae"
        / "TRACKING" / str(STUDY_ID) / sample / "SLX" / library / lane
    )


@pytest.fixture
def db_root(tmp_path: Path) -> Path:
    """Data hierarchy: fastqs for 10018_1#1 and #2, none for #3, an assembly for #1."""
    root = tmp_path / "pathpipe"
    l1 = lane_dir(root, "ERS001", "LIB1", "10018_1#1")
    _write_lane_files(l1, ["10018_1#1_1.fastq.gz", "10018_1#1_2.fastq.gz"])
    _write_lane_files(lane_dir(root, "ERS001", "LIB1", "10018_1#2"), ["10018_1#2_1.fastq.gz"])
    lane_dir(root, "ERS001", "LIB1", "10018_1#3").mkdir(parents=True)
    _write_lane_files(lane_dir(root, "ERS002", "LIB2", "5008_5#1"), ["5008_5#1.bam"])

    _write_lane_files(l1 / "iva_assembly", ["contigs.fa", "scaffolds.scaffolded.fa"])
    _write_lane_files(l1 / "spades_assembly", ["scaffolds.scaffolded.fa"])
    return root


@pytest.fixture
def tracking_db(tmp_path: Path) -> Path:
    db_path = tmp_path / "pathogen_prok_track.db"
    engine = create_engine(f"sqlite:///{db_path}")
    with engine.begin() as conn:
        for stmt in _SCHEMA + _ROWS:
            conn.execute(text(stmt))
    engine.dispose()
    return db_path


@pytest.fixture
def settings(db_root: Path, tracking_db: Path) -> Settings:
    return Settings(
        db_root=str(db_root),
        connection_params={"tracking": ConnectionParams(driver="sqlite", dbname=str(tracking_db))},
    )


@pytest.fixture
def config_file(tmp_path: Path, db_root: Path, tracking_db: Path) -> Path:
    p = tmp_path / "pathfind.yaml"
    p.write_text(
        yaml.safe_dump(
            {
                "db_root": str(db_root),
                "default_database": "pathogen_prok_track",
                "connection_params": {
                    "tracking": {"driver": "sqlite", "dbname": str(tracking_db)},
                },
            }
        ),
        encoding="utf-8",
    )
    return p


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep the developer's environment out of the tests."""
    for var in ("PATHFIND_CONFIG", "PATHFIND_DB_ROOT", "PATHFIND_TRACKING_DB_URL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("PATHFIND_NO_PROGRESS", "1")
