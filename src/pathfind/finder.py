# src/pathfind/finder.py
"""Turn an ID (lane, sample, study...) into a list of lanes.

Lanes are looked up in the tracking database and their directories
worked out from the data hierarchy template.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from sqlalchemy import bindparam, text

from pathfind.database import Database
from pathfind.exceptions import PathFindError
from pathfind.lane import Lane, LaneRecord

logger = logging.getLogger(__name__)

ID_TYPES = ("lane", "sample", "library", "study", "file")

_LANE_QUERY = """
    SELECT ln.name            AS name,
           ln.hierarchy_name  AS hierarchy_name,
           ln.raw_reads       AS raw_reads,
           ln.raw_bases       AS raw_bases,
           ln.qc_status       AS qc_status,
           lb.hierarchy_name  AS library,
           lb.seq_tech        AS technology,
           s.hierarchy_name   AS sample,
           p.ssid             AS study_id,
           sp.name            AS species
      FROM latest_lane ln
      JOIN latest_library lb ON ln.library_id = lb.library_id
      JOIN latest_sample s   ON lb.sample_id = s.sample_id
      JOIN latest_project p  ON s.project_id = p.project_id
      JOIN individual i      ON s.individual_id = i.individual_id
      JOIN species sp        ON i.species_id = sp.species_id
     WHERE {where}
     ORDER BY ln.name
"""

# column matched for each ID type
_ID_COLUMNS = {
    "sample": "s.name",
    "library": "lb.name",
    "study": "p.ssid",
}


def read_ids_file(path: str | Path) -> list[str]:
    """Read IDs from a file, one per line; blank lines and #-comments are skipped.

    Lines starting with "#" are comments, but lane names contain hashes
    too, so only a leading hash counts.
    """
    p = Path(path)
    if not p.is_file():
        raise PathFindError(f"can't read IDs from '{p}'; not a file")
    ids = []
    for raw_line in p.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        ids.append(line.split()[0])
    return ids


class Finder:
    """Finds lanes in a tracking database.

    Args:
        database: The tracking database to search
        lane_class: Class used to build each lane (Lane, AssemblyLane...)
    """

    def __init__(self, database: Database, lane_class: type[Lane] = Lane) -> None:
        self.database = database
        self.lane_class = lane_class

    def _where(self, ids: list[str], id_type: str) -> tuple[str, dict[str, Any]]:
        if id_type == "lane":
            # "10018_1" matches the lane itself and all of its "#" sub-lanes
            clauses, params = [], {}
            for i, id_ in enumerate(ids):
                clauses.append(f"(ln.name = :id{i} OR ln.name LIKE :like{i})")
                params[f"id{i}"] = id_
                params[f"like{i}"] = f"{id_}#%"
            return " OR ".join(clauses), params

        column = _ID_COLUMNS[id_type]
        if id_type == "study":
            ids = [int(i) if str(i).isdigit() else i for i in ids]
        return f"{column} IN :ids", {"ids": ids}

    def query_records(self, ids: Iterable[str], id_type: str) -> list[LaneRecord]:
        ids = [str(i) for i in ids]
        if not ids:
            return []
        where, params = self._where(ids, id_type)
        stmt = text(_LANE_QUERY.format(where=where))
        if "ids" in params:
            stmt = stmt.bindparams(bindparam("ids", expanding=True))

        with self.database.engine.connect() as conn:
            rows = conn.execute(stmt, params).mappings().all()

        records = []
        for row in rows:
            records.append(
                LaneRecord(
                    name=row["name"],
                    hierarchy_name=row["hierarchy_name"] or row["name"],
                    study_id=str(row["study_id"]),
                    sample=row["sample"],
                    library=row["library"],
                    species=row["species"],
                    technology=row["technology"] or "SLX",
                    raw_reads=row["raw_reads"],
                    raw_bases=row["raw_bases"],
                    qc_status=row["qc_status"],
                )
            )
        return records

    def find_lanes(
        self,
        ids: Iterable[str],
        id_type: str,
        filetype: Optional[str] = None,
        lane_attributes: Optional[Mapping[str, Any]] = None,
        file_id_type: str = "lane",
    ) -> list[Lane]:
        """Find lanes for the given IDs.

        Args:
            ids: IDs to look up; for ``file`` the first ID is a file of IDs
            id_type: One of ID_TYPES
            filetype: If given, each lane searches for files of this type
            lane_attributes: Extra keyword arguments for the lane class
            file_id_type: Type of the IDs read from a file

        Returns:
            Lanes ordered by name, without duplicates
        """
        if id_type not in ID_TYPES:
            raise PathFindError(f"unknown ID type '{id_type}'; must be one of {', '.join(ID_TYPES)}")

        ids = list(ids)
        if id_type == "file":
            if file_id_type == "file" or file_id_type not in ID_TYPES:
                raise PathFindError(f"invalid ID type for IDs in a file: '{file_id_type}'")
            ids = [i for f in ids for i in read_ids_file(f)]
            id_type = file_id_type

        records = self.query_records(ids, id_type)
        logger.debug("found %d lanes in %s", len(records), self.database.name)

        attrs = dict(lane_attributes or {})
        lanes = []
        seen: set[str] = set()
        for record in records:
            if record.name in seen:
                continue
            seen.add(record.name)
            lane = self.lane_class(record=record, storage_path=self.database.lane_path(record), **attrs)
            if filetype is not None:
                lane.find_files(filetype)
            lanes.append(lane)
        return lanes


__all__ = ["ID_TYPES", "read_ids_file", "Finder"]
