# src/pathfind/cli.py
"""
pf: find sequencing data and package it.

Examples:
    # print the directories for a lane and its sub-lanes
    pf data -t lane -i 10018_1

    # gzipped tar archive of fastq files, hashes converted to underscores
    pf data -t lane -i 10018_1 -f fastq -a -r

    # zip archive of IVA contigs, with a stats file
    pf assembly -t lane -i 10018_1 -f contigs -P iva -z contigs.zip -s
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Optional

from pathfind.archive import ArchiveFormat, ArchiveRequest, check_outputs, renamed_id, run_archives
from pathfind.config import load_settings
from pathfind.database import Database
from pathfind.exceptions import PathFindError
from pathfind.finder import ID_TYPES, Finder
from pathfind.lane import ASSEMBLERS, ASSEMBLY_FILES, FILETYPE_PATTERNS, AssemblyLane, Lane
from pathfind.progress import make_progress, null_progress

logger = logging.getLogger(__name__)


# ----------------------------
# Helpers
# ----------------------------
def _filename_option(value: Any) -> Optional[Path]:
    """-a/-z/-s take an optional filename; a bare flag arrives as True."""
    if value is None or value is True:
        return None
    return Path(value)


def build_request(args: argparse.Namespace, prefix: str, stats_suffix: str) -> ArchiveRequest:
    """Turn parsed options into the request every pipeline stage reads."""
    id_ = Path(args.id).name if args.type == "file" else args.id

    formats = []
    if args.archive is not None:
        formats.append(ArchiveFormat.TAR)
    if args.zip is not None:
        formats.append(ArchiveFormat.ZIP)

    stats_filename = None
    if args.stats is not None:
        stats_filename = _filename_option(args.stats) or Path(
            f"{renamed_id(id_)}.{stats_suffix}_stats.csv"
        )

    return ArchiveRequest(
        id=id_,
        formats=tuple(formats),
        tar_filename=_filename_option(args.archive),
        zip_filename=_filename_option(args.zip),
        compress_tar=not args.no_tar_compression,
        rename=args.rename,
        force=args.force,
        filetype=args.filetype,
        prefix=prefix,
        stats_filename=stats_filename,
    )


def _split_programs(values: Optional[list[str]]) -> Optional[tuple[str, ...]]:
    if not values:
        return None
    programs = tuple(p.strip() for v in values for p in v.split(",") if p.strip())
    bad = [p for p in programs if p not in ASSEMBLERS]
    if bad:
        raise PathFindError(
            f"unknown assembler(s): {', '.join(bad)}; must be one of {', '.join(ASSEMBLERS)}"
        )
    return programs


def _find_and_act(
    args: argparse.Namespace,
    lane_class: type[Lane],
    prefix: str,
    stats_suffix: str,
    lane_attributes: Optional[dict[str, Any]] = None,
) -> int:
    request = build_request(args, prefix, stats_suffix)

    # fail fast if we're going to end up overwriting a file later on
    check_outputs(request)

    settings = load_settings(args.config)
    database = Database(args.database or settings.default_database, settings)
    finder = Finder(database, lane_class=lane_class)

    lanes = finder.find_lanes(
        ids=[args.id],
        id_type=args.type,
        filetype=args.filetype,
        lane_attributes=lane_attributes,
        file_id_type=args.file_id_type,
    )
    logger.debug("found a total of %d lanes", len(lanes))

    if not lanes:
        print("No data found.", file=sys.stderr)
        return 0

    if request.formats or request.stats_filename is not None:
        progress = null_progress if args.no_progress else make_progress
        run_archives(request, lanes, out=sys.stdout, progress=progress)
    else:
        for lane in lanes:
            lane.print_paths(sys.stdout)
    return 0


# ----------------------------
# Commands
# ----------------------------
def cmd_data(args: argparse.Namespace) -> int:
    """Find reads (or other data files) for lanes."""
    return _find_and_act(args, Lane, prefix="pf", stats_suffix="pathfind")


def cmd_assembly(args: argparse.Namespace) -> int:
    """Find genome assemblies for lanes."""
    attrs: dict[str, Any] = {}
    programs = _split_programs(args.program)
    if programs:
        logger.debug("finding lanes with assemblies created by %s", ", ".join(programs))
        attrs["assemblers"] = programs
    return _find_and_act(
        args, AssemblyLane, prefix="assemblyfind", stats_suffix="assemblyfind", lane_attributes=attrs
    )


# ----------------------------
# Main / Parser
# ----------------------------
def _add_common_options(sp: argparse.ArgumentParser) -> None:
    sp.add_argument("-t", "--type", required=True, choices=ID_TYPES, help="ID type")
    sp.add_argument("-i", "--id", required=True, help="ID to find, or a file of IDs with -t file")
    sp.add_argument(
        "--file-id-type",
        default="lane",
        choices=[t for t in ID_TYPES if t != "file"],
        help="type of the IDs in the file given with -t file (default: lane)",
    )
    sp.add_argument("-c", "--config", default=None, help="YAML config (default: $PATHFIND_CONFIG or config/pathfind.yaml)")
    sp.add_argument("-d", "--database", default=None, help="tracking database name (default: from config)")
    sp.add_argument(
        "-a", "--archive", nargs="?", const=True, default=None, metavar="TAR_FILE",
        help="create a tar archive of data files, optionally naming the file",
    )
    sp.add_argument(
        "-z", "--zip", nargs="?", const=True, default=None, metavar="ZIP_FILE",
        help="create a zip archive of data files, optionally naming the file",
    )
    sp.add_argument(
        "-s", "--stats", nargs="?", const=True, default=None, metavar="STATS_FILE",
        help="write a CSV file with statistics for found lanes",
    )
    sp.add_argument("-u", "--no-tar-compression", action="store_true", help="don't compress tar archives")
    sp.add_argument("-r", "--rename", action="store_true", help="convert hashes to underscores in archived file names")
    sp.add_argument("-F", "--force", action="store_true", help="overwrite existing output files")
    sp.add_argument("--no-progress", action="store_true", help="don't show progress bars")
    sp.add_argument("-v", "--verbose", action="store_true", help="show debugging messages")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="pf",
        description="Find sequencing data files and package them for delivery",
    )
    sub = ap.add_subparsers(dest="cmd", required=True)

    p_data = sub.add_parser("data", help="Find data files (fastq, bam...) for lanes")
    _add_common_options(p_data)
    p_data.add_argument(
        "-f", "--filetype", default=None, choices=sorted(FILETYPE_PATTERNS),
        help="type of files to find (default: print lane directories; fastq when archiving)",
    )
    p_data.set_defaults(func=cmd_data)

    p_asm = sub.add_parser("assembly", help="Find genome assemblies for lanes")
    _add_common_options(p_asm)
    p_asm.add_argument(
        "-f", "--filetype", default="scaffold", choices=sorted(ASSEMBLY_FILES),
        help="type of assembly files to find (default: scaffold)",
    )
    p_asm.add_argument(
        "-P", "--program", action="append", default=None,
        help=f"only assemblies made by this assembler ({', '.join(ASSEMBLERS)}); repeat or comma-separate",
    )
    p_asm.set_defaults(func=cmd_assembly)

    return ap


def main(argv: Optional[list[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )

    try:
        return int(args.func(args))
    except PathFindError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
