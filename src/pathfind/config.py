# src/pathfind/config.py
"""
Configuration loader for pathfind.

- Reads config/pathfind.yaml (or any YAML path)
- Loads a .env file from the project root, if there is one
- Converts nested mappings into typed dataclasses
- Ignores unknown keys so the YAML can be slightly ahead of the code

Example config:

    db_root: /lustre/scratch108/pathogen/pathpipe
    hierarchy_template: genus:species-subspecies:TRACKING:projectssid:sample:technology:library:lane
    default_database: pathogen_prok_track
    connection_params:
      tracking:
        driver: sqlite
        dbname: t/data/pathogen_prok_track.db
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

from pathfind.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = Path("config") / "pathfind.yaml"

DEFAULT_HIERARCHY_TEMPLATE = (
    "genus:species-subspecies:TRACKING:projectssid:sample:technology:library:lane"
)

DEFAULT_DB_SUBDIRS: dict[str, str] = {
    "pathogen_virus_track": "viruses",
    "pathogen_prok_track": "prokaryotes",
    "pathogen_euk_track": "eukaryotes",
    "pathogen_helminth_track": "helminths",
    "pathogen_rnd_track": "rnd",
}


# -----------------------------
# Typed sub-configs
# -----------------------------
@dataclass
class ConnectionParams:
    """How to reach one database schema.

    Either ``url`` (any SQLAlchemy URL) or ``driver`` plus the
    driver-specific keys: ``dbname`` for sqlite; ``host``, ``port``,
    ``user`` and optionally ``pass`` for mysql.
    """
    driver: Optional[str] = None
    url: Optional[str] = None
    dbname: Optional[str] = None
    host: Optional[str] = None
    port: Optional[int] = None
    user: Optional[str] = None
    password: Optional[str] = None
    no_db_root: bool = False


@dataclass
class Settings:
    """Root configuration object, parsed from YAML."""
    db_root: Optional[str] = None
    hierarchy_template: str = DEFAULT_HIERARCHY_TEMPLATE
    db_subdirs: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_DB_SUBDIRS))
    default_database: str = "pathogen_prok_track"
    connection_params: dict[str, ConnectionParams] = field(default_factory=dict)


# -----------------------------
# Helpers
# -----------------------------
def project_root(start: str | Path | None = None) -> Path:
    """
    Walk upward from 'start' (or the cwd) until a folder containing pyproject.toml is found.
    """
    cur = Path(start or Path.cwd()).resolve()
    for p in [cur, *cur.parents]:
        if (p / "pyproject.toml").exists():
            return p
    return Path.cwd().resolve()


def _as(obj: Any, cls: Any):
    """
    Minimal 'constructor' turning a dict into a dataclass instance.
    Ignores unknown keys.
    """
    if obj is None:
        return cls()
    if isinstance(obj, cls):
        return obj
    if isinstance(obj, dict):
        hints = set(cls.__dataclass_fields__)
        return cls(**{k: v for k, v in obj.items() if k in hints})
    raise ConfigError(f"expected a mapping for {cls.__name__}, got {type(obj).__name__}")


def _connection_params(raw: Any) -> dict[str, ConnectionParams]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError("`connection_params` must be a mapping of schema name to parameters")
    params = {}
    for schema_name, values in raw.items():
        values = dict(values or {})
        # "pass" is a keyword in Python
        if "pass" in values:
            values["password"] = values.pop("pass")
        params[schema_name] = _as(values, ConnectionParams)
    return params


def resolve_config_path(yaml_path: str | Path | None = None) -> Path:
    """
    Pick the config file: explicit path, then $PATHFIND_CONFIG, then
    config/pathfind.yaml under the project root.
    """
    if yaml_path is None:
        yaml_path = os.getenv("PATHFIND_CONFIG") or DEFAULT_CONFIG
    p = Path(yaml_path)
    if not p.is_absolute() and not p.exists():
        p = project_root() / p
    return p


def load_settings(yaml_path: str | Path | None = None) -> Settings:
    """
    Load YAML into Settings.

    Environment overrides: PATHFIND_DB_ROOT replaces ``db_root``.

    Raises:
        ConfigError: If the file is missing or malformed
    """
    env_path = project_root() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path)
        logger.debug("Loaded environment from %s", env_path)

    p = resolve_config_path(yaml_path)
    if not p.exists():
        raise ConfigError(f"configuration file not found: {p}")

    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"couldn't parse configuration file {p}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"configuration file {p} must contain a mapping")

    if os.getenv("PATHFIND_DB_ROOT"):
        data["db_root"] = os.getenv("PATHFIND_DB_ROOT")

    settings = Settings(
        db_root=data.get("db_root"),
        hierarchy_template=data.get("hierarchy_template") or DEFAULT_HIERARCHY_TEMPLATE,
        db_subdirs=dict(data.get("db_subdirs") or DEFAULT_DB_SUBDIRS),
        default_database=data.get("default_database", "pathogen_prok_track"),
        connection_params=_connection_params(data.get("connection_params")),
    )
    logger.debug("Loaded configuration from %s", p)
    return settings


__all__ = [
    "DEFAULT_HIERARCHY_TEMPLATE",
    "DEFAULT_DB_SUBDIRS",
    "ConnectionParams",
    "Settings",
    "project_root",
    "resolve_config_path",
    "load_settings",
]
