# src/pathfind/database.py
"""A tracking database and the directory hierarchy that holds its data files."""
from __future__ import annotations

import logging
import os
import re
from functools import cached_property
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine

from pathfind.config import ConnectionParams, Settings
from pathfind.exceptions import ConfigError
from pathfind.lane import LaneRecord

logger = logging.getLogger(__name__)

_TEMPLATE_RE = re.compile(r"^([\w-]+:?)+$")


class Database:
    """Connection and data-hierarchy details for one tracking database.

    Args:
        name: Database name, e.g. ``pathogen_prok_track``
        settings: Loaded configuration
        schema_name: Key under ``connection_params`` to connect with
    """

    def __init__(self, name: str, settings: Settings, schema_name: str = "tracking") -> None:
        self.name = name
        self.settings = settings
        self.schema_name = schema_name

    def __repr__(self) -> str:
        return f"Database(name={self.name!r}, schema_name={self.schema_name!r})"

    # ------------------------------------------------------------------
    # connection
    # ------------------------------------------------------------------

    @property
    def connection_params(self) -> ConnectionParams:
        try:
            return self.settings.connection_params[self.schema_name]
        except KeyError:
            raise ConfigError(
                f"can't find connection params for schema name \"{self.schema_name}\""
            ) from None

    def get_url(self) -> URL | str:
        """
        Build the SQLAlchemy URL for this database.

        Precedence:
        1. ``url`` in the connection params
        2. $PATHFIND_TRACKING_DB_URL
        3. ``driver`` plus driver-specific params
        """
        c = self.connection_params

        if c.url:
            return c.url

        env_val = os.getenv("PATHFIND_TRACKING_DB_URL")
        if env_val:
            return env_val

        if not c.driver:
            raise ConfigError("must specify a database driver in connection parameters configuration")

        driver = c.driver.lower()
        if driver == "mysql":
            for param in ("host", "port", "user"):
                if getattr(c, param) is None:
                    raise ConfigError(f"missing connection parameter, {param}")
            return URL.create(
                "mysql+pymysql",
                username=c.user,
                password=c.password,
                host=c.host,
                port=int(c.port),
                database=self.name,
            )
        if driver == "sqlite":
            if not c.dbname:
                raise ConfigError("missing connection parameter, dbname")
            return URL.create("sqlite", database=str(c.dbname))

        raise ConfigError("not a valid database driver; must be either 'mysql' or 'sqlite'")

    @cached_property
    def engine(self) -> Engine:
        url = self.get_url()
        logger.debug("connecting to %s", url)
        return create_engine(url)

    # ------------------------------------------------------------------
    # data hierarchy
    # ------------------------------------------------------------------

    @cached_property
    def db_root(self) -> Optional[Path]:
        """Root of the directory tree holding the data files.

        None for databases flagged ``no_db_root``.
        """
        if self.connection_params.no_db_root:
            return None

        if not self.settings.db_root:
            raise ConfigError("data hierarchy root directory is not defined in the configuration")

        root = Path(self.settings.db_root)
        if not root.is_dir():
            raise ConfigError(
                f"data hierarchy root directory ({root}) does not exist (or is not a directory)"
            )
        return root

    @cached_property
    def hierarchy_template(self) -> str:
        template = self.settings.hierarchy_template
        if not _TEMPLATE_RE.match(template):
            raise ConfigError(f"invalid directory hierarchy template ({template})")
        return template

    @property
    def db_subdirs(self) -> dict[str, str]:
        return self.settings.db_subdirs

    @cached_property
    def hierarchy_root_dir(self) -> Optional[Path]:
        """``<db_root>/<subdir>/seq-pipelines``, or None if it doesn't exist."""
        if self.db_root is None:
            return None
        sub_dir = self.db_subdirs.get(self.name, self.name)
        root_dir = self.db_root / sub_dir / "seq-pipelines"
        return root_dir if root_dir.is_dir() else None

    def lane_path(self, record: LaneRecord) -> Optional[Path]:
        """Render the hierarchy template for one lane.

        Returns None when there's no hierarchy root for this database.
        """
        if self.hierarchy_root_dir is None:
            return None

        genus, _, rest = record.species.strip().partition(" ")
        values = {
            "genus": genus,
            "species-subspecies": rest.replace(" ", "_"),
            "TRACKING": "TRACKING",
            "projectssid": str(record.study_id),
            "sample": record.sample,
            "technology": record.technology,
            "library": record.library,
            "lane": record.hierarchy_name,
        }

        path = self.hierarchy_root_dir
        for part in self.hierarchy_template.split(":"):
            if not part:
                continue
            if part not in values:
                raise ConfigError(f"unknown directory hierarchy component '{part}'")
            path = path / values[part]
        return path


__all__ = ["Database"]
