from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv


@dataclass(frozen=True)
class DatabaseConfig:
    """Connection settings for the LightBnB Postgres database."""

    host: str = "localhost"
    port: int = 5432
    database: str = "lightbnb"
    user: str = "vagrant"
    password: str = "123"
    min_pool_size: int = 1
    max_pool_size: int = 10
    properties_seed_path: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DatabaseConfig":
        if environ is None:
            load_dotenv()
            environ = os.environ
        defaults = cls()
        return cls(
            host=environ.get("PGHOST", defaults.host),
            port=int(environ.get("PGPORT", defaults.port)),
            database=environ.get("PGDATABASE", defaults.database),
            user=environ.get("PGUSER", defaults.user),
            password=environ.get("PGPASSWORD", defaults.password),
            min_pool_size=int(environ.get("PG_POOL_MIN_SIZE", defaults.min_pool_size)),
            max_pool_size=int(environ.get("PG_POOL_MAX_SIZE", defaults.max_pool_size)),
            properties_seed_path=environ.get("LIGHTBNB_PROPERTIES_JSON") or None,
        )

    def pool_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``asyncpg.create_pool``."""
        return {
            "host": self.host,
            "port": self.port,
            "database": self.database,
            "user": self.user,
            "password": self.password,
            "min_size": self.min_pool_size,
            "max_size": self.max_pool_size,
        }
