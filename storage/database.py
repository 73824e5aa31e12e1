"""
The LightBnB data-access surface.

``Database`` routes every exported operation to its backing store:
Postgres for users, reservations and property search, the in-memory map
for ``add_property``. The two property stores are deliberately left
disjoint until the intended write path is confirmed.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from storage.config import DatabaseConfig
from storage.memory_store import InMemoryStore
from storage.postgres_store import PostgresStore
from storage.query_builder import DEFAULT_LIMIT, PropertySearch
from storage.results import QueryResult


class Database:
    def __init__(self, postgres: PostgresStore, properties: InMemoryStore) -> None:
        self.postgres = postgres
        self.properties = properties

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> "Database":
        if config.properties_seed_path:
            properties = InMemoryStore.from_json(config.properties_seed_path)
        else:
            properties = InMemoryStore()
        return cls(PostgresStore(config), properties)

    async def close(self) -> None:
        await self.postgres.close()

    async def ping(self) -> bool:
        return await self.postgres.ping()

    # Users
    async def get_user_with_email(self, email: str) -> QueryResult[Optional[Dict[str, Any]]]:
        return await self.postgres.get_user_with_email(email)

    async def get_user_with_id(self, user_id: int) -> QueryResult[Optional[Dict[str, Any]]]:
        return await self.postgres.get_user_with_id(user_id)

    async def add_user(self, user: Mapping[str, Any]) -> QueryResult[Optional[Dict[str, Any]]]:
        return await self.postgres.add_user(user)

    # Reservations
    async def get_all_reservations(self, guest_id: int, limit: int = DEFAULT_LIMIT) -> QueryResult[List[Dict[str, Any]]]:
        return await self.postgres.get_all_reservations(guest_id, limit)

    # Properties
    async def get_all_properties(
        self, options: Optional[Mapping[str, Any]] = None, limit: Optional[int] = None
    ) -> QueryResult[List[Dict[str, Any]]]:
        """Search properties; ``options`` may be a ``PropertySearch`` or a plain mapping."""
        criteria = options if isinstance(options, PropertySearch) else PropertySearch.from_mapping(options)
        return await self.postgres.get_all_properties(criteria, limit)

    async def add_property(self, prop: Dict[str, Any]) -> QueryResult[Dict[str, Any]]:
        return QueryResult.success(self.properties.add_property(prop))


_default_database: Optional[Database] = None


def get_database() -> Database:
    """Return the process-wide database, built from the environment on first call."""
    global _default_database
    if _default_database is None:
        _default_database = Database.from_config(DatabaseConfig.from_env())
    return _default_database


async def close_database() -> None:
    """Close the process-wide database if one was ever built."""
    global _default_database
    if _default_database is not None:
        await _default_database.close()
        _default_database = None
