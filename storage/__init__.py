"""
Storage package.

Exposes the ``Database`` facade and its building blocks so the HTTP layer
(and scripts) can depend on one import.
"""

from .config import DatabaseConfig
from .database import Database, close_database, get_database
from .memory_store import InMemoryStore
from .postgres_store import PostgresStore
from .query_builder import PropertySearch, SqlQuery, build_property_search
from .results import QueryResult

__all__ = [
    "Database",
    "DatabaseConfig",
    "InMemoryStore",
    "PostgresStore",
    "PropertySearch",
    "QueryResult",
    "SqlQuery",
    "build_property_search",
    "close_database",
    "get_database",
]
