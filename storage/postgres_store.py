from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, TypeVar

import asyncpg

from storage.config import DatabaseConfig
from storage.query_builder import DEFAULT_LIMIT, PropertySearch, build_property_search
from storage.results import QueryResult
from telemetry.logging_utils import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# Everything a round trip can raise is one failure kind: "query failed".
QUERY_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)

USER_BY_EMAIL_SQL = """
SELECT * FROM users
WHERE email = $1"""

USER_BY_ID_SQL = """
SELECT * FROM users
WHERE id = $1"""

INSERT_USER_SQL = """
INSERT INTO users (name, email, password)
VALUES ($1, $2, $3)
RETURNING *"""

UPCOMING_RESERVATIONS_SQL = """
SELECT reservations.*, properties.*, AVG(property_reviews.rating) AS average_rating
FROM reservations
JOIN properties ON reservations.property_id = properties.id
JOIN property_reviews ON property_reviews.property_id = properties.id
WHERE reservations.guest_id = $1 AND reservations.start_date >= NOW()::DATE
GROUP BY reservations.id, properties.id
ORDER BY reservations.start_date
LIMIT $2"""


class PostgresStore:
    """Relational operations over a shared asyncpg pool.

    The pool is created on first use and lives until ``close``. Every public
    coroutine returns a ``QueryResult``; database failures are logged and
    reported through it instead of being raised.
    """

    def __init__(self, config: DatabaseConfig, *, pool: Any = None) -> None:
        self.config = config
        self._pool = pool
        self._pool_lock = asyncio.Lock()

    async def _get_pool(self) -> Any:
        if self._pool is None:
            async with self._pool_lock:
                if self._pool is None:
                    self._pool = await asyncpg.create_pool(**self.config.pool_kwargs())
                    logger.info(
                        "pool_created",
                        extra={"host": self.config.host, "database": self.config.database},
                    )
        return self._pool

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

    async def _fetch(self, operation: str, query: str, params: Sequence[Any]) -> List[Dict[str, Any]]:
        pool = await self._get_pool()
        logger.debug("query", extra={"operation": operation, "sql": query.strip(), "params": list(params)})
        records = await pool.fetch(query, *params)
        return [dict(record) for record in records]

    async def _run(self, operation: str, empty: T, fn: Callable[[], Awaitable[T]]) -> QueryResult[T]:
        try:
            return QueryResult.success(await fn())
        except QUERY_ERRORS as exc:
            logger.warning("query_failed", extra={"operation": operation, "error": str(exc)})
            return QueryResult.failure(exc, empty)

    async def _first_row(self, operation: str, query: str, params: Sequence[Any]) -> Optional[Dict[str, Any]]:
        rows = await self._fetch(operation, query, params)
        return rows[0] if rows else None

    # Users ----------------------------------------------------------------
    async def get_user_with_email(self, email: str) -> QueryResult[Optional[Dict[str, Any]]]:
        return await self._run(
            "get_user_with_email",
            None,
            lambda: self._first_row("get_user_with_email", USER_BY_EMAIL_SQL, [email]),
        )

    async def get_user_with_id(self, user_id: int) -> QueryResult[Optional[Dict[str, Any]]]:
        return await self._run(
            "get_user_with_id",
            None,
            lambda: self._first_row("get_user_with_id", USER_BY_ID_SQL, [user_id]),
        )

    async def add_user(self, user: Mapping[str, Any]) -> QueryResult[Optional[Dict[str, Any]]]:
        params = [user["name"], user["email"], user["password"]]
        return await self._run(
            "add_user",
            None,
            lambda: self._first_row("add_user", INSERT_USER_SQL, params),
        )

    # Reservations ---------------------------------------------------------
    async def get_all_reservations(self, guest_id: int, limit: int = DEFAULT_LIMIT) -> QueryResult[List[Dict[str, Any]]]:
        return await self._run(
            "get_all_reservations",
            [],
            lambda: self._fetch("get_all_reservations", UPCOMING_RESERVATIONS_SQL, [guest_id, limit]),
        )

    # Properties -----------------------------------------------------------
    async def get_all_properties(
        self, criteria: Optional[PropertySearch] = None, limit: Optional[int] = None
    ) -> QueryResult[List[Dict[str, Any]]]:
        query = build_property_search(criteria, limit)
        return await self._run(
            "get_all_properties",
            [],
            lambda: self._fetch("get_all_properties", query.text, query.params),
        )

    # Health ---------------------------------------------------------------
    async def ping(self) -> bool:
        async def _select_one() -> bool:
            pool = await self._get_pool()
            return await pool.fetchval("SELECT 1") == 1

        result = await self._run("ping", False, _select_one)
        return result.value
