from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class QueryResult(Generic[T]):
    """Outcome of a store operation.

    ``value`` is always safe to read: on failure it holds the operation's
    empty value (``None`` or ``[]``), so callers that only care about rows
    keep working, while ``ok`` tells "no rows" apart from "query failed".
    """

    ok: bool
    value: T
    error: Optional[str] = None

    @classmethod
    def success(cls, value: T) -> "QueryResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: Any, empty: T) -> "QueryResult[T]":
        return cls(ok=False, value=empty, error=str(error))
