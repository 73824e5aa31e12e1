"""
Query construction for the filtered property search.

Predicates are collected as structured clauses and rendered once, so the
first row-level predicate always gets ``WHERE`` and the rest ``AND``
regardless of which criteria are present.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

DEFAULT_LIMIT = 10

PROPERTY_SEARCH_BASE = """
SELECT properties.*, AVG(property_reviews.rating) AS average_rating
FROM properties
JOIN property_reviews ON properties.id = property_reviews.property_id"""

CRITERIA_FIELDS = (
    "city",
    "owner_id",
    "minimum_price_per_night",
    "maximum_price_per_night",
    "minimum_rating",
)


def finite_float(value: Any) -> float:
    """``float(value)``, rejecting ``inf`` and ``nan``."""
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"expected a finite number, got {value!r}")
    return number


_CASTS = {
    "owner_id": int,
    "minimum_price_per_night": finite_float,
    "maximum_price_per_night": finite_float,
    "minimum_rating": finite_float,
}


def to_minor_units(amount: Any) -> int:
    """Convert a major-unit price (dollars) into stored cents."""
    return int(round(finite_float(amount) * 100))


@dataclass(frozen=True)
class PropertySearch:
    city: Optional[str] = None
    owner_id: Optional[int] = None
    minimum_price_per_night: Optional[float] = None
    maximum_price_per_night: Optional[float] = None
    minimum_rating: Optional[float] = None

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]]) -> "PropertySearch":
        """Build criteria from a loose mapping such as a query string.

        Unknown keys are ignored; blank strings count as absent and numeric
        fields are coerced from their string form.
        """
        options = options or {}
        values = {}
        for name in CRITERIA_FIELDS:
            value = options.get(name)
            if value is None or value == "":
                continue
            caster = _CASTS.get(name)
            values[name] = caster(value) if caster else value
        return cls(**values)


@dataclass(frozen=True)
class SqlQuery:
    text: str
    params: List[Any] = field(default_factory=list)


class _ParamList:
    def __init__(self) -> None:
        self.values: List[Any] = []

    def bind(self, value: Any) -> str:
        self.values.append(value)
        return f"${len(self.values)}"


def build_property_search(criteria: Optional[PropertySearch] = None, limit: Optional[int] = None) -> SqlQuery:
    criteria = criteria or PropertySearch()
    if limit is None:
        limit = DEFAULT_LIMIT
    if int(limit) <= 0:
        raise ValueError("limit must be a positive integer")

    params = _ParamList()
    where: List[str] = []
    having: List[str] = []

    # Falsy values (None, "", 0) mean "not filtered".
    if criteria.city:
        where.append(f"city LIKE {params.bind(f'%{criteria.city}%')}")
    if criteria.owner_id:
        where.append(f"owner_id = {params.bind(criteria.owner_id)}")
    if criteria.minimum_price_per_night:
        where.append(f"cost_per_night >= {params.bind(to_minor_units(criteria.minimum_price_per_night))}")
    if criteria.maximum_price_per_night:
        where.append(f"cost_per_night <= {params.bind(to_minor_units(criteria.maximum_price_per_night))}")
    if criteria.minimum_rating:
        having.append(f"AVG(property_reviews.rating) >= {params.bind(finite_float(criteria.minimum_rating))}")

    lines = [PROPERTY_SEARCH_BASE.strip()]
    if where:
        lines.append("WHERE " + " AND ".join(where))
    lines.append("GROUP BY properties.id")
    if having:
        lines.append("HAVING " + " AND ".join(having))
    lines.append("ORDER BY cost_per_night")
    lines.append(f"LIMIT {params.bind(int(limit))};")
    return SqlQuery(text="\n".join(lines), params=params.values)
