from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from telemetry.logging_utils import get_logger

logger = get_logger(__name__)


class InMemoryStore:
    """Process-local property map keyed by sequential integer id.

    Only ``add_property`` writes here. Property search reads Postgres, so
    properties added to this store are not visible to it.
    """

    def __init__(self, properties: Optional[Mapping[Any, Dict[str, Any]]] = None) -> None:
        self.properties: Dict[int, Dict[str, Any]] = {}
        for key, prop in (properties or {}).items():
            self.properties[int(key)] = dict(prop)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "InMemoryStore":
        """Seed from a JSON object of ``{"<id>": {...property...}}``."""
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        store = cls(raw)
        logger.info("properties_seeded", extra={"path": str(path), "count": len(store.properties)})
        return store

    def add_property(self, prop: Dict[str, Any]) -> Dict[str, Any]:
        # Seeds may have gaps; never reuse a taken id.
        property_id = max(self.properties, default=0) + 1
        prop["id"] = property_id
        self.properties[property_id] = prop
        return prop

    def __len__(self) -> int:
        return len(self.properties)
