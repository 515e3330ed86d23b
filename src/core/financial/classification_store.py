"""Where cost classifications come from.

The engine only needs ``get`` and ``put``; storage design is left to the
backend that owns organization data. The in-memory store backs the HTTP
API and tests.
"""

from __future__ import annotations

import logging
import threading
from datetime import UTC, datetime
from typing import Protocol

from src.core.financial.models import CostClassification

logger = logging.getLogger(__name__)


class ClassificationStore(Protocol):
    def get(self, org_id: str) -> CostClassification | None: ...

    def put(self, classification: CostClassification) -> CostClassification: ...


class InMemoryClassificationStore:
    """Thread-safe dict of classifications keyed by organization id."""

    def __init__(self) -> None:
        self._items: dict[str, CostClassification] = {}
        self._lock = threading.Lock()

    def get(self, org_id: str) -> CostClassification | None:
        with self._lock:
            return self._items.get(org_id)

    def put(self, classification: CostClassification) -> CostClassification:
        if not classification.org_id:
            raise ValueError("A cost classification must belong to an organization")
        stamped = classification.model_copy(update={"last_modified": datetime.now(UTC).isoformat()})
        with self._lock:
            self._items[classification.org_id] = stamped
        logger.info(
            "Stored cost classification for org=%s (%d hard, %d soft)",
            classification.org_id,
            len(classification.hard_costs),
            len(classification.soft_costs),
        )
        return stamped
