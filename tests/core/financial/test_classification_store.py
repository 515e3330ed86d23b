"""Tests for the in-memory cost classification store."""

from __future__ import annotations

import pytest

from src.core.financial.classification_store import InMemoryClassificationStore
from src.core.financial.models import CostClassification


class TestInMemoryClassificationStore:
    def test_missing_org_returns_none(self) -> None:
        assert InMemoryClassificationStore().get("org-1") is None

    def test_put_then_get(self) -> None:
        store = InMemoryClassificationStore()
        stored = store.put(CostClassification(org_id="org-1", hard_costs=["laborCosts"], soft_costs=[]))

        assert stored.last_modified is not None
        assert store.get("org-1") == stored

    def test_put_replaces(self) -> None:
        store = InMemoryClassificationStore()
        store.put(CostClassification(org_id="org-1", hard_costs=["laborCosts"], soft_costs=[]))
        store.put(CostClassification(org_id="org-1", hard_costs=[], soft_costs=["laborCosts"]))

        current = store.get("org-1")
        assert current is not None
        assert current.soft_costs == ["laborCosts"]

    def test_org_required(self) -> None:
        with pytest.raises(ValueError, match="organization"):
            InMemoryClassificationStore().put(CostClassification(hard_costs=[], soft_costs=[]))

    def test_overlap_rejected_by_model(self) -> None:
        with pytest.raises(ValueError):
            CostClassification(org_id="org-1", hard_costs=["laborCosts"], soft_costs=["laborCosts"])
