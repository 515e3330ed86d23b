"""BDD tests for the ROI boundary guard and the service facade.

Scenario 1: Preconditions checked in order
Scenario 2: Classification validation
Scenario 3: Service runs only through the guard
"""

from __future__ import annotations

import logging
from typing import Any

import pytest

from src.core.config import Settings
from src.core.financial.guard import (
    ROIContext,
    build_enriched_classification,
    coerce_classification,
    guard_roi,
    is_valid_cost_classification,
)
from src.core.financial.models import CostClassification, InputData
from src.core.financial.results import BlockReason
from src.core.financial.service import ROIService

VALID = {"hardCosts": ["laborCosts"], "softCosts": ["decisionDelays"]}


def _context(**overrides: Any) -> ROIContext:
    fields: dict[str, Any] = {
        "org_id": "org-1",
        "classification_loaded": True,
        "cost_classification": VALID,
        "data_ready": True,
    }
    fields.update(overrides)
    return ROIContext(**fields)


class TestGuardOrder:
    """Scenario 1: the first failing precondition is reported."""

    def test_all_preconditions_met(self) -> None:
        decision = guard_roi(_context())
        assert decision.proceed is True
        assert decision.reason is None
        assert decision.message == "ok"

    @pytest.mark.parametrize(
        ("overrides", "reason"),
        [
            ({"org_id": None}, BlockReason.MISSING_ORG_ID),
            ({"org_id": ""}, BlockReason.MISSING_ORG_ID),
            ({"classification_loaded": False}, BlockReason.CLASSIFICATION_NOT_LOADED),
            ({"cost_classification": None}, BlockReason.INVALID_CLASSIFICATION),
            ({"cost_classification": {"hardCosts": "laborCosts", "softCosts": []}}, BlockReason.INVALID_CLASSIFICATION),
            ({"data_ready": False}, BlockReason.DATA_NOT_READY),
        ],
    )
    def test_single_failure(self, overrides: dict[str, Any], reason: BlockReason) -> None:
        decision = guard_roi(_context(**overrides))
        assert decision.proceed is False
        assert decision.reason is reason

    def test_org_checked_before_data(self) -> None:
        """Given no org and data not ready, the missing org is reported."""
        decision = guard_roi(_context(org_id=None, data_ready=False, classification_loaded=False))
        assert decision.reason is BlockReason.MISSING_ORG_ID

    def test_block_logged_as_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="src.core.financial.guard"):
            guard_roi(_context(data_ready=False, process_count=7))
        assert "Data not ready for ROI calculation" in caplog.text
        assert "(7 processes)" in caplog.text

    def test_decision_to_dict(self) -> None:
        data = guard_roi(_context(classification_loaded=False)).to_dict()
        assert data == {
            "proceed": False,
            "reason": "classification_not_loaded",
            "message": "Cost classification not loaded",
        }


class TestClassificationValidation:
    """Scenario 2: only objects with list-typed hard and soft costs pass."""

    @pytest.mark.parametrize(
        "candidate",
        [
            VALID,
            {"hard_costs": [], "soft_costs": []},
            CostClassification(hard_costs=[], soft_costs=[]),
        ],
    )
    def test_valid(self, candidate: Any) -> None:
        assert is_valid_cost_classification(candidate) is True

    @pytest.mark.parametrize(
        "candidate",
        [None, [], "laborCosts", {"hardCosts": ["laborCosts"]}, {"hardCosts": None, "softCosts": []}],
    )
    def test_invalid(self, candidate: Any) -> None:
        assert is_valid_cost_classification(candidate) is False
        assert coerce_classification(candidate) is None

    def test_overlap_rejected_on_coercion(self) -> None:
        """A key cannot be both hard and soft."""
        overlapping = {"hardCosts": ["laborCosts"], "softCosts": ["laborCosts"]}
        assert coerce_classification(overlapping) is None

    def test_enrichment_attaches_org(self) -> None:
        enriched = build_enriched_classification(VALID, "org-9")
        assert enriched is not None
        assert enriched.org_id == "org-9"
        assert enriched.hard_costs == ["laborCosts"]


class TestServiceRun:
    """Scenario 3: the service returns the blocked sentinel instead of figures."""

    @pytest.fixture
    def service(self, test_settings: Settings) -> ROIService:
        return ROIService(test_settings)

    def test_blocked_run(self, service: ROIService, input_data: InputData) -> None:
        results = service.run(_context(classification_loaded=False), input_data)
        assert results.blocked is True
        assert results.block_reason is BlockReason.CLASSIFICATION_NOT_LOADED
        assert results.annual_net_savings == 0.0

    def test_successful_run(self, service: ROIService, input_data: InputData) -> None:
        results = service.run(_context(), input_data)
        assert results.blocked is False
        assert results.annual_net_savings == pytest.approx(13_200.0)

    def test_horizon_out_of_bounds(self, service: ROIService, input_data: InputData) -> None:
        with pytest.raises(ValueError, match="time_horizon_months"):
            service.run(_context(), input_data, 6)

    def test_can_run(self, service: ROIService) -> None:
        assert service.can_run(_context()) is True
        assert service.can_run(_context(org_id=None)) is False

    def test_local_calculation_needs_only_classification(self, service: ROIService, input_data: InputData) -> None:
        assert service.calculate(input_data, 24, VALID).blocked is False
        blocked = service.calculate(input_data, 24, None)
        assert blocked.block_reason is BlockReason.INVALID_CLASSIFICATION

    @pytest.mark.parametrize("horizon", [0, -12])
    def test_non_positive_horizon_rejected(self, service: ROIService, input_data: InputData, horizon: int) -> None:
        """An explicit horizon is validated, never swapped for the default."""
        with pytest.raises(ValueError, match="time_horizon_months"):
            service.run(_context(), input_data, horizon)
        with pytest.raises(ValueError, match="time_horizon_months"):
            service.calculate(input_data, horizon, VALID)

    def test_missing_horizon_uses_configured_default(self, input_data: InputData) -> None:
        service = ROIService(Settings(roi_default_time_horizon_months=60, _env_file=None))  # type: ignore[call-arg]
        assert service.settings.roi_default_time_horizon_months == 60

        results = service.run(_context(), input_data)
        assert set(results.ebitda_by_year) == {"year1", "year2", "year3", "year4", "year5"}
        assert set(service.calculate(input_data, None, VALID).ebitda_by_year) == set(results.ebitda_by_year)
