"""BDD tests for the opportunity matrix.

Scenario 1: Processes scored and placed on both quadrant models
Scenario 2: Starting process selection
Scenario 3: Organization overrides
"""

from __future__ import annotations

import dataclasses
from typing import Any

import pytest

from src.core.financial.models import (
    ComplexityMetrics,
    EffortAnchors,
    FinancialAssumptions,
    GlobalDefaults,
    InputData,
    OverheadCosts,
    ProcessGroup,
    RiskCategory,
)
from src.core.financial.portfolio import compute_portfolio_roi
from src.core.financial.prioritization import (
    PrioritizedProcess,
    initial_cost,
    pick_starting_process,
    prioritize_portfolio,
)
from src.core.financial.scoring import Quadrant, ScoreQuadrant

_NO_OVERHEAD = OverheadCosts(benefits=0, payroll_taxes=0, paid_time_off=0, training_onboarding=0, overhead_ga=0)


def _candidate(process_id: str, roi: float, effort: float, quadrant: Quadrant = Quadrant.QUICK_WIN) -> PrioritizedProcess:
    return PrioritizedProcess(
        process_id=process_id,
        name=process_id,
        group="",
        engine=None,
        roi=roi,
        implementation_effort=effort,
        execution_health=1.0,
        risk_factor=1.0,
        npv=0.0,
        r_adj=0.1,
        complexity_index=0.0,
        risk_category=RiskCategory.SIMPLE,
        risk_value=2,
        implementation_weeks=1,
        initial_cost=0.0,
        budget=0.0,
        eac=0.0,
        emv=0.0,
        cfo_score=0.0,
        quadrant=quadrant,
        score_quadrant=ScoreQuadrant.DEPRIORITIZE,
    )


class TestMatrixPlacement:
    """Scenario 1: two selected processes and one unselected."""

    def test_initial_cost(self, process: Any) -> None:
        """One-time costs plus a year of software."""
        assert initial_cost(process) == pytest.approx(8_000 + 6_000)

    def test_quadrants(self, input_data: InputData, classification: Any) -> None:
        """Given the invoice process saving $18,000 a year against $14,000 initial cost,
        When the portfolio is prioritized,
        Then it is a Quick Win and the weaker processes are Nice to Have."""
        results = compute_portfolio_roi(input_data, 36, classification)
        view = prioritize_portfolio(input_data, results, 36)
        by_id = {p.process_id: p for p in view.processes}

        expected_npv = -14_000 + sum(18_000 / 1.1**year for year in (1, 2, 3))
        assert by_id["p1"].npv == pytest.approx(expected_npv)
        assert by_id["p1"].roi == pytest.approx(expected_npv / 14_000)
        assert by_id["p1"].quadrant is Quadrant.QUICK_WIN
        assert by_id["p1"].score_quadrant is ScoreQuadrant.QUICK_WINS
        assert by_id["p2"].quadrant is Quadrant.NICE_TO_HAVE
        assert by_id["p3"].quadrant is Quadrant.NICE_TO_HAVE

    def test_budget_and_eac_default_to_cost(self, input_data: InputData, classification: Any) -> None:
        results = compute_portfolio_roi(input_data, 36, classification)
        entry = prioritize_portfolio(input_data, results, 36).processes[0]
        assert entry.budget == entry.eac == entry.initial_cost
        assert entry.execution_health == 1.0

    def test_to_dict_counts(self, input_data: InputData, classification: Any) -> None:
        results = compute_portfolio_roi(input_data, 36, classification)
        data = prioritize_portfolio(input_data, results, 36).to_dict()

        assert data["quadrant_counts"] == {
            "Quick Win": 1,
            "Strategic Bet": 0,
            "Nice to Have": 2,
            "Deprioritize": 0,
        }
        assert data["cost_target"] == 100_000.0
        assert data["time_target_months"] == 6.0

    def test_blocked_results_score_nothing(self, input_data: InputData) -> None:
        blocked = compute_portfolio_roi(input_data, 36, None)
        view = prioritize_portfolio(input_data, blocked, 36)
        assert view.processes == ()
        assert view.starting_process_id is None


class TestStartingProcess:
    """Scenario 2: highest ROI Quick Win, lowest effort among near ties."""

    def test_flagged_in_view(self, input_data: InputData, classification: Any) -> None:
        results = compute_portfolio_roi(input_data, 36, classification)
        view = prioritize_portfolio(input_data, results, 36)

        assert view.starting_process_id == "p1"
        assert [p.process_id for p in view.processes if p.is_starting_process] == ["p1"]

    def test_near_tie_prefers_lower_effort(self) -> None:
        """Given ROIs 1.0 and 1.05 (within 0.1), the lower-effort process starts."""
        start = pick_starting_process([_candidate("a", 1.0, 0.3), _candidate("b", 1.05, 0.1)])
        assert start is not None
        assert start.process_id == "b"

    def test_clear_roi_lead_wins(self) -> None:
        candidates = [_candidate("a", 1.0, 0.3), _candidate("b", 1.05, 0.1), _candidate("c", 1.5, 0.39)]
        start = pick_starting_process(candidates)
        assert start is not None
        assert start.process_id == "c"

    def test_no_quick_wins(self) -> None:
        assert pick_starting_process([_candidate("a", 0.1, 0.9, Quadrant.DEPRIORITIZE)]) is None

    def test_flag_set_by_replace(self) -> None:
        flagged = dataclasses.replace(_candidate("a", 1.0, 0.3), is_starting_process=True)
        assert flagged.to_dict()["is_starting_process"] is True


class TestOverrides:
    """Scenario 3: global risk factor, stored complexity and effort anchors."""

    def _view(self, process_factory: Any, classification: Any, defaults: GlobalDefaults, **overrides: Any) -> Any:
        data = InputData(
            processes=[process_factory(**overrides)],
            groups=[ProcessGroup(id="finance", name="Finance", engine="rpa")],
            global_defaults=defaults,
        )
        results = compute_portfolio_roi(data, 36, classification)
        return prioritize_portfolio(data, results, 36)

    def test_global_risk_factor(self, process_factory: Any, classification: Any) -> None:
        defaults = GlobalDefaults(
            overhead_costs=_NO_OVERHEAD,
            financial_assumptions=FinancialAssumptions(global_risk_factor=10),
        )
        entry = self._view(process_factory, classification, defaults).processes[0]
        assert entry.complexity_index == 10
        assert entry.r_adj == pytest.approx(0.13)
        assert entry.risk_category is RiskCategory.COMPLEX
        assert entry.risk_value == 8

    def test_stored_complexity_index(self, process_factory: Any, classification: Any) -> None:
        defaults = GlobalDefaults(overhead_costs=_NO_OVERHEAD)
        entry = self._view(
            process_factory,
            classification,
            defaults,
            complexity_metrics=ComplexityMetrics(complexity_index=8.0),
        ).processes[0]
        assert entry.complexity_index == 8.0
        assert entry.r_adj == pytest.approx(0.1 + 0.03 * 0.8)
        assert entry.risk_category is RiskCategory.COMPLEX
        assert entry.to_dict()["risk_category"] == "Complex"

    @pytest.mark.parametrize(
        ("index", "category", "risk_value"),
        [(0.0, RiskCategory.SIMPLE, 2), (3.9, RiskCategory.SIMPLE, 2), (4.0, RiskCategory.MODERATE, 5), (7.0, RiskCategory.COMPLEX, 8)],
    )
    def test_risk_category_follows_complexity(
        self, index: float, category: RiskCategory, risk_value: int, process_factory: Any, classification: Any
    ) -> None:
        defaults = GlobalDefaults(overhead_costs=_NO_OVERHEAD)
        entry = self._view(
            process_factory,
            classification,
            defaults,
            complexity_metrics=ComplexityMetrics(complexity_index=index),
        ).processes[0]
        assert entry.risk_category is category
        assert entry.risk_value == risk_value

    def test_engine_from_group(self, process_factory: Any, classification: Any) -> None:
        defaults = GlobalDefaults(overhead_costs=_NO_OVERHEAD)
        entry = self._view(process_factory, classification, defaults).processes[0]
        assert entry.engine == "rpa"

    def test_tighter_anchors_raise_effort(self, process_factory: Any, classification: Any) -> None:
        loose = self._view(process_factory, classification, GlobalDefaults(overhead_costs=_NO_OVERHEAD))
        tight = self._view(
            process_factory,
            classification,
            GlobalDefaults(overhead_costs=_NO_OVERHEAD, effort_anchors=EffortAnchors(cost_target=10_000, time_target=1)),
        )
        assert tight.processes[0].implementation_effort > loose.processes[0].implementation_effort
        assert tight.time_target_months == 1
