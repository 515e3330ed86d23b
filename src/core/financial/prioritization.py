"""Opportunity matrix: CFO scoring applied across a portfolio.

Builds the scoring inputs for every process that has an ROI result,
places each process on both quadrant models and flags the process to
start with.
"""

from __future__ import annotations

import dataclasses
import functools
import logging
import math
from dataclasses import dataclass
from typing import Any

from src.core.financial.complexity import complexity_index_for, map_complexity_to_risk
from src.core.financial.models import InputData, ProcessData, RiskCategory
from src.core.financial.results import ProcessROIResult, ROIResults
from src.core.financial.scoring import (
    DEFAULT_COST_TARGET,
    DEFAULT_RISK_PREMIUM_FACTOR,
    DEFAULT_TIME_TARGET_MONTHS,
    Quadrant,
    ScoreQuadrant,
    compute_scoring,
    effective_risk,
    quadrant_from_cfo_score,
)

logger = logging.getLogger(__name__)

DEFAULT_DISCOUNT_RATE_PCT = 10.0
# ROI differences at or below this are ties when choosing where to start.
STARTING_ROI_TOLERANCE = 0.1


@dataclass(frozen=True)
class PrioritizedProcess:
    process_id: str
    name: str
    group: str
    engine: str | None
    roi: float
    implementation_effort: float
    execution_health: float
    risk_factor: float
    npv: float
    r_adj: float
    complexity_index: float  # effective risk, after any global override
    risk_category: RiskCategory
    risk_value: int
    implementation_weeks: float
    initial_cost: float
    budget: float
    eac: float
    emv: float
    cfo_score: float
    quadrant: Quadrant
    score_quadrant: ScoreQuadrant
    is_starting_process: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "process_id": self.process_id,
            "name": self.name,
            "group": self.group,
            "engine": self.engine,
            "roi": round(self.roi, 4),
            "implementation_effort": round(self.implementation_effort, 4),
            "execution_health": round(self.execution_health, 4),
            "risk_factor": round(self.risk_factor, 4),
            "npv": round(self.npv, 2),
            "r_adj": round(self.r_adj, 4),
            "complexity_index": round(self.complexity_index, 1),
            "risk_category": str(self.risk_category),
            "risk_value": self.risk_value,
            "implementation_weeks": self.implementation_weeks,
            "initial_cost": round(self.initial_cost, 2),
            "budget": round(self.budget, 2),
            "eac": round(self.eac, 2),
            "emv": round(self.emv, 2),
            "cfo_score": round(self.cfo_score, 2),
            "quadrant": str(self.quadrant),
            "score_quadrant": str(self.score_quadrant),
            "is_starting_process": self.is_starting_process,
        }


@dataclass(frozen=True)
class PrioritizationView:
    processes: tuple[PrioritizedProcess, ...]
    cost_target: float
    time_target_months: float
    starting_process_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        counts = {str(q): 0 for q in Quadrant}
        for p in self.processes:
            counts[str(p.quadrant)] += 1
        return {
            "processes": [p.to_dict() for p in self.processes],
            "cost_target": self.cost_target,
            "time_target_months": self.time_target_months,
            "starting_process_id": self.starting_process_id,
            "quadrant_counts": counts,
        }


def initial_cost(process: ProcessData) -> float:
    """One-time costs plus the first year of software."""
    costs = process.implementation_costs
    return costs.one_time_costs + costs.software_cost * 12


def _compare_for_start(a: PrioritizedProcess, b: PrioritizedProcess) -> float:
    roi_diff = b.roi - a.roi
    if abs(roi_diff) > STARTING_ROI_TOLERANCE:
        return roi_diff
    return a.implementation_effort - b.implementation_effort


def pick_starting_process(candidates: list[PrioritizedProcess]) -> PrioritizedProcess | None:
    """Among Quick Wins: highest ROI, then lowest effort when ROIs are close."""
    quick_wins = [p for p in candidates if p.quadrant is Quadrant.QUICK_WIN]
    if not quick_wins:
        return None
    return sorted(quick_wins, key=functools.cmp_to_key(_compare_for_start))[0]


def prioritize_portfolio(
    input_data: InputData,
    results: ROIResults,
    time_horizon_months: int = 36,
) -> PrioritizationView:
    """Score every process that has a result and place it on the matrix.

    Args:
        input_data: Processes, groups and global defaults.
        results: Portfolio results holding per-process net savings.
        time_horizon_months: Horizon; savings repeat for each started year.

    Returns:
        A view with one entry per scored process and the starting process
        flagged.
    """
    defaults = input_data.global_defaults
    assumptions = defaults.financial_assumptions
    discount_rate = (assumptions.discount_rate or DEFAULT_DISCOUNT_RATE_PCT) / 100
    risk_premium_factor = assumptions.risk_premium_factor or DEFAULT_RISK_PREMIUM_FACTOR
    cost_target = defaults.effort_anchors.cost_target or DEFAULT_COST_TARGET
    time_target = defaults.effort_anchors.time_target or DEFAULT_TIME_TARGET_MONTHS
    years = math.ceil(time_horizon_months / 12)

    results_by_id: dict[str, ProcessROIResult] = {r.process_id: r for r in results.process_results}
    engines = {g.name: g.engine for g in input_data.groups}

    scored: list[PrioritizedProcess] = []
    for process in input_data.processes:
        result = results_by_id.get(process.id)
        if result is None:
            continue

        costs = process.implementation_costs
        cost = initial_cost(process)
        budget = costs.budget or cost
        eac = costs.eac or cost
        emv = costs.emv or 0.0
        weeks = costs.implementation_timeline_weeks or 1
        index = complexity_index_for(process.complexity_metrics)
        risk = effective_risk(index, assumptions.global_risk_factor)
        risk_mapping = map_complexity_to_risk(risk)

        components = compute_scoring(
            initial_cost=cost,
            savings_by_year=[result.annual_net_savings] * years,
            start_year=1,
            discount_rate=discount_rate,
            complexity_index=index,
            budget=budget,
            eac=eac,
            emv=emv,
            risk_premium_factor=risk_premium_factor,
            estimated_cost=cost,
            estimated_time_weeks=weeks,
            cost_target=cost_target,
            time_target_months=time_target,
            global_risk_factor=assumptions.global_risk_factor,
        )
        scored.append(
            PrioritizedProcess(
                process_id=process.id,
                name=process.name,
                group=process.group,
                engine=engines.get(process.group),
                roi=components.roi_a,
                implementation_effort=components.implementation_effort,
                execution_health=components.execution_health,
                risk_factor=components.risk_factor,
                npv=components.npv_final,
                r_adj=components.r_adj,
                complexity_index=risk,
                risk_category=risk_mapping.category,
                risk_value=risk_mapping.risk_value,
                implementation_weeks=weeks,
                initial_cost=cost,
                budget=budget,
                eac=eac,
                emv=emv,
                cfo_score=components.cfo_score_norm,
                quadrant=components.quadrant,
                score_quadrant=quadrant_from_cfo_score(
                    components.cfo_score_norm,
                    components.npv_final,
                    components.roi_a,
                    emv,
                    cost,
                ),
            )
        )

    start = pick_starting_process(scored)
    if start is not None:
        scored = [dataclasses.replace(p, is_starting_process=True) if p is start else p for p in scored]

    logger.debug(
        "Prioritized %d processes; starting process: %s",
        len(scored),
        start.name if start else None,
    )
    return PrioritizationView(
        processes=tuple(scored),
        cost_target=cost_target,
        time_target_months=time_target,
        starting_process_id=start.process_id if start else None,
    )
