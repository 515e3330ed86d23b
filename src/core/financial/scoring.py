"""Risk-adjusted CFO scoring model.

Maps cost, benefit, effort and complexity inputs for a single process to a
risk-adjusted NPV and ROI, an implementation effort score on fixed
absolute anchors, and a quadrant on the ROI/effort matrix.

Risk is counted twice on purpose: once through the risk premium added to
the discount rate (plus a prudence haircut on NPV), and again as a direct
haircut of up to 50 % on ROI.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from src.core.financial.primitives import clamp, clamp01
from src.core.financial.units import weeks_to_months

logger = logging.getLogger(__name__)

DEFAULT_RISK_PREMIUM_FACTOR = 0.03
DEFAULT_COST_TARGET = 100_000.0
DEFAULT_TIME_TARGET_MONTHS = 6.0

PRUDENCE_HAIRCUT = 0.05
ROI_RISK_PENALTY = 0.5

# Implementation effort weights
EFFORT_COST_WEIGHT = 0.5
EFFORT_TIME_WEIGHT = 0.3
EFFORT_COMPLEXITY_WEIGHT = 0.2
EFFORT_FACTOR_CAP = 1.2

# ROI/effort matrix thresholds, both inclusive
QUADRANT_ROI_THRESHOLD = 0.5
QUADRANT_EFFORT_THRESHOLD = 0.4

ROI_SCORE_CAP = 3.0


class Quadrant(enum.StrEnum):
    """Quadrant on the ROI versus implementation effort matrix."""

    QUICK_WIN = "Quick Win"
    STRATEGIC_BET = "Strategic Bet"
    NICE_TO_HAVE = "Nice to Have"
    DEPRIORITIZE = "Deprioritize"


class ScoreQuadrant(enum.StrEnum):
    """Quadrant derived from the normalized CFO score."""

    QUICK_WINS = "Quick Wins"
    BIG_HITTERS = "Big Hitters"
    NICE_TO_HAVES = "Nice to Haves"
    DEPRIORITIZE = "Deprioritize"


@dataclass(frozen=True)
class ScoringComponents:
    npv_final: float
    roi_a: float
    implementation_effort: float
    execution_health: float
    risk_factor: float
    r_adj: float
    cfo_score_raw: float
    cfo_score_norm: float
    quadrant: Quadrant

    def to_dict(self) -> dict[str, Any]:
        return {
            "npv_final": round(self.npv_final, 2),
            "roi_a": round(self.roi_a, 4),
            "implementation_effort": round(self.implementation_effort, 4),
            "execution_health": round(self.execution_health, 4),
            "risk_factor": round(self.risk_factor, 4),
            "r_adj": round(self.r_adj, 4),
            "cfo_score_raw": round(self.cfo_score_raw, 4),
            "cfo_score_norm": round(self.cfo_score_norm, 2),
            "quadrant": str(self.quadrant),
        }


def effective_risk(complexity_index: float, global_risk_factor: float | None = None) -> float:
    """Global risk factor when set, otherwise the process complexity index."""
    if global_risk_factor is not None:
        return global_risk_factor
    return complexity_index


def risk_adjusted_npv(
    initial_cost: float,
    savings_by_year: Sequence[float],
    start_year: int,
    discount_rate: float,
    complexity_index: float = 0.0,
    risk_premium_factor: float = DEFAULT_RISK_PREMIUM_FACTOR,
) -> float:
    """NPV at a complexity-adjusted discount rate, after the prudence haircut.

    Args:
        initial_cost: Total investment at year 0.
        savings_by_year: Annual savings, index 0 being year 1.
        start_year: First year (1-based) in which savings are realized.
        discount_rate: Base discount rate as a decimal (0.1 for 10 %).
        complexity_index: Risk on a 0-10 scale.
        risk_premium_factor: Premium added to the rate at maximum risk.
    """
    r_adj = discount_rate + risk_premium_factor * (complexity_index / 10)
    npv_risk = -initial_cost
    for year, savings in enumerate(savings_by_year, start=1):
        if year >= start_year:
            npv_risk += savings / (1 + r_adj) ** year
    return npv_risk * (1 - PRUDENCE_HAIRCUT * (complexity_index / 10))


def implementation_effort(
    estimated_cost: float,
    estimated_time_weeks: float,
    risk: float,
    cost_target: float = DEFAULT_COST_TARGET,
    time_target_months: float = DEFAULT_TIME_TARGET_MONTHS,
) -> float:
    """Weighted effort on absolute anchors: 50 % cost, 30 % time, 20 % complexity."""
    cost_factor = clamp(estimated_cost / cost_target, 0.0, EFFORT_FACTOR_CAP)
    time_months = weeks_to_months(estimated_time_weeks)
    time_factor = clamp(time_months / time_target_months, 0.0, EFFORT_FACTOR_CAP)
    complexity_factor = clamp01(risk / 10)

    raw = EFFORT_COST_WEIGHT * cost_factor + EFFORT_TIME_WEIGHT * time_factor + EFFORT_COMPLEXITY_WEIGHT * complexity_factor
    logger.debug(
        "Effort: cost=%.3f time=%.3f (%.2f months) complexity=%.3f raw=%.3f",
        cost_factor,
        time_factor,
        time_months,
        complexity_factor,
        raw,
    )
    return clamp01(raw)


def quadrant_from_roi_effort(roi_a: float, effort: float) -> Quadrant:
    """Place a process on the 2x2 ROI/effort matrix (inclusive thresholds)."""
    high_roi = roi_a >= QUADRANT_ROI_THRESHOLD
    low_effort = effort <= QUADRANT_EFFORT_THRESHOLD
    if high_roi and low_effort:
        return Quadrant.QUICK_WIN
    if high_roi:
        return Quadrant.STRATEGIC_BET
    if low_effort:
        return Quadrant.NICE_TO_HAVE
    return Quadrant.DEPRIORITIZE


def quadrant_from_cfo_score(
    cfo_score: float,
    npv: float,
    roi: float,
    emv: float,
    initial_cost: float,
) -> ScoreQuadrant:
    """Bucket a normalized CFO score, gated by cost-to-value and risk-to-value.

    A score below 7.5 is forced to Deprioritize when the initial cost
    exceeds the NPV or the risk exposure outweighs 75 % of the ROI.
    """
    if cfo_score >= 7.5:
        quadrant = ScoreQuadrant.QUICK_WINS
    elif cfo_score >= 6.0:
        quadrant = ScoreQuadrant.BIG_HITTERS
    elif cfo_score >= 4.5:
        quadrant = ScoreQuadrant.NICE_TO_HAVES
    else:
        quadrant = ScoreQuadrant.DEPRIORITIZE

    cost_to_value = initial_cost / max(npv, 1)
    risk_to_value = (emv / max(initial_cost, 1)) / max(roi, 0.01)
    if (cost_to_value > 1.0 or risk_to_value > 0.75) and cfo_score < 7.5:
        quadrant = ScoreQuadrant.DEPRIORITIZE
    return quadrant


def compute_scoring(
    initial_cost: float,
    savings_by_year: Sequence[float],
    start_year: int,
    discount_rate: float,
    complexity_index: float,
    budget: float,
    eac: float,
    emv: float,
    risk_premium_factor: float = DEFAULT_RISK_PREMIUM_FACTOR,
    estimated_cost: float | None = None,
    estimated_time_weeks: float | None = None,
    cost_target: float = DEFAULT_COST_TARGET,
    time_target_months: float = DEFAULT_TIME_TARGET_MONTHS,
    global_risk_factor: float | None = None,
) -> ScoringComponents:
    """Compute the CFO scoring components for one process.

    Args:
        initial_cost: One-time costs plus the first year of software.
        savings_by_year: Annual savings projections, year 1 first.
        start_year: First year of benefit realization (1-based).
        discount_rate: Base discount rate as a decimal.
        complexity_index: Process complexity on a 0-10 scale.
        budget: Approved budget, for execution health.
        eac: Estimate at completion, for execution health.
        emv: Expected monetary value of risks, for the risk factor.
        risk_premium_factor: Discount rate premium at maximum risk.
        estimated_cost: Effort cost input; falls back to ``initial_cost``.
        estimated_time_weeks: Implementation time in weeks; falls back to 1.
        cost_target: Absolute cost anchor for effort.
        time_target_months: Absolute time anchor for effort, in months.
        global_risk_factor: Organization-wide override of the complexity index.

    Returns:
        ScoringComponents with the quadrant on the ROI/effort matrix.
    """
    risk = effective_risk(complexity_index, global_risk_factor)
    r_adj = discount_rate + risk_premium_factor * (risk / 10)

    npv_final = risk_adjusted_npv(
        initial_cost,
        savings_by_year,
        start_year,
        discount_rate,
        risk,
        risk_premium_factor,
    )

    roi_raw = npv_final / max(initial_cost, 1)
    roi_a = roi_raw * (1 - ROI_RISK_PENALTY * (risk / 10))

    execution_health = clamp01(1 - (eac - budget) / max(budget, 1))
    risk_factor = clamp01(1 - emv / max(initial_cost, 1))

    if estimated_cost is None:
        estimated_cost = initial_cost
    if estimated_time_weeks is None:
        estimated_time_weeks = 1.0
    effort = implementation_effort(estimated_cost, estimated_time_weeks, risk, cost_target, time_target_months)

    cfo_score_raw = 0.5 * roi_a + 0.3 * execution_health + 0.2 * risk_factor
    roi_capped = min(roi_a, ROI_SCORE_CAP)
    cfo_score_norm = 10 * (0.5 * (roi_capped / ROI_SCORE_CAP) + 0.3 * execution_health + 0.2 * risk_factor)

    quadrant = quadrant_from_roi_effort(roi_a, effort)
    logger.debug(
        "Scoring: risk=%.1f%s r_adj=%.4f npv=%.2f roi_raw=%.4f roi_a=%.4f effort=%.3f quadrant=%s",
        risk,
        " (global override)" if global_risk_factor is not None else "",
        r_adj,
        npv_final,
        roi_raw,
        roi_a,
        effort,
        quadrant,
    )

    return ScoringComponents(
        npv_final=npv_final,
        roi_a=roi_a,
        implementation_effort=effort,
        execution_health=execution_health,
        risk_factor=risk_factor,
        r_adj=r_adj,
        cfo_score_raw=cfo_score_raw,
        cfo_score_norm=cfo_score_norm,
        quadrant=quadrant,
    )
