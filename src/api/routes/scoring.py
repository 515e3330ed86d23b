"""Direct access to the CFO scoring model."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from src.api.schemas.roi import ScoringRequest
from src.core.financial.scoring import compute_scoring, quadrant_from_cfo_score

router = APIRouter(prefix="/api/v1", tags=["scoring"])


@router.post("/scoring/cfo")
async def score_process(payload: ScoringRequest) -> dict[str, Any]:
    """Scoring components plus the score-based quadrant.

    Budget and EAC default to the initial cost (on budget).
    """
    budget = payload.budget if payload.budget is not None else payload.initial_cost
    eac = payload.eac if payload.eac is not None else payload.initial_cost
    components = compute_scoring(
        initial_cost=payload.initial_cost,
        savings_by_year=payload.savings_by_year,
        start_year=payload.start_year,
        discount_rate=payload.discount_rate,
        complexity_index=payload.complexity_index,
        budget=budget,
        eac=eac,
        emv=payload.emv,
        risk_premium_factor=payload.risk_premium_factor,
        estimated_cost=payload.estimated_cost,
        estimated_time_weeks=payload.estimated_time_weeks,
        cost_target=payload.cost_target,
        time_target_months=payload.time_target_months,
        global_risk_factor=payload.global_risk_factor,
    )
    result = components.to_dict()
    result["score_quadrant"] = str(
        quadrant_from_cfo_score(
            components.cfo_score_norm,
            components.npv_final,
            components.roi_a,
            payload.emv,
            payload.initial_cost,
        )
    )
    return result
