"""Organization-scoped ROI routes.

Every endpoint loads the organization's cost classification from the
store and goes through the boundary guard. A blocked calculation is
answered with 409 rather than with zero-valued figures.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from src.api.deps import get_classification_store, get_roi_service
from src.api.schemas.roi import CashflowRequest, ROIRequest, ScenarioRequest
from src.core.financial.adapters import load_input_data
from src.core.financial.classification_store import ClassificationStore
from src.core.financial.guard import ROIContext
from src.core.financial.models import InputData
from src.core.financial.portfolio import generate_cashflow_data, with_coverage
from src.core.financial.prioritization import prioritize_portfolio
from src.core.financial.results import ROIResults
from src.core.financial.service import ROIService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["roi"])


def _context(org_id: str, store: ClassificationStore, data: InputData, data_ready: bool) -> ROIContext:
    classification = store.get(org_id)
    return ROIContext(
        org_id=org_id,
        classification_loaded=classification is not None,
        cost_classification=classification,
        data_ready=data_ready,
        process_count=len(data.processes),
    )


def _run_or_409(service: ROIService, context: ROIContext, data: InputData, horizon: int | None) -> ROIResults:
    results = service.run(context, data, horizon)
    if results.blocked:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": "Results unavailable: configuration incomplete",
                "reason": results.block_reason.value if results.block_reason else None,
            },
        )
    return results


@router.post("/organizations/{org_id}/roi")
async def compute_roi(
    org_id: str,
    payload: ROIRequest,
    store: ClassificationStore = Depends(get_classification_store),
    service: ROIService = Depends(get_roi_service),
) -> dict[str, Any]:
    """Portfolio ROI over the selected processes."""
    data = load_input_data(payload.input_data)
    context = _context(org_id, store, data, payload.data_ready)
    return _run_or_409(service, context, data, payload.time_horizon_months).to_dict()


@router.post("/organizations/{org_id}/roi/cashflow")
async def compute_cashflow(
    org_id: str,
    payload: CashflowRequest,
    store: ClassificationStore = Depends(get_classification_store),
    service: ROIService = Depends(get_roi_service),
) -> dict[str, Any]:
    """Cumulative savings and cost per month."""
    data = load_input_data(payload.input_data)
    context = _context(org_id, store, data, payload.data_ready)
    results = _run_or_409(service, context, data, payload.time_horizon_months)
    months = payload.months if payload.months is not None else service.settings.roi_default_cashflow_months
    points = generate_cashflow_data(data, months, results)
    return {"months": months, "items": [p.to_dict() for p in points]}


@router.post("/organizations/{org_id}/roi/scenario")
async def compute_scenario(
    org_id: str,
    payload: ScenarioRequest,
    store: ClassificationStore = Depends(get_classification_store),
    service: ROIService = Depends(get_roi_service),
) -> dict[str, Any]:
    """Portfolio ROI with every process at the given automation coverage."""
    data = with_coverage(load_input_data(payload.input_data), payload.coverage_pct)
    context = _context(org_id, store, data, payload.data_ready)
    results = _run_or_409(service, context, data, payload.time_horizon_months)
    return {"coverage_pct": payload.coverage_pct, "results": results.to_dict()}


@router.post("/organizations/{org_id}/prioritization")
async def compute_prioritization(
    org_id: str,
    payload: ROIRequest,
    store: ClassificationStore = Depends(get_classification_store),
    service: ROIService = Depends(get_roi_service),
) -> dict[str, Any]:
    """Opportunity matrix: both quadrant models and the starting process."""
    data = load_input_data(payload.input_data)
    context = _context(org_id, store, data, payload.data_ready)
    results = _run_or_409(service, context, data, payload.time_horizon_months)
    horizon = payload.time_horizon_months
    if horizon is None:
        horizon = service.settings.roi_default_time_horizon_months
    return prioritize_portfolio(data, results, horizon).to_dict()
