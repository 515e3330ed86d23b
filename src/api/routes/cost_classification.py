"""Organization cost classification routes.

Reads and replaces the hard/soft routing of the sixteen cost keys for an
organization.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from src.api.deps import get_classification_store
from src.api.schemas.roi import CostClassificationUpdate
from src.core.financial.classification_store import ClassificationStore
from src.core.financial.models import COST_CLASSIFICATION_KEYS, CostClassification

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["cost-classification"])


def _classification_to_dict(classification: CostClassification) -> dict[str, Any]:
    data = classification.model_dump()
    data["unclassified"] = [
        key
        for key in COST_CLASSIFICATION_KEYS
        if key not in classification.hard_costs and key not in classification.soft_costs
    ]
    return data


@router.get("/organizations/{org_id}/cost-classification")
async def get_cost_classification(
    org_id: str,
    store: ClassificationStore = Depends(get_classification_store),
) -> dict[str, Any]:
    """Return the organization's cost classification."""
    classification = store.get(org_id)
    if classification is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No cost classification for organization {org_id}",
        )
    return _classification_to_dict(classification)


@router.put("/organizations/{org_id}/cost-classification")
async def put_cost_classification(
    org_id: str,
    payload: CostClassificationUpdate,
    store: ClassificationStore = Depends(get_classification_store),
) -> dict[str, Any]:
    """Replace the organization's cost classification.

    Unknown keys are rejected; a key may be hard or soft, not both.
    """
    unknown = sorted(set(payload.hard_costs + payload.soft_costs) - set(COST_CLASSIFICATION_KEYS))
    if unknown:
        raise ValueError(f"Unknown cost keys: {unknown}")

    classification = CostClassification(
        org_id=org_id,
        hard_costs=payload.hard_costs,
        soft_costs=payload.soft_costs,
        modified_by=payload.modified_by,
        modified_by_name=payload.modified_by_name,
    )
    stored = store.put(classification)
    return _classification_to_dict(stored)
