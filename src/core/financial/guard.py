"""Boundary guard around ROI calculations.

No calculation may run unless the organization context is known, its cost
classification has been loaded and is well formed, and the input data is
ready. A failed check produces a typed blocked outcome instead of silently
falling back to a default classification.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from src.core.financial.models import CostClassification
from src.core.financial.results import BlockReason, ROIResults

logger = logging.getLogger(__name__)

_BLOCK_MESSAGES = {
    BlockReason.MISSING_ORG_ID: "No organization context",
    BlockReason.CLASSIFICATION_NOT_LOADED: "Cost classification not loaded",
    BlockReason.INVALID_CLASSIFICATION: "Cost classification is missing or malformed",
    BlockReason.DATA_NOT_READY: "Data not ready for ROI calculation",
}


@dataclass(frozen=True)
class ROIContext:
    """Application state the guard inspects before a run.

    ``cost_classification`` is deliberately untyped: it is whatever the
    caller holds, and validating it is the guard's job.
    """

    org_id: str | None
    classification_loaded: bool
    cost_classification: Any
    data_ready: bool
    process_count: int = 0


@dataclass(frozen=True)
class GuardDecision:
    proceed: bool
    reason: BlockReason | None = None

    @property
    def message(self) -> str:
        if self.reason is None:
            return "ok"
        return _BLOCK_MESSAGES[self.reason]

    def to_dict(self) -> dict[str, Any]:
        return {
            "proceed": self.proceed,
            "reason": self.reason.value if self.reason else None,
            "message": self.message,
        }


def _hard_soft_lists(obj: Any) -> tuple[Any, Any]:
    if isinstance(obj, Mapping):
        hard = obj.get("hardCosts", obj.get("hard_costs"))
        soft = obj.get("softCosts", obj.get("soft_costs"))
        return hard, soft
    return getattr(obj, "hard_costs", None), getattr(obj, "soft_costs", None)


def is_valid_cost_classification(obj: Any) -> bool:
    """True when ``obj`` is an object with list-typed hard and soft costs."""
    if obj is None:
        return False
    if isinstance(obj, CostClassification):
        return True
    if not isinstance(obj, Mapping):
        return False
    hard, soft = _hard_soft_lists(obj)
    return isinstance(hard, list) and isinstance(soft, list)


def coerce_classification(obj: Any) -> CostClassification | None:
    """Return ``obj`` as a CostClassification, or None when it is not valid."""
    if not is_valid_cost_classification(obj):
        return None
    if isinstance(obj, CostClassification):
        return obj
    try:
        return CostClassification.model_validate(obj)
    except ValidationError as exc:
        logger.warning("Cost classification rejected: %s", exc.errors())
        return None


def build_enriched_classification(
    cost_classification: CostClassification | Mapping[str, Any],
    org_id: str | None,
) -> CostClassification | None:
    """Attach the organization id to a validated classification."""
    classification = coerce_classification(cost_classification)
    if classification is None:
        return None
    return classification.model_copy(update={"org_id": org_id})


def guard_roi(context: ROIContext) -> GuardDecision:
    """Check the four preconditions in order and report the first failure."""
    if not context.org_id:
        reason = BlockReason.MISSING_ORG_ID
    elif context.classification_loaded is not True:
        reason = BlockReason.CLASSIFICATION_NOT_LOADED
    elif not is_valid_cost_classification(context.cost_classification):
        reason = BlockReason.INVALID_CLASSIFICATION
    elif context.data_ready is not True:
        reason = BlockReason.DATA_NOT_READY
    else:
        return GuardDecision(proceed=True)

    logger.warning(
        "ROI calculation blocked for org=%s (%d processes): %s",
        context.org_id,
        context.process_count,
        _BLOCK_MESSAGES[reason],
    )
    return GuardDecision(proceed=False, reason=reason)


def blocked_results(reason: BlockReason) -> ROIResults:
    return ROIResults.blocked_sentinel(reason)
