"""ROI service facade.

The approved entry point for portfolio ROI: ``run`` goes through the
boundary guard, ``calculate`` serves local what-if calculations that
only need a valid classification. Calculation errors propagate.
"""

from __future__ import annotations

import logging
from typing import Any

from src.core.config import Settings, get_settings
from src.core.financial.guard import (
    ROIContext,
    blocked_results,
    build_enriched_classification,
    coerce_classification,
    guard_roi,
)
from src.core.financial.models import InputData
from src.core.financial.portfolio import compute_portfolio_roi
from src.core.financial.results import BlockReason, ROIResults

logger = logging.getLogger(__name__)


class ROIService:
    """Guarded access to the portfolio ROI calculation."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()

    @property
    def settings(self) -> Settings:
        return self._settings

    def _resolve_horizon(self, time_horizon_months: int | None) -> int:
        if time_horizon_months is None:
            time_horizon_months = self._settings.roi_default_time_horizon_months
        return self.check_time_horizon(time_horizon_months)

    def check_time_horizon(self, time_horizon_months: int) -> int:
        """Validate a horizon against the configured bounds.

        Raises:
            ValueError: If the horizon lies outside the allowed range.
        """
        low = self._settings.roi_min_time_horizon_months
        high = self._settings.roi_max_time_horizon_months
        if not low <= time_horizon_months <= high:
            raise ValueError(f"time_horizon_months must be between {low} and {high}, got {time_horizon_months}")
        return time_horizon_months

    def can_run(self, context: ROIContext) -> bool:
        return guard_roi(context).proceed

    def run(self, context: ROIContext, data: InputData, time_horizon_months: int | None = None) -> ROIResults:
        """Run the portfolio calculation if the guard lets it through.

        Returns:
            The portfolio results, or the blocked sentinel naming the first
            failed precondition.
        """
        decision = guard_roi(context)
        if decision.reason is not None:
            return blocked_results(decision.reason)

        classification = build_enriched_classification(context.cost_classification, context.org_id)
        if classification is None:
            logger.error("Cost classification for org=%s could not be enriched", context.org_id)
            return blocked_results(BlockReason.INVALID_CLASSIFICATION)

        horizon = self._resolve_horizon(time_horizon_months)
        logger.info(
            "Running ROI for org=%s: %d processes (%d selected), horizon=%d months, %d hard / %d soft cost keys",
            context.org_id,
            len(data.processes),
            len(data.selected_processes),
            horizon,
            len(classification.hard_costs),
            len(classification.soft_costs),
        )
        results = compute_portfolio_roi(data, horizon, classification)
        logger.debug(
            "ROI complete for org=%s: net=%.2f npv=%.2f",
            context.org_id,
            results.annual_net_savings,
            results.npv,
        )
        return results

    def calculate(
        self,
        data: InputData,
        time_horizon_months: int | None,
        cost_classification: Any,
    ) -> ROIResults:
        """Local calculation without organization or readiness checks."""
        classification = coerce_classification(cost_classification)
        if classification is None:
            logger.warning("Local ROI calculation refused: invalid cost classification")
            return blocked_results(BlockReason.INVALID_CLASSIFICATION)
        horizon = self._resolve_horizon(time_horizon_months)
        return compute_portfolio_roi(data, horizon, classification)
