"""Request schemas for the ROI and scoring endpoints.

Bodies use the camelCase keys the ValueDock front end sends; snake_case
names are accepted too. ``inputData`` stays a raw mapping here because it
may arrive in a legacy shape: the input adapter normalizes it before
validation against the canonical models.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ROIRequest(CamelModel):
    """Portfolio ROI for an organization's process data."""

    input_data: dict[str, Any]
    time_horizon_months: int | None = Field(None, ge=1)
    data_ready: bool = True


class CashflowRequest(ROIRequest):
    months: int | None = Field(None, ge=1, le=240)


class ScenarioRequest(ROIRequest):
    coverage_pct: float = Field(..., ge=0, le=100)


class CostClassificationUpdate(CamelModel):
    hard_costs: list[str]
    soft_costs: list[str]
    modified_by: str | None = None
    modified_by_name: str | None = None


class ScoringRequest(CamelModel):
    """Direct inputs of the CFO scoring model for one process."""

    initial_cost: float = Field(..., ge=0)
    savings_by_year: list[float] = Field(..., min_length=1)
    start_year: int = Field(1, ge=1)
    discount_rate: float = Field(0.1, ge=0, description="Base discount rate as a decimal")
    complexity_index: float = Field(0.0, ge=0, le=10)
    budget: float | None = Field(None, ge=0)
    eac: float | None = Field(None, ge=0)
    emv: float = Field(0.0, ge=0)
    risk_premium_factor: float = Field(0.03, ge=0)
    estimated_cost: float | None = Field(None, ge=0)
    estimated_time_weeks: float | None = Field(None, ge=0)
    cost_target: float = Field(100_000.0, gt=0)
    time_target_months: float = Field(6.0, gt=0)
    global_risk_factor: float | None = Field(None, ge=0, le=10)
