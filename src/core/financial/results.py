"""Result types produced by the ROI engine.

Every result is a frozen dataclass exposing ``to_dict()`` for the API
layer. Monetary values are rounded to cents on serialization only; the
in-memory values keep full precision.
"""

from __future__ import annotations

import dataclasses
import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

from src.core.financial.models import ImplementationCosts


class BlockReason(enum.StrEnum):
    """Why a calculation was refused instead of run."""

    MISSING_ORG_ID = "missing_org_id"
    CLASSIFICATION_NOT_LOADED = "classification_not_loaded"
    INVALID_CLASSIFICATION = "invalid_classification"
    DATA_NOT_READY = "data_not_ready"


def _serialize(value: Any) -> Any:
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, float):
        return round(value, 2)
    if isinstance(value, BaseModel):
        return value.model_dump()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return value.to_dict()
    if isinstance(value, Mapping):
        return {k: _serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_serialize(v) for v in value]
    return value


class _Serializable:
    def to_dict(self) -> dict[str, Any]:
        return {f.name: _serialize(getattr(self, f.name)) for f in dataclasses.fields(self)}  # type: ignore[arg-type]


@dataclass(frozen=True)
class InternalCostSavings(_Serializable):
    """Savings on the twelve internal cost categories, grouped four ways."""

    # Labor & Workforce
    training_onboarding_savings: float = 0.0
    overtime_premiums_savings: float = 0.0
    shadow_systems_savings: float = 0.0
    # IT & Operations
    software_licensing_savings: float = 0.0
    infrastructure_savings: float = 0.0
    it_support_savings: float = 0.0
    # Compliance & Risk
    error_remediation_savings: float = 0.0
    audit_compliance_savings: float = 0.0
    downtime_savings: float = 0.0
    # Opportunity Costs
    decision_delay_savings: float = 0.0
    staff_capacity_drag_savings: float = 0.0
    customer_impact_savings: float = 0.0

    total_labor_workforce_savings: float = 0.0
    total_it_operations_savings: float = 0.0
    total_compliance_risk_savings: float = 0.0
    total_opportunity_cost_savings: float = 0.0
    total_internal_cost_savings: float = 0.0

    hard_dollar_savings: float = 0.0
    soft_dollar_savings: float = 0.0


@dataclass(frozen=True)
class ProcessROIResult(_Serializable):
    process_id: str
    name: str
    group: str
    implementation_costs: ImplementationCosts
    start_month: int
    end_month: float

    annual_net_savings: float = 0.0
    roi_percentage: float = 0.0
    payback_period_months: float = 0.0
    monthly_savings: float = 0.0
    monthly_time_saved: float = 0.0
    annual_time_savings: float = 0.0
    fully_loaded_hourly_rate: float = 0.0
    peak_season_savings: float = 0.0
    overtime_savings: float = 0.0
    sla_compliance_value: float = 0.0

    current_process_cost: float = 0.0
    new_process_cost: float = 0.0
    net_cost_reduction: float = 0.0
    total_investment: float = 0.0
    break_even_month: float = 0.0

    error_reduction_savings: float = 0.0
    compliance_risk_reduction: float = 0.0
    revenue_uplift: float = 0.0
    prompt_payment_benefit: float = 0.0
    system_integration_costs: float = 0.0
    ftes_freed: float = 0.0
    hard_savings: float = 0.0
    soft_savings: float = 0.0
    internal_cost_savings: InternalCostSavings = field(default_factory=InternalCostSavings)

    ongoing_it_support_costs: float = 0.0
    ongoing_training_costs: float = 0.0
    ongoing_overtime_costs: float = 0.0
    ongoing_shadow_systems_costs: float = 0.0

    blocked: bool = False


@dataclass(frozen=True)
class SensitivityBands(_Serializable):
    """ROI % at -20 %, baseline and +20 % average automation coverage."""

    conservative: float = 0.0
    likely: float = 0.0
    optimistic: float = 0.0


@dataclass(frozen=True)
class ROIResults(_Serializable):
    annual_net_savings: float = 0.0
    roi_percentage: float = 0.0
    payback_period: float = 0.0
    monthly_savings: float = 0.0
    monthly_time_saved: float = 0.0
    annual_cost: float = 0.0
    annual_time_savings: float = 0.0

    peak_season_savings: float = 0.0
    overtime_savings: float = 0.0
    temp_staff_savings: float = 0.0
    sla_compliance_value: float = 0.0
    implementation_roi: tuple[float, ...] = ()

    npv: float = 0.0
    irr: float = 0.0
    total_hard_savings: float = 0.0
    total_soft_savings: float = 0.0
    ebitda_impact: float = 0.0
    ebitda_by_year: Mapping[str, float] = field(
        default_factory=lambda: {"year1": 0.0, "year2": 0.0, "year3": 0.0}
    )
    total_ftes_freed: float = 0.0
    fte_productivity_uplift: float = 0.0
    total_error_reduction_savings: float = 0.0
    total_compliance_risk_reduction: float = 0.0
    total_revenue_uplift: float = 0.0
    total_prompt_payment_benefit: float = 0.0
    total_attrition_savings: float = 0.0
    total_system_integration_costs: float = 0.0
    total_internal_cost_savings: float = 0.0
    total_internal_hard_dollar_savings: float = 0.0
    total_internal_soft_dollar_savings: float = 0.0

    ongoing_it_support_costs: float = 0.0
    ongoing_training_costs: float = 0.0
    ongoing_overtime_costs: float = 0.0
    ongoing_shadow_systems_costs: float = 0.0

    sensitivity_analysis: SensitivityBands = field(default_factory=SensitivityBands)
    process_results: tuple[ProcessROIResult, ...] = ()

    blocked: bool = False
    block_reason: BlockReason | None = None

    @classmethod
    def blocked_sentinel(cls, reason: BlockReason) -> ROIResults:
        """All-zero results flagged as blocked; never real figures."""
        return cls(blocked=True, block_reason=reason)


@dataclass(frozen=True)
class CashflowPoint(_Serializable):
    month: int
    cumulative_savings: float
    cumulative_cost: float
    net_cashflow: float
