"""Canonical input models for the ROI engine.

These are the shapes the calculators consume. They accept the camelCase
keys produced by the ValueDock front end (``populate_by_name`` keeps the
snake_case names usable from Python). Legacy payloads, such as the
``implementationTimelineMonths`` key or the flat ``annualPenaltyRisk``
field, are converted by :mod:`src.core.financial.adapters` before they
reach these models.

All models are frozen: a calculation sees an immutable snapshot.
"""

from __future__ import annotations

import enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from src.core.financial.units import TimeUnit, VolumeUnit


class _Model(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# -- Enumerations --------------------------------------------------------------


class TaskType(enum.StrEnum):
    BATCH = "batch"
    REAL_TIME = "real-time"
    SEASONAL = "seasonal"


class TimeOfDay(enum.StrEnum):
    BUSINESS_HOURS = "business-hours"
    OFF_HOURS = "off-hours"
    ANY = "any"


class CyclicalType(enum.StrEnum):
    HOURLY = "hourly"
    DAILY = "daily"
    MONTHLY = "monthly"
    NONE = "none"


class SLACostUnit(enum.StrEnum):
    PER_MINUTE = "per-minute"
    PER_HOUR = "per-hour"
    PER_DAY = "per-day"
    PER_WEEK = "per-week"
    PER_MONTH = "per-month"
    PER_YEAR = "per-year"


class UtilizationType(enum.StrEnum):
    REDEPLOYED = "redeployed"
    ELIMINATED = "eliminated"
    MIXED = "mixed"


class RiskCategory(enum.StrEnum):
    SIMPLE = "Simple"
    MODERATE = "Moderate"
    COMPLEX = "Complex"


# -- Global settings -------------------------------------------------------------


class OverheadCosts(_Model):
    """Overhead as percentages of wage."""

    benefits: float = 20.0
    payroll_taxes: float = 8.0
    paid_time_off: float = 5.0
    training_onboarding: float = 2.0
    overhead_ga: float = Field(5.0, alias="overheadGA")

    @property
    def rate(self) -> float:
        """Effective overhead rate applied multiplicatively to the wage."""
        total = (
            self.benefits
            + self.payroll_taxes
            + self.paid_time_off
            + self.training_onboarding
            + self.overhead_ga
        )
        return total / 100


class BusinessHours(_Model):
    start: str = "09:00"
    end: str = "17:00"
    timezone: str = "America/New_York"

    @property
    def start_hour(self) -> int:
        return int(self.start.split(":")[0])

    @property
    def end_hour(self) -> int:
        return int(self.end.split(":")[0])


class FinancialAssumptions(_Model):
    discount_rate: float = 10.0
    inflation_rate: float = 3.0
    years_to_project: int = 5
    tax_rate: float = 25.0
    risk_premium_factor: float = 0.03
    global_risk_factor: float | None = Field(None, ge=0, le=10)


class AttritionCosts(_Model):
    annual_turnover_rate: float = 15.0
    cost_to_replace_percentage: float = 60.0


class EffortAnchors(_Model):
    cost_target: float = Field(100_000.0, gt=0)
    time_target: float = Field(6.0, gt=0)  # months


class SeasonalPattern(_Model):
    peak_months: list[int] = Field(default_factory=list)
    peak_multiplier: float = 2.0


class SLARequirements(_Model):
    has_sla: bool = Field(False, alias="hasSLA")
    sla_target: str = ""
    cost_of_missing: float = 0.0
    cost_unit: SLACostUnit = SLACostUnit.PER_MONTH
    average_misses_per_month: float = 0.0


class GlobalDefaults(_Model):
    average_hourly_wage: float = 20.0
    salary_mode: bool = False
    annual_salary: float = 41_600.0
    task_type: TaskType = TaskType.REAL_TIME
    time_of_day: TimeOfDay = TimeOfDay.BUSINESS_HOURS
    overtime_multiplier: float = 1.5
    overhead_costs: OverheadCosts = Field(default_factory=OverheadCosts)
    sla_requirements: SLARequirements = Field(default_factory=SLARequirements)
    seasonal_pattern: SeasonalPattern = Field(default_factory=SeasonalPattern)

    software_cost: float = 0.0
    automation_coverage: float = Field(80.0, ge=0, le=100)
    implementation_timeline_weeks: float = Field(3.0, ge=1)
    upfront_costs: float = 0.0
    training_costs: float = 0.0
    consulting_costs: float = 0.0

    temp_staff_cost_per_hour: float = 60.0
    overtime_rate: float = 60.0
    business_hours: BusinessHours = Field(default_factory=BusinessHours)

    attrition_costs: AttritionCosts = Field(default_factory=AttritionCosts)
    financial_assumptions: FinancialAssumptions = Field(default_factory=FinancialAssumptions)
    effort_anchors: EffortAnchors = Field(default_factory=EffortAnchors)


# -- Process inputs ----------------------------------------------------------------


class CyclicalPattern(_Model):
    type: CyclicalType = CyclicalType.NONE
    peak_hours: list[int] = Field(default_factory=list)
    peak_days: list[int] = Field(default_factory=list)
    peak_dates_of_month: list[int] = Field(default_factory=list)
    multiplier: float = 1.5


class ImplementationCosts(_Model):
    use_global_settings: bool = False
    software_cost: float = 0.0  # monthly
    automation_coverage: float = Field(80.0, ge=0, le=100)
    implementation_timeline_weeks: float = Field(3.0, ge=1)
    upfront_costs: float = 0.0
    training_costs: float = 0.0
    consulting_costs: float = 0.0
    start_month: int = 1
    api_licensing: float = 0.0  # annual
    it_support_hours_per_month: float = 0.0
    it_hourly_rate: float = 0.0
    budget: float | None = None
    eac: float | None = None
    emv: float | None = None

    @property
    def one_time_costs(self) -> float:
        return self.upfront_costs + self.training_costs + self.consulting_costs


class ErrorReworkCosts(_Model):
    error_rate: float = 0.0
    rework_cost_percentage: float = 0.0
    # Fixed dollar amount per error; only used when no percentage is set.
    rework_cost_per_error: float = 0.0


class DailyFine(_Model):
    fine_type: Literal["daily"] = "daily"
    amount_per_day: float = 0.0
    expected_duration_days: float = 0.0

    def base_amount(self) -> float:
        return self.amount_per_day * self.expected_duration_days


class PerIncidentFine(_Model):
    fine_type: Literal["per-incident"] = "per-incident"
    amount_per_incident: float = 0.0
    expected_incidents_per_year: float = 0.0

    def base_amount(self) -> float:
        return self.amount_per_incident * self.expected_incidents_per_year


class PerRecordFine(_Model):
    fine_type: Literal["per-record"] = "per-record"
    amount_per_record: float = 0.0
    records_at_risk: float = 0.0

    def base_amount(self) -> float:
        return self.amount_per_record * self.records_at_risk


class PercentRevenueFine(_Model):
    fine_type: Literal["percent-revenue"] = "percent-revenue"
    percentage_rate: float = 0.0
    revenue_at_risk: float = 0.0

    def base_amount(self) -> float:
        return self.revenue_at_risk * (self.percentage_rate / 100)


class LegacyFlatPenalty(_Model):
    """Flat annual penalty exposure from payloads that predate fine types."""

    fine_type: Literal["legacy-flat"] = "legacy-flat"
    annual_penalty_risk: float = 0.0

    def base_amount(self) -> float:
        return self.annual_penalty_risk


FineStructure = Annotated[
    DailyFine | PerIncidentFine | PerRecordFine | PercentRevenueFine | LegacyFlatPenalty,
    Field(discriminator="fine_type"),
]


class ComplianceRisk(_Model):
    has_compliance_risk: bool = False
    fine: FineStructure | None = None
    probability_of_occurrence: float = Field(100.0, ge=0, le=100)


class RevenueImpact(_Model):
    has_revenue_impact: bool = False
    revenue_types: list[str] = Field(default_factory=list)
    annual_process_revenue: float = 0.0
    uplift_percentage: float = Field(0.0, alias="upliftPercentageIf100Automated")
    annual_invoice_processing_volume: float = 0.0
    prompt_payment_discount_percentage: float = 0.0
    prompt_payment_window_days: float = 0.0

    @property
    def has_prompt_payment_terms(self) -> bool:
        return (
            self.prompt_payment_discount_percentage > 0
            and self.prompt_payment_window_days > 0
            and self.annual_invoice_processing_volume > 0
        )


class InternalCosts(_Model):
    """Twelve internal cost categories, each a percentage of process cost."""

    # Labor & Workforce
    training_onboarding_costs: float = 0.0
    overtime_premiums: float = 0.0
    shadow_systems_costs: float = 0.0
    # IT & Operations
    software_licensing: float = 0.0
    infrastructure_costs: float = 0.0
    it_support_maintenance: float = 0.0
    # Compliance & Risk
    error_remediation_costs: float = 0.0
    audit_compliance_costs: float = 0.0
    downtime_costs: float = 0.0
    # Opportunity Costs
    decision_delays: float = 0.0
    staff_capacity_drag: float = 0.0
    customer_impact_costs: float = 0.0


class UtilizationImpact(_Model):
    utilization_type: UtilizationType = UtilizationType.REDEPLOYED
    redeployment_value_percentage: float = 100.0


class ComplexityMetrics(_Model):
    auto_gather_from_workflow: bool = True
    inputs_count: int = 0
    steps_count: int = 0
    dependencies_count: int = 0
    inputs_score: float = 0.0
    steps_score: float = 0.0
    dependencies_score: float = 0.0
    technology_novelty: float | None = None
    change_scope: float | None = None
    complexity_index: float | None = None
    risk_category: RiskCategory | None = None
    risk_value: float | None = None


class NodeConfig(_Model):
    triggers: list[str] = Field(default_factory=list)
    inputs: list[str] = Field(default_factory=list)
    is_input_node: bool = False
    dependencies: list[str] = Field(default_factory=list)
    responsible_team: str = ""


class WorkflowNode(_Model):
    """A node of a process workflow diagram, as far as complexity is concerned."""

    id: str
    type: str = "task"
    config: NodeConfig = Field(default_factory=NodeConfig)


class ProcessData(_Model):
    id: str
    name: str
    group: str = ""
    selected: bool = False

    average_hourly_wage: float = 0.0
    salary_mode: bool = False
    annual_salary: float = 0.0
    task_volume: float = 0.0
    task_volume_unit: VolumeUnit = VolumeUnit.MONTH
    time_per_task: float = 0.0
    time_unit: TimeUnit = TimeUnit.MINUTES
    fte_count: float = 0.0

    task_type: TaskType = TaskType.REAL_TIME
    time_of_day: TimeOfDay = TimeOfDay.BUSINESS_HOURS
    overtime_multiplier: float = 1.5

    seasonal_pattern: SeasonalPattern = Field(default_factory=SeasonalPattern)
    cyclical_pattern: CyclicalPattern = Field(default_factory=CyclicalPattern)
    sla_requirements: SLARequirements = Field(default_factory=SLARequirements)
    implementation_costs: ImplementationCosts = Field(default_factory=ImplementationCosts)

    error_rework_costs: ErrorReworkCosts = Field(default_factory=ErrorReworkCosts)
    compliance_risk: ComplianceRisk = Field(default_factory=ComplianceRisk)
    revenue_impact: RevenueImpact = Field(default_factory=RevenueImpact)
    internal_costs: InternalCosts = Field(default_factory=InternalCosts)
    utilization_impact: UtilizationImpact = Field(default_factory=UtilizationImpact)

    complexity_metrics: ComplexityMetrics | None = None
    workflow_id: str | None = None


class ProcessGroup(_Model):
    id: str
    name: str
    description: str | None = None
    average_hourly_wage: float | None = None
    annual_salary: float | None = None
    engine: str | None = None


class InputData(_Model):
    processes: list[ProcessData] = Field(default_factory=list)
    groups: list[ProcessGroup] = Field(default_factory=list)
    global_defaults: GlobalDefaults = Field(default_factory=GlobalDefaults)

    @property
    def selected_processes(self) -> list[ProcessData]:
        return [p for p in self.processes if p.selected]


# -- Cost classification ---------------------------------------------------------------

COST_CLASSIFICATION_KEYS: tuple[str, ...] = (
    # Labor & Workforce
    "laborCosts",
    "trainingOnboardingCosts",
    "overtimePremiums",
    "shadowSystemsCosts",
    "turnoverCosts",
    # IT & Operations
    "softwareLicensing",
    "infrastructureCosts",
    "itSupportMaintenance",
    "apiLicensing",
    # Compliance & Risk
    "errorRemediationCosts",
    "auditComplianceCosts",
    "downtimeCosts",
    # Opportunity Costs
    "decisionDelays",
    "staffCapacityDrag",
    "customerImpactCosts",
    "slaPenalties",
)


class CostClassification(_Model):
    """Organization-specific hard/soft routing of the cost attribute keys."""

    org_id: str | None = Field(None, alias="organizationId")
    hard_costs: list[str]
    soft_costs: list[str]
    last_modified: str | None = None
    modified_by: str | None = None
    modified_by_name: str | None = None

    @model_validator(mode="after")
    def check_disjoint(self) -> CostClassification:
        overlap = set(self.hard_costs) & set(self.soft_costs)
        if overlap:
            raise ValueError(f"Cost keys classified as both hard and soft: {sorted(overlap)}")
        return self

    def is_hard(self, key: str) -> bool:
        return key in self.hard_costs
