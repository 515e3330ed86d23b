"""Per-process ROI calculator.

Turns one process, the organization's global defaults and its cost
classification into a :class:`ProcessROIResult`: gross and net savings,
time saved, payback, error/compliance/revenue effects, the twelve
internal cost categories, and the hard/soft dollar split.

The function is pure. It must only be reached through the boundary guard;
arriving here without a valid classification yields a blocked all-zero
result and is logged as an error.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from src.core.financial.guard import coerce_classification
from src.core.financial.models import (
    ComplianceRisk,
    CostClassification,
    CyclicalType,
    ErrorReworkCosts,
    GlobalDefaults,
    InternalCosts,
    LegacyFlatPenalty,
    ProcessData,
    RevenueImpact,
    SLACostUnit,
    SLARequirements,
    TaskType,
    TimeOfDay,
)
from src.core.financial.results import InternalCostSavings, ProcessROIResult
from src.core.financial.units import (
    WORK_HOURS_PER_YEAR,
    effective_hourly_wage,
    minutes_per_task,
    monthly_task_volume,
)

logger = logging.getLogger(__name__)

PAYBACK_NEVER = 999.0
DEFAULT_CYCLICAL_MULTIPLIER = 1.5

# Annualization factor for the cost of missing an SLA, by cost unit.
SLA_ANNUALIZATION: dict[SLACostUnit, float] = {
    SLACostUnit.PER_MINUTE: 8760,  # misses per hour
    SLACostUnit.PER_HOUR: 365,  # misses per day
    SLACostUnit.PER_DAY: 52,  # misses per week
    SLACostUnit.PER_WEEK: 12,  # misses per month
    SLACostUnit.PER_MONTH: 1,
    SLACostUnit.PER_YEAR: 1,
}


def _zero_result(process: ProcessData, *, blocked: bool = False) -> ProcessROIResult:
    costs = process.implementation_costs
    return ProcessROIResult(
        process_id=process.id,
        name=process.name,
        group=process.group,
        implementation_costs=costs,
        start_month=costs.start_month,
        end_month=costs.start_month + costs.implementation_timeline_weeks,
        blocked=blocked,
    )


def sla_compliance_value(sla: SLARequirements) -> float:
    """Annual value of no longer missing the SLA."""
    if not sla.has_sla:
        return 0.0
    return sla.cost_of_missing * sla.average_misses_per_month * SLA_ANNUALIZATION[sla.cost_unit]


def error_reduction_savings(
    errors: ErrorReworkCosts,
    monthly_tasks: float,
    current_process_cost: float,
    coverage: float,
) -> float:
    """Annual rework avoided; ``coverage`` is a fraction."""
    annual_tasks = monthly_tasks * 12
    annual_errors = annual_tasks * (errors.error_rate / 100)
    if errors.rework_cost_percentage > 0:
        cost_per_error = (current_process_cost / annual_tasks) * (errors.rework_cost_percentage / 100) if annual_tasks else 0.0
    else:
        cost_per_error = errors.rework_cost_per_error
    return annual_errors * cost_per_error * coverage


def compliance_risk_reduction(compliance: ComplianceRisk, coverage: float) -> float:
    """Expected annual fine avoided; ``coverage`` is a fraction.

    Typed fines are weighted by their probability of occurrence. A legacy
    flat penalty is taken at face value.
    """
    fine = compliance.fine
    if not compliance.has_compliance_risk or fine is None:
        return 0.0
    if isinstance(fine, LegacyFlatPenalty):
        return fine.base_amount() * coverage
    return fine.base_amount() * (compliance.probability_of_occurrence / 100) * coverage


def revenue_uplift(revenue: RevenueImpact, coverage: float) -> float:
    if not revenue.has_revenue_impact:
        return 0.0
    return revenue.annual_process_revenue * (revenue.uplift_percentage / 100) * coverage


def prompt_payment_benefit(revenue: RevenueImpact, coverage: float) -> float:
    """Early-payment discount captured; requires all three terms to be positive."""
    if not revenue.has_prompt_payment_terms:
        return 0.0
    return revenue.annual_invoice_processing_volume * (revenue.prompt_payment_discount_percentage / 100) * coverage


def internal_cost_savings(
    internal: InternalCosts,
    current_process_cost: float,
    coverage: float,
) -> dict[str, float]:
    """Savings per internal cost category, keyed by result field name."""

    def saving(pct: float) -> float:
        return current_process_cost * (pct / 100) * coverage

    return {
        "training_onboarding_savings": saving(internal.training_onboarding_costs),
        "overtime_premiums_savings": saving(internal.overtime_premiums),
        "shadow_systems_savings": saving(internal.shadow_systems_costs),
        "software_licensing_savings": saving(internal.software_licensing),
        "infrastructure_savings": saving(internal.infrastructure_costs),
        "it_support_savings": saving(internal.it_support_maintenance),
        "error_remediation_savings": saving(internal.error_remediation_costs),
        "audit_compliance_savings": saving(internal.audit_compliance_costs),
        "downtime_savings": saving(internal.downtime_costs),
        "decision_delay_savings": saving(internal.decision_delays),
        "staff_capacity_drag_savings": saving(internal.staff_capacity_drag),
        "customer_impact_savings": saving(internal.customer_impact_costs),
    }


def classified_savings(categories: dict[str, float]) -> dict[str, float]:
    """Map the sixteen classifiable cost keys onto internal category savings.

    ``laborCosts``, ``turnoverCosts``, ``apiLicensing`` and ``slaPenalties``
    are base costs rather than internal categories and map to zero here;
    labor and SLA savings are routed separately.
    """
    return {
        "laborCosts": 0.0,
        "trainingOnboardingCosts": categories["training_onboarding_savings"],
        "overtimePremiums": categories["overtime_premiums_savings"],
        "shadowSystemsCosts": categories["shadow_systems_savings"],
        "turnoverCosts": 0.0,
        "softwareLicensing": categories["software_licensing_savings"],
        "infrastructureCosts": categories["infrastructure_savings"],
        "itSupportMaintenance": categories["it_support_savings"],
        "apiLicensing": 0.0,
        "errorRemediationCosts": categories["error_remediation_savings"],
        "auditComplianceCosts": categories["audit_compliance_savings"],
        "downtimeCosts": categories["downtime_savings"],
        "decisionDelays": categories["decision_delay_savings"],
        "staffCapacityDrag": categories["staff_capacity_drag_savings"],
        "customerImpactCosts": categories["customer_impact_savings"],
        "slaPenalties": 0.0,
    }


def _sum_positive(keys: list[str], savings: dict[str, float]) -> float:
    return sum(value for value in (savings.get(key, 0.0) for key in keys) if value > 0)


def _route(amount: float, hard: bool) -> tuple[float, float]:
    return (amount, 0.0) if hard else (0.0, amount)


def _overtime_savings(
    process: ProcessData,
    global_defaults: GlobalDefaults,
    monthly_time_saved: float,
    fully_loaded_rate: float,
) -> float:
    premium = global_defaults.overtime_rate - fully_loaded_rate
    savings = 0.0
    if process.time_of_day is TimeOfDay.OFF_HOURS:
        savings = monthly_time_saved * premium * 12

    cyclical = process.cyclical_pattern
    if cyclical.type is CyclicalType.HOURLY and cyclical.peak_hours:
        start = global_defaults.business_hours.start_hour
        end = global_defaults.business_hours.end_hour
        after_hours = [hour for hour in cyclical.peak_hours if hour < start or hour >= end]
        if after_hours:
            ratio = len(after_hours) / len(cyclical.peak_hours)
            savings += monthly_time_saved * ratio * premium * 12
    return savings


def compute_process_roi(
    process: ProcessData,
    global_defaults: GlobalDefaults,
    cost_classification: CostClassification | Any,
) -> ProcessROIResult:
    """Compute the ROI result for a single process.

    Args:
        process: The process to evaluate.
        global_defaults: Organization-wide overhead, rates and business hours.
        cost_classification: The organization's hard/soft cost routing.

    Returns:
        The full result. Unselected processes yield an all-zero result;
        a missing or malformed classification yields an all-zero result
        flagged ``blocked``.
    """
    classification = coerce_classification(cost_classification)
    if classification is None:
        logger.error(
            "ROI calculator reached without a valid cost classification (process=%s, got %s)",
            process.name,
            type(cost_classification).__name__,
        )
        return _zero_result(process, blocked=True)

    if not process.selected:
        return _zero_result(process)

    costs = process.implementation_costs

    # Labor rate
    wage = effective_hourly_wage(process.salary_mode, process.annual_salary, process.average_hourly_wage)
    fully_loaded_rate = wage * (1 + global_defaults.overhead_costs.rate)

    # Volume and time saved
    monthly_tasks = monthly_task_volume(process.task_volume, process.task_volume_unit)
    task_minutes = minutes_per_task(process.time_per_task, process.time_unit)
    coverage = costs.automation_coverage / 100
    monthly_time_saved = monthly_tasks * task_minutes * coverage / 60

    # Cost before and after automation
    current_monthly_cost = monthly_tasks * task_minutes / 60 * fully_loaded_rate
    current_process_cost = current_monthly_cost * 12
    new_process_cost = current_monthly_cost * (1 - coverage) * 12 + costs.software_cost * 12
    net_cost_reduction = current_process_cost - new_process_cost

    # Pattern multipliers
    overtime_multiplier = process.overtime_multiplier if process.time_of_day is TimeOfDay.OFF_HOURS else 1.0
    cyclical_multiplier = 1.0
    if process.cyclical_pattern.type is not CyclicalType.NONE:
        cyclical_multiplier = process.cyclical_pattern.multiplier or DEFAULT_CYCLICAL_MULTIPLIER
    base_monthly_savings = monthly_time_saved * fully_loaded_rate * overtime_multiplier * cyclical_multiplier

    # Seasonal adjustment
    annual_time_savings = monthly_time_saved * 12
    annual_gross_savings = base_monthly_savings * 12
    peak_season_savings = 0.0
    if process.task_type is TaskType.SEASONAL:
        peak_months = len(process.seasonal_pattern.peak_months)
        regular_months = 12 - peak_months
        peak_multiplier = process.seasonal_pattern.peak_multiplier
        peak_monthly_savings = base_monthly_savings * peak_multiplier
        annual_gross_savings = regular_months * base_monthly_savings + peak_months * peak_monthly_savings
        annual_time_savings = regular_months * monthly_time_saved + peak_months * monthly_time_saved * peak_multiplier
        peak_season_savings = (peak_monthly_savings - base_monthly_savings) * peak_months

    overtime_savings = _overtime_savings(process, global_defaults, monthly_time_saved, fully_loaded_rate)
    sla_value = sla_compliance_value(process.sla_requirements)
    total_annual_savings = annual_gross_savings + overtime_savings + sla_value

    # Payback
    total_investment = costs.one_time_costs
    monthly_after_software = total_annual_savings / 12 - costs.software_cost
    payback_months = total_investment / monthly_after_software if monthly_after_software > 0 else PAYBACK_NEVER
    start_month = costs.start_month
    end_month = start_month + costs.implementation_timeline_weeks

    # Risk and revenue effects
    error_savings = error_reduction_savings(process.error_rework_costs, monthly_tasks, current_process_cost, coverage)
    compliance_savings = compliance_risk_reduction(process.compliance_risk, coverage)
    uplift = revenue_uplift(process.revenue_impact, coverage)
    prompt_payment = prompt_payment_benefit(process.revenue_impact, coverage)

    # System integration is a cost, reduced IT support hours remain
    reduced_it_hours = costs.it_support_hours_per_month * (1 - coverage)
    ongoing_it_support = reduced_it_hours * 12 * costs.it_hourly_rate
    system_integration_costs = costs.api_licensing + ongoing_it_support

    ftes_freed = process.fte_count or annual_time_savings / WORK_HOURS_PER_YEAR

    # Internal cost categories
    categories = internal_cost_savings(process.internal_costs, current_process_cost, coverage)
    labor_total = (
        categories["training_onboarding_savings"]
        + categories["overtime_premiums_savings"]
        + categories["shadow_systems_savings"]
    )
    it_total = (
        categories["software_licensing_savings"]
        + categories["infrastructure_savings"]
        + categories["it_support_savings"]
    )
    compliance_total = (
        categories["error_remediation_savings"]
        + categories["audit_compliance_savings"]
        + categories["downtime_savings"]
    )
    opportunity_total = (
        categories["decision_delay_savings"]
        + categories["staff_capacity_drag_savings"]
        + categories["customer_impact_savings"]
    )
    internal_total = labor_total + it_total + compliance_total + opportunity_total

    # Hard/soft split
    keyed = classified_savings(categories)
    internal_hard = _sum_positive(classification.hard_costs, keyed)
    internal_soft = _sum_positive(classification.soft_costs, keyed)

    is_hard = classification.is_hard
    labor_hard, labor_soft = _route(annual_gross_savings, is_hard("laborCosts"))
    overtime_hard, overtime_soft = _route(overtime_savings, is_hard("overtimePremiums"))
    error_hard, error_soft = _route(error_savings, is_hard("errorRemediationCosts"))
    sla_hard, sla_soft = _route(sla_value, is_hard("slaPenalties") or is_hard("customerImpactCosts"))
    # Prompt payment is cash: hard unless the organization declared nothing hard.
    prompt_hard, prompt_soft = _route(prompt_payment, bool(classification.hard_costs))

    hard_savings = (
        labor_hard + overtime_hard + sla_hard + error_hard + prompt_hard + internal_hard - system_integration_costs
    )
    soft_savings = (
        labor_soft
        + overtime_soft
        + sla_soft
        + error_soft
        + prompt_soft
        + uplift
        + compliance_savings
        + internal_soft
    )

    # Top-line figure; system integration is only netted out of hard savings.
    annual_net_savings = total_annual_savings + error_savings + compliance_savings + uplift + prompt_payment + internal_total

    roi_percentage = 0.0
    if annual_net_savings > 0 and costs.software_cost > 0:
        roi_percentage = annual_net_savings / (costs.software_cost * 12) * 100

    logger.debug(
        "Process %s: gross=%.2f net=%.2f hard=%.2f soft=%.2f internal=%.2f (hard %.2f / soft %.2f)",
        process.name,
        annual_gross_savings,
        annual_net_savings,
        hard_savings,
        soft_savings,
        internal_total,
        internal_hard,
        internal_soft,
    )

    return ProcessROIResult(
        process_id=process.id,
        name=process.name,
        group=process.group,
        implementation_costs=costs,
        start_month=start_month,
        end_month=end_month,
        annual_net_savings=annual_net_savings,
        roi_percentage=roi_percentage,
        payback_period_months=payback_months,
        monthly_savings=annual_net_savings / 12,
        monthly_time_saved=monthly_time_saved,
        annual_time_savings=annual_time_savings,
        fully_loaded_hourly_rate=fully_loaded_rate,
        peak_season_savings=peak_season_savings,
        overtime_savings=overtime_savings,
        sla_compliance_value=sla_value,
        current_process_cost=current_process_cost,
        new_process_cost=new_process_cost,
        net_cost_reduction=net_cost_reduction,
        total_investment=total_investment,
        break_even_month=start_month + math.ceil(payback_months),
        error_reduction_savings=error_savings,
        compliance_risk_reduction=compliance_savings,
        revenue_uplift=uplift,
        prompt_payment_benefit=prompt_payment,
        system_integration_costs=system_integration_costs,
        ftes_freed=ftes_freed,
        hard_savings=hard_savings,
        soft_savings=soft_savings,
        internal_cost_savings=InternalCostSavings(
            **categories,
            total_labor_workforce_savings=labor_total,
            total_it_operations_savings=it_total,
            total_compliance_risk_savings=compliance_total,
            total_opportunity_cost_savings=opportunity_total,
            total_internal_cost_savings=internal_total,
            hard_dollar_savings=internal_hard,
            soft_dollar_savings=internal_soft,
        ),
        ongoing_it_support_costs=ongoing_it_support,
        ongoing_training_costs=current_process_cost * (process.internal_costs.training_onboarding_costs / 100) * (1 - coverage),
        ongoing_overtime_costs=current_process_cost * (process.internal_costs.overtime_premiums / 100) * (1 - coverage),
        ongoing_shadow_systems_costs=current_process_cost * (process.internal_costs.shadow_systems_costs / 100) * (1 - coverage),
    )
