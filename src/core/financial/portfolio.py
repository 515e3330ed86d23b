"""Portfolio aggregation of per-process ROI results.

Sums the selected processes' results, builds the monthly cash-flow vector
used for NPV and IRR, projects EBITDA per year and derives cheap
sensitivity bands. Also produces the cumulative cash-flow series shown
on the timeline and the what-if scenario at a fixed coverage.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from typing import Any

from src.core.financial.guard import coerce_classification
from src.core.financial.models import CostClassification, InputData, ProcessData, TaskType, UtilizationType
from src.core.financial.primitives import irr, npv
from src.core.financial.process_roi import compute_process_roi
from src.core.financial.results import (
    BlockReason,
    CashflowPoint,
    ProcessROIResult,
    ROIResults,
    SensitivityBands,
)
from src.core.financial.units import annual_compensation, effective_hourly_wage, minutes_per_task, monthly_task_volume

logger = logging.getLogger(__name__)

DEFAULT_TIME_HORIZON_MONTHS = 36
DEFAULT_CASHFLOW_MONTHS = 24
MIN_EBITDA_YEARS = 3

# Sensitivity scaling of the average automation coverage
CONSERVATIVE_COVERAGE_FACTOR = 0.8
OPTIMISTIC_COVERAGE_FACTOR = 1.2
DEFAULT_AVERAGE_COVERAGE = 80.0


def _total(results: Iterable[ProcessROIResult], attr: str) -> float:
    return sum(getattr(r, attr) for r in results)


def _internal_total(results: Iterable[ProcessROIResult], attr: str) -> float:
    return sum(getattr(r.internal_cost_savings, attr) for r in results)


def _temp_staff_savings(processes: list[ProcessData], temp_staff_cost_per_hour: float) -> float:
    """Temporary staff no longer needed during peak months of seasonal processes."""
    total = 0.0
    for process in processes:
        if process.task_type is not TaskType.SEASONAL:
            continue
        monthly_tasks = monthly_task_volume(process.task_volume, process.task_volume_unit)
        task_minutes = minutes_per_task(process.time_per_task, process.time_unit)
        monthly_time_saved = monthly_tasks * task_minutes * process.implementation_costs.automation_coverage / 100 / 60
        wage = effective_hourly_wage(process.salary_mode, process.annual_salary, process.average_hourly_wage)
        total += len(process.seasonal_pattern.peak_months) * monthly_time_saved * (temp_staff_cost_per_hour - wage)
    return total


def _implementation_ramp(results: list[ProcessROIResult]) -> tuple[float, ...]:
    """Monthly savings while implementations ramp up, to the latest end month."""
    if not results:
        return ()
    last_month = math.floor(max(r.end_month for r in results))
    ramp = []
    for month in range(1, last_month + 1):
        partial = 0.0
        for r in results:
            if r.start_month <= month <= r.end_month:
                progress = (month - r.start_month) / (r.end_month - r.start_month)
                partial += r.monthly_savings * progress
            elif month > r.end_month:
                partial += r.monthly_savings
        ramp.append(partial)
    return tuple(ramp)


def _ebitda_by_year(base_ebitda: float, inflation_rate: float, tax_rate: float, years: int) -> dict[str, float]:
    by_year = {
        f"year{year}": base_ebitda * (1 + inflation_rate / 100) ** (year - 1) * (1 - tax_rate)
        for year in range(1, years + 1)
    }
    for year in range(1, MIN_EBITDA_YEARS + 1):
        by_year.setdefault(f"year{year}", 0.0)
    return by_year


def compute_portfolio_roi(
    input_data: InputData,
    time_horizon_months: int = DEFAULT_TIME_HORIZON_MONTHS,
    cost_classification: CostClassification | Any = None,
) -> ROIResults:
    """Aggregate ROI over the selected processes of ``input_data``.

    Args:
        input_data: Processes, groups and global defaults.
        time_horizon_months: Length of the cash-flow projection.
        cost_classification: The organization's hard/soft cost routing.

    Returns:
        Portfolio results with every process result attached, or the
        blocked sentinel when the classification is missing or malformed.
    """
    classification = coerce_classification(cost_classification)
    if classification is None:
        logger.error("Portfolio ROI reached without a valid cost classification")
        return ROIResults.blocked_sentinel(BlockReason.INVALID_CLASSIFICATION)

    defaults = input_data.global_defaults
    process_results = [compute_process_roi(p, defaults, classification) for p in input_data.processes]
    selected_processes = input_data.selected_processes
    selected_ids = {p.id for p in selected_processes}
    selected = [r for r in process_results if r.process_id in selected_ids]

    total_net = _total(selected, "annual_net_savings")
    monthly_savings = _total(selected, "monthly_savings")

    annual_cost = sum(r.implementation_costs.software_cost * 12 for r in selected)
    annual_net_savings = total_net - annual_cost
    roi_percentage = annual_net_savings / annual_cost * 100 if annual_cost > 0 else 0.0

    monthly_cost = annual_cost / 12
    if monthly_savings > monthly_cost:
        payback_period = monthly_cost / (monthly_savings - monthly_cost)
    elif monthly_savings > 0:
        payback_period = monthly_cost / monthly_savings
    else:
        payback_period = 0.0

    error_total = _total(selected, "error_reduction_savings")
    compliance_total = _total(selected, "compliance_risk_reduction")
    revenue_total = _total(selected, "revenue_uplift")
    prompt_total = _total(selected, "prompt_payment_benefit")
    internal_total = _internal_total(selected, "total_internal_cost_savings")

    # Attrition avoided on freed FTEs, and redeployment value of the time freed
    attrition = defaults.attrition_costs
    results_by_id = {r.process_id: r for r in selected}
    attrition_total = 0.0
    productivity_uplift = 0.0
    for process in selected_processes:
        result = results_by_id.get(process.id)
        if result is None:
            continue
        compensation = annual_compensation(process.salary_mode, process.annual_salary, process.average_hourly_wage)
        replacement_cost = compensation * (attrition.cost_to_replace_percentage / 100)
        attrition_total += result.ftes_freed * (attrition.annual_turnover_rate / 100) * replacement_cost
        utilization = process.utilization_impact
        if utilization.utilization_type is not UtilizationType.ELIMINATED:
            productivity_uplift += result.ftes_freed * compensation * (utilization.redeployment_value_percentage / 100)

    # Full IT support hours, not the automation-reduced ones
    integration_total = sum(
        p.implementation_costs.api_licensing
        + p.implementation_costs.it_support_hours_per_month * 12 * p.implementation_costs.it_hourly_rate
        for p in selected_processes
    )

    assumptions = defaults.financial_assumptions
    upfront_total = _total(selected, "total_investment")
    monthly_net_savings = (
        annual_net_savings + error_total + compliance_total + revenue_total + attrition_total - integration_total
    ) / 12
    cash_flows = [-upfront_total]
    for month in range(1, time_horizon_months + 1):
        inflation = (1 + assumptions.inflation_rate / 100) ** (month / 12)
        cash_flows.append((monthly_net_savings - monthly_cost) * inflation)

    portfolio_npv = npv(cash_flows, assumptions.discount_rate / 12)
    portfolio_irr = irr(cash_flows) * 12

    tax_rate = assumptions.tax_rate / 100
    base_ebitda = (
        annual_net_savings
        + error_total
        + compliance_total
        + revenue_total
        + prompt_total
        + attrition_total
        + internal_total
        - integration_total
    )
    ebitda_by_year = _ebitda_by_year(
        base_ebitda,
        assumptions.inflation_rate,
        tax_rate,
        math.ceil(time_horizon_months / 12),
    )

    if selected:
        average_coverage = sum(r.implementation_costs.automation_coverage for r in selected) / len(selected)
    else:
        average_coverage = DEFAULT_AVERAGE_COVERAGE
    if average_coverage > 0:
        sensitivity = SensitivityBands(
            conservative=roi_percentage * (average_coverage * CONSERVATIVE_COVERAGE_FACTOR) / average_coverage,
            likely=roi_percentage,
            optimistic=roi_percentage * (average_coverage * OPTIMISTIC_COVERAGE_FACTOR) / average_coverage,
        )
    else:
        sensitivity = SensitivityBands(likely=roi_percentage)

    logger.debug(
        "Portfolio: selected=%d/%d net=%.2f roi=%.2f%% npv=%.2f irr=%.2f%%",
        len(selected),
        len(process_results),
        annual_net_savings,
        roi_percentage,
        portfolio_npv,
        portfolio_irr,
    )

    return ROIResults(
        annual_net_savings=annual_net_savings,
        roi_percentage=roi_percentage,
        payback_period=payback_period,
        monthly_savings=monthly_savings,
        monthly_time_saved=_total(selected, "monthly_time_saved"),
        annual_cost=annual_cost,
        annual_time_savings=_total(selected, "annual_time_savings"),
        peak_season_savings=_total(selected, "peak_season_savings"),
        overtime_savings=_total(selected, "overtime_savings"),
        temp_staff_savings=_temp_staff_savings(selected_processes, defaults.temp_staff_cost_per_hour),
        sla_compliance_value=_total(selected, "sla_compliance_value"),
        implementation_roi=_implementation_ramp(selected),
        npv=portfolio_npv,
        irr=portfolio_irr,
        total_hard_savings=_total(selected, "hard_savings"),
        total_soft_savings=_total(selected, "soft_savings"),
        ebitda_impact=base_ebitda * (1 - tax_rate),
        ebitda_by_year=ebitda_by_year,
        total_ftes_freed=_total(selected, "ftes_freed"),
        fte_productivity_uplift=productivity_uplift,
        total_error_reduction_savings=error_total,
        total_compliance_risk_reduction=compliance_total,
        total_revenue_uplift=revenue_total,
        total_prompt_payment_benefit=prompt_total,
        total_attrition_savings=attrition_total,
        total_system_integration_costs=integration_total,
        total_internal_cost_savings=internal_total,
        total_internal_hard_dollar_savings=_internal_total(selected, "hard_dollar_savings"),
        total_internal_soft_dollar_savings=_internal_total(selected, "soft_dollar_savings"),
        ongoing_it_support_costs=_total(selected, "ongoing_it_support_costs"),
        ongoing_training_costs=_total(selected, "ongoing_training_costs"),
        ongoing_overtime_costs=_total(selected, "ongoing_overtime_costs"),
        ongoing_shadow_systems_costs=_total(selected, "ongoing_shadow_systems_costs"),
        sensitivity_analysis=sensitivity,
        process_results=tuple(process_results),
    )


def generate_cashflow_data(
    input_data: InputData,
    months: int = DEFAULT_CASHFLOW_MONTHS,
    results: ROIResults | None = None,
    cost_classification: CostClassification | Any = None,
) -> list[CashflowPoint]:
    """Cumulative savings and cost per month, month 0 being the upfront spend.

    Each process ramps its savings linearly across its implementation
    window and pays its software cost from its start month on. When
    ``results`` is not given they are computed over the default horizon.
    Blocked results yield an empty series.
    """
    if results is None:
        results = compute_portfolio_roi(input_data, DEFAULT_TIME_HORIZON_MONTHS, cost_classification)
    if results.blocked:
        return []

    selected_ids = {p.id for p in input_data.selected_processes}
    selected = [r for r in results.process_results if r.process_id in selected_ids]

    upfront = sum(r.implementation_costs.one_time_costs for r in selected)
    points = [CashflowPoint(month=0, cumulative_savings=0.0, cumulative_cost=upfront, net_cashflow=-upfront)]
    cumulative_savings = 0.0
    cumulative_cost = upfront
    for month in range(1, months + 1):
        monthly_savings = 0.0
        monthly_software = 0.0
        for r in selected:
            if r.start_month <= month <= r.end_month:
                progress = (month - r.start_month + 1) / (r.end_month - r.start_month)
                monthly_savings += r.monthly_savings * progress
            elif month > r.end_month:
                monthly_savings += r.monthly_savings
            if month >= r.start_month:
                monthly_software += r.implementation_costs.software_cost
        cumulative_savings += monthly_savings
        cumulative_cost += monthly_software
        points.append(
            CashflowPoint(
                month=month,
                cumulative_savings=cumulative_savings,
                cumulative_cost=cumulative_cost,
                net_cashflow=cumulative_savings - cumulative_cost,
            )
        )
    return points


def with_coverage(input_data: InputData, coverage_pct: float) -> InputData:
    """Copy of ``input_data`` with every process's automation coverage overridden."""
    processes = [
        p.model_copy(
            update={"implementation_costs": p.implementation_costs.model_copy(update={"automation_coverage": coverage_pct})}
        )
        for p in input_data.processes
    ]
    return input_data.model_copy(update={"processes": processes})


def compute_scenario_roi(
    input_data: InputData,
    coverage_pct: float,
    cost_classification: CostClassification | Any,
    time_horizon_months: int = DEFAULT_TIME_HORIZON_MONTHS,
) -> ROIResults:
    """Recompute portfolio ROI as if every process reached ``coverage_pct``."""
    if not 0 <= coverage_pct <= 100:
        raise ValueError(f"coverage_pct must be between 0 and 100, got {coverage_pct}")
    return compute_portfolio_roi(with_coverage(input_data, coverage_pct), time_horizon_months, cost_classification)
