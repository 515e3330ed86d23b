"""Unit normalization for task volume, task duration and labor cost."""

from __future__ import annotations

import enum

WORKING_DAYS_PER_MONTH = 22
WEEKS_PER_MONTH = 4.33
WORK_HOURS_PER_YEAR = 2080


class VolumeUnit(enum.StrEnum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


class TimeUnit(enum.StrEnum):
    MINUTES = "minutes"
    HOURS = "hours"


def monthly_task_volume(volume: float, unit: VolumeUnit | str) -> float:
    """Convert a task count expressed per ``unit`` into tasks per month."""
    unit = VolumeUnit(unit)
    if unit is VolumeUnit.DAY:
        return volume * WORKING_DAYS_PER_MONTH
    if unit is VolumeUnit.WEEK:
        return volume * WEEKS_PER_MONTH
    if unit is VolumeUnit.QUARTER:
        return volume / 3
    if unit is VolumeUnit.YEAR:
        return volume / 12
    return volume


def minutes_per_task(time: float, unit: TimeUnit | str) -> float:
    """Convert a per-task duration into minutes."""
    if TimeUnit(unit) is TimeUnit.HOURS:
        return time * 60
    return time


def weeks_to_months(weeks: float) -> float:
    return weeks / WEEKS_PER_MONTH


def effective_hourly_wage(salary_mode: bool, annual_salary: float, average_hourly_wage: float) -> float:
    """Hourly wage from either the salary (2080 h/year) or the hourly input."""
    if salary_mode:
        return annual_salary / WORK_HOURS_PER_YEAR
    return average_hourly_wage


def annual_compensation(salary_mode: bool, annual_salary: float, average_hourly_wage: float) -> float:
    if salary_mode:
        return annual_salary
    return average_hourly_wage * WORK_HOURS_PER_YEAR
