"""Input adapter: the only place legacy payload shapes are accepted.

Stored organization data predates several schema changes. This module
rewrites such payloads into the canonical shape of
:mod:`src.core.financial.models` before validation:

* ``implementationTimelineMonths`` (which always held weeks) becomes
  ``implementationTimelineWeeks``.
* Flat compliance fields (``fineType``, ``amountPerDay``, ...,
  ``annualPenaltyRisk``) become a tagged ``fine`` structure.
* ``attritionCosts.costToReplace`` becomes ``costToReplacePercentage = 60``.
* Missing ``selected``, ``fteCount`` and ``useGlobalSettings`` flags get
  the defaults stored data was created with.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any

from src.core.financial.models import InputData

logger = logging.getLogger(__name__)

LEGACY_TIMELINE_KEY = "implementationTimelineMonths"
TIMELINE_KEY = "implementationTimelineWeeks"
MIGRATED_COST_TO_REPLACE_PERCENTAGE = 60

DEFAULT_GROUPS: list[dict[str, str]] = [
    {"id": "operations", "name": "Operations", "description": "Operational processes and workflows"},
    {"id": "finance", "name": "Finance", "description": "Financial and accounting processes"},
    {"id": "support", "name": "Support", "description": "Customer support and service processes"},
    {"id": "marketing", "name": "Marketing", "description": "Marketing and sales processes"},
    {"id": "hr", "name": "HR", "description": "Human resources processes"},
]

# Flat compliance fields per fine type, in canonical (camelCase) names.
_FINE_FIELDS: dict[str, tuple[str, ...]] = {
    "daily": ("amountPerDay", "expectedDurationDays"),
    "per-incident": ("amountPerIncident", "expectedIncidentsPerYear"),
    "per-record": ("amountPerRecord", "recordsAtRisk"),
    "percent-revenue": ("percentageRate", "revenueAtRisk"),
}
_LEGACY_COMPLIANCE_KEYS = frozenset(
    {"fineType", "annualPenaltyRisk"} | {key for keys in _FINE_FIELDS.values() for key in keys}
)


def _rename_timeline(costs: dict[str, Any]) -> None:
    if LEGACY_TIMELINE_KEY not in costs:
        return
    legacy = costs.pop(LEGACY_TIMELINE_KEY)
    if TIMELINE_KEY not in costs and "implementation_timeline_weeks" not in costs and legacy is not None:
        costs[TIMELINE_KEY] = legacy


def normalize_compliance(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Rewrite a flat legacy compliance block into the tagged fine shape."""
    compliance = dict(raw)
    if "fine" in compliance or not (_LEGACY_COMPLIANCE_KEYS & compliance.keys()):
        return compliance

    fine_type = compliance.pop("fineType", None)
    flat = {key: compliance.pop(key) for key in list(compliance) if key in _LEGACY_COMPLIANCE_KEYS}
    if fine_type:
        if fine_type not in _FINE_FIELDS:
            raise ValueError(f"Unknown compliance fine type: {fine_type!r}")
        fine = {"fineType": fine_type}
        for key in _FINE_FIELDS[fine_type]:
            fine[key] = flat.get(key) or 0
        compliance["fine"] = fine
    elif flat.get("annualPenaltyRisk") is not None:
        compliance["fine"] = {"fineType": "legacy-flat", "annualPenaltyRisk": flat["annualPenaltyRisk"]}

    if compliance.get("probabilityOfOccurrence") is None:
        compliance.pop("probabilityOfOccurrence", None)
    return compliance


def _key(data: Mapping[str, Any], camel: str, snake: str) -> str:
    """The key ``data`` uses for a field, preferring the camelCase alias."""
    if camel not in data and snake in data:
        return snake
    return camel


def _default_if_unset(data: dict[str, Any], camel: str, snake: str, value: Any, *, falsy: bool = False) -> None:
    key = _key(data, camel, snake)
    current = data.get(key)
    if current is None or (falsy and not current):
        data[key] = value


def normalize_process(raw: Mapping[str, Any]) -> dict[str, Any]:
    process = copy.deepcopy(dict(raw))
    _default_if_unset(process, "selected", "selected", True)
    _default_if_unset(process, "fteCount", "fte_count", 1, falsy=True)

    costs_key = _key(process, "implementationCosts", "implementation_costs")
    costs = dict(process.get(costs_key) or {})
    _rename_timeline(costs)
    _default_if_unset(costs, "useGlobalSettings", "use_global_settings", True)
    process[costs_key] = costs

    compliance_key = _key(process, "complianceRisk", "compliance_risk")
    if process.get(compliance_key):
        process[compliance_key] = normalize_compliance(process[compliance_key])
    return process


def normalize_global_defaults(raw: Mapping[str, Any]) -> dict[str, Any]:
    defaults = copy.deepcopy(dict(raw))
    _rename_timeline(defaults)

    attrition = defaults.get("attritionCosts")
    if isinstance(attrition, Mapping) and "costToReplace" in attrition and "costToReplacePercentage" not in attrition:
        logger.info("Migrating legacy attrition costToReplace to a percentage of salary")
        defaults["attritionCosts"] = {
            "annualTurnoverRate": attrition.get("annualTurnoverRate", 15),
            "costToReplacePercentage": MIGRATED_COST_TO_REPLACE_PERCENTAGE,
        }
    return defaults


def normalize_input_data(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Return a canonical copy of a raw ``InputData`` payload."""
    data: dict[str, Any] = {
        "groups": raw.get("groups") or copy.deepcopy(DEFAULT_GROUPS),
        "processes": [normalize_process(p) for p in raw.get("processes") or []],
    }
    global_defaults = raw.get("globalDefaults", raw.get("global_defaults"))
    if global_defaults:
        data["globalDefaults"] = normalize_global_defaults(global_defaults)
    return data


def load_input_data(raw: Mapping[str, Any]) -> InputData:
    """Normalize and validate a raw payload.

    Raises:
        pydantic.ValidationError: If the normalized payload is still invalid.
    """
    return InputData.model_validate(normalize_input_data(raw))
