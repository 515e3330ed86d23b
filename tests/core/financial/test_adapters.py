"""Tests for the legacy payload adapter."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import ValidationError

from src.core.financial.adapters import (
    DEFAULT_GROUPS,
    load_input_data,
    normalize_compliance,
    normalize_global_defaults,
    normalize_process,
)
from src.core.financial.models import CostClassification, GlobalDefaults, LegacyFlatPenalty, PerIncidentFine
from src.core.financial.process_roi import compute_process_roi


class TestTimelineRename:
    def test_legacy_key_renamed(self) -> None:
        process = normalize_process({"id": "p", "name": "P", "implementationCosts": {"implementationTimelineMonths": 6}})
        costs = process["implementationCosts"]
        assert costs["implementationTimelineWeeks"] == 6
        assert "implementationTimelineMonths" not in costs

    def test_canonical_key_wins(self) -> None:
        raw = {"implementationTimelineMonths": 6, "implementationTimelineWeeks": 8}
        process = normalize_process({"id": "p", "name": "P", "implementationCosts": raw})
        assert process["implementationCosts"]["implementationTimelineWeeks"] == 8

    def test_global_defaults_renamed(self) -> None:
        defaults = normalize_global_defaults({"implementationTimelineMonths": 5})
        assert defaults == {"implementationTimelineWeeks": 5}


class TestProcessDefaults:
    def test_flags_default(self) -> None:
        """Stored processes without flags are selected, one FTE, on global settings."""
        process = normalize_process({"id": "p", "name": "P"})
        assert process["selected"] is True
        assert process["fteCount"] == 1
        assert process["implementationCosts"]["useGlobalSettings"] is True

    def test_explicit_values_kept(self) -> None:
        process = normalize_process(
            {"id": "p", "name": "P", "selected": False, "fteCount": 3, "implementationCosts": {"useGlobalSettings": False}}
        )
        assert process["selected"] is False
        assert process["fteCount"] == 3
        assert process["implementationCosts"]["useGlobalSettings"] is False

    def test_zero_fte_replaced(self) -> None:
        assert normalize_process({"id": "p", "name": "P", "fteCount": 0})["fteCount"] == 1

    def test_snake_case_keys_respected(self) -> None:
        process = normalize_process({"id": "p", "name": "P", "fte_count": 4, "implementation_costs": {}})
        assert process["fte_count"] == 4
        assert "fteCount" not in process
        assert process["implementation_costs"]["useGlobalSettings"] is True

    def test_input_not_mutated(self) -> None:
        raw: dict[str, Any] = {"id": "p", "name": "P", "implementationCosts": {"implementationTimelineMonths": 6}}
        normalize_process(raw)
        assert raw["implementationCosts"] == {"implementationTimelineMonths": 6}


class TestCompliance:
    def test_flat_typed_fine(self) -> None:
        compliance = normalize_compliance(
            {
                "hasComplianceRisk": True,
                "fineType": "per-record",
                "amountPerRecord": 150,
                "recordsAtRisk": 1000,
                "amountPerDay": 99,
            }
        )
        assert compliance["fine"] == {"fineType": "per-record", "amountPerRecord": 150, "recordsAtRisk": 1000}
        assert "amountPerDay" not in compliance

    def test_missing_amounts_default_to_zero(self) -> None:
        compliance = normalize_compliance({"fineType": "daily", "amountPerDay": 100})
        assert compliance["fine"]["expectedDurationDays"] == 0

    def test_annual_penalty_becomes_legacy_fine(self) -> None:
        compliance = normalize_compliance({"hasComplianceRisk": True, "annualPenaltyRisk": 5000})
        assert compliance["fine"] == {"fineType": "legacy-flat", "annualPenaltyRisk": 5000}

    def test_null_probability_dropped(self) -> None:
        compliance = normalize_compliance({"fineType": "daily", "probabilityOfOccurrence": None})
        assert "probabilityOfOccurrence" not in compliance

    def test_unknown_fine_type(self) -> None:
        with pytest.raises(ValueError, match="Unknown compliance fine type"):
            normalize_compliance({"fineType": "per-parsec"})

    def test_canonical_shape_untouched(self) -> None:
        canonical = {"hasComplianceRisk": True, "fine": {"fineType": "daily", "amountPerDay": 5}}
        assert normalize_compliance(canonical) == canonical


class TestAttritionMigration:
    def test_cost_to_replace_migrated(self) -> None:
        defaults = normalize_global_defaults({"attritionCosts": {"annualTurnoverRate": 20, "costToReplace": 15000}})
        assert defaults["attritionCosts"] == {"annualTurnoverRate": 20, "costToReplacePercentage": 60}


class TestLoadInputData:
    def test_full_legacy_payload(self, raw_payload: dict[str, Any]) -> None:
        data = load_input_data(raw_payload)
        process = data.processes[0]

        assert process.implementation_costs.implementation_timeline_weeks == 4
        assert isinstance(process.compliance_risk.fine, PerIncidentFine)
        assert process.compliance_risk.probability_of_occurrence == 25
        assert data.global_defaults.overhead_costs.rate == 0
        assert [g.id for g in data.groups] == [g["id"] for g in DEFAULT_GROUPS]

    def test_legacy_flat_penalty_loaded(self) -> None:
        data = load_input_data(
            {"processes": [{"id": "p", "name": "P", "complianceRisk": {"hasComplianceRisk": True, "annualPenaltyRisk": 900}}]}
        )
        fine = data.processes[0].compliance_risk.fine
        assert isinstance(fine, LegacyFlatPenalty)
        assert fine.annual_penalty_risk == 900

    def test_zero_week_timeline_rejected(self) -> None:
        with pytest.raises(ValidationError):
            load_input_data(
                {"processes": [{"id": "p", "name": "P", "implementationCosts": {"implementationTimelineMonths": 0}}]}
            )

    def test_empty_payload(self) -> None:
        data = load_input_data({})
        assert data.processes == []
        assert len(data.groups) == 5

    def test_missing_fte_count_overrides_derived_ftes(self) -> None:
        """Given a stored process without fteCount saving 1,200,000 hours a year,
        When it is loaded through the adapter,
        Then one FTE is reported instead of the hours-based figure."""
        raw = {
            "id": "p",
            "name": "P",
            "taskVolume": 200_000,
            "taskVolumeUnit": "month",
            "timePerTask": 60,
            "timeUnit": "minutes",
            "implementationCosts": {"automationCoverage": 50},
        }
        classification = CostClassification(hard_costs=["laborCosts"], soft_costs=[])
        loaded = load_input_data({"processes": [raw]}).processes[0]

        via_adapter = compute_process_roi(loaded, GlobalDefaults(), classification)
        assert via_adapter.annual_time_savings == pytest.approx(1_200_000)
        assert via_adapter.ftes_freed == 1.0

        canonical = compute_process_roi(loaded.model_copy(update={"fte_count": 0}), GlobalDefaults(), classification)
        assert canonical.ftes_freed == pytest.approx(1_200_000 / 2080)
