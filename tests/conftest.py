"""Shared test fixtures for the ValueDock ROI test suite.

Provides test settings, canonical process payloads, a full cost
classification and an async HTTP client against a freshly created app.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from src.core.config import Settings
from src.core.financial.models import (
    COST_CLASSIFICATION_KEYS,
    CostClassification,
    GlobalDefaults,
    ImplementationCosts,
    InputData,
    OverheadCosts,
    ProcessData,
)

# Hard/soft split most organizations start with.
HARD_COST_KEYS = [
    "laborCosts",
    "softwareLicensing",
    "infrastructureCosts",
    "itSupportMaintenance",
    "apiLicensing",
    "overtimePremiums",
]
SOFT_COST_KEYS = [key for key in COST_CLASSIFICATION_KEYS if key not in HARD_COST_KEYS]


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings that ignore the environment and .env files."""
    return Settings(
        app_env="testing",
        debug=False,
        cors_origins=["http://localhost:3000"],
        _env_file=None,  # type: ignore[call-arg]
    )


@pytest.fixture
def classification() -> CostClassification:
    return CostClassification(org_id="org-1", hard_costs=HARD_COST_KEYS, soft_costs=SOFT_COST_KEYS)


@pytest.fixture
def no_overhead_defaults() -> GlobalDefaults:
    """Global defaults with zero overhead, so the loaded rate equals the wage."""
    return GlobalDefaults(
        overhead_costs=OverheadCosts(
            benefits=0,
            payroll_taxes=0,
            paid_time_off=0,
            training_onboarding=0,
            overhead_ga=0,
        )
    )


def _make_process(**overrides: Any) -> ProcessData:
    """A selected invoice process: 1,000 tasks/month at 6 minutes, $30/h, 50 % coverage."""
    costs = overrides.pop("implementation_costs", None) or ImplementationCosts(
        software_cost=500.0,
        automation_coverage=50.0,
        implementation_timeline_weeks=4.0,
        upfront_costs=5_000.0,
        training_costs=1_000.0,
        consulting_costs=2_000.0,
    )
    fields: dict[str, Any] = {
        "id": "p1",
        "name": "Invoice Processing",
        "group": "Finance",
        "selected": True,
        "average_hourly_wage": 30.0,
        "task_volume": 1_000.0,
        "task_volume_unit": "month",
        "time_per_task": 6.0,
        "time_unit": "minutes",
        "fte_count": 0.0,
        "implementation_costs": costs,
    }
    fields.update(overrides)
    return ProcessData(**fields)


@pytest.fixture
def process() -> ProcessData:
    return _make_process()


@pytest.fixture
def input_data(no_overhead_defaults: GlobalDefaults) -> InputData:
    return InputData(
        processes=[
            _make_process(),
            _make_process(id="p2", name="Expense Review", group="Finance", task_volume=400.0),
            _make_process(id="p3", name="Ticket Triage", group="Support", selected=False),
        ],
        global_defaults=no_overhead_defaults,
    )


def _raw_input_payload() -> dict[str, Any]:
    """A camelCase payload as the front end stores it, including legacy keys."""
    return {
        "processes": [
            {
                "id": "p1",
                "name": "Invoice Processing",
                "group": "Finance",
                "selected": True,
                "averageHourlyWage": 30,
                "taskVolume": 1000,
                "taskVolumeUnit": "month",
                "timePerTask": 6,
                "timeUnit": "minutes",
                "implementationCosts": {
                    "softwareCost": 500,
                    "automationCoverage": 50,
                    "implementationTimelineMonths": 4,
                    "upfrontCosts": 5000,
                    "trainingCosts": 1000,
                    "consultingCosts": 2000,
                },
                "complianceRisk": {
                    "hasComplianceRisk": True,
                    "fineType": "per-incident",
                    "amountPerIncident": 10000,
                    "expectedIncidentsPerYear": 2,
                    "probabilityOfOccurrence": 25,
                },
            }
        ],
        "globalDefaults": {
            "overheadCosts": {
                "benefits": 0,
                "payrollTaxes": 0,
                "paidTimeOff": 0,
                "trainingOnboarding": 0,
                "overheadGA": 0,
            },
        },
    }


@pytest.fixture
def raw_payload() -> dict[str, Any]:
    return _raw_input_payload()


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to a new application instance."""
    from src.api.main import create_app

    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def process_factory() -> Any:
    """Build variants of the standard process with field overrides."""
    return _make_process
