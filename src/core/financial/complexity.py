"""Complexity metrics for the risk-adjusted scoring model.

Raw counts of inputs, steps and dependencies are normalized onto a 0-10
scale and combined into a complexity index:

    complexity_index = 0.4 * inputs_score + 0.4 * steps_score + 0.2 * dependencies_score

The index drives the risk category (Simple / Moderate / Complex) and the
risk premium applied by :mod:`src.core.financial.scoring`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from src.core.financial.models import ComplexityMetrics, RiskCategory, WorkflowNode

logger = logging.getLogger(__name__)

INPUTS_WEIGHT = 0.4
STEPS_WEIGHT = 0.4
DEPENDENCIES_WEIGHT = 0.2

_NON_STEP_NODE_TYPES = frozenset({"start", "end"})


@dataclass(frozen=True)
class RiskMapping:
    category: RiskCategory
    risk_value: int


@dataclass(frozen=True)
class WorkflowComplexity:
    """Counts and normalized scores gathered from a workflow diagram."""

    inputs_count: int
    steps_count: int
    dependencies_count: int
    inputs_score: float
    steps_score: float
    dependencies_score: float

    def to_dict(self) -> dict[str, float]:
        return {
            "inputs_count": self.inputs_count,
            "steps_count": self.steps_count,
            "dependencies_count": self.dependencies_count,
            "inputs_score": round(self.inputs_score, 2),
            "steps_score": round(self.steps_score, 2),
            "dependencies_score": round(self.dependencies_score, 2),
        }


def normalize_inputs_score(inputs_count: float) -> float:
    """0-2 inputs map to 1-3, 3-5 to 4-6, 6+ to 7-10."""
    if inputs_count <= 2:
        return min(3.0, max(1.0, 1 + inputs_count))
    if inputs_count <= 5:
        return 4 + ((inputs_count - 3) / 2) * 2
    return min(10.0, 7 + ((inputs_count - 6) / 4) * 3)


def normalize_steps_score(steps_count: float) -> float:
    """1-5 steps map to 1-3, 6-15 to 4-6, 16+ to 7-10."""
    if steps_count <= 5:
        return min(3.0, max(1.0, 1 + ((steps_count - 1) / 4) * 2))
    if steps_count <= 15:
        return 4 + ((steps_count - 6) / 9) * 2
    return min(10.0, 7 + ((steps_count - 16) / 10) * 3)


def normalize_dependencies_score(dependencies_count: float) -> float:
    """0-1 teams map to 1-3, 2-3 to 4-6, 4+ to 7-10."""
    if dependencies_count <= 1:
        return min(3.0, max(1.0, 1 + dependencies_count * 2))
    if dependencies_count <= 3:
        return 4 + (dependencies_count - 2) * 2
    return min(10.0, 7 + ((dependencies_count - 4) / 3) * 3)


def complexity_index(inputs_score: float, steps_score: float, dependencies_score: float) -> float:
    """Weighted complexity index, rounded to one decimal place."""
    index = inputs_score * INPUTS_WEIGHT + steps_score * STEPS_WEIGHT + dependencies_score * DEPENDENCIES_WEIGHT
    return round(index, 1)


def map_complexity_to_risk(index: float) -> RiskMapping:
    """Map a complexity index onto its risk category and risk value.

    0.0-3.9 is Simple (2), 4.0-6.9 Moderate (5), 7.0-10.0 Complex (8).
    """
    if index < 4.0:
        return RiskMapping(RiskCategory.SIMPLE, 2)
    if index < 7.0:
        return RiskMapping(RiskCategory.MODERATE, 5)
    return RiskMapping(RiskCategory.COMPLEX, 8)


def complexity_index_for(metrics: ComplexityMetrics | None) -> float:
    """Complexity index of stored metrics, preferring a precomputed value."""
    if metrics is None:
        return 0.0
    if metrics.complexity_index is not None:
        return metrics.complexity_index
    return complexity_index(metrics.inputs_score, metrics.steps_score, metrics.dependencies_score)


def _unique_labels(values: Iterable[str]) -> set[str]:
    return {value.strip().lower() for value in values if value.strip()}


def gather_workflow_complexity(nodes: Iterable[WorkflowNode]) -> WorkflowComplexity:
    """Count inputs, steps and dependencies from workflow nodes.

    Inputs are unique triggers plus unique inputs (nodes flagged as input
    nodes count once each). Steps are all nodes except start/end.
    Dependencies are unique dependency names plus responsible teams.
    """
    triggers: set[str] = set()
    inputs: set[str] = set()
    dependencies: set[str] = set()
    steps_count = 0

    for node in nodes:
        config = node.config
        triggers |= _unique_labels(config.triggers)
        inputs |= _unique_labels(config.inputs)
        if config.is_input_node:
            inputs.add(node.id)
        dependencies |= _unique_labels(config.dependencies)
        if config.responsible_team.strip():
            dependencies.add(config.responsible_team.strip().lower())
        if node.type not in _NON_STEP_NODE_TYPES:
            steps_count += 1

    inputs_count = len(triggers) + len(inputs)
    dependencies_count = len(dependencies)

    logger.debug(
        "Workflow complexity: inputs=%d steps=%d dependencies=%d",
        inputs_count,
        steps_count,
        dependencies_count,
    )
    return WorkflowComplexity(
        inputs_count=inputs_count,
        steps_count=steps_count,
        dependencies_count=dependencies_count,
        inputs_score=normalize_inputs_score(inputs_count),
        steps_score=normalize_steps_score(steps_count),
        dependencies_score=normalize_dependencies_score(dependencies_count),
    )
