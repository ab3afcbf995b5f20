"""
Scenario evaluation: score each redistribution policy's outcome and rank them.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from portfolio_os.config import HIGH_VALUE_THRESHOLD
from portfolio_os.data.ingest import ClientProfile, Partner
from portfolio_os.metrics.strategic_value import calculate_strategic_value
from portfolio_os.modeling.redistribution import (
    POLICY_ORDER,
    AssignmentResult,
    RedistributionPolicy,
    assign,
    original_owners,
    split_partners,
)

logger = logging.getLogger(__name__)


@dataclass
class ScenarioResult:
    """Evaluated outcome of one policy."""
    policy: RedistributionPolicy
    capacity_loads: List[float] = field(default_factory=list)
    revenue_variance: float = 0.0
    max_capacity: float = 0.0
    clients_moved: int = 0
    high_value_moves: int = 0
    movement_ratio: float = 0.0
    risk_score: int = 0
    unassigned_count: int = 0

    @property
    def label(self) -> str:
        return self.policy.label

    @property
    def risk_label(self) -> str:
        return risk_label(self.risk_score)

    @property
    def composite_score(self) -> float:
        return composite_score(self)


@dataclass
class ScenarioComparison:
    """Ranked scenarios (best first) plus the assignment behind each."""
    ranked: List[ScenarioResult]
    assignments: Dict[RedistributionPolicy, AssignmentResult]

    @property
    def recommended(self) -> Optional[ScenarioResult]:
        return self.ranked[0] if self.ranked else None

    def to_frame(self) -> pd.DataFrame:
        return scenario_frame(self.ranked)


# =============================================================================
# METRICS
# =============================================================================

def revenue_variance_pct(revenues: Sequence[float]) -> float:
    """Coefficient of variation (population std dev / mean) as a percent, 1dp."""
    if len(revenues) < 2:
        return 0.0
    values = np.asarray(revenues, dtype=float)
    mean = values.mean()
    if mean <= 0:
        return 0.0
    return round(float(values.std() / mean * 100), 1)


def capacity_risk(max_capacity: float) -> int:
    if max_capacity > 95:
        return 40
    if max_capacity > 85:
        return 25
    if max_capacity > 75:
        return 10
    return 0


def variance_risk(revenue_variance: float) -> int:
    if revenue_variance > 30:
        return 30
    if revenue_variance > 20:
        return 20
    if revenue_variance > 10:
        return 10
    return 0


def movement_risk(movement_ratio: float) -> int:
    if movement_ratio > 0.3:
        return 20
    if movement_ratio > 0.15:
        return 12
    if movement_ratio > 0.05:
        return 5
    return 0


def high_value_risk(high_value_moves: int) -> int:
    if high_value_moves > 5:
        return 10
    if high_value_moves > 2:
        return 5
    return 0


def calculate_risk_score(max_capacity: float, revenue_variance: float,
                         movement_ratio: float, high_value_moves: int) -> int:
    """Composite 0-100 risk: capacity 40, revenue balance 30, movement 20, high-value moves 10."""
    score = (
        capacity_risk(max_capacity)
        + variance_risk(revenue_variance)
        + movement_risk(movement_ratio)
        + high_value_risk(high_value_moves)
    )
    return min(100, score)


def risk_label(risk_score: float) -> str:
    if risk_score < 20:
        return "Low Risk"
    if risk_score < 40:
        return "Medium Risk"
    if risk_score < 70:
        return "High Risk"
    return "Critical Risk"


def composite_score(scenario: ScenarioResult) -> float:
    """Ranking score, lower is better."""
    score = scenario.risk_score * 2 + scenario.revenue_variance
    if scenario.max_capacity > 90:
        score += 50
    elif scenario.max_capacity > 85:
        score += 20
    score += scenario.clients_moved * 0.1
    return score


# =============================================================================
# EVALUATION
# =============================================================================

def moved_clients(result: AssignmentResult, partners: Sequence[Partner]) -> List[str]:
    """Assigned clients that left a departing partner. Lateral moves are not counted."""
    owners = original_owners(partners)
    moved = []
    for client_id, target_id in result.assignments.items():
        owner = owners.get(client_id)
        if owner is not None and owner.is_departing and owner.id != target_id:
            moved.append(client_id)
    return moved


def evaluate_assignment(result: AssignmentResult,
                        partners: Sequence[Partner],
                        clients: Sequence[ClientProfile]) -> ScenarioResult:
    """Score one policy's assignment over the full partner/client universe."""
    loads = [pa.capacity_percent for pa in result.partners]
    revenues = [pa.projected_revenue for pa in result.partners]

    moved = moved_clients(result, partners)
    clients_by_id = {c.id: c for c in clients}
    high_value = sum(
        1 for cid in moved
        if cid in clients_by_id and calculate_strategic_value(clients_by_id[cid]) > HIGH_VALUE_THRESHOLD
    )

    revenue_variance = revenue_variance_pct(revenues)
    max_capacity = max(loads, default=0.0)
    movement_ratio = len(moved) / max(1, len(clients))

    return ScenarioResult(
        policy=result.policy,
        capacity_loads=loads,
        revenue_variance=revenue_variance,
        max_capacity=max_capacity,
        clients_moved=len(moved),
        high_value_moves=high_value,
        movement_ratio=movement_ratio,
        risk_score=calculate_risk_score(max_capacity, revenue_variance, movement_ratio, high_value),
        unassigned_count=len(result.unassigned),
    )


def rank_scenarios(scenarios: Sequence[ScenarioResult]) -> List[ScenarioResult]:
    """Lowest composite first; ties keep evaluation order."""
    return sorted(scenarios, key=composite_score)


def compare_policies(partners: Sequence[Partner],
                     clients: Sequence[ClientProfile],
                     policies: Optional[Sequence[RedistributionPolicy]] = None,
                     custom_map: Optional[Mapping[str, str]] = None) -> ScenarioComparison:
    """
    Run each policy, evaluate it, and rank the outcomes.

    Policies always run in Balanced, Expertise, Relationship, Custom order.
    Custom is only included by default when a custom map is supplied.
    """
    if policies is None:
        requested = set(POLICY_ORDER) if custom_map else set(POLICY_ORDER) - {RedistributionPolicy.CUSTOM}
    else:
        requested = {RedistributionPolicy(p) for p in policies}

    departing, remaining = split_partners(partners)
    assignments: Dict[RedistributionPolicy, AssignmentResult] = {}
    evaluated: List[ScenarioResult] = []
    for policy in POLICY_ORDER:
        if policy not in requested:
            continue
        result = assign(departing, remaining, clients, policy, custom_map=custom_map)
        assignments[policy] = result
        evaluated.append(evaluate_assignment(result, partners, clients))

    ranked = rank_scenarios(evaluated)
    if ranked:
        logger.info("Recommended policy: %s (composite %.1f)",
                    ranked[0].policy.value, ranked[0].composite_score)
    return ScenarioComparison(ranked=ranked, assignments=assignments)


def scenario_frame(scenarios: Sequence[ScenarioResult]) -> pd.DataFrame:
    """Display table, one row per scenario in the given order."""
    columns = [
        "policy", "strategy", "revenue_variance_pct", "max_capacity_pct",
        "clients_moved", "high_value_moves", "unassigned", "risk_score",
        "risk_label", "composite_score",
    ]
    rows = [{
        "policy": s.policy.value,
        "strategy": s.label,
        "revenue_variance_pct": s.revenue_variance,
        "max_capacity_pct": s.max_capacity,
        "clients_moved": s.clients_moved,
        "high_value_moves": s.high_value_moves,
        "unassigned": s.unassigned_count,
        "risk_score": s.risk_score,
        "risk_label": s.risk_label,
        "composite_score": round(s.composite_score, 1),
    } for s in scenarios]
    return pd.DataFrame(rows, columns=columns)
