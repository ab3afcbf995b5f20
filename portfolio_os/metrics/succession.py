"""
Succession risk classification.

Three ordered derivations over one client:
relationship type -> transition complexity -> succession risk.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Sequence

import pandas as pd

from portfolio_os.config import (
    COMMUNICATION_FREQUENCY_WEIGHTS,
    COMPLEX_PRACTICE_AREAS,
    RELATIONSHIP_TYPE_RISK,
)
from portfolio_os.data.ingest import ClientProfile, latest_revenue


class RelationshipType(str, Enum):
    ORPHANED = "orphaned"
    SHARED = "shared"
    PRIMARY = "primary"
    SECONDARY = "secondary"


@dataclass(frozen=True)
class SuccessionProfile:
    """Derived succession fields for one client."""
    client_id: str
    relationship_type: RelationshipType
    transition_complexity: int
    succession_risk: int

    @property
    def risk_band(self) -> str:
        return risk_band(self.succession_risk)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def team_size(client: ClientProfile) -> int:
    return max(1, len(client.lobbyist_team))


def derive_relationship_type(client: ClientProfile) -> RelationshipType:
    if not client.primary_lobbyist:
        return RelationshipType.ORPHANED

    size = team_size(client)
    if size >= 2 and client.relationship_strength >= 7:
        return RelationshipType.SHARED
    if client.primary_lobbyist == client.client_originator and size <= 1:
        return RelationshipType.PRIMARY
    return RelationshipType.SECONDARY


def has_complex_practice_area(client: ClientProfile) -> bool:
    for area in client.practice_areas:
        lowered = area.lower()
        if any(complex_area in lowered for complex_area in COMPLEX_PRACTICE_AREAS):
            return True
    return False


def calculate_transition_complexity(client: ClientProfile) -> int:
    """Transition complexity, an integer in [1, 10]."""
    complexity = client.relationship_intensity * 0.3
    complexity += COMMUNICATION_FREQUENCY_WEIGHTS.get(client.communication_frequency, 0)
    if has_complex_practice_area(client):
        complexity += 1.5
    if client.strategic_fit_score >= 8:
        complexity += 1
    if client.conflict_risk_score is not None and client.conflict_risk_score >= 7:
        complexity += 1
    return max(1, min(10, _round_half_up(complexity)))


def calculate_succession_risk(client: ClientProfile) -> int:
    """Succession risk, an integer in [1, 10]."""
    relationship_type = derive_relationship_type(client)
    risk = float(RELATIONSHIP_TYPE_RISK[relationship_type.value])
    if client.relationship_strength < 6:
        risk += 6 - client.relationship_strength
    risk += calculate_transition_complexity(client) * 0.3
    return max(1, min(10, _round_half_up(risk)))


def classify_client(client: ClientProfile) -> SuccessionProfile:
    return SuccessionProfile(
        client_id=client.id,
        relationship_type=derive_relationship_type(client),
        transition_complexity=calculate_transition_complexity(client),
        succession_risk=calculate_succession_risk(client),
    )


# =============================================================================
# PORTFOLIO VIEWS
# =============================================================================

def risk_band(score: int) -> str:
    if score <= 3:
        return "Low"
    if score <= 6:
        return "Medium"
    return "High"


def group_clients_by_risk(clients: Sequence[ClientProfile]) -> Dict[str, List[ClientProfile]]:
    """Clients bucketed into Low / Medium / High succession risk, input order kept."""
    groups: Dict[str, List[ClientProfile]] = {"Low": [], "Medium": [], "High": []}
    for client in clients:
        groups[risk_band(calculate_succession_risk(client))].append(client)
    return groups


def highest_risk_clients(clients: Sequence[ClientProfile], limit: int = 5) -> List[SuccessionProfile]:
    """Top `limit` clients by succession risk; ties keep input order."""
    profiles = [classify_client(c) for c in clients]
    profiles.sort(key=lambda p: p.succession_risk, reverse=True)
    return profiles[:limit]


def succession_analytics(clients: Sequence[ClientProfile], limit: int = 5) -> Dict:
    """
    Portfolio-level succession summary.

    Returns dict with risk_distribution, relationship_types, average_complexity,
    highest_risk_clients and total_clients.
    """
    profiles = [classify_client(c) for c in clients]

    distribution = {"Low": 0, "Medium": 0, "High": 0}
    relationship_types: Dict[str, int] = {}
    for profile in profiles:
        distribution[profile.risk_band] += 1
        key = profile.relationship_type.value
        relationship_types[key] = relationship_types.get(key, 0) + 1

    if profiles:
        avg_complexity = sum(p.transition_complexity for p in profiles) / len(profiles)
        avg_complexity = math.floor(avg_complexity * 10 + 0.5) / 10
    else:
        avg_complexity = 0.0

    return {
        "risk_distribution": distribution,
        "relationship_types": relationship_types,
        "average_complexity": avg_complexity,
        "highest_risk_clients": highest_risk_clients(clients, limit=limit),
        "total_clients": len(profiles),
    }


def succession_frame(clients: Sequence[ClientProfile]) -> pd.DataFrame:
    """One row per client with derived succession fields, for tables and charts."""
    columns = [
        "client_id", "client_name", "primary_lobbyist", "relationship_type",
        "transition_complexity", "succession_risk", "risk_band", "latest_revenue",
    ]
    rows = []
    for client in clients:
        profile = classify_client(client)
        rows.append({
            "client_id": client.id,
            "client_name": client.name,
            "primary_lobbyist": client.primary_lobbyist or "(none)",
            "relationship_type": profile.relationship_type.value,
            "transition_complexity": profile.transition_complexity,
            "succession_risk": profile.succession_risk,
            "risk_band": profile.risk_band,
            "latest_revenue": latest_revenue(client),
        })
    return pd.DataFrame(rows, columns=columns)
