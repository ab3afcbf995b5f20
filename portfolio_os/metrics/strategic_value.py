"""
Strategic value scoring.

Strategic value (0-10) blends the most recent year's revenue, relationship
strength and renewal probability, less a conflict-risk penalty.
"""
from __future__ import annotations

from typing import Sequence

import pandas as pd

from portfolio_os.config import CONFLICT_PENALTIES, REVENUE_SCORE_DIVISOR
from portfolio_os.data.ingest import ClientProfile, average_revenue, latest_revenue


REVENUE_WEIGHT = 0.50
RELATIONSHIP_WEIGHT = 0.35
RENEWAL_WEIGHT = 0.15


def revenue_score(revenue: float) -> float:
    """Revenue component on a 0-10 scale; $500k and above scores 10."""
    return min(10.0, max(0.0, revenue) / REVENUE_SCORE_DIVISOR)


def conflict_penalty(conflict_risk: str) -> float:
    return CONFLICT_PENALTIES.get(conflict_risk, CONFLICT_PENALTIES["Medium"])


def calculate_strategic_value(client: ClientProfile) -> float:
    """Strategic value for one client, clamped to [0, 10] and rounded to 2dp."""
    value = (
        revenue_score(latest_revenue(client)) * REVENUE_WEIGHT
        + client.relationship_strength * RELATIONSHIP_WEIGHT
        + client.renewal_probability * 10 * RENEWAL_WEIGHT
        - conflict_penalty(client.conflict_risk)
    )
    return round(max(0.0, min(10.0, value)), 2)


def score_clients(clients: Sequence[ClientProfile]) -> pd.DataFrame:
    """
    Strategic scores for a list of clients.

    Returns DataFrame with:
    - latest_revenue: most recent year's revenue
    - average_revenue: mean across all revenue years
    - revenue_score: 0-10 revenue component
    - conflict_penalty
    - strategic_value: 0-10 composite
    """
    columns = [
        "client_id", "client_name", "latest_revenue", "average_revenue",
        "revenue_score", "conflict_penalty", "strategic_value",
    ]
    if not clients:
        return pd.DataFrame(columns=columns)

    rows = []
    for client in clients:
        latest = latest_revenue(client)
        rows.append({
            "client_id": client.id,
            "client_name": client.name,
            "latest_revenue": latest,
            "average_revenue": round(average_revenue(client)),
            "revenue_score": round(revenue_score(latest), 2),
            "conflict_penalty": conflict_penalty(client.conflict_risk),
            "strategic_value": calculate_strategic_value(client),
        })
    return pd.DataFrame(rows, columns=columns)
