"""
Portfolio-level summaries.

Single source of truth for: headline totals, priority client selection,
partner capacity table.
"""
from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional, Sequence

import pandas as pd

from portfolio_os.config import CAPACITY_CLIENTS, HIGH_VALUE_THRESHOLD, config
from portfolio_os.data.ingest import ClientProfile, Partner, latest_revenue
from portfolio_os.data.partners import partner_revenue
from portfolio_os.metrics.contract_status import ContractStatus, derive_contract_status
from portfolio_os.metrics.strategic_value import calculate_strategic_value
from portfolio_os.modeling.redistribution import capacity_level

ACTIVE_STATUSES = (ContractStatus.IN_FORCE, ContractStatus.PROPOSAL)


def _top_entry(client: ClientProfile, status: ContractStatus) -> Dict:
    return {
        "id": client.id,
        "name": client.name,
        "revenue": latest_revenue(client),
        "strategic_value": calculate_strategic_value(client),
        "status": status.value,
        "practice_areas": list(client.practice_areas),
    }


def portfolio_summary(clients: Sequence[ClientProfile],
                      as_of: Optional[date] = None) -> Dict:
    """
    Headline numbers for the overview page.

    Returns dict with:
    - total_clients, total_revenue (sum of latest-year revenue)
    - avg_strategic_value (2dp)
    - status_breakdown: status code -> count
    - practice_areas: area -> client count
    - risk_profile: conflict risk -> count
    - top_clients: top N by strategic value, ties in input order
    """
    statuses = [derive_contract_status(c.contract_period, as_of) for c in clients]
    values = [calculate_strategic_value(c) for c in clients]

    status_breakdown: Dict[str, int] = {}
    practice_areas: Dict[str, int] = {}
    risk_profile: Dict[str, int] = {}
    for client, status in zip(clients, statuses):
        status_breakdown[status.value] = status_breakdown.get(status.value, 0) + 1
        for area in client.practice_areas:
            practice_areas[area] = practice_areas.get(area, 0) + 1
        risk = client.conflict_risk or "Unknown"
        risk_profile[risk] = risk_profile.get(risk, 0) + 1

    order = sorted(range(len(clients)), key=lambda i: values[i], reverse=True)
    top = [_top_entry(clients[i], statuses[i]) for i in order[:config.top_clients_limit]]

    return {
        "total_clients": len(clients),
        "total_revenue": sum(latest_revenue(c) for c in clients),
        "avg_strategic_value": round(sum(values) / len(values), 2) if values else 0.0,
        "status_breakdown": status_breakdown,
        "practice_areas": practice_areas,
        "risk_profile": risk_profile,
        "top_clients": top,
    }


def select_priority_clients(clients: Sequence[ClientProfile],
                            limit: Optional[int] = None,
                            as_of: Optional[date] = None) -> Dict:
    """
    Active (In Force or Proposal) clients ranked by strategic value.

    Sorting is stable, so clients with equal value keep input order.
    """
    limit = config.priority_clients_limit if limit is None else limit
    active = [
        c for c in clients
        if derive_contract_status(c.contract_period, as_of) in ACTIVE_STATUSES
    ]
    ranked = sorted(active, key=calculate_strategic_value, reverse=True)
    selected = ranked[:limit]
    return {
        "clients": selected,
        "total_active": len(active),
        "selected_count": len(selected),
        "excluded_count": len(active) - len(selected),
        "selected_revenue": sum(latest_revenue(c) for c in selected),
    }


def partner_capacity_frame(partners: Sequence[Partner],
                           clients: Sequence[ClientProfile]) -> pd.DataFrame:
    """Current book per partner, one row each, input order."""
    columns = [
        "partner_id", "partner_name", "is_departing", "client_count", "revenue",
        "capacity_pct", "avg_strategic_value", "high_value_clients",
        "revenue_per_client", "capacity_level",
    ]
    clients_by_id = {c.id: c for c in clients}
    rows: List[Dict] = []
    for partner in partners:
        book = [clients_by_id[cid] for cid in partner.clients if cid in clients_by_id]
        values = [calculate_strategic_value(c) for c in book]
        revenue = partner_revenue(partner, clients_by_id)
        capacity = partner.client_count / CAPACITY_CLIENTS * 100
        rows.append({
            "partner_id": partner.id,
            "partner_name": partner.name,
            "is_departing": partner.is_departing,
            "client_count": partner.client_count,
            "revenue": revenue,
            "capacity_pct": capacity,
            "avg_strategic_value": round(sum(values) / len(values), 2) if values else 0.0,
            "high_value_clients": sum(1 for v in values if v > HIGH_VALUE_THRESHOLD),
            "revenue_per_client": revenue / partner.client_count if partner.client_count else 0.0,
            "capacity_level": capacity_level(capacity),
        })
    return pd.DataFrame(rows, columns=columns)
