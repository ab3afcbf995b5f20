"""
Redistribution engine: reassign departing partners' clients to remaining partners.

Four fixed, explainable policies sit behind one `assign()` entry point. Every
tie-break depends on input order, so partners and clients are always walked in
the order they were given.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from portfolio_os.config import CAPACITY_CLIENTS
from portfolio_os.data.ingest import ClientProfile, Partner, latest_revenue
from portfolio_os.data.partners import partner_revenue

logger = logging.getLogger(__name__)


class RedistributionPolicy(str, Enum):
    BALANCED = "balanced"
    EXPERTISE = "expertise"
    RELATIONSHIP = "relationship"
    CUSTOM = "custom"

    @property
    def label(self) -> str:
        return POLICY_LABELS[self]


POLICY_LABELS = {
    RedistributionPolicy.BALANCED: "Balanced Revenue",
    RedistributionPolicy.EXPERTISE: "Expertise Matching",
    RedistributionPolicy.RELATIONSHIP: "Relationship Based",
    RedistributionPolicy.CUSTOM: "Custom Assignments",
}

# Evaluation and tie-break order for scenario comparison.
POLICY_ORDER = (
    RedistributionPolicy.BALANCED,
    RedistributionPolicy.EXPERTISE,
    RedistributionPolicy.RELATIONSHIP,
    RedistributionPolicy.CUSTOM,
)


@dataclass(frozen=True)
class DroppedAssignment:
    """A custom assignment entry that could not be applied."""
    client_id: str
    partner_id: str
    reason: str


@dataclass
class PartnerAssignment:
    """Projected book for one remaining partner after redistribution."""
    partner_id: str
    partner_name: str
    new_clients: List[str] = field(default_factory=list)
    incremental_revenue: float = 0.0
    baseline_client_count: int = 0
    projected_client_count: int = 0
    baseline_revenue: float = 0.0
    projected_revenue: float = 0.0

    @property
    def capacity_percent(self) -> float:
        # Not clamped: over-capacity partners must show above 100.
        return self.projected_client_count / CAPACITY_CLIENTS * 100

    @property
    def revenue_change_pct(self) -> float:
        if self.baseline_revenue <= 0:
            return 0.0
        return (self.projected_revenue - self.baseline_revenue) / self.baseline_revenue * 100

    @property
    def capacity_level(self) -> str:
        return capacity_level(self.capacity_percent)


@dataclass
class AssignmentResult:
    """Outcome of one policy run. `assignments` maps client id -> partner id."""
    policy: RedistributionPolicy
    assignments: Dict[str, str] = field(default_factory=dict)
    partners: List[PartnerAssignment] = field(default_factory=list)
    unassigned: List[str] = field(default_factory=list)
    dropped: List[DroppedAssignment] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.assignments and not self.partners

    def partner(self, partner_id: str) -> Optional[PartnerAssignment]:
        for pa in self.partners:
            if pa.partner_id == partner_id:
                return pa
        return None


def capacity_level(capacity_percent: float) -> str:
    if capacity_percent > 95:
        return "critical"
    if capacity_percent > 85:
        return "warning"
    if capacity_percent > 70:
        return "caution"
    return "normal"


# =============================================================================
# POLICY HANDLERS
# =============================================================================

@dataclass(frozen=True)
class _PolicyInput:
    departing_clients: List[ClientProfile]
    targets: List[Partner]
    clients_by_id: Dict[str, ClientProfile]
    custom_map: Mapping[str, str]


PolicyOutput = Tuple[Dict[str, str], List[DroppedAssignment]]


def _assign_balanced(ctx: _PolicyInput) -> PolicyOutput:
    """Contiguous chunks of ceil(N / R) clients, chunk i to target i."""
    n = len(ctx.departing_clients)
    chunk = math.ceil(n / len(ctx.targets))
    mapping: Dict[str, str] = {}
    for idx, client in enumerate(ctx.departing_clients):
        mapping[client.id] = ctx.targets[idx // chunk].id
    return mapping, []


def expertise_match(client: ClientProfile, partner: Partner) -> float:
    """Share of the client's practice areas the partner covers (0-1)."""
    client_areas = set(client.practice_areas)
    if not client_areas:
        return 0.0
    return len(client_areas & set(partner.practice_areas)) / len(client_areas)


def _assign_expertise(ctx: _PolicyInput) -> PolicyOutput:
    """Best practice-area match; first target wins ties; no overlap stays unassigned."""
    mapping: Dict[str, str] = {}
    for client in ctx.departing_clients:
        best_id = None
        best_score = 0.0
        for partner in ctx.targets:
            score = expertise_match(client, partner)
            if score > best_score:
                best_id, best_score = partner.id, score
        if best_id is not None:
            mapping[client.id] = best_id
    return mapping, []


def _assign_relationship(ctx: _PolicyInput) -> PolicyOutput:
    """First target already on the client's lobbyist team."""
    mapping: Dict[str, str] = {}
    for client in ctx.departing_clients:
        team = set(client.lobbyist_team)
        for partner in ctx.targets:
            if partner.name in team:
                mapping[client.id] = partner.id
                break
    return mapping, []


def _assign_custom(ctx: _PolicyInput) -> PolicyOutput:
    """Keep operator entries that point a known client at a remaining partner."""
    target_ids = {p.id for p in ctx.targets}
    mapping: Dict[str, str] = {}
    dropped: List[DroppedAssignment] = []
    for client_id, partner_id in ctx.custom_map.items():
        client_id, partner_id = str(client_id), str(partner_id)
        if partner_id not in target_ids:
            dropped.append(DroppedAssignment(client_id, partner_id, "target is not a remaining partner"))
        elif client_id not in ctx.clients_by_id:
            dropped.append(DroppedAssignment(client_id, partner_id, "unknown client"))
        else:
            mapping[client_id] = partner_id
    for entry in dropped:
        logger.warning("Dropped custom assignment %s -> %s: %s",
                       entry.client_id, entry.partner_id, entry.reason)
    return mapping, dropped


POLICY_HANDLERS: Dict[RedistributionPolicy, Callable[[_PolicyInput], PolicyOutput]] = {
    RedistributionPolicy.BALANCED: _assign_balanced,
    RedistributionPolicy.EXPERTISE: _assign_expertise,
    RedistributionPolicy.RELATIONSHIP: _assign_relationship,
    RedistributionPolicy.CUSTOM: _assign_custom,
}


# =============================================================================
# ENTRY POINT
# =============================================================================

def split_partners(partners: Sequence[Partner]) -> Tuple[List[Partner], List[Partner]]:
    """(departing, remaining), each in input order."""
    departing = [p for p in partners if p.is_departing]
    remaining = [p for p in partners if not p.is_departing]
    return departing, remaining


def departing_clients(departing: Sequence[Partner],
                      clients_by_id: Mapping[str, ClientProfile]) -> List[ClientProfile]:
    """Departing partners' primary clients, partner order then client order, deduplicated."""
    seen = set()
    result = []
    for partner in departing:
        for client_id in partner.clients:
            if client_id in seen or client_id not in clients_by_id:
                continue
            seen.add(client_id)
            result.append(clients_by_id[client_id])
    return result


def original_owners(partners: Sequence[Partner]) -> Dict[str, Partner]:
    """client id -> first partner listing it as a primary client."""
    owners: Dict[str, Partner] = {}
    for partner in partners:
        for client_id in partner.clients:
            owners.setdefault(client_id, partner)
    return owners


def _partner_projections(targets: Sequence[Partner],
                         mapping: Mapping[str, str],
                         owners: Mapping[str, Partner],
                         clients_by_id: Mapping[str, ClientProfile]) -> List[PartnerAssignment]:
    projections = []
    for partner in targets:
        new_clients = []
        incremental = 0.0
        moved_away = 0
        moved_away_revenue = 0.0
        for client_id, target_id in mapping.items():
            owner = owners.get(client_id)
            revenue = latest_revenue(clients_by_id[client_id])
            if target_id == partner.id and (owner is None or owner.id != partner.id):
                new_clients.append(client_id)
                incremental += revenue
            elif owner is not None and owner.id == partner.id and target_id != partner.id:
                moved_away += 1
                moved_away_revenue += revenue

        baseline_revenue = partner_revenue(partner, clients_by_id)
        projections.append(PartnerAssignment(
            partner_id=partner.id,
            partner_name=partner.name,
            new_clients=new_clients,
            incremental_revenue=incremental,
            baseline_client_count=partner.client_count,
            projected_client_count=partner.client_count - moved_away + len(new_clients),
            baseline_revenue=baseline_revenue,
            projected_revenue=baseline_revenue - moved_away_revenue + incremental,
        ))
    return projections


def assign(departing: Sequence[Partner],
           remaining: Sequence[Partner],
           clients: Sequence[ClientProfile],
           policy: RedistributionPolicy,
           custom_map: Optional[Mapping[str, str]] = None) -> AssignmentResult:
    """
    Reassign the departing partners' clients under one policy.

    Never mutates its inputs and never targets a departing partner. An empty
    departing or remaining list yields an empty result.
    """
    policy = RedistributionPolicy(policy)
    if not departing or not remaining:
        return AssignmentResult(policy=policy)

    departing_ids = {p.id for p in departing}
    targets = [p for p in remaining if not p.is_departing and p.id not in departing_ids]
    if not targets:
        return AssignmentResult(policy=policy)

    clients_by_id = {c.id: c for c in clients}
    ctx = _PolicyInput(
        departing_clients=departing_clients(departing, clients_by_id),
        targets=targets,
        clients_by_id=clients_by_id,
        custom_map=dict(custom_map or {}),
    )
    mapping, dropped = POLICY_HANDLERS[policy](ctx)

    owners = original_owners(list(departing) + list(remaining))
    unassigned = [c.id for c in ctx.departing_clients if c.id not in mapping]
    result = AssignmentResult(
        policy=policy,
        assignments=mapping,
        partners=_partner_projections(targets, mapping, owners, clients_by_id),
        unassigned=unassigned,
        dropped=dropped,
    )
    logger.debug("%s: %d assigned, %d unassigned, %d dropped",
                 policy.value, len(mapping), len(unassigned), len(dropped))
    return result


def assignment_frame(result: AssignmentResult) -> pd.DataFrame:
    """Per-partner projection table."""
    columns = [
        "partner_id", "partner_name", "new_clients", "incremental_revenue",
        "baseline_clients", "projected_clients", "capacity_pct",
        "projected_revenue", "revenue_change_pct", "capacity_level",
    ]
    rows = [{
        "partner_id": pa.partner_id,
        "partner_name": pa.partner_name,
        "new_clients": len(pa.new_clients),
        "incremental_revenue": pa.incremental_revenue,
        "baseline_clients": pa.baseline_client_count,
        "projected_clients": pa.projected_client_count,
        "capacity_pct": pa.capacity_percent,
        "projected_revenue": pa.projected_revenue,
        "revenue_change_pct": pa.revenue_change_pct,
        "capacity_level": pa.capacity_level,
    } for pa in result.partners]
    return pd.DataFrame(rows, columns=columns)
