"""
Partner books derived from client ownership.

When no partners table is supplied, each distinct primary lobbyist becomes a
partner whose primary clients are the clients they lead and whose secondary
clients are those where they sit on the lobbyist team.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from portfolio_os.data.ingest import ClientProfile, Partner, latest_revenue


def build_partners_from_clients(clients: Sequence[ClientProfile],
                                departing: Optional[Iterable[str]] = None) -> List[Partner]:
    """
    One Partner per lobbyist named on any client, in order of first appearance.

    `departing` holds partner names to flag as departing.
    """
    departing_names = set(departing or ())
    order: List[str] = []
    primary: Dict[str, List[str]] = {}
    secondary: Dict[str, List[str]] = {}
    areas: Dict[str, List[str]] = {}
    revenue: Dict[str, float] = {}

    def _touch(name: str) -> None:
        if name not in primary:
            order.append(name)
            primary[name] = []
            secondary[name] = []
            areas[name] = []
            revenue[name] = 0.0

    for client in clients:
        lead = client.primary_lobbyist
        if lead:
            _touch(lead)
            primary[lead].append(client.id)
            revenue[lead] += latest_revenue(client)
            for area in client.practice_areas:
                if area not in areas[lead]:
                    areas[lead].append(area)
        for member in client.lobbyist_team:
            if member == lead:
                continue
            _touch(member)
            if client.id not in secondary[member]:
                secondary[member].append(client.id)

    return [
        Partner(
            id=name,
            name=name,
            clients=tuple(primary[name]),
            secondary_clients=tuple(secondary[name]),
            is_departing=name in departing_names,
            practice_areas=tuple(areas[name]),
            total_revenue=revenue[name],
        )
        for name in order
    ]


def mark_departing(partners: Sequence[Partner], departing_ids: Iterable[str]) -> List[Partner]:
    """Copies of `partners` with is_departing set from `departing_ids` (by id or name)."""
    flagged = set(departing_ids)
    return [
        replace(p, is_departing=(p.id in flagged or p.name in flagged))
        for p in partners
    ]


def partner_revenue(partner: Partner, clients_by_id: Mapping[str, ClientProfile]) -> float:
    """Current book revenue: the explicit total if given, else the sum of primary clients."""
    if partner.total_revenue is not None:
        return partner.total_revenue
    return sum(
        latest_revenue(clients_by_id[cid]) for cid in partner.clients if cid in clients_by_id
    )
