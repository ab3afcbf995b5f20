"""
Client and partner ingestion.

Raw records (API payloads, CSV rows, DataFrame rows) go through this module
exactly once. The result is a fully-defaulted, immutable value object, so the
scoring and assignment code never has to second-guess a missing field.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from portfolio_os.config import (
    CAPACITY_CLIENTS,
    CONFLICT_PENALTIES,
    DEFAULT_CONFLICT_RISK,
    DEFAULT_RELATIONSHIP_STRENGTH,
    DEFAULT_RENEWAL_PROBABILITY,
    DEFAULT_STRATEGIC_FIT,
)


TEAM_DELIMITERS = re.compile(r"[,;|\n]")


@dataclass(frozen=True)
class RevenueRecord:
    """One year of contract revenue for a client."""
    year: int
    amount: float


@dataclass(frozen=True)
class ClientProfile:
    """Client base attributes after defaulting. Derived scores are not stored."""
    id: str
    name: str
    practice_areas: Tuple[str, ...] = ()
    relationship_strength: float = DEFAULT_RELATIONSHIP_STRENGTH
    conflict_risk: str = DEFAULT_CONFLICT_RISK
    conflict_risk_score: Optional[float] = None
    renewal_probability: float = DEFAULT_RENEWAL_PROBABILITY
    strategic_fit_score: float = DEFAULT_STRATEGIC_FIT
    relationship_intensity: float = 0.0
    communication_frequency: str = ""
    primary_lobbyist: str = ""
    client_originator: str = ""
    lobbyist_team: Tuple[str, ...] = ()
    revenues: Tuple[RevenueRecord, ...] = ()
    contract_period: str = ""

    @property
    def is_orphaned(self) -> bool:
        return self.primary_lobbyist == ""


@dataclass(frozen=True)
class Partner:
    """A partner and the client ids in their book, in display order."""
    id: str
    name: str
    clients: Tuple[str, ...] = ()
    secondary_clients: Tuple[str, ...] = ()
    is_departing: bool = False
    practice_areas: Tuple[str, ...] = ()
    total_revenue: Optional[float] = None

    @property
    def client_count(self) -> int:
        return len(self.clients)

    @property
    def capacity_used(self) -> float:
        return self.client_count / CAPACITY_CLIENTS * 100


# =============================================================================
# SCALAR COERCION
# =============================================================================

def _first_present(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in raw:
            value = raw[key]
            if not _is_missing(value):
                return value
    return None


def _is_missing(value: Any) -> bool:
    if value is None or value is pd.NA or value is pd.NaT:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    return False


def parse_number(value: Any) -> Optional[float]:
    """Parse a number, tolerating currency formatting. Returns None when unparsable."""
    if _is_missing(value) or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, np.integer, np.floating)):
        number = float(value)
    else:
        text = str(value).strip().replace("$", "").replace(",", "")
        try:
            number = float(text)
        except ValueError:
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _bounded(value: Any, default: float, low: float, high: float) -> float:
    number = parse_number(value)
    if number is None:
        return default
    return min(high, max(low, number))


def clean_text(value: Any) -> str:
    if _is_missing(value):
        return ""
    return str(value).strip()


def parse_name_list(value: Any) -> Tuple[str, ...]:
    """Names from a list or a delimited string, blanks removed, order kept."""
    if _is_missing(value):
        return ()
    if isinstance(value, str):
        parts: Iterable[Any] = TEAM_DELIMITERS.split(value)
    elif isinstance(value, (list, tuple, np.ndarray, pd.Series)):
        parts = value
    else:
        parts = [value]
    names = []
    for part in parts:
        text = clean_text(part)
        if text:
            names.append(text)
    return tuple(names)


def parse_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "y", "1")
    if _is_missing(value):
        return False
    return bool(value)


def _conflict_risk(value: Any) -> Tuple[str, Optional[float]]:
    """Label and optional numeric score. Numeric input keeps the default label."""
    if isinstance(value, str):
        label = value.strip().capitalize()
        if label in CONFLICT_PENALTIES:
            return label, None
    number = parse_number(value)
    return DEFAULT_CONFLICT_RISK, number


def parse_revenues(value: Any) -> Tuple[RevenueRecord, ...]:
    """
    Revenue records from either a list of dicts or a {year: amount} mapping.

    Entries with no parsable year are skipped; an unparsable amount counts as 0.
    """
    if _is_missing(value):
        return ()
    records: List[RevenueRecord] = []
    if isinstance(value, Mapping):
        items: Iterable[Tuple[Any, Any]] = value.items()
    elif isinstance(value, (list, tuple)):
        items = []
        for entry in value:
            if isinstance(entry, RevenueRecord):
                items.append((entry.year, entry.amount))
            elif isinstance(entry, Mapping):
                amount = _first_present(entry, "amount", "revenue_amount", "revenue")
                items.append((entry.get("year"), amount))
    else:
        return ()

    for year, amount in items:
        year_num = parse_number(year)
        if year_num is None:
            continue
        records.append(RevenueRecord(year=int(year_num), amount=parse_number(amount) or 0.0))
    return tuple(records)


def latest_revenue(client: ClientProfile) -> float:
    """
    Revenue for the most recent year on record.

    When several records share the latest year the first one listed wins.
    """
    if not client.revenues:
        return 0.0
    latest = client.revenues[0]
    for record in client.revenues[1:]:
        if record.year > latest.year:
            latest = record
    return latest.amount


def average_revenue(client: ClientProfile) -> float:
    if not client.revenues:
        return 0.0
    return sum(r.amount for r in client.revenues) / len(client.revenues)


# =============================================================================
# RECORD NORMALISATION
# =============================================================================

def normalize_client(raw: Mapping[str, Any]) -> ClientProfile:
    """Build a ClientProfile from a raw record (snake_case or camelCase keys)."""
    if isinstance(raw, ClientProfile):
        return raw
    conflict_label, conflict_score = _conflict_risk(
        _first_present(raw, "conflict_risk", "conflictRisk")
    )
    return ClientProfile(
        id=clean_text(_first_present(raw, "id", "client_id", "clientId")),
        name=clean_text(_first_present(raw, "name", "client_name", "CLIENT")),
        practice_areas=parse_name_list(
            _first_present(raw, "practice_areas", "practice_area", "practiceAreas", "practiceArea")
        ),
        relationship_strength=_bounded(
            _first_present(raw, "relationship_strength", "relationshipStrength"),
            DEFAULT_RELATIONSHIP_STRENGTH, 1, 10,
        ),
        conflict_risk=conflict_label,
        conflict_risk_score=conflict_score,
        renewal_probability=_bounded(
            _first_present(raw, "renewal_probability", "renewalProbability"),
            DEFAULT_RENEWAL_PROBABILITY, 0, 1,
        ),
        strategic_fit_score=_bounded(
            _first_present(raw, "strategic_fit_score", "strategicFitScore"),
            DEFAULT_STRATEGIC_FIT, 1, 10,
        ),
        relationship_intensity=_bounded(
            _first_present(raw, "relationship_intensity", "relationshipIntensity"),
            0.0, 0, 10,
        ),
        communication_frequency=clean_text(
            _first_present(raw, "communication_frequency", "communicationFrequency",
                           "interaction_frequency")
        ).lower(),
        primary_lobbyist=clean_text(_first_present(raw, "primary_lobbyist", "primaryLobbyist")),
        client_originator=clean_text(_first_present(raw, "client_originator", "clientOriginator")),
        lobbyist_team=parse_name_list(_first_present(raw, "lobbyist_team", "lobbyistTeam")),
        revenues=parse_revenues(_first_present(raw, "revenues", "revenue")),
        contract_period=clean_text(_first_present(raw, "contract_period", "contractPeriod", "Contract Period")),
    )


def normalize_partner(raw: Mapping[str, Any]) -> Partner:
    """Build a Partner from a raw record."""
    if isinstance(raw, Partner):
        return raw
    total_revenue = parse_number(_first_present(raw, "total_revenue", "totalRevenue"))
    name = clean_text(_first_present(raw, "name", "partner_name"))
    return Partner(
        id=clean_text(_first_present(raw, "id", "partner_id")) or name,
        name=name,
        clients=parse_name_list(_first_present(raw, "clients", "client_ids")),
        secondary_clients=parse_name_list(_first_present(raw, "secondary_clients", "secondaryClients")),
        is_departing=parse_flag(_first_present(raw, "is_departing", "isDeparting")),
        practice_areas=parse_name_list(_first_present(raw, "practice_areas", "practiceAreas")),
        total_revenue=total_revenue,
    )


# =============================================================================
# DATAFRAME ADAPTERS
# =============================================================================

def _revenue_lookup(revenues_df: Optional[pd.DataFrame]) -> Dict[str, List[Dict[str, Any]]]:
    if revenues_df is None or len(revenues_df) == 0:
        return {}
    lookup: Dict[str, List[Dict[str, Any]]] = {}
    for row in revenues_df.to_dict("records"):
        client_id = clean_text(row.get("client_id"))
        if not client_id:
            continue
        lookup.setdefault(client_id, []).append(
            {"year": row.get("year"), "amount": row.get("revenue_amount")}
        )
    return lookup


def clients_from_frame(clients_df: pd.DataFrame,
                       revenues_df: Optional[pd.DataFrame] = None) -> List[ClientProfile]:
    """
    Build client profiles from a clients table, joining long-format revenues.

    Row order is preserved.
    """
    if clients_df is None or len(clients_df) == 0:
        return []
    lookup = _revenue_lookup(revenues_df)
    clients = []
    for row in clients_df.to_dict("records"):
        client_id = clean_text(row.get("id"))
        if client_id in lookup:
            row = {**row, "revenues": lookup[client_id]}
        clients.append(normalize_client(row))
    return clients


def partners_from_frame(partners_df: pd.DataFrame) -> List[Partner]:
    """Build partners from a partners table, row order preserved."""
    if partners_df is None or len(partners_df) == 0:
        return []
    return [normalize_partner(row) for row in partners_df.to_dict("records")]


def clients_to_frame(clients: Sequence[ClientProfile]) -> pd.DataFrame:
    """Flatten client profiles into a display frame (one row per client)."""
    rows = []
    for client in clients:
        rows.append({
            "id": client.id,
            "name": client.name,
            "practice_areas": ", ".join(client.practice_areas),
            "relationship_strength": client.relationship_strength,
            "conflict_risk": client.conflict_risk,
            "renewal_probability": client.renewal_probability,
            "strategic_fit_score": client.strategic_fit_score,
            "primary_lobbyist": client.primary_lobbyist,
            "client_originator": client.client_originator,
            "lobbyist_team": ", ".join(client.lobbyist_team),
            "contract_period": client.contract_period,
            "latest_revenue": latest_revenue(client),
        })
    return pd.DataFrame(rows)
