"""
Tests for portfolio summaries.
"""
import sys
from datetime import date
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from portfolio_os.data.ingest import ClientProfile, Partner, RevenueRecord
from portfolio_os.metrics.portfolio import (
    partner_capacity_frame,
    portfolio_summary,
    select_priority_clients,
)


AS_OF = date(2025, 6, 1)


def make_client(client_id, revenue=0.0, period="1/1/25-12/31/25", **kwargs) -> ClientProfile:
    return ClientProfile(id=client_id, name=client_id.upper(), contract_period=period,
                         revenues=(RevenueRecord(2024, revenue),), **kwargs)


def make_book():
    return [
        make_client("a", 100_000, practice_areas=("Energy",), conflict_risk="Low"),
        make_client("b", 1_000_000, practice_areas=("Energy", "Tax"), relationship_strength=9,
                    conflict_risk="Low"),
        make_client("c", 50_000, period="Expired 1/1/24"),
        make_client("d", 300_000, period="1/1/26-12/31/26"),
        make_client("e", 0, period="", conflict_risk="High"),
    ]


class TestPortfolioSummary:

    def test_totals(self):
        summary = portfolio_summary(make_book(), as_of=AS_OF)

        assert summary["total_clients"] == 5
        assert summary["total_revenue"] == pytest.approx(1_450_000)

    def test_breakdowns(self):
        summary = portfolio_summary(make_book(), as_of=AS_OF)

        assert summary["status_breakdown"] == {"IF": 2, "D": 1, "P": 1, "H": 1}
        assert summary["practice_areas"] == {"Energy": 2, "Tax": 1}
        assert summary["risk_profile"] == {"Low": 2, "Medium": 2, "High": 1}

    def test_top_clients(self):
        summary = portfolio_summary(make_book(), as_of=AS_OF)
        top = summary["top_clients"]

        assert len(top) == 5
        assert top[0]["id"] == "b"
        assert top[0]["status"] == "IF"
        assert top[0]["practice_areas"] == ["Energy", "Tax"]
        values = [entry["strategic_value"] for entry in top]
        assert values == sorted(values, reverse=True)

    def test_empty(self):
        summary = portfolio_summary([])
        assert summary["total_clients"] == 0
        assert summary["total_revenue"] == 0
        assert summary["avg_strategic_value"] == 0.0
        assert summary["top_clients"] == []


class TestPriorityClients:

    def test_only_active_clients(self):
        result = select_priority_clients(make_book(), as_of=AS_OF)

        ids = [c.id for c in result["clients"]]
        assert set(ids) == {"a", "b", "d"}
        assert ids[0] == "b"
        assert result["total_active"] == 3
        assert result["excluded_count"] == 0

    def test_limit(self):
        result = select_priority_clients(make_book(), limit=1, as_of=AS_OF)

        assert [c.id for c in result["clients"]] == ["b"]
        assert result["selected_count"] == 1
        assert result["excluded_count"] == 2
        assert result["selected_revenue"] == pytest.approx(1_000_000)

    def test_ties_keep_input_order(self):
        clients = [make_client("x"), make_client("y"), make_client("z")]
        result = select_priority_clients(clients, as_of=AS_OF)
        assert [c.id for c in result["clients"]] == ["x", "y", "z"]


class TestPartnerCapacity:

    def test_frame(self):
        clients = make_book()
        partners = [
            Partner(id="p1", name="Ann", clients=("a", "b")),
            Partner(id="p2", name="Bob", clients=(), is_departing=True),
        ]

        df = partner_capacity_frame(partners, clients)

        assert list(df["partner_id"]) == ["p1", "p2"]
        assert df.loc[0, "client_count"] == 2
        assert df.loc[0, "revenue"] == pytest.approx(1_100_000)
        assert df.loc[0, "capacity_pct"] == pytest.approx(2 / 30 * 100)
        assert df.loc[0, "revenue_per_client"] == pytest.approx(550_000)
        assert df.loc[0, "high_value_clients"] == 1
        assert df.loc[0, "capacity_level"] == "normal"
        assert df.loc[1, "revenue_per_client"] == 0.0
        assert bool(df.loc[1, "is_departing"]) is True
