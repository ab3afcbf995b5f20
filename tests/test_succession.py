"""
Tests for succession risk classification.
"""
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from portfolio_os.data.ingest import ClientProfile, RevenueRecord
from portfolio_os.metrics.succession import (
    RelationshipType,
    calculate_succession_risk,
    calculate_transition_complexity,
    classify_client,
    derive_relationship_type,
    group_clients_by_risk,
    highest_risk_clients,
    risk_band,
    succession_analytics,
    succession_frame,
)


def make_client(client_id="c1", **kwargs) -> ClientProfile:
    return ClientProfile(id=client_id, name=kwargs.pop("name", client_id.upper()), **kwargs)


class TestRelationshipType:

    def test_no_lead_is_orphaned(self):
        client = make_client(client_originator="Ann", lobbyist_team=("Ann", "Bob"))
        assert derive_relationship_type(client) == RelationshipType.ORPHANED

    def test_team_with_strong_relationship_is_shared(self):
        client = make_client(primary_lobbyist="Ann", lobbyist_team=("Ann", "Bob"),
                             relationship_strength=7)
        assert derive_relationship_type(client) == RelationshipType.SHARED

    def test_shared_takes_precedence_over_primary(self):
        client = make_client(primary_lobbyist="Ann", client_originator="Ann",
                             lobbyist_team=("Ann", "Bob"), relationship_strength=9)
        assert derive_relationship_type(client) == RelationshipType.SHARED

    def test_lead_is_originator_working_alone_is_primary(self):
        assert derive_relationship_type(
            make_client(primary_lobbyist="Ann", client_originator="Ann")
        ) == RelationshipType.PRIMARY
        assert derive_relationship_type(
            make_client(primary_lobbyist="Ann", client_originator="Ann", lobbyist_team=("Ann",))
        ) == RelationshipType.PRIMARY

    def test_otherwise_secondary(self):
        assert derive_relationship_type(
            make_client(primary_lobbyist="Ann", client_originator="Bob")
        ) == RelationshipType.SECONDARY
        # Team of two but relationship too weak to count as shared
        assert derive_relationship_type(
            make_client(primary_lobbyist="Ann", client_originator="Ann",
                        lobbyist_team=("Ann", "Bob"), relationship_strength=6)
        ) == RelationshipType.SECONDARY


class TestTransitionComplexity:

    def test_minimal_client_floors_at_one(self):
        assert calculate_transition_complexity(make_client()) == 1

    def test_all_terms(self):
        client = make_client(
            relationship_intensity=5,          # 1.5
            communication_frequency="daily",   # 3
            practice_areas=("Healthcare Policy",),  # 1.5
            strategic_fit_score=9,             # 1
            conflict_risk_score=8,             # 1
        )
        assert calculate_transition_complexity(client) == 8

    def test_rounds_half_up(self):
        client = make_client(
            relationship_intensity=10,         # 3
            communication_frequency="weekly",  # 2
            practice_areas=("Energy",),        # 1.5
            strategic_fit_score=8,             # 1
            conflict_risk_score=7,             # 1
        )
        # 8.5 -> 9
        assert calculate_transition_complexity(client) == 9

    def test_caps_at_ten(self):
        client = make_client(
            relationship_intensity=10, communication_frequency="daily",
            practice_areas=("Financial Services",), strategic_fit_score=10, conflict_risk_score=9,
        )
        assert calculate_transition_complexity(client) == 10

    def test_unknown_frequency_counts_zero(self):
        client = make_client(relationship_intensity=10, communication_frequency="hourly")
        assert calculate_transition_complexity(client) == 3

    def test_complex_area_counted_once(self):
        client = make_client(practice_areas=("Energy", "Healthcare"), relationship_intensity=10)
        # 3 + 1.5
        assert calculate_transition_complexity(client) == 5

    def test_text_conflict_label_does_not_add(self):
        client = make_client(conflict_risk="High", relationship_intensity=10)
        assert calculate_transition_complexity(client) == 3


class TestSuccessionRisk:

    def test_orphaned_base_risk(self):
        # 5 + (6 - 5) + 1 * 0.3 = 6.3
        assert calculate_succession_risk(make_client()) == 6

    def test_orphaned_strong_relationship(self):
        # 5 + 0 + 0.3
        assert calculate_succession_risk(make_client(relationship_strength=8)) == 5

    def test_weak_relationship_caps_at_ten(self):
        assert calculate_succession_risk(make_client(relationship_strength=1)) == 10

    def test_shared_low_risk(self):
        client = make_client(primary_lobbyist="Ann", lobbyist_team=("Ann", "Bob"),
                             relationship_strength=9)
        # 1 + 0 + 0.3
        assert calculate_succession_risk(client) == 1

    def test_primary_with_complexity(self):
        client = make_client(primary_lobbyist="Ann", client_originator="Ann",
                             relationship_strength=6, relationship_intensity=10,
                             communication_frequency="daily")
        # 3 + 0 + 6 * 0.3 = 4.8
        assert calculate_succession_risk(client) == 5

    def test_always_in_range(self):
        for strength in (1, 3, 5, 6, 8, 10):
            for lead in ("", "Ann"):
                for intensity in (0, 5, 10):
                    client = make_client(primary_lobbyist=lead, client_originator="Ann",
                                         relationship_strength=strength,
                                         relationship_intensity=intensity,
                                         communication_frequency="daily")
                    profile = classify_client(client)
                    assert 1 <= profile.succession_risk <= 10
                    assert 1 <= profile.transition_complexity <= 10
                    assert isinstance(profile.succession_risk, int)


class TestPortfolioViews:

    def make_book(self):
        return [
            make_client("a", primary_lobbyist="Ann", lobbyist_team=("Ann", "Bob"), relationship_strength=9),
            make_client("b"),
            make_client("c", relationship_strength=1),
            make_client("d", primary_lobbyist="Ann", client_originator="Ann", relationship_strength=6),
            make_client("e", relationship_strength=2),
        ]

    def test_risk_band(self):
        assert risk_band(1) == "Low"
        assert risk_band(3) == "Low"
        assert risk_band(4) == "Medium"
        assert risk_band(6) == "Medium"
        assert risk_band(7) == "High"

    def test_group_clients_by_risk(self):
        groups = group_clients_by_risk(self.make_book())
        assert [c.id for c in groups["Low"]] == ["a", "d"]
        assert [c.id for c in groups["Medium"]] == ["b"]
        assert [c.id for c in groups["High"]] == ["c", "e"]

    def test_highest_risk_order(self):
        top = highest_risk_clients(self.make_book(), limit=3)
        # c=10, e=9, b=6
        assert [p.client_id for p in top] == ["c", "e", "b"]

    def test_highest_risk_ties_keep_input_order(self):
        clients = [make_client("z", relationship_strength=1), make_client("y", relationship_strength=1)]
        assert [p.client_id for p in highest_risk_clients(clients)] == ["z", "y"]

    def test_analytics(self):
        analytics = succession_analytics(self.make_book())

        assert analytics["total_clients"] == 5
        assert analytics["risk_distribution"] == {"Low": 2, "Medium": 1, "High": 2}
        assert analytics["relationship_types"]["orphaned"] == 3
        assert analytics["average_complexity"] == pytest.approx(1.0)
        assert len(analytics["highest_risk_clients"]) == 5

    def test_analytics_empty(self):
        analytics = succession_analytics([])
        assert analytics["total_clients"] == 0
        assert analytics["average_complexity"] == 0.0

    def test_frame(self):
        clients = [make_client("a", primary_lobbyist="Ann",
                               revenues=(RevenueRecord(2024, 1000.0),))]
        df = succession_frame(clients)
        assert df.loc[0, "relationship_type"] == "secondary"
        assert df.loc[0, "latest_revenue"] == 1000.0
        assert df.loc[0, "risk_band"] in ("Low", "Medium", "High")
