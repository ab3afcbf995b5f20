"""
Tests for the redistribution policy engine.
"""
import logging
import math
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from portfolio_os.data.ingest import ClientProfile, Partner, RevenueRecord
from portfolio_os.modeling.redistribution import (
    POLICY_HANDLERS,
    AssignmentResult,
    RedistributionPolicy,
    assign,
    assignment_frame,
    capacity_level,
    departing_clients,
    expertise_match,
    split_partners,
)


def make_client(client_id, revenue=100_000.0, **kwargs) -> ClientProfile:
    return ClientProfile(id=client_id, name=client_id.upper(),
                         revenues=(RevenueRecord(2024, revenue),), **kwargs)


def make_universe():
    """2 departing partners with 10 clients between them, 3 remaining with none."""
    clients = [make_client(f"c{i}") for i in range(1, 11)]
    departing = [
        Partner(id="d1", name="Dee", clients=tuple(f"c{i}" for i in range(1, 7)), is_departing=True),
        Partner(id="d2", name="Dan", clients=tuple(f"c{i}" for i in range(7, 11)), is_departing=True),
    ]
    remaining = [Partner(id=f"r{i}", name=f"R{i}") for i in range(1, 4)]
    return departing, remaining, clients


def assigned_to(result: AssignmentResult, partner_id: str):
    return [cid for cid, pid in result.assignments.items() if pid == partner_id]


class TestBalanced:

    def test_ten_clients_three_partners(self):
        departing, remaining, clients = make_universe()

        result = assign(departing, remaining, clients, RedistributionPolicy.BALANCED)

        assert assigned_to(result, "r1") == ["c1", "c2", "c3", "c4"]
        assert assigned_to(result, "r2") == ["c5", "c6", "c7", "c8"]
        assert assigned_to(result, "r3") == ["c9", "c10"]
        assert result.unassigned == []

    def test_per_partner_projection(self):
        departing, remaining, clients = make_universe()

        result = assign(departing, remaining, clients, RedistributionPolicy.BALANCED)
        r3 = result.partner("r3")

        assert r3.new_clients == ["c9", "c10"]
        assert r3.incremental_revenue == pytest.approx(200_000)
        assert r3.projected_client_count == 2
        assert r3.capacity_percent == pytest.approx(2 / 30 * 100)

    def test_existing_book_counts_toward_capacity(self):
        departing, remaining, clients = make_universe()
        book = tuple(f"x{i}" for i in range(28))
        remaining = [Partner(id="r1", name="R1", clients=book)]

        result = assign(departing, remaining, clients, RedistributionPolicy.BALANCED)

        # 28 existing + 10 new, not clamped
        assert result.partner("r1").projected_client_count == 38
        assert result.partner("r1").capacity_percent == pytest.approx(38 / 30 * 100)
        assert result.partner("r1").capacity_level == "critical"

    def test_more_partners_than_clients(self):
        clients = [make_client("c1"), make_client("c2")]
        departing = [Partner(id="d", name="D", clients=("c1", "c2"), is_departing=True)]
        remaining = [Partner(id=f"r{i}", name=f"R{i}") for i in range(5)]

        result = assign(departing, remaining, clients, RedistributionPolicy.BALANCED)

        assert result.assignments == {"c1": "r0", "c2": "r1"}

    @pytest.mark.parametrize("n_clients,n_partners", [
        (1, 1), (1, 4), (7, 2), (9, 3), (11, 4), (12, 5), (30, 7),
    ])
    def test_contiguous_chunks_of_ceiling_size(self, n_clients, n_partners):
        client_ids = [f"c{i}" for i in range(n_clients)]
        clients = [make_client(cid) for cid in client_ids]
        departing = [Partner(id="d", name="D", clients=tuple(client_ids), is_departing=True)]
        remaining = [Partner(id=f"r{i}", name=f"R{i}") for i in range(n_partners)]

        result = assign(departing, remaining, clients, RedistributionPolicy.BALANCED)

        chunk = math.ceil(n_clients / n_partners)
        chunks = [assigned_to(result, p.id) for p in remaining]
        chunks = [c for c in chunks if c]
        assert sum(chunks, []) == client_ids
        assert all(len(c) == chunk for c in chunks[:-1])
        assert 1 <= len(chunks[-1]) <= chunk
        assert result.unassigned == []


class TestExpertise:

    def setup_partners(self):
        departing = [Partner(id="d", name="D", clients=("c1", "c2", "c3", "c4"), is_departing=True)]
        remaining = [
            Partner(id="r1", name="R1", practice_areas=("Energy",)),
            Partner(id="r2", name="R2", practice_areas=("Energy", "Tax")),
            Partner(id="r3", name="R3", practice_areas=("Tax",)),
        ]
        clients = [
            make_client("c1", practice_areas=("Energy", "Tax")),
            make_client("c2", practice_areas=("Tax", "Trade")),
            make_client("c3", practice_areas=("Healthcare",)),
            make_client("c4"),
        ]
        return departing, remaining, clients

    def test_best_match_wins(self):
        result = assign(*self.setup_partners(), RedistributionPolicy.EXPERTISE)
        assert result.assignments["c1"] == "r2"

    def test_tie_goes_to_first_partner(self):
        # c2 matches r2 and r3 at 0.5
        result = assign(*self.setup_partners(), RedistributionPolicy.EXPERTISE)
        assert result.assignments["c2"] == "r2"

    def test_no_overlap_is_unassigned(self):
        result = assign(*self.setup_partners(), RedistributionPolicy.EXPERTISE)
        assert "c3" not in result.assignments
        assert "c4" not in result.assignments
        assert result.unassigned == ["c3", "c4"]

    def test_expertise_match(self):
        client = make_client("c", practice_areas=("Energy", "Tax", "Trade", "Water"))
        assert expertise_match(client, Partner(id="p", name="P", practice_areas=("Tax", "Water"))) == 0.5
        assert expertise_match(make_client("c"), Partner(id="p", name="P")) == 0.0


class TestRelationship:

    def test_first_remaining_partner_on_team(self):
        departing = [Partner(id="d", name="Dee", clients=("c1", "c2"), is_departing=True)]
        remaining = [Partner(id="r1", name="Ann"), Partner(id="r2", name="Bob")]
        clients = [
            make_client("c1", lobbyist_team=("Dee", "Bob", "Ann")),
            make_client("c2", lobbyist_team=("Dee", "Zed")),
        ]

        result = assign(departing, remaining, clients, RedistributionPolicy.RELATIONSHIP)

        # Partner order decides, not team order
        assert result.assignments == {"c1": "r1"}
        assert result.unassigned == ["c2"]


class TestCustom:

    def test_hostile_map_never_targets_departing(self, caplog):
        departing, remaining, clients = make_universe()
        custom = {"c1": "d2", "c2": "r1", "ghost": "r1", "c3": "nobody", "c4": "d1"}

        with caplog.at_level(logging.WARNING):
            result = assign(departing, remaining, clients, RedistributionPolicy.CUSTOM, custom_map=custom)

        assert result.assignments == {"c2": "r1"}
        assert {d.client_id for d in result.dropped} == {"c1", "ghost", "c3", "c4"}
        assert "Dropped custom assignment" in caplog.text
        departing_ids = {p.id for p in departing}
        assert not departing_ids & set(result.assignments.values())

    def test_unmapped_departing_clients_are_unassigned(self):
        departing, remaining, clients = make_universe()

        result = assign(departing, remaining, clients, RedistributionPolicy.CUSTOM, custom_map={"c1": "r2"})

        assert result.assignments == {"c1": "r2"}
        assert len(result.unassigned) == 9

    def test_lateral_move_between_remaining_partners(self):
        clients = [make_client("c1"), make_client("c2", revenue=50_000.0)]
        departing = [Partner(id="d", name="D", clients=("c1",), is_departing=True)]
        remaining = [Partner(id="r1", name="R1", clients=("c2",)), Partner(id="r2", name="R2")]

        result = assign(departing, remaining, clients, RedistributionPolicy.CUSTOM,
                        custom_map={"c1": "r2", "c2": "r2"})

        assert result.partner("r1").projected_client_count == 0
        assert result.partner("r1").projected_revenue == pytest.approx(0.0)
        assert result.partner("r2").new_clients == ["c1", "c2"]
        assert result.partner("r2").projected_client_count == 2


class TestAssignContract:

    @pytest.mark.parametrize("policy", list(RedistributionPolicy))
    def test_every_policy_has_a_handler(self, policy):
        assert policy in POLICY_HANDLERS

    @pytest.mark.parametrize("policy", list(RedistributionPolicy))
    def test_empty_inputs_give_empty_result(self, policy):
        departing, remaining, clients = make_universe()

        assert assign([], remaining, clients, policy).is_empty
        assert assign(departing, [], clients, policy).is_empty

    @pytest.mark.parametrize("policy", [RedistributionPolicy.BALANCED, RedistributionPolicy.EXPERTISE,
                                        RedistributionPolicy.RELATIONSHIP])
    def test_departing_partner_in_remaining_is_skipped(self, policy):
        departing, remaining, clients = make_universe()
        sneaky = Partner(id="s", name="Sneaky", practice_areas=("Energy",), is_departing=True)
        remaining = [sneaky] + remaining

        result = assign(departing, remaining, clients, policy)

        assert "s" not in result.assignments.values()
        assert result.partner("s") is None

    def test_deterministic_and_non_mutating(self):
        departing, remaining, clients = make_universe()
        custom = {"c1": "r3"}
        snapshot = (list(departing), list(remaining), list(clients), dict(custom))

        first = assign(departing, remaining, clients, RedistributionPolicy.CUSTOM, custom_map=custom)
        second = assign(departing, remaining, clients, RedistributionPolicy.CUSTOM, custom_map=custom)

        assert first == second
        assert (departing, remaining, clients, custom) == snapshot

    def test_accepts_policy_value(self):
        departing, remaining, clients = make_universe()
        assert assign(departing, remaining, clients, "balanced").policy == RedistributionPolicy.BALANCED

    def test_departing_clients_dedupe_and_skip_unknown(self):
        clients = {c.id: c for c in [make_client("c1"), make_client("c2")]}
        departing = [
            Partner(id="d1", name="D1", clients=("c1", "ghost"), is_departing=True),
            Partner(id="d2", name="D2", clients=("c2", "c1"), is_departing=True),
        ]
        assert [c.id for c in departing_clients(departing, clients)] == ["c1", "c2"]

    def test_split_partners(self):
        departing, remaining, _ = make_universe()
        split = split_partners(remaining + departing)
        assert [p.id for p in split[0]] == ["d1", "d2"]
        assert [p.id for p in split[1]] == ["r1", "r2", "r3"]


class TestHelpers:

    @pytest.mark.parametrize("pct,level", [
        (50, "normal"), (70, "normal"), (71, "caution"), (86, "warning"), (96, "critical"),
    ])
    def test_capacity_level(self, pct, level):
        assert capacity_level(pct) == level

    def test_assignment_frame(self):
        departing, remaining, clients = make_universe()
        result = assign(departing, remaining, clients, RedistributionPolicy.BALANCED)

        df = assignment_frame(result)

        assert list(df["partner_id"]) == ["r1", "r2", "r3"]
        assert list(df["new_clients"]) == [4, 4, 2]
        assert df.loc[0, "projected_revenue"] == pytest.approx(400_000)
