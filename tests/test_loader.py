"""
Tests for table loading and portfolio assembly.
"""
import logging
import sys
from pathlib import Path

import pandas as pd
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from portfolio_os.data.loader import build_portfolio, find_table_file, load_table, save_table
from portfolio_os.data.schema import SchemaValidationError
from portfolio_os.modeling.redistribution import split_partners
from portfolio_os.ui.state import DEFAULTS


def make_clients_df():
    return pd.DataFrame({
        "id": ["c1", "c2", "c3"],
        "name": ["Acme", "Beta", "Gamma"],
        "primary_lobbyist": ["Ann", "Bob", "Ann"],
        "lobbyist_team": ["Ann, Bob", "Bob", ""],
        "practice_area": ["Energy", "Tax", "Energy; Trade"],
    })


def make_revenues_df():
    return pd.DataFrame({
        "client_id": ["c1", "c1", "c2", "c3"],
        "year": [2023, 2024, 2024, 2024],
        "revenue_amount": [10.0, 20.0, 30.0, 40.0],
    })


class TestLoadTable:

    def test_csv_roundtrip_types(self, tmp_path):
        save_table(make_revenues_df(), "revenues", data_dir=tmp_path)

        df = load_table("revenues", data_dir=tmp_path)

        assert (tmp_path / "client_revenues.csv").exists()
        assert len(df) == 4
        assert str(df["year"].dtype) == "Int64"
        assert df["client_id"].tolist() == ["c1", "c1", "c2", "c3"]

    def test_parquet_preferred_over_csv(self, tmp_path):
        pd.DataFrame({"id": ["csv"], "name": ["From CSV"]}).to_csv(tmp_path / "clients.csv", index=False)
        pd.DataFrame({"id": ["pq"], "name": ["From Parquet"]}).to_parquet(tmp_path / "clients.parquet")

        assert find_table_file(tmp_path / "clients").suffix == ".parquet"
        assert load_table("clients", data_dir=tmp_path)["id"].tolist() == ["pq"]

    def test_missing_file_is_empty(self, tmp_path):
        assert find_table_file(tmp_path / "partners") is None
        assert load_table("partners", data_dir=tmp_path).empty

    def test_missing_required_column_raises(self, tmp_path):
        pd.DataFrame({"name": ["Acme"]}).to_csv(tmp_path / "clients.csv", index=False)
        with pytest.raises(SchemaValidationError):
            load_table("clients", data_dir=tmp_path)


class TestBuildPortfolio:

    def test_partners_derived_from_clients(self):
        clients, partners = build_portfolio(make_clients_df(), make_revenues_df())

        assert [c.id for c in clients] == ["c1", "c2", "c3"]
        assert [p.name for p in partners] == ["Ann", "Bob"]
        assert partners[0].clients == ("c1", "c3")
        assert partners[0].total_revenue == pytest.approx(60.0)

    def test_departing_override(self):
        _, partners = build_portfolio(make_clients_df(), make_revenues_df(), departing=["Bob"])
        assert [p.is_departing for p in partners] == [False, True]

    def test_partners_table_wins(self):
        partners_df = pd.DataFrame({
            "id": ["p9"], "name": ["Zed"], "clients": ["c1;c2"], "is_departing": ["yes"],
        })

        _, partners = build_portfolio(make_clients_df(), make_revenues_df(), partners_df)

        assert [p.id for p in partners] == ["p9"]
        assert partners[0].clients == ("c1", "c2")
        assert partners[0].is_departing is True

    def test_dangling_references_logged(self, caplog):
        revenues = pd.concat([make_revenues_df(), pd.DataFrame({
            "client_id": ["ghost"], "year": [2024], "revenue_amount": [5.0],
        })], ignore_index=True)

        with caplog.at_level(logging.WARNING):
            clients, _ = build_portfolio(make_clients_df(), revenues)

        assert len(clients) == 3
        assert "ghost" in caplog.text

    def test_stored_departing_flags_kept_without_selection(self):
        partners_df = pd.DataFrame({
            "id": ["p1", "p2"], "name": ["Ann", "Bob"],
            "clients": ["c1;c3", "c2"], "is_departing": [True, False],
        })

        _, partners = build_portfolio(make_clients_df(), make_revenues_df(), partners_df, departing=None)
        departing, remaining = split_partners(partners)

        assert [p.id for p in departing] == ["p1"]
        assert [p.id for p in remaining] == ["p2"]

    def test_empty_selection_clears_stored_flags(self):
        partners_df = pd.DataFrame({
            "id": ["p1", "p2"], "name": ["Ann", "Bob"],
            "clients": ["c1;c3", "c2"], "is_departing": [True, False],
        })

        _, partners = build_portfolio(make_clients_df(), make_revenues_df(), partners_df, departing=[])

        assert [p.is_departing for p in partners] == [False, False]

    def test_session_starts_without_departing_override(self):
        assert DEFAULTS["departing_partners"] is None
