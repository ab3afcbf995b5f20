"""
Data loading utilities with Streamlit caching.
"""
import logging

import pandas as pd
import streamlit as st
from pathlib import Path
from typing import Optional, Dict, Any, List, Tuple

from portfolio_os.config import config, TABLE_FILES
from portfolio_os.data.ingest import ClientProfile, Partner, clients_from_frame, partners_from_frame
from portfolio_os.data.partners import build_partners_from_clients, mark_departing
from portfolio_os.data.schema import check_references, ensure_column_types, validate_schema

logger = logging.getLogger(__name__)


def find_table_file(filepath: Path) -> Optional[Path]:
    """The parquet file for a table stem if present, else the csv, else None."""
    for suffix in (".parquet", ".csv"):
        candidate = filepath.with_suffix(suffix)
        if candidate.exists():
            return candidate
    return None


def read_table_file(filepath: Path) -> Optional[pd.DataFrame]:
    """Load a single table file (parquet preferred over csv)."""
    path = find_table_file(filepath)
    if path is None:
        logger.info("No parquet or csv found for %s", filepath)
        return None
    if path.suffix == ".parquet":
        return pd.read_parquet(path)
    return pd.read_csv(path)


def load_table(table_name: str, data_dir: Optional[Path] = None) -> pd.DataFrame:
    """
    Load one input table and check its schema.

    Missing optional tables come back empty; a table that exists but lacks
    required columns raises SchemaValidationError.
    """
    base = data_dir or config.processed_dir
    df = read_table_file(base / TABLE_FILES[table_name])
    if df is None:
        return pd.DataFrame()
    validate_schema(df, table_name, strict=True)
    return ensure_column_types(df)


@st.cache_data(ttl=config.cache_ttl_seconds)
def load_clients() -> pd.DataFrame:
    """Load the clients table."""
    df = load_table("clients")
    if len(df) == 0:
        st.error(f"Could not find {TABLE_FILES['clients']} in {config.processed_dir}")
        st.stop()
    return df


@st.cache_data(ttl=config.cache_ttl_seconds)
def load_revenues() -> pd.DataFrame:
    """Load long-format client revenues (client_id, year, revenue_amount)."""
    return load_table("revenues")


@st.cache_data(ttl=config.cache_ttl_seconds)
def load_partners() -> pd.DataFrame:
    """Load the partners table if present."""
    return load_table("partners")


def save_table(df: pd.DataFrame, table_name: str, data_dir: Optional[Path] = None) -> Path:
    """Write a table as csv into the processed directory."""
    base = data_dir or config.processed_dir
    base.mkdir(parents=True, exist_ok=True)
    path = (base / TABLE_FILES[table_name]).with_suffix(".csv")
    df.to_csv(path, index=False)
    logger.info("Wrote %d rows to %s", len(df), path)
    return path


def get_data_status() -> Dict[str, Any]:
    """Get status of all data files."""
    status = {"processed": {}}

    for key, filename in TABLE_FILES.items():
        parquet_path = config.processed_dir / f"{filename}.parquet"
        csv_path = config.processed_dir / f"{filename}.csv"
        status["processed"][key] = {
            "parquet_exists": parquet_path.exists(),
            "csv_exists": csv_path.exists(),
        }

    return status


def build_portfolio(clients_df: pd.DataFrame,
                    revenues_df: Optional[pd.DataFrame] = None,
                    partners_df: Optional[pd.DataFrame] = None,
                    departing: Optional[List[str]] = None) -> Tuple[List[ClientProfile], List[Partner]]:
    """
    Turn loaded tables into client profiles and partners.

    Without a partners table, partners are derived from each client's lead and
    team. `departing` (partner ids or names) overrides any stored flags.
    """
    for problem in check_references(clients_df, revenues_df, partners_df):
        logger.warning(problem)
    clients = clients_from_frame(clients_df, revenues_df)
    if partners_df is not None and len(partners_df) > 0:
        partners = partners_from_frame(partners_df)
    else:
        partners = build_partners_from_clients(clients)
    if departing is not None:
        partners = mark_departing(partners, departing)
    logger.debug("Portfolio built: %d clients, %d partners", len(clients), len(partners))
    return clients, partners


def load_portfolio(departing: Optional[List[str]] = None) -> Tuple[List[ClientProfile], List[Partner]]:
    """Load every table from disk and build the portfolio."""
    return build_portfolio(load_clients(), load_revenues(), load_partners(), departing=departing)
