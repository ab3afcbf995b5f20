"""
Contract-sheet CSV import.

The firm's contract sheet has one row per client with columns
CLIENT, Contract Period and one "<year> Contracts" column per year.
It is reshaped into the clients / client_revenues tables used everywhere else.
"""
from __future__ import annotations

import logging
import re
from datetime import date
from io import BytesIO, StringIO
from typing import Dict, List, Optional, Tuple, Union

import pandas as pd

from portfolio_os.data.ingest import clean_text, parse_number
from portfolio_os.data.schema import validate_schema
from portfolio_os.metrics.contract_status import derive_contract_status

logger = logging.getLogger(__name__)

YEAR_COLUMN = re.compile(r"^\s*(\d{4})\s+Contracts\s*$", re.IGNORECASE)


def read_contract_sheet(source: Union[str, bytes, BytesIO, StringIO]) -> pd.DataFrame:
    """Read an uploaded contract sheet as strings (no type inference on money)."""
    if isinstance(source, bytes):
        source = BytesIO(source)
    return pd.read_csv(source, dtype=str, keep_default_na=False)


def year_columns(df: pd.DataFrame) -> Dict[str, int]:
    """Map of '<year> Contracts' column name -> year."""
    found = {}
    for col in df.columns:
        match = YEAR_COLUMN.match(str(col))
        if match:
            found[col] = int(match.group(1))
    return found


def parse_contract_sheet(df: pd.DataFrame,
                         as_of: Optional[date] = None) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Reshape a contract sheet into (clients_df, revenues_df).

    Rows with a blank CLIENT are skipped. Client ids are assigned in sheet order
    so that re-importing the same sheet gives the same ids.
    """
    validate_schema(df, "contract_sheet", strict=True)
    years = year_columns(df)

    client_rows: List[Dict] = []
    revenue_rows: List[Dict] = []
    for _, row in df.iterrows():
        name = clean_text(row.get("CLIENT"))
        if not name:
            continue
        client_id = f"client_{len(client_rows) + 1:04d}"
        period = clean_text(row.get("Contract Period"))
        status = derive_contract_status(period, as_of=as_of)
        client_rows.append({
            "id": client_id,
            "name": name,
            "contract_period": period,
            "status": status.value,
        })
        for col, year in years.items():
            revenue_rows.append({
                "client_id": client_id,
                "year": year,
                "revenue_amount": parse_number(row.get(col)) or 0.0,
            })

    logger.info("Imported %d clients and %d revenue rows from contract sheet",
                len(client_rows), len(revenue_rows))

    clients_df = pd.DataFrame(client_rows, columns=["id", "name", "contract_period", "status"])
    revenues_df = pd.DataFrame(revenue_rows, columns=["client_id", "year", "revenue_amount"])
    return clients_df, revenues_df


def validate_client_data(clients_df: pd.DataFrame,
                         revenues_df: Optional[pd.DataFrame] = None) -> Dict:
    """
    Collect data-quality issues (blocking) and warnings (non-blocking).

    Nothing is raised; the page decides what to show.
    """
    issues: List[str] = []
    warnings: List[str] = []
    missing_names = 0

    totals = pd.Series(dtype=float)
    if revenues_df is not None and len(revenues_df) > 0:
        totals = revenues_df.groupby("client_id")["revenue_amount"].sum()

    for idx, row in enumerate(clients_df.to_dict("records")):
        name = clean_text(row.get("name"))
        if not name:
            issues.append(f"Row {idx + 1} has missing client name")
            missing_names += 1
            continue

        period = clean_text(row.get("contract_period"))
        if "-" not in period and not period.lower().startswith("expire"):
            issues.append(f'Client "{name}" has invalid contract period: "{period}"')

        if totals.get(row.get("id"), 0) == 0:
            warnings.append(f'Client "{name}" has zero revenue across all years')

    return {
        "is_valid": len(issues) == 0,
        "issues": issues,
        "warnings": warnings,
        "client_count": len(clients_df),
        "valid_client_count": len(clients_df) - missing_names,
    }
