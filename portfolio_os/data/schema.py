"""
Schema validation for the client, revenue and partner tables.

Column checks gate loading (missing required columns raise). Range and
reference checks only report: out-of-range scores are clamped on ingest and
dangling ids are skipped, so the app still runs.
"""
import pandas as pd
import streamlit as st
from typing import List, Tuple, Dict, Optional

from portfolio_os.config import REQUIRED_COLUMNS, OPTIONAL_COLUMNS
from portfolio_os.data.ingest import parse_name_list


class SchemaValidationError(Exception):
    """Raised when required columns are missing."""
    pass


# (min, max) accepted on the clients table before clamping.
VALUE_RANGES = {
    "relationship_strength": (1, 10),
    "renewal_probability": (0, 1),
    "strategic_fit_score": (1, 10),
    "relationship_intensity": (0, 10),
}

ID_COLUMNS = {
    "clients": "id",
    "partners": "id",
}


def validate_required_columns(df: pd.DataFrame, table_name: str) -> Tuple[bool, List[str]]:
    """
    Validate that required columns exist in dataframe.
    Returns (is_valid, missing_columns).
    """
    required = REQUIRED_COLUMNS.get(table_name, [])
    missing = [col for col in required if col not in df.columns]
    return len(missing) == 0, missing


def check_optional_columns(df: pd.DataFrame, table_name: str) -> List[str]:
    """Optional columns absent from the table; their defaults apply."""
    return [col for col in OPTIONAL_COLUMNS.get(table_name, []) if col not in df.columns]


def find_duplicate_ids(df: pd.DataFrame, table_name: str) -> List[str]:
    """Ids that appear more than once, in first-seen order."""
    id_col = ID_COLUMNS.get(table_name)
    if id_col is None or id_col not in df.columns:
        return []
    ids = df[id_col].astype(str).str.strip()
    return list(dict.fromkeys(ids[ids.duplicated()]))


def check_value_ranges(df: pd.DataFrame) -> Dict[str, int]:
    """Count of clients per column whose value falls outside its accepted range."""
    out_of_range = {}
    for col, (low, high) in VALUE_RANGES.items():
        if col not in df.columns:
            continue
        values = pd.to_numeric(df[col], errors="coerce")
        count = int(((values < low) | (values > high)).sum())
        if count:
            out_of_range[col] = count
    return out_of_range


def check_references(clients_df: pd.DataFrame,
                     revenues_df: Optional[pd.DataFrame] = None,
                     partners_df: Optional[pd.DataFrame] = None) -> List[str]:
    """Revenue rows and partner books that point at unknown client ids."""
    if "id" not in clients_df.columns:
        return []
    known = set(clients_df["id"].astype(str).str.strip())
    problems = []

    if revenues_df is not None and "client_id" in revenues_df.columns:
        orphans = sorted(set(revenues_df["client_id"].astype(str).str.strip()) - known)
        if orphans:
            problems.append(f"{len(orphans)} revenue client ids not in clients: {orphans[:5]}")

    if partners_df is not None and "clients" in partners_df.columns:
        for _, row in partners_df.iterrows():
            unknown = [c for c in parse_name_list(row["clients"]) if c not in known]
            if unknown:
                problems.append(f"Partner {row.get('name', row.get('id'))} lists unknown clients: {unknown[:5]}")

    return problems


def validate_schema(df: pd.DataFrame, table_name: str, strict: bool = True) -> Dict:
    """
    Full schema validation.

    Args:
        df: DataFrame to validate
        table_name: Key into REQUIRED_COLUMNS / OPTIONAL_COLUMNS
        strict: If True, raise error on missing required columns

    Returns:
        Dict with validation results
    """
    is_valid, missing_required = validate_required_columns(df, table_name)

    if strict and not is_valid:
        raise SchemaValidationError(
            f"Missing required columns in {table_name}: {missing_required}"
        )

    return {
        "is_valid": is_valid,
        "missing_required": missing_required,
        "missing_optional": check_optional_columns(df, table_name),
        "duplicate_ids": find_duplicate_ids(df, table_name),
        "out_of_range": check_value_ranges(df) if table_name == "clients" else {},
        "total_columns": len(df.columns),
        "total_rows": len(df),
    }


def display_validation_result(result: Dict, table_name: str):
    """Display validation result in Streamlit."""
    if result["is_valid"]:
        st.success(f"{table_name}: Schema valid ({result['total_rows']:,} rows, {result['total_columns']} columns)")
    else:
        st.error(f"{table_name}: Missing required columns: {result['missing_required']}")

    if result["missing_optional"]:
        st.warning(f"{table_name}: Missing optional columns (defaults will be used): {result['missing_optional']}")
    if result.get("duplicate_ids"):
        st.warning(f"{table_name}: Duplicate ids: {result['duplicate_ids'][:10]}")
    for col, count in result.get("out_of_range", {}).items():
        low, high = VALUE_RANGES[col]
        st.warning(f"{table_name}: {count} values of {col} outside {low}-{high} (clamped)")


def ensure_column_types(df: pd.DataFrame) -> pd.DataFrame:
    """Coerce score and money columns to numbers and id columns to stripped text."""
    df = df.copy()

    numeric_cols = list(VALUE_RANGES) + ["revenue_amount", "total_revenue"]
    for col in numeric_cols:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")

    if "year" in df.columns:
        df["year"] = pd.to_numeric(df["year"], errors="coerce").astype("Int64")

    # Ids are joined as text across tables
    for col in ["id", "client_id"]:
        if col in df.columns:
            df[col] = df[col].astype(str).str.strip()

    return df


def get_column_info(df: pd.DataFrame) -> pd.DataFrame:
    """Per-column dtype, fill rate and cardinality for the import preview."""
    return pd.DataFrame([{
        "column": col,
        "dtype": str(df[col].dtype),
        "non_null": int(df[col].notna().sum()),
        "blank": int((df[col].astype(str).str.strip() == "").sum()),
        "unique": df[col].nunique(),
    } for col in df.columns])
