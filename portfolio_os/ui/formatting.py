"""
Consistent number and display formatting.
"""
import pandas as pd
from typing import Union


# =============================================================================
# NUMBER FORMATTERS
# =============================================================================

def fmt_currency(value: Union[float, int, None], decimals: int = 0) -> str:
    """Format as currency: $1,234 or $1,234.56"""
    if value is None or pd.isna(value):
        return "—"
    return f"${value:,.{decimals}f}"


def fmt_percent(value: Union[float, int, None], decimals: int = 1) -> str:
    """Format percentage: 12.3%"""
    if value is None or pd.isna(value):
        return "—"
    return f"{value:,.{decimals}f}%"


def fmt_count(value: Union[float, int, None]) -> str:
    if value is None or pd.isna(value):
        return "—"
    return f"{int(value):,}"


def fmt_score(value: Union[float, int, None], decimals: int = 1) -> str:
    """Format a 0-10 score: 7.4"""
    if value is None or pd.isna(value):
        return "—"
    return f"{value:.{decimals}f}"


# =============================================================================
# BADGES
# =============================================================================

CAPACITY_BADGES = {
    "normal": "🟢 Normal",
    "caution": "🟡 Caution",
    "warning": "🟠 Warning",
    "critical": "🔴 Critical",
}

RISK_BADGES = {
    "Low": "🟢 Low",
    "Medium": "🟡 Medium",
    "High": "🔴 High",
    "Low Risk": "🟢 Low Risk",
    "Medium Risk": "🟡 Medium Risk",
    "High Risk": "🟠 High Risk",
    "Critical Risk": "🔴 Critical Risk",
}


def capacity_badge(level: str) -> str:
    return CAPACITY_BADGES.get(level, str(level))


def risk_badge(label: str) -> str:
    return RISK_BADGES.get(label, str(label))


# =============================================================================
# DATAFRAME FORMATTERS
# =============================================================================

CURRENCY_COLS = [
    "revenue", "latest_revenue", "average_revenue", "incremental_revenue",
    "projected_revenue", "revenue_per_client",
]

PERCENT_COLS = [
    "capacity_pct", "revenue_change_pct", "revenue_variance_pct", "max_capacity_pct",
]

SCORE_COLS = [
    "strategic_value", "revenue_score", "avg_strategic_value", "composite_score",
]

COUNT_COLS = [
    "client_count", "new_clients", "baseline_clients", "projected_clients",
    "clients_moved", "high_value_moves", "high_value_clients", "unassigned",
]

BADGE_COLS = {
    "capacity_level": capacity_badge,
    "risk_band": risk_badge,
    "risk_label": risk_badge,
}


def format_metric_df(df: pd.DataFrame) -> pd.DataFrame:
    """
    Format a metrics dataframe for display.

    Known money, percent, score and count columns become strings; capacity
    levels and risk labels get a coloured badge.
    """
    df = df.copy()

    for col in df.columns:
        if col in CURRENCY_COLS:
            df[col] = df[col].apply(fmt_currency)
        elif col in PERCENT_COLS:
            df[col] = df[col].apply(fmt_percent)
        elif col in SCORE_COLS:
            df[col] = df[col].apply(fmt_score)
        elif col in COUNT_COLS:
            df[col] = df[col].apply(fmt_count)
        elif col in BADGE_COLS:
            df[col] = df[col].apply(BADGE_COLS[col])

    return df
