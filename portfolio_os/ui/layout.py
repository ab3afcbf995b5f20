"""
Layout components: header, KPI strip, sections, callouts.
"""
import streamlit as st
from typing import Optional

from portfolio_os.config import config
from portfolio_os.ui.formatting import fmt_currency, fmt_percent, fmt_count, fmt_score


# =============================================================================
# HEADER
# =============================================================================

def render_header(subtitle: Optional[str] = None):
    """Render app header with title and environment."""
    col1, col2 = st.columns([3, 1])

    with col1:
        st.title("Portfolio Succession OS")
        if subtitle:
            st.caption(subtitle)

    with col2:
        if not config.is_prod:
            st.caption(f"Environment: {config.app_env}")


# =============================================================================
# KPI CARDS
# =============================================================================

KPI_FORMATS = {
    "total_clients": ("Clients", fmt_count),
    "total_revenue": ("Revenue (latest year)", fmt_currency),
    "avg_strategic_value": ("Avg Strategic Value", fmt_score),
    "partners": ("Partners", fmt_count),
    "departing": ("Departing", fmt_count),
    "max_capacity": ("Max Capacity", fmt_percent),
    "risk_score": ("Risk Score", fmt_count),
}


def render_kpi_strip(metrics: dict):
    """
    Render horizontal strip of KPI cards.

    Keys found in KPI_FORMATS get their label and formatter; anything else is
    shown title-cased as plain text.
    """
    cols = st.columns(len(metrics))

    for col, (key, value) in zip(cols, metrics.items()):
        label, formatter = KPI_FORMATS.get(key, (key.replace("_", " ").title(), str))
        with col:
            st.metric(label=label, value=formatter(value))


# =============================================================================
# SECTIONS
# =============================================================================

def section_header(title: str, description: Optional[str] = None):
    """Render section header with optional description."""
    st.subheader(title)
    if description:
        st.caption(description)


CALLOUTS = {
    "info": st.info,
    "warning": st.warning,
    "error": st.error,
    "success": st.success,
}


def info_box(title: str, content: str, type: str = "info"):
    """Render an info/warning/error/success callout."""
    CALLOUTS.get(type, st.info)(f"**{title}**: {content}")
