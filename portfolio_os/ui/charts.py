"""
Standard chart wrappers using Plotly.
"""
import plotly.express as px
import plotly.graph_objects as go
import pandas as pd
from typing import Dict, Optional

from portfolio_os.config import CAPACITY_CLIENTS
from portfolio_os.modeling.scenarios import ScenarioComparison


# =============================================================================
# CHART THEME
# =============================================================================

CHART_COLORS = {
    "primary": "#1f77b4",
    "secondary": "#ff7f0e",
    "success": "#28a745",
    "warning": "#ffc107",
    "danger": "#dc3545",
    "neutral": "#6c757d",
    "light": "#f8f9fa",
}

CAPACITY_LEVEL_COLORS = {
    "normal": CHART_COLORS["success"],
    "caution": CHART_COLORS["warning"],
    "warning": CHART_COLORS["secondary"],
    "critical": CHART_COLORS["danger"],
}

RISK_BAND_COLORS = {
    "Low": CHART_COLORS["success"],
    "Medium": CHART_COLORS["warning"],
    "High": CHART_COLORS["danger"],
}

CHART_TEMPLATE = "plotly_white"

DEFAULT_LAYOUT = {
    "template": CHART_TEMPLATE,
    "font": {"family": "Arial, sans-serif", "size": 12},
    "margin": {"l": 50, "r": 30, "t": 40, "b": 50},
    "hoverlabel": {"bgcolor": "white"},
}


def apply_layout(fig: go.Figure, **kwargs) -> go.Figure:
    """Apply standard layout to figure."""
    layout = {**DEFAULT_LAYOUT, **kwargs}
    fig.update_layout(**layout)
    return fig


# =============================================================================
# BAR CHARTS
# =============================================================================

def horizontal_bar(df: pd.DataFrame, x: str, y: str,
                   title: str = "", color: Optional[str] = None,
                   text: Optional[str] = None) -> go.Figure:
    """
    Create horizontal bar chart.
    """
    fig = px.bar(
        df, x=x, y=y, orientation="h",
        title=title,
        color=color,
        text=text,
    )

    fig.update_traces(textposition="outside")
    fig.update_layout(yaxis={"categoryorder": "total ascending"})

    return apply_layout(fig)


def revenue_by_partner(df: pd.DataFrame, value_col: str = "revenue",
                       title: str = "Revenue by Partner") -> go.Figure:
    """Horizontal revenue bars from a partner capacity frame."""
    return horizontal_bar(df, x=value_col, y="partner_name", title=title)


# =============================================================================
# CAPACITY CHARTS
# =============================================================================

def capacity_chart(df: pd.DataFrame, value_col: str = "capacity_pct",
                   title: str = "Partner Capacity") -> go.Figure:
    """
    Partner capacity bars colored by level, with the 100% line.

    Expects `partner_name`, `value_col` and `capacity_level` columns.
    """
    colors = [CAPACITY_LEVEL_COLORS.get(level, CHART_COLORS["neutral"])
              for level in df.get("capacity_level", [])]

    fig = go.Figure(go.Bar(
        x=df["partner_name"],
        y=df[value_col],
        marker_color=colors or CHART_COLORS["primary"],
        text=[f"{v:.0f}%" for v in df[value_col]],
        textposition="outside",
    ))

    fig.add_hline(
        y=100,
        line_dash="dash",
        line_color=CHART_COLORS["danger"],
        annotation_text="Full capacity",
    )

    fig.update_layout(title=title, yaxis_title="Capacity used (%)")

    return apply_layout(fig, height=350)


def capacity_before_after(df: pd.DataFrame, title: str = "Capacity Before / After") -> go.Figure:
    """Grouped bars of baseline vs projected capacity from an assignment frame."""
    baseline = df["baseline_clients"] / CAPACITY_CLIENTS * 100
    fig = go.Figure()
    fig.add_trace(go.Bar(name="Current", x=df["partner_name"], y=baseline,
                         marker_color=CHART_COLORS["neutral"]))
    fig.add_trace(go.Bar(name="Projected", x=df["partner_name"], y=df["capacity_pct"],
                         marker_color=CHART_COLORS["primary"]))
    fig.add_hline(y=100, line_dash="dash", line_color=CHART_COLORS["danger"])
    fig.update_layout(barmode="group", title=title, yaxis_title="Capacity used (%)")
    return apply_layout(fig, height=350)


# =============================================================================
# RISK CHARTS
# =============================================================================

def risk_distribution_pie(distribution: Dict[str, int],
                          title: str = "Succession Risk Distribution") -> go.Figure:
    """Pie of client counts by risk band."""
    labels = list(distribution.keys())
    fig = go.Figure(go.Pie(
        labels=labels,
        values=list(distribution.values()),
        marker={"colors": [RISK_BAND_COLORS.get(label, CHART_COLORS["neutral"]) for label in labels]},
        hole=0.4,
    ))
    fig.update_layout(title=title)
    return apply_layout(fig, height=320)


def risk_scatter(df: pd.DataFrame, title: str = "Complexity vs Succession Risk") -> go.Figure:
    """Transition complexity against succession risk, one point per client."""
    fig = px.scatter(
        df, x="transition_complexity", y="succession_risk",
        color="risk_band",
        color_discrete_map=RISK_BAND_COLORS,
        hover_name="client_name",
        title=title,
    )
    fig.update_layout(
        xaxis_title="Transition complexity",
        yaxis_title="Succession risk",
        xaxis={"range": [0, 10.5]},
        yaxis={"range": [0, 10.5]},
    )
    return apply_layout(fig)


# =============================================================================
# SCENARIO CHARTS
# =============================================================================

def scenario_comparison_chart(comparison: ScenarioComparison,
                              title: str = "Scenario Risk Comparison") -> go.Figure:
    """Risk score and max capacity per policy, in ranked order."""
    df = comparison.to_frame()
    fig = go.Figure()
    fig.add_trace(go.Bar(name="Risk score", x=df["strategy"], y=df["risk_score"],
                         marker_color=CHART_COLORS["danger"]))
    fig.add_trace(go.Bar(name="Max capacity %", x=df["strategy"], y=df["max_capacity_pct"],
                         marker_color=CHART_COLORS["primary"]))
    fig.add_trace(go.Bar(name="Revenue variance %", x=df["strategy"], y=df["revenue_variance_pct"],
                         marker_color=CHART_COLORS["secondary"]))
    fig.update_layout(barmode="group", title=title)
    return apply_layout(fig, height=380)
