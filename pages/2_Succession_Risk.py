"""
Succession Risk Page

How exposed each client relationship is if its lead partner leaves.
"""
import streamlit as st
import pandas as pd
import plotly.express as px
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from portfolio_os.metrics.succession import succession_analytics, succession_frame
from portfolio_os.ui.charts import apply_layout, risk_distribution_pie, risk_scatter
from portfolio_os.ui.formatting import fmt_count, format_metric_df
from portfolio_os.ui.layout import section_header
from portfolio_os.ui.state import init_state, current_portfolio


st.set_page_config(page_title="Succession Risk", page_icon="⚠️", layout="wide")

init_state()


def main():
    st.title("Succession Risk")
    st.caption("Risk 1-10 by relationship type, relationship strength and transition complexity")

    clients, _ = current_portfolio()
    if not clients:
        st.warning("No clients loaded.")
        return

    analytics = succession_analytics(clients)
    dist = analytics["risk_distribution"]

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Clients", fmt_count(analytics["total_clients"]))
    c2.metric("High Risk", fmt_count(dist["High"]))
    c3.metric("Orphaned", fmt_count(analytics["relationship_types"].get("orphaned", 0)))
    c4.metric("Avg Complexity", f"{analytics['average_complexity']:.1f}")

    col1, col2 = st.columns(2)
    with col1:
        st.plotly_chart(risk_distribution_pie(dist), use_container_width=True)
    with col2:
        types = pd.DataFrame(
            list(analytics["relationship_types"].items()),
            columns=["relationship_type", "clients"],
        )
        fig = px.bar(types, x="relationship_type", y="clients", title="Relationship Types")
        st.plotly_chart(apply_layout(fig, height=320), use_container_width=True)

    frame = succession_frame(clients)

    section_header("Complexity vs Risk")
    st.plotly_chart(risk_scatter(frame), use_container_width=True)

    section_header("Highest Risk Clients")
    names = {c.id: c.name for c in clients}
    top = pd.DataFrame([
        {
            "client": names.get(p.client_id, p.client_id),
            "relationship_type": p.relationship_type.value,
            "transition_complexity": p.transition_complexity,
            "succession_risk": p.succession_risk,
            "risk_band": p.risk_band,
        }
        for p in analytics["highest_risk_clients"]
    ])
    st.dataframe(top, use_container_width=True, hide_index=True)

    section_header("All Clients")
    band = st.multiselect("Risk band", ["High", "Medium", "Low"], default=["High", "Medium", "Low"])
    view = frame[frame["risk_band"].isin(band)].sort_values("succession_risk", ascending=False, kind="stable")
    st.dataframe(format_metric_df(view), use_container_width=True, hide_index=True)


if __name__ == "__main__":
    main()
