"""
Portfolio Overview Page

Client book at a glance: revenue, strategic value, contract status, partner load.
"""
import streamlit as st
import pandas as pd
import plotly.express as px
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from portfolio_os.config import config
from portfolio_os.data.ingest import clients_to_frame
from portfolio_os.exports import export_capacity_analysis_csv, export_dataframe_csv, export_dataframe_excel
from portfolio_os.metrics.contract_status import ContractStatus, derive_status_column
from portfolio_os.metrics.portfolio import (
    partner_capacity_frame, portfolio_summary, select_priority_clients,
)
from portfolio_os.metrics.strategic_value import score_clients
from portfolio_os.ui.charts import apply_layout, capacity_chart, revenue_by_partner
from portfolio_os.ui.formatting import format_metric_df
from portfolio_os.ui.layout import render_kpi_strip, section_header
from portfolio_os.ui.state import init_state, current_portfolio, get_state, set_state


st.set_page_config(page_title="Portfolio Overview", page_icon="📈", layout="wide")

init_state()


def status_frame(breakdown: dict) -> pd.DataFrame:
    """Status breakdown with display labels, fixed status order."""
    rows = [
        {"status": s.label, "clients": breakdown.get(s.value, 0)}
        for s in ContractStatus
    ]
    return pd.DataFrame(rows)


def render_client_table(clients, summary: dict, priority_ids: set) -> None:
    """Filterable client list with CSV and Excel downloads."""
    all_clients = derive_status_column(clients_to_frame(clients))
    all_clients["priority"] = all_clients["id"].isin(priority_ids)

    status_options = ["All"] + [s.label for s in ContractStatus]
    area_options = ["All"] + sorted(summary["practice_areas"])
    # Stored filters can point at values from a previous data set
    if get_state("selected_status") not in status_options:
        set_state("selected_status", "All")
    if get_state("selected_practice_area") not in area_options:
        set_state("selected_practice_area", "All")

    col1, col2 = st.columns(2)
    with col1:
        status = st.selectbox("Contract status", status_options, key="selected_status")
    with col2:
        area = st.selectbox("Practice area", area_options, key="selected_practice_area")

    if status != "All":
        all_clients = all_clients[all_clients["status_label"] == status]
    if area != "All":
        keep = [area in [a.strip() for a in areas.split(",")] for areas in all_clients["practice_areas"]]
        all_clients = all_clients[keep]

    st.caption(f"{len(all_clients):,} clients")
    st.dataframe(format_metric_df(all_clients), use_container_width=True, hide_index=True)

    col1, col2 = st.columns(2)
    with col1:
        csv_bytes, filename = export_dataframe_csv(all_clients, "clients.csv")
        st.download_button("Download clients (CSV)", csv_bytes, filename, mime="text/csv")
    with col2:
        xlsx_bytes, filename = export_dataframe_excel(all_clients, "clients.xlsx", sheet_name="clients")
        st.download_button(
            "Download clients (Excel)", xlsx_bytes, filename,
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )


def main():
    st.title("Portfolio Overview")

    clients, partners = current_portfolio()
    if not clients:
        st.warning("No clients loaded.")
        return

    summary = portfolio_summary(clients)
    render_kpi_strip({
        "total_clients": summary["total_clients"],
        "total_revenue": summary["total_revenue"],
        "avg_strategic_value": summary["avg_strategic_value"],
        "partners": len(partners),
    })

    st.markdown("---")

    col1, col2 = st.columns(2)
    with col1:
        section_header("Contract Status")
        fig = px.bar(status_frame(summary["status_breakdown"]), x="status", y="clients")
        st.plotly_chart(apply_layout(fig, height=300), use_container_width=True)
    with col2:
        section_header("Practice Areas")
        areas = pd.DataFrame(
            sorted(summary["practice_areas"].items(), key=lambda kv: kv[1], reverse=True),
            columns=["practice_area", "clients"],
        )
        if len(areas) > 0:
            fig = px.bar(areas.head(12), x="clients", y="practice_area", orientation="h")
            fig.update_layout(yaxis={"categoryorder": "total ascending"})
            st.plotly_chart(apply_layout(fig, height=300), use_container_width=True)
        else:
            st.info("No practice areas recorded.")

    section_header("Top Clients", f"Top {config.top_clients_limit} by strategic value")
    top = pd.DataFrame(summary["top_clients"])
    if len(top) > 0:
        top["practice_areas"] = top["practice_areas"].apply(", ".join)
    st.dataframe(format_metric_df(top), use_container_width=True, hide_index=True)

    section_header(
        "Priority Clients",
        "In Force and Proposal clients ranked by strategic value",
    )
    limit = st.slider("Clients to show", 5, 200, config.priority_clients_limit, step=5)
    priority = select_priority_clients(clients, limit=limit)
    st.caption(
        f"{priority['selected_count']} of {priority['total_active']} active clients "
        f"({priority['excluded_count']} excluded)"
    )
    priority_ids = {c.id for c in priority["clients"]}
    scores = score_clients(priority["clients"])
    st.dataframe(format_metric_df(scores), use_container_width=True, hide_index=True)

    if partners:
        st.markdown("---")
        section_header("Partner Capacity", "30 primary clients = 100%")
        capacity = partner_capacity_frame(partners, clients)
        col1, col2 = st.columns(2)
        with col1:
            st.plotly_chart(capacity_chart(capacity), use_container_width=True)
        with col2:
            st.plotly_chart(revenue_by_partner(capacity), use_container_width=True)
        st.dataframe(format_metric_df(capacity), use_container_width=True, hide_index=True)

        csv_bytes, filename = export_capacity_analysis_csv(partners, clients)
        st.download_button("Download capacity analysis", csv_bytes, filename, mime="text/csv")

    with st.expander("All clients", expanded=False):
        render_client_table(clients, summary, priority_ids)


if __name__ == "__main__":
    main()
