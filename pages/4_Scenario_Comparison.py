"""
Scenario Comparison Page

Run every redistribution policy for the current departures and rank the outcomes.
"""
import streamlit as st
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from portfolio_os.exports import export_dataframe_csv, export_scenario_report_excel
from portfolio_os.modeling.redistribution import split_partners
from portfolio_os.modeling.scenarios import compare_policies
from portfolio_os.ui.charts import scenario_comparison_chart
from portfolio_os.ui.formatting import fmt_percent, format_metric_df
from portfolio_os.ui.layout import section_header
from portfolio_os.ui.state import init_state, current_portfolio, get_custom_assignments


st.set_page_config(page_title="Scenario Comparison", page_icon="⚖️", layout="wide")

init_state()


def main():
    st.title("Scenario Comparison")
    st.caption("Composite = risk x 2 + revenue variance + capacity penalty + 0.1 per moved client. Lower is better.")

    clients, partners = current_portfolio()
    departing, remaining = split_partners(partners)
    if not departing or not remaining:
        st.info("Choose departing partners on the Redistribution Modeler page first.")
        st.page_link("pages/3_Redistribution_Modeler.py", label="Redistribution Modeler", icon="🔀")
        return

    comparison = compare_policies(partners, clients, custom_map=get_custom_assignments() or None)
    best = comparison.recommended
    if best is None:
        st.warning("No scenarios to compare.")
        return

    st.success(
        f"**Recommended: {best.label}** (risk {best.risk_score}, {best.risk_label}; "
        f"max capacity {fmt_percent(best.max_capacity)}; "
        f"revenue variance {fmt_percent(best.revenue_variance)})"
    )

    cols = st.columns(len(comparison.ranked))
    for col, scenario in zip(cols, comparison.ranked):
        with col:
            st.metric(scenario.label, f"{scenario.composite_score:.1f}", help=scenario.risk_label)
            st.caption(f"{scenario.clients_moved} moved, {scenario.unassigned_count} unassigned")

    section_header("Risk Breakdown")
    st.plotly_chart(scenario_comparison_chart(comparison), use_container_width=True)

    table = comparison.to_frame()
    st.dataframe(format_metric_df(table), use_container_width=True, hide_index=True)

    c1, c2 = st.columns(2)
    with c1:
        csv_bytes, filename = export_dataframe_csv(table, "scenario_comparison.csv")
        st.download_button("Download ranking (CSV)", csv_bytes, filename, mime="text/csv")
    with c2:
        xlsx_bytes, filename = export_scenario_report_excel(comparison, partners, clients)
        st.download_button(
            "Download full report (Excel)", xlsx_bytes, filename,
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )


if __name__ == "__main__":
    main()
