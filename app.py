"""
Portfolio Succession Operating System

Main entry point for Streamlit app.
"""
import streamlit as st
from pathlib import Path
from datetime import datetime, timezone

# Page config must be first Streamlit command
st.set_page_config(
    page_title="Portfolio Succession OS",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Add project root to path
import sys
sys.path.insert(0, str(Path(__file__).parent))

from portfolio_os.config import config, configure_logging, TABLE_FILES
from portfolio_os.data.loader import find_table_file, get_data_status
from portfolio_os.data.schema import SchemaValidationError
from portfolio_os.metrics.portfolio import portfolio_summary
from portfolio_os.ui.layout import render_header, render_kpi_strip
from portfolio_os.ui.state import init_state, current_portfolio, get_imported_tables


def main():
    """Main app entry point."""
    configure_logging()

    # Initialize session state
    init_state()

    render_header("Client portfolio, succession risk and partner transition planning")

    # Check data availability
    status = get_data_status()
    clients_on_disk = (
        status["processed"]["clients"]["parquet_exists"] or
        status["processed"]["clients"]["csv_exists"]
    )
    imported_df, _ = get_imported_tables()

    if not clients_on_disk and imported_df is None:
        st.error("No data found!")
        st.markdown(f"""
        ### Setup Required

        Place your data files in: `{config.processed_dir}`

        Required files:
        - `{TABLE_FILES['clients']}.parquet` (or .csv) with `id`, `name`

        Optional files:
        - `{TABLE_FILES['revenues']}.parquet` with `client_id`, `year`, `revenue_amount`
        - `{TABLE_FILES['partners']}.parquet` with `id`, `name`, `clients`

        Or upload a contract sheet on the **Data Import** page.
        """)
        st.page_link("pages/5_Data_Import.py", label="Data Import", icon="📥")
        return

    with st.expander("Data fingerprint", expanded=False):
        rows = []
        for table, filename in TABLE_FILES.items():
            path = find_table_file(config.processed_dir / filename)
            if path is None:
                continue
            mtime = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
            rows.append({
                "table": table,
                "file": path.name,
                "size_mb": round(path.stat().st_size / (1024 * 1024), 2),
                "modified_utc": mtime.strftime("%Y-%m-%d %H:%M"),
            })
        if imported_df is not None:
            rows.append({"table": "clients", "file": "(uploaded contract sheet)", "size_mb": None, "modified_utc": None})
        if rows:
            st.dataframe(rows, use_container_width=True)
        else:
            st.info(f"No files found in {config.processed_dir}.")

    # Load and validate data
    with st.spinner("Loading data..."):
        try:
            clients, partners = current_portfolio()
        except SchemaValidationError as e:
            st.error(f"Error loading data: {e}")
            return

    # Navigation
    st.markdown("---")

    col1, col2 = st.columns([1, 4])

    with col1:
        st.markdown("### Quick Links")
        st.page_link("pages/1_Portfolio_Overview.py", label="Portfolio Overview", icon="📈")
        st.page_link("pages/2_Succession_Risk.py", label="Succession Risk", icon="⚠️")
        st.page_link("pages/3_Redistribution_Modeler.py", label="Redistribution Modeler", icon="🔀")
        st.page_link("pages/4_Scenario_Comparison.py", label="Scenario Comparison", icon="⚖️")
        st.page_link("pages/5_Data_Import.py", label="Data Import", icon="📥")

    with col2:
        st.markdown("### Data Overview")

        summary = portfolio_summary(clients)
        render_kpi_strip({
            "total_clients": summary["total_clients"],
            "total_revenue": summary["total_revenue"],
            "avg_strategic_value": summary["avg_strategic_value"],
            "partners": len(partners),
            "departing": sum(1 for p in partners if p.is_departing),
        })

        st.markdown("#### Method")
        st.markdown("""
        - **Strategic value** (0-10): latest-year revenue, relationship strength and
          renewal probability, less a conflict-risk penalty.
        - **Succession risk** (1-10): relationship type, relationship weakness and
          transition complexity.
        - **Capacity**: 30 primary clients = 100%.
        - **Scenarios**: each redistribution policy is scored on capacity, revenue
          balance, client movement and high-value moves; lowest composite wins.
        """)


if __name__ == "__main__":
    main()
