"""
Data Import Page

Upload a contract sheet (CLIENT, Contract Period, <year> Contracts) and check it.
"""
import streamlit as st
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from portfolio_os.data.csv_import import (
    parse_contract_sheet, read_contract_sheet, validate_client_data, year_columns,
)
from portfolio_os.data.loader import get_data_status, save_table
from portfolio_os.data.schema import (
    SchemaValidationError, display_validation_result, get_column_info, validate_schema,
)
from portfolio_os.ui.layout import section_header
from portfolio_os.ui.state import (
    init_state, clear_imported_tables, get_imported_tables, set_imported_tables,
)


st.set_page_config(page_title="Data Import", page_icon="📥", layout="wide")

init_state()


def render_current_source():
    clients_df, _ = get_imported_tables()
    if clients_df is not None:
        st.info(f"Using uploaded contract sheet ({len(clients_df):,} clients).")
        if st.button("Discard upload and use files on disk"):
            clear_imported_tables()
            st.rerun()
        return

    status = get_data_status()["processed"]
    found = [name for name, s in status.items() if s["parquet_exists"] or s["csv_exists"]]
    if found:
        st.caption(f"Using files on disk: {', '.join(found)}")
    else:
        st.caption("No files on disk yet.")


def main():
    st.title("Data Import")
    render_current_source()

    uploaded = st.file_uploader("Contract sheet CSV", type=["csv"])
    if uploaded is None:
        return

    raw = read_contract_sheet(uploaded.getvalue())

    section_header("Schema")
    schema = validate_schema(raw, "contract_sheet", strict=False)
    display_validation_result(schema, "contract_sheet")
    years = year_columns(raw)
    st.caption(f"Revenue years found: {', '.join(str(y) for y in sorted(years.values())) or 'none'}")
    with st.expander("Columns", expanded=False):
        st.dataframe(get_column_info(raw), use_container_width=True, hide_index=True)

    try:
        clients_df, revenues_df = parse_contract_sheet(raw)
    except SchemaValidationError as e:
        st.error(str(e))
        return

    section_header("Data Quality")
    report = validate_client_data(clients_df, revenues_df)
    c1, c2, c3 = st.columns(3)
    c1.metric("Rows", f"{report['client_count']:,}")
    c2.metric("Valid Clients", f"{report['valid_client_count']:,}")
    c3.metric("Issues", f"{len(report['issues']):,}")

    for issue in report["issues"]:
        st.error(issue)
    if report["warnings"]:
        with st.expander(f"{len(report['warnings'])} warnings", expanded=False):
            for warning in report["warnings"]:
                st.warning(warning)

    section_header("Preview")
    st.dataframe(clients_df, use_container_width=True, hide_index=True)

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Use for this session", type="primary"):
            set_imported_tables(clients_df, revenues_df)
            st.success("Imported. Other pages now use this data.")
    with col2:
        if st.button("Save to data directory"):
            save_table(clients_df, "clients")
            save_table(revenues_df, "revenues")
            st.cache_data.clear()
            st.success("Saved.")


if __name__ == "__main__":
    main()
