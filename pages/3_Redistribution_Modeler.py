"""
Redistribution Modeler Page

Pick departing partners and a policy; see where their clients land.
"""
import streamlit as st
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from portfolio_os.exports import export_transition_plan_csv, transition_plan_frame
from portfolio_os.modeling.redistribution import (
    POLICY_ORDER, RedistributionPolicy, assign, assignment_frame, departing_clients, split_partners,
)
from portfolio_os.modeling.scenarios import evaluate_assignment
from portfolio_os.ui.charts import capacity_before_after
from portfolio_os.ui.formatting import fmt_count, fmt_percent, format_metric_df
from portfolio_os.ui.layout import info_box, section_header
from portfolio_os.ui.state import (
    init_state, current_portfolio, get_custom_assignments,
    get_selected_policy, set_custom_assignment, set_departing_partners, set_selected_policy,
)


st.set_page_config(page_title="Redistribution Modeler", page_icon="🔀", layout="wide")

init_state()


def render_partner_picker(partners) -> None:
    names = {p.id: p.name for p in partners}
    flagged = [p.id for p in partners if p.is_departing]
    chosen = st.sidebar.multiselect(
        "Departing partners",
        options=list(names),
        default=flagged,
        format_func=lambda pid: names[pid],
    )
    if chosen != flagged:
        set_departing_partners(chosen)
        st.rerun()


def render_policy_picker() -> RedistributionPolicy:
    current = get_selected_policy()
    policy = st.sidebar.radio(
        "Policy",
        options=list(POLICY_ORDER),
        index=list(POLICY_ORDER).index(current),
        format_func=lambda p: p.label,
    )
    if policy != current:
        set_selected_policy(policy)
    return policy


def render_custom_editor(departing, remaining, clients) -> None:
    """One selectbox per departing client; blank leaves it unassigned."""
    clients_by_id = {c.id: c for c in clients}
    options = [""] + [p.id for p in remaining]
    names = {p.id: p.name for p in remaining}
    custom = get_custom_assignments()

    with st.expander("Custom assignments", expanded=True):
        for client in departing_clients(departing, clients_by_id):
            current = custom.get(client.id, "")
            choice = st.selectbox(
                client.name,
                options=options,
                index=options.index(current) if current in options else 0,
                format_func=lambda pid: names.get(pid, "(unassigned)"),
                key=f"custom_{client.id}",
            )
            if choice != current:
                set_custom_assignment(client.id, choice or None)


def main():
    st.title("Redistribution Modeler")

    clients, partners = current_portfolio()
    if not partners:
        st.warning("No partners available. Load a partners table or clients with a primary lobbyist.")
        return

    render_partner_picker(partners)
    policy = render_policy_picker()

    departing, remaining = split_partners(partners)
    if not departing:
        st.info("Select one or more departing partners in the sidebar.")
        return
    if not remaining:
        st.error("Every partner is departing; nobody is left to take clients.")
        return

    if policy == RedistributionPolicy.CUSTOM:
        render_custom_editor(departing, remaining, clients)

    result = assign(departing, remaining, clients, policy, custom_map=get_custom_assignments())
    scenario = evaluate_assignment(result, partners, clients)

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Clients Reassigned", fmt_count(len(result.assignments)))
    c2.metric("Unassigned", fmt_count(len(result.unassigned)))
    c3.metric("Max Capacity", fmt_percent(scenario.max_capacity))
    c4.metric("Risk", f"{scenario.risk_score} ({scenario.risk_label})")

    for entry in result.dropped:
        info_box("Ignored assignment", f"{entry.client_id} -> {entry.partner_id}: {entry.reason}", type="warning")

    critical = [pa.partner_name for pa in result.partners if pa.capacity_level == "critical"]
    if critical:
        info_box("Over capacity", ", ".join(critical), type="error")

    section_header("Partner Capacity After Transition")
    frame = assignment_frame(result)
    st.plotly_chart(capacity_before_after(frame), use_container_width=True)
    st.dataframe(format_metric_df(frame), use_container_width=True, hide_index=True)

    section_header("Transition Plan")
    plan = transition_plan_frame(result, partners, clients)
    st.dataframe(plan, use_container_width=True, hide_index=True)

    if result.unassigned:
        names = {c.id: c.name for c in clients}
        st.warning(
            "Not assigned under this policy: "
            + ", ".join(names.get(cid, cid) for cid in result.unassigned)
        )

    csv_bytes, filename = export_transition_plan_csv(result, partners, clients)
    st.download_button("Download transition plan", csv_bytes, filename, mime="text/csv")


if __name__ == "__main__":
    main()
