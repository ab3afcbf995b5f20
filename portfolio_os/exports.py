"""
Export utilities for tables, transition plans, and scenario reports.
"""
import pandas as pd
from typing import Optional, Sequence
from datetime import datetime
from io import BytesIO

from portfolio_os.data.ingest import ClientProfile, Partner, latest_revenue
from portfolio_os.metrics.contract_status import derive_contract_status
from portfolio_os.metrics.portfolio import partner_capacity_frame
from portfolio_os.metrics.strategic_value import calculate_strategic_value
from portfolio_os.modeling.redistribution import AssignmentResult, original_owners
from portfolio_os.modeling.scenarios import ScenarioComparison


TRANSITION_PLAN_COLUMNS = [
    "Client Name", "Client ID", "Current Partner", "New Partner", "Revenue",
    "Strategic Value", "Practice Areas", "Status", "Transition Priority",
]

CAPACITY_ANALYSIS_COLUMNS = [
    "Partner Name", "Status", "Current Clients", "Total Revenue", "Capacity Used (%)",
    "Practice Areas", "Avg Strategic Value", "High Value Clients", "Revenue per Client",
]


def export_dataframe_csv(df: pd.DataFrame, filename: Optional[str] = None) -> tuple:
    """
    Export dataframe to CSV bytes.

    Returns: (csv_bytes, filename)
    """
    if filename is None:
        filename = format_export_filename("export")

    csv_bytes = df.to_csv(index=False).encode('utf-8')

    return csv_bytes, filename


def export_dataframe_excel(df: pd.DataFrame, filename: Optional[str] = None,
                           sheet_name: str = "Data") -> tuple:
    """
    Export dataframe to Excel bytes.

    Returns: (excel_bytes, filename)
    """
    if filename is None:
        filename = format_export_filename("export", "xlsx")

    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
        df.to_excel(writer, sheet_name=sheet_name, index=False)

    return buffer.getvalue(), filename


def transition_priority(strategic_value: float, revenue: float) -> str:
    if strategic_value > 7 or revenue > 1_000_000:
        return "High"
    if strategic_value > 5 or revenue > 500_000:
        return "Medium"
    return "Low"


def transition_plan_frame(result: AssignmentResult,
                          partners: Sequence[Partner],
                          clients: Sequence[ClientProfile],
                          as_of=None) -> pd.DataFrame:
    """One row per reassigned client, in assignment order."""
    clients_by_id = {c.id: c for c in clients}
    partners_by_id = {p.id: p for p in partners}
    owners = original_owners(partners)

    rows = []
    for client_id, partner_id in result.assignments.items():
        client = clients_by_id.get(client_id)
        owner = owners.get(client_id)
        target = partners_by_id.get(partner_id)
        revenue = latest_revenue(client) if client else 0.0
        value = calculate_strategic_value(client) if client else 0.0
        rows.append({
            "Client Name": client.name if client else "Unknown Client",
            "Client ID": client_id,
            "Current Partner": owner.name if owner else "Unknown",
            "New Partner": target.name if target else "Unknown",
            "Revenue": round(revenue, 2),
            "Strategic Value": round(value, 1),
            "Practice Areas": "; ".join(client.practice_areas) if client else "",
            "Status": derive_contract_status(client.contract_period, as_of).label if client else "Unknown",
            "Transition Priority": transition_priority(value, revenue),
        })
    return pd.DataFrame(rows, columns=TRANSITION_PLAN_COLUMNS)


def export_transition_plan_csv(result: AssignmentResult,
                               partners: Sequence[Partner],
                               clients: Sequence[ClientProfile],
                               as_of=None) -> tuple:
    """
    Export a transition plan to CSV.

    An empty plan still exports a single placeholder row.

    Returns: (csv_bytes, filename)
    """
    df = transition_plan_frame(result, partners, clients, as_of=as_of)
    if df.empty:
        placeholder = dict.fromkeys(TRANSITION_PLAN_COLUMNS, "")
        placeholder.update({
            "Client Name": "No client reassignments planned",
            "Revenue": 0,
            "Strategic Value": 0,
            "Transition Priority": "N/A",
        })
        df = pd.DataFrame([placeholder], columns=TRANSITION_PLAN_COLUMNS)

    filename = f"transition_plan_{datetime.now().strftime('%Y%m%d')}.csv"
    return df.to_csv(index=False).encode('utf-8'), filename


def capacity_analysis_frame(partners: Sequence[Partner],
                            clients: Sequence[ClientProfile]) -> pd.DataFrame:
    """Partner capacity table with export headers."""
    frame = partner_capacity_frame(partners, clients)
    if frame.empty:
        return pd.DataFrame(columns=CAPACITY_ANALYSIS_COLUMNS)
    areas = {p.id: "; ".join(p.practice_areas) for p in partners}
    return pd.DataFrame({
        "Partner Name": frame["partner_name"],
        "Status": frame["is_departing"].map({True: "Departing", False: "Active"}),
        "Current Clients": frame["client_count"],
        "Total Revenue": frame["revenue"].round(2),
        "Capacity Used (%)": frame["capacity_pct"].round(0),
        "Practice Areas": frame["partner_id"].map(areas),
        "Avg Strategic Value": frame["avg_strategic_value"].round(1),
        "High Value Clients": frame["high_value_clients"],
        "Revenue per Client": frame["revenue_per_client"].round(2),
    })


def export_capacity_analysis_csv(partners: Sequence[Partner],
                                 clients: Sequence[ClientProfile]) -> tuple:
    """
    Export partner capacity analysis to CSV.

    Returns: (csv_bytes, filename)
    """
    df = capacity_analysis_frame(partners, clients)
    filename = f"capacity_analysis_{datetime.now().strftime('%Y%m%d')}.csv"
    return df.to_csv(index=False).encode('utf-8'), filename


def export_scenario_report_excel(comparison: ScenarioComparison,
                                 partners: Sequence[Partner],
                                 clients: Sequence[ClientProfile],
                                 filename: Optional[str] = None) -> tuple:
    """
    Export a scenario comparison to Excel: ranking sheet plus one plan sheet per policy.
    """
    if filename is None:
        filename = f"scenario_comparison_{datetime.now().strftime('%Y%m%d')}.xlsx"

    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        comparison.to_frame().to_excel(writer, sheet_name="ranking", index=False)
        capacity_analysis_frame(partners, clients).to_excel(writer, sheet_name="capacity", index=False)
        for policy, result in comparison.assignments.items():
            plan = transition_plan_frame(result, partners, clients)
            if len(plan) > 0:
                plan.to_excel(writer, sheet_name=f"plan_{policy.value}", index=False)

    return buffer.getvalue(), filename


def format_export_filename(base_name: str, extension: str = "csv",
                           include_timestamp: bool = True) -> str:
    """Generate formatted export filename."""
    if include_timestamp:
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        return f"{base_name}_{timestamp}.{extension}"
    return f"{base_name}.{extension}"
