"""
Session state management for Streamlit app.
"""
import streamlit as st
from typing import Optional, Dict, Any, List

from portfolio_os.data.loader import build_portfolio, load_portfolio
from portfolio_os.modeling.redistribution import RedistributionPolicy


# =============================================================================
# STATE KEYS
# =============================================================================

STATE_KEYS = {
    # Succession planning
    "departing_partners": "departing_partners",
    "selected_policy": "selected_policy",
    "custom_assignments": "custom_assignments",

    # Filters
    "selected_status": "selected_status",
    "selected_practice_area": "selected_practice_area",

    # Imported data (contract-sheet upload overrides files on disk)
    "imported_clients": "imported_clients",
    "imported_revenues": "imported_revenues",
}


# =============================================================================
# DEFAULT VALUES
# =============================================================================

DEFAULTS = {
    "departing_partners": None,
    "selected_policy": RedistributionPolicy.BALANCED.value,
    "custom_assignments": {},
    "selected_status": "All",
    "selected_practice_area": "All",
    "imported_clients": None,
    "imported_revenues": None,
}


# =============================================================================
# STATE HELPERS
# =============================================================================

def init_state():
    """Initialize all session state keys with defaults."""
    for key, default in DEFAULTS.items():
        if key not in st.session_state:
            # Fresh containers so sessions never share a mutable default
            st.session_state[key] = default.copy() if isinstance(default, (list, dict)) else default


def get_state(key: str) -> Any:
    """Get state value with default fallback."""
    init_state()
    return st.session_state.get(key, DEFAULTS.get(key))


def set_state(key: str, value: Any):
    """Set state value."""
    st.session_state[key] = value


# =============================================================================
# SUCCESSION PLANNING
# =============================================================================

def get_departing_partners() -> Optional[List[str]]:
    """Partner ids picked this session, or None to keep the stored is_departing flags."""
    selection = get_state("departing_partners")
    return None if selection is None else list(selection)


def set_departing_partners(partner_ids: List[str]):
    set_state("departing_partners", list(partner_ids))
    # A new departure set invalidates hand-made assignments
    clear_custom_assignments()


def get_selected_policy() -> RedistributionPolicy:
    return RedistributionPolicy(get_state("selected_policy"))


def set_selected_policy(policy: RedistributionPolicy):
    set_state("selected_policy", RedistributionPolicy(policy).value)


def get_custom_assignments() -> Dict[str, str]:
    return dict(get_state("custom_assignments") or {})


def set_custom_assignment(client_id: str, partner_id: Optional[str]):
    """Assign one client by hand; a None partner clears the entry."""
    assignments = get_custom_assignments()
    if partner_id:
        assignments[client_id] = partner_id
    else:
        assignments.pop(client_id, None)
    set_state("custom_assignments", assignments)


def clear_custom_assignments():
    set_state("custom_assignments", {})


# =============================================================================
# IMPORTED DATA
# =============================================================================

def get_imported_tables():
    """(clients_df, revenues_df) from the last contract-sheet upload, or (None, None)."""
    return get_state("imported_clients"), get_state("imported_revenues")


def set_imported_tables(clients_df, revenues_df):
    set_state("imported_clients", clients_df)
    set_state("imported_revenues", revenues_df)


def clear_imported_tables():
    set_imported_tables(None, None)


def current_portfolio():
    """
    (clients, partners) for the session: the uploaded contract sheet when one
    is loaded, otherwise the tables on disk. Departing flags follow the session
    once a selection has been made there.
    """
    departing = get_departing_partners()
    clients_df, revenues_df = get_imported_tables()
    if clients_df is not None:
        return build_portfolio(clients_df, revenues_df, departing=departing)
    return load_portfolio(departing=departing)
