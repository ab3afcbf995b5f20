"""
Contract lifecycle status from the contract-period text on a client sheet.

Accepted shapes:
- "M/D/YY-M/D/YY"   contract range
- "Expired M/D/YY"  always Done
- "expires M/D/YY"  single end date
"""
from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

import pandas as pd


class ContractStatus(str, Enum):
    IN_FORCE = "IF"
    PROPOSAL = "P"
    DONE = "D"
    HOLD = "H"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]


STATUS_LABELS = {
    ContractStatus.IN_FORCE: "In Force",
    ContractStatus.PROPOSAL: "Proposal",
    ContractStatus.DONE: "Done",
    ContractStatus.HOLD: "Hold",
}

DATE_FORMATS = ("%m/%d/%y", "%m/%d/%Y", "%Y/%m/%d")


def parse_contract_date(text: str) -> Optional[date]:
    """Parse a single M/D/YY (or M/D/YYYY) date. Returns None when unparsable."""
    text = text.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def derive_contract_status(contract_period: Any, as_of: Optional[date] = None) -> ContractStatus:
    """
    Classify a contract-period string relative to `as_of` (default today).

    Never raises: anything that cannot be read is Hold.
    """
    if not isinstance(contract_period, str) or not contract_period.strip():
        return ContractStatus.HOLD

    today = as_of or date.today()
    text = contract_period.strip()
    lowered = text.lower()

    # "Expired" must be checked before "expires": both start with "expire".
    if lowered.startswith("expired"):
        return ContractStatus.DONE

    if lowered.startswith("expires"):
        end = parse_contract_date(text[len("expires"):])
        if end is None:
            return ContractStatus.HOLD
        if end < today:
            return ContractStatus.DONE
        return ContractStatus.IN_FORCE

    start_str, sep, end_str = text.partition("-")
    if not sep or not start_str.strip() or not end_str.strip():
        return ContractStatus.HOLD

    start = parse_contract_date(start_str)
    end = parse_contract_date(end_str)
    if start is None or end is None:
        return ContractStatus.HOLD

    if start <= today <= end:
        return ContractStatus.IN_FORCE
    if end < today:
        return ContractStatus.DONE
    if start > today:
        return ContractStatus.PROPOSAL
    return ContractStatus.HOLD


def derive_status_column(df: pd.DataFrame,
                         period_col: str = "contract_period",
                         as_of: Optional[date] = None) -> pd.DataFrame:
    """Add `status` and `status_label` columns derived from the contract period."""
    df = df.copy()
    if period_col not in df.columns:
        df["status"] = ContractStatus.HOLD.value
        df["status_label"] = ContractStatus.HOLD.label
        return df

    # Keep plain codes; a str enum may come back from pandas as bare str
    codes = df[period_col].map(lambda v: derive_contract_status(v, as_of=as_of).value)
    df["status"] = codes
    df["status_label"] = codes.map(lambda c: ContractStatus(c).label)
    return df
