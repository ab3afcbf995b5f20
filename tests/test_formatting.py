"""
Tests for display formatting.
"""
import sys
from pathlib import Path

import numpy as np
import pandas as pd

sys.path.insert(0, str(Path(__file__).parent.parent))

from portfolio_os.ui.formatting import (
    capacity_badge,
    fmt_count,
    fmt_currency,
    fmt_percent,
    fmt_score,
    format_metric_df,
    risk_badge,
)


class TestFormatters:

    def test_numbers(self):
        assert fmt_currency(1234.4) == "$1,234"
        assert fmt_currency(1234.5, decimals=2) == "$1,234.50"
        assert fmt_percent(133.333) == "133.3%"
        assert fmt_count(12.9) == "12"
        assert fmt_score(7.44) == "7.4"

    def test_missing(self):
        for fmt in (fmt_currency, fmt_percent, fmt_count, fmt_score):
            assert fmt(None) == "—"
            assert fmt(np.nan) == "—"

    def test_badges(self):
        assert capacity_badge("critical") == "🔴 Critical"
        assert risk_badge("Low Risk") == "🟢 Low Risk"
        assert capacity_badge("unknown") == "unknown"


class TestFormatMetricDf:

    def test_known_columns(self):
        df = pd.DataFrame({
            "partner_name": ["Ann"],
            "revenue": [1500.0],
            "capacity_pct": [50.0],
            "capacity_level": ["normal"],
            "client_count": [3],
        })

        out = format_metric_df(df)

        assert out.loc[0, "revenue"] == "$1,500"
        assert out.loc[0, "capacity_pct"] == "50.0%"
        assert out.loc[0, "capacity_level"] == "🟢 Normal"
        assert out.loc[0, "client_count"] == "3"
        assert out.loc[0, "partner_name"] == "Ann"
        assert df.loc[0, "revenue"] == 1500.0
