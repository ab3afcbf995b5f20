"""
Application configuration management.
"""
import logging
import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional


def _default_data_dir() -> Path:
    env_dir = os.getenv("DATA_DIR")
    if env_dir:
        return Path(env_dir)
    if Path("./portfolio_os/data/files").exists():
        return Path("./portfolio_os/data/files")
    return Path("./data")


@dataclass
class AppConfig:
    """Application configuration with environment overrides."""

    # Paths
    data_dir: Path = field(default_factory=_default_data_dir)

    # Environment
    app_env: str = field(default_factory=lambda: os.getenv("APP_ENV", "dev"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    # Cache settings
    cache_ttl_seconds: int = field(default_factory=lambda: int(os.getenv("CACHE_TTL_SECONDS", "3600")))

    # Display defaults
    top_clients_limit: int = 5
    priority_clients_limit: int = 50

    @property
    def processed_dir(self) -> Path:
        return self.data_dir / "processed"

    @property
    def exports_dir(self) -> Path:
        return self.data_dir / "exports"

    @property
    def is_prod(self) -> bool:
        return self.app_env.lower() == "prod"


# Global config instance
config = AppConfig()


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging once for the app and scripts."""
    level_name = (level or config.log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


# =============================================================================
# SCORING CONSTANTS
# =============================================================================

# 30 clients = 100% partner capacity. Fixed benchmark, not a setting.
CAPACITY_CLIENTS = 30

# Revenue that earns a full 10 on the revenue component ($500k).
REVENUE_SCORE_DIVISOR = 50_000

HIGH_VALUE_THRESHOLD = 7

CONFLICT_PENALTIES = {
    "High": 3,
    "Medium": 1,
    "Low": 0,
}

DEFAULT_RELATIONSHIP_STRENGTH = 5.0
DEFAULT_CONFLICT_RISK = "Medium"
DEFAULT_RENEWAL_PROBABILITY = 0.5
DEFAULT_STRATEGIC_FIT = 5.0

COMMUNICATION_FREQUENCY_WEIGHTS = {
    "daily": 3,
    "weekly": 2,
    "monthly": 1,
    "quarterly": 0.5,
    "as-needed": 0,
    "as needed": 0,
}

COMPLEX_PRACTICE_AREAS = ("healthcare", "energy", "financial services")

RELATIONSHIP_TYPE_RISK = {
    "primary": 3,
    "secondary": 2,
    "shared": 1,
    "orphaned": 5,
}


# =============================================================================
# FILES AND SCHEMAS
# =============================================================================

# Table file names
TABLE_FILES = {
    "clients": "clients",
    "revenues": "client_revenues",
    "partners": "partners",
}

# Required columns (hard fail if missing)
REQUIRED_COLUMNS = {
    "clients": [
        "id",
        "name",
    ],
    "revenues": [
        "client_id",
        "year",
        "revenue_amount",
    ],
    "partners": [
        "id",
        "name",
    ],
    "contract_sheet": [
        "CLIENT",
        "Contract Period",
    ],
}

# Optional columns (soft warn if missing)
OPTIONAL_COLUMNS = {
    "clients": [
        "practice_area",
        "relationship_strength",
        "conflict_risk",
        "renewal_probability",
        "strategic_fit_score",
        "primary_lobbyist",
        "client_originator",
        "lobbyist_team",
        "relationship_intensity",
        "communication_frequency",
        "contract_period",
    ],
    "partners": [
        "clients",
        "secondary_clients",
        "is_departing",
        "practice_areas",
        "total_revenue",
    ],
}

# Formatting constants
FORMAT_CURRENCY = "${:,.0f}"
FORMAT_CURRENCY_DECIMAL = "${:,.2f}"
FORMAT_PERCENT = "{:.1f}%"
FORMAT_COUNT = "{:,}"
FORMAT_SCORE = "{:.2f}"
