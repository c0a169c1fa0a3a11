"""
Runtime configuration read from the environment.
"""

import os

# Database URL - defaults to SQLite for development
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./advisor_crm.db")

SEED_FILE = os.getenv(
    "SEED_FILE",
    os.path.join(os.path.dirname(__file__), "config", "seed.json")
)

# Annual commission goal used when an advisor has not set one
DEFAULT_COMMISSION_GOAL = float(os.getenv("DEFAULT_COMMISSION_GOAL", "10000"))

RENEWAL_WINDOW_DAYS = int(os.getenv("RENEWAL_WINDOW_DAYS", "90"))

PROJECTION_YEARS = int(os.getenv("PROJECTION_YEARS", "10"))
