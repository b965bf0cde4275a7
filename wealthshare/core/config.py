import os
import sys
from decimal import Decimal
from pathlib import Path

from dotenv import load_dotenv

# .env next to the project root in dev, next to the executable when frozen
if getattr(sys, "frozen", False):
    BASE_DIR = Path(sys.executable).parent
else:
    BASE_DIR = Path(__file__).resolve().parents[2]

load_dotenv(dotenv_path=BASE_DIR / ".env")


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./wealthshare.db")

# ---------------------
# Ledger rules
# ---------------------
DAILY_SHARE_CAP = Decimal(os.getenv("DAILY_SHARE_CAP", "1000"))
LOAN_TERM_DAYS = int(os.getenv("LOAN_TERM_DAYS", "30"))
DEFAULT_INTEREST_RATE = Decimal(os.getenv("DEFAULT_INTEREST_RATE", "10"))
ZERO_BALANCE_TOLERANCE = Decimal(os.getenv("ZERO_BALANCE_TOLERANCE", "0.01"))

# ---------------------
# Backend plumbing
# ---------------------
IMPORT_CHUNK_SIZE = int(os.getenv("IMPORT_CHUNK_SIZE", "100"))
SEED_DEFAULT_ACCOUNTS = _flag("SEED_DEFAULT_ACCOUNTS", "true")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
