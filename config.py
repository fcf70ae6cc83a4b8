import os

from dotenv import load_dotenv

# ============================================================
# ENVIRONMENT
# ============================================================

# Load the .env file immediately so os.environ is populated below
load_dotenv()


def _env_flag(name, default=False):
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


PORT = int(os.environ.get("PORT", "8050"))
DEBUG = _env_flag("DEBUG")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# ============================================================
# PORTFOLIO STORE (AZURE DATA LAKE)
# ============================================================
# Azure mode is only used when account, SAS token and filesystem are all set.
AZURE_STORAGE_ACCOUNT = os.environ.get("AZURE_STORAGE_ACCOUNT")
AZURE_STORAGE_SAS_TOKEN = os.environ.get("AZURE_STORAGE_SAS_TOKEN")
AZURE_DATALAKE_FILESYSTEM = os.environ.get("AZURE_DATALAKE_FILESYSTEM")
AZURE_DATALAKE_DIRECTORY = os.environ.get("AZURE_DATALAKE_DIRECTORY") or "portfolios"
AZURE_REQUEST_TIMEOUT = float(os.environ.get("AZURE_REQUEST_TIMEOUT", "10"))

# ============================================================
# DEVIATION THRESHOLDS
# ============================================================
TOTAL_WEIGHT_TOLERANCE = 0.5      # |sum(weight) - 100| before a rebalance flag
ASSET_CLASS_TOLERANCE = 8.0       # percentage points vs model target
FACTOR_TOLERANCE = 0.35           # score units vs model exposure

# Status bands for the health summary cards: (aligned_max, watch_max)
TOTAL_WEIGHT_BANDS = (0.5, 2.5)
ASSET_CLASS_BANDS = (5.0, 10.0)
REGION_BANDS = (8.0, 15.0)

# ============================================================
# GLOBAL COLOR PALETTE
# ============================================================
GLOBAL_PALETTE = [
    "#4C6A92",  # steel blue
    "#8C9CB1",  # soft gray-blue
    "#C0504D",  # muted red
    "#D79E9C",  # soft red-gray
    "#9BBB59",  # olive green
    "#C5D6A4",  # light olive
    "#8064A2",  # muted purple
    "#B1A0C7",  # lavender gray
    "#4F81BD",  # corporate blue
    "#A5B5CF",  # cool gray-blue
    "#F2C200",  # muted gold (accent)
    "#D6B656",  # soft gold-gray
]
