# agent/unlockbt/config.py
"""
Global configuration - Environment variables
"""
import os

PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))


def getenv(name: str, default: str = "") -> str:
    """Get environment variable with default"""
    v = os.getenv(name)
    return v if v not in (None, "") else default


# ===== SERVER =====
HOST = getenv("HOST", "0.0.0.0")
PORT = int(getenv("PORT", "3000"))
LOG_LEVEL = getenv("LOG_LEVEL", "info").upper()

# ===== FIXTURES & STATIC =====
DATA_DIR = getenv("DATA_DIR", os.path.join(PACKAGE_DIR, "data"))
PUBLIC_DIR = getenv("PUBLIC_DIR", os.path.join(PACKAGE_DIR, "public"))

# ===== DROPSTAB (unlock data provider, optional) =====
DROPSTAB_API_KEY = getenv("DROPSTAB_API_KEY", "")
DROPSTAB_BASE_URL = getenv("DROPSTAB_BASE_URL", "https://public-api.dropstab.com")
DROPSTAB_UNLOCKS_PATH = getenv("DROPSTAB_UNLOCKS_PATH", "/api/v1/tokenUnlocks")
DROPSTAB_TIMEOUT_S = float(getenv("DROPSTAB_TIMEOUT_S", "10"))

# ===== REDIS (remote unlock cache, off when TTL is 0) =====
REDIS_URL = getenv("REDIS_URL", "redis://localhost:6379/0")
UNLOCKS_CACHE_TTL_S = int(getenv("UNLOCKS_CACHE_TTL_S", "0"))
UNLOCKS_CACHE_KEY = getenv("UNLOCKS_CACHE_KEY", "unlockbt:dropstab:unlocks")

# ===== BACKTEST SWEEP =====
SWEEP_HOURS_BEFORE = [float(x) for x in getenv("SWEEP_HOURS_BEFORE", "1,6,24,72").split(",")]
SWEEP_HOURS_AFTER = [float(x) for x in getenv("SWEEP_HOURS_AFTER", "0,6,24,72").split(",")]
