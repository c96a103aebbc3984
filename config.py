# config.py - environment driven settings shared by api / app / core
import os


def _env_bool(key: str, default: bool = False) -> bool:
    value = os.environ.get(key)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# ---------------------------
# Auth
SECRET_KEY = os.environ.get("SECRET_KEY", "change_this_secret_for_prod")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24))  # 1 day

# ---------------------------
# Storage
DB_FILE = os.environ.get("DB_FILE", "data.db")

# ---------------------------
# Trip statistics policy
MIN_DURATION_HOURS = int(os.environ.get("MIN_DURATION_HOURS", 6))
HOURS_PER_PLACE = int(os.environ.get("HOURS_PER_PLACE", 2))

# ---------------------------
# Export / share
GENERATOR_NAME = os.environ.get("GENERATOR_NAME", "RelevanTrip")
FOOTER_ON_EVERY_PAGE = _env_bool("FOOTER_ON_EVERY_PAGE", False)
SHARE_BASE_URL = os.environ.get("SHARE_BASE_URL", "http://localhost:8501/trips")

# ---------------------------
# Front end
API_URL = os.environ.get("API_URL", "http://localhost:8000")
