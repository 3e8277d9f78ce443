"""Application settings"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).parent.parent

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"sqlite:///{BASE_DIR / 'data' / 'vets.db'}"
)
DB_ECHO = os.getenv("DB_ECHO", "0") == "1"

API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# All "today" / "now" resolution for opening hours happens in this zone
BUSINESS_TIMEZONE = os.getenv("BUSINESS_TIMEZONE", "Europe/Berlin")

# Candidate window fetched before the in-memory open-now filter
OPEN_NOW_MAX_SCAN = int(os.getenv("OPEN_NOW_MAX_SCAN", "500"))

DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "20"))
MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "100"))
DEFAULT_MAX_DISTANCE_M = int(os.getenv("DEFAULT_MAX_DISTANCE_M", "10000"))
HIGH_RATING_THRESHOLD = float(os.getenv("HIGH_RATING_THRESHOLD", "4.5"))
