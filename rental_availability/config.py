import logging
import os
from typing import List

logger = logging.getLogger(__name__)

# --- File Paths ---
DATA_DIR = os.environ.get("DATA_DIR", "public/data")
REPORT_FILE = os.path.join(DATA_DIR, "availability_report.json")

# --- Backing store ---
# PostgREST-style endpoint, e.g. https://<project>.supabase.co
STORE_URL = os.environ.get("STORE_URL", "")
STORE_API_KEY = os.environ.get("STORE_API_KEY")
REQUEST_TIMEOUT = int(os.environ.get("REQUEST_TIMEOUT", "10"))

# Booking statuses that occupy a slot. Cancelled and declined requests never do.
BLOCKING_STATUSES: List[str] = [
    s.strip() for s in os.environ.get("BLOCKING_STATUSES", "pending,approved,completed").split(",") if s.strip()
]

# --- Scheduling ---
# One slot label covers this many minutes of occupancy.
SLOT_DURATION_MINUTES = int(os.environ.get("SLOT_DURATION_MINUTES", "60"))

# What a listing without a weekly template and without an availability window means:
# "open" leaves every date bookable, "closed" hides every date.
NO_TEMPLATE_POLICY = os.environ.get("NO_TEMPLATE_POLICY", "open").strip().lower()
if NO_TEMPLATE_POLICY not in ("open", "closed"):
    logger.warning(f"Unknown NO_TEMPLATE_POLICY '{NO_TEMPLATE_POLICY}', falling back to 'open'.")
    NO_TEMPLATE_POLICY = "open"

# Operating hours assumed for a day that is open without explicit ranges.
DEFAULT_OPEN_HOUR = int(os.environ.get("DEFAULT_OPEN_HOUR", "6"))
DEFAULT_CLOSE_HOUR = int(os.environ.get("DEFAULT_CLOSE_HOUR", "22"))

# --- Search ---
DEFAULT_RADIUS_MILES = float(os.environ.get("DEFAULT_RADIUS_MILES", "100"))
EARTH_RADIUS_MILES = 3959

# --- Geocoding ---
MAPBOX_ACCESS_TOKEN = os.environ.get("MAPBOX_ACCESS_TOKEN")
MAPBOX_BASE_URL = "https://api.mapbox.com"

if not STORE_URL:
    logger.warning("STORE_URL not configured. Store queries will fail.")
