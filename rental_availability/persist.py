import json
import logging
import os
from datetime import datetime, timezone

from rental_availability import config
from rental_availability.models import AvailabilityReport

logger = logging.getLogger(__name__)


def ensure_data_dir():
    """Ensures the data directory exists."""
    if not os.path.exists(config.DATA_DIR):
        os.makedirs(config.DATA_DIR)


def save_report(report: AvailabilityReport):
    """Saves an availability report to a JSON file with a timestamp."""
    ensure_data_dir()
    try:
        data = {
            "last_updated": datetime.now(timezone.utc).isoformat(),
            "listing_id": report.listing_id,
            "fetch_error": report.fetch_error,
            "days": [day.model_dump(mode="json") for _, day in sorted(report.days.items())],
        }
        with open(config.REPORT_FILE, "w") as f:
            json.dump(data, f, indent=2)
        logger.info(f"Saved report to {config.REPORT_FILE}")
    except IOError as e:
        logger.error(f"Failed to save report: {e}")
