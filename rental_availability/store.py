import logging
from datetime import date
from typing import Dict, List, Optional, Tuple

import requests
from pydantic import ValidationError

from rental_availability import config
from rental_availability.models import BlockedTime, BookingRecord, Listing

logger = logging.getLogger(__name__)

LISTING_COLUMNS = (
    "id,title,available_from,available_to,hourly_schedule,hourly_enabled,min_hours,total_slots,"
    "buffer_time_mins,min_notice_hours,operating_hours_start,operating_hours_end,"
    "latitude,longitude,delivery_radius_miles,fulfillment_type"
)
BOOKING_COLUMNS = "start_date,end_date,start_time,end_time,is_hourly_booking,slot_number,status"
BLOCKED_TIME_COLUMNS = "blocked_date,start_time,end_time"


class StoreError(Exception):
    """Raised when the backing store cannot be queried or returns something unusable."""


class BookingStore:
    """Read-only client for the listing, booking and blocked-date collections.

    Talks to a PostgREST-style REST endpoint (``{STORE_URL}/rest/v1/<table>``).
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[int] = None,
    ):
        self.session = session or requests.Session()
        self.base_url = (base_url if base_url is not None else config.STORE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else config.STORE_API_KEY
        self.timeout = timeout or config.REQUEST_TIMEOUT

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _get(self, table: str, params: List[Tuple[str, str]]) -> List[Dict]:
        if not self.base_url:
            raise StoreError("Store URL is not configured")

        url = f"{self.base_url}/rest/v1/{table}"
        logger.debug(f"Querying {url} with {params}")
        try:
            response = self.session.get(url, params=params, headers=self._headers(), timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise StoreError(f"Query on '{table}' failed: {e}") from e
        except ValueError as e:
            raise StoreError(f"Query on '{table}' returned invalid JSON") from e

        if not isinstance(data, list):
            raise StoreError(f"Unexpected response format from '{table}'")
        return data

    def fetch_listing(self, listing_id: str) -> Listing:
        rows = self._get("listings", [("select", LISTING_COLUMNS), ("id", f"eq.{listing_id}")])
        if not rows:
            raise StoreError(f"Listing {listing_id} not found")
        try:
            return Listing.model_validate(rows[0])
        except ValidationError as e:
            raise StoreError(f"Listing {listing_id} has an invalid shape: {e}") from e

    def fetch_bookings(self, listing_id: str, start: date, end: date) -> List[BookingRecord]:
        """Bookings with a blocking status that overlap [start, end]."""
        statuses = ",".join(config.BLOCKING_STATUSES)
        rows = self._get(
            "booking_requests",
            [
                ("select", BOOKING_COLUMNS),
                ("listing_id", f"eq.{listing_id}"),
                ("status", f"in.({statuses})"),
                ("start_date", f"lte.{end.isoformat()}"),
                ("end_date", f"gte.{start.isoformat()}"),
            ],
        )

        bookings = []
        for row in rows:
            try:
                bookings.append(BookingRecord.model_validate(row))
            except ValidationError as e:
                logger.warning(f"Skipping malformed booking for listing {listing_id}: {e}")
        logger.info(f"Fetched {len(bookings)} bookings for listing {listing_id}")
        return bookings

    def fetch_blocked_dates(self, listing_id: str, start: date, end: date) -> List[date]:
        rows = self._get(
            "listing_blocked_dates",
            [
                ("select", "blocked_date"),
                ("listing_id", f"eq.{listing_id}"),
                ("blocked_date", f"gte.{start.isoformat()}"),
                ("blocked_date", f"lte.{end.isoformat()}"),
            ],
        )

        blocked = []
        for row in rows:
            try:
                blocked.append(date.fromisoformat(str(row.get("blocked_date"))))
            except ValueError:
                logger.warning(f"Skipping malformed blocked date: {row}")
        return blocked

    def fetch_blocked_times(self, listing_id: str, start: date, end: date) -> List[BlockedTime]:
        """Hour ranges the host has blocked on dates within [start, end]."""
        rows = self._get(
            "listing_blocked_times",
            [
                ("select", BLOCKED_TIME_COLUMNS),
                ("listing_id", f"eq.{listing_id}"),
                ("blocked_date", f"gte.{start.isoformat()}"),
                ("blocked_date", f"lte.{end.isoformat()}"),
            ],
        )

        blocked = []
        for row in rows:
            try:
                blocked.append(BlockedTime.model_validate(row))
            except ValidationError as e:
                logger.warning(f"Skipping malformed blocked time for listing {listing_id}: {e}")
        return blocked

    def fetch_listings_in_box(self, box: Tuple[float, float, float, float]) -> List[Listing]:
        """Published listings whose coordinates fall inside (min_lat, max_lat, min_lon, max_lon)."""
        min_lat, max_lat, min_lon, max_lon = box
        rows = self._get(
            "listings",
            [
                ("select", LISTING_COLUMNS),
                ("status", "eq.published"),
                ("latitude", f"gte.{min_lat}"),
                ("latitude", f"lte.{max_lat}"),
                ("longitude", f"gte.{min_lon}"),
                ("longitude", f"lte.{max_lon}"),
            ],
        )

        listings = []
        for row in rows:
            try:
                listings.append(Listing.model_validate(row))
            except ValidationError as e:
                logger.warning(f"Skipping malformed listing: {e}")
        return listings
