import logging
import sys
from datetime import date, datetime, timedelta
from typing import Optional

from rental_availability import aggregate, availability, config, geocode, persist, proximity, schedule, selection
from rental_availability.context import AppContext
from rental_availability.models import AvailabilityReport, Coordinates, DayState, HourlySelection
from rental_availability.store import StoreError

logger = logging.getLogger(__name__)

STATE_PREFIXES = {
    DayState.OPEN: "[OPEN]       ",
    DayState.PARTIAL: "[PARTIAL]    ",
    DayState.BOOKED: "[BOOKED]     ",
    DayState.UNAVAILABLE: "[UNAVAILABLE]",
}


def parse_start_date(start_date_arg: Optional[str]) -> date:
    """Parses a YYYY-MM-DD argument, defaulting to today. Exits on a bad value."""
    if not start_date_arg:
        return datetime.now().date()
    try:
        return datetime.strptime(start_date_arg, "%Y-%m-%d").date()
    except ValueError:
        logger.error("Error: Start date must be in YYYY-MM-DD format.")
        sys.exit(1)


def print_availability_report(report: AvailabilityReport):
    """Prints the per-date availability report to stdout."""
    print(f"\n--- Availability for listing {report.listing_id} ---")
    if report.fetch_error:
        print(f"Warning: some availability data could not be loaded ({report.fetch_error})")

    for date_str, day in sorted(report.days.items()):
        line = f"{STATE_PREFIXES[day.state]} {date_str}"
        if day.windows:
            line += ": " + ", ".join(f"{w.start}-{w.end}" for w in day.windows)
        print(line)

    bookable = sum(1 for day in report.days.values() if availability.is_bookable(day))
    print(f"Summary: {bookable} of {len(report.days)} days bookable.")


def run_availability(context: AppContext, listing_id: str, start_date: Optional[str] = None, days: int = 7):
    """Computes, prints and saves the availability of a listing for a run of days."""
    start = parse_start_date(start_date)
    end = start + timedelta(days=max(days, 1) - 1)
    logger.info(f"Checking availability of {listing_id} from {start} to {end}")

    try:
        listing = context.store.fetch_listing(listing_id)
    except StoreError as e:
        logger.error(f"Could not load listing {listing_id}: {e}")
        sys.exit(1)

    for group in schedule.weekly_hours_summary(listing.weekly_schedule):
        print(f"{group.label}: {group.hours_text}")

    report = availability.query_availability(context.store, listing_id, start, end, listing=listing)
    print_availability_report(report)
    persist.save_report(report)
    return report


def print_selection_summary(hourly: HourlySelection):
    if not hourly:
        print("No slots selected.")
        return

    for date_str, slots in aggregate.sorted_day_slots(hourly):
        print(f"{date_str}: {', '.join(slots)}")
    print(
        f"Summary: {aggregate.total_hours(hourly)} hours across {aggregate.day_count(hourly)} days "
        f"({aggregate.slot_count(hourly)} slots)."
    )
    print(f"hourlyData={selection.encode_hourly_data(hourly)}")


def run_selection(
    hourly_data: Optional[str] = None,
    start_date: Optional[str] = None,
    time_slots: Optional[str] = None,
) -> HourlySelection:
    """Parses a selection in either wire form and prints its canonical summary."""
    hourly = selection.parse_hourly_selections(start_date=start_date, hourly_data=hourly_data, time_slots=time_slots)
    print_selection_summary(hourly)
    return hourly


def resolve_origin(context: AppContext, near: Optional[str] = None, address: Optional[str] = None) -> Optional[Coordinates]:
    """Turns a "LAT,LON" string or a free-text address into coordinates."""
    if near:
        try:
            lat_str, lon_str = near.split(",", 1)
            return Coordinates(latitude=float(lat_str), longitude=float(lon_str))
        except ValueError:
            logger.error(f"Invalid coordinates '{near}', expected LAT,LON.")
            return None
    if address:
        return geocode.geocode_address(context, address)
    return None


def run_search(
    context: AppContext,
    near: Optional[str] = None,
    address: Optional[str] = None,
    radius: Optional[float] = None,
):
    """Lists published listings within a radius of the origin, nearest first."""
    origin = resolve_origin(context, near=near, address=address)
    if origin is None:
        logger.error("No search origin could be determined. Exiting.")
        sys.exit(1)

    radius = config.DEFAULT_RADIUS_MILES if radius is None else radius
    box = proximity.bounding_box(origin.latitude, origin.longitude, radius)
    try:
        candidates = context.store.fetch_listings_in_box(box)
    except StoreError as e:
        logger.error(f"Search failed: {e}")
        sys.exit(1)

    nearby = proximity.filter_by_radius(candidates, origin.latitude, origin.longitude, radius)
    print(f"\n--- {len(nearby)} listings near {origin.formatted_address or f'{origin.latitude},{origin.longitude}'} ---")
    for item in nearby:
        distance = "unknown distance" if item.distance_miles is None else f"{item.distance_miles:.1f} mi"
        delivery = " (delivers)" if item.can_deliver else ""
        print(f"{item.listing.title or item.listing.id}: {distance}{delivery}")
    return nearby
