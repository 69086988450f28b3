import argparse
import logging
import sys
import time

from rental_availability import run
from rental_availability.context import AppContext

# --- Logging Setup ---

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool):
    """Configures logging to stderr with local time."""
    level = logging.DEBUG if verbose else logging.INFO
    handler = logging.StreamHandler(sys.stderr)
    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s]: %(name)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    formatter.converter = time.localtime
    handler.setFormatter(formatter)

    logging.basicConfig(
        level=level,
        handlers=[handler],
    )


def parse_arguments(argv=None):
    """Parses command line arguments."""
    parser = argparse.ArgumentParser(description="Booking availability and slot selection for rental listings.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    avail = subparsers.add_parser("availability", help="Show which dates of a listing are open, partial or booked.")
    avail.add_argument("--listing-id", required=True, help="Listing identifier.")
    avail.add_argument("--start-date", type=str, help="Start date in YYYY-MM-DD format. Defaults to today.")
    avail.add_argument("--days", type=int, default=7, help="Number of days to check. Defaults to 7.")

    search = subparsers.add_parser("search", help="List listings within a radius of a location.")
    origin = search.add_mutually_exclusive_group(required=True)
    origin.add_argument("--near", type=str, help="Search origin as LAT,LON.")
    origin.add_argument("--address", type=str, help="Search origin as a free-text address (geocoded).")
    search.add_argument("--radius", type=float, help="Radius in miles.")

    select = subparsers.add_parser("selection", help="Parse and summarize an hourly slot selection.")
    select.add_argument("--hourly-data", type=str, help="Multi-day form, e.g. 2024-01-05:08:00,09:00|2024-01-06:14:00")
    select.add_argument("--start-date", type=str, help="Date for the single-day form.")
    select.add_argument("--time-slots", type=str, help="Comma-separated slots for the single-day form.")

    return parser.parse_args(argv)


def main():
    args = parse_arguments()
    setup_logging(args.verbose)

    if args.command == "selection":
        run.run_selection(hourly_data=args.hourly_data, start_date=args.start_date, time_slots=args.time_slots)
        return

    with AppContext.create() as context:
        if args.command == "availability":
            run.run_availability(context, args.listing_id, start_date=args.start_date, days=args.days)
        elif args.command == "search":
            run.run_search(context, near=args.near, address=args.address, radius=args.radius)


if __name__ == "__main__":
    main()
