import logging
import math
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Set

from rental_availability import config, schedule
from rental_availability.models import (
    AvailabilityReport,
    BlockedTime,
    BookingRecord,
    DayAvailability,
    DayState,
    Listing,
    Occupancy,
    TimeRange,
    TimeWindow,
)
from rental_availability.store import BookingStore, StoreError

logger = logging.getLogger(__name__)

AvailabilityMap = Dict[str, DayAvailability]


def iter_dates(start: date, end: date) -> Iterable[date]:
    """Yields every date from start to end inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def hour_span(start_time: str, end_time: str) -> List[int]:
    """Hours from ``start_time`` up to, not including, ``end_time``."""
    start_hour = schedule.hour_of(start_time)
    end_hour = schedule.hour_of(end_time)
    if start_hour is None or end_hour is None:
        logger.warning(f"Unparseable time span {start_time!r}-{end_time!r}.")
        return []
    return list(range(max(start_hour, 0), min(end_hour, 24)))


def _label(hour: int) -> str:
    return f"{hour:02d}:00"


def is_blocking(booking: BookingRecord, statuses: Optional[List[str]] = None) -> bool:
    statuses = config.BLOCKING_STATUSES if statuses is None else statuses
    return booking.status.lower() in statuses


def occupancy_for(bookings: Iterable[BookingRecord], day: date, buffer_mins: int = 0) -> Occupancy:
    """Reduces the blocking bookings touching ``day`` to daily and per-slot counts.

    A daily booking spanning the day takes one unit for the whole day, as does
    an hourly booking without times. An hourly booking takes one unit on each
    hour it covers plus ``ceil(buffer_mins / 60)`` hours on either side.
    """
    buffer_hours = math.ceil(buffer_mins / 60) if buffer_mins > 0 else 0
    daily = 0
    counts: Dict[int, int] = {}

    for booking in bookings:
        if not is_blocking(booking):
            continue

        end_date = booking.end_date or booking.start_date
        if not booking.is_hourly_booking:
            if booking.start_date <= day <= end_date:
                daily += 1
            continue

        if booking.start_date != day:
            continue
        if not (booking.start_time and booking.end_time):
            daily += 1
            continue

        hours = hour_span(booking.start_time, booking.end_time)
        if not hours:
            continue
        buffered = list(range(hours[0] - buffer_hours, hours[0]))
        buffered += list(range(hours[-1] + 1, hours[-1] + 1 + buffer_hours))
        for hour in hours + buffered:
            if 0 <= hour < 24:
                counts[hour] = counts.get(hour, 0) + 1

    return Occupancy(
        date=day.isoformat(),
        daily_bookings=daily,
        slot_counts={_label(h): n for h, n in sorted(counts.items())},
    )


def blocked_hours(blocked_times: Iterable[BlockedTime], day: date) -> Set[str]:
    """Slot labels the host has blocked on ``day``."""
    labels: Set[str] = set()
    for blocked in blocked_times:
        if blocked.blocked_date == day:
            labels.update(_label(h) for h in hour_span(blocked.start_time, blocked.end_time))
    return labels


def notice_cutoff(day: date, now: datetime, min_notice_hours: int = 0) -> Set[str]:
    """Today's slots that start too soon to book. Empty for any other day.

    The current hour is always closed, ``min_notice_hours`` more follow it.
    """
    if day != now.date():
        return set()
    last = min(now.hour + max(min_notice_hours, 0), 23)
    return {_label(h) for h in range(0, last + 1)}


def open_windows(open_slots: List[str], min_hours: int = 1) -> List[TimeWindow]:
    """Collapses open hourly slots into contiguous windows of at least ``min_hours``."""
    hours = sorted({h for h in (schedule.hour_of(s) for s in open_slots) if h is not None})

    windows: List[TimeWindow] = []
    run: List[int] = []
    for hour in hours + [None]:
        if hour is not None and run and hour == run[-1] + 1:
            run.append(hour)
            continue
        if run and len(run) >= min_hours:
            windows.append(TimeWindow(start=_label(run[0]), end=_label(run[-1] + 1), hours=len(run)))
        run = [hour] if hour is not None else []
    return windows


def _in_window(day: date, listing: Listing) -> bool:
    if listing.available_from and day < listing.available_from:
        return False
    if listing.available_to and day > listing.available_to:
        return False
    return True


def _unavailable(day: date) -> DayAvailability:
    return DayAvailability(date=day.isoformat(), state=DayState.UNAVAILABLE)


def operating_ranges(listing: Listing) -> List[TimeRange]:
    """Hours assumed when a day is open without explicit ranges."""
    return schedule.default_ranges(listing.operating_hours_start, listing.operating_hours_end)


def availability_for(
    listing: Listing,
    start: date,
    end: date,
    bookings: Optional[List[BookingRecord]] = None,
    blocked_dates: Optional[Iterable[date]] = None,
    no_template_policy: Optional[str] = None,
    blocked_times: Optional[List[BlockedTime]] = None,
    now: Optional[datetime] = None,
) -> AvailabilityMap:
    """Computes the state of every date in [start, end] for a listing.

    Dates outside the listing's availability window, host-blocked dates and
    days the weekly template leaves closed are ``unavailable``. Remaining
    days start with ``total_slots`` units. Each daily booking takes a unit for
    the whole day, each hourly booking takes a unit on the hours it covers
    (buffers included). A slot is closed once it has no units left, when the
    host has blocked its hour, or when it is inside today's notice period.
    No closed slot means ``open``, some means ``partial``. A day with every
    slot closed is ``booked`` if bookings closed any of them, ``unavailable``
    otherwise.
    """
    bookings = bookings or []
    blocked = set(blocked_dates or [])
    blocked_times = blocked_times or []
    now = now or datetime.now()
    policy = config.NO_TEMPLATE_POLICY if no_template_policy is None else no_template_policy

    template = schedule.normalize_schedule_keys(listing.weekly_schedule)
    has_template = bool(template)
    has_window = bool(listing.available_from or listing.available_to)
    if not has_template and not has_window:
        logger.debug(f"Listing {listing.id} has no template and no window, policy '{policy}'.")
    open_hours = operating_ranges(listing)

    result: AvailabilityMap = {}
    for day in iter_dates(start, end):
        key = day.isoformat()

        if not _in_window(day, listing) or day in blocked:
            result[key] = _unavailable(day)
            continue

        if has_template:
            ranges = schedule.day_ranges(template, schedule.day_key_for(day), open_hours=open_hours)
        elif has_window or policy == "open":
            ranges = open_hours
        else:
            ranges = []

        nominal = schedule.nominal_slots(ranges)
        if not nominal:
            result[key] = _unavailable(day)
            continue

        occupancy = occupancy_for(bookings, day, listing.buffer_time_mins)
        units = listing.total_slots - occupancy.daily_bookings
        if units <= 0:
            booked = set(nominal)
        else:
            booked = {s for s in nominal if occupancy.slot_counts.get(s, 0) >= units}
        host_closed = blocked_hours(blocked_times, day) | notice_cutoff(day, now, listing.min_notice_hours)
        host_closed = (host_closed & set(nominal)) - booked
        closed = booked | host_closed

        if not closed:
            state = DayState.OPEN
        elif closed >= set(nominal):
            state = DayState.BOOKED if booked else DayState.UNAVAILABLE
        else:
            state = DayState.PARTIAL

        open_slots = [s for s in nominal if s not in closed]
        windows = open_windows(open_slots, listing.min_hours) if listing.hourly_enabled else []
        result[key] = DayAvailability(
            date=key,
            state=state,
            open_slots=open_slots,
            booked_slots=sorted(booked),
            blocked_slots=sorted(host_closed),
            available_units=max(units, 0),
            windows=windows,
        )

    return result


def is_bookable(day: DayAvailability) -> bool:
    return day.state in (DayState.OPEN, DayState.PARTIAL)


def query_availability(
    store: BookingStore,
    listing_id: str,
    start: date,
    end: date,
    listing: Optional[Listing] = None,
) -> AvailabilityReport:
    """Loads a listing with its bookings and host blocks and computes its availability.

    An already-loaded ``listing`` skips the listing query. A failure to load
    the listing raises StoreError. A failure to load bookings, blocked dates
    or blocked times does not: the report is computed from what did load and
    carries the errors in ``fetch_error``.
    """
    if listing is None:
        listing = store.fetch_listing(listing_id)

    errors = []
    bookings: List[BookingRecord] = []
    blocked: List[date] = []
    blocked_times: List[BlockedTime] = []
    try:
        bookings = store.fetch_bookings(listing_id, start, end)
    except StoreError as e:
        logger.error(f"Failed to fetch bookings for {listing_id}: {e}")
        errors.append(str(e))
    try:
        blocked = store.fetch_blocked_dates(listing_id, start, end)
    except StoreError as e:
        logger.error(f"Failed to fetch blocked dates for {listing_id}: {e}")
        errors.append(str(e))
    try:
        blocked_times = store.fetch_blocked_times(listing_id, start, end)
    except StoreError as e:
        logger.error(f"Failed to fetch blocked times for {listing_id}: {e}")
        errors.append(str(e))

    days = availability_for(listing, start, end, bookings=bookings, blocked_dates=blocked, blocked_times=blocked_times)
    return AvailabilityReport(listing_id=listing_id, days=days, fetch_error="; ".join(errors) or None)
