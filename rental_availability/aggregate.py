from typing import Dict, List, Optional, Tuple

from rental_availability import config
from rental_availability.models import HourlySelection


def sorted_dates(selection: HourlySelection) -> List[str]:
    """Dates in ascending order. String order is chronological for zero-padded ISO dates."""
    return sorted(selection)


def sorted_day_slots(selection: HourlySelection) -> List[Tuple[str, List[str]]]:
    """(date, slots) pairs for display, both levels sorted ascending."""
    return [(d, sorted(set(selection[d]))) for d in sorted_dates(selection) if selection[d]]


def slot_count(selection: HourlySelection) -> int:
    return sum(len(slots) for slots in selection.values())


def day_count(selection: HourlySelection) -> int:
    return len(selection)


def total_hours(selection: HourlySelection, slot_minutes: Optional[int] = None) -> int | float:
    """Hours covered by the selection, assuming each slot lasts ``slot_minutes``.

    With the default one-hour slots this is the slot count.
    """
    minutes = config.SLOT_DURATION_MINUTES if slot_minutes is None else slot_minutes
    hours = slot_count(selection) * minutes / 60
    return int(hours) if float(hours).is_integer() else hours


def date_span(selection: HourlySelection) -> Tuple[str, str]:
    """First and last selected date. Raises ValueError on an empty selection."""
    dates = sorted_dates(selection)
    if not dates:
        raise ValueError("Selection is empty")
    return dates[0], dates[-1]


def booking_payload(selection: HourlySelection, listing_id: str, requester_id: str) -> Dict:
    """Request body handed to the booking subsystem for a canonical selection."""
    start, end = date_span(selection)
    return {
        "listing_id": listing_id,
        "requester_id": requester_id,
        "start_date": start,
        "end_date": end,
        "is_hourly_booking": True,
        "duration_hours": total_hours(selection),
        "hourly_selections": {d: slots for d, slots in sorted_day_slots(selection)},
    }
