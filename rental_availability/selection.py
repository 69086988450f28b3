"""Wire codec for a shopper's hourly slot selection.

Two query-string forms are understood:

    hourlyData=2024-01-05:08:00,09:00|2024-01-06:14:00
    startDate=2024-02-01&timeSlots=14:00,15:00
    start=2024-02-01&timeSlots=14:00,15:00

The single-day date is read from ``startDate`` or ``start``, whichever is
present. Each segment of ``hourlyData`` is split on its first colon only, so
slot labels may themselves contain colons.
"""
import logging
from typing import Dict, Iterable, List, Mapping, Optional

from rental_availability import aggregate
from rental_availability.models import HourlySelection

logger = logging.getLogger(__name__)

SEGMENT_SEPARATOR = "|"
DATE_SEPARATOR = ":"
SLOT_SEPARATOR = ","


def _clean_slots(slots: Iterable[str]) -> List[str]:
    """Trims, drops blanks, deduplicates and sorts slot labels."""
    return sorted({s.strip() for s in slots if s and s.strip()})


def _parse_hourly_data(hourly_data: str) -> HourlySelection:
    selection: HourlySelection = {}
    for segment in hourly_data.split(SEGMENT_SEPARATOR):
        if DATE_SEPARATOR not in segment:
            logger.debug(f"Skipping segment without date separator: {segment!r}")
            continue

        date_part, slots_part = segment.split(DATE_SEPARATOR, 1)
        date_key = date_part.strip()
        if not date_key:
            logger.debug(f"Skipping segment with empty date: {segment!r}")
            continue

        slots = _clean_slots(slots_part.split(SLOT_SEPARATOR))
        if slots:
            # A repeated date merges with what was already parsed for it.
            selection[date_key] = _clean_slots(selection.get(date_key, []) + slots)
    return selection


def parse_hourly_selections(
    start_date: Optional[str] = None,
    hourly_data: Optional[str] = None,
    time_slots: Optional[str] = None,
) -> HourlySelection:
    """Parses either wire form into a canonical selection.

    ``hourly_data`` takes priority; ``start_date`` + ``time_slots`` is only
    consulted when it is absent. Malformed input never raises, it yields
    fewer (or no) days.
    """
    if hourly_data:
        return _parse_hourly_data(hourly_data)

    if start_date and start_date.strip() and time_slots:
        slots = _clean_slots(time_slots.split(SLOT_SEPARATOR))
        if slots:
            return {start_date.strip(): slots}
    return {}


def encode_hourly_data(selection: HourlySelection) -> str:
    """Encodes a selection into the compact ``hourlyData`` form. Empty days are omitted."""
    segments = []
    for date_key in sorted(selection):
        slots = _clean_slots(selection[date_key])
        if slots:
            segments.append(f"{date_key}{DATE_SEPARATOR}{SLOT_SEPARATOR.join(slots)}")
    return SEGMENT_SEPARATOR.join(segments)


def canonicalize(selection: Mapping[str, Iterable[str]]) -> HourlySelection:
    """Returns a copy with every day deduplicated and sorted and empty days dropped."""
    canonical: HourlySelection = {}
    for date_key, slots in selection.items():
        key = date_key.strip()
        cleaned = _clean_slots(slots)
        if key and cleaned:
            canonical[key] = cleaned
    return canonical


def toggle_slot(selection: HourlySelection, date_key: str, slot: str) -> HourlySelection:
    """Adds the slot to the day if absent, removes it otherwise. Returns a new selection."""
    updated = {k: list(v) for k, v in selection.items()}
    day = set(updated.get(date_key, []))
    if slot in day:
        day.discard(slot)
    else:
        day.add(slot)

    if day:
        updated[date_key] = sorted(day)
    else:
        updated.pop(date_key, None)
    return updated


def to_query_params(selection: HourlySelection) -> Dict[str, str]:
    """Builds the query parameters used to hand a selection to checkout."""
    canonical = canonicalize(selection)
    if not canonical:
        return {}

    first, last = aggregate.date_span(canonical)
    return {
        "start": first,
        "end": last,
        "hours": str(aggregate.total_hours(canonical)),
        "hourlyData": encode_hourly_data(canonical),
    }


def from_query_params(params: Mapping[str, str]) -> HourlySelection:
    return parse_hourly_selections(
        start_date=params.get("start") or params.get("startDate"),
        hourly_data=params.get("hourlyData"),
        time_slots=params.get("timeSlots"),
    )
