import logging
from collections.abc import Mapping
from datetime import date
from typing import Any, Dict, List, Optional, TypeVar, Union

from rental_availability import config
from rental_availability.models import HoursGroup, TimeRange, WeeklyAvailabilityTemplate

logger = logging.getLogger(__name__)

T = TypeVar("T")

DAY_ORDER: List[str] = ["mon", "tue", "wed", "thu", "fri", "sat", "sun"]

DAY_LABELS: Dict[str, str] = {
    "mon": "Mon",
    "tue": "Tue",
    "wed": "Wed",
    "thu": "Thu",
    "fri": "Fri",
    "sat": "Sat",
    "sun": "Sun",
}

FULL_NAME_TO_KEY: Dict[str, str] = {
    "monday": "mon",
    "tuesday": "tue",
    "wednesday": "wed",
    "thursday": "thu",
    "friday": "fri",
    "saturday": "sat",
    "sunday": "sun",
}

WEEKDAYS = ["mon", "tue", "wed", "thu", "fri"]


def normalize_schedule_keys(raw: Union[Mapping[str, T], Any]) -> Optional[Dict[str, T]]:
    """Canonicalizes the day keys of a host-authored weekly schedule.

    Keys are lower-cased and full English day names are mapped to their
    three-letter abbreviation ("Monday" -> "mon"). Unrecognized keys pass
    through lower-cased. Values are copied as-is, their shape is not checked.

    Returns None when ``raw`` is not a mapping.
    """
    if not isinstance(raw, Mapping):
        return None

    normalized: Dict[str, T] = {}
    for key, value in raw.items():
        lowered = str(key).lower()
        normalized[FULL_NAME_TO_KEY.get(lowered, lowered)] = value
    return normalized


def day_key_for(day: date) -> str:
    """Returns the canonical day key for a calendar date."""
    return DAY_ORDER[day.weekday()]


def default_ranges(open_label: Optional[str] = None, close_label: Optional[str] = None) -> List[TimeRange]:
    """Ranges assumed for a day that is open without explicit hours.

    A listing's own operating hours win over the configured defaults.
    """
    start = open_label if open_label and hour_of(open_label) is not None else f"{config.DEFAULT_OPEN_HOUR:02d}:00"
    end = close_label if close_label and hour_of(close_label) is not None else f"{config.DEFAULT_CLOSE_HOUR:02d}:00"
    return [TimeRange(start=start, end=end)]


def _to_range(item: Any) -> Optional[TimeRange]:
    if isinstance(item, TimeRange):
        return item
    if isinstance(item, Mapping) and item.get("start") and item.get("end"):
        return TimeRange(start=str(item["start"]), end=str(item["end"]))
    logger.debug(f"Ignoring malformed time range: {item!r}")
    return None


def day_ranges(
    template: Optional[WeeklyAvailabilityTemplate], key: str, open_hours: Optional[List[TimeRange]] = None
) -> List[TimeRange]:
    """Interprets a day's schedule payload as a list of time ranges.

    Accepts a list of {start, end} objects, a single {start, end} object, or
    True for "open with default hours" (``open_hours`` when given). Anything
    else means closed.
    """
    if not template:
        return []
    payload = template.get(key)

    if payload is True:
        return list(open_hours) if open_hours else default_ranges()
    if isinstance(payload, Mapping):
        single = _to_range(payload)
        return [single] if single else []
    if isinstance(payload, list):
        return [r for r in (_to_range(item) for item in payload) if r is not None]
    return []


def hour_of(label: str) -> Optional[int]:
    """Hour component of an "HH", "HH:MM" or "HH:MM:SS" label, None when unparseable."""
    try:
        return int(label.split(":")[0])
    except ValueError:
        logger.debug(f"Unparseable time label: {label!r}")
        return None


def nominal_slots(ranges: List[TimeRange]) -> List[str]:
    """Expands time ranges into the hourly slot labels they cover (end exclusive)."""
    slots = set()
    for time_range in ranges:
        start_hour = hour_of(time_range.start)
        end_hour = hour_of(time_range.end)
        if start_hour is None or end_hour is None:
            continue
        for hour in range(max(start_hour, 0), min(end_hour, 24)):
            slots.add(f"{hour:02d}:00")
    return sorted(slots)


def has_any_scheduled_hours(template: Optional[WeeklyAvailabilityTemplate]) -> bool:
    return any(day_ranges(template, day) for day in DAY_ORDER)


def format_time(label: str) -> str:
    hour = hour_of(label)
    if hour is None:
        return label
    if hour in (0, 24):
        return "12 AM"
    if hour == 12:
        return "12 PM"
    return f"{hour - 12} PM" if hour > 12 else f"{hour} AM"


def format_ranges(ranges: List[TimeRange]) -> str:
    if not ranges:
        return "Closed"
    return ", ".join(f"{format_time(r.start)} – {format_time(r.end)}" for r in ranges)


def format_day_range(days: List[str]) -> str:
    if len(days) == 1:
        return DAY_LABELS[days[0]]
    if len(days) == 7:
        return "Every day"
    if days == WEEKDAYS:
        return "Mon – Fri"
    if days == ["sat", "sun"]:
        return "Sat – Sun"
    return f"{DAY_LABELS[days[0]]} – {DAY_LABELS[days[-1]]}"


def group_consecutive_days(template: Optional[WeeklyAvailabilityTemplate]) -> List[HoursGroup]:
    """Groups runs of consecutive days (Mon..Sun) sharing identical hours."""
    runs: List[tuple] = []
    for day in DAY_ORDER:
        ranges = day_ranges(template, day)
        if runs and runs[-1][1] == ranges:
            runs[-1][0].append(day)
        else:
            runs.append(([day], ranges))

    return [
        HoursGroup(days=days, label=format_day_range(days), ranges=ranges, hours_text=format_ranges(ranges))
        for days, ranges in runs
    ]


def weekly_hours_summary(raw: Any) -> List[HoursGroup]:
    """Normalizes a raw schedule and summarizes it for display. Empty when nothing is scheduled."""
    template = normalize_schedule_keys(raw)
    if not template or not has_any_scheduled_hours(template):
        return []
    return group_consecutive_days(template)
