from datetime import date
from enum import Enum
from typing import Any, Dict, List

from pydantic import AliasChoices, BaseModel, Field, ValidationInfo, field_validator

# date (YYYY-MM-DD) -> sorted, unique slot labels ("HH:MM")
HourlySelection = Dict[str, List[str]]
# canonical day key ("mon".."sun") -> opaque day-schedule payload
WeeklyAvailabilityTemplate = Dict[str, Any]


class DayState(str, Enum):
    OPEN = "open"
    PARTIAL = "partial"
    BOOKED = "booked"
    # Closed by the template, the availability window or a host block.
    UNAVAILABLE = "unavailable"


class TimeRange(BaseModel):
    start: str  # HH:MM
    end: str  # HH:MM, exclusive


class Listing(BaseModel):
    id: str
    title: str | None = None
    available_from: date | None = None
    available_to: date | None = None
    # Raw host-authored record, normalized on read. Stored as "hourly_schedule".
    weekly_schedule: Any = Field(default=None, validation_alias=AliasChoices("hourly_schedule", "weekly_schedule"))
    hourly_enabled: bool = True
    min_hours: int = 1
    total_slots: int = 1
    buffer_time_mins: int = 0
    min_notice_hours: int = 0
    operating_hours_start: str | None = None  # HH:MM[:SS]
    operating_hours_end: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    delivery_radius_miles: float | None = None
    fulfillment_type: str | None = None  # pickup | delivery | both

    @field_validator(
        "hourly_enabled", "min_hours", "total_slots", "buffer_time_mins", "min_notice_hours", mode="before"
    )
    @classmethod
    def _null_to_default(cls, value, info: ValidationInfo):
        if value is None:
            return cls.model_fields[info.field_name].default
        return value

    @field_validator("min_hours", "total_slots", mode="after")
    @classmethod
    def _at_least_one(cls, value: int) -> int:
        return max(value, 1)


class BookingRecord(BaseModel):
    start_date: date
    end_date: date | None = None
    start_time: str | None = None  # HH:MM[:SS]
    end_time: str | None = None
    is_hourly_booking: bool = False
    slot_number: int | None = None
    status: str = "pending"

    @field_validator("is_hourly_booking", mode="before")
    @classmethod
    def _null_is_daily(cls, value):
        return False if value is None else value


class BlockedTime(BaseModel):
    blocked_date: date
    start_time: str
    end_time: str


class Occupancy(BaseModel):
    date: str
    # Daily (whole-day) bookings covering the date.
    daily_bookings: int = 0
    # slot label -> hourly bookings covering it, buffers included
    slot_counts: Dict[str, int] = Field(default_factory=dict)


class TimeWindow(BaseModel):
    start: str
    end: str
    hours: int


class DayAvailability(BaseModel):
    date: str
    state: DayState
    open_slots: List[str] = Field(default_factory=list)
    booked_slots: List[str] = Field(default_factory=list)
    # Closed by host time blocks or the notice period rather than by bookings.
    blocked_slots: List[str] = Field(default_factory=list)
    # Capacity units left after daily bookings.
    available_units: int = 0
    windows: List[TimeWindow] = Field(default_factory=list)


class AvailabilityReport(BaseModel):
    listing_id: str
    days: Dict[str, DayAvailability]
    # Set when bookings or host blocks could not be loaded; days reflect only what did load.
    fetch_error: str | None = None


class HoursGroup(BaseModel):
    days: List[str]
    label: str
    ranges: List[TimeRange]
    hours_text: str


class Coordinates(BaseModel):
    latitude: float
    longitude: float
    formatted_address: str | None = None


class NearbyListing(BaseModel):
    listing: Listing
    distance_miles: float | None = None
    can_deliver: bool = False
