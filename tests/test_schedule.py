from datetime import date

from rental_availability import schedule
from rental_availability.models import TimeRange


def test_normalize_full_names_any_casing():
    raw = {"Monday": [1], "TUESDAY": [2], "wednesday": [3], "ThUrSdAy": [4], "Friday": [], "Saturday": None, "SUNDAY": True}
    result = schedule.normalize_schedule_keys(raw)
    assert set(result) == {"mon", "tue", "wed", "thu", "fri", "sat", "sun"}
    assert result["mon"] == [1]
    assert result["sat"] is None
    assert result["sun"] is True


def test_normalize_passes_unknown_keys_lowercased():
    result = schedule.normalize_schedule_keys({"Mon": "x", "Holiday": "y"})
    assert result == {"mon": "x", "holiday": "y"}


def test_normalize_is_idempotent():
    raw = {"Monday": [{"start": "09:00", "end": "17:00"}], "sun": []}
    once = schedule.normalize_schedule_keys(raw)
    assert schedule.normalize_schedule_keys(once) == once


def test_normalize_copies_values_unchanged():
    payload = [{"start": "09:00", "end": "17:00"}]
    result = schedule.normalize_schedule_keys({"Friday": payload})
    assert result["fri"] is payload


def test_normalize_non_mapping_returns_none():
    assert schedule.normalize_schedule_keys(None) is None
    assert schedule.normalize_schedule_keys([("monday", 1)]) is None
    assert schedule.normalize_schedule_keys(42) is None
    assert schedule.normalize_schedule_keys("monday") is None


def test_day_key_for():
    assert schedule.day_key_for(date(2024, 1, 1)) == "mon"
    assert schedule.day_key_for(date(2024, 1, 7)) == "sun"


def test_day_ranges_payload_shapes():
    template = {
        "mon": [{"start": "09:00", "end": "12:00"}, {"start": "13:00", "end": "17:00"}],
        "tue": {"start": "10:00", "end": "11:00"},
        "wed": True,
        "thu": False,
        "fri": [],
        "sat": [{"start": "09:00"}],
    }
    assert len(schedule.day_ranges(template, "mon")) == 2
    assert schedule.day_ranges(template, "tue") == [TimeRange(start="10:00", end="11:00")]
    assert schedule.day_ranges(template, "wed") == schedule.default_ranges()
    assert schedule.day_ranges(template, "thu") == []
    assert schedule.day_ranges(template, "fri") == []
    assert schedule.day_ranges(template, "sat") == []
    assert schedule.day_ranges(template, "sun") == []
    assert schedule.day_ranges(None, "mon") == []


def test_nominal_slots_end_exclusive_and_merged():
    ranges = [TimeRange(start="09:00", end="11:00"), TimeRange(start="10:00", end="12:00")]
    assert schedule.nominal_slots(ranges) == ["09:00", "10:00", "11:00"]


def test_nominal_slots_skips_bad_labels():
    assert schedule.nominal_slots([TimeRange(start="nine", end="11:00")]) == []


def test_hour_of_label_forms():
    assert schedule.hour_of("09:30") == 9
    assert schedule.hour_of("9") == 9
    assert schedule.hour_of("21:00:00") == 21
    assert schedule.hour_of("noon") is None


def test_default_ranges_prefers_listing_hours():
    assert schedule.default_ranges() == [TimeRange(start="06:00", end="22:00")]
    assert schedule.default_ranges("08:00:00", "18:00:00") == [TimeRange(start="08:00:00", end="18:00:00")]
    assert schedule.default_ranges("soon", None) == [TimeRange(start="06:00", end="22:00")]


def test_day_ranges_true_uses_open_hours():
    hours = [TimeRange(start="10:00", end="12:00")]
    assert schedule.day_ranges({"mon": True}, "mon", open_hours=hours) == hours


def test_format_ranges():
    assert schedule.format_ranges([]) == "Closed"
    assert schedule.format_ranges([TimeRange(start="09:00", end="17:00")]) == "9 AM – 5 PM"
    assert schedule.format_ranges([TimeRange(start="00:00", end="12:00")]) == "12 AM – 12 PM"


def test_format_day_range():
    assert schedule.format_day_range(["mon"]) == "Mon"
    assert schedule.format_day_range(schedule.DAY_ORDER) == "Every day"
    assert schedule.format_day_range(["mon", "tue", "wed", "thu", "fri"]) == "Mon – Fri"
    assert schedule.format_day_range(["sat", "sun"]) == "Sat – Sun"
    assert schedule.format_day_range(["tue", "wed", "thu"]) == "Tue – Thu"


def test_weekly_hours_summary_groups_consecutive_days():
    hours = [{"start": "09:00", "end": "17:00"}]
    raw = {"Monday": hours, "Tuesday": hours, "Wednesday": hours, "Thursday": hours, "Friday": hours}
    groups = schedule.weekly_hours_summary(raw)
    assert [g.label for g in groups] == ["Mon – Fri", "Sat – Sun"]
    assert groups[0].hours_text == "9 AM – 5 PM"
    assert groups[1].hours_text == "Closed"


def test_weekly_hours_summary_empty_when_nothing_scheduled():
    assert schedule.weekly_hours_summary({"monday": []}) == []
    assert schedule.weekly_hours_summary(None) == []
    assert not schedule.has_any_scheduled_hours({})
