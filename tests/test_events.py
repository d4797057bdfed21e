"""
Tests for event parsing and repair of malformed time data.
"""

import json
from datetime import datetime, timedelta

import pytest
import pytz

from timegrid.events import (
    DEFAULT_DURATION, Event, coerce_event, load_events_file, normalize_events, parse_flag, parse_instant
)


class TestParseInstant:

    def test_iso_with_z_suffix_is_utc(self, tz):
        parsed = parse_instant("2024-03-05T09:00:00Z", tz)
        assert parsed == pytz.UTC.localize(datetime(2024, 3, 5, 9, 0))
        # Amsterdam is UTC+1 in early March
        assert parsed.astimezone(tz).hour == 10

    def test_naive_iso_is_wall_clock_in_render_zone(self, tz):
        parsed = parse_instant("2024-03-05T09:00:00", tz)
        assert parsed.tzinfo is not None
        assert parsed.astimezone(tz).hour == 9

    def test_epoch_milliseconds(self):
        parsed = parse_instant(86_400_000, "UTC")
        assert parsed == pytz.UTC.localize(datetime(1970, 1, 2))

    def test_datetime_passes_through(self, at):
        value = at(2024, 3, 5, 9)
        assert parse_instant(value) == value

    @pytest.mark.parametrize("value", [None, "", "not a date", True, float("nan"), [], {}])
    def test_unparsable_values(self, value):
        assert parse_instant(value, "UTC") is None


class TestCoerceEvent:

    def test_valid_interval_is_kept(self, tz, fixed_clock):
        event = coerce_event("a", "A", "2024-03-05T09:00:00", "2024-03-05T10:15:00", tz, fixed_clock)
        assert event.duration_minutes == 75

    def test_invalid_start_becomes_now(self, tz, fixed_clock):
        event = coerce_event("a", "A", "garbage", "2024-03-06T10:00:00", tz, fixed_clock)
        assert event.start == fixed_clock()
        assert event.end > event.start

    def test_invalid_end_becomes_now_plus_default(self, tz, fixed_clock):
        event = coerce_event("a", "A", None, None, tz, fixed_clock)
        assert event.start == fixed_clock()
        assert event.end == fixed_clock() + DEFAULT_DURATION

    def test_inverted_interval_gets_default_duration(self, tz, fixed_clock):
        event = coerce_event("a", "A", "2024-03-05T10:00:00", "2024-03-05T09:00:00", tz, fixed_clock)
        assert event.end - event.start == timedelta(minutes=30)

    def test_zero_length_interval_gets_default_duration(self, tz, fixed_clock):
        event = coerce_event("a", "A", "2024-03-05T10:00:00", "2024-03-05T10:00:00", tz, fixed_clock)
        assert event.duration_minutes == 30


class TestFromDict:

    def test_camel_case_keys(self, tz):
        event = Event.from_dict({
            "id": "m1",
            "title": "Standup",
            "startDate": "2024-03-05T09:00:00",
            "endDate": "2024-03-05T09:15:00",
            "isAllDay": False,
            "color": "bg-red-500",
            "calendarId": "work",
            "participants": "bob",
            "notification": "10",
        }, tz)
        assert event.id == "m1"
        assert event.color == "bg-red-500"
        assert event.calendar_id == "work"
        assert event.participants == ("bob",)
        assert event.notification == 10
        assert event.start.astimezone(tz).hour == 9
        assert event.duration_minutes == 15

    def test_snake_case_keys_and_defaults(self, tz):
        event = Event.from_dict({"id": 7, "start": "2024-03-05T09:00:00", "end": "2024-03-05T10:00:00"}, tz)
        assert event.id == "7"
        assert event.title == ""
        assert event.is_all_day is False
        assert event.color == "bg-blue-500"
        assert event.notification is None

    def test_bad_notification_is_dropped(self, tz):
        event = Event.from_dict({
            "id": "x", "start": "2024-03-05T09:00:00", "end": "2024-03-05T10:00:00",
            "notification": "soon",
        }, tz)
        assert event.notification is None

    @pytest.mark.parametrize("participants, expected", [
        (5, ("5",)),
        ({"name": "bob"}, ()),
        (["ann", "bob"], ("ann", "bob")),
    ])
    def test_participants_of_any_shape(self, tz, participants, expected):
        event = Event.from_dict({
            "id": "p", "start": "2024-03-05T09:00:00", "end": "2024-03-05T10:00:00",
            "participants": participants,
        }, tz)
        assert event.participants == expected

    @pytest.mark.parametrize("flag, expected", [
        ("false", False), ("False", False), ("0", False), ("no", False),
        ("true", True), ("TRUE", True), ("1", True), (1, True), (0, False),
    ])
    def test_all_day_flag_spellings(self, tz, flag, expected):
        event = Event.from_dict({
            "id": "f", "start": "2024-03-05T09:00:00", "end": "2024-03-05T10:00:00",
            "isAllDay": flag,
        }, tz)
        assert event.is_all_day is expected

    def test_custom_default_duration(self, tz, fixed_clock):
        event = Event.from_dict(
            {"id": "d", "start": "2024-03-05T10:00:00", "end": "2024-03-05T09:00:00"},
            tz, fixed_clock, default_duration=timedelta(minutes=45),
        )
        assert event.end - event.start == timedelta(minutes=45)


def test_parse_flag_unknown_value_uses_default():
    assert parse_flag("maybe") is False
    assert parse_flag(None, default=True) is True


class TestNormalizeEvents:

    def test_mixed_input(self, tz, make_event):
        ready = make_event((2024, 3, 5, 9, 0), (2024, 3, 5, 10, 0))
        events = normalize_events(
            [ready, {"id": "d", "start": "2024-03-05T11:00:00", "end": "2024-03-05T12:00:00"}], tz
        )
        assert events[0] is ready
        assert events[1].id == "d"

    def test_naive_event_is_localized(self, tz):
        naive = Event("n", "N", datetime(2024, 3, 5, 9), datetime(2024, 3, 5, 10))
        (event,) = normalize_events([naive], tz)
        assert event.start.tzinfo is not None
        assert event.start.astimezone(tz).hour == 9

    def test_inverted_event_object_is_repaired(self, make_event, tz):
        broken = make_event((2024, 3, 5, 10, 0), (2024, 3, 5, 9, 0))
        (event,) = normalize_events([broken], tz)
        assert event.end == event.start + DEFAULT_DURATION

    def test_default_duration_override(self, make_event, tz):
        broken = make_event((2024, 3, 5, 10, 0), (2024, 3, 5, 10, 0))
        (event,) = normalize_events([broken], tz, default_duration=timedelta(hours=1))
        assert event.end == event.start + timedelta(hours=1)

    def test_rescheduled_keeps_other_fields(self, make_event, at):
        event = make_event((2024, 3, 5, 9, 0), (2024, 3, 5, 10, 0), location="Room 1")
        moved = event.rescheduled(at(2024, 3, 6, 9), at(2024, 3, 6, 10))
        assert moved.location == "Room 1"
        assert moved.id == event.id
        assert event.start == at(2024, 3, 5, 9)


class TestLoadEventsFile:

    def test_reads_json_array(self, tmp_path, tz):
        path = tmp_path / "events.json"
        path.write_text(json.dumps([
            {"id": "a", "title": "A", "startDate": "2024-03-05T09:00:00Z", "endDate": "2024-03-05T10:00:00Z"},
        ]))
        events = load_events_file(path, tz)
        assert [e.id for e in events] == ["a"]

    def test_rejects_non_array(self, tmp_path):
        path = tmp_path / "events.json"
        path.write_text(json.dumps({"id": "a"}))
        with pytest.raises(ValueError):
            load_events_file(path)
