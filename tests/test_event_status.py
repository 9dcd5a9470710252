"""
Tests for the computed event status
"""

import pytest
from datetime import date, datetime

from app.services.event_status import (
    EventStatus,
    compute_event_status,
    event_start,
    parse_event_date,
    parse_event_time,
)

EVENT_DATE = "2025-06-01"
EVENT_TIME = "10:00"

@pytest.mark.parametrize("now, expected", [
    (datetime(2025, 6, 1, 9, 0), EventStatus.SCHEDULED),
    (datetime(2025, 6, 1, 9, 59, 59), EventStatus.SCHEDULED),
    (datetime(2025, 6, 1, 10, 0), EventStatus.HAPPENING),
    (datetime(2025, 6, 1, 10, 30), EventStatus.HAPPENING),
    (datetime(2025, 6, 1, 12, 0), EventStatus.HAPPENING),
    (datetime(2025, 6, 1, 12, 0, 1), EventStatus.FINISHED),
    (datetime(2025, 6, 1, 13, 1), EventStatus.FINISHED),
    (datetime(2025, 5, 31, 23, 0), EventStatus.SCHEDULED),
])
def test_status_follows_two_hour_window(now, expected):
    """Status is decided by start and start + 2 hours"""
    assert compute_event_status(EVENT_DATE, EVENT_TIME, now) == expected

def test_status_is_repeatable_for_fixed_now():
    now = datetime(2025, 6, 1, 10, 30)
    results = {compute_event_status(EVENT_DATE, EVENT_TIME, now) for _ in range(5)}
    assert results == {EventStatus.HAPPENING}

def test_status_values_are_plain_strings():
    status = compute_event_status(EVENT_DATE, EVENT_TIME, datetime(2025, 6, 1, 10, 30))
    assert status.value == "happening"
    assert status == "happening"

@pytest.mark.parametrize("bad_time", ["25:99", "24:00", "10:60", "abc", "", "10", "10:5", None])
def test_malformed_time_falls_back_to_scheduled(bad_time):
    now = datetime(2030, 1, 1, 12, 0)
    assert compute_event_status(EVENT_DATE, bad_time, now) == EventStatus.SCHEDULED

@pytest.mark.parametrize("bad_date", ["2025-13-01", "2025-02-30", "06/01/2025", "tomorrow", "", None])
def test_malformed_date_falls_back_to_scheduled(bad_date):
    now = datetime(2030, 1, 1, 12, 0)
    assert compute_event_status(bad_date, EVENT_TIME, now) == EventStatus.SCHEDULED

def test_date_portion_of_datetime_string_is_used():
    now = datetime(2025, 6, 1, 10, 30)
    assert compute_event_status("2025-06-01T00:00:00.000Z", EVENT_TIME, now) == EventStatus.HAPPENING
    assert compute_event_status("2025-06-01 00:00:00", EVENT_TIME, now) == EventStatus.HAPPENING

def test_date_objects_are_accepted():
    now = datetime(2025, 6, 1, 10, 30)
    assert compute_event_status(date(2025, 6, 1), EVENT_TIME, now) == EventStatus.HAPPENING
    assert compute_event_status(datetime(2025, 6, 1, 18, 0), EVENT_TIME, now) == EventStatus.HAPPENING

def test_single_digit_hour_and_seconds_are_accepted():
    assert parse_event_time("9:05") == (9, 5)
    assert parse_event_time("09:05:30") == (9, 5)
    assert parse_event_time(" 23:59 ") == (23, 59)

def test_start_is_built_from_local_components():
    assert event_start("2025-06-01", "10:00") == datetime(2025, 6, 1, 10, 0)
    assert event_start("2025-06-01", "25:99") is None
    assert parse_event_date("2024-02-29") == date(2024, 2, 29)

def test_timezone_aware_now_is_compared_as_local_wall_clock():
    local_now = datetime(2025, 6, 1, 10, 30).astimezone()
    assert compute_event_status(EVENT_DATE, EVENT_TIME, local_now) == EventStatus.HAPPENING

def test_default_now_is_current_time():
    assert compute_event_status("2000-01-01", "10:00") == EventStatus.FINISHED
    assert compute_event_status("2999-01-01", "10:00") == EventStatus.SCHEDULED
