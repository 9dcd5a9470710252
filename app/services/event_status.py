"""
Computed event status

An event is "scheduled" before it starts, "happening" for a fixed two hour
window from its start, and "finished" afterwards. The value is derived from
the stored date and time on every read and never persisted. It is unrelated
to the stored ``status`` column.
"""

import re
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Optional, Union

EVENT_DURATION = timedelta(hours=2)

_DATE_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?:$|[T ])")
_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")


class EventStatus(str, Enum):
    SCHEDULED = "scheduled"
    HAPPENING = "happening"
    FINISHED = "finished"


def parse_event_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    match = _DATE_PATTERN.match(value.strip())
    if not match:
        return None
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_event_time(value: Optional[str]) -> Optional[tuple]:
    if not isinstance(value, str):
        return None

    match = _TIME_PATTERN.match(value.strip())
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None
    return hour, minute


def _local_now(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now()
    if now.tzinfo is not None:
        # Compare wall-clock to wall-clock in the server's local zone
        return now.astimezone().replace(tzinfo=None)
    return now


def event_start(event_date, event_time) -> Optional[datetime]:
    """Local start instant for an event, or None when date/time are malformed."""
    day = parse_event_date(event_date)
    clock = parse_event_time(event_time)
    if day is None or clock is None:
        return None
    hour, minute = clock
    return datetime(day.year, day.month, day.day, hour, minute)


def compute_event_status(event_date, event_time, now: Optional[datetime] = None) -> EventStatus:
    """
    Derive the event's status from its date, time and the current instant.

    Malformed dates or times never raise; such events are reported as
    scheduled.
    """
    start = event_start(event_date, event_time)
    if start is None:
        return EventStatus.SCHEDULED

    current = _local_now(now)
    end = start + EVENT_DURATION
    if current < start:
        return EventStatus.SCHEDULED
    if current <= end:
        return EventStatus.HAPPENING
    return EventStatus.FINISHED
