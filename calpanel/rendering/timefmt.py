"""
Relative and absolute time labels for calendar events.

All "now" comparisons take an explicit offset-aware datetime so a whole
render pass is evaluated against a single instant.
"""
from datetime import date, datetime, timedelta
from typing import Optional

from calpanel.calendar.types import Event
from calpanel.core.config import WidgetConfig

MINUTES_PER_DAY = 24 * 60


def event_timestamp(event: Event, config: WidgetConfig) -> str:
    """Absolute start label: date pattern for all-day events, date+time otherwise."""
    try:
        if event.is_date_only:
            return event.start.as_date().strftime(config.date_format)
        return event.start.as_datetime().strftime(config.datetime_format)
    except ValueError:
        return event.start.date_time or event.start.day or ""


def format_countdown(duration: timedelta) -> str:
    """
    Render a duration as its coarsest nonzero unit.

    The duration is rounded to the nearest minute (halves away from zero).
    Negative durations yield an empty string; otherwise one of "{N}d", "{N}h"
    or "{N}m", with minutes as the fallback ("0m" included).
    """
    seconds = duration.total_seconds()
    minutes = int((abs(seconds) + 30) // 60)
    if seconds < 0:
        minutes = -minutes

    if minutes < 0:
        return ""

    days, remainder = divmod(minutes, MINUTES_PER_DAY)
    hours, mins = divmod(remainder, 60)

    if days > 0:
        return f"{days}d"
    if hours > 0:
        return f"{hours}h"
    return f"{mins}m"


def until(event: Event, config: WidgetConfig, now: datetime) -> str:
    """Colored countdown to the event start, or "" once it has started."""
    try:
        interval = event.interval()
    except ValueError:
        return ""
    if interval is None:
        return ""

    label = format_countdown(interval[0] - now)
    if not label:
        return ""
    return f"[{config.until_color}]{label}[white]"


def is_now(event: Event, now: datetime) -> bool:
    """True while a timed event is in progress."""
    try:
        interval = event.interval()
    except ValueError:
        return False
    if interval is None:
        return False

    start, end = interval
    return start < now < end


def is_past(event: Event, now: datetime) -> bool:
    """
    True once an event has started and is no longer in progress.

    Date-only events are past when their (exclusive) end date is on or before
    the calendar date of now, taken in now's own offset.
    """
    if event.is_date_only:
        try:
            last_day = event.end.as_date() if event.end.is_date_only else event.start.as_date() + timedelta(days=1)
        except ValueError:
            return False
        return last_day <= now.date()

    try:
        start, _ = event.interval()
    except ValueError:
        return False

    return not is_now(event, now) and start < now


def event_day(event: Event) -> Optional[date]:
    """Calendar day the event starts on, or None if it cannot be determined."""
    try:
        return event.start.as_date()
    except ValueError:
        return None
