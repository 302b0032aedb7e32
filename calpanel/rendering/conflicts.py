from typing import List, Sequence

from calpanel.calendar.types import Event
from calpanel.observability.logger import log_warning, sanitize_summary


def conflicts(event: Event, events: Sequence[Event]) -> bool:
    """
    Return True if this event overlaps another event of the same snapshot.

    Intervals are half-open: an event ending exactly when another starts does
    not conflict with it. Date-only events never conflict, and an event whose
    timestamps cannot be parsed is treated as non-conflicting.
    """
    try:
        interval = event.interval()
    except ValueError:
        return False

    if interval is None:
        return False
    start, end = interval

    for other in events:
        if other.is_same(event):
            continue

        try:
            other_interval = other.interval()
        except ValueError:
            continue
        if other_interval is None:
            continue

        other_start, other_end = other_interval
        if start < other_end and end > other_start:
            return True

    return False


def conflicting_events(events: Sequence[Event]) -> List[bool]:
    """Conflict flag for every event, in snapshot order."""
    return [conflicts(event, events) for event in events]


def warn_unparseable(events: Sequence[Event]) -> int:
    """
    Log one warning per event whose times cannot be parsed.

    Called once per fetched snapshot; such events are left out of conflict
    checks on every render.

    Returns:
        Number of unparseable events
    """
    count = 0
    for event in events:
        try:
            event.interval()
        except ValueError as exc:
            count += 1
            log_warning("Skipping conflict check for unparseable event", {
                "event_id": event.id,
                "summary": sanitize_summary(event.summary),
                "error": str(exc),
            })
    return count
