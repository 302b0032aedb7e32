from datetime import datetime
from typing import Optional

from calpanel.calendar.types import Event, EventSnapshot
from calpanel.core.config import WidgetConfig
from calpanel.rendering.conflicts import conflicting_events
from calpanel.rendering.highlight import description_color, title_color
from calpanel.rendering.timefmt import event_day, event_timestamp, is_now, until

RESPONSE_ICONS = {
    "accepted": "✔︎ ",
    "declined": "✘ ",
    "needsAction": "? ",
    "tentative": "~ ",
}


def render_panel(snapshot: Optional[EventSnapshot], config: WidgetConfig, now: Optional[datetime] = None) -> str:
    """
    Render the full panel body for a snapshot.

    Events are rendered in snapshot order (the snapshot is expected to be
    sorted by start time already). A missing or empty snapshot renders as an
    empty string.

    Args:
        snapshot: Latest fetched events, or None before the first fetch
        config: Widget display configuration
        now: Instant the decorations are computed against (defaults to the
            current local time, whose date decides when all-day events are past)

    Returns:
        Text with color tags for the display sink
    """
    if snapshot is None or not snapshot.events:
        return ""

    if now is None:
        now = datetime.now().astimezone()

    events = snapshot.events
    flags = conflicting_events(events)
    blocks = []
    prev_event: Optional[Event] = None

    for event, conflict in zip(events, flags):
        blocks.append(render_event(event, prev_event, conflict, config, now))
        prev_event = event

    return "".join(blocks)


def render_event(
    event: Event,
    prev_event: Optional[Event],
    conflict: bool,
    config: WidgetConfig,
    now: datetime,
) -> str:
    desc_color = description_color(event, config, now)

    return "{} {}[{}]{}[white]\n {}[{}]{} {}[white]\n\n".format(
        day_divider(event, prev_event),
        response_icon(event, config),
        title_color(event, config, now),
        event_summary(event, conflict, config, now),
        location_line(event, config, desc_color),
        desc_color,
        event_timestamp(event, config),
        until(event, config, now),
    )


def day_divider(event: Event, prev_event: Optional[Event]) -> str:
    """Blank line between events that start on different calendar days."""
    if prev_event is None:
        return ""

    prev_day = event_day(prev_event)
    curr_day = event_day(event)
    if prev_day is None or curr_day is None:
        return ""

    return "\n" if curr_day != prev_day else ""


def event_summary(event: Event, conflict: bool, config: WidgetConfig, now: datetime) -> str:
    summary = event.summary

    if is_now(event, now):
        summary = f"{config.current_icon} {summary}"

    if conflict:
        return f"{config.conflict_icon} {summary}"
    return summary


def location_line(event: Event, config: WidgetConfig, color: str) -> str:
    if not config.display_location or not event.location:
        return ""
    return f"[{color}]{event.location}\n "


def response_icon(event: Event, config: WidgetConfig) -> str:
    """Glyph for the viewer's own response to the event."""
    if not config.display_response_status:
        return ""

    response = event.response_for(config.email)
    return "[gray]" + RESPONSE_ICONS.get(response, "")
