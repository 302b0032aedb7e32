import re
from datetime import datetime
from typing import Sequence

from calpanel.calendar.types import Event
from calpanel.core.config import HighlightRule, WidgetConfig
from calpanel.rendering.timefmt import is_past


def match_highlight(rules: Sequence[HighlightRule], summary: str, default: str) -> str:
    """
    Resolve the title color for a summary against ordered highlight rules.

    Patterns and summary are both lower-cased and the pattern may match
    anywhere in the summary. Later rules override earlier ones, so the color
    of the last matching rule wins.
    """
    color = default
    text = summary.lower()

    for rule in rules:
        if re.search(rule.pattern.lower(), text):
            color = rule.color

    return color


def title_color(event: Event, config: WidgetConfig, now: datetime) -> str:
    color = match_highlight(config.highlights, event.summary, config.title_color)

    # Past state overrides any highlight match
    if is_past(event, now):
        color = config.past_color

    return color


def description_color(event: Event, config: WidgetConfig, now: datetime) -> str:
    if is_past(event, now):
        return config.past_color
    return config.description_color
