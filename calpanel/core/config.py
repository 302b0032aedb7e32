import json
import os
import re
from typing import List, Optional

from pydantic import BaseModel, EmailStr, ValidationError, field_validator


class ConfigError(ValueError):
    """Raised when a configuration value cannot be used."""


class HighlightRule(BaseModel):
    pattern: str
    color: str

    @field_validator("pattern")
    @classmethod
    def _pattern_compiles(cls, value: str) -> str:
        try:
            re.compile(value.lower())
        except re.error as exc:
            raise ValueError(f"invalid highlight pattern {value!r}: {exc}")
        return value


class WidgetConfig(BaseModel):
    refresh_interval: int = 30
    fetch_interval: int = 300
    event_count: int = 10
    title_color: str = "white"
    description_color: str = "white"
    past_color: str = "gray"
    until_color: str = "lightblue"
    highlights: List[HighlightRule] = []
    current_icon: str = "🔸"
    conflict_icon: str = "🚨"
    display_location: bool = True
    display_response_status: bool = True
    email: Optional[EmailStr] = None
    date_format: str = "%a, %b %d"
    datetime_format: str = "%a, %b %d, %H:%M"
    calendar_provider: str = "mock"
    calendar_id: str = "primary"
    access_token: Optional[str] = None
    sample_path: Optional[str] = None

    @field_validator("refresh_interval", "fetch_interval", "event_count")
    @classmethod
    def _not_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("must not be negative")
        return value


def _env_int(key: str, default: int) -> int:
    raw = (os.getenv(key) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {raw!r}")


def _env_bool(key: str, default: bool) -> bool:
    raw = (os.getenv(key) or "").strip().lower()
    if not raw:
        return default
    return raw in ("true", "1", "yes")


def parse_highlights(raw: str) -> List[HighlightRule]:
    """
    Parse an ordered JSON list of [pattern, color] pairs.

    Args:
        raw: JSON text such as '[["standup", "green"], ["1:1", "yellow"]]'

    Returns:
        List of validated HighlightRule objects in their original order

    Raises:
        ConfigError: if the text is not a list of two-string pairs or a pattern
            is not a valid regular expression
    """
    if not raw.strip():
        return []
    try:
        items = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"GCAL_HIGHLIGHTS is not valid JSON: {exc}")
    if not isinstance(items, list):
        raise ConfigError("GCAL_HIGHLIGHTS must be a JSON list of [pattern, color] pairs")

    rules: List[HighlightRule] = []
    for index, item in enumerate(items):
        if (
            not isinstance(item, (list, tuple))
            or len(item) != 2
            or not all(isinstance(part, str) for part in item)
        ):
            raise ConfigError(f"GCAL_HIGHLIGHTS[{index}] must be a [pattern, color] pair of strings, got {item!r}")
        try:
            rules.append(HighlightRule(pattern=item[0], color=item[1]))
        except ValidationError as exc:
            raise ConfigError(f"GCAL_HIGHLIGHTS[{index}]: {exc.errors()[0]['msg']}")
    return rules


def load_config() -> WidgetConfig:
    try:
        return WidgetConfig(
            refresh_interval=_env_int("GCAL_REFRESH_INTERVAL", 30),
            fetch_interval=_env_int("GCAL_FETCH_INTERVAL", 300),
            event_count=_env_int("GCAL_EVENT_COUNT", 10),
            title_color=os.getenv("GCAL_COLOR_TITLE", "white"),
            description_color=os.getenv("GCAL_COLOR_DESCRIPTION", "white"),
            past_color=os.getenv("GCAL_COLOR_PAST", "gray"),
            until_color=os.getenv("GCAL_COLOR_UNTIL", "lightblue"),
            highlights=parse_highlights(os.getenv("GCAL_HIGHLIGHTS", "")),
            current_icon=os.getenv("GCAL_CURRENT_ICON", "🔸"),
            conflict_icon=os.getenv("GCAL_CONFLICT_ICON", "🚨"),
            display_location=_env_bool("GCAL_DISPLAY_LOCATION", True),
            display_response_status=_env_bool("GCAL_DISPLAY_RESPONSE_STATUS", True),
            email=os.getenv("GCAL_EMAIL") or None,
            date_format=os.getenv("GCAL_DATE_FORMAT", "%a, %b %d"),
            datetime_format=os.getenv("GCAL_DATETIME_FORMAT", "%a, %b %d, %H:%M"),
            calendar_provider=os.getenv("CALENDAR_PROVIDER", "mock").lower(),
            calendar_id=os.getenv("GCAL_CALENDAR_ID", "primary"),
            access_token=os.getenv("GCAL_ACCESS_TOKEN") or None,
            sample_path=os.getenv("GCAL_SAMPLE_PATH") or None,
        )
    except ValidationError as exc:
        error = exc.errors()[0]
        field = ".".join(str(part) for part in error["loc"])
        raise ConfigError(f"Invalid configuration for {field}: {error['msg']}")
