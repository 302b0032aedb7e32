import json
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from calpanel.calendar.provider import CalendarFetchError
from calpanel.calendar.types import Event
from calpanel.core.config import WidgetConfig


DATA_PATH = Path(__file__).resolve().parent.parent / "data" / "sample_calendar.json"


class MockCalendarProvider:
    """Serves events from a JSON fixture shaped like a Calendar API events.list response."""

    name = "mock"

    def __init__(self, data_path: Optional[Path] = None, event_count: int = 10) -> None:
        self._path = data_path or DATA_PATH
        self._event_count = event_count

    @classmethod
    def from_config(cls, config: WidgetConfig) -> "MockCalendarProvider":
        path = Path(config.sample_path) if config.sample_path else None
        return cls(data_path=path, event_count=config.event_count)

    def fetch_events(self) -> List[Event]:
        if not self._path.exists():
            return []

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            events = [Event.from_google(item) for item in raw.get("items", [])]
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, AttributeError, ValidationError) as exc:
            raise CalendarFetchError(f"Invalid sample calendar {self._path}: {exc}") from exc

        return events[:self._event_count]
