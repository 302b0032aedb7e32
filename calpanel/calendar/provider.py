from typing import List, Protocol

from calpanel.calendar.types import Event
from calpanel.core.config import WidgetConfig


class CalendarFetchError(Exception):
    """Raised when a provider cannot return events for this cycle."""


class CalendarProvider(Protocol):
    name: str

    def fetch_events(self) -> List[Event]:
        """
        Fetch upcoming calendar events, ordered by start time ascending.

        Raises:
            CalendarFetchError: if the events cannot be retrieved
        """
        ...


def select_calendar_provider(config: WidgetConfig) -> CalendarProvider:
    """Factory function to select calendar provider based on config.calendar_provider."""
    provider = config.calendar_provider.lower()

    if provider == "mock":
        from calpanel.calendar.mock_provider import MockCalendarProvider
        return MockCalendarProvider.from_config(config)
    elif provider == "google":
        from calpanel.calendar.google_adapter import create_google_adapter
        return create_google_adapter(config)
    else:
        raise ValueError(f"Unsupported CALENDAR_PROVIDER: {provider}")
