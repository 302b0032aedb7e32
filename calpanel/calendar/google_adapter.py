from datetime import datetime, timezone
from typing import List, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from calpanel.calendar.provider import CalendarFetchError
from calpanel.calendar.types import Event
from calpanel.core.config import ConfigError, WidgetConfig

GOOGLE_CALENDAR_API = "https://www.googleapis.com/calendar/v3"


class GoogleCalendarAdapter:
    """Google Calendar adapter that fetches upcoming events and normalizes them to Event objects."""

    name = "google"

    def __init__(self, access_token: str, calendar_id: str = "primary", event_count: int = 10, timeout: float = 15):
        self.access_token = access_token
        self.calendar_id = calendar_id
        self.event_count = event_count
        self.timeout = timeout

    def fetch_events(self, now: Optional[datetime] = None) -> List[Event]:
        """
        Fetch the next upcoming events, expanded and ordered by start time.

        Args:
            now: Lower bound for event end times (defaults to current UTC time)

        Returns:
            List of normalized Event objects

        Raises:
            CalendarFetchError: on authentication, transport or payload errors
        """
        if now is None:
            now = datetime.now(timezone.utc)

        url = f"{GOOGLE_CALENDAR_API}/calendars/{quote(self.calendar_id, safe='@')}/events"
        params = {
            "timeMin": now.isoformat(),
            "singleEvents": "true",
            "orderBy": "startTime",
            "showDeleted": "false",
            "maxResults": self.event_count,
        }
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Accept": "application/json",
        }

        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.get(url, headers=headers, params=params)

                if response.status_code == 401:
                    raise CalendarFetchError("Google Calendar authentication failed")
                elif response.status_code == 404:
                    raise CalendarFetchError(f"Calendar '{self.calendar_id}' not found")

                response.raise_for_status()
                data = response.json()
        except CalendarFetchError:
            raise
        except (httpx.HTTPError, ValueError) as exc:
            raise CalendarFetchError(f"Failed to fetch calendar events: {exc}") from exc

        try:
            return [Event.from_google(item) for item in data.get("items", [])]
        except (AttributeError, ValidationError) as exc:
            raise CalendarFetchError(f"Unexpected calendar payload: {exc}") from exc


def create_google_adapter(config: WidgetConfig) -> GoogleCalendarAdapter:
    """Factory function to create GoogleCalendarAdapter from configuration."""
    if not config.access_token:
        raise ConfigError("Google Calendar configuration missing: GCAL_ACCESS_TOKEN required")

    return GoogleCalendarAdapter(
        access_token=config.access_token,
        calendar_id=config.calendar_id,
        event_count=config.event_count,
    )
