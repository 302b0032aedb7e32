from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class Attendee(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    response_status: str = Field(default="none", alias="responseStatus")
    self_: bool = Field(default=False, alias="self")


class EventTime(BaseModel):
    """Either a date-only value (all-day events) or an RFC 3339 timestamp."""

    model_config = ConfigDict(populate_by_name=True)

    day: Optional[str] = Field(default=None, alias="date")  # YYYY-MM-DD
    date_time: Optional[str] = Field(default=None, alias="dateTime")

    @property
    def is_date_only(self) -> bool:
        return bool(self.day) and not self.date_time

    def as_datetime(self) -> datetime:
        """
        Parse the timestamp into an offset-aware datetime.

        Raises:
            ValueError: for date-only values, unparseable values and timestamps
                without a UTC offset
        """
        if not self.date_time:
            raise ValueError("event time has no time-of-day component")
        parsed = datetime.fromisoformat(self.date_time.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            raise ValueError(f"timestamp has no UTC offset: {self.date_time}")
        return parsed

    def as_date(self) -> date:
        """Calendar day of this value; timestamps keep their own offset."""
        if self.is_date_only:
            return datetime.strptime(self.day, "%Y-%m-%d").date()
        return self.as_datetime().date()


class Event(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    summary: str = ""
    start: EventTime = Field(default_factory=EventTime)
    end: EventTime = Field(default_factory=EventTime)
    location: Optional[str] = None
    attendees: List[Attendee] = []

    @property
    def is_date_only(self) -> bool:
        return self.start.is_date_only

    def is_same(self, other: "Event") -> bool:
        # Two events with equal fields are still distinct entries
        return self is other

    def interval(self) -> Optional[Tuple[datetime, datetime]]:
        """
        Start and end of a timed event, or None for date-only events.

        Raises:
            ValueError: if either end is unparseable or the event ends before it starts
        """
        if self.is_date_only:
            return None
        start = self.start.as_datetime()
        end = self.end.as_datetime()
        if end < start:
            raise ValueError(f"event ends before it starts: {self.start.date_time} > {self.end.date_time}")
        return start, end

    def response_for(self, email: Optional[str]) -> Optional[str]:
        """Response status of the attendee with the given email, if any."""
        if not email:
            return None
        for attendee in self.attendees:
            if attendee.email and attendee.email.lower() == email.lower():
                return attendee.response_status
        return None

    @classmethod
    def from_google(cls, item: Dict[str, Any]) -> "Event":
        """Normalize a Google Calendar API v3 event resource."""
        return cls(
            id=item.get("id", ""),
            summary=item.get("summary") or "",
            start=EventTime.model_validate(item.get("start") or {}),
            end=EventTime.model_validate(item.get("end") or {}),
            location=item.get("location") or None,
            attendees=[Attendee.model_validate(a) for a in item.get("attendees") or []],
        )


class EventSnapshot(BaseModel):
    """The ordered events of one fetch cycle, sorted by start ascending."""

    events: List[Event] = []
    fetched_at: datetime
