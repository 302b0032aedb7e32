from datetime import datetime
from typing import Optional, Protocol


class TextSink(Protocol):
    """Display surface that shows the widget's text."""

    def set_text(self, text: str) -> None:
        ...

    def mark_refreshed(self, at: datetime) -> None:
        ...

    def enable(self) -> None:
        ...

    def disable(self) -> None:
        ...


class BufferedTextSink:
    """In-memory sink; the host service reads the text back from it."""

    def __init__(self, title: str = " Calendar "):
        self.title = title
        self.text = ""
        self.refreshed_at: Optional[datetime] = None
        self.enabled = False
        self.updates = 0

    def set_text(self, text: str) -> None:
        self.text = text
        self.updates += 1

    def mark_refreshed(self, at: datetime) -> None:
        self.refreshed_at = at

    def enable(self) -> None:
        self.enabled = True

    def disable(self) -> None:
        self.enabled = False
