import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from calpanel.calendar.types import EventSnapshot

Render = Callable[[Optional[EventSnapshot]], str]
Publish = Callable[[str], None]


class WidgetState:
    """
    Lock-guarded holder of the latest snapshot and the last rendered text.

    Every mutation re-renders and publishes while the lock is held, so a
    concurrent refresh or tick never observes a half-updated snapshot.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._snapshot: Optional[EventSnapshot] = None
        self._text = ""
        self._stale = False
        self._last_error: Optional[str] = None
        self._rendered_at: Optional[datetime] = None

    def replace_snapshot(self, snapshot: EventSnapshot, render: Render, publish: Publish) -> str:
        """Store a freshly fetched snapshot, then render and publish it."""
        with self._lock:
            self._snapshot = snapshot
            self._stale = False
            self._last_error = None
            return self._render_locked(render, publish)

    def record_failure(self, error: str, render: Render, publish: Publish) -> str:
        """Mark the current snapshot stale after a failed fetch; the last good one is kept."""
        with self._lock:
            self._stale = True
            self._last_error = error
            return self._render_locked(render, publish)

    def render_and_publish(self, render: Render, publish: Publish) -> str:
        """Re-render the current snapshot without changing it."""
        with self._lock:
            return self._render_locked(render, publish)

    def _render_locked(self, render: Render, publish: Publish) -> str:
        text = render(self._snapshot)
        publish(text)
        self._text = text
        self._rendered_at = datetime.now(timezone.utc)
        return text

    @property
    def snapshot(self) -> Optional[EventSnapshot]:
        with self._lock:
            return self._snapshot

    @property
    def text(self) -> str:
        with self._lock:
            return self._text

    @property
    def is_stale(self) -> bool:
        with self._lock:
            return self._stale

    @property
    def last_error(self) -> Optional[str]:
        with self._lock:
            return self._last_error

    def get_status(self) -> Dict[str, Any]:
        with self._lock:
            snapshot = self._snapshot
            return {
                "has_snapshot": snapshot is not None,
                "event_count": len(snapshot.events) if snapshot else 0,
                "fetched_at": snapshot.fetched_at.isoformat() if snapshot else None,
                "rendered_at": self._rendered_at.isoformat() if self._rendered_at else None,
                "stale": self._stale,
                "last_error": self._last_error,
            }
