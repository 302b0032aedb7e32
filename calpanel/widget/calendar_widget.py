from datetime import datetime, timezone
from typing import Any, Dict, Optional

from calpanel.calendar.provider import CalendarFetchError, CalendarProvider, select_calendar_provider
from calpanel.calendar.types import EventSnapshot
from calpanel.core.config import WidgetConfig, load_config
from calpanel.observability.logger import log_error, log_event, log_info, timing
from calpanel.rendering.conflicts import warn_unparseable
from calpanel.rendering.panel import render_panel
from calpanel.routes.health import update_last_refresh
from calpanel.scheduler.service import RefreshScheduler
from calpanel.widget.sink import BufferedTextSink, TextSink
from calpanel.widget.state import WidgetState


class CalendarWidget:
    """
    Calendar panel: fetches events on refresh() and re-renders them on a timer.

    refresh() may be called from any thread; the periodic re-render runs as a
    task on the event loop that called enable().
    """

    def __init__(self, provider: CalendarProvider, config: WidgetConfig, sink: Optional[TextSink] = None):
        self._provider = provider
        self._config = config
        self._sink = sink if sink is not None else BufferedTextSink()
        self._state = WidgetState()
        self._scheduler = RefreshScheduler(config.refresh_interval, self.display)

    @property
    def config(self) -> WidgetConfig:
        return self._config

    @property
    def state(self) -> WidgetState:
        return self._state

    @property
    def sink(self) -> TextSink:
        return self._sink

    @property
    def scheduler(self) -> RefreshScheduler:
        return self._scheduler

    def _render(self, snapshot: Optional[EventSnapshot]) -> str:
        return render_panel(snapshot, self._config)

    def refresh(self) -> str:
        """
        Fetch events, store them and publish the rendered text.

        A failed fetch keeps the previous snapshot, marks it stale and
        re-renders it.

        Returns:
            The text pushed to the sink
        """
        source = getattr(self._provider, "name", "unknown")

        try:
            with timing("calendar_fetch") as timer:
                events = self._provider.fetch_events()
        except CalendarFetchError as e:
            log_error(e, {"action": "refresh_failed", "source": source})
            update_last_refresh(source=source, event_count=0, success=False, error=str(e))
            return self._state.record_failure(str(e), self._render, self._sink.set_text)

        warn_unparseable(events)
        snapshot = EventSnapshot(events=events, fetched_at=datetime.now(timezone.utc))
        text = self._state.replace_snapshot(snapshot, self._render, self._sink.set_text)
        self._sink.mark_refreshed(snapshot.fetched_at)

        log_event(
            action="refreshed",
            source=source,
            event_count=len(events),
            duration_ms=timer.get_duration_ms(),
        )
        update_last_refresh(source=source, event_count=len(events), duration_ms=timer.get_duration_ms())
        return text

    def display(self) -> str:
        """Re-render the current snapshot (a scheduler tick)."""
        return self._state.render_and_publish(self._render, self._sink.set_text)

    async def enable(self) -> bool:
        """Start the periodic re-render loop and enable the sink."""
        started = await self._scheduler.start()
        if started:
            self._sink.enable()
            log_info("Calendar widget enabled", {
                "source": getattr(self._provider, "name", "unknown"),
                "refresh_interval": self._config.refresh_interval,
            })
        return started

    def disable(self) -> bool:
        """
        Stop the re-render loop and disable the sink.

        Returns:
            False when the widget had already been disabled
        """
        if not self._scheduler.cancel():
            return False
        self._sink.disable()
        log_info("Calendar widget disabled", {"source": getattr(self._provider, "name", "unknown")})
        return True

    async def close(self) -> None:
        """Disable the widget and wait for its loop to exit."""
        self.disable()
        await self._scheduler.stop()

    def get_status(self) -> Dict[str, Any]:
        status: Dict[str, Any] = {"source": getattr(self._provider, "name", "unknown")}
        status.update(self._state.get_status())
        status["scheduler"] = self._scheduler.get_status()
        return status


# Global widget instance
_widget: Optional[CalendarWidget] = None


def get_widget() -> CalendarWidget:
    """Get the global widget instance, built from environment configuration."""
    global _widget
    if _widget is None:
        config = load_config()
        _widget = CalendarWidget(select_calendar_provider(config), config)
    return _widget
