import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from calpanel.scheduler.cancellation import CancellationToken

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """
    Background task that re-renders a widget on a fixed interval.

    Each tick calls on_tick (the render path); it does not fetch new data.
    The loop ends only when its cancellation token is signalled, and a
    cancelled scheduler cannot be started again.
    """

    def __init__(self, interval: float, on_tick: Callable[[], Any], token: Optional[CancellationToken] = None):
        self._interval = interval
        self._on_tick = on_tick
        self._token = token or CancellationToken()
        self._task: Optional[asyncio.Task] = None
        self._tick_count = 0
        self._last_tick: Optional[datetime] = None

    @property
    def token(self) -> CancellationToken:
        return self._token

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def _tick(self) -> None:
        try:
            self._on_tick()
        except Exception as e:
            logger.error(f"Refresh tick failed: {e}")
        self._tick_count += 1
        self._last_tick = datetime.now(timezone.utc)

    async def _refresh_loop(self) -> None:
        """Main refresh loop."""
        if self._interval <= 0:
            logger.info("Refresh loop disabled (interval=0)")
            return

        loop = asyncio.get_running_loop()
        wakeup = asyncio.Event()

        def _wake() -> None:
            if not loop.is_closed():
                loop.call_soon_threadsafe(wakeup.set)

        self._token.add_callback(_wake)
        logger.info(f"Refresh loop started (interval={self._interval}s)")

        while not self._token.is_cancelled:
            try:
                await asyncio.wait_for(wakeup.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                self._tick()

        logger.info("Refresh loop stopped")

    async def start(self) -> bool:
        """Start the refresh loop. Returns False if it is running or was cancelled."""
        if self._token.is_cancelled:
            logger.warning("Refresh scheduler was cancelled and cannot be restarted")
            return False

        if self.running:
            logger.warning("Refresh scheduler is already running")
            return False

        self._task = asyncio.create_task(self._refresh_loop())
        return True

    def cancel(self) -> bool:
        """Signal the loop to stop. Safe to call repeatedly."""
        cancelled = self._token.cancel()
        if not cancelled:
            logger.warning("Refresh scheduler already cancelled")
        return cancelled

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        self._token.cancel()
        if self._task:
            await self._task

    def get_status(self) -> Dict[str, Any]:
        """Get scheduler status."""
        return {
            "running": self.running,
            "cancelled": self._token.is_cancelled,
            "interval": self._interval,
            "tick_count": self._tick_count,
            "last_tick": self._last_tick.isoformat() if self._last_tick else None,
        }
