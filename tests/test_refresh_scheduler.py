import asyncio
import threading

import pytest

from calpanel.scheduler.cancellation import CancellationToken
from calpanel.scheduler.service import RefreshScheduler


class TestCancellationToken:
    """Test the one-shot cancellation signal."""

    def test_cancel_once(self):
        token = CancellationToken()
        assert token.is_cancelled is False
        assert token.cancel() is True
        assert token.is_cancelled is True

    def test_repeated_cancel_is_harmless(self):
        token = CancellationToken()
        token.cancel()
        assert token.cancel() is False
        assert token.cancel() is False
        assert token.is_cancelled is True

    def test_callbacks_fire_once(self):
        token = CancellationToken()
        calls = []
        token.add_callback(lambda: calls.append("a"))
        token.cancel()
        token.cancel()
        assert calls == ["a"]

    def test_callback_added_after_cancel_runs_immediately(self):
        token = CancellationToken()
        token.cancel()
        calls = []
        token.add_callback(lambda: calls.append("late"))
        assert calls == ["late"]

    def test_concurrent_cancel_signals_once(self):
        token = CancellationToken()
        results = []
        lock = threading.Lock()

        def worker():
            result = token.cancel()
            with lock:
                results.append(result)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results.count(True) == 1
        assert results.count(False) == 7


class TestRefreshScheduler:
    """Test the periodic re-render loop."""

    @pytest.mark.asyncio
    async def test_zero_interval_performs_no_ticks(self):
        ticks = []
        scheduler = RefreshScheduler(0, lambda: ticks.append(1))

        assert await scheduler.start() is True
        await asyncio.sleep(0.05)

        assert scheduler.running is False
        assert scheduler.tick_count == 0
        assert ticks == []
        await scheduler.stop()

    @pytest.mark.asyncio
    async def test_ticks_until_cancelled(self):
        ticks = []
        scheduler = RefreshScheduler(0.01, lambda: ticks.append(1))

        await scheduler.start()
        await asyncio.sleep(0.1)
        await scheduler.stop()

        count = scheduler.tick_count
        assert count >= 1
        assert len(ticks) == count
        assert scheduler.running is False

        await asyncio.sleep(0.05)
        assert scheduler.tick_count == count

    @pytest.mark.asyncio
    async def test_cancel_is_idempotent(self):
        scheduler = RefreshScheduler(0.01, lambda: None)
        await scheduler.start()

        assert scheduler.cancel() is True
        assert scheduler.cancel() is False
        await scheduler.stop()
        await scheduler.stop()
        assert scheduler.get_status()["cancelled"] is True

    @pytest.mark.asyncio
    async def test_cancelled_scheduler_cannot_restart(self):
        scheduler = RefreshScheduler(0.01, lambda: None)
        await scheduler.start()
        await scheduler.stop()

        assert await scheduler.start() is False
        assert scheduler.running is False

    @pytest.mark.asyncio
    async def test_double_start(self):
        scheduler = RefreshScheduler(0.5, lambda: None)
        assert await scheduler.start() is True
        assert await scheduler.start() is False
        await scheduler.stop()

    @pytest.mark.asyncio
    async def test_tick_errors_do_not_stop_loop(self):
        def failing_tick():
            raise RuntimeError("render failed")

        scheduler = RefreshScheduler(0.01, failing_tick)
        await scheduler.start()
        await asyncio.sleep(0.1)

        assert scheduler.running is True
        assert scheduler.tick_count >= 2
        await scheduler.stop()

    @pytest.mark.asyncio
    async def test_cancel_from_another_thread_wakes_loop(self):
        scheduler = RefreshScheduler(60, lambda: None)
        await scheduler.start()
        await asyncio.sleep(0)

        thread = threading.Thread(target=scheduler.cancel)
        thread.start()
        thread.join()

        await asyncio.wait_for(scheduler.stop(), timeout=1)
        assert scheduler.running is False
        assert scheduler.tick_count == 0

    @pytest.mark.asyncio
    async def test_shared_token(self):
        token = CancellationToken()
        scheduler = RefreshScheduler(60, lambda: None, token=token)
        await scheduler.start()

        token.cancel()
        await asyncio.wait_for(scheduler.stop(), timeout=1)
        assert scheduler.token is token
        assert scheduler.running is False

    def test_status_before_start(self):
        scheduler = RefreshScheduler(30, lambda: None)
        status = scheduler.get_status()
        assert status == {
            "running": False,
            "cancelled": False,
            "interval": 30,
            "tick_count": 0,
            "last_tick": None,
        }
