"""
Tests for the cancellable single-shot schedulers.
"""

import asyncio
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from feed.scheduler import ScheduledTask, ManualScheduler, AsyncioScheduler


# ── ScheduledTask ───────────────────────────────────────────────────────────

class TestScheduledTask:
    def test_runs_once(self):
        calls = []
        task = ScheduledTask(lambda: calls.append(1))
        task._run()
        task._run()
        assert calls == [1]
        assert task.done and not task.pending

    def test_cancel_prevents_run(self):
        calls = []
        task = ScheduledTask(lambda: calls.append(1))
        assert task.cancel() is True
        task._run()
        assert calls == []
        assert task.cancelled

    def test_cancel_exactly_once(self):
        task = ScheduledTask(lambda: None)
        assert task.cancel() is True
        assert task.cancel() is False

    def test_cancel_after_run_is_false(self):
        task = ScheduledTask(lambda: None)
        task._run()
        assert task.cancel() is False
        assert not task.cancelled


# ── ManualScheduler ─────────────────────────────────────────────────────────

class TestManualScheduler:
    def test_nothing_runs_without_advance(self):
        sched = ManualScheduler()
        calls = []
        sched.call_later(1.0, lambda: calls.append("a"))
        assert calls == []
        assert sched.pending() == 1

    def test_runs_when_due(self):
        sched = ManualScheduler()
        calls = []
        sched.call_later(1.5, lambda: calls.append("a"))
        sched.advance(1.0)
        assert calls == []
        sched.advance(0.5)
        assert calls == ["a"]
        assert sched.time() == pytest.approx(1.5)

    def test_runs_in_due_order(self):
        sched = ManualScheduler()
        calls = []
        sched.call_later(2.0, lambda: calls.append("late"))
        sched.call_later(1.0, lambda: calls.append("early"))
        sched.call_later(1.0, lambda: calls.append("early2"))
        assert sched.advance(5) == 3
        assert calls == ["early", "early2", "late"]

    def test_chained_callbacks_within_window(self):
        sched = ManualScheduler()
        times = []

        def tick():
            times.append(sched.time())
            if len(times) < 3:
                sched.call_later(1.0, tick)

        sched.call_later(1.0, tick)
        sched.advance(10)
        assert times == [1.0, 2.0, 3.0]

    def test_cancelled_task_never_runs(self):
        sched = ManualScheduler()
        calls = []
        task = sched.call_later(1.0, lambda: calls.append(1))
        task.cancel()
        sched.advance(5)
        assert calls == []
        assert sched.pending() == 0

    def test_run_next_jumps_clock(self):
        sched = ManualScheduler()
        calls = []
        sched.call_later(2.5, lambda: calls.append(1))
        assert sched.run_next() is True
        assert calls == [1]
        assert sched.time() == pytest.approx(2.5)
        assert sched.run_next() is False

    def test_negative_values_rejected(self):
        sched = ManualScheduler()
        with pytest.raises(ValueError):
            sched.call_later(-1, lambda: None)
        with pytest.raises(ValueError):
            sched.advance(-1)


# ── AsyncioScheduler ────────────────────────────────────────────────────────

class TestAsyncioScheduler:
    def test_fires_on_running_loop(self):
        calls = []

        async def main():
            sched = AsyncioScheduler()
            sched.call_later(0.01, lambda: calls.append("fired"))
            await asyncio.sleep(0.05)

        asyncio.run(main())
        assert calls == ["fired"]

    def test_cancel_prevents_fire(self):
        calls = []

        async def main():
            sched = AsyncioScheduler()
            task = sched.call_later(0.01, lambda: calls.append("fired"))
            assert task.cancel() is True
            await asyncio.sleep(0.05)
            assert task.cancelled

        asyncio.run(main())
        assert calls == []

    def test_explicit_loop(self):
        loop = asyncio.new_event_loop()
        try:
            calls = []
            sched = AsyncioScheduler(loop)
            sched.call_later(0.0, lambda: calls.append(1))
            loop.run_until_complete(asyncio.sleep(0.02))
            assert calls == [1]
        finally:
            loop.close()
