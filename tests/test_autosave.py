"""Tests for the draft autosave task, driven by a manual clock."""

import asyncio
from datetime import timedelta

import pytest

from invoicecraft.ledger import AutoSaveTask


class Recorder:
    """Tick callback that records when it ran."""

    def __init__(self, clock, on_call=None):
        self.clock = clock
        self.calls = []
        self.on_call = on_call

    async def __call__(self):
        self.calls.append(self.clock.now())
        if self.on_call:
            self.on_call()


class TestAutoSaveTask:
    """Scheduling, cancellation and virtual-time driving."""

    def test_rejects_non_positive_interval(self, clock):
        with pytest.raises(ValueError):
            AutoSaveTask(Recorder(clock), interval_seconds=0, clock=clock)

    def test_not_running_until_started(self, clock):
        recorder = Recorder(clock)
        task = AutoSaveTask(recorder, interval_seconds=6, clock=clock)
        clock.advance(60)
        assert asyncio.run(task.advance()) == 0
        assert recorder.calls == []

    def test_fires_every_interval(self, clock):
        """Test each elapsed interval fires exactly one tick."""
        recorder = Recorder(clock)
        task = AutoSaveTask(recorder, interval_seconds=6, clock=clock)
        task.start()

        clock.advance(5)
        assert asyncio.run(task.advance()) == 0
        clock.advance(1)
        assert asyncio.run(task.advance()) == 1
        clock.advance(18)
        assert asyncio.run(task.advance()) == 3
        assert task.ticks_fired == 4

    def test_stop_prevents_further_ticks(self, clock):
        recorder = Recorder(clock)
        task = AutoSaveTask(recorder, interval_seconds=6, clock=clock)
        task.start()
        clock.advance(6)
        asyncio.run(task.advance())
        task.stop()
        clock.advance(60)
        assert asyncio.run(task.advance()) == 0
        assert not task.is_running
        assert len(recorder.calls) == 1

    def test_stop_during_tick_lets_it_finish(self, clock):
        """Test a tick that stops the task still completes, and nothing follows."""
        holder = {}
        recorder = Recorder(clock, on_call=lambda: holder["task"].stop())
        task = AutoSaveTask(recorder, interval_seconds=6, clock=clock)
        holder["task"] = task
        task.start()
        clock.advance(30)
        assert asyncio.run(task.advance()) == 1
        assert task.ticks_fired == 1

    def test_restart_resets_deadline(self, clock):
        task = AutoSaveTask(Recorder(clock), interval_seconds=6, clock=clock)
        task.start()
        clock.advance(4)
        task.start()
        assert task.next_due == clock.now() + timedelta(seconds=6)
        clock.advance(4)
        assert asyncio.run(task.advance()) == 0
        clock.advance(2)
        assert asyncio.run(task.advance()) == 1

    def test_run_exits_when_stopped(self):
        """Test the production loop wakes up and returns on stop()."""

        async def scenario():
            fired = asyncio.Event()

            async def on_tick():
                fired.set()

            task = AutoSaveTask(on_tick, interval_seconds=0.01)
            task.start()
            runner = asyncio.create_task(task.run())
            await asyncio.wait_for(fired.wait(), timeout=2)
            task.stop()
            await asyncio.wait_for(runner, timeout=2)
            return task

        task = asyncio.run(scenario())
        assert task.ticks_fired >= 1
        assert not task.is_running

    def test_coalesced_advance_skips_missed_deadlines(self, clock):
        """Test a long gap fires once and reschedules from the current time."""
        recorder = Recorder(clock)
        task = AutoSaveTask(recorder, interval_seconds=6, clock=clock)
        task.start()

        clock.advance(60)
        assert asyncio.run(task.advance(coalesce=True)) == 1
        assert task.next_due == clock.now() + timedelta(seconds=6)
        assert asyncio.run(task.advance(coalesce=True)) == 0

        clock.advance(5)
        assert asyncio.run(task.advance(coalesce=True)) == 0
        clock.advance(1)
        assert asyncio.run(task.advance(coalesce=True)) == 1
        assert len(recorder.calls) == 2

    def test_coalesced_advance_when_stopped(self, clock):
        task = AutoSaveTask(Recorder(clock), interval_seconds=6, clock=clock)
        clock.advance(60)
        assert asyncio.run(task.advance(coalesce=True)) == 0
