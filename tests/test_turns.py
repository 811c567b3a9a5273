"""Tests for gridshift.systems.turns – simulation-time timers."""

from __future__ import annotations

import pytest

from gridshift.systems.turns import TurnScheduler


class TestSchedule:
    def test_one_shot_fires_once(self):
        sched = TurnScheduler()
        fired = []
        sched.schedule(100, "once", lambda: fired.append(sched.current_ms))
        sched.advance(99)
        assert fired == []
        sched.advance(1)
        assert fired == [100]
        sched.advance(1000)
        assert fired == [100]

    def test_repeating_fires_each_interval(self):
        sched = TurnScheduler()
        fired = []
        sched.schedule_every(100, "tick", lambda: fired.append(sched.current_ms))
        sched.advance(350)
        assert fired == [100, 200, 300]
        assert sched.current_ms == 350

    def test_due_order_then_insertion_order(self):
        sched = TurnScheduler()
        order = []
        sched.schedule(50, "b", lambda: order.append("b"))
        sched.schedule(20, "a", lambda: order.append("a"))
        sched.schedule(50, "c", lambda: order.append("c"))
        sched.advance(100)
        assert order == ["a", "b", "c"]

    def test_bad_interval(self):
        with pytest.raises(ValueError):
            TurnScheduler().schedule_every(0, "bad", lambda: None)

    def test_negative_advance_is_ignored(self):
        sched = TurnScheduler()
        sched.advance(-10)
        assert sched.current_ms == 0


class TestCancel:
    def test_cancelled_never_fires(self):
        sched = TurnScheduler()
        fired = []
        handle = sched.schedule_every(100, "tick", lambda: fired.append(1))
        sched.advance(100)
        sched.cancel(handle)
        sched.advance(500)
        assert fired == [1]
        assert sched.pending() == []

    def test_cancel_from_inside_callback(self):
        sched = TurnScheduler()
        fired = []
        handle = None

        def tick():
            fired.append(sched.current_ms)
            sched.cancel(handle)

        handle = sched.schedule_every(100, "tick", tick)
        sched.advance(1000)
        assert fired == [100]

    def test_clear_from_callback_stops_other_timers(self):
        sched = TurnScheduler()
        fired = []
        sched.schedule_every(100, "first", lambda: (fired.append("first"), sched.clear()))
        sched.schedule_every(100, "second", lambda: fired.append("second"))
        sched.advance(1000)
        assert fired == ["first"]

    def test_cancel_none_is_harmless(self):
        TurnScheduler().cancel(None)

    def test_pending_names(self):
        sched = TurnScheduler()
        sched.schedule_every(1500, "enemy-tick", lambda: None)
        sched.schedule_every(1000, "countdown", lambda: None)
        assert sched.pending() == ["countdown", "enemy-tick"]
