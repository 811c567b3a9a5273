"""Tests for gridshift.session – one puzzle attempt end to end."""

from __future__ import annotations

import pytest

from gridshift import events
from gridshift.errors import LevelDataError
from gridshift.events import EventBus, EventRecorder
from gridshift.rng import new_rng
from gridshift.session import LOSS_CAUGHT, LOSS_TIME_UP, PuzzleSession, SessionState
from gridshift.state.entities import Direction

from conftest import config_for, make_level, spawn


def _session(grid, start=(0, 0), enemies=(), time_limit=0, bus=None, start_score=0, **cfg_overrides):
    level = make_level(grid, start=start, enemies=enemies, time_limit=time_limit)
    cfg = config_for(grid, **cfg_overrides)
    return PuzzleSession(level, cfg, new_rng(5), bus=bus, start_score=start_score)


# ---------------------------------------------------------------------------
# Start-up
# ---------------------------------------------------------------------------

class TestStart:
    def test_opening_flip(self):
        s = _session([[0, 0, 0]])
        assert s.active
        assert s.grid.get_cell(0, 0).flipped
        assert s.score == 10
        assert s.player.pos == (0, 0)

    def test_carried_score(self):
        s = _session([[0, 0, 0]], start_score=300)
        assert s.score == 310
        assert s.start_score == 300

    def test_timers_armed(self):
        s = _session([[0, 0]], time_limit=30)
        assert s.scheduler.pending() == ["countdown", "enemy-tick"]

    def test_no_countdown_without_limit(self):
        s = _session([[0, 0]])
        assert s.scheduler.pending() == ["enemy-tick"]

    def test_blocked_start_is_level_error(self):
        with pytest.raises(LevelDataError):
            _session([[2, 0]], start=(0, 0))

    def test_start_outside_grid_is_level_error(self):
        with pytest.raises(LevelDataError):
            _session([[0, 0]], start=(5, 0))

    def test_enemy_outside_grid_is_level_error(self):
        with pytest.raises(LevelDataError):
            _session([[0, 0]], enemies=[spawn("wanderer", 4, 0)])

    def test_enemy_on_block_is_level_error(self):
        with pytest.raises(LevelDataError):
            _session([[0, 2]], enemies=[spawn("pacer", 1, 0)])

    def test_single_cell_level_wins_on_opening(self):
        s = _session([[0]])
        assert s.state is SessionState.WON
        assert s.score == 10 + 500


# ---------------------------------------------------------------------------
# Player actions
# ---------------------------------------------------------------------------

class TestActions:
    def test_flip_ignored_mid_move(self):
        s = _session([[0, 0, 0]])
        assert s.move(Direction.RIGHT)
        assert s.player_moving
        assert s.flip() == 0
        s.advance(120)
        assert not s.player_moving
        assert s.flip() == 1

    def test_move_rejected_mid_move(self):
        s = _session([[0, 0, 0]])
        assert s.move(Direction.RIGHT)
        assert not s.move(Direction.RIGHT)
        assert s.player.pos == (1, 0)

    def test_move_into_block_rejected(self):
        s = _session([[0, 2]])
        assert not s.move(Direction.RIGHT)
        assert not s.move(Direction.UP)

    def test_chain_scoring(self):
        s = _session([[0, 0, 0, 0]])
        s.move(Direction.RIGHT)
        s.advance(120)
        s.move(Direction.RIGHT)
        s.advance(120)
        assert s.flip() == 2
        # opening 10, then 2 tiles x 10 + chain bonus 2 x 25
        assert s.score == 10 + 20 + 50
        assert s.last_flip.is_chain
        assert s.active

    def test_flip_on_flipped_cell_scores_nothing(self):
        s = _session([[0, 0, 0]])
        assert s.flip() == 0
        assert s.score == 10


# ---------------------------------------------------------------------------
# Win
# ---------------------------------------------------------------------------

class TestWin:
    def test_win_without_time_limit(self):
        s = _session([[0, 0]])
        s.move(Direction.RIGHT)
        s.advance(120)
        assert s.flip() == 1
        assert s.state is SessionState.WON
        assert s.score == 10 + 10 + 500

    def test_win_with_time_bonus(self):
        s = _session([[0, 0]], time_limit=30)
        s.move(Direction.RIGHT)
        s.advance(2000)
        assert s.time_remaining == 28
        s.flip()
        assert s.state is SessionState.WON
        assert s.score == 10 + 10 + 5 * 28 + 500

    def test_win_stops_timers(self):
        s = _session([[0, 0]], time_limit=30)
        s.move(Direction.RIGHT)
        s.advance(120)
        s.flip()
        assert s.scheduler.pending() == []
        remaining = s.time_remaining
        s.advance(10_000)
        assert s.time_remaining == remaining

    def test_outcome(self):
        s = _session([[0, 0]], start_score=100)
        assert s.outcome() is None
        s.move(Direction.RIGHT)
        s.advance(120)
        s.flip()
        out = s.outcome()
        assert out.state is SessionState.WON
        assert out.score == s.score
        assert out.gained == s.score - 100
        assert out.reason is None


# ---------------------------------------------------------------------------
# Loss
# ---------------------------------------------------------------------------

class TestLoss:
    def test_time_up(self):
        s = _session([[0, 0, 0]], time_limit=2)
        s.advance(1000)
        assert s.active and s.time_remaining == 1
        s.advance(1000)
        assert s.state is SessionState.LOST
        assert s.loss_reason == LOSS_TIME_UP
        assert s.time_remaining == 0

    def test_caught_after_enemy_tick(self):
        s = _session([[0, 0, 0]], enemies=[spawn("chaser", 2, 0)])
        s.advance(1500)
        assert s.enemies[0].pos == (1, 0)
        assert s.active
        s.advance(1500)
        assert s.state is SessionState.LOST
        assert s.loss_reason == LOSS_CAUGHT

    def test_caught_after_player_move(self):
        grid = [[0, 0], [2, 2]]
        s = _session(grid, enemies=[spawn("pacer", 1, 0)], time_limit=60)
        assert s.move(Direction.RIGHT)
        assert s.state is SessionState.LOST
        assert s.outcome().reason == LOSS_CAUGHT
        # loss wins over remaining time and tiles
        assert s.time_remaining == 60

    def test_terminal_session_ignores_everything(self):
        s = _session([[0, 0, 0]], time_limit=1)
        s.advance(1000)
        assert s.state is SessionState.LOST
        score = s.score
        assert not s.move(Direction.RIGHT)
        assert s.flip() == 0
        assert not s.cancel()
        s.advance(5000)
        assert s.score == score
        assert s.scheduler.pending() == []


# ---------------------------------------------------------------------------
# Enemies erase progress
# ---------------------------------------------------------------------------

class TestEnemyPressure:
    def test_enemy_unflips_during_tick(self):
        s = _session([[0, 1, 0]], enemies=[spawn("pacer", 2, 0)])
        assert s.grid.remaining() == 1
        s.advance(1500)
        assert s.enemies[0].pos == (1, 0)
        assert not s.grid.get_cell(1, 0).flipped
        assert s.grid.remaining() == 2
        assert s.active

    def test_enemy_ticks_follow_interval(self):
        s = _session([[0, 0, 0, 0, 0]], start=(0, 0), enemies=[spawn("pacer", 2, 0)],
                     enemy_move_interval_ms=500)
        s.advance(499)
        assert s.enemies[0].pos == (2, 0)
        s.advance(1)
        assert s.enemies[0].pos == (3, 0)


# ---------------------------------------------------------------------------
# Cancel
# ---------------------------------------------------------------------------

class TestCancel:
    def test_cancel_abandons(self):
        s = _session([[0, 0, 0]], time_limit=10, enemies=[spawn("wanderer", 2, 0)])
        assert s.cancel()
        assert s.state is SessionState.ABANDONED
        assert s.scheduler.pending() == []
        pos = s.enemies[0].pos
        s.advance(10_000)
        assert s.enemies[0].pos == pos


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

class TestEvents:
    def test_flip_events(self):
        bus = EventBus()
        rec = EventRecorder(bus, [events.TILE_FLIPPED, events.CHAIN_FLIP, events.LEVEL_WON, events.SCORE_UPDATE])
        s = _session([[0, 0, 0, 1]], bus=bus)
        # opening flip chains across to the pre-flipped end and completes the grid
        assert s.state is SessionState.WON
        assert rec.named(events.TILE_FLIPPED) == [(3,)]
        assert rec.named(events.CHAIN_FLIP) == [(3,)]
        assert rec.named(events.LEVEL_WON) == [(s.score,)]
        assert rec.named(events.SCORE_UPDATE)[-1] == (s.score,)
        assert s.score == 30 + 75 + 500

    def test_flip_wave_uses_configured_delay(self):
        bus = EventBus()
        rec = EventRecorder(bus, [events.FLIP_WAVE])
        s = _session([[0, 0, 0, 1, 0]], bus=bus, flip_chain_delay_ms=80)
        assert s.active
        assert rec.named(events.FLIP_WAVE) == [({(0, 0): 0, (1, 0): 80, (2, 0): 160},)]

    def test_no_wave_for_a_noop_flip(self):
        bus = EventBus()
        s = _session([[0, 0, 0]], bus=bus)
        rec = EventRecorder(bus, [events.FLIP_WAVE])
        assert s.flip() == 0
        assert rec.records == []

    def test_loss_event(self):
        bus = EventBus()
        rec = EventRecorder(bus, [events.LEVEL_LOST, events.TIMER_TICK])
        s = _session([[0, 0]], time_limit=1, bus=bus)
        s.advance(1000)
        assert rec.named(events.LEVEL_LOST) == [(LOSS_TIME_UP, s.score)]
        assert rec.named(events.TIMER_TICK) == [(1,), (0,)]
