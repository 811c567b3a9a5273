"""One puzzle attempt: grid, player, enemies, timers and scoring."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from gridshift import events
from gridshift.config import GameConfig
from gridshift.content.levels import LevelData
from gridshift.errors import LevelDataError
from gridshift.events import EventBus
from gridshift.state.actors import Enemy, Player
from gridshift.state.entities import Direction
from gridshift.state.grid import FlipResult, GridModel
from gridshift.systems.turns import ScheduledAction, TurnScheduler

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    ACTIVE = "active"
    WON = "won"
    LOST = "lost"
    ABANDONED = "abandoned"  # player cancelled out of the puzzle


LOSS_CAUGHT = "caught"
LOSS_TIME_UP = "time_up"


@dataclass(frozen=True)
class SessionOutcome:
    state: SessionState
    score: int               # total score, including what was carried in
    gained: int              # score earned during this session
    reason: Optional[str] = None
    level_name: str = ""
    time_remaining: int = 0


class PuzzleSession:
    """
    Owns the grid and actors for a single attempt and drives them from two
    simulation-time timers: the enemy tick and (when the level has a time
    limit) a one-second countdown. All state changes happen inside move(),
    flip(), cancel() and advance(), so nothing mutates the grid behind the
    caller's back.
    """

    def __init__(
        self,
        level: LevelData,
        cfg: GameConfig,
        rng,
        bus: Optional[EventBus] = None,
        start_score: int = 0,
    ) -> None:
        self.level = level
        self.cfg = cfg
        self.rng = rng
        self.bus = bus or EventBus()
        self.start_score = start_score
        self.score = start_score
        self.state = SessionState.ACTIVE
        self.loss_reason: Optional[str] = None
        self.last_flip: Optional[FlipResult] = None

        self.grid = GridModel.from_level(level, cfg.grid_cols, cfg.grid_rows)
        start = level.player_start
        if not self.grid.is_walkable(*start):
            raise LevelDataError(f"{level.name}: player start {start} is outside the grid or blocked")
        self.player = Player(id="player", pos=start)
        self.enemies: List[Enemy] = []
        for i, spawn in enumerate(level.enemies):
            if not self.grid.is_walkable(spawn.col, spawn.row):
                raise LevelDataError(
                    f"{level.name}: enemy spawn {(spawn.col, spawn.row)} is outside the grid or blocked"
                )
            self.enemies.append(spawn.spawn(f"enemy_{i + 1}"))

        self.time_remaining = level.time_limit
        self.scheduler = TurnScheduler()
        self._enemy_timer: Optional[ScheduledAction] = self.scheduler.schedule_every(
            cfg.enemy_move_interval_ms, "enemy-tick", self._enemy_tick
        )
        self._countdown: Optional[ScheduledAction] = None
        if level.time_limit > 0:
            self._countdown = self.scheduler.schedule_every(
                cfg.countdown_interval_ms, "countdown", self._countdown_tick
            )

        logger.info(
            "session start: %s (%d enemies, time limit %ss)",
            level.name, len(self.enemies), level.time_limit or "none",
        )
        self.bus.emit(events.SCORE_UPDATE, self.score)
        self.bus.emit(events.TIMER_TICK, self.time_remaining)
        # the starting cell is flipped as the opening move
        self._apply_flip(*start)

    # --- queries ---

    @property
    def now(self) -> int:
        return self.scheduler.current_ms

    @property
    def active(self) -> bool:
        return self.state is SessionState.ACTIVE

    @property
    def player_moving(self) -> bool:
        return self.player.moving(self.now)

    def outcome(self) -> Optional[SessionOutcome]:
        if self.active:
            return None
        return SessionOutcome(
            state=self.state,
            score=self.score,
            gained=self.score - self.start_score,
            reason=self.loss_reason,
            level_name=self.level.name,
            time_remaining=self.time_remaining,
        )

    # --- player actions ---

    def move(self, direction: Direction) -> bool:
        if not self.active:
            return False
        if not self.player.attempt_move(direction, self.grid, self.now, self.cfg.player_move_ms):
            return False
        self._check_collision()
        return True

    def flip(self) -> int:
        """Flip at the player's cell. Ignored mid-move or after the session ends."""
        if not self.active or self.player_moving:
            return 0
        return self._apply_flip(*self.player.pos)

    def cancel(self) -> bool:
        if not self.active:
            return False
        self.state = SessionState.ABANDONED
        self._stop_timers()
        logger.info("session abandoned: %s", self.level.name)
        return True

    def advance(self, delta_ms: int) -> None:
        """Move simulation time forward, firing any due timers."""
        if not self.active:
            return
        self.scheduler.advance(delta_ms)

    # --- internals ---

    def _apply_flip(self, col: int, row: int) -> int:
        result = self.grid.flip_at(col, row)
        if result.count == 0:
            return 0
        self.last_flip = result
        self.score += self.cfg.score_tile_flip * result.count
        self.bus.emit(events.TILE_FLIPPED, result.count)
        self.bus.emit(events.FLIP_WAVE, result.stagger_ms(self.cfg.flip_chain_delay_ms))
        if result.is_chain:
            self.score += self.cfg.score_chain_bonus * result.count
            self.bus.emit(events.CHAIN_FLIP, result.count)
        self.bus.emit(events.SCORE_UPDATE, self.score)
        self.bus.emit(events.TILES_UPDATE, self.grid.remaining(), self.grid.total_flippable())
        if self.grid.is_complete():
            self._win()
        return result.count

    def _enemy_tick(self) -> None:
        if not self.active:
            return
        for enemy in self.enemies:
            if enemy.step(self.grid, self.player.pos, self.rng):
                self.bus.emit(events.ENEMY_MOVED, enemy.id, enemy.pos)
        self.bus.emit(events.TILES_UPDATE, self.grid.remaining(), self.grid.total_flippable())
        self._check_collision()

    def _countdown_tick(self) -> None:
        if not self.active:
            return
        self.time_remaining = max(0, self.time_remaining - 1)
        self.bus.emit(events.TIMER_TICK, self.time_remaining)
        if self.time_remaining <= 0:
            self._lose(LOSS_TIME_UP)

    def _check_collision(self) -> None:
        if not self.active:
            return
        for enemy in self.enemies:
            if enemy.is_at(self.player.pos):
                logger.info("caught by %s at %s", enemy.id, self.player.pos)
                self._lose(LOSS_CAUGHT)
                return

    def _stop_timers(self) -> None:
        self.scheduler.cancel(self._enemy_timer)
        self.scheduler.cancel(self._countdown)
        self.scheduler.clear()
        self._enemy_timer = None
        self._countdown = None

    def _win(self) -> None:
        self.state = SessionState.WON
        self._stop_timers()
        if self.level.time_limit > 0 and self.time_remaining > 0:
            self.score += self.cfg.score_time_bonus * self.time_remaining
        self.score += self.cfg.score_level_clear
        logger.info("level won: %s, score %d", self.level.name, self.score)
        self.bus.emit(events.SCORE_UPDATE, self.score)
        self.bus.emit(events.LEVEL_WON, self.score)

    def _lose(self, reason: str) -> None:
        self.state = SessionState.LOST
        self.loss_reason = reason
        self._stop_timers()
        logger.info("level lost (%s): %s, score %d", reason, self.level.name, self.score)
        self.bus.emit(events.LEVEL_LOST, reason, self.score)
