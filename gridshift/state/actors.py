from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from gridshift.state.entities import Direction, Entity, Pos
from gridshift.state.grid import GridModel

logger = logging.getLogger(__name__)


class EnemyKind(str, Enum):
    WANDERER = "wanderer"   # moves randomly
    CHASER = "chaser"       # moves toward player
    PACER = "pacer"         # paces back and forth


class PacerAxis(str, Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


@dataclass
class Player(Entity):
    """The one player actor of a puzzle session."""
    kind: str = "player"
    # simulation time (ms) until which the current move is still in flight
    cooldown_until: int = 0

    def moving(self, now: int) -> bool:
        return now < self.cooldown_until

    def attempt_move(self, direction: Direction, grid: GridModel, now: int, cooldown_ms: int) -> bool:
        """Step one cell. False if a move is in flight or the cell is not walkable."""
        if self.moving(now):
            return False
        dest = direction.step(self.pos)
        if not grid.is_walkable(*dest):
            return False
        self.pos = dest
        self.cooldown_until = now + cooldown_ms
        return True


@dataclass
class Enemy(Entity):
    """A tile-eating enemy. Axis and direction are only used by pacers."""
    kind: str = "enemy"
    enemy_kind: EnemyKind = EnemyKind.WANDERER
    axis: PacerAxis = PacerAxis.HORIZONTAL
    direction: int = 1  # +1 or -1 along axis

    def step(self, grid: GridModel, player_pos: Pos, rng) -> bool:
        """Take one policy step. Landing on a flipped cell unflips it."""
        from gridshift.systems import ai

        dest = ai.choose_move(self, grid, player_pos, rng)
        if dest is None:
            return False
        self.pos = dest
        if grid.unflip_at(*dest):
            logger.debug("%s unflipped %s", self.id, dest)
        return True
