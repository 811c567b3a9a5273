"""Enemy movement policies and dispatcher.

Each policy looks at the grid and the player's position and returns the
cell the enemy should step to, or None to stay put. Policies never mutate
the grid; Enemy.step applies the move and the unflip.
"""

from typing import List, Optional

from gridshift.rng import RNG
from gridshift.state.actors import Enemy, EnemyKind, PacerAxis
from gridshift.state.entities import DIRECTIONS, Pos
from gridshift.state.grid import GridModel


def choose_move(enemy: Enemy, grid: GridModel, player_pos: Pos, rng: RNG) -> Optional[Pos]:
    """Dispatch on enemy.enemy_kind. Unknown kinds stand still."""
    if enemy.enemy_kind is EnemyKind.WANDERER:
        return _wanderer(enemy, grid, rng)
    if enemy.enemy_kind is EnemyKind.CHASER:
        return _chaser(enemy, grid, player_pos, rng)
    if enemy.enemy_kind is EnemyKind.PACER:
        return _pacer(enemy, grid)
    return None


def _first_walkable(grid: GridModel, candidates: List[Pos]) -> Optional[Pos]:
    for pos in candidates:
        if grid.is_walkable(*pos):
            return pos
    return None


def _sign(n: int) -> int:
    return (n > 0) - (n < 0)


def _wanderer(enemy: Enemy, grid: GridModel, rng: RNG) -> Optional[Pos]:
    """Try the four directions in random order."""
    return _first_walkable(grid, [d.step(enemy.pos) for d in rng.shuffled(DIRECTIONS)])


def _chaser(enemy: Enemy, grid: GridModel, player_pos: Pos, rng: RNG) -> Optional[Pos]:
    """
    Close the column gap first, then the row gap. When one axis is already
    lined up, also try a random perpendicular sidestep instead of waiting.
    """
    col, row = enemy.pos
    dx = _sign(player_pos[0] - col)
    dy = _sign(player_pos[1] - row)

    candidates: List[Pos] = []
    if dx != 0:
        candidates.append((col + dx, row))
    if dy != 0:
        candidates.append((col, row + dy))
    if dx == 0 and dy != 0:
        candidates.append((col + rng.sign(), row))
    if dy == 0 and dx != 0:
        candidates.append((col, row + rng.sign()))
    return _first_walkable(grid, candidates)


def _pacer(enemy: Enemy, grid: GridModel) -> Optional[Pos]:
    """Step along the fixed axis; on a block reverse once and retry."""
    horizontal = enemy.axis is PacerAxis.HORIZONTAL

    def ahead() -> Pos:
        col, row = enemy.pos
        if horizontal:
            return (col + enemy.direction, row)
        return (col, row + enemy.direction)

    dest = ahead()
    if grid.is_walkable(*dest):
        return dest
    enemy.direction *= -1
    dest = ahead()
    if grid.is_walkable(*dest):
        return dest
    return None
