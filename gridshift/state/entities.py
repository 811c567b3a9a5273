# gridshift/state/entities.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

Pos = Tuple[int, int]  # (col, row)


class Direction(Enum):
    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def dc(self) -> int:
        return self.value[0]

    @property
    def dr(self) -> int:
        return self.value[1]

    def step(self, pos: Pos) -> Pos:
        return (pos[0] + self.dc, pos[1] + self.dr)


# Evaluation order for anything that walks all four directions.
DIRECTIONS: Tuple[Direction, ...] = (
    Direction.UP,
    Direction.DOWN,
    Direction.LEFT,
    Direction.RIGHT,
)


@dataclass
class Entity:
    """Generic thing that occupies a grid cell.

    The player and every enemy are Entities; position is logical
    (col, row) and changes only through discrete steps.
    """
    id: str
    pos: Pos
    kind: str = "generic"

    @property
    def col(self) -> int:
        return self.pos[0]

    @property
    def row(self) -> int:
        return self.pos[1]

    def is_at(self, pos: Pos) -> bool:
        return self.pos == tuple(pos)
