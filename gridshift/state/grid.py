from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, Iterator, List, Optional, Sequence

from gridshift.state.entities import DIRECTIONS, Pos

logger = logging.getLogger(__name__)


class CellKind(IntEnum):
    """Cell kind tags; values are the codes used in level data."""
    OPEN = 0
    FLIPPED = 1
    BLOCK = 2
    HOLE = 3

    @property
    def eligible(self) -> bool:
        return self in (CellKind.OPEN, CellKind.FLIPPED)


# Reserved level code for a pushable block. Nothing pushes it; it loads as BLOCK.
PUSH_BLOCK_CODE = 4


def kind_from_code(code: int) -> CellKind:
    if code == PUSH_BLOCK_CODE:
        logger.warning("Pushable block (code 4) is not implemented; loading as BLOCK")
        return CellKind.BLOCK
    return CellKind(code)


@dataclass
class Cell:
    col: int
    row: int
    kind: CellKind = CellKind.OPEN
    flipped: bool = False

    def __post_init__(self) -> None:
        # keep the two views of flip state in step
        self.flipped = self.kind is CellKind.FLIPPED

    @property
    def pos(self) -> Pos:
        return (self.col, self.row)

    @property
    def eligible(self) -> bool:
        return self.kind.eligible

    def flip(self) -> bool:
        """Open -> Flipped. Returns True only if the cell changed."""
        if self.kind is not CellKind.OPEN:
            return False
        self.kind = CellKind.FLIPPED
        self.flipped = True
        return True

    def unflip(self) -> bool:
        """Flipped -> Open. Returns True only if the cell changed."""
        if self.kind is not CellKind.FLIPPED:
            return False
        self.kind = CellKind.OPEN
        self.flipped = False
        return True


@dataclass
class FlipResult:
    """Outcome of one flip_at call.

    ``flipped`` lists the cells that went Open -> Flipped, anchor first and
    then each direction's run nearest-first. ``distances`` maps each of those
    cells to its distance from the anchor, for callers that stagger a wave.
    """
    anchor: Pos
    flipped: List[Cell] = field(default_factory=list)
    distances: Dict[Pos, int] = field(default_factory=dict)

    @property
    def count(self) -> int:
        return len(self.flipped)

    @property
    def is_chain(self) -> bool:
        return self.count > 1

    def stagger_ms(self, delay_ms: int) -> Dict[Pos, int]:
        return {pos: dist * delay_ms for pos, dist in self.distances.items()}


def _make_grid(cols: int, rows: int, codes: Optional[Sequence[Sequence[int]]]) -> List[List[Cell]]:
    cells: List[List[Cell]] = []
    for row in range(rows):
        line = codes[row] if codes is not None and row < len(codes) else ()
        cells.append([
            Cell(col, row, kind_from_code(line[col]) if col < len(line) else CellKind.OPEN)
            for col in range(cols)
        ])
    return cells


class GridModel:
    """Rectangular cell array plus the chain-flip rule."""

    def __init__(self, cols: int, rows: int, codes: Optional[Sequence[Sequence[int]]] = None) -> None:
        self.cols = cols
        self.rows = rows
        self.cells = _make_grid(cols, rows, codes)

    @classmethod
    def from_level(cls, level, cols: int, rows: int) -> "GridModel":
        return cls(cols, rows, level.grid)

    # --- queries ---

    def in_bounds(self, col: int, row: int) -> bool:
        return 0 <= col < self.cols and 0 <= row < self.rows

    def get_cell(self, col: int, row: int) -> Optional[Cell]:
        if not self.in_bounds(col, row):
            return None
        return self.cells[row][col]

    def is_flippable(self, col: int, row: int) -> bool:
        cell = self.get_cell(col, row)
        return bool(cell and cell.eligible)

    def is_walkable(self, col: int, row: int) -> bool:
        # Flipped tiles are still floor; only flip state differs.
        return self.is_flippable(col, row)

    def __iter__(self) -> Iterator[Cell]:
        for line in self.cells:
            yield from line

    def remaining(self) -> int:
        return sum(1 for cell in self if cell.kind is CellKind.OPEN)

    def total_flippable(self) -> int:
        return sum(1 for cell in self if cell.eligible)

    def is_complete(self) -> bool:
        return self.remaining() == 0

    # --- chain flip ---

    def find_chains(self, col: int, row: int) -> List[List[Cell]]:
        """Runs of not-yet-flipped cells that a flip at (col, row) would pull in.

        A run only counts if walking outward reaches an already-flipped cell
        before a Block/Hole or the edge. Directions are walked in DIRECTIONS
        order and each run is nearest-first.
        """
        chains: List[List[Cell]] = []
        for direction in DIRECTIONS:
            run: List[Cell] = []
            c, r = direction.step((col, row))
            while True:
                cell = self.get_cell(c, r)
                if cell is None or not cell.eligible:
                    break
                if cell.flipped:
                    if run:
                        chains.append(run)
                    break
                run.append(cell)
                c, r = direction.step((c, r))
        return chains

    def flip_at(self, col: int, row: int) -> FlipResult:
        result = FlipResult(anchor=(col, row))
        anchor = self.get_cell(col, row)
        if anchor is None or not anchor.eligible:
            return result

        chains = self.find_chains(col, row)
        if anchor.flip():
            result.flipped.append(anchor)
            result.distances[anchor.pos] = 0
        for run in chains:
            for dist, cell in enumerate(run, start=1):
                if cell.flip():
                    result.flipped.append(cell)
                    result.distances[cell.pos] = dist

        if result.count:
            logger.debug(
                "flip at %s: %d tile(s)%s", result.anchor, result.count,
                " (chain)" if result.is_chain else "",
            )
        return result

    def unflip_at(self, col: int, row: int) -> bool:
        """Revert a single flipped cell. Never cascades."""
        cell = self.get_cell(col, row)
        return bool(cell and cell.unflip())

    def as_codes(self) -> List[List[int]]:
        return [[int(cell.kind) for cell in line] for line in self.cells]
