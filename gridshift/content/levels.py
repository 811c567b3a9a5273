from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Tuple

import yaml

from gridshift.errors import LevelDataError
from gridshift.state.actors import Enemy, EnemyKind, PacerAxis
from gridshift.state.entities import Pos
from gridshift.state.grid import PUSH_BLOCK_CODE, CellKind
from gridshift.state.run import NodeKind

logger = logging.getLogger(__name__)

DEFAULT_LEVELS_PATH = Path(__file__).resolve().parent / "levels.yaml"

_VALID_CODES = {int(k) for k in CellKind} | {PUSH_BLOCK_CODE}
_BLOCKING_CODES = {int(CellKind.BLOCK), int(CellKind.HOLE), PUSH_BLOCK_CODE}


@dataclass(frozen=True)
class EnemySpawn:
    kind: EnemyKind
    col: int
    row: int
    axis: PacerAxis = PacerAxis.HORIZONTAL

    def spawn(self, enemy_id: str) -> Enemy:
        return Enemy(
            id=enemy_id,
            pos=(self.col, self.row),
            enemy_kind=self.kind,
            axis=self.axis,
        )


@dataclass(frozen=True)
class LevelData:
    name: str
    grid: Tuple[Tuple[int, ...], ...]  # grid[row][col] -> cell code
    player_start: Pos
    enemies: Tuple[EnemySpawn, ...] = ()
    time_limit: int = 0  # seconds; 0 = unlimited


def _field(entry: dict, *keys: str, default: Any = None) -> Any:
    # level files may use snake_case or the camelCase of older exports
    for key in keys:
        if key in entry:
            return entry[key]
    return default


def _build_spawn(raw: Any, where: str) -> EnemySpawn:
    if not isinstance(raw, dict):
        raise LevelDataError(f"{where}: enemy entry must be a mapping")
    try:
        kind = EnemyKind(str(_field(raw, "type", "kind")).lower())
    except ValueError as e:
        raise LevelDataError(f"{where}: unknown enemy type {raw.get('type')!r}") from e
    try:
        axis = PacerAxis(str(raw.get("axis") or PacerAxis.HORIZONTAL.value).lower())
    except ValueError as e:
        raise LevelDataError(f"{where}: unknown pacer axis {raw.get('axis')!r}") from e
    try:
        return EnemySpawn(kind=kind, col=int(raw["col"]), row=int(raw["row"]), axis=axis)
    except (KeyError, TypeError, ValueError) as e:
        raise LevelDataError(f"{where}: enemy needs integer col/row") from e


def _check_standable(grid: List[Tuple[int, ...]], pos: Pos, what: str) -> None:
    # cells past the authored rows load as OPEN
    col, row = pos
    if col < 0 or row < 0:
        raise LevelDataError(f"{what} {pos} has a negative coordinate")
    if row < len(grid) and col < len(grid[row]) and grid[row][col] in _BLOCKING_CODES:
        raise LevelDataError(f"{what} {pos} is not walkable")


def _build_level(entry: Any, index: int) -> LevelData:
    where = f"level {index}"
    if not isinstance(entry, dict):
        raise LevelDataError(f"{where}: expected a mapping")
    name = str(entry.get("name") or f"Level {index + 1}")
    where = f"level {index} ({name})"

    raw_grid = entry.get("grid")
    if not raw_grid or not isinstance(raw_grid, list):
        raise LevelDataError(f"{where}: missing 'grid'")
    grid: List[Tuple[int, ...]] = []
    for r, line in enumerate(raw_grid):
        if not isinstance(line, list):
            raise LevelDataError(f"{where}: grid row {r} is not a list")
        try:
            codes = tuple(int(code) for code in line)
        except (TypeError, ValueError) as e:
            raise LevelDataError(f"{where}: grid row {r} has a non-integer code") from e
        bad = set(codes) - _VALID_CODES
        if bad:
            raise LevelDataError(f"{where}: grid row {r} has unknown codes {sorted(bad)}")
        grid.append(codes)

    start = _field(entry, "player_start", "playerStart")
    if not isinstance(start, dict):
        raise LevelDataError(f"{where}: missing 'player_start'")
    try:
        player_start = (int(start["col"]), int(start["row"]))
    except (KeyError, TypeError, ValueError) as e:
        raise LevelDataError(f"{where}: player_start needs integer col/row") from e
    _check_standable(grid, player_start, f"{where}: player_start")

    enemies = tuple(
        _build_spawn(raw, where) for raw in (entry.get("enemies") or [])
    )
    for i, spawn in enumerate(enemies):
        _check_standable(grid, (spawn.col, spawn.row), f"{where}: enemy {i}")
    try:
        time_limit = int(_field(entry, "time_limit", "timeLimit", default=0) or 0)
    except (TypeError, ValueError) as e:
        raise LevelDataError(f"{where}: time_limit must be an integer") from e
    if time_limit < 0:
        raise LevelDataError(f"{where}: time_limit must not be negative")

    return LevelData(
        name=name,
        grid=tuple(grid),
        player_start=player_start,
        enemies=enemies,
        time_limit=time_limit,
    )


def parse_levels(data: Any, source: str = "<data>") -> List[LevelData]:
    """Build levels from already-parsed YAML/JSON content."""
    if isinstance(data, dict):
        data = data.get("levels")
    if not data or not isinstance(data, list):
        raise LevelDataError(f"No levels found in {source}")
    return [_build_level(entry, i) for i, entry in enumerate(data)]


def load_levels(path: Path | str | None = None) -> List[LevelData]:
    """Load the ordered level list from YAML (JSON level files parse too)."""
    path = Path(path) if path is not None else DEFAULT_LEVELS_PATH
    if not path.exists():
        raise LevelDataError(f"Level file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (yaml.YAMLError, OSError) as e:
        raise LevelDataError(f"Level file unreadable: {path}: {e}") from e
    levels = parse_levels(data, source=str(path))
    logger.info("loaded %d levels from %s", len(levels), path)
    return levels


def pick_level_index(kind: NodeKind, total: int, rng) -> int:
    """
    Map a node kind to a level index:
      - PUZZLE: uniform over the first 70% of the list
      - ELITE: uniform over the last 40%
      - BOSS: always the final (hardest) level
    """
    if total <= 0:
        raise LevelDataError("No levels to pick from")
    last = total - 1
    if kind is NodeKind.BOSS:
        return last
    if kind is NodeKind.ELITE:
        return rng.randint(min(math.floor(total * 0.6), last), last)
    return rng.randint(0, min(math.floor(total * 0.7), last))
