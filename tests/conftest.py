"""Shared fixtures and level builders for the gridshift tests."""

from __future__ import annotations

from dataclasses import replace
from typing import Sequence

import pytest

from gridshift.config import GameConfig
from gridshift.content.levels import EnemySpawn, LevelData
from gridshift.rng import new_rng
from gridshift.state.actors import EnemyKind, PacerAxis


def make_level(
    grid: Sequence[Sequence[int]],
    start=(0, 0),
    enemies: Sequence[EnemySpawn] = (),
    time_limit: int = 0,
    name: str = "test",
) -> LevelData:
    return LevelData(
        name=name,
        grid=tuple(tuple(row) for row in grid),
        player_start=tuple(start),
        enemies=tuple(enemies),
        time_limit=time_limit,
    )


def spawn(kind: str, col: int, row: int, axis: str = "horizontal") -> EnemySpawn:
    return EnemySpawn(kind=EnemyKind(kind), col=col, row=row, axis=PacerAxis(axis))


def config_for(grid: Sequence[Sequence[int]], **overrides) -> GameConfig:
    return replace(GameConfig(), grid_cols=len(grid[0]), grid_rows=len(grid), **overrides)


def open_grid(cols: int, rows: int) -> list:
    return [[0] * cols for _ in range(rows)]


@pytest.fixture()
def cfg() -> GameConfig:
    return GameConfig()


@pytest.fixture()
def rng():
    return new_rng(1234)
