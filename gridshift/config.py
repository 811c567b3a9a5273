from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict

import yaml

from gridshift.errors import ConfigError


default_seed = 12345


@dataclass(frozen=True)
class GameConfig:
    # grid
    grid_cols: int = 8
    grid_rows: int = 7
    # timing (simulation milliseconds)
    player_move_ms: int = 120       # move cooldown; one move in flight at a time
    enemy_move_interval_ms: int = 1500
    countdown_interval_ms: int = 1000
    flip_chain_delay_ms: int = 50   # per-distance delay in flip-wave events
    # scoring
    score_tile_flip: int = 10
    score_chain_bonus: int = 25     # per tile in a chain
    score_level_clear: int = 500
    score_time_bonus: int = 5       # per second remaining
    # map (roguelike)
    map_rows: int = 5
    map_min_nodes: int = 2
    map_max_nodes: int = 4
    chest_reward: int = 300
    campfire_reward: int = 100
    # engine
    frame_ms: int = 16
    seed: int | None = default_seed


def load_config(path: Path | str | None = None, **overrides: Any) -> GameConfig:
    """Build a GameConfig from defaults, an optional YAML file and keyword overrides."""
    values: Dict[str, Any] = {}
    if path is not None:
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigError(f"Config file malformed: {path}: {e}") from e
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config file must be a mapping: {path}")
        values.update(data)
    values.update(overrides)

    known = {f.name for f in fields(GameConfig)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")

    cfg = replace(GameConfig(), **values)
    _validate(cfg)
    return cfg


def _validate(cfg: GameConfig) -> None:
    if cfg.grid_cols <= 0 or cfg.grid_rows <= 0:
        raise ConfigError("grid dimensions must be positive")
    if cfg.map_rows < 1:
        raise ConfigError("map_rows must be at least 1")
    if not 1 <= cfg.map_min_nodes <= cfg.map_max_nodes:
        raise ConfigError("map node bounds must satisfy 1 <= min <= max")
    if cfg.enemy_move_interval_ms <= 0 or cfg.countdown_interval_ms <= 0:
        raise ConfigError("timer intervals must be positive")
