"""Grid, actors, run and save state."""

from .grid import Cell, CellKind, FlipResult, GridModel
from .actors import Enemy, EnemyKind, PacerAxis, Player
from .run import MapGraph, MapNode, NodeKind, RunState

__all__ = [
    "Cell",
    "CellKind",
    "FlipResult",
    "GridModel",
    "Enemy",
    "EnemyKind",
    "PacerAxis",
    "Player",
    "MapGraph",
    "MapNode",
    "NodeKind",
    "RunState",
]
