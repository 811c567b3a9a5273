from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, DefaultDict, List

logger = logging.getLogger(__name__)


# --- Event names ---------------------------------------------------------

TILE_FLIPPED = "tile-flipped"            # (count)
CHAIN_FLIP = "chain-flip"                # (count)
FLIP_WAVE = "flip-wave"                  # ({pos: delay_ms}) per newly flipped cell
SCORE_UPDATE = "score-update"            # (score)
TILES_UPDATE = "tiles-update"            # (remaining, total)
TIMER_TICK = "timer-tick"                # (seconds_remaining)
ENEMY_MOVED = "enemy-moved"              # (enemy_id, pos)
LEVEL_WON = "level-won"                  # (score)
LEVEL_LOST = "level-lost"                # (reason, score)
SELECTABLE_CHANGED = "selectable-changed"  # (frozenset of node ids)


@dataclass
class EventRecord:
    name: str
    args: tuple


Listener = Callable[..., Any]


class EventBus:
    """One-way notifications from the simulation to whoever listens.

    Return values are ignored. A failing listener is logged and skipped so
    presentation bugs cannot corrupt the game state.
    """

    def __init__(self) -> None:
        self._listeners: DefaultDict[str, List[Listener]] = defaultdict(list)

    def on(self, name: str, listener: Listener) -> None:
        self._listeners[name].append(listener)

    def off(self, name: str, listener: Listener) -> None:
        try:
            self._listeners[name].remove(listener)
        except ValueError:
            pass

    def emit(self, name: str, *args: Any) -> None:
        for listener in list(self._listeners.get(name, ())):
            try:
                listener(*args)
            except Exception:
                logger.exception("Listener for %r failed", name)


class EventRecorder:
    """Listener that keeps every event it hears, in order."""

    def __init__(self, bus: EventBus, names: List[str]) -> None:
        self.records: List[EventRecord] = []
        for name in names:
            bus.on(name, self._make(name))

    def _make(self, name: str) -> Listener:
        def record(*args: Any) -> None:
            self.records.append(EventRecord(name, args))
        return record

    def named(self, name: str) -> List[tuple]:
        return [r.args for r in self.records if r.name == name]
