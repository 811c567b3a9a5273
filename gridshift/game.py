from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional

from gridshift import config, events, mapgen
from gridshift.content import levels as level_content
from gridshift.content.levels import LevelData
from gridshift.errors import InvalidSelection, LevelDataError
from gridshift.events import EventBus
from gridshift.rng import new_rng
from gridshift.session import LOSS_CAUGHT, LOSS_TIME_UP, PuzzleSession, SessionState
from gridshift.state.entities import Direction
from gridshift.state.run import RUN_WON, MapNode, RunState
from gridshift.state.saves import HighScoreStore

logger = logging.getLogger(__name__)


class GameMode(str, Enum):
    MENU = "menu"
    MAP = "map"
    PUZZLE = "puzzle"
    GAME_OVER = "game_over"


class Action(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    FLIP = "flip"
    CANCEL = "cancel"


_MOVES = {
    Action.UP: Direction.UP,
    Action.DOWN: Direction.DOWN,
    Action.LEFT: Direction.LEFT,
    Action.RIGHT: Direction.RIGHT,
}

_LOSS_MESSAGES = {
    LOSS_CAUGHT: "CAUGHT!",
    LOSS_TIME_UP: "TIME UP",
}


@dataclass
class MessageLog:
    capacity: int = 200
    messages: deque[str] | None = None

    def __post_init__(self) -> None:
        if self.messages is None:
            self.messages = deque(maxlen=self.capacity)

    def add(self, text: str) -> None:
        self.messages.append(text)

    def tail(self, n: int) -> List[str]:
        if n <= 0:
            return []
        return list(self.messages)[-n:]


class Game:
    """Menu -> map -> puzzle -> map ... -> game over, over one RunState."""

    def __init__(
        self,
        cfg: config.GameConfig,
        rng=None,
        levels: Optional[List[LevelData]] = None,
        levels_path: Path | str | None = None,
        store: Optional[HighScoreStore] = None,
        bus: Optional[EventBus] = None,
    ) -> None:
        self.cfg = cfg
        self.rng = rng if rng is not None else new_rng(cfg.seed)
        self.bus = bus or EventBus()
        self.store = store or HighScoreStore()
        self.log = MessageLog()
        self._levels = levels
        self._levels_path = levels_path

        self.mode = GameMode.MENU
        self.run: Optional[RunState] = None
        self.session: Optional[PuzzleSession] = None
        self.session_node: Optional[MapNode] = None
        self.game_over_message: str = ""
        self.new_high_score = False

        self.bus.on(events.CHAIN_FLIP, self._on_chain)

    # --- state queries ---

    @property
    def high_score(self) -> int:
        return self.store.get_high_score()

    @property
    def score(self) -> int:
        if self.session is not None:
            return self.session.score
        return self.run.score if self.run else 0

    def selectable_ids(self) -> frozenset:
        if self.mode is not GameMode.MAP or self.run is None:
            return frozenset()
        return self.run.selectable_ids()

    def levels(self) -> List[LevelData]:
        """Level list, loaded lazily on first use."""
        if self._levels is None:
            self._levels = level_content.load_levels(self._levels_path)
        if not self._levels:
            raise LevelDataError("Level list is empty")
        return self._levels

    # --- flow ---

    def new_run(self) -> RunState:
        graph = mapgen.generate_map(self.rng, cfg=self.cfg)
        self.run = RunState(graph=graph)
        self.session = None
        self.session_node = None
        self.new_high_score = False
        self.game_over_message = ""
        self.mode = GameMode.MAP
        self.log.add("A new run begins. Choose your path.")
        logger.info("new run: %d map nodes", len(graph.nodes))
        self._emit_selectable()
        return self.run

    def to_menu(self) -> None:
        self._teardown_session()
        self.mode = GameMode.MENU

    def select_node(self, node_id: int) -> MapNode:
        if self.mode is not GameMode.MAP or self.run is None:
            raise InvalidSelection("no map to select from")
        node = self.run.select_node(node_id)

        if not node.kind.has_puzzle:
            reward = self.run.resolve_instant(node, self.cfg)
            self.log.add(f"{node.kind.value.upper()}! +{reward} points")
            self.bus.emit(events.SCORE_UPDATE, self.run.score)
            self._emit_selectable()
            return node

        try:
            available = self.levels()
            index = level_content.pick_level_index(node.kind, len(available), self.rng)
            self.session = PuzzleSession(
                available[index], self.cfg, self.rng, bus=self.bus, start_score=self.run.score,
            )
        except LevelDataError as e:
            logger.error("Could not start puzzle for node %d: %s", node.id, e)
            self.log.add("Level data missing; returning to the menu.")
            self.to_menu()
            return node

        self.session_node = node
        self.mode = GameMode.PUZZLE
        self.log.add(f"Entering {self.session.level.name}.")
        # the opening flip can already finish a trivial level
        self._check_session_end()
        return node

    def handle_action(self, action: Action) -> bool:
        """Route a logical input to the active puzzle. Returns whether it took effect."""
        if self.mode is not GameMode.PUZZLE or self.session is None:
            return False
        if action is Action.CANCEL:
            accepted = self.session.cancel()
        elif action is Action.FLIP:
            accepted = self.session.flip() > 0
        else:
            accepted = self.session.move(_MOVES[action])
        self._check_session_end()
        return accepted

    def update(self, delta_ms: int) -> None:
        """One simulation step of delta_ms."""
        if self.mode is not GameMode.PUZZLE or self.session is None:
            return
        self.session.advance(delta_ms)
        self._check_session_end()

    # --- internals ---

    def _check_session_end(self) -> None:
        session = self.session
        if session is None or session.active:
            return
        outcome = session.outcome()
        node = self.session_node
        self.session = None
        self.session_node = None
        self.run.apply_session(node, outcome)

        if outcome.state is SessionState.WON:
            self.log.add(f"LEVEL COMPLETE! Score {self.run.score}")
            if self.run.outcome == RUN_WON:
                self._game_over("RUN COMPLETE!")
                return
            self.mode = GameMode.MAP
            self._emit_selectable()
        elif outcome.state is SessionState.LOST:
            self._game_over(_LOSS_MESSAGES.get(outcome.reason, "GAME OVER"))
        else:
            self.log.add("You retreat to the map.")
            self.mode = GameMode.MAP
            self._emit_selectable()

    def _game_over(self, message: str) -> None:
        self.mode = GameMode.GAME_OVER
        self.game_over_message = message
        final = self.run.score if self.run else 0
        self.new_high_score = self.store.save_high_score(final)
        self.log.add(f"{message} Final score {final}.")
        if self.new_high_score:
            self.log.add("NEW HIGH SCORE!")
        logger.info("game over: %s score=%d new_high=%s", message, final, self.new_high_score)

    def _teardown_session(self) -> None:
        if self.session is not None:
            self.session.cancel()
        self.session = None
        self.session_node = None

    def _emit_selectable(self) -> None:
        self.bus.emit(events.SELECTABLE_CHANGED, self.selectable_ids())

    def _on_chain(self, count: int) -> None:
        self.log.add(f"CHAIN x{count}!")
