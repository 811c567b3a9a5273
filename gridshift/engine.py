"""
Engine: owns the frame loop.

Each frame first advances the game by the time that passed since the last
frame, then polls an action source and applies its logical inputs in
order, so every input lands at the current simulation time. Input and
timers never interleave: a move and its collision check finish before the
next input is read, and an enemy tick runs to completion inside
Game.update().
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Iterable, Optional

from gridshift import config
from gridshift.game import Action, Game, GameMode

logger = logging.getLogger(__name__)

ActionSource = Callable[[Game], Iterable[Action]]


class Engine:
    def __init__(
        self,
        cfg: config.GameConfig,
        game: Game,
        actions: ActionSource,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.cfg = cfg
        self.game = game
        self.actions = actions
        self.clock = clock
        self.sleep = sleep
        self.frames = 0
        self._last: Optional[float] = None

    def step(self) -> None:
        """Run one frame: elapsed simulation time first, then inputs."""
        now = self.clock()
        elapsed_ms = 0 if self._last is None else round((now - self._last) * 1000)
        self._last = now
        self.game.update(elapsed_ms)
        # a puzzle that just ended takes no further input
        if self.game.mode is GameMode.PUZZLE:
            for action in self.actions(self.game):
                self.game.handle_action(action)
        self.frames += 1

    def run(self, max_frames: Optional[int] = None) -> None:
        """
        Step until the puzzle in progress is over (back on the map, game over
        or menu) or max_frames is reached.
        """
        frame_s = self.cfg.frame_ms / 1000.0
        while max_frames is None or self.frames < max_frames:
            started = self.clock()
            self.step()
            if self.game.mode is not GameMode.PUZZLE:
                break
            spare = frame_s - (self.clock() - started)
            if spare > 0:
                self.sleep(spare)
        logger.debug("engine stopped after %d frames in mode %s", self.frames, self.game.mode.value)
