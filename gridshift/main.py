"""Console front end: a thin text driver over Game and Engine."""

from __future__ import annotations

import argparse
import logging
from collections import deque
from typing import Callable, Deque, List, Optional

from gridshift import config
from gridshift.engine import Engine
from gridshift.errors import GridshiftError, InvalidSelection
from gridshift.game import Action, Game, GameMode
from gridshift.log import setup_logging
from gridshift.rng import new_rng
from gridshift.state.grid import CellKind
from gridshift.state.saves import HighScoreStore

logger = logging.getLogger(__name__)

KEYS = {
    "w": Action.UP,
    "s": Action.DOWN,
    "a": Action.LEFT,
    "d": Action.RIGHT,
    "f": Action.FLIP,
    " ": Action.FLIP,
    "x": Action.CANCEL,
    ".": None,  # wait one step
}

_GLYPHS = {
    CellKind.OPEN: ".",
    CellKind.FLIPPED: "#",
    CellKind.BLOCK: "X",
    CellKind.HOLE: " ",
}


def render_text(game: Game) -> str:
    session = game.session
    if session is None:
        return ""
    enemy_cells = {e.pos for e in session.enemies}
    lines = []
    for line in session.grid.cells:
        chars = []
        for cell in line:
            if session.player.is_at(cell.pos):
                chars.append("@")
            elif cell.pos in enemy_cells:
                chars.append("E")
            else:
                chars.append(_GLYPHS[cell.kind])
        lines.append(" ".join(chars))
    grid = session.grid
    lines.append(
        f"score {session.score}  tiles {grid.remaining()}/{grid.total_flippable()}"
        f"  time {session.time_remaining or '-'}"
    )
    return "\n".join(lines)


class ConsoleActions:
    """
    Action source for the engine. Each typed key is one action followed by
    one move cooldown of simulated time, so the console plays in steps.
    """

    def __init__(self, cfg: config.GameConfig, read: Callable[[str], str] = input, write: Callable[[str], None] = print) -> None:
        self.cfg = cfg
        self.read = read
        self.write = write
        self.pending: Deque[Optional[Action]] = deque()
        self.virtual_ms = 0

    def clock(self) -> float:
        return self.virtual_ms / 1000.0

    def __call__(self, game: Game) -> List[Action]:
        if not self.pending:
            for message in game.log.tail(3):
                self.write(message)
            self.write(render_text(game))
            line = self.read("wasd move, f flip, x leave, . wait > ").lower()
            self.pending.extend(KEYS[ch] for ch in line if ch in KEYS)
            if not self.pending:
                self.pending.append(None)
        action = self.pending.popleft()
        self.virtual_ms += self.cfg.player_move_ms
        return [action] if action is not None else []


def _play_puzzle(game: Game, cfg: config.GameConfig) -> None:
    source = ConsoleActions(cfg)
    engine = Engine(cfg, game, source, clock=source.clock, sleep=lambda _: None)
    engine.run()


def _choose_node(game: Game) -> bool:
    run = game.run
    print(f"SCORE: {run.score}")
    for nid in sorted(game.selectable_ids()):
        node = run.graph.node(nid)
        print(f"  [{nid}] row {node.row}: {node.kind.value}")
    choice = input("choose a node (q to quit) > ").strip().lower()
    if choice == "q":
        return False
    try:
        game.select_node(int(choice))
    except (ValueError, InvalidSelection):
        print("Not a selectable node.")
    return True


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="gridshift", description="Tile-flip roguelike puzzle")
    parser.add_argument("--seed", type=int, default=None, help="RNG seed (default: config seed)")
    parser.add_argument("--levels", default=None, help="path to a level YAML file")
    parser.add_argument("--config", default=None, help="path to a YAML config override file")
    parser.add_argument("--save", default=None, help="path to the high score save file")
    parser.add_argument("-v", "--verbose", action="store_true", help="log to stderr too")
    args = parser.parse_args(argv)

    setup_logging(verbose=args.verbose)
    try:
        overrides = {"seed": args.seed} if args.seed is not None else {}
        cfg = config.load_config(args.config, **overrides)
    except GridshiftError as e:
        logger.error("%s", e)
        return 2

    game = Game(
        cfg,
        rng=new_rng(cfg.seed),
        levels_path=args.levels,
        store=HighScoreStore(args.save),
    )
    print(f"GRIDSHIFT  high score {game.high_score}")
    try:
        game.new_run()
        while True:
            if game.mode is GameMode.MAP:
                if not _choose_node(game):
                    break
            elif game.mode is GameMode.PUZZLE:
                _play_puzzle(game, cfg)
            elif game.mode is GameMode.GAME_OVER:
                for message in game.log.tail(3):
                    print(message)
                print(f"HIGH SCORE: {game.high_score}")
                if input("n for a new run, anything else quits > ").strip().lower() != "n":
                    break
                game.new_run()
            else:
                print("Back at the menu.")
                break
    except (EOFError, KeyboardInterrupt):
        print()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
