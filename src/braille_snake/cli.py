"""Command line tools for Braille Snake."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
import time
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from braille_snake.config import GameConfig

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="braille-snake",
        description="Braille Snake simulation and high-score tools.",
    )
    sub = parser.add_subparsers(dest="command", help="Available commands.")

    # --- simulate ---
    sim_p = sub.add_parser(
        "simulate", help="Run the game headless and print every frame.",
    )
    sim_p.add_argument(
        "--config", type=str, default=None,
        help="Path to a JSON config file.",
    )
    sim_p.add_argument("--ticks", type=int, default=100)
    sim_p.add_argument("--seed", type=int, default=None)
    sim_p.add_argument(
        "--turn-every", type=int, default=0,
        help="Turn in a random direction every N ticks (0 never turns).",
    )
    sim_p.add_argument(
        "--realtime", action="store_true",
        help="Pace ticks by wall-clock time like the browser game.",
    )
    sim_p.add_argument("--highscore", type=str, default=None)

    # --- highscore ---
    hs_p = sub.add_parser("highscore", help="Show the best recorded run.")
    hs_p.add_argument("--highscore", type=str, default=None)
    hs_p.add_argument(
        "--reset", action="store_true", help="Forget the stored record.",
    )

    return parser


def _load_config(args: argparse.Namespace) -> GameConfig:
    from braille_snake.config import GameConfig

    config_path = getattr(args, "config", None)
    config = GameConfig.load(config_path) if config_path else GameConfig()

    overrides: dict = {}
    if getattr(args, "seed", None) is not None:
        overrides["seed"] = args.seed
    if args.highscore is not None:
        overrides["highscore_path"] = args.highscore
    if overrides:
        config = dataclasses.replace(config, **overrides)
    return config


def _run_simulate(args: argparse.Namespace) -> int:
    from braille_snake.driver import TickDriver
    from braille_snake.engine import GameEngine
    from braille_snake.highscore import HighScoreStore
    from braille_snake.snake import Direction

    if args.ticks < 0 or args.turn_every < 0:
        logger.error("--ticks and --turn-every must not be negative.")
        return 2

    config = _load_config(args)
    store = HighScoreStore(config.highscore_path)
    engine = GameEngine(config, on_game_over=store.record)
    turns = np.random.default_rng(config.seed)
    directions = list(Direction)

    def maybe_turn() -> None:
        if args.turn_every and engine.tick % args.turn_every == 0:
            engine.change_direction(directions[turns.integers(len(directions))])

    if args.realtime:
        driver = TickDriver(engine, print, paused=False)
        frame_interval = config.frame_interval_ms / 1000.0
        while engine.tick < args.ticks:
            if driver.poll() is not None:
                maybe_turn()
            time.sleep(frame_interval)
    else:
        for _ in range(args.ticks):
            maybe_turn()
            result = engine.step()
            print(engine.display())  # noqa: T201
            if result.restarted:
                logger.info("Restarted after score %d.", result.final_score)

    print(f"Best score: {store.best.score}")  # noqa: T201
    return 0


def _run_highscore(args: argparse.Namespace) -> int:
    from braille_snake.bitmap import decode, format_display
    from braille_snake.highscore import HighScoreStore

    config = _load_config(args)
    store = HighScoreStore(config.highscore_path)
    if args.reset:
        store.reset()
        print("High score reset.")  # noqa: T201
        return 0

    best = store.best
    print(format_display(best.bitmap, best.score))  # noqa: T201
    if best.bitmap:
        for row in decode(best.bitmap):
            print("".join("#" if cell else "." for cell in row))  # noqa: T201
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``braille-snake`` CLI."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    handlers = {
        "simulate": _run_simulate,
        "highscore": _run_highscore,
    }
    return handlers[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
