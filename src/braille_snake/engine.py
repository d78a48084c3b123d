"""Step-based game engine composing grid, snake, and food logic."""

from __future__ import annotations

import enum
import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass

import numpy as np

from braille_snake.bitmap import check_dimensions, encode, format_display
from braille_snake.config import GameConfig
from braille_snake.food import FoodSpawner
from braille_snake.grid import CellType, Grid
from braille_snake.snake import Direction, Snake

logger = logging.getLogger(__name__)

# Only the newest entry is ever consumed, so a short queue is enough.
_MAX_PENDING = 4


class StepOutcome(enum.Enum):
    CONTINUED = "continued"
    RESTARTED = "restarted"


@dataclass(frozen=True)
class StepResult:
    """What a single :meth:`GameEngine.step` did."""

    outcome: StepOutcome
    final_score: int | None = None

    @property
    def restarted(self) -> bool:
        return self.outcome is StepOutcome.RESTARTED


@dataclass(frozen=True)
class RunSummary:
    """Final state of a run, handed to the end-of-run hook."""

    score: int
    bitmap: str
    has_moved: bool


class GameEngine:
    """Single-snake, step-based game engine.

    The engine owns the grid, snake, food spawner and the pending
    direction queue. Each call to :meth:`step` advances the game by one
    tick. A collision is not surfaced as a stopped game: the engine
    reports the finished run to ``on_game_over`` and immediately starts
    a fresh one within the same call.

    :meth:`step` and :meth:`change_direction` must not run concurrently;
    hosts with several threads or tasks serialize them behind one lock.
    """

    def __init__(
        self,
        config: GameConfig | None = None,
        rng: np.random.Generator | None = None,
        on_game_over: Callable[[RunSummary], None] | None = None,
    ) -> None:
        self.config = config if config is not None else GameConfig()
        cfg = self.config
        check_dimensions(cfg.grid_width, cfg.grid_height)
        if not 1 <= cfg.initial_snake_length <= cfg.grid_width:
            raise ValueError(
                "initial_snake_length must be between 1 and the grid width.",
            )
        if cfg.start_interval_ms <= cfg.end_interval_ms:
            raise ValueError(
                "start_interval_ms must be greater than end_interval_ms.",
            )

        self.grid = Grid(width=cfg.grid_width, height=cfg.grid_height)
        self.rng = rng if rng is not None else np.random.default_rng(cfg.seed)
        self.food = FoodSpawner(self.grid, rng=self.rng)
        self.on_game_over = on_game_over

        self.tick = 0
        self.runs = 0
        self.start()

    def start(self) -> None:
        """Reset the board to the initial configuration."""
        cfg = self.config
        self.grid.clear()
        self.snake = Snake(
            cfg.initial_snake_length - 1,
            cfg.grid_height // 2,
            Direction.RIGHT,
            length=cfg.initial_snake_length,
        )
        for x, y in self.snake.body:
            self.grid.set(x, y, CellType.SNAKE)

        self.direction = Direction.RIGHT
        self.pending: deque[Direction] = deque(maxlen=_MAX_PENDING)
        self.has_moved = False
        self.food.spawn()

    @property
    def score(self) -> int:
        return len(self.snake) - self.config.initial_snake_length

    @property
    def tick_interval_ms(self) -> float:
        """Delay before the next tick; shrinks as the snake grows."""
        cfg = self.config
        span = cfg.end_interval_ms - cfg.start_interval_ms
        return cfg.start_interval_ms + len(self.snake) * span / self.grid.size

    def change_direction(self, direction: Direction) -> None:
        """Queue a turn for the next tick, ignoring 180° reversals.

        Any request, including a rejected reversal, counts as the player
        having moved.
        """
        self.has_moved = True
        last = self.pending[0] if self.pending else self.direction
        if not direction.is_opposite(last):
            self.pending.appendleft(direction)

    def step(self) -> StepResult:
        """Advance the game by one tick."""
        self.tick += 1
        if self.pending:
            self.direction = self.pending[0]
            self.pending.clear()

        head_x, head_y = self.snake.head
        dx, dy = self.direction.value
        new_x, new_y = head_x + dx, head_y + dy

        # The tail cell is free to enter: it vacates on this same tick.
        tail = self.snake.tail
        if not self.grid.in_bounds(new_x, new_y) or (
            self.grid.get(new_x, new_y) == CellType.SNAKE
            and (new_x, new_y) != tail
        ):
            return self._end_run()

        ate_food = self.grid.get(new_x, new_y) == CellType.FOOD
        if not ate_food:
            self.snake.body.pop()
            self.grid.set(tail[0], tail[1], CellType.EMPTY)
        self.grid.set(new_x, new_y, CellType.SNAKE)
        self.snake.body.appendleft((new_x, new_y))

        if ate_food:
            self.food.spawn()
        return StepResult(StepOutcome.CONTINUED)

    def bitmap(self) -> str:
        """Encode the current grid as a braille string."""
        return encode(self.grid)

    def display(self) -> str:
        return format_display(self.bitmap(), self.score)

    def get_state(self) -> dict:
        """Return the full, serializable game state."""
        return {
            "tick": self.tick,
            "runs": self.runs,
            "score": self.score,
            "has_moved": self.has_moved,
            "direction": self.direction.name.lower(),
            "tick_interval_ms": self.tick_interval_ms,
            "bitmap": self.bitmap(),
            "display": self.display(),
            "grid": self.grid.to_dict(),
            "snake": self.snake.to_dict(),
            "food": self.food.to_dict(),
        }

    def _end_run(self) -> StepResult:
        summary = RunSummary(
            score=self.score, bitmap=self.bitmap(), has_moved=self.has_moved,
        )
        self.runs += 1
        logger.info(
            "Run %d ended at tick %d with score %d.",
            self.runs, self.tick, summary.score,
        )
        if self.on_game_over is not None:
            self.on_game_over(summary)
        self.start()
        return StepResult(StepOutcome.RESTARTED, final_score=summary.score)
