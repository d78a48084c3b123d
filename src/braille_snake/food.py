"""Food placement logic."""

from __future__ import annotations

import logging

import numpy as np

from braille_snake.grid import CellType, Grid

logger = logging.getLogger(__name__)


class FoodSpawner:
    """Places the single food cell uniformly among empty cells.

    Uses a seeded NumPy RNG for deterministic, reproducible placement.
    """

    def __init__(
        self,
        grid: Grid,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.grid = grid
        self.rng = rng if rng is not None else np.random.default_rng()
        self.position: tuple[int, int] | None = None

    def spawn(self) -> tuple[int, int] | None:
        """Drop food on a uniformly chosen empty cell.

        Draws a counter in ``[0, empty)`` and takes the empty cell with
        that rank in row-major scan order. Returns the new position, or
        ``None`` when the snake fills the whole grid.
        """
        flat = self.grid.cells.ravel()
        empty = np.flatnonzero(flat == CellType.EMPTY)
        if empty.size == 0:
            logger.debug("Grid is full; no food placed.")
            self.position = None
            return None

        counter = int(self.rng.integers(empty.size))
        y, x = divmod(int(empty[counter]), self.grid.width)
        self.grid.set(x, y, CellType.FOOD)
        self.position = (x, y)
        return self.position

    def to_dict(self) -> dict:
        """Serialize food state to a dictionary."""
        return {
            "position": list(self.position) if self.position else None,
        }
