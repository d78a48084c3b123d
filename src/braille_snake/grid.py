"""Occupancy grid for the snake game."""

from __future__ import annotations

import enum

import numpy as np


class CellType(enum.IntEnum):
    """Integer codes stored in the grid array."""

    EMPTY = 0
    SNAKE = 1
    FOOD = 2


class Grid:
    """NumPy-backed occupancy grid.

    Cells are addressed as ``(x, y)`` and stored at ``cells[y, x]``.
    Addressing wraps ``x`` around the width but never wraps ``y``; use
    :meth:`in_bounds` before addressing a coordinate that may have left
    the board.
    """

    def __init__(self, width: int, height: int) -> None:
        if width < 1 or height < 1:
            raise ValueError("Grid dimensions must be at least 1×1.")
        self.width = width
        self.height = height
        self.cells = np.zeros((height, width), dtype=np.int8)

    @property
    def size(self) -> int:
        """Total number of cells."""
        return self.width * self.height

    def clear(self) -> None:
        """Reset all cells to empty."""
        self.cells[:] = CellType.EMPTY

    def in_bounds(self, x: int, y: int) -> bool:
        """Check whether a coordinate lies within the grid, without wrapping."""
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, x: int, y: int) -> CellType:
        """Return the cell type at the given coordinate."""
        return CellType(self.cells[y, x % self.width])

    def set(self, x: int, y: int, cell_type: CellType) -> None:
        """Set the cell type at the given coordinate."""
        self.cells[y, x % self.width] = cell_type

    def occupied(self) -> np.ndarray:
        """Return a boolean ``(height, width)`` mask of non-empty cells."""
        return self.cells != CellType.EMPTY

    def empty_count(self) -> int:
        return int(np.count_nonzero(self.cells == CellType.EMPTY))

    def empty_cells(self) -> list[tuple[int, int]]:
        """Return all empty cell coordinates in row-major scan order."""
        ys, xs = np.where(self.cells == CellType.EMPTY)
        return list(zip(xs.tolist(), ys.tolist(), strict=True))

    def to_dict(self) -> dict:
        """Serialize grid state to a dictionary."""
        return {
            "width": self.width,
            "height": self.height,
            "cells": self.cells.tolist(),
        }
