"""Tests for the braille bitmap encoder."""

import numpy as np
import pytest

from braille_snake.bitmap import (
    BRAILLE_BASE,
    check_dimensions,
    decode,
    encode,
    format_display,
)
from braille_snake.grid import CellType, Grid


class TestEncode:
    @pytest.mark.parametrize(
        ("x", "y", "bit"),
        [
            (0, 0, 0x01),
            (0, 1, 0x02),
            (0, 2, 0x04),
            (1, 0, 0x08),
            (1, 1, 0x10),
            (1, 2, 0x20),
            (0, 3, 0x40),
            (1, 3, 0x80),
        ],
    )
    def test_single_dot_layout(self, x, y, bit):
        grid = Grid(width=2, height=4)
        grid.set(x, y, CellType.SNAKE)
        assert encode(grid) == chr(BRAILLE_BASE + bit)

    def test_two_dot_block(self):
        grid = Grid(width=2, height=4)
        grid.set(0, 1, CellType.SNAKE)
        grid.set(1, 3, CellType.SNAKE)
        assert encode(grid) == chr(BRAILLE_BASE + 0b10000010)
        assert ord(encode(grid)) - BRAILLE_BASE == 130

    def test_empty_and_full(self):
        grid = Grid(width=40, height=4)
        assert encode(grid) == "⠀" * 20
        grid.cells[:] = CellType.SNAKE
        assert encode(grid) == "⣿" * 20

    def test_food_counts_as_occupied(self):
        grid = Grid(width=2, height=4)
        grid.set(1, 0, CellType.FOOD)
        assert encode(grid) == chr(BRAILLE_BASE + 0x08)

    def test_blocks_in_ascending_x(self):
        grid = Grid(width=6, height=4)
        grid.set(0, 0, CellType.SNAKE)
        grid.set(5, 3, CellType.SNAKE)
        assert encode(grid) == "⠁⠀⢀"

    def test_initial_snake_row(self):
        grid = Grid(width=40, height=4)
        for x in range(4):
            grid.set(x, 2, CellType.SNAKE)
        bitmap = encode(grid)
        assert bitmap[:2] == "⠤⠤"
        assert bitmap[2:] == "⠀" * 18

    def test_pure_and_fixed_width(self):
        grid = Grid(width=40, height=4)
        grid.set(7, 1, CellType.SNAKE)
        before = grid.cells.copy()
        first = encode(grid)
        assert encode(grid) == first
        assert len(first) == 20
        assert np.array_equal(grid.cells, before)


class TestDecode:
    def test_recovers_occupancy(self):
        grid = Grid(width=8, height=4)
        grid.set(0, 1, CellType.SNAKE)
        grid.set(5, 3, CellType.FOOD)
        grid.set(7, 0, CellType.SNAKE)
        assert np.array_equal(decode(encode(grid)), grid.occupied())

    def test_rejects_non_braille(self):
        with pytest.raises(ValueError, match="braille"):
            decode("ab")


class TestCheckDimensions:
    def test_accepts_even_width(self):
        check_dimensions(40, 4)

    @pytest.mark.parametrize(("width", "height"), [(40, 3), (40, 8), (39, 4), (0, 4)])
    def test_rejects(self, width, height):
        with pytest.raises(ValueError):
            check_dimensions(width, height)


class TestFormatDisplay:
    def test_wraps_bitmap_and_score(self):
        assert format_display("⠤", 3) == "#|⠤|[score:3]"
