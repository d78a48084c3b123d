"""Braille bitmap encoding of the occupancy grid.

Unicode Braille patterns are 256 contiguous code points from U+2800 to
U+28FF. Each glyph shows a 2-wide by 4-tall block of dots, numbered from
the least significant bit as::

    0  3
    1  4
    2  5
    6  7

so a 40×4 grid fits in 20 glyphs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from braille_snake.grid import Grid

BRAILLE_BASE = 0x2800
CELL_ROWS = 4
CELL_COLS = 2

# Bit index -> (dx, dy) inside a 2×4 block.
DOT_OFFSETS: tuple[tuple[int, int], ...] = (
    (0, 0),
    (0, 1),
    (0, 2),
    (1, 0),
    (1, 1),
    (1, 2),
    (0, 3),
    (1, 3),
)


def check_dimensions(width: int, height: int) -> None:
    """Raise ``ValueError`` unless the grid can be encoded exactly."""
    if height != CELL_ROWS:
        raise ValueError(f"Grid height must be {CELL_ROWS}, got {height}.")
    if width < CELL_COLS or width % CELL_COLS:
        raise ValueError(f"Grid width must be a positive even number, got {width}.")


def encode_mask(occupied: np.ndarray) -> str:
    """Encode a boolean ``(4, width)`` mask into ``width // 2`` glyphs."""
    chars = []
    for x in range(0, occupied.shape[1], CELL_COLS):
        n = 0
        for bit, (dx, dy) in enumerate(DOT_OFFSETS):
            if occupied[dy, x + dx]:
                n |= 1 << bit
        chars.append(chr(BRAILLE_BASE + n))
    return "".join(chars)


def encode(grid: Grid) -> str:
    """Encode the grid's occupancy; snake and food both show as dots."""
    return encode_mask(grid.occupied())


def decode(text: str) -> np.ndarray:
    """Expand an encoded bitmap back into a boolean ``(4, 2*len)`` mask."""
    mask = np.zeros((CELL_ROWS, len(text) * CELL_COLS), dtype=bool)
    for i, ch in enumerate(text):
        n = ord(ch) - BRAILLE_BASE
        if not 0 <= n <= 0xFF:
            raise ValueError(f"Not a braille pattern: {ch!r}")
        for bit, (dx, dy) in enumerate(DOT_OFFSETS):
            mask[dy, i * CELL_COLS + dx] = bool(n >> bit & 1)
    return mask


def format_display(bitmap: str, score: int) -> str:
    """Wrap a bitmap for the location bar: ``#|<bitmap>|[score:<n>]``."""
    return f"#|{bitmap}|[score:{score}]"
