"""Braille Snake: a snake game rendered as a line of braille glyphs."""

from braille_snake.bitmap import decode, encode, format_display
from braille_snake.config import GameConfig
from braille_snake.driver import FallbackSink, MemorySink, TickDriver
from braille_snake.engine import GameEngine, RunSummary, StepOutcome, StepResult
from braille_snake.grid import CellType, Grid
from braille_snake.highscore import HighScore, HighScoreStore
from braille_snake.snake import Direction, Snake

__all__ = [
    "CellType",
    "Direction",
    "FallbackSink",
    "GameConfig",
    "GameEngine",
    "Grid",
    "HighScore",
    "HighScoreStore",
    "MemorySink",
    "RunSummary",
    "Snake",
    "StepOutcome",
    "StepResult",
    "TickDriver",
    "decode",
    "encode",
    "format_display",
]
