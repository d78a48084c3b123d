"""Persisted best-score record."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from braille_snake.engine import RunSummary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HighScore:
    """Best score so far and the bitmap of the board when that run ended."""

    score: int = 0
    bitmap: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


class HighScoreStore:
    """Keeps a single best-score record in a small JSON file.

    Storage problems never reach the game: an unreadable file reads as
    "no record" (best score 0) and a failed write only logs a warning
    while the in-memory record still advances. With ``path=None`` the
    record lives in memory only.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self._path = Path(path) if path is not None else None
        self._best = HighScore()
        self._dirty = False
        self._load()

    @property
    def best(self) -> HighScore:
        return self._best

    @property
    def path(self) -> Path | None:
        return self._path

    def _load(self) -> None:
        if self._path is None or not self._path.exists():
            return
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            self._best = HighScore(
                score=int(raw.get("best_score", 0)),
                bitmap=str(raw.get("best_bitmap", "")),
            )
        except (OSError, ValueError, TypeError, AttributeError):
            logger.warning(
                "Ignoring unreadable high score file %s.", self._path,
            )
            self._best = HighScore()
            return
        logger.info(
            "Loaded high score %d from %s.", self._best.score, self._path,
        )

    @property
    def dirty(self) -> bool:
        """True when the in-memory record has not been written yet."""
        return self._dirty

    def save(self) -> None:
        """Write the record to disk if it changed since the last save."""
        dirty, self._dirty = self._dirty, False
        if self._path is None or not dirty:
            return
        data = {
            "best_score": self._best.score,
            "best_bitmap": self._best.bitmap,
        }
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(data), encoding="utf-8")
        except OSError:
            logger.warning("Could not write high score to %s.", self._path)

    def record(self, summary: RunSummary, persist: bool = True) -> bool:
        """Store *summary* if it is a new best. Returns True if stored.

        Runs where the player never pressed a direction do not count.
        With ``persist=False`` only the in-memory record changes and the
        caller writes it later with :meth:`save`.
        """
        if not summary.has_moved:
            return False
        if summary.score <= 0 or summary.score <= self._best.score:
            return False
        self._best = HighScore(score=summary.score, bitmap=summary.bitmap)
        self._dirty = True
        if persist:
            self.save()
        logger.info("New high score: %d.", summary.score)
        return True

    def reset(self) -> None:
        """Forget the stored record."""
        self._best = HighScore()
        self._dirty = False
        if self._path is not None and self._path.exists():
            try:
                self._path.unlink()
            except OSError:
                logger.warning(
                    "Could not remove high score file %s.", self._path,
                )
