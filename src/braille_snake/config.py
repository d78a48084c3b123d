"""Game configuration."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameConfig:
    """Board, pacing, and hosting settings.

    Supports JSON serialization so a setup can be shared and replayed.
    """

    # Board
    grid_width: int = 40
    grid_height: int = 4
    initial_snake_length: int = 4

    # Pacing: tick interval shrinks linearly from start to end as the
    # snake fills the grid.
    start_interval_ms: float = 125.0
    end_interval_ms: float = 75.0

    # How often the host polls the tick driver (display refresh).
    frame_interval_ms: float = 16.0

    # Hosting
    highscore_path: str | None = "highscore.json"
    max_sessions: int = 64

    # Food placement RNG seed; None draws fresh entropy.
    seed: int | None = None

    def to_dict(self) -> dict:
        """Serialize to a plain dict."""
        return asdict(self)

    def save(self, path: str | Path) -> None:
        """Write config to a JSON file."""
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(self.to_dict(), indent=2))
        logger.info("Config saved to %s", p)

    @classmethod
    def load(cls, path: str | Path) -> GameConfig:
        """Load config from a JSON file."""
        raw = json.loads(Path(path).read_text())
        return cls(**raw)
