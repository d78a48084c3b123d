"""Wall-clock tick pacing and display sinks."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from braille_snake.engine import GameEngine, StepResult

logger = logging.getLogger(__name__)

DisplaySink = Callable[[str], None]


class MemorySink:
    """Remembers the last display string it was handed."""

    def __init__(self) -> None:
        self.last: str | None = None
        self.writes = 0

    def __call__(self, text: str) -> None:
        self.last = text
        self.writes += 1


class FallbackSink:
    """Writes through *primary*, falling back to *fallback* when it raises.

    Hosts whose preferred display channel is rate limited (a browser's
    history API, a remote socket) wrap it here so a rejected write still
    reaches the user.
    """

    def __init__(self, primary: DisplaySink, fallback: DisplaySink) -> None:
        self.primary = primary
        self.fallback = fallback
        self.fallbacks = 0

    def __call__(self, text: str) -> None:
        try:
            self.primary(text)
        except Exception:
            self.fallbacks += 1
            logger.debug("Primary display write failed; using fallback.")
            self.fallback(text)


class TickDriver:
    """Steps the engine whenever enough wall-clock time has passed.

    The host calls :meth:`poll` as often as it likes (typically once per
    display refresh); the driver steps at most once per call, and only
    when the engine's current tick interval has elapsed. A paused driver
    never steps. Drivers start paused until the host reports focus.
    """

    def __init__(
        self,
        engine: GameEngine,
        sink: DisplaySink,
        clock: Callable[[], float] = time.monotonic,
        paused: bool = True,
    ) -> None:
        self.engine = engine
        self.sink = sink
        self.clock = clock
        self.paused = paused
        self.last_tick: float | None = None

    def set_focused(self, focused: bool) -> None:
        if self.paused == focused:
            logger.debug("Driver %s.", "resumed" if focused else "paused")
        self.paused = not focused

    def due(self, now: float) -> bool:
        """Whether a tick should happen at *now* (seconds)."""
        if self.last_tick is None:
            return True
        elapsed_ms = (now - self.last_tick) * 1000.0
        return elapsed_ms >= self.engine.tick_interval_ms

    def poll(self, now: float | None = None) -> StepResult | None:
        """Step once if due. Returns the step result, or None if idle."""
        if self.paused:
            return None
        if now is None:
            now = self.clock()
        if not self.due(now):
            return None

        result = self.engine.step()
        self.last_tick = now
        self.emit()
        return result

    def emit(self) -> None:
        """Hand the current display string to the sink."""
        text = self.engine.display()
        try:
            self.sink(text)
        except Exception:
            logger.warning("Display sink rejected an update.", exc_info=True)
