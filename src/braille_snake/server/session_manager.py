"""In-memory session registry and async tick loops."""

from __future__ import annotations

import asyncio
import dataclasses
import json
import logging
import time
import uuid
from dataclasses import dataclass, field

from starlette.websockets import WebSocket, WebSocketState

from braille_snake.config import GameConfig
from braille_snake.driver import MemorySink, TickDriver
from braille_snake.engine import GameEngine, RunSummary, StepResult
from braille_snake.highscore import HighScoreStore
from braille_snake.server.models import FrameMessage, SessionSummary
from braille_snake.snake import Direction

logger = logging.getLogger(__name__)


@dataclass
class GameSession:
    """All state for a single player's game."""

    session_id: str
    engine: GameEngine
    driver: TickDriver
    sink: MemorySink
    sockets: list[WebSocket] = field(default_factory=list)
    created_at: float = field(default_factory=time.monotonic)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    _task: asyncio.Task | None = field(default=None, repr=False)

    @property
    def viewers(self) -> int:
        return len(self.sockets)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def frame(self, result: StepResult | None = None) -> dict:
        """Build the per-tick payload sent to play sockets.

        After a tick the display string is the one the driver handed to
        the session sink; before the first tick it is rendered directly.
        """
        engine = self.engine
        display = self.sink.last if result is not None else None
        return FrameMessage(
            tick=engine.tick,
            score=engine.score,
            bitmap=engine.bitmap(),
            display=display if display is not None else engine.display(),
            restarted=result.restarted if result is not None else False,
            final_score=result.final_score if result is not None else None,
        ).model_dump()

    def summary(self) -> SessionSummary:
        return SessionSummary(
            session_id=self.session_id,
            score=self.engine.score,
            runs=self.engine.runs,
            tick=self.engine.tick,
            viewers=self.viewers,
            paused=self.driver.paused,
        )


class SessionManager:
    """Central registry managing all game sessions.

    Sessions are independent games; they only share the high-score
    store. A session's tick loop runs while at least one socket is
    watching it.
    """

    def __init__(
        self,
        config: GameConfig | None = None,
        store: HighScoreStore | None = None,
    ) -> None:
        self.config = config if config is not None else GameConfig()
        if self.config.max_sessions < 1:
            raise ValueError("max_sessions must be >= 1.")
        self.store = store if store is not None else HighScoreStore(
            self.config.highscore_path,
        )
        self._sessions: dict[str, GameSession] = {}

    def create_session(self, seed: int | None = None) -> GameSession:
        """Create a new game session and return it."""
        if len(self._sessions) >= self.config.max_sessions:
            raise ValueError("Session limit reached. Try again later.")

        config = self.config
        if seed is not None:
            config = dataclasses.replace(config, seed=seed)
        engine = GameEngine(config, on_game_over=self._record_run)
        sink = MemorySink()
        session = GameSession(
            session_id=uuid.uuid4().hex[:12],
            engine=engine,
            driver=TickDriver(engine, sink),
            sink=sink,
        )
        self._sessions[session.session_id] = session
        logger.info("Session %s created.", session.session_id)
        return session

    def _record_run(self, summary: RunSummary) -> None:
        # The file write happens off the event loop in _flush_highscore.
        self.store.record(summary, persist=False)

    async def _flush_highscore(self) -> None:
        if self.store.dirty:
            await asyncio.to_thread(self.store.save)

    def get_session(self, session_id: str) -> GameSession | None:
        return self._sessions.get(session_id)

    def list_sessions(self) -> list[SessionSummary]:
        return [s.summary() for s in self._sessions.values()]

    async def remove_session(self, session_id: str) -> None:
        """Stop a session's loop, close its sockets, and forget it."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise KeyError(f"Session {session_id} not found.")
        await self._stop_loop(session)
        await self._close_connections(session)
        logger.info("Session %s removed.", session_id)

    async def connect(self, session: GameSession, ws: WebSocket) -> None:
        """Register a viewer and resume the session."""
        session.sockets.append(ws)
        session.driver.set_focused(True)
        if not session.running:
            session._task = asyncio.create_task(self._tick_loop(session))

    async def disconnect(self, session: GameSession, ws: WebSocket) -> None:
        """Drop a viewer; pause the session when nobody is watching."""
        if ws in session.sockets:
            session.sockets.remove(ws)
        if not session.sockets:
            session.driver.set_focused(False)
            await self._stop_loop(session)

    async def change_direction(
        self, session: GameSession, direction: Direction,
    ) -> None:
        async with session.lock:
            session.engine.change_direction(direction)

    async def set_focused(self, session: GameSession, focused: bool) -> None:
        async with session.lock:
            session.driver.set_focused(focused)

    async def _tick_loop(self, session: GameSession) -> None:
        """Poll the driver once per frame, broadcasting every tick."""
        frame_interval = self.config.frame_interval_ms / 1000.0
        try:
            while True:
                await asyncio.sleep(frame_interval)
                async with session.lock:
                    result = session.driver.poll()
                    if result is None:
                        continue
                    payload = session.frame(result)
                await self._broadcast(session, payload)
                if result.restarted:
                    await self._flush_highscore()
        except asyncio.CancelledError:
            logger.info("Tick loop cancelled for session %s.", session.session_id)
        except Exception:
            logger.exception("Tick loop error in session %s.", session.session_id)

    async def _stop_loop(self, session: GameSession) -> None:
        task = session._task
        session._task = None
        if task is None or task.done():
            return
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

    async def _close_connections(self, session: GameSession) -> None:
        """Close any live sockets of a removed session."""
        for ws in list(session.sockets):
            try:
                if ws.client_state == WebSocketState.CONNECTED:
                    await ws.close(code=1000, reason="Session closed.")
            except Exception:
                logger.warning(
                    "Failed closing socket in session %s.", session.session_id,
                )
        session.sockets.clear()

    async def _broadcast(self, session: GameSession, frame: dict) -> None:
        """Send a frame to every connected viewer."""
        payload = json.dumps(frame, separators=(",", ":"), ensure_ascii=False)
        dead: list[WebSocket] = []

        # Iterate over a snapshot so disconnect handlers can mutate the
        # live list without affecting this send loop.
        for ws in list(session.sockets):
            try:
                if ws.client_state == WebSocketState.CONNECTED:
                    await ws.send_text(payload)
            except Exception:
                dead.append(ws)

        for ws in dead:
            if ws in session.sockets:
                session.sockets.remove(ws)

    async def cleanup(self) -> None:
        """Cancel all running tick loops."""
        tasks = [s._task for s in self._sessions.values() if s.running]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        await self._flush_highscore()
        logger.info("SessionManager cleanup complete.")
