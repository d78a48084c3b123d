"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from braille_snake.config import GameConfig
from braille_snake.highscore import HighScoreStore
from braille_snake.server.routes import router
from braille_snake.server.session_manager import SessionManager
from braille_snake.server.websocket import ws_router


def create_app(
    config: GameConfig | None = None,
    store: HighScoreStore | None = None,
) -> FastAPI:
    """Build and return the FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.session_manager = SessionManager(config, store)
        yield
        await app.state.session_manager.cleanup()

    app = FastAPI(
        title="Braille Snake API", version="0.1.0", lifespan=lifespan,
    )
    app.include_router(router)
    app.include_router(ws_router)
    return app
