"""WebSocket handler for real-time play."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from braille_snake.server.session_manager import GameSession, SessionManager
from braille_snake.snake import Direction

logger = logging.getLogger(__name__)

ws_router = APIRouter()

_DIRECTION_MAP: dict[str, Direction] = {
    "up": Direction.UP,
    "down": Direction.DOWN,
    "left": Direction.LEFT,
    "right": Direction.RIGHT,
}

# Browser keyCodes: arrow keys and WASD.
DIRECTIONS_BY_KEY_CODE: dict[int, Direction] = {
    37: Direction.LEFT,
    38: Direction.UP,
    39: Direction.RIGHT,
    40: Direction.DOWN,
    65: Direction.LEFT,
    87: Direction.UP,
    68: Direction.RIGHT,
    83: Direction.DOWN,
}


def _get_manager(ws: WebSocket) -> SessionManager:
    return ws.app.state.session_manager


def _parse_direction(msg: dict) -> Direction | None:
    direction_str = msg.get("direction")
    if isinstance(direction_str, str):
        return _DIRECTION_MAP.get(direction_str.lower())
    key = msg.get("key")
    if isinstance(key, int) and not isinstance(key, bool):
        return DIRECTIONS_BY_KEY_CODE.get(key)
    return None


async def _handle_message(
    manager: SessionManager, session: GameSession, raw: str,
) -> None:
    try:
        msg = json.loads(raw)
    except json.JSONDecodeError:
        return
    if not isinstance(msg, dict):
        return

    focused = msg.get("focused")
    if isinstance(focused, bool):
        await manager.set_focused(session, focused)

    direction = _parse_direction(msg)
    if direction is not None:
        await manager.change_direction(session, direction)


@ws_router.websocket("/sessions/{session_id}/play")
async def play(websocket: WebSocket, session_id: str) -> None:
    """Player WebSocket: send directions, receive a frame each tick."""
    manager = _get_manager(websocket)
    session = manager.get_session(session_id)
    if session is None:
        await websocket.close(code=4004, reason="Session not found.")
        return

    await websocket.accept()

    # Send the current frame so the client gets immediate feedback.
    await websocket.send_text(
        json.dumps(session.frame(), separators=(",", ":"), ensure_ascii=False),
    )
    await manager.connect(session, websocket)
    logger.info("Viewer connected to session %s.", session_id)

    try:
        while True:
            raw = await websocket.receive_text()
            await _handle_message(manager, session, raw)
    except WebSocketDisconnect:
        logger.info("Viewer disconnected from session %s.", session_id)
    finally:
        await manager.disconnect(session, websocket)
