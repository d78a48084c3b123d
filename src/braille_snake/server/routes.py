"""REST API route handlers for sessions and the high score."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request, Response

from braille_snake.bitmap import format_display
from braille_snake.server.models import (
    CreateSessionRequest,
    HighScoreResponse,
    SessionSummary,
)

router = APIRouter(tags=["sessions"])


def _get_manager(request: Request):
    return request.app.state.session_manager


@router.post("/sessions", status_code=201)
async def create_session(
    body: CreateSessionRequest, request: Request,
) -> SessionSummary:
    """Create a new game session."""
    manager = _get_manager(request)
    try:
        session = manager.create_session(seed=body.seed)
    except ValueError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return session.summary()


@router.get("/sessions")
async def list_sessions(request: Request) -> list[SessionSummary]:
    """List all sessions."""
    return _get_manager(request).list_sessions()


@router.get("/sessions/{session_id}")
async def get_session(session_id: str, request: Request) -> dict:
    """Get full session state."""
    session = _get_manager(request).get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found.")
    result = session.summary().model_dump()
    result["state"] = session.engine.get_state()
    return result


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(session_id: str, request: Request) -> Response:
    """Stop and remove a session."""
    try:
        await _get_manager(request).remove_session(session_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return Response(status_code=204)


@router.get("/highscore")
async def get_highscore(request: Request) -> HighScoreResponse:
    """Return the best recorded run."""
    best = _get_manager(request).store.best
    return HighScoreResponse(
        score=best.score,
        bitmap=best.bitmap,
        display=format_display(best.bitmap, best.score),
    )
