"""Pydantic models for API request/response schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field


class CreateSessionRequest(BaseModel):
    """Request body for POST /sessions."""

    seed: int | None = Field(default=None, ge=0)


class SessionSummary(BaseModel):
    """Compact session info for list endpoints."""

    session_id: str
    score: int
    runs: int
    tick: int
    viewers: int
    paused: bool


class HighScoreResponse(BaseModel):
    """Best recorded run."""

    score: int
    bitmap: str
    display: str


class FrameMessage(BaseModel):
    """Payload pushed to play sockets after every tick."""

    tick: int
    score: int
    bitmap: str
    display: str
    restarted: bool = False
    final_score: int | None = None
