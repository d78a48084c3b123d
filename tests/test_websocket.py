"""WebSocket integration tests for real-time play."""

from __future__ import annotations

import json

import pytest
from starlette.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from braille_snake.config import GameConfig
from braille_snake.engine import RunSummary
from braille_snake.highscore import HighScoreStore
from braille_snake.server.app import create_app
from braille_snake.server.session_manager import SessionManager
from braille_snake.server.websocket import _handle_message
from braille_snake.snake import Direction


def _config() -> GameConfig:
    return GameConfig(highscore_path=None, frame_interval_ms=5.0)


@pytest.fixture()
def tc():
    """Starlette sync TestClient shared by REST calls and WebSocket
    connections."""
    config = _config()
    store = HighScoreStore()
    application = create_app(config, store)
    application.state.session_manager = SessionManager(config, store)
    return TestClient(application)


def _create_session(tc, seed=0) -> str:
    resp = tc.post("/sessions", json={"seed": seed})
    assert resp.status_code == 201
    return resp.json()["session_id"]


class TestPlayWebSocket:
    def test_connect_and_receive_initial_frame(self, tc):
        session_id = _create_session(tc)

        with tc.websocket_connect(f"/sessions/{session_id}/play") as ws:
            frame = json.loads(ws.receive_text())
            assert frame["tick"] == 0
            assert frame["score"] == 0
            assert len(frame["bitmap"]) == 20
            assert frame["display"] == f"#|{frame['bitmap']}|[score:0]"
            assert frame["restarted"] is False

    def test_frames_stream_while_connected(self, tc):
        session_id = _create_session(tc)

        with tc.websocket_connect(f"/sessions/{session_id}/play") as ws:
            ws.receive_text()
            frame = json.loads(ws.receive_text())
            assert frame["tick"] >= 1
            assert "final_score" in frame

    def test_send_direction_accepted(self, tc):
        session_id = _create_session(tc)

        with tc.websocket_connect(f"/sessions/{session_id}/play") as ws:
            ws.receive_text()
            ws.send_text(json.dumps({"direction": "up"}))
            ws.send_text(json.dumps({"key": 37}))
            ws.receive_text()

    def test_invalid_messages_ignored(self, tc):
        session_id = _create_session(tc)

        with tc.websocket_connect(f"/sessions/{session_id}/play") as ws:
            ws.receive_text()
            ws.send_text("not-json")
            ws.send_text("[]")
            ws.send_text("123")
            ws.send_text(json.dumps({"direction": "sideways"}))
            ws.send_text(json.dumps({"key": "up"}))
            ws.receive_text()

    def test_nonexistent_session_rejected(self, tc):
        with pytest.raises(WebSocketDisconnect), tc.websocket_connect(
            "/sessions/nonexistent/play",
        ):
            pass

    def test_disconnect_pauses_session(self, tc):
        session_id = _create_session(tc)
        session = tc.app.state.session_manager.get_session(session_id)

        with tc.websocket_connect(f"/sessions/{session_id}/play") as ws:
            ws.receive_text()
            # A tick frame only arrives once the viewer is registered.
            ws.receive_text()
            assert session.viewers == 1
            assert session.running

        assert session.viewers == 0
        assert session.driver.paused
        assert not session.running


class TestMessageHandling:
    @pytest.fixture()
    def manager(self):
        return SessionManager(_config(), HighScoreStore())

    @pytest.mark.asyncio
    async def test_direction_name(self, manager):
        session = manager.create_session(seed=0)
        await _handle_message(manager, session, '{"direction": "UP"}')
        assert session.engine.pending[0] is Direction.UP
        assert session.engine.has_moved

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("key", "direction"),
        [(38, Direction.UP), (40, Direction.DOWN), (87, Direction.UP),
         (83, Direction.DOWN), (68, Direction.RIGHT)],
    )
    async def test_key_codes(self, manager, key, direction):
        session = manager.create_session(seed=0)
        await _handle_message(manager, session, json.dumps({"key": key}))
        assert session.engine.pending[0] is direction

    @pytest.mark.asyncio
    async def test_reversal_key_rejected_but_counts(self, manager):
        session = manager.create_session(seed=0)
        await _handle_message(manager, session, json.dumps({"key": 37}))
        assert len(session.engine.pending) == 0
        assert session.engine.has_moved

    @pytest.mark.asyncio
    async def test_focus_toggles_pause(self, manager):
        session = manager.create_session(seed=0)
        await _handle_message(manager, session, '{"focused": true}')
        assert not session.driver.paused
        await _handle_message(manager, session, '{"focused": false}')
        assert session.driver.paused

    @pytest.mark.asyncio
    async def test_garbage_ignored(self, manager):
        session = manager.create_session(seed=0)
        for raw in ("nope", "[]", '{"key": true}', '{"direction": 3}'):
            await _handle_message(manager, session, raw)
        assert not session.engine.has_moved
        assert len(session.engine.pending) == 0


class TestSessionHighScore:
    @pytest.fixture()
    def store(self, tmp_path):
        return HighScoreStore(tmp_path / "best.json")

    @pytest.fixture()
    def manager(self, store):
        return SessionManager(_config(), store)

    @pytest.mark.asyncio
    async def test_run_end_defers_file_write(self, manager, store):
        session = manager.create_session(seed=0)
        session.engine.on_game_over(
            RunSummary(score=3, bitmap="⠤", has_moved=True),
        )
        assert store.best.score == 3
        assert store.dirty
        assert not store.path.exists()

        await manager._flush_highscore()
        assert not store.dirty
        assert json.loads(store.path.read_text(encoding="utf-8")) == {
            "best_score": 3, "best_bitmap": "⠤",
        }

    @pytest.mark.asyncio
    async def test_cleanup_flushes_pending_record(self, manager, store):
        session = manager.create_session(seed=0)
        session.engine.on_game_over(
            RunSummary(score=2, bitmap="⠤", has_moved=True),
        )
        await manager.cleanup()
        assert store.path.exists()
        assert not store.dirty


class TestSessionFrame:
    def test_tick_frame_uses_sink_display(self):
        manager = SessionManager(_config(), HighScoreStore())
        session = manager.create_session(seed=0)
        session.driver.set_focused(True)
        result = session.driver.poll(now=0.0)
        assert result is not None

        frame = session.frame(result)
        assert session.sink.last is not None
        assert frame["display"] == session.sink.last
        assert frame["display"] == session.engine.display()

    def test_initial_frame_renders_without_sink(self):
        manager = SessionManager(_config(), HighScoreStore())
        session = manager.create_session(seed=0)
        assert session.sink.last is None
        assert session.frame()["display"] == session.engine.display()
