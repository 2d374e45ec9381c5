"""Play socket: relays round events from a game view to the session store."""

from __future__ import annotations

import json

import structlog
from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from cogdash.auth.dependencies import user_from_token
from cogdash.database import get_session_factory
from cogdash.db.models import GameSession
from cogdash.domains import is_valid_domain
from cogdash.errors import AppError
from cogdash.games.events import RoundCompleted, RoundListener, SessionWriter
from cogdash.games.schemas import GameSaveRequest
from cogdash.games.service import record_game_session
from cogdash.ws.manager import PlayArena

logger = structlog.get_logger()

router = APIRouter()

AUTH_FAILED_CLOSE_CODE = 4001
INVALID_GAME_CLOSE_CODE = 4002


async def _write_with_fresh_session(user_id: str, body: GameSaveRequest) -> GameSession:
    async with get_session_factory()() as db:
        return await record_game_session(db, user_id, body)


def get_session_writer() -> SessionWriter:
    """Session writer used by play listeners (overridable in tests)."""
    return _write_with_fresh_session


def get_play_arena(websocket: WebSocket) -> PlayArena:
    return websocket.app.state.play_arena


@router.websocket("/ws/play")
async def play_socket(
    websocket: WebSocket,
    token: str = Query(...),
    container_id: str = Query(..., min_length=1, max_length=128),
    game_type: str = Query(...),
    game_name: str | None = Query(None, max_length=64),
    arena: PlayArena = Depends(get_play_arena),
    writer: SessionWriter = Depends(get_session_writer),
) -> None:
    """One socket per mounted game view.

    Protocol:
        Client -> Server:
            {"action": "round_completed", "score": 120, "accuracy": 87.5, ...}
            {"action": "ping"}

        Server -> Client:
            {"type": "round_saved", "session_id": "...", "score": 120}
            {"type": "pong"}
            {"type": "error", "message": "..."}
    """
    try:
        user = user_from_token(token)
    except AppError as e:
        await websocket.close(code=AUTH_FAILED_CLOSE_CODE, reason=f"Authentication failed: {e.details.get('details', e.message)}")
        return

    if not is_valid_domain(game_type):
        await websocket.close(code=INVALID_GAME_CLOSE_CODE, reason=f"Invalid game_type: {game_type}")
        return

    listener = RoundListener(user.id, game_type, game_name, writer)
    await arena.register(container_id, websocket, listener)

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                msg = json.loads(raw)
            except json.JSONDecodeError:
                await websocket.send_json({"type": "error", "message": "Invalid JSON"})
                continue
            if not isinstance(msg, dict):
                await websocket.send_json({"type": "error", "message": "Expected a JSON object"})
                continue

            action = msg.pop("action", None)

            if action == "round_completed":
                try:
                    event = RoundCompleted.model_validate(msg)
                    session = await listener.on_round_completed(event)
                except ValidationError as e:
                    await websocket.send_json({
                        "type": "error",
                        "message": "Invalid round",
                        "details": json.loads(e.json(include_url=False, include_input=False)),
                    })
                    continue
                except AppError as e:
                    await websocket.send_json({"type": "error", "message": e.message})
                    continue
                await websocket.send_json({
                    "type": "round_saved",
                    "session_id": str(session.id),
                    "score": session.score,
                })

            elif action == "ping":
                await websocket.send_json({"type": "pong"})

            else:
                await websocket.send_json({
                    "type": "error",
                    "message": f"Unknown action: {action}",
                })

    except WebSocketDisconnect:
        await arena.unregister(container_id, websocket)
    except Exception:
        logger.exception("play_socket_error", container_id=container_id, user_id=user.id)
        await arena.unregister(container_id, websocket)
