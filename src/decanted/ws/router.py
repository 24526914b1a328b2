"""WebSocket endpoint for watching a Wine Options session."""

from __future__ import annotations

import json
import uuid

import structlog
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from decanted.ws.feed import SessionFeed
from decanted.ws.manager import SessionConnectionManager

logger = structlog.get_logger()

router = APIRouter()


@router.websocket("/ws/sessions/{session_id}")
async def session_socket(websocket: WebSocket, session_id: str) -> None:
    """Stream a session's participants, rounds and status.

    Protocol (client -> server):
        {"action": "ping"}
        {"action": "snapshot"}

    Server -> client:
        {"type": "snapshot", "session": ..., "participants": [...], "round": ...}
        {"type": "round", "round": ...}
        {"type": "participant_joined" | "participant_updated" | "session", "data": ...}
        {"type": "pong"}
        {"type": "error", "message": "..."}
    """
    manager: SessionConnectionManager = websocket.app.state.ws_manager
    feed: SessionFeed = websocket.app.state.session_feed

    snapshot = await feed.snapshot(session_id)
    if snapshot is None:
        await websocket.close(code=4004, reason="Session not found")
        return

    conn_id = str(uuid.uuid4())
    await manager.connect(websocket, conn_id, session_id)
    await manager.send(conn_id, snapshot)

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                msg = json.loads(raw)
            except json.JSONDecodeError:
                await manager.send(conn_id, {"type": "error", "message": "Invalid JSON"})
                continue

            action = msg.get("action") if isinstance(msg, dict) else None
            if action == "ping":
                await manager.send(conn_id, {"type": "pong"})
            elif action == "snapshot":
                fresh = await feed.snapshot(session_id)
                if fresh is not None:
                    await manager.send(conn_id, fresh)
            else:
                await manager.send(conn_id, {"type": "error", "message": f"Unknown action: {action}"})

    except WebSocketDisconnect:
        pass
    finally:
        await manager.disconnect(conn_id)
