"""WebSocket connection manager.

Tracks active WebSocket connections per Wine Options session and fans
messages out to everyone watching that session.
"""

from __future__ import annotations

import json
import time
from collections import defaultdict
from dataclasses import dataclass, field

import structlog
from fastapi import WebSocket

logger = structlog.get_logger()


@dataclass
class ClientConnection:
    """Represents a single WebSocket client."""

    websocket: WebSocket
    session_id: str
    connected_at: float = field(default_factory=time.time)
    messages_sent: int = 0


class SessionConnectionManager:
    """Manages all active session WebSocket connections.

    Safe for asyncio via the single-threaded event loop.
    """

    def __init__(self) -> None:
        self._connections: dict[str, ClientConnection] = {}  # conn_id -> client
        self._sessions: dict[str, set[str]] = defaultdict(set)  # session_id -> {conn_ids}

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    def watchers(self, session_id: str) -> int:
        return len(self._sessions.get(session_id, ()))

    async def connect(self, websocket: WebSocket, conn_id: str, session_id: str) -> None:
        """Accept a new WebSocket connection for a session."""
        await websocket.accept()
        self._connections[conn_id] = ClientConnection(websocket=websocket, session_id=session_id)
        self._sessions[session_id].add(conn_id)
        logger.info("ws_connected", conn_id=conn_id, session_id=session_id)

    async def disconnect(self, conn_id: str) -> None:
        """Remove a WebSocket connection."""
        client = self._connections.pop(conn_id, None)
        if client is None:
            return

        conns = self._sessions.get(client.session_id)
        if conns is not None:
            conns.discard(conn_id)
            if not conns:
                del self._sessions[client.session_id]

        logger.info("ws_disconnected", conn_id=conn_id, session_id=client.session_id)

    async def send(self, conn_id: str, message: dict) -> bool:
        client = self._connections.get(conn_id)
        if client is None:
            return False
        try:
            await client.websocket.send_text(json.dumps(message, default=str))
        except Exception:
            await self.disconnect(conn_id)
            return False
        client.messages_sent += 1
        return True

    async def broadcast(self, session_id: str, message: dict) -> int:
        """Send a message to every client watching a session.

        Returns the number of clients that received the message.
        """
        conn_ids = list(self._sessions.get(session_id, set()))
        if not conn_ids:
            return 0

        payload = json.dumps(message, default=str)
        sent = 0
        failed: list[str] = []

        for conn_id in conn_ids:
            client = self._connections.get(conn_id)
            if client is None:
                failed.append(conn_id)
                continue
            try:
                await client.websocket.send_text(payload)
                client.messages_sent += 1
                sent += 1
            except Exception:
                failed.append(conn_id)

        # Clean up failed connections
        for conn_id in failed:
            await self.disconnect(conn_id)

        return sent

    def get_stats(self) -> dict:
        """Get connection statistics."""
        return {
            "total_connections": len(self._connections),
            "sessions": {sid: len(conns) for sid, conns in self._sessions.items() if conns},
        }
