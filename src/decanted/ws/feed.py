"""Turn raw session events into client messages.

Round events may arrive in any order and may describe a round that is no
longer current, so their payload is ignored. The feed re-reads the
session's latest round and sends that instead. Clients therefore always
settle on the highest round_number.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from decanted.sessions.events import (
    PARTICIPANT_INSERT,
    PARTICIPANT_UPDATE,
    ROUND_CHANGE,
    SESSION_UPDATE,
)
from decanted.sessions.schemas import ParticipantOut, RoundOut, SessionOut
from decanted.sessions.service import get_session_by_id, latest_round, list_participants

logger = structlog.get_logger()

Send = Callable[[str, dict[str, Any]], Awaitable[Any]]

_PASSTHROUGH = {
    PARTICIPANT_INSERT: "participant_joined",
    PARTICIPANT_UPDATE: "participant_updated",
    SESSION_UPDATE: "session",
}


class SessionFeed:
    """Maps one session event to one outbound message."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], send: Send) -> None:
        self._session_factory = session_factory
        self._send = send

    async def current_round(self, session_id: str) -> dict[str, Any] | None:
        async with self._session_factory() as db:
            row = await latest_round(db, session_id)
            return RoundOut.model_validate(row).model_dump(mode="json") if row else None

    async def snapshot(self, session_id: str) -> dict[str, Any] | None:
        """Full state sent to a client when it first connects."""
        async with self._session_factory() as db:
            session = await get_session_by_id(db, session_id)
            if session is None:
                return None
            participants = await list_participants(db, session_id)
            row = await latest_round(db, session_id)
            return {
                "type": "snapshot",
                "session": SessionOut.model_validate(session).model_dump(mode="json"),
                "participants": [ParticipantOut.model_validate(p).model_dump(mode="json") for p in participants],
                "round": RoundOut.model_validate(row).model_dump(mode="json") if row else None,
            }

    async def handle(self, session_id: str, event: dict[str, Any]) -> None:
        kind = event.get("event")
        if kind == ROUND_CHANGE:
            await self._send(session_id, {"type": "round", "round": await self.current_round(session_id)})
            return

        msg_type = _PASSTHROUGH.get(kind or "")
        if msg_type is None:
            logger.warning("session_event_unknown", session_id=session_id, kind=kind)
            return
        await self._send(session_id, {"type": msg_type, "data": event.get("data", {})})
