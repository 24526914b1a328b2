"""Publish session changes to Redis for realtime fan-out.

Each session has its own channel, ``session:{id}``. Publishing is best
effort: a failed publish is logged and the request carries on.
"""

from __future__ import annotations

import json
from typing import Any

import redis.asyncio as aioredis
import structlog

logger = structlog.get_logger()

CHANNEL_PREFIX = "session:"

PARTICIPANT_INSERT = "participant_insert"
PARTICIPANT_UPDATE = "participant_update"
SESSION_UPDATE = "session_update"
ROUND_CHANGE = "round_change"

EVENT_KINDS = frozenset({PARTICIPANT_INSERT, PARTICIPANT_UPDATE, SESSION_UPDATE, ROUND_CHANGE})


def session_channel(session_id: str) -> str:
    return f"{CHANNEL_PREFIX}{session_id}"


async def publish_session_event(
    redis: aioredis.Redis | None,
    session_id: str,
    kind: str,
    data: dict[str, Any],
) -> None:
    if redis is None:
        return
    payload = json.dumps({"event": kind, "data": data}, default=str)
    try:
        await redis.publish(session_channel(session_id), payload)
    except Exception:
        logger.warning("session_event_publish_failed", session_id=session_id, kind=kind, exc_info=True)
