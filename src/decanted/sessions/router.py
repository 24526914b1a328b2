"""Wine Options sessions API."""

from __future__ import annotations

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from decanted.config import Settings
from decanted.database import get_session
from decanted.dependencies import get_app_settings
from decanted.errors import bad_request, not_found
from decanted.redis_client import get_redis
from decanted.sessions import service
from decanted.sessions.events import (
    PARTICIPANT_INSERT,
    PARTICIPANT_UPDATE,
    ROUND_CHANGE,
    SESSION_UPDATE,
    publish_session_event,
)
from decanted.sessions.invite_codes import normalize_invite_code
from decanted.sessions.schemas import (
    AnswerOut,
    CloseRoundRequest,
    CreateSessionRequest,
    CreateSessionResponse,
    JoinSessionRequest,
    JoinSessionResponse,
    ParticipantOut,
    ParticipantPointsRequest,
    RoundOut,
    SessionOut,
    SessionSnapshotResponse,
    SessionStatusRequest,
    StartRoundRequest,
    StartRoundResponse,
    SubmitAnswerRequest,
)

router = APIRouter(prefix="/api/v1/sessions", tags=["Wine Options Sessions"])


def _dump(model: SessionOut | ParticipantOut | RoundOut) -> dict:
    return model.model_dump(mode="json")


@router.post("", response_model=CreateSessionResponse)
async def create_session(
    body: CreateSessionRequest,
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
) -> CreateSessionResponse:
    """Open a session and seat the host."""
    host_user_id = body.host_user_id.strip()
    if not host_user_id:
        raise bad_request("host_user_id is required")
    session, host = await service.create_session(
        db, host_user_id, body.display_name, settings.invite_code_length
    )
    return CreateSessionResponse(
        session=SessionOut.model_validate(session),
        host=ParticipantOut.model_validate(host),
    )


@router.post("/join", response_model=JoinSessionResponse)
async def join_session(
    body: JoinSessionRequest,
    db: AsyncSession = Depends(get_session),
    redis: aioredis.Redis | None = Depends(get_redis),
) -> JoinSessionResponse:
    """Join by invite code. 404 for unknown codes, 409 once the session has left the lobby."""
    code = normalize_invite_code(body.invite_code)
    if not code:
        raise bad_request("invite_code is required")

    session, participant = await service.join_session(db, code, body.user_id, body.display_name)
    session_out = SessionOut.model_validate(session)
    participant_out = ParticipantOut.model_validate(participant)
    await publish_session_event(redis, session.id, PARTICIPANT_INSERT, _dump(participant_out))
    return JoinSessionResponse(session=session_out, participant=participant_out)


@router.post("/start-round", response_model=StartRoundResponse)
async def start_round(
    body: StartRoundRequest,
    db: AsyncSession = Depends(get_session),
    redis: aioredis.Redis | None = Depends(get_redis),
) -> StartRoundResponse:
    """Host-only. Each call inserts a new round; callers should send increasing round numbers."""
    session, game_round = await service.start_round(
        db, body.session_id, body.caller_user_id, body.payload, body.round_number
    )
    round_out = RoundOut.model_validate(game_round)
    await publish_session_event(redis, session.id, ROUND_CHANGE, _dump(round_out))
    await publish_session_event(redis, session.id, SESSION_UPDATE, _dump(SessionOut.model_validate(session)))
    return StartRoundResponse(round=round_out)


@router.get("/{session_id}", response_model=SessionSnapshotResponse)
async def get_session_snapshot(
    session_id: str,
    db: AsyncSession = Depends(get_session),
) -> SessionSnapshotResponse:
    session = await service.get_session_by_id(db, session_id)
    if session is None:
        raise not_found("Session not found")
    participants = await service.list_participants(db, session_id)
    latest = await service.latest_round(db, session_id)
    return SessionSnapshotResponse(
        session=SessionOut.model_validate(session),
        participants=[ParticipantOut.model_validate(p) for p in participants],
        latest_round=RoundOut.model_validate(latest) if latest else None,
    )


@router.get("/{session_id}/rounds/latest", response_model=RoundOut | None)
async def get_latest_round(
    session_id: str,
    db: AsyncSession = Depends(get_session),
) -> RoundOut | None:
    if await service.get_session_by_id(db, session_id) is None:
        raise not_found("Session not found")
    latest = await service.latest_round(db, session_id)
    return RoundOut.model_validate(latest) if latest else None


@router.post("/{session_id}/status", response_model=SessionOut)
async def set_status(
    session_id: str,
    body: SessionStatusRequest,
    db: AsyncSession = Depends(get_session),
    redis: aioredis.Redis | None = Depends(get_redis),
) -> SessionOut:
    session = await service.set_session_status(db, session_id, body.caller_user_id, body.status)
    out = SessionOut.model_validate(session)
    await publish_session_event(redis, session.id, SESSION_UPDATE, _dump(out))
    return out


@router.post("/rounds/{round_id}/close", response_model=RoundOut)
async def close_round(
    round_id: str,
    body: CloseRoundRequest,
    db: AsyncSession = Depends(get_session),
    redis: aioredis.Redis | None = Depends(get_redis),
) -> RoundOut:
    game_round = await service.close_round(db, round_id, body.caller_user_id)
    out = RoundOut.model_validate(game_round)
    await publish_session_event(redis, game_round.session_id, ROUND_CHANGE, _dump(out))
    return out


@router.post("/rounds/{round_id}/answers", response_model=AnswerOut)
async def submit_answer(
    round_id: str,
    body: SubmitAnswerRequest,
    db: AsyncSession = Depends(get_session),
) -> AnswerOut:
    answer = await service.submit_answer(db, round_id, body.participant_id, body.selected_index, body.is_correct)
    return AnswerOut.model_validate(answer)


@router.post("/participants/{participant_id}/points", response_model=ParticipantOut)
async def add_participant_points(
    participant_id: str,
    body: ParticipantPointsRequest,
    db: AsyncSession = Depends(get_session),
    redis: aioredis.Redis | None = Depends(get_redis),
) -> ParticipantOut:
    participant = await service.add_participant_points(db, participant_id, body.points)
    out = ParticipantOut.model_validate(participant)
    await publish_session_event(redis, participant.session_id, PARTICIPANT_UPDATE, _dump(out))
    return out
