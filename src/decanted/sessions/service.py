"""Wine Options session lifecycle: create, join, rounds, answers and scores.

None of these operations is wrapped in a single transaction. Each write
commits on its own, so a failure after the first commit leaves the earlier
rows in place (for example a host-less session if the host insert fails).
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from decanted.db.base import utcnow
from decanted.db.models import GameRound, GameSession, RoundAnswer, SessionParticipant
from decanted.errors import ApiError, conflict, forbidden, not_found
from decanted.sessions.invite_codes import INVITE_LENGTH, generate_unique_invite_code, normalize_invite_code

logger = logging.getLogger(__name__)

SESSION_STATUSES = ("open", "active", "finished", "cancelled")
DISPLAY_NAME_MAX = 64
DEFAULT_DISPLAY_NAME = "Guest"


def clean_display_name(name: str | None) -> str:
    cleaned = (name or "").strip()[:DISPLAY_NAME_MAX]
    return cleaned or DEFAULT_DISPLAY_NAME


async def get_session_by_id(db: AsyncSession, session_id: str) -> GameSession | None:
    result = await db.execute(select(GameSession).where(GameSession.id == session_id))
    return result.scalar_one_or_none()


async def get_session_by_code(db: AsyncSession, invite_code: str) -> GameSession | None:
    result = await db.execute(
        select(GameSession).where(GameSession.invite_code == normalize_invite_code(invite_code))
    )
    return result.scalar_one_or_none()


async def list_participants(db: AsyncSession, session_id: str) -> list[SessionParticipant]:
    result = await db.execute(
        select(SessionParticipant)
        .where(SessionParticipant.session_id == session_id)
        .order_by(SessionParticipant.joined_at)
    )
    return list(result.scalars().all())


async def latest_round(db: AsyncSession, session_id: str) -> GameRound | None:
    """The session's current round: highest round_number, newest on ties."""
    result = await db.execute(
        select(GameRound)
        .where(GameRound.session_id == session_id)
        .order_by(GameRound.round_number.desc(), GameRound.created_at.desc(), GameRound.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def _require_host(db: AsyncSession, session_id: str, caller_user_id: str) -> GameSession:
    session = await get_session_by_id(db, session_id)
    if session is None:
        raise not_found("Session not found")
    if session.host_user_id != caller_user_id:
        raise forbidden("Only the host can do this")
    return session


async def create_session(
    db: AsyncSession,
    host_user_id: str,
    display_name: str | None = None,
    code_length: int = INVITE_LENGTH,
) -> tuple[GameSession, SessionParticipant]:
    """Open a new session and seat its host."""
    code = await generate_unique_invite_code(db, code_length)
    session = GameSession(invite_code=code, host_user_id=host_user_id, status="open", is_open=True)
    db.add(session)
    await db.commit()

    host = SessionParticipant(
        session_id=session.id,
        user_id=host_user_id,
        display_name=clean_display_name(display_name) if display_name else "Host",
        is_host=True,
        score=0,
    )
    db.add(host)
    await db.commit()
    logger.info("Session %s created by %s (code %s)", session.id, host_user_id, code)
    return session, host


async def join_session(
    db: AsyncSession,
    invite_code: str,
    user_id: str | None,
    display_name: str | None,
) -> tuple[GameSession, SessionParticipant]:
    """Join by invite code. Nothing is written for unknown or closed sessions."""
    session = await get_session_by_code(db, invite_code)
    if session is None:
        raise not_found("Session not found")
    if session.status != "open" or not session.is_open:
        raise conflict("SESSION_CLOSED", "Session is not open for joining")

    participant = SessionParticipant(
        session_id=session.id,
        user_id=user_id,
        display_name=clean_display_name(display_name),
        is_host=False,
        score=0,
    )
    db.add(participant)
    await db.commit()
    return session, participant


async def start_round(
    db: AsyncSession,
    session_id: str,
    caller_user_id: str,
    payload: dict[str, Any],
    round_number: int = 1,
) -> tuple[GameSession, GameRound]:
    """Host-only. Inserts an active round, then marks the session active.

    Calling twice inserts two rounds.
    """
    session = await _require_host(db, session_id, caller_user_id)

    now = utcnow()
    game_round = GameRound(
        session_id=session.id,
        round_number=round_number,
        status="active",
        payload=payload,
        started_at=now,
        created_at=now,
    )
    db.add(game_round)
    await db.commit()

    session.status = "active"
    session.is_open = False
    session.updated_at = now
    await db.commit()
    logger.info("Round %d started in session %s", round_number, session.id)
    return session, game_round


async def set_session_status(
    db: AsyncSession,
    session_id: str,
    caller_user_id: str,
    status: str,
) -> GameSession:
    if status not in SESSION_STATUSES:
        raise ApiError(400, "BAD_REQUEST", f"Unknown status: {status}")
    session = await _require_host(db, session_id, caller_user_id)
    session.status = status
    session.is_open = status == "open"
    session.updated_at = utcnow()
    await db.commit()
    return session


async def close_round(db: AsyncSession, round_id: str, caller_user_id: str) -> GameRound:
    result = await db.execute(select(GameRound).where(GameRound.id == round_id))
    game_round = result.scalar_one_or_none()
    if game_round is None:
        raise not_found("Round not found")
    await _require_host(db, game_round.session_id, caller_user_id)
    game_round.status = "closed"
    await db.commit()
    return game_round


async def _find_answer(db: AsyncSession, round_id: str, participant_id: str) -> RoundAnswer | None:
    result = await db.execute(
        select(RoundAnswer).where(
            RoundAnswer.round_id == round_id,
            RoundAnswer.participant_id == participant_id,
        )
    )
    return result.scalar_one_or_none()


async def submit_answer(
    db: AsyncSession,
    round_id: str,
    participant_id: str,
    selected_index: int,
    is_correct: bool,
) -> RoundAnswer:
    """Upsert the participant's answer for a round; the last answer wins."""
    game_round = await db.get(GameRound, round_id)
    if game_round is None:
        raise not_found("Round not found")
    participant = await db.get(SessionParticipant, participant_id)
    if participant is None or participant.session_id != game_round.session_id:
        raise not_found("Participant not found")

    answer = await _find_answer(db, round_id, participant_id)
    if answer is None:
        answer = RoundAnswer(
            round_id=round_id,
            participant_id=participant_id,
            selected_index=selected_index,
            is_correct=is_correct,
        )
        db.add(answer)
        try:
            await db.commit()
            return answer
        except IntegrityError:
            await db.rollback()
            answer = await _find_answer(db, round_id, participant_id)
            if answer is None:
                raise

    answer.selected_index = selected_index
    answer.is_correct = is_correct
    answer.answered_at = utcnow()
    await db.commit()
    return answer


async def add_participant_points(db: AsyncSession, participant_id: str, points: int) -> SessionParticipant:
    """Atomically add to a participant's in-session score."""
    result = await db.execute(
        update(SessionParticipant)
        .where(SessionParticipant.id == participant_id)
        .values(score=SessionParticipant.score + points, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise not_found("Participant not found")
    await db.commit()

    refreshed = await db.execute(
        select(SessionParticipant)
        .where(SessionParticipant.id == participant_id)
        .execution_options(populate_existing=True)
    )
    return refreshed.scalar_one()
