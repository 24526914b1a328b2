"""Points ledger with idempotency and an atomic running total."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from decanted.db.base import UPSERT_INSERTS, utcnow
from decanted.db.models import PointsLedger, UserPoints, WineOptionsResult

logger = logging.getLogger(__name__)


def compute_award(score: int, streak_bonus: bool = False, time_bonus: bool = False) -> int:
    """Points for a Wine Options game: the score plus one per bonus."""
    return int(score) + (1 if streak_bonus else 0) + (1 if time_bonus else 0)


async def get_total_points(db: AsyncSession, user_id: str) -> int:
    result = await db.execute(select(UserPoints.total_points).where(UserPoints.user_id == user_id))
    return result.scalar_one_or_none() or 0


async def increment_user_points(db: AsyncSession, user_id: str, delta: int) -> None:
    """Add ``delta`` to the user's running total, creating the row if needed.

    On Postgres and SQLite this is a single ``INSERT .. ON CONFLICT DO UPDATE``
    evaluated by the database. Any other backend gets a read-then-write that
    can lose an update when two requests race.
    """
    now = utcnow()
    dialect = db.get_bind().dialect.name
    insert = UPSERT_INSERTS.get(dialect)
    if insert is not None:
        stmt = insert(UserPoints).values(user_id=user_id, total_points=delta, updated_at=now)
        stmt = stmt.on_conflict_do_update(
            index_elements=[UserPoints.user_id],
            set_={"total_points": UserPoints.total_points + delta, "updated_at": now},
        )
        await db.execute(stmt)
        return

    logger.warning("Non-atomic points increment on dialect %s for user %s", dialect, user_id)
    row = await db.get(UserPoints, user_id)
    if row is None:
        db.add(UserPoints(user_id=user_id, total_points=delta, updated_at=now))
    else:
        row.total_points = row.total_points + delta
        row.updated_at = now
    await db.flush()


async def grant_points(
    db: AsyncSession,
    user_id: str,
    points: int,
    reason: str,
    meta: dict[str, Any] | None = None,
    dedupe_key: str | None = None,
) -> bool:
    """Write a ledger entry and bump the running total.

    Returns True if granted, False if ``dedupe_key`` was already used.
    A unique violation rolls the session back, so call this at a
    transaction boundary. The caller commits.
    """
    if dedupe_key is not None:
        existing = await db.execute(
            select(PointsLedger.id).where(PointsLedger.dedupe_key == dedupe_key)
        )
        if existing.scalar_one_or_none() is not None:
            return False

    db.add(PointsLedger(
        user_id=user_id,
        points=points,
        reason=reason,
        meta=meta or {},
        dedupe_key=dedupe_key,
        created_at=utcnow(),
    ))
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        logger.info("Duplicate points grant ignored: %s", dedupe_key)
        return False

    if points:
        await increment_user_points(db, user_id, points)
    return True


async def list_ledger(db: AsyncSession, user_id: str, limit: int = 50) -> list[PointsLedger]:
    result = await db.execute(
        select(PointsLedger)
        .where(PointsLedger.user_id == user_id)
        .order_by(PointsLedger.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def record_wine_options_result(
    db: AsyncSession,
    *,
    user_id: str,
    mode: str,
    score: int,
    max_score: int,
    duration_seconds: float | None,
    streak_bonus: bool,
    time_bonus: bool,
    points_awarded: int,
    session_id: str | None,
    invite_code: str | None,
) -> WineOptionsResult:
    """Append a finished game to the results log. The caller commits."""
    row = WineOptionsResult(
        user_id=user_id,
        mode=mode,
        score=score,
        max_score=max_score,
        duration_seconds=duration_seconds,
        streak_bonus=streak_bonus,
        time_bonus=time_bonus,
        points_awarded=points_awarded,
        session_id=session_id,
        invite_code=invite_code,
    )
    db.add(row)
    await db.flush()
    return row
