"""Swirdle persistence: today's word, attempts, stats and hint purchases."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from decanted.db.base import utcnow
from decanted.db.models import SwirdleAttempt, SwirdleUserStats, SwirdleWord
from decanted.errors import ApiError, bad_request, conflict, not_found
from decanted.points.service import get_total_points, grant_points
from decanted.swirdle.game import (
    HINT_COST,
    MAX_GUESSES,
    WIN_POINTS,
    Stats,
    compute_statuses,
    is_win,
    next_stats,
    pick_word_for_date,
    share_text,
)

logger = logging.getLogger(__name__)


async def word_for_date(db: AsyncSession, for_date: date) -> SwirdleWord | None:
    """The scheduled word for the day, else a stable pick from the published pool."""
    result = await db.execute(
        select(SwirdleWord).where(
            SwirdleWord.date_scheduled == for_date,
            SwirdleWord.is_published.is_(True),
        )
    )
    word = result.scalar_one_or_none()
    if word is not None:
        return word

    pool = await db.execute(
        select(SwirdleWord).where(SwirdleWord.is_published.is_(True)).order_by(SwirdleWord.id)
    )
    return pick_word_for_date(list(pool.scalars().all()), for_date)


async def get_attempt(db: AsyncSession, user_id: str, word_id: str) -> SwirdleAttempt | None:
    result = await db.execute(
        select(SwirdleAttempt).where(SwirdleAttempt.user_id == user_id, SwirdleAttempt.word_id == word_id)
    )
    return result.scalar_one_or_none()


async def get_or_create_attempt(db: AsyncSession, user_id: str, word_id: str) -> SwirdleAttempt:
    attempt = await get_attempt(db, user_id, word_id)
    if attempt is not None:
        return attempt
    db.add(SwirdleAttempt(user_id=user_id, word_id=word_id, guesses=[], hints_used=[]))
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
    attempt = await get_attempt(db, user_id, word_id)
    if attempt is None:
        raise RuntimeError("Swirdle attempt could not be created")
    return attempt


async def get_stats(db: AsyncSession, user_id: str) -> Stats:
    row = await db.get(SwirdleUserStats, user_id)
    if row is None:
        return Stats()
    return Stats(row.games_played, row.wins, row.current_streak, row.max_streak, row.last_played)


async def save_stats(db: AsyncSession, user_id: str, stats: Stats) -> None:
    row = await db.get(SwirdleUserStats, user_id)
    if row is None:
        row = SwirdleUserStats(user_id=user_id)
        db.add(row)
    row.games_played = stats.games_played
    row.wins = stats.wins
    row.current_streak = stats.current_streak
    row.max_streak = stats.max_streak
    row.last_played = stats.last_played
    row.updated_at = utcnow()
    await db.flush()


@dataclass(frozen=True)
class GuessOutcome:
    statuses: list[str]
    attempts: int
    completed: bool
    won: bool
    points_awarded: int
    share_text: str | None
    definition: str | None


async def submit_guess(
    db: AsyncSession,
    word: SwirdleWord,
    user_id: str,
    guess: str,
    today: date,
) -> GuessOutcome:
    """Record one guess. Finishing the game updates stats and, on a win, awards points once."""
    guess = guess.strip().upper()
    answer = word.word.upper()
    word_id, definition = word.id, word.definition
    if len(guess) != len(answer) or not guess.isalpha():
        raise bad_request(f"Guess must be {len(answer)} letters")

    attempt = await get_or_create_attempt(db, user_id, word_id)
    if attempt.completed:
        raise conflict("GAME_COMPLETE", "Today's game is already finished")

    statuses = compute_statuses(answer, guess)
    won = is_win(statuses)
    guesses = [*(attempt.guesses or []), guess]
    attempt.guesses = guesses
    attempt.attempts = len(guesses)
    completed = won or attempt.attempts >= MAX_GUESSES
    attempt.completed = completed
    attempt.won = won

    if completed:
        attempt.completed_at = utcnow()
        await save_stats(db, user_id, next_stats(await get_stats(db, user_id), won, today))
    await db.commit()

    points = 0
    if won:
        granted = await grant_points(
            db,
            user_id,
            WIN_POINTS,
            reason="swirdle_win",
            meta={"word_id": word_id, "attempts": len(guesses)},
            dedupe_key=f"swirdle:{user_id}:{word_id}",
        )
        await db.commit()
        points = WIN_POINTS if granted else 0

    return GuessOutcome(
        statuses=statuses,
        attempts=len(guesses),
        completed=completed,
        won=won,
        points_awarded=points,
        share_text=share_text(answer, guesses, won, today) if completed else None,
        definition=definition if completed else None,
    )


async def buy_hint(db: AsyncSession, word: SwirdleWord, user_id: str, index: int) -> tuple[str, int]:
    """Reveal hint ``index`` for HINT_COST points. Re-reading a bought hint is free.

    Returns the hint text and the points charged.
    """
    hints = list(word.hints or [])
    if index < 0 or index >= len(hints):
        raise not_found("Hint not found")
    hint = hints[index]
    word_id = word.id

    attempt = await get_or_create_attempt(db, user_id, word_id)
    if index in (attempt.hints_used or []):
        return hint, 0
    if await get_total_points(db, user_id) < HINT_COST:
        raise ApiError(402, "INSUFFICIENT_POINTS", f"A hint costs {HINT_COST} points")

    granted = await grant_points(
        db,
        user_id,
        -HINT_COST,
        reason="swirdle_hint",
        meta={"word_id": word_id, "hint_index": index},
        dedupe_key=f"swirdle_hint:{user_id}:{word_id}:{index}",
    )
    attempt = await get_or_create_attempt(db, user_id, word_id)
    if index not in (attempt.hints_used or []):
        attempt.hints_used = [*(attempt.hints_used or []), index]
    await db.commit()
    return hint, HINT_COST if granted else 0
