"""Daily vocab and trial quiz: lookup, scoring and one-attempt-per-day."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from decanted.db.models import DailyVocab, TrialQuiz, TrialQuizAttempt
from decanted.points.service import get_total_points, grant_points
from decanted.profiles.service import ensure_profile
from decanted.trial.service import start_trial_if_unset

logger = logging.getLogger(__name__)

DEFAULT_VOCAB_POINTS = 5


def vocab_dedupe_key(user_id: str, for_date: date) -> str:
    return f"vocab_daily:{user_id}:{for_date.isoformat()}"


def trial_quiz_dedupe_key(user_id: str, quiz_id: str) -> str:
    return f"trial_quiz:{user_id}:{quiz_id}"


def public_questions(questions: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Strip answers before a quiz leaves the server."""
    return [{"q": q.get("q", ""), "options": list(q.get("options", []))} for q in questions]


def score_selections(questions: list[dict[str, Any]], selections: list[int]) -> int:
    """Count selections that match ``correct_index``; extra or missing answers score nothing."""
    return sum(
        1
        for q, picked in zip(questions, selections)
        if picked is not None and q.get("correct_index") == picked
    )


# ── Vocab ──


async def get_vocab_for(db: AsyncSession, for_date: date, locales: list[str]) -> DailyVocab | None:
    result = await db.execute(
        select(DailyVocab).where(DailyVocab.for_date == for_date, DailyVocab.locale.in_(locales))
    )
    rows = {row.locale: row for row in result.scalars().all()}
    for locale in locales:
        if locale in rows:
            return rows[locale]
    return None


@dataclass(frozen=True)
class VocabOutcome:
    already_attempted: bool
    correct: bool = False
    points: int = 0


async def attempt_vocab(db: AsyncSession, vocab: DailyVocab, user_id: str, selection: int) -> VocabOutcome:
    """Score a vocab answer once per user per content day.

    The ledger row is written even for zero points so the dedupe key
    always marks the day as attempted.
    """
    correct = selection == vocab.correct_index
    points = (vocab.points_award or DEFAULT_VOCAB_POINTS) if correct else 0
    granted = await grant_points(
        db,
        user_id,
        points,
        reason="vocab_daily",
        meta={"for_date": vocab.for_date.isoformat(), "vocab_id": vocab.id, "correct": correct},
        dedupe_key=vocab_dedupe_key(user_id, vocab.for_date),
    )
    if not granted:
        return VocabOutcome(already_attempted=True)
    await db.commit()
    return VocabOutcome(already_attempted=False, correct=correct, points=points)


# ── Trial quiz ──


async def get_trial_quiz_for(db: AsyncSession, for_date: date, locales: list[str]) -> TrialQuiz | None:
    result = await db.execute(
        select(TrialQuiz).where(
            TrialQuiz.for_date == for_date,
            TrialQuiz.locale.in_(locales),
            TrialQuiz.is_published.is_(True),
        )
    )
    rows = {row.locale: row for row in result.scalars().all()}
    for locale in locales:
        if locale in rows:
            return rows[locale]
    return None


async def get_published_quiz(db: AsyncSession, quiz_id: str) -> TrialQuiz | None:
    result = await db.execute(
        select(TrialQuiz).where(TrialQuiz.id == quiz_id, TrialQuiz.is_published.is_(True))
    )
    return result.scalar_one_or_none()


async def find_attempt(db: AsyncSession, user_id: str, for_date: date, locale: str) -> TrialQuizAttempt | None:
    result = await db.execute(
        select(TrialQuizAttempt).where(
            TrialQuizAttempt.user_id == user_id,
            TrialQuizAttempt.for_date == for_date,
            TrialQuizAttempt.locale == locale,
        )
    )
    return result.scalar_one_or_none()


@dataclass(frozen=True)
class QuizOutcome:
    already_attempted: bool
    correct: int
    points: int
    attempt_id: str | None = None
    total_points: int = 0
    trial_started: bool = False


async def attempt_trial_quiz(
    db: AsyncSession,
    quiz: TrialQuiz,
    user_id: str,
    correct: int,
    now: datetime,
    source: str = "web",
) -> QuizOutcome:
    """Record the user's one attempt for the quiz's day and locale, then award and start the trial.

    Each step commits on its own; a failure part-way leaves the earlier
    steps in place.
    """
    points = quiz.points_award if correct > 0 else 0
    quiz_id, for_date, locale = quiz.id, quiz.for_date, quiz.locale

    existing = await find_attempt(db, user_id, for_date, locale)
    if existing is not None:
        return QuizOutcome(True, existing.correct_count, existing.points_awarded, existing.id)

    attempt = TrialQuizAttempt(
        user_id=user_id,
        quiz_id=quiz_id,
        locale=locale,
        for_date=for_date,
        correct_count=correct,
        points_awarded=points,
        source=source,
    )
    db.add(attempt)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        existing = await find_attempt(db, user_id, for_date, locale)
        if existing is None:
            raise
        return QuizOutcome(True, existing.correct_count, existing.points_awarded, existing.id)
    attempt_id = attempt.id

    await ensure_profile(db, user_id, locale=locale)
    await db.commit()

    if points > 0:
        await grant_points(
            db,
            user_id,
            points,
            reason="trial_quiz",
            meta={"quiz_id": quiz_id, "for_date": for_date.isoformat(), "locale": locale, "correct": correct},
            dedupe_key=trial_quiz_dedupe_key(user_id, quiz_id),
        )
        await db.commit()

    trial_started = await start_trial_if_unset(db, user_id, now)
    await db.commit()

    total = await get_total_points(db, user_id)
    logger.info("Trial quiz attempt %s user=%s correct=%d points=%d", attempt_id, user_id, correct, points)
    return QuizOutcome(False, correct, points, attempt_id, total, trial_started)
