"""Merge guest progress into a signed-in account."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from decanted.content.service import find_attempt, trial_quiz_dedupe_key
from decanted.db.models import Profile, TrialQuizAttempt
from decanted.points.service import grant_points
from decanted.profiles.service import ensure_profile
from decanted.trial.service import start_trial_if_unset


@dataclass(frozen=True)
class MergeResult:
    points_merged: int
    trial_started: bool
    quiz_inserted: bool


async def merge_guest_progress(
    db: AsyncSession,
    user_id: str,
    now: datetime,
    points: int | None,
    quiz: dict[str, Any] | None,
) -> MergeResult:
    """Fold progress a user made as a guest into their account.

    Steps commit one at a time. The quiz attempt is skipped when one already
    exists for that day and locale, and the points grant is deduplicated by
    quiz id, so merging twice does not double-count.
    """
    quiz = quiz or {}
    locale = quiz.get("locale") or "en"
    await ensure_profile(db, user_id, locale=locale)
    await db.commit()

    await start_trial_if_unset(db, user_id, now)
    await db.commit()
    started_at = await db.execute(select(Profile.trial_started_at).where(Profile.id == user_id))
    trial_started = started_at.scalar_one_or_none() is not None

    merged = points or int(quiz.get("points_awarded") or 0)
    quiz_id = quiz.get("quiz_id")
    for_date = quiz.get("for_date")

    quiz_inserted = False
    if for_date is not None and await find_attempt(db, user_id, for_date, locale) is None:
        db.add(TrialQuizAttempt(
            user_id=user_id,
            quiz_id=quiz_id,
            locale=locale,
            for_date=for_date,
            correct_count=int(quiz.get("correct_count") or 0),
            points_awarded=merged,
            source="guest_merge",
        ))
        try:
            await db.commit()
            quiz_inserted = True
        except IntegrityError:
            await db.rollback()

    if merged > 0:
        if quiz_id:
            dedupe_key: str | None = trial_quiz_dedupe_key(user_id, quiz_id)
        elif for_date is not None:
            dedupe_key = f"guest_data:{user_id}:{for_date.isoformat()}"
        else:
            dedupe_key = None
        granted = await grant_points(
            db,
            user_id,
            merged,
            reason="trial_quiz" if quiz else "guest_data",
            meta={"source": "guest_merge", "quiz_id": quiz_id, "for_date": for_date.isoformat() if for_date else None},
            dedupe_key=dedupe_key,
        )
        await db.commit()
        if not granted:
            merged = 0

    return MergeResult(points_merged=merged, trial_started=trial_started, quiz_inserted=quiz_inserted)
