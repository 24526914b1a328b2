"""Guess What weekly challenges."""

from __future__ import annotations

import re
from typing import Any
from urllib.parse import parse_qs, urlparse

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from decanted.db.models import GuessWhatChallenge, GuessWhatResponse
from decanted.errors import conflict, not_found
from decanted.points.service import grant_points

_VIMEO_ID = re.compile(r"^/(?:video/)?(\d+)")


def to_embed_url(url: str | None) -> str | None:
    """Normalise YouTube and Vimeo watch links to their embeddable form."""
    if not url:
        return None
    parsed = urlparse(url.strip())
    host = (parsed.hostname or "").lower().removeprefix("www.").removeprefix("m.")

    if host == "youtu.be":
        video_id = parsed.path.lstrip("/").split("/")[0]
        return f"https://www.youtube.com/embed/{video_id}" if video_id else url
    if host in ("youtube.com", "youtube-nocookie.com"):
        if parsed.path.startswith("/embed/"):
            return url
        if parsed.path.startswith("/shorts/"):
            return f"https://www.youtube.com/embed/{parsed.path.split('/')[2]}"
        video_id = parse_qs(parsed.query).get("v", [None])[0]
        return f"https://www.youtube.com/embed/{video_id}" if video_id else url
    if host == "vimeo.com":
        match = _VIMEO_ID.match(parsed.path)
        return f"https://player.vimeo.com/video/{match.group(1)}" if match else url
    return url


def public_challenge(challenge: GuessWhatChallenge) -> dict[str, Any]:
    return {
        "id": challenge.id,
        "title": challenge.title,
        "week_date": challenge.week_date,
        "video_url": to_embed_url(challenge.video_url),
        "questions": [
            {"q": q.get("q", ""), "options": list(q.get("options", []))}
            for q in (challenge.questions or [])
        ],
        "points_award": challenge.points_award,
    }


async def list_published(db: AsyncSession, limit: int = 20) -> list[GuessWhatChallenge]:
    result = await db.execute(
        select(GuessWhatChallenge)
        .where(GuessWhatChallenge.is_published.is_(True))
        .order_by(GuessWhatChallenge.week_date.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


def score_answers(questions: list[dict[str, Any]], answers: dict[str, int]) -> int:
    return sum(
        1
        for i, q in enumerate(questions)
        if str(i) in answers and answers[str(i)] == q.get("correct_index")
    )


async def submit_response(
    db: AsyncSession,
    challenge_id: str,
    user_id: str,
    answers: dict[str, int],
) -> dict[str, Any]:
    """Score and store the user's only response to a challenge."""
    result = await db.execute(
        select(GuessWhatChallenge).where(
            GuessWhatChallenge.id == challenge_id,
            GuessWhatChallenge.is_published.is_(True),
        )
    )
    challenge = result.scalar_one_or_none()
    if challenge is None:
        raise not_found("Challenge not found")

    questions = list(challenge.questions or [])
    reveal = dict(challenge.reveal or {})
    award = challenge.points_award
    score = score_answers(questions, answers)
    total = len(questions)

    db.add(GuessWhatResponse(user_id=user_id, challenge_id=challenge_id, answers=answers, score=score))
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise conflict("ALREADY_SUBMITTED", "You have already answered this challenge") from e

    points = (award * score) // total if total else 0
    if points > 0:
        await grant_points(
            db,
            user_id,
            points,
            reason="guess_what",
            meta={"challenge_id": challenge_id, "score": score, "total": total},
            dedupe_key=f"guess_what:{user_id}:{challenge_id}",
        )
        await db.commit()

    return {"score": score, "total": total, "points_awarded": points, "reveal": reveal}
