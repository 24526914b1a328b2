"""Guess What API: weekly video challenges."""

from __future__ import annotations

from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from decanted.auth.dependencies import get_current_user_id
from decanted.database import get_session
from decanted.guess_what.service import list_published, public_challenge, submit_response

router = APIRouter(prefix="/api/v1/guess-what", tags=["Guess What"])


class ChallengeQuestion(BaseModel):
    q: str
    options: list[str]


class ChallengeResponse(BaseModel):
    id: str
    title: str
    week_date: date
    video_url: str | None
    questions: list[ChallengeQuestion]
    points_award: int


class SubmitAnswersRequest(BaseModel):
    answers: dict[str, int]


class SubmitAnswersResponse(BaseModel):
    score: int
    total: int
    points_awarded: int
    reveal: dict[str, Any]


@router.get("/challenges", response_model=list[ChallengeResponse])
async def list_challenges(
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_session),
) -> list[ChallengeResponse]:
    """Published challenges, newest week first, answers withheld."""
    return [ChallengeResponse(**public_challenge(c)) for c in await list_published(db, limit)]


@router.post("/challenges/{challenge_id}/responses", response_model=SubmitAnswersResponse)
async def answer_challenge(
    challenge_id: str,
    body: SubmitAnswersRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> SubmitAnswersResponse:
    """Answers are keyed by question index. One response per user per challenge."""
    result = await submit_response(db, challenge_id, user_id, body.answers)
    return SubmitAnswersResponse(**result)
