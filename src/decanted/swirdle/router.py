"""Swirdle API: the daily wine-word puzzle."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from decanted.auth.dependencies import get_current_user_id, get_optional_user_id
from decanted.config import Settings
from decanted.content.dates import today_in
from decanted.database import get_session
from decanted.db.models import SwirdleWord
from decanted.dependencies import get_app_settings
from decanted.errors import not_found
from decanted.points.service import get_total_points
from decanted.swirdle.game import HINT_COST, MAX_GUESSES, compute_statuses
from decanted.swirdle.service import buy_hint, get_attempt, get_stats, submit_guess, word_for_date

router = APIRouter(prefix="/api/v1/swirdle", tags=["Swirdle"])


class SwirdleTodayResponse(BaseModel):
    word_id: str
    for_date: date
    length: int
    category: str
    difficulty: str
    hint_count: int
    hint_cost: int = HINT_COST
    max_guesses: int = MAX_GUESSES
    guesses: list[str] = []
    statuses: list[list[str]] = []
    hints_used: list[int] = []
    completed: bool = False
    won: bool = False
    definition: str | None = None


class GuessRequest(BaseModel):
    guess: str = Field(min_length=1, max_length=16)


class GuessResponse(BaseModel):
    statuses: list[str]
    attempts: int
    completed: bool
    won: bool
    points_awarded: int
    share_text: str | None = None
    definition: str | None = None


class HintResponse(BaseModel):
    index: int
    hint: str
    points_spent: int
    total_points: int


class StatsResponse(BaseModel):
    games_played: int
    wins: int
    current_streak: int
    max_streak: int
    last_played: date | None


async def _today_word(db: AsyncSession, settings: Settings) -> tuple[SwirdleWord, date]:
    today = today_in(settings.content_timezone)
    word = await word_for_date(db, today)
    if word is None:
        raise not_found("No Swirdle word available")
    return word, today


@router.get("/today", response_model=SwirdleTodayResponse)
async def swirdle_today(
    user_id: str | None = Depends(get_optional_user_id),
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
) -> SwirdleTodayResponse:
    """Today's puzzle shape. Signed-in callers also get their progress."""
    word, today = await _today_word(db, settings)
    out = SwirdleTodayResponse(
        word_id=word.id,
        for_date=today,
        length=len(word.word),
        category=word.category,
        difficulty=word.difficulty,
        hint_count=len(word.hints or []),
    )
    if user_id is None:
        return out

    attempt = await get_attempt(db, user_id, word.id)
    if attempt is not None:
        guesses = list(attempt.guesses or [])
        out.guesses = guesses
        out.statuses = [compute_statuses(word.word, g) for g in guesses]
        out.hints_used = list(attempt.hints_used or [])
        out.completed = attempt.completed
        out.won = attempt.won
        out.definition = word.definition if attempt.completed else None
    return out


@router.post("/guess", response_model=GuessResponse)
async def swirdle_guess(
    body: GuessRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
) -> GuessResponse:
    word, today = await _today_word(db, settings)
    outcome = await submit_guess(db, word, user_id, body.guess, today)
    return GuessResponse(
        statuses=outcome.statuses,
        attempts=outcome.attempts,
        completed=outcome.completed,
        won=outcome.won,
        points_awarded=outcome.points_awarded,
        share_text=outcome.share_text,
        definition=outcome.definition,
    )


@router.post("/hints/{index}", response_model=HintResponse)
async def swirdle_hint(
    index: int,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
) -> HintResponse:
    word, _ = await _today_word(db, settings)
    hint, spent = await buy_hint(db, word, user_id, index)
    return HintResponse(index=index, hint=hint, points_spent=spent, total_points=await get_total_points(db, user_id))


@router.get("/stats", response_model=StatsResponse)
async def swirdle_stats(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> StatsResponse:
    stats = await get_stats(db, user_id)
    return StatsResponse(
        games_played=stats.games_played,
        wins=stats.wins,
        current_streak=stats.current_streak,
        max_streak=stats.max_streak,
        last_played=stats.last_played,
    )
