"""Daily content API: vocab-of-the-day and the trial quiz."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Header, Query
from sqlalchemy.ext.asyncio import AsyncSession

from decanted.auth.dependencies import get_current_user_id
from decanted.config import Settings
from decanted.content.dates import locale_candidates, today_in
from decanted.content.schemas import (
    AlreadyAttemptedResponse,
    QuizQuestion,
    TrialQuizAttemptRequest,
    TrialQuizAttemptResponse,
    TrialQuizTodayResponse,
    VocabAttemptRequest,
    VocabAttemptResponse,
    VocabTodayResponse,
)
from decanted.content.service import (
    attempt_trial_quiz,
    attempt_vocab,
    get_published_quiz,
    get_trial_quiz_for,
    get_vocab_for,
    public_questions,
    score_selections,
)
from decanted.database import get_session
from decanted.dependencies import get_app_settings
from decanted.errors import not_found

router = APIRouter(prefix="/api/v1", tags=["Daily Content"])


# ── Vocab ──


@router.get("/vocab/today", response_model=VocabTodayResponse)
async def vocab_today(
    locale: str | None = Query(None),
    accept_language: str | None = Header(None),
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
) -> VocabTodayResponse:
    """Today's vocab question (content day in the configured timezone), answer withheld."""
    for_date = today_in(settings.content_timezone)
    vocab = await get_vocab_for(db, for_date, locale_candidates(locale, accept_language, settings.default_locale))
    if vocab is None:
        raise not_found("No vocab for today", for_date=for_date.isoformat())
    return VocabTodayResponse(
        id=vocab.id,
        locale=vocab.locale,
        for_date=vocab.for_date,
        term=vocab.term,
        question=vocab.question,
        options=list(vocab.options or []),
        points_award=vocab.points_award,
    )


@router.post("/vocab/attempt", response_model=VocabAttemptResponse | AlreadyAttemptedResponse)
async def vocab_attempt(
    body: VocabAttemptRequest,
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
) -> VocabAttemptResponse | AlreadyAttemptedResponse:
    """Answer today's vocab question. A second answer on the same day earns nothing."""
    for_date = today_in(settings.content_timezone)
    vocab = await get_vocab_for(db, for_date, locale_candidates(body.locale, None, settings.default_locale))
    if vocab is None:
        raise not_found("No vocab for today", for_date=for_date.isoformat())

    outcome = await attempt_vocab(db, vocab, body.user_id, body.selection)
    if outcome.already_attempted:
        return AlreadyAttemptedResponse()
    return VocabAttemptResponse(correct=outcome.correct, points=outcome.points)


# ── Trial quiz ──


@router.get("/trial-quiz/today", response_model=TrialQuizTodayResponse)
async def trial_quiz_today(
    locale: str | None = Query(None),
    accept_language: str | None = Header(None),
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
) -> TrialQuizTodayResponse:
    for_date = today_in(settings.content_timezone)
    candidates = locale_candidates(locale, accept_language, settings.default_locale)
    quiz = await get_trial_quiz_for(db, for_date, candidates)
    if quiz is None:
        raise not_found("No quiz for today", locale=candidates[0], for_date=for_date.isoformat())
    return TrialQuizTodayResponse(
        id=quiz.id,
        locale=quiz.locale,
        for_date=quiz.for_date,
        title=quiz.title,
        questions=[QuizQuestion(**q) for q in public_questions(quiz.questions or [])],
        points_award=quiz.points_award,
    )


@router.post("/trial-quiz/attempt", response_model=TrialQuizAttemptResponse)
async def trial_quiz_attempt(
    body: TrialQuizAttemptRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> TrialQuizAttemptResponse:
    """Submit the trial quiz. Scored server-side when selections are sent."""
    quiz = await get_published_quiz(db, body.quiz_id)
    if quiz is None:
        raise not_found("Quiz not found or not published")

    if body.selections is not None:
        correct = score_selections(quiz.questions or [], body.selections)
    else:
        correct = min(body.correct_count or 0, len(quiz.questions or []))

    outcome = await attempt_trial_quiz(db, quiz, user_id, correct, datetime.now(timezone.utc))
    return TrialQuizAttemptResponse(
        alreadyAttempted=outcome.already_attempted,
        correct=outcome.correct,
        points_awarded=outcome.points,
        total_points=None if outcome.already_attempted else outcome.total_points,
        attempt_id=outcome.attempt_id,
        trial_started=outcome.trial_started,
    )
