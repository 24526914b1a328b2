"""Content administration endpoints, guarded by the service-role key.

Each PUT upserts one row by its natural key:
vocab and trial quiz by (for_date, locale), Swirdle words by scheduled
date, Guess What challenges by week.
"""

from __future__ import annotations

from datetime import date
from typing import Any

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, model_validator
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from decanted.auth.dependencies import require_service_role
from decanted.content.schemas import TrialQuizUpsert, UpsertResponse, VocabUpsert
from decanted.database import get_session
from decanted.db.base import Base
from decanted.db.models import DailyVocab, GuessWhatChallenge, SwirdleWord, TrialQuiz

logger = structlog.get_logger()

router = APIRouter(
    prefix="/api/v1/admin",
    tags=["Admin"],
    dependencies=[Depends(require_service_role)],
)


class SwirdleWordUpsert(BaseModel):
    word: str = Field(min_length=3, max_length=16, pattern=r"^[A-Za-z]+$")
    definition: str = ""
    difficulty: str = "medium"
    category: str = "general"
    hints: list[str] = []
    date_scheduled: date
    is_published: bool = True


class GuessWhatQuestion(BaseModel):
    q: str
    options: list[str] = Field(min_length=2)
    correct_index: int = Field(ge=0)

    @model_validator(mode="after")
    def _index_in_range(self) -> GuessWhatQuestion:
        if self.correct_index >= len(self.options):
            raise ValueError("correct_index out of range")
        return self


class GuessWhatUpsert(BaseModel):
    title: str
    week_date: date
    video_url: str | None = None
    questions: list[GuessWhatQuestion] = Field(min_length=1)
    reveal: dict[str, Any] = {}
    points_award: int = Field(default=10, ge=0)
    is_published: bool = True


async def _upsert(
    db: AsyncSession,
    model: type[Base],
    key: dict[str, Any],
    values: dict[str, Any],
) -> UpsertResponse:
    stmt = select(model).filter_by(**key).limit(1)
    row = (await db.execute(stmt)).scalar_one_or_none()
    created = row is None
    if created:
        row = model(**key, **values)
        db.add(row)
    else:
        for field, value in values.items():
            setattr(row, field, value)
    await db.commit()

    logger.info("content_upserted", table=model.__tablename__, id=row.id, created=created, **{
        k: str(v) for k, v in key.items()
    })
    return UpsertResponse(id=row.id, created=created, data={k: str(v) for k, v in key.items()})


@router.put("/vocab", response_model=UpsertResponse)
async def upsert_vocab(body: VocabUpsert, db: AsyncSession = Depends(get_session)) -> UpsertResponse:
    values = body.model_dump(exclude={"for_date", "locale"})
    return await _upsert(db, DailyVocab, {"for_date": body.for_date, "locale": body.locale}, values)


@router.put("/trial-quiz", response_model=UpsertResponse)
async def upsert_trial_quiz(body: TrialQuizUpsert, db: AsyncSession = Depends(get_session)) -> UpsertResponse:
    values = body.model_dump(exclude={"for_date", "locale"})
    return await _upsert(db, TrialQuiz, {"for_date": body.for_date, "locale": body.locale}, values)


@router.put("/swirdle-words", response_model=UpsertResponse)
async def upsert_swirdle_word(body: SwirdleWordUpsert, db: AsyncSession = Depends(get_session)) -> UpsertResponse:
    values = body.model_dump(exclude={"date_scheduled"})
    values["word"] = body.word.upper()
    return await _upsert(db, SwirdleWord, {"date_scheduled": body.date_scheduled}, values)


@router.put("/guess-what", response_model=UpsertResponse)
async def upsert_guess_what(body: GuessWhatUpsert, db: AsyncSession = Depends(get_session)) -> UpsertResponse:
    values = body.model_dump(exclude={"week_date"})
    return await _upsert(db, GuessWhatChallenge, {"week_date": body.week_date}, values)
