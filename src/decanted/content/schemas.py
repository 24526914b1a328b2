"""Pydantic schemas for daily content requests and responses."""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, Field, StrictInt, model_validator


# --- Vocab ---


class VocabTodayResponse(BaseModel):
    id: str
    locale: str
    for_date: date
    term: str
    question: str
    options: list[str]
    points_award: int


class VocabAttemptRequest(BaseModel):
    user_id: str = Field(min_length=1)
    selection: StrictInt
    locale: str | None = None


class VocabAttemptResponse(BaseModel):
    correct: bool
    points: int


class AlreadyAttemptedResponse(BaseModel):
    alreadyAttempted: bool = True  # noqa: N815


# --- Trial quiz ---


class QuizQuestion(BaseModel):
    q: str
    options: list[str]


class TrialQuizTodayResponse(BaseModel):
    id: str
    locale: str
    for_date: date
    title: str
    questions: list[QuizQuestion]
    points_award: int


class TrialQuizAttemptRequest(BaseModel):
    quiz_id: str = Field(min_length=1)
    selections: list[int | None] | None = None
    correct_count: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _needs_answers(self) -> TrialQuizAttemptRequest:
        if self.selections is None and self.correct_count is None:
            raise ValueError("selections or correct_count is required")
        return self


class TrialQuizAttemptResponse(BaseModel):
    alreadyAttempted: bool = False  # noqa: N815
    correct: int
    points_awarded: int
    total_points: int | None = None
    attempt_id: str | None = None
    trial_started: bool = False


# --- Admin upserts ---


class VocabUpsert(BaseModel):
    locale: str = "en"
    for_date: date
    term: str
    question: str
    options: list[str] = Field(min_length=2)
    correct_index: int = Field(ge=0)
    points_award: int = Field(default=5, ge=0)

    @model_validator(mode="after")
    def _index_in_range(self) -> VocabUpsert:
        if self.correct_index >= len(self.options):
            raise ValueError("correct_index out of range")
        return self


class AdminQuizQuestion(BaseModel):
    q: str
    options: list[str] = Field(min_length=2)
    correct_index: int = Field(ge=0)


class TrialQuizUpsert(BaseModel):
    locale: str = "en"
    for_date: date
    title: str
    questions: list[AdminQuizQuestion] = Field(min_length=1)
    points_award: int = Field(default=5, ge=0)
    is_published: bool = True


class UpsertResponse(BaseModel):
    id: str
    created: bool
    data: dict[str, Any] = {}
