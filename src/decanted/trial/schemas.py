"""Pydantic schemas for trial status and guest merge."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field


class TrialStatusResponse(BaseModel):
    tier: str
    is_trial: bool
    trial_started_at: datetime | None
    trial_expires_at: datetime | None
    days_left: int


class TrialStartResponse(BaseModel):
    trial_started: bool
    status: TrialStatusResponse


class GuestQuiz(BaseModel):
    quiz_id: str | None = None
    for_date: date | None = None
    locale: str | None = None
    correct_count: int = Field(default=0, ge=0)
    points_awarded: int | None = Field(default=None, ge=0)


class MergeGuestRequest(BaseModel):
    points: int | None = Field(default=None, ge=0)
    quiz: GuestQuiz | None = None


class MergeGuestResponse(BaseModel):
    success: bool = True
    points_merged: int
    trial_started: bool
    quiz_inserted: bool
