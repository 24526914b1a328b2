"""Pydantic schemas for the profile endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class ProfileUpdateRequest(BaseModel):
    alias: str | None = Field(default=None, max_length=64)
    country: str | None = Field(default=None, max_length=64)
    state: str | None = Field(default=None, max_length=64)
    locale: str | None = Field(default=None, max_length=16)


class ProfileResponse(BaseModel):
    id: str
    alias: str | None
    email: str | None
    country: str | None
    state: str | None
    locale: str
    tier: str
    effective_tier: str
    total_points: int
    is_trial: bool
    trial_started_at: datetime | None
    trial_expires_at: datetime | None
    days_left: int
    has_billing: bool
