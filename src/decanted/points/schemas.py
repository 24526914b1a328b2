"""Pydantic schemas for points and entitlement endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


class AwardPointsRequest(BaseModel):
    user_id: str = Field(min_length=1)
    mode: Literal["solo", "host", "guest"] = "solo"
    score: int = Field(ge=0)
    max_score: int = Field(default=5, ge=0)
    duration_seconds: float | None = Field(default=None, ge=0)
    streak_bonus: bool = False
    time_bonus: bool = False
    session_id: str | None = None
    invite_code: str | None = None


class AwardPointsResponse(BaseModel):
    ok: bool = True
    points_awarded: int
    total_points: int


class PointsTotalResponse(BaseModel):
    user_id: str
    total_points: int


class LedgerEntryResponse(BaseModel):
    id: str
    points: int
    reason: str
    meta: dict[str, Any]
    created_at: datetime


class LedgerResponse(BaseModel):
    entries: list[LedgerEntryResponse]
    total_points: int


class EntitlementCheckRequest(BaseModel):
    required_tier: Literal["free", "pro", "vip"] = "free"
    required_points: int = Field(default=0, ge=0)


class EntitlementCheckResponse(BaseModel):
    tier: str
    points: int
    meets_tier: bool
    meets_points: bool
    locked: bool
    points_delta: int
