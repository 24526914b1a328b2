"""Badges API: ladder, earned badges and evaluation."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from decanted.auth.dependencies import get_current_user_id, get_optional_user_id
from decanted.badges.service import evaluate_badges, list_active_badges, list_user_awards, recent_awards_for
from decanted.database import get_session
from decanted.errors import bad_request

router = APIRouter(prefix="/api/v1/badges", tags=["Badges"])

MAX_RECENT_USERS = 50


class BadgeResponse(BaseModel):
    code: str
    name: str
    description: str
    icon: str | None
    tier: str
    trigger_type: str
    threshold: int
    earned: bool = False
    awarded_at: datetime | None = None


class AwardResponse(BaseModel):
    badge_code: str
    awarded_at: datetime


class EvaluateResponse(BaseModel):
    awarded: list[str]


@router.get("/ladder", response_model=list[BadgeResponse])
async def ladder(
    user_id: str | None = Depends(get_optional_user_id),
    db: AsyncSession = Depends(get_session),
) -> list[BadgeResponse]:
    """All active badges in ladder order, with earned flags for signed-in callers."""
    earned = {}
    if user_id is not None:
        earned = {a.badge_code: a.awarded_at for a in await list_user_awards(db, user_id)}

    return [
        BadgeResponse(
            code=b.code,
            name=b.name,
            description=b.description,
            icon=b.icon,
            tier=b.tier,
            trigger_type=b.trigger_type,
            threshold=int((b.trigger_config or {}).get("threshold", 1)),
            earned=b.code in earned,
            awarded_at=earned.get(b.code),
        )
        for b in await list_active_badges(db)
    ]


@router.get("/me", response_model=list[AwardResponse])
async def my_badges(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> list[AwardResponse]:
    awards = await list_user_awards(db, user_id)
    return [AwardResponse(badge_code=a.badge_code, awarded_at=a.awarded_at) for a in awards]


@router.get("/recent", response_model=dict[str, list[AwardResponse]])
async def recent_badges(
    user_ids: str = Query(..., description="Comma-separated user ids"),
    limit: int = Query(2, ge=1, le=10),
    db: AsyncSession = Depends(get_session),
) -> dict[str, list[AwardResponse]]:
    ids = [uid.strip() for uid in user_ids.split(",") if uid.strip()]
    if not ids:
        raise bad_request("user_ids is required")
    if len(ids) > MAX_RECENT_USERS:
        raise bad_request(f"At most {MAX_RECENT_USERS} user ids")

    recent = await recent_awards_for(db, ids, limit)
    return {
        uid: [AwardResponse(badge_code=a.badge_code, awarded_at=a.awarded_at) for a in awards]
        for uid, awards in recent.items()
    }


@router.post("/evaluate", response_model=EvaluateResponse)
async def evaluate(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> EvaluateResponse:
    return EvaluateResponse(awarded=await evaluate_badges(db, user_id))
