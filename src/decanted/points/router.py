"""Points API: Wine Options awards, totals, history and entitlement checks."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from decanted.auth.dependencies import get_current_user_id
from decanted.config import Settings
from decanted.database import get_session
from decanted.dependencies import get_app_settings
from decanted.points.entitlements import effective_tier, evaluate_entitlement
from decanted.points.schemas import (
    AwardPointsRequest,
    AwardPointsResponse,
    EntitlementCheckRequest,
    EntitlementCheckResponse,
    LedgerEntryResponse,
    LedgerResponse,
    PointsTotalResponse,
)
from decanted.points.service import (
    compute_award,
    get_total_points,
    grant_points,
    list_ledger,
    record_wine_options_result,
)
from decanted.profiles.service import get_profile
from decanted.trial.service import trial_status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Points"])


@router.post("/points/award", response_model=AwardPointsResponse)
async def award_points(
    body: AwardPointsRequest,
    db: AsyncSession = Depends(get_session),
) -> AwardPointsResponse:
    """Award points for a finished Wine Options game and log the result.

    Points are committed before the result row is written. If logging the
    result fails the request errors, but the points stay awarded.
    """
    points = compute_award(body.score, body.streak_bonus, body.time_bonus)

    await grant_points(
        db,
        body.user_id,
        points,
        reason="wine_options",
        meta={"mode": body.mode, "score": body.score, "session_id": body.session_id},
    )
    await db.commit()

    await record_wine_options_result(
        db,
        user_id=body.user_id,
        mode=body.mode,
        score=body.score,
        max_score=body.max_score,
        duration_seconds=body.duration_seconds,
        streak_bonus=body.streak_bonus,
        time_bonus=body.time_bonus,
        points_awarded=points,
        session_id=body.session_id,
        invite_code=body.invite_code,
    )
    await db.commit()

    total = await get_total_points(db, body.user_id)
    logger.info("Awarded %d points to %s (total %d)", points, body.user_id, total)
    return AwardPointsResponse(points_awarded=points, total_points=total)


@router.get("/points/me", response_model=PointsTotalResponse)
async def my_points(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> PointsTotalResponse:
    return PointsTotalResponse(user_id=user_id, total_points=await get_total_points(db, user_id))


@router.get("/points/history", response_model=LedgerResponse)
async def points_history(
    limit: int = Query(50, ge=1, le=200),
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> LedgerResponse:
    entries = await list_ledger(db, user_id, limit)
    return LedgerResponse(
        entries=[
            LedgerEntryResponse(
                id=e.id,
                points=e.points,
                reason=e.reason,
                meta=e.meta or {},
                created_at=e.created_at,
            )
            for e in entries
        ],
        total_points=await get_total_points(db, user_id),
    )


@router.post("/entitlements/check", response_model=EntitlementCheckResponse)
async def check_entitlement(
    body: EntitlementCheckRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
) -> EntitlementCheckResponse:
    """Evaluate a tier + points gate for the caller."""
    profile = await get_profile(db, user_id)
    points = await get_total_points(db, user_id)
    if profile is None:
        tier = "free"
    else:
        status = trial_status(profile.trial_started_at, datetime.now(timezone.utc), settings.trial_days)
        tier = effective_tier(profile.tier, status.is_trial)

    ent = evaluate_entitlement(tier, points, body.required_tier, body.required_points)
    return EntitlementCheckResponse(
        tier=tier,
        points=points,
        meets_tier=ent.meets_tier,
        meets_points=ent.meets_points,
        locked=ent.locked,
        points_delta=ent.points_delta,
    )
