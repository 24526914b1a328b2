"""Profile API: the signed-in user's account."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from decanted.auth.dependencies import AuthUser, get_current_user
from decanted.config import Settings
from decanted.database import get_session
from decanted.db.models import Profile
from decanted.dependencies import get_app_settings
from decanted.points.entitlements import effective_tier
from decanted.points.service import get_total_points
from decanted.profiles.schemas import ProfileResponse, ProfileUpdateRequest
from decanted.profiles.service import ensure_profile
from decanted.trial.service import trial_status

router = APIRouter(prefix="/api/v1/profile", tags=["Profile"])


async def _to_response(db: AsyncSession, profile: Profile, settings: Settings) -> ProfileResponse:
    status = trial_status(profile.trial_started_at, datetime.now(timezone.utc), settings.trial_days)
    return ProfileResponse(
        id=profile.id,
        alias=profile.alias,
        email=profile.email,
        country=profile.country,
        state=profile.state,
        locale=profile.locale,
        tier=profile.tier,
        effective_tier=effective_tier(profile.tier, status.is_trial),
        total_points=await get_total_points(db, profile.id),
        is_trial=status.is_trial,
        trial_started_at=status.trial_started_at,
        trial_expires_at=status.trial_expires_at,
        days_left=status.days_left,
        has_billing=profile.stripe_customer_id is not None,
    )


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
) -> ProfileResponse:
    """Return the caller's profile, creating it on first visit."""
    profile = await ensure_profile(db, user.id, email=user.email)
    await db.commit()
    return await _to_response(db, profile, settings)


@router.patch("/me", response_model=ProfileResponse)
async def update_my_profile(
    body: ProfileUpdateRequest,
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
) -> ProfileResponse:
    profile = await ensure_profile(db, user.id, email=user.email)
    for field, value in body.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(profile, field, value.strip() if isinstance(value, str) else value)
    await db.commit()
    return await _to_response(db, profile, settings)
