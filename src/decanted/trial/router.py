"""Trial API: status, start and guest progress merge."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from decanted.auth.dependencies import get_current_user_id
from decanted.config import Settings
from decanted.database import get_session
from decanted.dependencies import get_app_settings
from decanted.errors import bad_request
from decanted.points.entitlements import effective_tier
from decanted.profiles.service import ensure_profile
from decanted.trial.merge import merge_guest_progress
from decanted.trial.schemas import (
    MergeGuestRequest,
    MergeGuestResponse,
    TrialStartResponse,
    TrialStatusResponse,
)
from decanted.trial.service import start_trial_if_unset, trial_status

router = APIRouter(prefix="/api/v1/trial", tags=["Trial"])


async def _status_for(db: AsyncSession, user_id: str, settings: Settings) -> TrialStatusResponse:
    profile = await ensure_profile(db, user_id)
    await db.refresh(profile)
    status = trial_status(profile.trial_started_at, datetime.now(timezone.utc), settings.trial_days)
    return TrialStatusResponse(
        tier=effective_tier(profile.tier, status.is_trial),
        is_trial=status.is_trial,
        trial_started_at=status.trial_started_at,
        trial_expires_at=status.trial_expires_at,
        days_left=status.days_left,
    )


@router.get("/status", response_model=TrialStatusResponse)
async def get_trial_status(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
) -> TrialStatusResponse:
    status = await _status_for(db, user_id, settings)
    await db.commit()
    return status


@router.post("/start", response_model=TrialStartResponse)
async def start_trial(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
) -> TrialStartResponse:
    """Start the trial; calling again keeps the original start time."""
    await ensure_profile(db, user_id)
    await db.commit()
    started = await start_trial_if_unset(db, user_id, datetime.now(timezone.utc))
    await db.commit()
    return TrialStartResponse(trial_started=started, status=await _status_for(db, user_id, settings))


@router.post("/merge-guest-progress", response_model=MergeGuestResponse)
async def merge_guest(
    body: MergeGuestRequest | None = None,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> MergeGuestResponse:
    """Carry a guest's trial quiz result and points over to the signed-in account.

    ``trial_started`` reports whether the account has a trial after the merge,
    whether this call or an earlier one started it.
    """
    if body is None or (not body.points and body.quiz is None):
        raise bad_request("No guest data provided")

    result = await merge_guest_progress(
        db,
        user_id,
        datetime.now(timezone.utc),
        points=body.points,
        quiz=body.quiz.model_dump() if body.quiz else None,
    )
    return MergeGuestResponse(
        points_merged=result.points_merged,
        trial_started=result.trial_started,
        quiz_inserted=result.quiz_inserted,
    )
