"""Seven-day trial window.

A trial starts the first time a user completes the trial quiz (or merges
guest progress) and never restarts.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from decanted.db.base import as_utc
from decanted.db.models import Profile

SECONDS_PER_DAY = 86_400


@dataclass(frozen=True)
class TrialStatus:
    is_trial: bool
    trial_started_at: datetime | None
    trial_expires_at: datetime | None
    days_left: int

    def as_dict(self) -> dict:
        return {
            "is_trial": self.is_trial,
            "trial_started_at": self.trial_started_at.isoformat() if self.trial_started_at else None,
            "trial_expires_at": self.trial_expires_at.isoformat() if self.trial_expires_at else None,
            "days_left": self.days_left,
        }


def trial_status(started_at: datetime | None, now: datetime, days: int = 7) -> TrialStatus:
    """Compute the trial window; ``days_left`` rounds partial days up."""
    started_at = as_utc(started_at)
    if started_at is None:
        return TrialStatus(False, None, None, 0)

    expires_at = started_at + timedelta(days=days)
    remaining = (expires_at - now).total_seconds()
    days_left = max(0, math.ceil(remaining / SECONDS_PER_DAY))
    return TrialStatus(
        is_trial=remaining > 0,
        trial_started_at=started_at,
        trial_expires_at=expires_at,
        days_left=days_left,
    )


async def start_trial_if_unset(db: AsyncSession, user_id: str, now: datetime) -> bool:
    """Stamp ``trial_started_at`` unless already set. Returns True if this call started it."""
    result = await db.execute(
        update(Profile)
        .where(Profile.id == user_id, Profile.trial_started_at.is_(None))
        .values(trial_started_at=now, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
