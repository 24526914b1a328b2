"""Badge award service with duplicate prevention and trigger evaluation."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from decanted.db.models import Badge, BadgeAward, GameSession, SwirdleUserStats, TrialQuizAttempt
from decanted.points.service import get_total_points

logger = logging.getLogger(__name__)


def to_badge_set(awards: Iterable[BadgeAward | str]) -> set[str]:
    return {a if isinstance(a, str) else a.badge_code for a in awards}


def diff_newly_earned(before: Iterable[BadgeAward | str], after: Iterable[BadgeAward | str]) -> list[str]:
    """Codes present in ``after`` but not ``before``, in ``after`` order."""
    seen = to_badge_set(before)
    out: list[str] = []
    for a in after:
        code = a if isinstance(a, str) else a.badge_code
        if code not in seen and code not in out:
            out.append(code)
    return out


async def list_active_badges(db: AsyncSession) -> list[Badge]:
    result = await db.execute(
        select(Badge).where(Badge.is_active.is_(True)).order_by(Badge.sort_order, Badge.code)
    )
    return list(result.scalars().all())


async def list_user_awards(db: AsyncSession, user_id: str) -> list[BadgeAward]:
    result = await db.execute(
        select(BadgeAward).where(BadgeAward.user_id == user_id).order_by(BadgeAward.awarded_at.desc())
    )
    return list(result.scalars().all())


async def recent_awards_for(db: AsyncSession, user_ids: list[str], limit: int = 2) -> dict[str, list[BadgeAward]]:
    """Newest ``limit`` awards per user, for leaderboard and participant chips."""
    out: dict[str, list[BadgeAward]] = {uid: [] for uid in user_ids}
    if not user_ids:
        return out
    result = await db.execute(
        select(BadgeAward)
        .where(BadgeAward.user_id.in_(user_ids))
        .order_by(BadgeAward.user_id, BadgeAward.awarded_at.desc())
    )
    for award in result.scalars().all():
        bucket = out[award.user_id]
        if len(bucket) < limit:
            bucket.append(award)
    return out


async def award_badge(db: AsyncSession, user_id: str, badge_code: str) -> bool:
    """Award a badge. Returns True if awarded, False if already earned or unknown."""
    badge = (await db.execute(select(Badge).where(Badge.code == badge_code))).scalar_one_or_none()
    if badge is None:
        logger.warning("Badge not found: %s", badge_code)
        return False

    existing = await db.execute(
        select(BadgeAward.id).where(BadgeAward.user_id == user_id, BadgeAward.badge_code == badge_code)
    )
    if existing.scalar_one_or_none() is not None:
        return False

    db.add(BadgeAward(user_id=user_id, badge_code=badge_code))
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        return False  # Race condition: badge already awarded
    return True


async def _metrics(db: AsyncSession, user_id: str) -> dict[str, int]:
    stats = await db.get(SwirdleUserStats, user_id)
    attempts = await db.execute(
        select(func.count()).select_from(TrialQuizAttempt).where(TrialQuizAttempt.user_id == user_id)
    )
    hosted = await db.execute(
        select(func.count()).select_from(GameSession).where(GameSession.host_user_id == user_id)
    )
    return {
        "points_total": await get_total_points(db, user_id),
        "swirdle_wins": stats.wins if stats else 0,
        "swirdle_streak": stats.max_streak if stats else 0,
        "trial_quiz_attempts": attempts.scalar_one(),
        "sessions_hosted": hosted.scalar_one(),
    }


def badge_earned(badge: Badge | dict[str, Any], metrics: dict[str, int]) -> bool:
    trigger = badge["trigger_type"] if isinstance(badge, dict) else badge.trigger_type
    config = (badge["trigger_config"] if isinstance(badge, dict) else badge.trigger_config) or {}
    if trigger not in metrics:
        return False
    return metrics[trigger] >= int(config.get("threshold", 1))


async def evaluate_badges(db: AsyncSession, user_id: str) -> list[str]:
    """Award every active badge whose trigger the user now meets. Returns new codes."""
    metrics = await _metrics(db, user_id)
    owned = to_badge_set(await list_user_awards(db, user_id))
    candidates = [b.code for b in await list_active_badges(db) if b.code not in owned and badge_earned(b, metrics)]

    awarded: list[str] = []
    for code in candidates:
        if await award_badge(db, user_id, code):
            await db.commit()
            awarded.append(code)
    if awarded:
        logger.info("Awarded badges %s to %s", awarded, user_id)
    return awarded
