"""Badge seed data."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from decanted.db.base import UPSERT_INSERTS
from decanted.db.models import Badge

logger = logging.getLogger(__name__)

BADGE_SEED_DATA: list[dict] = [
    # Points milestones
    {
        "code": "first_sip",
        "name": "First Sip",
        "description": "Earn your first points",
        "icon": "glass",
        "tier": "bronze",
        "trigger_type": "points_total",
        "trigger_config": {"threshold": 1},
        "sort_order": 1,
    },
    {
        "code": "points_100",
        "name": "Cellar Starter",
        "description": "Reach 100 points",
        "icon": "bottle",
        "tier": "bronze",
        "trigger_type": "points_total",
        "trigger_config": {"threshold": 100},
        "sort_order": 2,
    },
    {
        "code": "points_500",
        "name": "Cellar Keeper",
        "description": "Reach 500 points",
        "icon": "barrel",
        "tier": "silver",
        "trigger_type": "points_total",
        "trigger_config": {"threshold": 500},
        "sort_order": 3,
    },
    {
        "code": "points_1000",
        "name": "Grand Cru",
        "description": "Reach 1,000 points",
        "icon": "crown",
        "tier": "gold",
        "trigger_type": "points_total",
        "trigger_config": {"threshold": 1000},
        "sort_order": 4,
    },
    # Games
    {
        "code": "swirdle_first_win",
        "name": "Word Swirler",
        "description": "Solve your first Swirdle",
        "icon": "swirl",
        "tier": "bronze",
        "trigger_type": "swirdle_wins",
        "trigger_config": {"threshold": 1},
        "sort_order": 10,
    },
    {
        "code": "swirdle_streak_7",
        "name": "Week of Swirls",
        "description": "Win Swirdle seven days in a row",
        "icon": "flame",
        "tier": "silver",
        "trigger_type": "swirdle_streak",
        "trigger_config": {"threshold": 7},
        "sort_order": 11,
    },
    {
        "code": "trial_quiz_done",
        "name": "Tasting Note",
        "description": "Complete the daily trial quiz",
        "icon": "notebook",
        "tier": "bronze",
        "trigger_type": "trial_quiz_attempts",
        "trigger_config": {"threshold": 1},
        "sort_order": 20,
    },
    {
        "code": "wine_options_host",
        "name": "Sommelier's Table",
        "description": "Host a Wine Options session",
        "icon": "table",
        "tier": "bronze",
        "trigger_type": "sessions_hosted",
        "trigger_config": {"threshold": 1},
        "sort_order": 30,
    },
]


async def seed_badges(db: AsyncSession) -> int:
    """Upsert all badge definitions by code. Returns number of badges seeded."""
    insert = UPSERT_INSERTS.get(db.get_bind().dialect.name)
    seeded = 0
    for badge_data in BADGE_SEED_DATA:
        if insert is None:
            existing = (await db.execute(select(Badge).where(Badge.code == badge_data["code"]))).scalar_one_or_none()
            if existing is None:
                db.add(Badge(**badge_data))
            else:
                for key, value in badge_data.items():
                    setattr(existing, key, value)
        else:
            stmt = insert(Badge).values(**badge_data)
            stmt = stmt.on_conflict_do_update(
                index_elements=["code"],
                set_={
                    "name": stmt.excluded.name,
                    "description": stmt.excluded.description,
                    "icon": stmt.excluded.icon,
                    "tier": stmt.excluded.tier,
                    "trigger_type": stmt.excluded.trigger_type,
                    "trigger_config": stmt.excluded.trigger_config,
                    "sort_order": stmt.excluded.sort_order,
                },
            )
            await db.execute(stmt)
        seeded += 1

    await db.commit()
    logger.info("Seeded %d badge definitions", seeded)
    return seeded
