"""Profile lookup and creation."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from decanted.db.models import Profile


async def get_profile(db: AsyncSession, user_id: str) -> Profile | None:
    result = await db.execute(select(Profile).where(Profile.id == user_id))
    return result.scalar_one_or_none()


async def ensure_profile(
    db: AsyncSession,
    user_id: str,
    locale: str = "en",
    email: str | None = None,
) -> Profile:
    """Return the user's profile, inserting an empty one if missing.

    A known ``email`` fills in a profile that has none yet; the caller commits.

    A concurrent insert of the same id rolls the session back and re-reads,
    so call this at a transaction boundary.
    """
    profile = await get_profile(db, user_id)
    if profile is not None:
        if email and not profile.email:
            profile.email = email
        return profile

    db.add(Profile(id=user_id, locale=locale, email=email))
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
    profile = await get_profile(db, user_id)
    if profile is None:
        msg = f"Profile {user_id} could not be created"
        raise RuntimeError(msg)
    return profile
