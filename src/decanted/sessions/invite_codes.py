"""Invite code generation for Wine Options sessions.

Codes are short uppercase alphanumeric strings (A-Z, 0-9) generated
server-side with a cryptographic random source. Lookups are
case-insensitive and ignore surrounding whitespace.
"""

from __future__ import annotations

import secrets
import string

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from decanted.db.models import GameSession

INVITE_CHARSET = string.ascii_uppercase + string.digits  # A-Z, 0-9
INVITE_LENGTH = 6
MAX_ATTEMPTS = 10


def generate_invite_code(length: int = INVITE_LENGTH) -> str:
    """Generate a cryptographically random invite code."""
    return "".join(secrets.choice(INVITE_CHARSET) for _ in range(length))


def normalize_invite_code(code: str) -> str:
    """Normalize an invite code for lookup: trimmed and uppercase."""
    return code.strip().upper()


async def generate_unique_invite_code(db: AsyncSession, length: int = INVITE_LENGTH) -> str:
    """Generate an invite code that doesn't already exist in the database."""
    for _ in range(MAX_ATTEMPTS):
        code = generate_invite_code(length)
        existing = await db.execute(
            select(GameSession.id).where(GameSession.invite_code == code)
        )
        if not existing.scalar_one_or_none():
            return code
    raise RuntimeError(f"Failed to generate unique invite code after {MAX_ATTEMPTS} attempts")
