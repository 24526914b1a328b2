"""Identity-provider JWT verification.

Access tokens are issued by the hosted identity provider and signed with a
shared HS256 secret. The API only verifies them; ``create_access_token``
mints equivalent tokens for local development and tests.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from decanted.config import Settings


def create_access_token(
    user_id: str,
    settings: Settings,
    email: str | None = None,
    role: str = "authenticated",
) -> str:
    """
    Create an access token with the same claims the identity provider issues.

    Args:
        user_id: The user's UUID (becomes ``sub``).
        settings: Settings carrying the signing secret and audience.
        email: Optional email claim.
        role: Role claim, ``authenticated`` for signed-in users.

    Returns:
        Encoded JWT string.
    """
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": user_id,
        "aud": settings.jwt_audience,
        "role": role,
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_access_token_expire_minutes),
    }
    if email:
        payload["email"] = email
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str, settings: Settings) -> dict[str, Any]:
    """
    Decode and verify an access token.

    Raises:
        jwt.InvalidTokenError: On bad signature, expiry, audience or missing ``sub``.
    """
    payload: dict[str, Any] = jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[settings.jwt_algorithm],
        audience=settings.jwt_audience,
        options={"require": ["exp", "sub"]},
    )
    if not payload.get("sub"):
        raise jwt.InvalidTokenError("Token has no subject")
    return payload
