"""FastAPI authentication dependencies."""

from __future__ import annotations

import hmac
from dataclasses import dataclass

import jwt
import structlog
from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from decanted.auth.jwt import verify_token
from decanted.config import Settings
from decanted.dependencies import get_app_settings
from decanted.errors import ApiError, unauthorized

logger = structlog.get_logger()

_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthUser:
    id: str
    email: str | None = None


def _user_from(credentials: HTTPAuthorizationCredentials, settings: Settings) -> AuthUser:
    try:
        payload = verify_token(credentials.credentials, settings)
    except jwt.InvalidTokenError as e:
        logger.info("token_rejected", reason=str(e))
        raise unauthorized("Invalid token") from e
    return AuthUser(id=str(payload["sub"]), email=payload.get("email") or None)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    settings: Settings = Depends(get_app_settings),
) -> AuthUser:
    """Verified caller with the token's email claim, if any."""
    if credentials is None:
        raise unauthorized("Missing bearer token")
    return _user_from(credentials, settings)


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    settings: Settings = Depends(get_app_settings),
) -> str:
    """
    Verify the bearer token and return the user's id.

    Raises 401 when the header is missing or the token does not verify.
    """
    if credentials is None:
        raise unauthorized("Missing bearer token")
    return _user_from(credentials, settings).id


async def get_optional_user_id(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    settings: Settings = Depends(get_app_settings),
) -> str | None:
    """Same as get_current_user_id, but anonymous callers get None."""
    if credentials is None:
        return None
    return _user_from(credentials, settings).id


async def require_service_role(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    settings: Settings = Depends(get_app_settings),
) -> None:
    """Guard for content administration endpoints."""
    if credentials is None:
        raise unauthorized("Missing bearer token")
    if not settings.service_role_key or not hmac.compare_digest(
        credentials.credentials.encode(), settings.service_role_key.encode()
    ):
        raise ApiError(403, "FORBIDDEN", "Service role required")
