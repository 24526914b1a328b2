"""Shared FastAPI dependencies."""

from fastapi import Request

from decanted.config import Settings, get_settings


def get_app_settings(request: Request) -> Settings:
    """Settings the running app was built with (falls back to the environment)."""
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        return get_settings()
    return settings
