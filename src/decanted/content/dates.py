"""Content-day boundaries.

Daily content rolls over at midnight in the content timezone, not UTC.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo


def today_in(tz_name: str, now: datetime | None = None) -> date:
    now = now or datetime.now(timezone.utc)
    return now.astimezone(ZoneInfo(tz_name)).date()


def locale_candidates(preferred: str | None, accept_language: str | None = None, fallback: str = "en") -> list[str]:
    """Locales to try, most specific first.

    ``fr-CA`` with ``Accept-Language: de-DE,de;q=0.9`` yields
    ``["fr-CA", "fr", "de-DE", "de", "en"]``.
    """
    tags: list[str] = []
    if preferred:
        tags.append(preferred.strip())
    if accept_language:
        for part in accept_language.split(","):
            tag = part.split(";")[0].strip()
            if tag and tag != "*":
                tags.append(tag)

    out: list[str] = []
    for tag in tags:
        for candidate in (tag, tag.split("-")[0]):
            if candidate and candidate not in out:
                out.append(candidate)
    if fallback not in out:
        out.append(fallback)
    return out
