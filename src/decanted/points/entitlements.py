"""Tier and points gating."""

from __future__ import annotations

from dataclasses import dataclass

TIER_ORDER: dict[str, int] = {"free": 0, "pro": 1, "vip": 2}
TIERS = tuple(TIER_ORDER)


def tier_rank(tier: str | None) -> int:
    """Unknown or missing tiers rank as free."""
    return TIER_ORDER.get((tier or "free").lower(), 0)


def tier_at_least(user_tier: str | None, required: str) -> bool:
    return tier_rank(user_tier) >= tier_rank(required)


def has_access(
    user_tier: str | None,
    user_points: int,
    required_tier: str = "free",
    required_points: int = 0,
) -> bool:
    """Access needs both the tier and the points threshold."""
    return tier_at_least(user_tier, required_tier) and (user_points or 0) >= required_points


@dataclass(frozen=True)
class Entitlement:
    meets_tier: bool
    meets_points: bool
    locked: bool
    points_delta: int


def evaluate_entitlement(
    user_tier: str | None,
    user_points: int,
    required_tier: str = "free",
    required_points: int = 0,
) -> Entitlement:
    points = user_points or 0
    meets_tier = tier_at_least(user_tier, required_tier)
    meets_points = points >= required_points
    return Entitlement(
        meets_tier=meets_tier,
        meets_points=meets_points,
        locked=not (meets_tier and meets_points),
        points_delta=max(0, required_points - points),
    )


def effective_tier(stored_tier: str | None, is_trial: bool) -> str:
    """An open trial grants pro unless the stored tier is already higher."""
    stored = (stored_tier or "free").lower()
    if is_trial and tier_rank(stored) < TIER_ORDER["pro"]:
        return "pro"
    return stored if stored in TIER_ORDER else "free"

