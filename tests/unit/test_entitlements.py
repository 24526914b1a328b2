"""Unit tests for tier ordering and access gating."""

import pytest

from decanted.points.entitlements import (
    TIERS,
    effective_tier,
    evaluate_entitlement,
    has_access,
    tier_at_least,
    tier_rank,
)


class TestTierOrder:
    def test_tiers_in_order(self):
        assert TIERS == ("free", "pro", "vip")

    @pytest.mark.parametrize(
        ("user", "required", "expected"),
        [
            ("free", "free", True),
            ("free", "pro", False),
            ("pro", "free", True),
            ("pro", "pro", True),
            ("pro", "vip", False),
            ("vip", "pro", True),
            ("vip", "vip", True),
        ],
    )
    def test_tier_at_least(self, user, required, expected):
        assert tier_at_least(user, required) is expected

    def test_unknown_tier_ranks_as_free(self):
        assert tier_rank("platinum") == tier_rank("free")
        assert tier_rank(None) == 0

    def test_case_insensitive(self):
        assert tier_at_least("PRO", "pro")


class TestHasAccess:
    def test_needs_tier_and_points(self):
        assert has_access("pro", 100, "pro", 50)
        assert not has_access("free", 100, "pro", 50)
        assert not has_access("pro", 10, "pro", 50)

    def test_defaults_allow_everyone(self):
        assert has_access("free", 0)

    def test_points_threshold_is_inclusive(self):
        assert has_access("free", 50, "free", 50)


class TestEvaluateEntitlement:
    def test_locked_reports_points_delta(self):
        ent = evaluate_entitlement("free", 30, "free", 100)
        assert ent.meets_tier is True
        assert ent.meets_points is False
        assert ent.locked is True
        assert ent.points_delta == 70

    def test_unlocked_has_zero_delta(self):
        ent = evaluate_entitlement("vip", 500, "pro", 100)
        assert ent.locked is False
        assert ent.points_delta == 0


class TestEffectiveTier:
    def test_trial_grants_pro(self):
        assert effective_tier("free", is_trial=True) == "pro"

    def test_trial_does_not_downgrade_vip(self):
        assert effective_tier("vip", is_trial=True) == "vip"

    def test_no_trial_keeps_stored(self):
        assert effective_tier("free", is_trial=False) == "free"
        assert effective_tier(None, is_trial=False) == "free"
