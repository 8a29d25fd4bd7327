"""
guildjournal/tests/test_tiers.py

Tests for the tier ascension engine.
"""

import pytest

from guildjournal.protocol.badges import Domain, create_manual_badge
from guildjournal.protocol.profile import UserProfile
from guildjournal.protocol.requirements import Requirement
from guildjournal.protocol.tiers import (
    TIER_ORDER,
    TIER_REQUIREMENTS,
    ActionStatement,
    PrerequisiteKind,
    Tier,
    assess_eligibility,
    eligible_supporting_requirements,
    has_council_role,
    promotable_tiers,
)


def create_test_user(tier=Tier.SEEKER, badges=None):
    """Create a user profile for testing."""
    return UserProfile(id="seeker-test", name="Test Seeker", tier=tier, badges=badges or [])


def create_mastered_badge(badge_id, domain=Domain.SKILL):
    """Create a badge with no evidence demands (mastered on creation)."""
    badge = create_manual_badge(
        title=f"Badge {badge_id}",
        description="",
        domain=domain,
        requirements=[Requirement.create("Checklist item")],
    )
    badge.id = badge_id
    return badge


def create_unmastered_badge(badge_id):
    badge = create_manual_badge(
        title=f"Badge {badge_id}",
        description="",
        domain=Domain.SKILL,
        requirements=[Requirement.create("Needs proof", require_attachment=True)],
    )
    badge.id = badge_id
    return badge


class TestTierOrdering:
    """Test Tier ordering."""

    def test_ladder_order(self):
        """Test the full ladder is ordered."""
        assert TIER_ORDER == [
            Tier.MEMBER, Tier.SEEKER, Tier.WAYFARER, Tier.JOURNEYER,
            Tier.ARTISAN, Tier.WARDEN, Tier.KEYSTONE,
        ]
        assert Tier.MEMBER < Tier.SEEKER < Tier.KEYSTONE
        assert Tier.WARDEN >= Tier.ARTISAN

    def test_next_tier(self):
        """Test next_tier walks the ladder."""
        assert Tier.SEEKER.next_tier() == Tier.WAYFARER
        assert Tier.KEYSTONE.next_tier() is None

    def test_from_string(self):
        """Test parsing by value or name."""
        assert Tier.from_string("wayfarer") == Tier.WAYFARER
        assert Tier.from_string("KEYSTONE") == Tier.KEYSTONE
        with pytest.raises(ValueError):
            Tier.from_string("Overlord")


class TestRequirementMap:
    """Test the static tier requirement map."""

    def test_every_non_initial_tier_has_requirements(self):
        """Test each tier above Member is mapped."""
        for tier in TIER_ORDER[1:]:
            assert TIER_REQUIREMENTS[tier], tier

    def test_initial_tier_has_none(self):
        """Test the initial tier has no prerequisites."""
        assert eligible_supporting_requirements(create_test_user(), Tier.MEMBER) == []

    def test_supporting_requirements_are_static(self):
        """Test the list is the static map entry."""
        reqs = eligible_supporting_requirements(create_test_user(), Tier.WAYFARER)
        assert reqs == TIER_REQUIREMENTS[Tier.WAYFARER]
        assert any(r.kind == PrerequisiteKind.KEYSTONE_BADGE for r in reqs)

    def test_keystone_tier_needs_all_keystones(self):
        """Test the Keystone tier lists every keystone badge."""
        keystones = {r.keystone_badge_id for r in TIER_REQUIREMENTS[Tier.KEYSTONE] if r.is_keystone}
        assert keystones == {"b1", "b2", "b3"}


class TestPromotableTiers:
    """Test promotion targets."""

    def test_only_higher_tiers(self):
        """Test targets are strictly above the current tier."""
        user = create_test_user(tier=Tier.ARTISAN)
        assert promotable_tiers(user) == [Tier.WARDEN, Tier.KEYSTONE]

    def test_top_tier(self):
        """Test Keystone has nowhere to go."""
        assert promotable_tiers(create_test_user(tier=Tier.KEYSTONE)) == []


class TestAssessEligibility:
    """Test the advisory eligibility report."""

    def test_missing_keystone(self):
        """Test an unowned keystone badge is reported."""
        report = assess_eligibility(create_test_user(), Tier.WAYFARER)
        assert report.missing_keystones == ["b1"]
        assert not report.looks_ready

    def test_unmastered_keystone_is_missing(self):
        """Test an owned but incomplete keystone does not count."""
        user = create_test_user(badges=[create_unmastered_badge("b1")])
        report = assess_eligibility(user, Tier.WAYFARER)
        assert "b1" in report.missing_keystones

    def test_ready_for_wayfarer(self):
        """Test five mastered badges over two domains plus the keystone."""
        badges = [create_mastered_badge("b1", Domain.ENVIRONMENT)] + [
            create_mastered_badge(f"x{i}") for i in range(4)
        ]
        report = assess_eligibility(create_test_user(badges=badges), Tier.WAYFARER)
        assert report.missing_keystones == []
        assert report.unmet_milestones == []
        assert report.looks_ready

    def test_counted_milestones(self):
        """Test badge and domain counts are evaluated."""
        badges = [create_mastered_badge("b1")] + [create_mastered_badge(f"x{i}") for i in range(4)]
        report = assess_eligibility(create_test_user(badges=badges), Tier.WAYFARER)
        assert "wayfarer-two-domains" in report.unmet_milestones
        assert "wayfarer-five-badges" in report.satisfied_ids

    def test_statement_requirements(self):
        """Test milestones needing statements are listed."""
        report = assess_eligibility(create_test_user(), Tier.ARTISAN)
        assert "artisan-mentor" in report.statements_needed

    def test_downward_target_not_ready(self):
        """Test a target at or below the current tier is never ready."""
        report = assess_eligibility(create_test_user(tier=Tier.WARDEN), Tier.SEEKER)
        assert not report.is_upward
        assert not report.looks_ready


class TestCouncilRole:
    """Test the informational council role."""

    def test_role_flag(self):
        """Test the explicit role flag."""
        user = create_test_user()
        assert not has_council_role(user)
        user.council_role = True
        assert has_council_role(user)

    def test_keystone_tier(self):
        """Test Keystone members sit on the Council."""
        assert has_council_role(create_test_user(tier=Tier.KEYSTONE))


class TestActionStatement:
    """Test statement serialization."""

    def test_round_trip(self):
        """Test statement fields survive serialization."""
        statement = ActionStatement(
            requirement_id="artisan-mentor",
            requirement_title="Mentor at least one Seeker",
            intent="Share what I know",
            difficulties="Scheduling",
            lessons="Patience",
            reference_contact="mentor@guild.org",
        )
        assert ActionStatement.from_dict(statement.to_dict()) == statement
