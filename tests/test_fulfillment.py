"""
guildjournal/tests/test_fulfillment.py

Tests for physical artifact pricing and free-claim bookkeeping.
"""

from guildjournal.config import PHYSICAL_BADGE_FEE
from guildjournal.protocol.badges import Domain, create_manual_badge
from guildjournal.protocol.council import CouncilStatus
from guildjournal.protocol.fulfillment import (
    has_free_claim,
    physical_artifact_cost,
    request_physical_artifact,
)
from guildjournal.protocol.profile import UserProfile


def create_test_user():
    return UserProfile(id="seeker-test", name="Test Seeker")


def create_test_badge(badge_id):
    badge = create_manual_badge(title=f"Badge {badge_id}", description="", domain=Domain.SKILL)
    badge.id = badge_id
    return badge


class TestPhysicalArtifactCost:
    """Test the first-copy-free pricing rule."""

    def test_first_copy_is_free(self):
        """Test an unclaimed badge costs nothing."""
        user = create_test_user()
        assert physical_artifact_cost(user, "b1") == 0.0
        assert has_free_claim(user, "b1")

    def test_claimed_copy_costs_fee(self):
        """Test a claimed badge costs the fixed fee."""
        user = create_test_user()
        user.claimed_free_physical_badge_ids.append("b1")
        assert physical_artifact_cost(user, "b1") == PHYSICAL_BADGE_FEE
        assert physical_artifact_cost(user, "b1", fee=20.0) == 20.0


class TestRequestPhysicalArtifact:
    """Test request_physical_artifact()."""

    def test_first_request_consumes_free_claim(self):
        """Test the free claim is consumed at submission."""
        user = create_test_user()
        request = request_physical_artifact(user, create_test_badge("b1"))
        assert request.cost == 0.0
        assert request.status == CouncilStatus.PENDING
        assert request.id.startswith("phys-")
        assert user.claimed_free_physical_badge_ids == ["b1"]

    def test_second_request_is_charged_without_duplicate(self):
        """Test a repeat request costs 15.00 and does not duplicate the claim."""
        user = create_test_user()
        badge = create_test_badge("b1")
        request_physical_artifact(user, badge)
        second = request_physical_artifact(user, badge)
        assert second.cost == 15.00
        assert user.claimed_free_physical_badge_ids == ["b1"]

    def test_two_different_badges_are_both_free(self):
        """Test each badge has its own free claim."""
        user = create_test_user()
        first = request_physical_artifact(user, create_test_badge("b1"))
        second = request_physical_artifact(user, create_test_badge("b2"))
        assert first.cost == 0.0
        assert second.cost == 0.0
        assert set(user.claimed_free_physical_badge_ids) == {"b1", "b2"}
