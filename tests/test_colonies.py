"""
guildjournal/tests/test_colonies.py

Tests for colony membership, notices and events.
"""

import pytest

from guildjournal.exceptions import NotFoundError, ValidationError
from guildjournal.protocol.colonies import (
    Colony,
    approve_colony,
    join_colony,
    next_colony_number,
    post_notice,
    propose_colony,
    schedule_event,
)
from guildjournal.protocol.state import seed_colonies


class TestMembership:
    """Test join_colony()."""

    def test_join_first_colony(self):
        """Test joining without a current colony adds one member."""
        colonies = seed_colonies()
        joined = join_colony(colonies, None, "c2")
        assert joined.id == "c2"
        assert joined.members_count == 129

    def test_rejoin_is_noop(self):
        """Test joining the current colony changes nothing."""
        colonies = seed_colonies()
        join_colony(colonies, "c1", "c1")
        assert colonies[0].members_count == 42

    def test_previous_colony_missing(self):
        """Test a vanished previous colony does not block the move."""
        colonies = seed_colonies()
        assert join_colony(colonies, "col-gone", "c1").members_count == 43

    def test_unknown_colony(self):
        """Test joining an unknown colony raises NotFoundError."""
        with pytest.raises(NotFoundError):
            join_colony(seed_colonies(), None, "c404")


class TestCharter:
    """Test propose_colony() and approve_colony()."""

    def test_next_number(self):
        """Test numbers continue after the highest existing one."""
        assert next_colony_number(seed_colonies()) == 206
        assert next_colony_number([]) == 101

    def test_propose(self):
        """Test a proposal is unapproved, numbered and listed first."""
        colonies = seed_colonies()
        colony = propose_colony(colonies, " Harbor Colony ", "Tide and trade", "Coastline")
        assert colonies[0] is colony
        assert colony.id.startswith("col-")
        assert colony.name == "Harbor Colony"
        assert colony.number == 206
        assert not colony.is_approved

    def test_propose_needs_name(self):
        """Test a blank name is rejected."""
        with pytest.raises(ValidationError):
            propose_colony(seed_colonies(), "  ", "charter", "siege")

    def test_approve(self):
        """Test approval flips the charter flag."""
        colonies = seed_colonies()
        colony = propose_colony(colonies, "Harbor Colony", "", "")
        assert approve_colony(colonies, colony.id).is_approved


class TestBulletin:
    """Test notices and events."""

    def test_notices_newest_first(self):
        """Test notices are inserted at the front."""
        colonies = seed_colonies()
        post_notice(colonies, "c1", "Ada", "First")
        second = post_notice(colonies, "c1", "Ada", "Second")
        assert colonies[0].notices[0] is second
        assert second.id.startswith("notice-")

    def test_empty_notice(self):
        """Test a blank notice is rejected."""
        with pytest.raises(ValidationError):
            post_notice(seed_colonies(), "c1", "Ada", " ")

    def test_event_creator_attends(self):
        """Test the creator is the first attendee."""
        colonies = seed_colonies()
        event = schedule_event(colonies, "c2", "Seed swap", "Bring seeds", "2026-05-01", "Ada")
        assert event.attendees == ["Ada"]
        assert colonies[1].events == [event]

    def test_event_needs_title(self):
        """Test an untitled event is rejected."""
        with pytest.raises(ValidationError):
            schedule_event(seed_colonies(), "c2", "", "", "", "Ada")

    def test_round_trip(self):
        """Test notices and events survive serialization."""
        colonies = seed_colonies()
        post_notice(colonies, "c1", "Ada", "Hello")
        schedule_event(colonies, "c1", "Walk", "", "", "Ada")
        restored = Colony.from_dict(colonies[0].to_dict())
        assert restored.to_dict() == colonies[0].to_dict()
