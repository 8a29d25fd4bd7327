"""
guildjournal/tests/test_drafting.py

Tests for AI-assisted badge drafting.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from guildjournal.exceptions import CollaboratorError
from guildjournal.integration.content_client import ContentServiceClient
from guildjournal.integration.drafting import DRAFT_SCHEMA, BadgeDrafter
from guildjournal.protocol.badges import Domain


def create_test_payload(**overrides):
    payload = {
        "title": "Keeper of the Hive",
        "description": "Tend bees through a full season.",
        "domain": "Environment",
        "secondaryDomains": ["Skill", "Environment", "Service", "Knowledge"],
        "difficulty": 4,
        "requirements": ["Explain hive anatomy.", "  ", "Inspect a colony weekly for a month."],
    }
    payload.update(overrides)
    return payload


def create_test_drafter(result=None, error=None):
    client = MagicMock(spec=ContentServiceClient)
    client.generate_json = AsyncMock(return_value=result, side_effect=error)
    return BadgeDrafter(client), client


class TestDraftBadge:
    """Test BadgeDrafter.draft_badge()."""

    def test_prompt_mentions_topic_and_domains(self):
        """Test the prompt carries the topic, goal and the domain list."""
        prompt = BadgeDrafter.build_prompt(" Beekeeping ", "Keep a hive")
        assert '"Beekeeping"' in prompt
        assert '"Keep a hive"' in prompt
        assert "Environment" in prompt and "Ideology" in prompt

    @pytest.mark.asyncio
    async def test_valid_payload(self):
        """Test a well-formed reply is sanitized into a draft."""
        drafter, client = create_test_drafter(create_test_payload())
        draft = await drafter.draft_badge("Beekeeping", "Keep a hive")

        assert draft.title == "Keeper of the Hive"
        assert draft.domain == Domain.ENVIRONMENT
        assert draft.secondary_domains == [Domain.SKILL, Domain.SERVICE]
        assert draft.difficulty == 4
        assert draft.requirements == ["Explain hive anatomy.", "Inspect a colony weekly for a month."]
        assert not draft.is_placeholder
        client.generate_json.assert_awaited_once()
        assert client.generate_json.call_args.args[1] is DRAFT_SCHEMA

    @pytest.mark.asyncio
    async def test_malformed_payload(self):
        """Test out-of-range and missing fields fall back to defaults."""
        drafter, _ = create_test_drafter(
            create_test_payload(domain="Alchemy", difficulty=11, secondaryDomains="Skill")
        )
        draft = await drafter.draft_badge("Beekeeping", "Keep a hive")
        assert draft.domain == Domain.SKILL
        assert draft.difficulty == 5
        assert draft.secondary_domains == []

    @pytest.mark.asyncio
    async def test_infinite_difficulty(self):
        """Test an infinite rating in the reply is replaced, not raised."""
        drafter, _ = create_test_drafter(create_test_payload(difficulty=float("inf")))
        draft = await drafter.draft_badge("Beekeeping", "Keep a hive")
        assert draft.difficulty == 3
        assert draft.title == "Keeper of the Hive"

    @pytest.mark.asyncio
    async def test_service_failure_gives_placeholder(self):
        """Test a failed call yields a placeholder draft instead of raising."""
        drafter, _ = create_test_drafter(error=CollaboratorError("down"))
        draft = await drafter.draft_badge("Beekeeping", "Keep a hive")
        assert draft.is_placeholder
        assert draft.requirements == []
        assert draft.difficulty == 3

    @pytest.mark.asyncio
    async def test_non_object_payload_gives_placeholder(self):
        """Test a JSON array reply yields a placeholder draft."""
        drafter, _ = create_test_drafter(["not", "an", "object"])
        assert (await drafter.draft_badge("Beekeeping", "Keep a hive")).is_placeholder


class TestDraftJournalBadge:
    """Test BadgeDrafter.draft_journal_badge()."""

    @pytest.mark.asyncio
    async def test_converts_draft(self):
        """Test a draft becomes an unverified user-created badge."""
        drafter, _ = create_test_drafter(create_test_payload())
        badge = await drafter.draft_journal_badge("Beekeeping", "Keep a hive", creator_id="seeker-1")

        assert badge.is_user_created and not badge.is_verified
        assert badge.creator_id == "seeker-1"
        assert [r.id for r in badge.requirements] == ["ai-req-0", "ai-req-1"]
        assert all(r.require_attachment and r.require_note for r in badge.requirements)
        assert not badge.is_mastered

    @pytest.mark.asyncio
    async def test_placeholder_returns_none(self):
        """Test nothing is produced when drafting failed."""
        drafter, _ = create_test_drafter(error=CollaboratorError("down"))
        assert await drafter.draft_journal_badge("Beekeeping", "Keep a hive") is None
