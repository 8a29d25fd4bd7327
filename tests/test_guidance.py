"""
guildjournal/tests/test_guidance.py

Tests for the advisory guidance calls.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from guildjournal.exceptions import CollaboratorError
from guildjournal.integration.content_client import ContentServiceClient
from guildjournal.integration.guidance import SILENT_ORACLE, GuidanceOracle, parse_complexity
from guildjournal.protocol.state import seed_library


def create_test_oracle(result=None, error=None):
    client = MagicMock(spec=ContentServiceClient)
    client.generate = AsyncMock(return_value=result, side_effect=error)
    return GuidanceOracle(client), client


class TestParseComplexity:
    """Test parse_complexity()."""

    @pytest.mark.parametrize("text,expected", [
        ("4", 4),
        ("I would rate this 2 stars.", 2),
        ("9", 5),
        ("0", 1),
        ("-3", 1),
        ("no idea", 3),
        ("", 3),
    ])
    def test_parse(self, text, expected):
        """Test the first integer is taken and clamped."""
        assert parse_complexity(text) == expected


class TestRecommendNext:
    """Test GuidanceOracle.recommend_next()."""

    @pytest.mark.asyncio
    async def test_returns_text(self):
        """Test the reply is returned stripped, with owned badges in the prompt."""
        oracle, client = create_test_oracle("  Walk the river path.  ")
        text = await oracle.recommend_next(seed_library()[:1], ["rivers"])
        assert text == "Walk the river path."
        prompt = client.generate.call_args.args[0]
        assert "Forest Stewardship" in prompt and "rivers" in prompt

    @pytest.mark.asyncio
    async def test_failure_is_silent_oracle(self):
        """Test a failed call yields the fixed fallback text."""
        oracle, _ = create_test_oracle(error=CollaboratorError("down"))
        assert await oracle.recommend_next([], []) == SILENT_ORACLE


class TestSuggestRequirement:
    """Test GuidanceOracle.suggest_requirement()."""

    @pytest.mark.asyncio
    async def test_strips_bullet(self):
        """Test list markers are removed from the reply."""
        oracle, _ = create_test_oracle("- Build a swarm trap.\n")
        assert await oracle.suggest_requirement("Hive", "Bees", ["Explain anatomy"]) == "Build a swarm trap."

    @pytest.mark.asyncio
    async def test_failure_is_empty(self):
        """Test a failed call yields an empty string."""
        oracle, _ = create_test_oracle(error=CollaboratorError("down"))
        assert await oracle.suggest_requirement("Hive", "Bees", []) == ""


class TestRateComplexity:
    """Test GuidanceOracle.rate_complexity()."""

    @pytest.mark.asyncio
    async def test_rating(self):
        """Test the reply is parsed into a rating."""
        oracle, _ = create_test_oracle("Rating: 5")
        assert await oracle.rate_complexity("Hive", "Bees", ["Explain anatomy"]) == 5

    @pytest.mark.asyncio
    async def test_failure_is_default(self):
        """Test a failed call yields the default rating."""
        oracle, _ = create_test_oracle(error=CollaboratorError("down"))
        assert await oracle.rate_complexity("Hive", "Bees", []) == 3
