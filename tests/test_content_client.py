"""
guildjournal/tests/test_content_client.py

Tests for ContentServiceClient.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from guildjournal.config import GuildConfig
from guildjournal.exceptions import CollaboratorError
from guildjournal.integration.content_client import ContentServiceClient


def create_test_response(status=200, body=None):
    """A fake aiohttp response usable as an async context manager."""
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=body)
    response.text = AsyncMock(return_value="error body")
    return response


def create_test_session(response=None, error=None):
    session = MagicMock()
    if error is not None:
        session.post.side_effect = error
    else:
        session.post.return_value.__aenter__.return_value = response
    return session


def reply(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@pytest.fixture
def config():
    return GuildConfig(api_key="test-key", model="test-model", api_base_url="https://content.test/v1/")


class TestPayload:
    """Test request and response shaping."""

    def test_endpoint(self, config):
        """Test the endpoint is built from base URL and model."""
        client = ContentServiceClient(config)
        assert client.endpoint == "https://content.test/v1/models/test-model:generateContent"

    def test_build_payload_plain(self):
        """Test a plain prompt has no generation config."""
        payload = ContentServiceClient.build_payload("hello")
        assert payload == {"contents": [{"parts": [{"text": "hello"}]}]}

    def test_build_payload_with_schema(self):
        """Test a schema requests a JSON reply."""
        payload = ContentServiceClient.build_payload("hello", {"type": "OBJECT"})
        assert payload["generationConfig"]["responseMimeType"] == "application/json"
        assert payload["generationConfig"]["responseSchema"] == {"type": "OBJECT"}

    def test_extract_text(self):
        """Test text parts are joined."""
        data = {"candidates": [{"content": {"parts": [{"text": "a"}, {"text": "b"}]}}]}
        assert ContentServiceClient.extract_text(data) == "ab"

    @pytest.mark.parametrize("data", [{}, {"candidates": []}, None, reply("   ")])
    def test_extract_text_malformed(self, data):
        """Test malformed or empty bodies raise CollaboratorError."""
        with pytest.raises(CollaboratorError):
            ContentServiceClient.extract_text(data)


class TestGenerate:
    """Test ContentServiceClient.generate()."""

    @pytest.mark.asyncio
    async def test_no_api_key(self):
        """Test a missing API key fails before any request."""
        session = create_test_session()
        client = ContentServiceClient(GuildConfig(api_key=""), session=session)
        with pytest.raises(CollaboratorError):
            await client.generate("hello")
        session.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_success(self, config):
        """Test a successful call returns the reply text."""
        session = create_test_session(create_test_response(body=reply("Three oaks")))
        client = ContentServiceClient(config, session=session)

        assert await client.generate("Name trees") == "Three oaks"
        _, kwargs = session.post.call_args
        assert kwargs["headers"] == {"x-goog-api-key": "test-key"}
        assert kwargs["json"]["contents"][0]["parts"][0]["text"] == "Name trees"

    @pytest.mark.asyncio
    async def test_http_error(self, config):
        """Test a non-200 status raises CollaboratorError."""
        session = create_test_session(create_test_response(status=500))
        client = ContentServiceClient(config, session=session)
        with pytest.raises(CollaboratorError, match="HTTP 500"):
            await client.generate("hello")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [asyncio.TimeoutError(), aiohttp.ClientConnectionError("refused")])
    async def test_transport_errors(self, config, error):
        """Test timeouts and connection errors raise CollaboratorError."""
        client = ContentServiceClient(config, session=create_test_session(error=error))
        with pytest.raises(CollaboratorError):
            await client.generate("hello")

    @pytest.mark.asyncio
    async def test_generate_json(self, config):
        """Test JSON replies are parsed."""
        session = create_test_session(create_test_response(body=reply('{"title": "Hive Keeper"}')))
        client = ContentServiceClient(config, session=session)
        assert await client.generate_json("draft", {"type": "OBJECT"}) == {"title": "Hive Keeper"}

    @pytest.mark.asyncio
    async def test_generate_json_invalid(self, config):
        """Test a non-JSON reply raises CollaboratorError."""
        session = create_test_session(create_test_response(body=reply("not json")))
        client = ContentServiceClient(config, session=session)
        with pytest.raises(CollaboratorError):
            await client.generate_json("draft", {"type": "OBJECT"})
