"""
guildjournal.integration.content_client - Generative content HTTP client

Thin aiohttp client for the Generative Language "generateContent" REST
endpoint. It knows nothing about badges: it sends a prompt (optionally with
a JSON response schema) and returns the reply text.

Every failure mode (no API key, HTTP error, timeout, malformed body) is
raised as CollaboratorError. Callers in this package turn that into a
fallback value; it never reaches the engine.

Usage:
    from guildjournal.integration.content_client import ContentServiceClient

    client = ContentServiceClient(GuildConfig.from_env())
    text = await client.generate("Name three native trees")
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import aiohttp

from ..config import GuildConfig
from ..exceptions import CollaboratorError

logger = logging.getLogger("guildjournal.integration.content_client")


class ContentServiceClient:
    """
    Async client for the content service.

    Args:
        config: Settings (API key, model, base URL, timeout)
        session: Optional shared aiohttp session; a short-lived one is
            created per call otherwise
    """

    def __init__(
        self,
        config: Optional[GuildConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.config = config or GuildConfig.from_env()
        self._session = session

    @property
    def endpoint(self) -> str:
        base = self.config.api_base_url.rstrip("/")
        return f"{base}/models/{self.config.model}:generateContent"

    @staticmethod
    def build_payload(prompt: str, response_schema: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
        if response_schema is not None:
            payload["generationConfig"] = {
                "responseMimeType": "application/json",
                "responseSchema": response_schema,
            }
        return payload

    @staticmethod
    def extract_text(data: Any) -> str:
        """Pull the reply text out of a generateContent response body."""
        try:
            parts = data["candidates"][0]["content"]["parts"]
            text = "".join(part.get("text", "") for part in parts)
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise CollaboratorError(f"Malformed content service response: {e}") from e
        if not text.strip():
            raise CollaboratorError("Content service returned an empty reply")
        return text

    async def generate(self, prompt: str, response_schema: Optional[Dict[str, Any]] = None) -> str:
        """
        Send one prompt and return the reply text.

        Raises:
            CollaboratorError: on any failure
        """
        if not self.config.has_api_key:
            raise CollaboratorError("No content service API key configured")

        payload = self.build_payload(prompt, response_schema)
        headers = {"x-goog-api-key": self.config.api_key}
        timeout = aiohttp.ClientTimeout(total=self.config.request_timeout)

        try:
            if self._session is not None:
                data = await self._post(self._session, payload, headers, timeout)
            else:
                async with aiohttp.ClientSession() as session:
                    data = await self._post(session, payload, headers, timeout)
        except asyncio.TimeoutError as e:
            raise CollaboratorError(
                f"Content service timed out after {self.config.request_timeout}s"
            ) from e
        except aiohttp.ClientError as e:
            raise CollaboratorError(f"Content service request failed: {e}") from e

        return self.extract_text(data)

    async def generate_json(self, prompt: str, response_schema: Dict[str, Any]) -> Any:
        """Send a prompt with a response schema and parse the JSON reply."""
        text = await self.generate(prompt, response_schema)
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise CollaboratorError(f"Content service returned invalid JSON: {e}") from e

    async def _post(
        self,
        session: aiohttp.ClientSession,
        payload: Dict[str, Any],
        headers: Dict[str, str],
        timeout: aiohttp.ClientTimeout,
    ) -> Any:
        async with session.post(self.endpoint, json=payload, headers=headers, timeout=timeout) as response:
            if response.status != 200:
                body = await response.text()
                logger.debug(f"Content service error body: {body[:200]}")
                raise CollaboratorError(f"Content service returned HTTP {response.status}")
            try:
                return await response.json(content_type=None)
            except (json.JSONDecodeError, aiohttp.ContentTypeError) as e:
                raise CollaboratorError(f"Content service body is not JSON: {e}") from e
