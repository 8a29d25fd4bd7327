"""
guildjournal.integration.guidance - Advisory text from the content service

Pure text/number producers with no effect on the data model. Every call
has a fixed fallback so a silent service never surfaces as an error:

- recommend_next      -> "The Oracle remains silent for now."
- suggest_requirement -> ""
- rate_complexity     -> 3
"""

import logging
import re
from typing import List, Optional

from ..config import DEFAULT_COMPLEXITY
from ..protocol.badges import Badge, clamp_difficulty
from .content_client import ContentServiceClient
from .fallback import FallbackHandler

logger = logging.getLogger("guildjournal.integration.guidance")


SILENT_ORACLE = "The Oracle remains silent for now."

RECOMMEND_PROMPT = """The user has mastered: [{badges}]. They are interested in: [{interests}].
Act as the Guild Oracle. Provide a CONCISE revelation.
Structure:
1. One short mystical greeting (max 15 words).
2. Exactly three recommended mastery paths (Title: 1-sentence description).
3. One closing sentence (max 15 words).
TOTAL LIMIT: 100 words. Be sharp, evocative, and brief."""

SUGGEST_PROMPT = """A badge titled "{title}" ({description}) already has these requirements:
{existing}
Suggest exactly one additional, specific, progressive requirement. Reply with the requirement text only."""

COMPLEXITY_PROMPT = """Rate the complexity of this badge from 1 (shortest, least complex) to 5 (longest, most complex).
Title: {title}
Description: {description}
Requirements:
{requirements}
Reply with a single integer."""

_FIRST_INT = re.compile(r"-?\d+")


def parse_complexity(text: str, default: int = DEFAULT_COMPLEXITY) -> int:
    """First integer in text, clamped to 1..5; default if there is none."""
    match = _FIRST_INT.search(text or "")
    if match is None:
        return default
    return clamp_difficulty(match.group(), default)


def _bullets(items: List[str]) -> str:
    return "\n".join(f"- {item}" for item in items) or "- (none)"


class GuidanceOracle:
    """Advisory guidance backed by the content service."""

    def __init__(
        self,
        client: Optional[ContentServiceClient] = None,
        fallback: Optional[FallbackHandler] = None,
    ):
        self.client = client or ContentServiceClient()
        self.fallback = fallback or FallbackHandler()

    async def recommend_next(self, owned_badges: List[Badge], interests: List[str]) -> str:
        prompt = RECOMMEND_PROMPT.format(
            badges=", ".join(b.title for b in owned_badges),
            interests=", ".join(interests),
        )
        text = await self.fallback.call(
            "recommend_next",
            lambda: self.client.generate(prompt),
            fallback=SILENT_ORACLE,
        )
        return text.strip() or SILENT_ORACLE

    async def suggest_requirement(self, title: str, description: str, existing: List[str]) -> str:
        prompt = SUGGEST_PROMPT.format(
            title=title,
            description=description,
            existing=_bullets(existing),
        )
        text = await self.fallback.call(
            "suggest_requirement",
            lambda: self.client.generate(prompt),
            fallback="",
        )
        return text.strip().lstrip("-* ").strip()

    async def rate_complexity(self, title: str, description: str, requirements: List[str]) -> int:
        prompt = COMPLEXITY_PROMPT.format(
            title=title,
            description=description,
            requirements=_bullets(requirements),
        )
        text = await self.fallback.call(
            "rate_complexity",
            lambda: self.client.generate(prompt),
            fallback="",
        )
        rating = parse_complexity(text)
        logger.debug(f"Complexity for '{title}': {rating}")
        return rating
