"""
guildjournal.integration.drafting - AI-assisted badge drafting

Asks the content service for a badge curriculum and returns a sanitized
BadgeDraft. draft_badge() never raises: a failed call or a malformed
payload yields a placeholder draft (empty requirements, difficulty 3),
and nothing is committed to the journal until the caller dispatches a
CreateBadge or SubmitProposal event.

Usage:
    from guildjournal.integration.drafting import BadgeDrafter

    drafter = BadgeDrafter(ContentServiceClient(config))
    draft = await drafter.draft_badge("Beekeeping", "Keep a healthy hive for a season")
    if not draft.is_placeholder:
        badge = badge_from_draft(draft, creator_id=user.id)
"""

import logging
from typing import Any, Dict, Optional

from ..protocol.badges import Badge, BadgeDraft, Domain, badge_from_draft, sanitize_draft
from .content_client import ContentServiceClient
from .fallback import FallbackHandler

logger = logging.getLogger("guildjournal.integration.drafting")


DRAFT_PROMPT = """Generate a comprehensive and rigorous badge curriculum for the topic: "{topic}" with the goal: "{goal}".
The curriculum should be modeled after high-level achievement programs like merit badges.

Structure the response with:
1. A dramatic, guild-inspired title.
2. A brief, evocative description (max 50 words).
3. Exactly 8-10 specific, progressive requirements that include:
   - Safety and preparation protocols.
   - Core theoretical knowledge/definitions.
   - A significant practical field project or experiment.
   - A community-focused application or mentorship task.

Assign a domain (one of: {domains}), up to two secondary domains, and a
complexity rating from 1 to 5 stars (1 = shortest time/least complex,
5 = longest time/most complex)."""

DRAFT_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "title": {"type": "STRING"},
        "description": {"type": "STRING"},
        "domain": {"type": "STRING"},
        "secondaryDomains": {"type": "ARRAY", "items": {"type": "STRING"}},
        "difficulty": {
            "type": "INTEGER",
            "description": "Complexity rating from 1 to 5 stars",
        },
        "requirements": {"type": "ARRAY", "items": {"type": "STRING"}},
    },
    "required": ["title", "description", "domain", "difficulty", "requirements"],
}


class BadgeDrafter:
    """Drafts badge curricula through the content service."""

    def __init__(
        self,
        client: Optional[ContentServiceClient] = None,
        fallback: Optional[FallbackHandler] = None,
    ):
        self.client = client or ContentServiceClient()
        self.fallback = fallback or FallbackHandler()

    @staticmethod
    def build_prompt(topic: str, goal: str) -> str:
        return DRAFT_PROMPT.format(
            topic=topic.strip(),
            goal=goal.strip(),
            domains=", ".join(d.value for d in Domain),
        )

    async def draft_badge(self, topic: str, goal: str) -> BadgeDraft:
        """
        Draft a badge for topic/goal.

        Returns:
            Sanitized draft; a placeholder draft if the service failed
        """
        prompt = self.build_prompt(topic, goal)
        payload = await self.fallback.call(
            "draft_badge",
            lambda: self.client.generate_json(prompt, DRAFT_SCHEMA),
            fallback=None,
        )
        draft = sanitize_draft(payload)
        if draft.is_placeholder:
            logger.info(f"Drafting for '{topic}' produced a placeholder draft")
        return draft

    async def draft_journal_badge(
        self,
        topic: str,
        goal: str,
        creator_id: Optional[str] = None,
    ) -> Optional[Badge]:
        """Draft and convert to a journal badge; None for a placeholder draft."""
        draft = await self.draft_badge(topic, goal)
        if draft.is_placeholder:
            return None
        return badge_from_draft(draft, creator_id=creator_id)
