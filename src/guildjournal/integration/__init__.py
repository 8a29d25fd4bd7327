"""
guildjournal.integration - External collaborators

The generative content service and everything built on it. Nothing in
here can fail the engine: every call degrades to a fallback value.

Features:
- ContentServiceClient: aiohttp client for generateContent
- BadgeDrafter: AI-assisted badge curricula
- GuidanceOracle: recommendations, requirement suggestions, complexity
- FallbackHandler / CircuitBreaker: fault isolation

Usage:
    from guildjournal.integration import BadgeDrafter, ContentServiceClient

    drafter = BadgeDrafter(ContentServiceClient(config))
    draft = await drafter.draft_badge("Beekeeping", "Keep a healthy hive")
"""

from .content_client import ContentServiceClient
from .drafting import BadgeDrafter
from .guidance import GuidanceOracle, SILENT_ORACLE
from .fallback import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitState,
    FallbackHandler,
)

__all__ = [
    "ContentServiceClient",
    "BadgeDrafter",
    "GuidanceOracle",
    "SILENT_ORACLE",
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitState",
    "FallbackHandler",
]
