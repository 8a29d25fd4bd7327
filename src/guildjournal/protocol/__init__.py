"""
guildjournal/protocol/

Achievement and council workflow engine.
"""

from .requirements import Requirement, record_evidence, revoke
from .badges import (
    Badge,
    BadgeDraft,
    BadgeState,
    Domain,
    UsefulLink,
    badge_from_draft,
    create_manual_badge,
    derive_badge_state,
    sanitize_draft,
)
from .tiers import (
    Tier,
    TierRequirement,
    ActionStatement,
    EligibilityReport,
    TIER_REQUIREMENTS,
    assess_eligibility,
    eligible_supporting_requirements,
    promotable_tiers,
)
from .profile import UserProfile, PrivacySettings
from .council import (
    CouncilStatus,
    RequestKind,
    CouncilRequest,
    VerificationRequest,
    BadgeProposal,
    PromotionRequest,
    LinkSuggestion,
    PartnershipRequest,
    PhysicalBadgeRequest,
    APPROVAL_HANDLERS,
    build_promotion_request,
    resolve,
)
from .fulfillment import request_physical_artifact
from .colonies import Colony, ColonyEvent, ColonyNotice
from .state import GuildState, initial_state
from .reducer import reduce
from .storage import StorageBackend, MemoryBackend, FileBackend, SnapshotStore
from .versioning import SNAPSHOT_VERSION, migrate_snapshot

__all__ = [
    # Requirements
    "Requirement",
    "record_evidence",
    "revoke",
    # Badges
    "Badge",
    "BadgeDraft",
    "BadgeState",
    "Domain",
    "UsefulLink",
    "badge_from_draft",
    "create_manual_badge",
    "derive_badge_state",
    "sanitize_draft",
    # Tiers
    "Tier",
    "TierRequirement",
    "ActionStatement",
    "EligibilityReport",
    "TIER_REQUIREMENTS",
    "assess_eligibility",
    "eligible_supporting_requirements",
    "promotable_tiers",
    # Profile
    "UserProfile",
    "PrivacySettings",
    # Council
    "CouncilStatus",
    "RequestKind",
    "CouncilRequest",
    "VerificationRequest",
    "BadgeProposal",
    "PromotionRequest",
    "LinkSuggestion",
    "PartnershipRequest",
    "PhysicalBadgeRequest",
    "APPROVAL_HANDLERS",
    "build_promotion_request",
    "resolve",
    # Fulfillment
    "request_physical_artifact",
    # Colonies
    "Colony",
    "ColonyEvent",
    "ColonyNotice",
    # State
    "GuildState",
    "initial_state",
    "reduce",
    # Persistence
    "StorageBackend",
    "MemoryBackend",
    "FileBackend",
    "SnapshotStore",
    "SNAPSHOT_VERSION",
    "migrate_snapshot",
]
