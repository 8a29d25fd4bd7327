"""
guildjournal/protocol/tiers.py

Tier ascension engine.

Membership tiers form an ordered ladder:

    Member < Seeker < Wayfarer < Journeyer < Artisan < Warden < Keystone

Every tier above Member has a fixed list of prerequisites in
TIER_REQUIREMENTS. Each item is either a keystone badge (a specific
library badge id that must be owned and mastered) or a milestone (a
free-form condition, some of which also ask for a written statement).

Eligibility is advisory. A PromotionRequest may be built whether or not
the prerequisites are met, and approving one sets the tier without
re-checking this map: promotion is a petition judged by the Council.

Usage:
    from guildjournal.protocol.tiers import Tier, assess_eligibility

    report = assess_eligibility(user, Tier.WAYFARER)
    if report.missing_keystones:
        ...
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Set

if TYPE_CHECKING:
    from .profile import UserProfile

logger = logging.getLogger("guildjournal.protocol.tiers")


# ============================================================================
# ENUMS
# ============================================================================

class Tier(Enum):
    """Ordered membership rank."""
    MEMBER = "Member"
    SEEKER = "Seeker"
    WAYFARER = "Wayfarer"
    JOURNEYER = "Journeyer"
    ARTISAN = "Artisan"
    WARDEN = "Warden"
    KEYSTONE = "Keystone"

    @property
    def rank(self) -> int:
        return TIER_ORDER.index(self)

    def next_tier(self) -> Optional["Tier"]:
        if self.rank + 1 < len(TIER_ORDER):
            return TIER_ORDER[self.rank + 1]
        return None

    def __lt__(self, other: "Tier") -> bool:
        if not isinstance(other, Tier):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: "Tier") -> bool:
        if not isinstance(other, Tier):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: "Tier") -> bool:
        if not isinstance(other, Tier):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: "Tier") -> bool:
        if not isinstance(other, Tier):
            return NotImplemented
        return self.rank >= other.rank

    @classmethod
    def from_string(cls, value: str) -> "Tier":
        """Parse a tier by value or name (case-insensitive)."""
        normalized = value.strip().lower()
        for tier in cls:
            if normalized in (tier.value.lower(), tier.name.lower()):
                return tier
        raise ValueError(
            f"Invalid tier: {value}. Valid options: "
            f"{', '.join(t.value for t in cls)}"
        )


TIER_ORDER: List[Tier] = list(Tier)
INITIAL_TIER = Tier.MEMBER


class PrerequisiteKind(Enum):
    """Kinds of tier prerequisites."""
    KEYSTONE_BADGE = "keystone_badge"
    MILESTONE = "milestone"


# ============================================================================
# DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True)
class TierRequirement:
    """One prerequisite item for a tier."""
    id: str
    description: str
    kind: PrerequisiteKind = PrerequisiteKind.MILESTONE
    keystone_badge_id: Optional[str] = None
    needs_statement: bool = False
    # Countable milestones; 0 means "not countable, Council judgment only"
    min_mastered_badges: int = 0
    min_domains: int = 0

    @property
    def is_keystone(self) -> bool:
        return self.kind == PrerequisiteKind.KEYSTONE_BADGE

    @property
    def is_countable(self) -> bool:
        return self.min_mastered_badges > 0 or self.min_domains > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "kind": self.kind.value,
            "keystoneBadgeId": self.keystone_badge_id,
            "needsStatement": self.needs_statement,
            "minMasteredBadges": self.min_mastered_badges,
            "minDomains": self.min_domains,
        }


@dataclass
class ActionStatement:
    """A written statement supporting a promotion petition."""
    requirement_id: str
    requirement_title: str
    intent: str = ""
    difficulties: str = ""
    lessons: str = ""
    reference_contact: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "requirementId": self.requirement_id,
            "requirementTitle": self.requirement_title,
            "intent": self.intent,
            "difficulties": self.difficulties,
            "lessons": self.lessons,
            "referenceContact": self.reference_contact,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ActionStatement":
        return cls(
            requirement_id=data.get("requirementId", ""),
            requirement_title=data.get("requirementTitle", ""),
            intent=data.get("intent", ""),
            difficulties=data.get("difficulties", ""),
            lessons=data.get("lessons", ""),
            reference_contact=data.get("referenceContact", ""),
        )


@dataclass
class EligibilityReport:
    """Advisory summary of how a member stands against a tier's prerequisites."""
    target_tier: Tier
    current_tier: Tier
    requirements: List[TierRequirement] = field(default_factory=list)
    satisfied_ids: List[str] = field(default_factory=list)
    missing_keystones: List[str] = field(default_factory=list)
    unmet_milestones: List[str] = field(default_factory=list)
    statements_needed: List[str] = field(default_factory=list)

    @property
    def is_upward(self) -> bool:
        return self.target_tier > self.current_tier

    @property
    def looks_ready(self) -> bool:
        """True when every machine-checkable prerequisite is met."""
        return self.is_upward and not self.missing_keystones and not self.unmet_milestones

    def to_dict(self) -> Dict[str, Any]:
        return {
            "targetTier": self.target_tier.value,
            "currentTier": self.current_tier.value,
            "requirements": [r.to_dict() for r in self.requirements],
            "satisfiedIds": list(self.satisfied_ids),
            "missingKeystones": list(self.missing_keystones),
            "unmetMilestones": list(self.unmet_milestones),
            "statementsNeeded": list(self.statements_needed),
            "looksReady": self.looks_ready,
        }


# ============================================================================
# TIER REQUIREMENT MAP
# ============================================================================

def _keystone(badge_id: str, title: str) -> TierRequirement:
    return TierRequirement(
        id=f"keystone-{badge_id}",
        description=f"Master the keystone badge '{title}'",
        kind=PrerequisiteKind.KEYSTONE_BADGE,
        keystone_badge_id=badge_id,
    )


# Keystone badges are the seeded library badges (see state.seed_library)
FOREST_STEWARDSHIP = _keystone("b1", "Forest Stewardship")
COMMUNITY_ARCHITECT = _keystone("b2", "Community Architect")
SOCRATIC_PATH = _keystone("b3", "The Socratic Path")

TIER_REQUIREMENTS: Dict[Tier, List[TierRequirement]] = {
    Tier.SEEKER: [
        TierRequirement("seeker-onboarding", "Complete onboarding"),
        TierRequirement("seeker-first-proposal", "Submit your first badge proposal"),
    ],
    Tier.WAYFARER: [
        TierRequirement("wayfarer-five-badges", "Earn 5 badges", min_mastered_badges=5),
        TierRequirement("wayfarer-two-domains", "Span at least 2 domains", min_domains=2),
        FOREST_STEWARDSHIP,
    ],
    Tier.JOURNEYER: [
        TierRequirement("journeyer-ten-badges", "Earn 10 badges", min_mastered_badges=10),
        TierRequirement(
            "journeyer-sustained-effort",
            "Demonstrate sustained effort",
            needs_statement=True,
        ),
        COMMUNITY_ARCHITECT,
    ],
    Tier.ARTISAN: [
        TierRequirement(
            "artisan-depth",
            "Achieve depth in a skill area",
            needs_statement=True,
        ),
        TierRequirement(
            "artisan-mentor",
            "Mentor at least one Seeker",
            needs_statement=True,
        ),
        SOCRATIC_PATH,
    ],
    Tier.WARDEN: [
        TierRequirement("warden-twenty-badges", "Earn 20+ badges", min_mastered_badges=20),
        TierRequirement("warden-service", "Lead service projects", needs_statement=True),
        TierRequirement("warden-community-badge", "Design a community badge"),
        FOREST_STEWARDSHIP,
        COMMUNITY_ARCHITECT,
    ],
    Tier.KEYSTONE: [
        TierRequirement("keystone-thirty-badges", "Earn 30+ badges", min_mastered_badges=30),
        TierRequirement(
            "keystone-capstone",
            "Capstone project with public impact",
            needs_statement=True,
        ),
        FOREST_STEWARDSHIP,
        COMMUNITY_ARCHITECT,
        SOCRATIC_PATH,
    ],
}


# ============================================================================
# OPERATIONS
# ============================================================================

def eligible_supporting_requirements(user: "UserProfile", target_tier: Tier) -> List[TierRequirement]:
    """Static prerequisite list for target_tier (empty for the initial tier)."""
    return list(TIER_REQUIREMENTS.get(target_tier, []))


def promotable_tiers(user: "UserProfile") -> List[Tier]:
    """Tiers strictly above the member's current tier."""
    return [tier for tier in TIER_ORDER if tier > user.tier]


def _mastered_ids(user: "UserProfile") -> Set[str]:
    return {b.id for b in user.badges if b.is_mastered}


def _mastered_domains(user: "UserProfile") -> Set[Any]:
    domains = set()
    for badge in user.badges:
        if badge.is_mastered:
            domains.update(badge.all_domains())
    return domains


def assess_eligibility(user: "UserProfile", target_tier: Tier) -> EligibilityReport:
    """
    Compare a member against a tier's prerequisites.

    Keystones and countable milestones are checked against mastered owned
    badges. Free-form milestones are left to the Council and reported
    only when they need a written statement.
    """
    requirements = eligible_supporting_requirements(user, target_tier)
    report = EligibilityReport(
        target_tier=target_tier,
        current_tier=user.tier,
        requirements=requirements,
    )

    mastered = _mastered_ids(user)
    domain_count = len(_mastered_domains(user))

    for req in requirements:
        if req.is_keystone:
            if req.keystone_badge_id in mastered:
                report.satisfied_ids.append(req.id)
            else:
                report.missing_keystones.append(req.keystone_badge_id)
            continue

        if req.is_countable:
            met = (
                len(mastered) >= req.min_mastered_badges
                and domain_count >= req.min_domains
            )
            if met:
                report.satisfied_ids.append(req.id)
            else:
                report.unmet_milestones.append(req.id)

        if req.needs_statement:
            report.statements_needed.append(req.id)

    logger.debug(
        f"Eligibility {user.tier.value} -> {target_tier.value}: "
        f"missing keystones={report.missing_keystones}, "
        f"unmet milestones={report.unmet_milestones}"
    )
    return report


def has_council_role(user: "UserProfile") -> bool:
    """Whether the member may act as Council. Informational, not enforced."""
    return bool(user.council_role) or user.tier == Tier.KEYSTONE
