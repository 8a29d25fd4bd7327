"""
guildjournal/protocol/badges.py

Badge lifecycle: records, derived completion state and the three creation
paths.

Creation paths:
- Manual: the member authors title/description/domain/requirements
  directly. Unverified, user-created.
- AI-assisted: the content service returns a loose draft payload which is
  sanitized into a BadgeDraft (sane defaults for anything missing) and then
  treated exactly like a manual draft, with both evidence demands on.
- Official: only minted by approving a BadgeProposal, or seeded library
  content. Verified, not user-created.

A badge is "mastered" iff every requirement is complete; an empty
requirement list is vacuously mastered.

Usage:
    from guildjournal.protocol.badges import create_manual_badge, derive_badge_state

    badge = create_manual_badge(
        title="River Keeper",
        description="Care for a local watershed.",
        domain=Domain.ENVIRONMENT,
        requirements=[Requirement.create("Map the watershed", require_note=True)],
    )
    derive_badge_state(badge)  # BadgeState.IN_PROGRESS
"""

import copy
import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..config import DEFAULT_DIFFICULTY, MAX_SECONDARY_DOMAINS
from .requirements import Requirement

logger = logging.getLogger("guildjournal.protocol.badges")


# ============================================================================
# ENUMS
# ============================================================================

class Domain(Enum):
    """Topical category of a badge."""
    SKILL = "Skill"
    SERVICE = "Service"
    KNOWLEDGE = "Knowledge"
    ETHICS = "Ethics"
    SOCIETY = "Society"
    ENVIRONMENT = "Environment"
    IDEOLOGY = "Ideology"

    @classmethod
    def parse(cls, value: Any, default: Optional["Domain"] = None) -> Optional["Domain"]:
        """Case-insensitive lookup by value or name; default when unknown."""
        if isinstance(value, Domain):
            return value
        if not isinstance(value, str):
            return default
        normalized = value.strip().lower()
        for domain in cls:
            if normalized in (domain.value.lower(), domain.name.lower()):
                return domain
        return default


class BadgeState(Enum):
    """Derived completion state of a badge."""
    IN_PROGRESS = "inProgress"
    MASTERED = "mastered"


MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 5


def clamp_difficulty(value: Any, default: int = DEFAULT_DIFFICULTY) -> int:
    """Coerce anything into a 1..5 difficulty rating."""
    try:
        rating = int(value)
    except (TypeError, ValueError, OverflowError):
        return default
    return max(MIN_DIFFICULTY, min(MAX_DIFFICULTY, rating))


# ============================================================================
# DATA STRUCTURES
# ============================================================================

@dataclass
class UsefulLink:
    """A community-contributed resource link attached to a badge."""
    label: str
    url: str

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "url": self.url}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UsefulLink":
        return cls(label=data.get("label", ""), url=data.get("url", ""))


@dataclass
class Badge:
    """A unit of mastery."""
    id: str
    title: str
    description: str
    domain: Domain
    difficulty: int = DEFAULT_DIFFICULTY
    requirements: List[Requirement] = field(default_factory=list)
    secondary_domains: List[Domain] = field(default_factory=list)
    reflections: str = ""
    is_verified: bool = False
    is_user_created: bool = True
    creator_id: Optional[str] = None
    # Cosmetic metadata, carried but never interpreted
    icon: Optional[str] = None
    visual_asset_url: Optional[str] = None
    badge_shape: str = "circle"
    design_choice: str = "template"
    # Partnership stamp
    is_partnership: bool = False
    partner_name: Optional[str] = None
    useful_links: List[UsefulLink] = field(default_factory=list)

    @property
    def is_mastered(self) -> bool:
        return all(req.is_completed for req in self.requirements)

    @property
    def state(self) -> BadgeState:
        return derive_badge_state(self)

    def get_requirement(self, requirement_id: str) -> Optional[Requirement]:
        for req in self.requirements:
            if req.id == requirement_id:
                return req
        return None

    def all_domains(self) -> List[Domain]:
        return [self.domain] + [d for d in self.secondary_domains if d != self.domain]

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "domain": self.domain.value,
            "secondaryDomains": [d.value for d in self.secondary_domains],
            "difficulty": self.difficulty,
            "requirements": [r.to_dict() for r in self.requirements],
            "reflections": self.reflections,
            "isVerified": self.is_verified,
            "isUserCreated": self.is_user_created,
            "badgeShape": self.badge_shape,
            "designChoice": self.design_choice,
            "usefulLinks": [link.to_dict() for link in self.useful_links],
        }
        optional = {
            "creatorId": self.creator_id,
            "icon": self.icon,
            "visualAssetUrl": self.visual_asset_url,
            "partnerName": self.partner_name,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        if self.is_partnership:
            data["isPartnership"] = True
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Badge":
        secondary = [
            d for d in (Domain.parse(v) for v in data.get("secondaryDomains") or [])
            if d is not None
        ]
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            description=data.get("description", ""),
            domain=Domain.parse(data.get("domain"), Domain.SKILL),
            difficulty=clamp_difficulty(data.get("difficulty")),
            requirements=[Requirement.from_dict(r) for r in data.get("requirements") or []],
            secondary_domains=secondary[:MAX_SECONDARY_DOMAINS],
            reflections=data.get("reflections") or "",
            is_verified=bool(data.get("isVerified", False)),
            is_user_created=bool(data.get("isUserCreated", False)),
            creator_id=data.get("creatorId"),
            icon=data.get("icon"),
            visual_asset_url=data.get("visualAssetUrl"),
            badge_shape=data.get("badgeShape") or "circle",
            design_choice=data.get("designChoice") or "template",
            is_partnership=bool(data.get("isPartnership", False)),
            partner_name=data.get("partnerName"),
            useful_links=[UsefulLink.from_dict(l) for l in data.get("usefulLinks") or []],
        )


@dataclass
class BadgeDraft:
    """
    Sanitized badge content from the drafting service or a manual form.

    Requirements are plain descriptions; ids and evidence demands are
    assigned when the draft becomes a Badge.
    """
    title: str = ""
    description: str = ""
    domain: Domain = Domain.SKILL
    secondary_domains: List[Domain] = field(default_factory=list)
    difficulty: int = DEFAULT_DIFFICULTY
    requirements: List[str] = field(default_factory=list)

    @property
    def is_placeholder(self) -> bool:
        return not self.title and not self.requirements

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "domain": self.domain.value,
            "secondaryDomains": [d.value for d in self.secondary_domains],
            "difficulty": self.difficulty,
            "requirements": list(self.requirements),
        }


def sanitize_draft(payload: Any) -> BadgeDraft:
    """
    Turn an arbitrary drafting payload into a BadgeDraft.

    Never raises. Missing or malformed fields fall back to defaults:
    empty strings, Skill domain, difficulty 3, no requirements.
    """
    if not isinstance(payload, dict):
        if payload is not None:
            logger.warning(f"Discarding non-object draft payload: {type(payload).__name__}")
        return BadgeDraft()

    title = payload.get("title")
    description = payload.get("description")

    secondary_raw = payload.get("secondaryDomains") or payload.get("secondary_domains") or []
    if not isinstance(secondary_raw, list):
        secondary_raw = []
    secondary: List[Domain] = []
    for value in secondary_raw:
        domain = Domain.parse(value)
        if domain is not None and domain not in secondary:
            secondary.append(domain)

    requirements_raw = payload.get("requirements") or []
    if not isinstance(requirements_raw, list):
        requirements_raw = []
    requirements = []
    for item in requirements_raw:
        if isinstance(item, dict):
            item = item.get("description")
        if isinstance(item, str) and item.strip():
            requirements.append(item.strip())

    primary = Domain.parse(payload.get("domain"), Domain.SKILL)
    return BadgeDraft(
        title=title.strip() if isinstance(title, str) else "",
        description=description.strip() if isinstance(description, str) else "",
        domain=primary,
        secondary_domains=[d for d in secondary if d != primary][:MAX_SECONDARY_DOMAINS],
        difficulty=clamp_difficulty(payload.get("difficulty")),
        requirements=requirements,
    )


# ============================================================================
# DERIVATION
# ============================================================================

def derive_badge_state(badge: Badge) -> BadgeState:
    """inProgress if any requirement is incomplete, else mastered."""
    if badge.is_mastered:
        return BadgeState.MASTERED
    return BadgeState.IN_PROGRESS


# ============================================================================
# CREATION PATHS
# ============================================================================

def new_badge_id(prefix: str = "custom") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def create_manual_badge(
    title: str,
    description: str,
    domain: Domain,
    requirements: Optional[List[Requirement]] = None,
    secondary_domains: Optional[List[Domain]] = None,
    difficulty: int = DEFAULT_DIFFICULTY,
    creator_id: Optional[str] = None,
) -> Badge:
    """Create a member-authored badge (unverified, user-created)."""
    return Badge(
        id=new_badge_id(),
        title=title,
        description=description,
        domain=domain,
        difficulty=clamp_difficulty(difficulty),
        requirements=list(requirements or []),
        secondary_domains=[d for d in (secondary_domains or []) if d != domain][:MAX_SECONDARY_DOMAINS],
        is_verified=False,
        is_user_created=True,
        creator_id=creator_id,
        icon="✨",
    )


def badge_from_draft(draft: Any, creator_id: Optional[str] = None) -> Badge:
    """
    Create a badge from an AI draft.

    Accepts a BadgeDraft or a raw payload; raw payloads are sanitized
    first. Requirement ids are assigned as ai-req-<n> and both evidence
    demands are switched on.
    """
    if not isinstance(draft, BadgeDraft):
        draft = sanitize_draft(draft)

    requirements = [
        Requirement.create(
            description,
            require_attachment=True,
            require_note=True,
            requirement_id=f"ai-req-{idx}",
        )
        for idx, description in enumerate(draft.requirements)
    ]
    return create_manual_badge(
        title=draft.title,
        description=draft.description,
        domain=draft.domain,
        requirements=requirements,
        secondary_domains=draft.secondary_domains,
        difficulty=draft.difficulty,
        creator_id=creator_id,
    )


def mint_official_badge(
    draft: Badge,
    as_partner_badge: bool = False,
    partner_name: Optional[str] = None,
) -> Badge:
    """
    Mint a library badge from an approved proposal's draft.

    The result is an independent deep copy with a fresh id, verified and
    no longer user-created. Evidence captured on the draft is not carried
    into the library.
    """
    official = copy.deepcopy(draft)
    official.id = new_badge_id("official")
    official.is_verified = True
    official.is_user_created = False
    official.reflections = ""
    official.requirements = [
        Requirement.create(
            req.description,
            require_attachment=req.require_attachment,
            require_note=req.require_note,
            requirement_id=req.id,
        )
        for req in draft.requirements
    ]
    if as_partner_badge:
        official.is_partnership = True
        official.partner_name = partner_name or official.partner_name
    return official


def clone_for_journal(library_badge: Badge) -> Badge:
    """Deep copy a library badge so a member's evidence stays independent."""
    return copy.deepcopy(library_badge)
