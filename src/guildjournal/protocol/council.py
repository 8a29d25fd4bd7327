"""
guildjournal/protocol/council.py

Council request workflow.

Six kinds of reviewable petitions share one lifecycle:

    pending -> approved | rejected | needs_info

Resolution is only allowed from pending. Approval runs a kind-specific
side effect registered in APPROVAL_HANDLERS, and the request is marked
approved only once that side effect has been applied. A request that is
already resolved cannot be resolved again, so side effects never run
twice. needs_info is terminal for the engine; the member answers it by
submitting a new request.

Request kinds and their approval side effects:
- verification:  mark the member's owned badge verified
- proposal:      mint the draft into the shared library as an official badge
- promotion:     set the member's tier to the target tier (no re-check)
- link:          append the link to the library badge and the owned copy
- partnership:   status only
- physical:      status only (cost/claim bookkeeping happens at submission)

Usage:
    from guildjournal.protocol.council import RequestKind, CouncilStatus, resolve

    resolve(state, RequestKind.VERIFICATION, request_id, CouncilStatus.APPROVED)
"""

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Dict, List, Optional, Type

from ..exceptions import InvalidTransitionError, NotFoundError, ValidationError
from .badges import Badge, UsefulLink, mint_official_badge
from .tiers import ActionStatement, Tier

if TYPE_CHECKING:
    from .profile import UserProfile
    from .state import GuildState

logger = logging.getLogger("guildjournal.protocol.council")


# ============================================================================
# ENUMS
# ============================================================================

class CouncilStatus(Enum):
    """Lifecycle status shared by every request kind."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    NEEDS_INFO = "needs_info"

    @property
    def is_resolved(self) -> bool:
        return self != CouncilStatus.PENDING


RESOLUTION_STATUSES = (
    CouncilStatus.APPROVED,
    CouncilStatus.REJECTED,
    CouncilStatus.NEEDS_INFO,
)


class RequestKind(Enum):
    """Tag of the council request union."""
    VERIFICATION = "verification"
    PROPOSAL = "proposal"
    PROMOTION = "promotion"
    LINK = "link"
    PARTNERSHIP = "partnership"
    PHYSICAL = "physical"

    @classmethod
    def from_string(cls, value: str) -> "RequestKind":
        normalized = value.strip().lower().replace("-", "_")
        for kind in cls:
            if normalized in (kind.value, kind.name.lower()):
                return kind
        raise ValueError(
            f"Invalid request kind: {value}. Valid options: "
            f"{', '.join(k.value for k in cls)}"
        )


PARTNER_TYPES = ("Organization", "Creator", "Institution")

# Request id prefixes by kind
ID_PREFIXES = {
    RequestKind.VERIFICATION: "req",
    RequestKind.PROPOSAL: "prop",
    RequestKind.PROMOTION: "promo",
    RequestKind.LINK: "link",
    RequestKind.PARTNERSHIP: "partner",
    RequestKind.PHYSICAL: "phys",
}


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_request_id(kind: RequestKind) -> str:
    return f"{ID_PREFIXES[kind]}-{uuid.uuid4().hex[:12]}"


# ============================================================================
# DATA STRUCTURES
# ============================================================================

@dataclass(kw_only=True)
class CouncilRequest(ABC):
    """Fields shared by every council request."""
    kind: ClassVar[RequestKind]

    id: str
    user_id: str
    user_name: str = ""
    submitted_at: str = field(default_factory=now_iso)
    status: CouncilStatus = CouncilStatus.PENDING
    feedback: Optional[str] = None
    resolved_at: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.status == CouncilStatus.PENDING

    def _base_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "kind": self.kind.value,
            "userId": self.user_id,
            "userName": self.user_name,
            "submittedAt": self.submitted_at,
            "status": self.status.value,
        }
        if self.feedback is not None:
            data["feedback"] = self.feedback
        if self.resolved_at is not None:
            data["resolvedAt"] = self.resolved_at
        return data

    @staticmethod
    def _base_kwargs(data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "id": str(data["id"]),
            "user_id": data.get("userId", ""),
            "user_name": data.get("userName", ""),
            "submitted_at": data.get("submittedAt") or now_iso(),
            "status": CouncilStatus(data.get("status", CouncilStatus.PENDING.value)),
            "feedback": data.get("feedback"),
            "resolved_at": data.get("resolvedAt"),
        }

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """Serialize with camelCase keys."""
        pass

    @classmethod
    @abstractmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CouncilRequest":
        pass


@dataclass
class VerificationRequest(CouncilRequest):
    """Petition to verify a mastered badge."""
    kind: ClassVar[RequestKind] = RequestKind.VERIFICATION

    badge_id: str
    badge_title: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {**self._base_dict(), "badgeId": self.badge_id, "badgeTitle": self.badge_title}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VerificationRequest":
        return cls(
            badge_id=data["badgeId"],
            badge_title=data.get("badgeTitle", ""),
            **cls._base_kwargs(data),
        )


@dataclass
class BadgeProposal(CouncilRequest):
    """Petition to inscribe a member-drafted badge into the library."""
    kind: ClassVar[RequestKind] = RequestKind.PROPOSAL

    badge: Badge
    goal: str = ""
    metrics: str = ""
    minted_badge_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            **self._base_dict(),
            "badge": self.badge.to_dict(),
            "goal": self.goal,
            "metrics": self.metrics,
        }
        if self.minted_badge_id:
            data["mintedBadgeId"] = self.minted_badge_id
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BadgeProposal":
        return cls(
            badge=Badge.from_dict(data["badge"]),
            goal=data.get("goal", ""),
            metrics=data.get("metrics", ""),
            minted_badge_id=data.get("mintedBadgeId"),
            **cls._base_kwargs(data),
        )


@dataclass
class PromotionRequest(CouncilRequest):
    """Petition to ascend to a higher tier."""
    kind: ClassVar[RequestKind] = RequestKind.PROMOTION

    target_tier: Tier
    supporting_badge_ids: List[str] = field(default_factory=list)
    statements: List[ActionStatement] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self._base_dict(),
            "targetTier": self.target_tier.value,
            "supportingBadgeIds": list(self.supporting_badge_ids),
            "actionStatements": [s.to_dict() for s in self.statements],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PromotionRequest":
        return cls(
            target_tier=Tier.from_string(data["targetTier"]),
            supporting_badge_ids=list(data.get("supportingBadgeIds") or []),
            statements=[ActionStatement.from_dict(s) for s in data.get("actionStatements") or []],
            **cls._base_kwargs(data),
        )


@dataclass
class LinkSuggestion(CouncilRequest):
    """Community resource link proposed for a badge."""
    kind: ClassVar[RequestKind] = RequestKind.LINK

    badge_id: str
    label: str
    url: str
    badge_title: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self._base_dict(),
            "badgeId": self.badge_id,
            "badgeTitle": self.badge_title,
            "label": self.label,
            "url": self.url,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LinkSuggestion":
        return cls(
            badge_id=data["badgeId"],
            label=data.get("label", ""),
            url=data.get("url", ""),
            badge_title=data.get("badgeTitle", ""),
            **cls._base_kwargs(data),
        )


@dataclass
class PartnershipRequest(CouncilRequest):
    """Request from an outside organization, creator or institution."""
    kind: ClassVar[RequestKind] = RequestKind.PARTNERSHIP

    partner_name: str
    partner_type: str = "Organization"
    description: str = ""
    website_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            **self._base_dict(),
            "partnerName": self.partner_name,
            "partnerType": self.partner_type,
            "description": self.description,
        }
        if self.website_url:
            data["websiteUrl"] = self.website_url
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PartnershipRequest":
        return cls(
            partner_name=data.get("partnerName", ""),
            partner_type=data.get("partnerType", "Organization"),
            description=data.get("description", ""),
            website_url=data.get("websiteUrl"),
            **cls._base_kwargs(data),
        )


@dataclass
class PhysicalBadgeRequest(CouncilRequest):
    """Request for a physical copy of an earned badge."""
    kind: ClassVar[RequestKind] = RequestKind.PHYSICAL

    badge_id: str
    badge_title: str = ""
    cost: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self._base_dict(),
            "badgeId": self.badge_id,
            "badgeTitle": self.badge_title,
            "cost": self.cost,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PhysicalBadgeRequest":
        return cls(
            badge_id=data["badgeId"],
            badge_title=data.get("badgeTitle", ""),
            cost=float(data.get("cost", 0.0)),
            **cls._base_kwargs(data),
        )


REQUEST_TYPES: Dict[RequestKind, Type[CouncilRequest]] = {
    RequestKind.VERIFICATION: VerificationRequest,
    RequestKind.PROPOSAL: BadgeProposal,
    RequestKind.PROMOTION: PromotionRequest,
    RequestKind.LINK: LinkSuggestion,
    RequestKind.PARTNERSHIP: PartnershipRequest,
    RequestKind.PHYSICAL: PhysicalBadgeRequest,
}


# ============================================================================
# REQUEST BUILDERS
# ============================================================================

def build_verification_request(user: "UserProfile", badge: Badge) -> VerificationRequest:
    """Build a verification petition for an owned, mastered badge."""
    if not badge.is_mastered:
        raise ValidationError(f"Badge {badge.id} is not mastered; verification not allowed")
    return VerificationRequest(
        id=new_request_id(RequestKind.VERIFICATION),
        user_id=user.id,
        user_name=user.name,
        badge_id=badge.id,
        badge_title=badge.title,
    )


def build_badge_proposal(
    user: "UserProfile",
    badge: Badge,
    goal: str = "",
    metrics: str = "",
) -> BadgeProposal:
    if not badge.title:
        raise ValidationError("A badge proposal needs a title")
    return BadgeProposal(
        id=new_request_id(RequestKind.PROPOSAL),
        user_id=user.id,
        user_name=user.name,
        badge=badge,
        goal=goal or "",
        metrics=metrics or "",
    )


def build_promotion_request(
    user: "UserProfile",
    target_tier: Tier,
    supporting_badge_ids: Optional[List[str]] = None,
    statements: Optional[List[ActionStatement]] = None,
) -> PromotionRequest:
    """
    Build a promotion petition.

    Prerequisites are deliberately not enforced here; see
    tiers.assess_eligibility() for the advisory check.
    """
    return PromotionRequest(
        id=new_request_id(RequestKind.PROMOTION),
        user_id=user.id,
        user_name=user.name,
        target_tier=target_tier,
        supporting_badge_ids=list(supporting_badge_ids or []),
        statements=list(statements or []),
    )


def build_link_suggestion(
    user: "UserProfile",
    badge: Badge,
    label: str,
    url: str,
) -> LinkSuggestion:
    if not url or not url.strip():
        raise ValidationError("A link suggestion needs a url")
    return LinkSuggestion(
        id=new_request_id(RequestKind.LINK),
        user_id=user.id,
        user_name=user.name,
        badge_id=badge.id,
        badge_title=badge.title,
        label=(label or url).strip(),
        url=url.strip(),
    )


def build_partnership_request(
    user: "UserProfile",
    partner_name: str,
    partner_type: str = "Organization",
    description: str = "",
    website_url: Optional[str] = None,
) -> PartnershipRequest:
    if not partner_name or not partner_name.strip():
        raise ValidationError("A partnership request needs a partner name")
    if partner_type not in PARTNER_TYPES:
        raise ValidationError(
            f"Invalid partner type: {partner_type}. "
            f"Valid options: {', '.join(PARTNER_TYPES)}"
        )
    return PartnershipRequest(
        id=new_request_id(RequestKind.PARTNERSHIP),
        user_id=user.id,
        user_name=user.name,
        partner_name=partner_name.strip(),
        partner_type=partner_type,
        description=description or "",
        website_url=website_url or None,
    )


# ============================================================================
# APPROVAL SIDE EFFECTS
# ============================================================================

ApprovalHandler = Callable[["GuildState", CouncilRequest, Dict[str, Any]], None]


def _approve_verification(state: "GuildState", request: VerificationRequest, options: Dict[str, Any]) -> None:
    badge = state.user.require_badge(request.badge_id)
    badge.is_verified = True
    logger.info(f"Badge {badge.id} verified for {state.user.id}")


def _approve_proposal(state: "GuildState", request: BadgeProposal, options: Dict[str, Any]) -> None:
    official = mint_official_badge(
        request.badge,
        as_partner_badge=bool(options.get("as_partner_badge")),
        partner_name=options.get("partner_name"),
    )
    state.badges_library.append(official)
    request.minted_badge_id = official.id
    logger.info(f"Proposal {request.id} minted library badge {official.id} ({official.title})")


def _approve_promotion(state: "GuildState", request: PromotionRequest, options: Dict[str, Any]) -> None:
    # No re-check against TIER_REQUIREMENTS: the Council's approval is the authority
    previous = state.user.tier
    state.user.tier = request.target_tier
    logger.info(f"User {state.user.id} promoted {previous.value} -> {request.target_tier.value}")


def _approve_link(state: "GuildState", request: LinkSuggestion, options: Dict[str, Any]) -> None:
    targets = [
        badge for badge in (
            state.get_library_badge(request.badge_id),
            state.user.get_badge(request.badge_id),
        )
        if badge is not None
    ]
    if not targets:
        raise NotFoundError(f"Badge {request.badge_id} no longer exists")
    for badge in targets:
        badge.useful_links.append(UsefulLink(label=request.label, url=request.url))
    logger.info(f"Link '{request.label}' added to {len(targets)} copy(ies) of {request.badge_id}")


def _approve_status_only(state: "GuildState", request: CouncilRequest, options: Dict[str, Any]) -> None:
    pass


APPROVAL_HANDLERS: Dict[RequestKind, ApprovalHandler] = {
    RequestKind.VERIFICATION: _approve_verification,
    RequestKind.PROPOSAL: _approve_proposal,
    RequestKind.PROMOTION: _approve_promotion,
    RequestKind.LINK: _approve_link,
    RequestKind.PARTNERSHIP: _approve_status_only,
    RequestKind.PHYSICAL: _approve_status_only,
}

_missing = set(RequestKind) - set(APPROVAL_HANDLERS)
if _missing:
    raise RuntimeError(f"No approval handler for request kinds: {sorted(k.value for k in _missing)}")


# ============================================================================
# RESOLUTION
# ============================================================================

def resolve(
    state: "GuildState",
    kind: RequestKind,
    request_id: str,
    status: CouncilStatus,
    feedback: Optional[str] = None,
    as_partner_badge: bool = False,
    partner_name: Optional[str] = None,
) -> CouncilRequest:
    """
    Resolve a pending council request.

    The approval side effect runs before the status changes, so a failing
    side effect leaves the request pending and the state untouched.

    Args:
        state: State to mutate in place
        kind: Request kind
        request_id: Request id
        status: approved, rejected or needs_info
        feedback: Optional reviewer feedback / rejection reason
        as_partner_badge: Proposal approval only: stamp the minted badge
        partner_name: Proposal approval only: partner to stamp

    Returns:
        The resolved request

    Raises:
        ValidationError: status is not a resolution status
        NotFoundError: no such request, or the approval target is gone
        InvalidTransitionError: the request is not pending
    """
    if status not in RESOLUTION_STATUSES:
        raise ValidationError(f"Cannot resolve a request to {status.value}")

    request = state.get_request(kind, request_id)
    if request is None:
        raise NotFoundError(f"No {kind.value} request with id {request_id}")

    if not request.is_pending:
        raise InvalidTransitionError(
            f"{kind.value} request {request_id} is already {request.status.value}"
        )

    if status == CouncilStatus.APPROVED:
        options = {"as_partner_badge": as_partner_badge, "partner_name": partner_name}
        APPROVAL_HANDLERS[kind](state, request, options)

    request.status = status
    request.resolved_at = now_iso()
    if feedback is not None:
        request.feedback = feedback

    logger.info(f"Council resolved {kind.value} request {request_id}: {status.value}")
    return request
