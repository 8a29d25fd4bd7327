"""
guildjournal/protocol/state.py

The complete guild state tree and its snapshot layout.

Snapshot layout (camelCase keys, one object):

    {
        "schemaVersion": "1.0.0",
        "user": {...},
        "badgesLibrary": [...],
        "colonies": [...],
        "accessFundBalance": 1240.5,
        "verificationRequests": [...],
        "badgeProposals": [...],
        "promotionRequests": [...],
        "linkSuggestions": [...],
        "partnershipRequests": [...],
        "physicalBadgeRequests": [...]
    }

Request collections are kept newest first.

Usage:
    from guildjournal.protocol.state import initial_state, GuildState

    state = initial_state()
    data = state.to_dict()
    same = GuildState.from_dict(data)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..config import INITIAL_ACCESS_FUND_BALANCE
from .badges import Badge
from .colonies import Colony
from .council import REQUEST_TYPES, CouncilRequest, RequestKind
from .profile import UserProfile
from .tiers import Tier

logger = logging.getLogger("guildjournal.protocol.state")


# Snapshot key for each request collection
COLLECTION_KEYS: Dict[RequestKind, str] = {
    RequestKind.VERIFICATION: "verificationRequests",
    RequestKind.PROPOSAL: "badgeProposals",
    RequestKind.PROMOTION: "promotionRequests",
    RequestKind.LINK: "linkSuggestions",
    RequestKind.PARTNERSHIP: "partnershipRequests",
    RequestKind.PHYSICAL: "physicalBadgeRequests",
}


def _empty_requests() -> Dict[RequestKind, List[CouncilRequest]]:
    return {kind: [] for kind in RequestKind}


@dataclass
class GuildState:
    """Everything the engine knows about one member's session."""
    user: UserProfile
    badges_library: List[Badge] = field(default_factory=list)
    colonies: List[Colony] = field(default_factory=list)
    access_fund_balance: float = INITIAL_ACCESS_FUND_BALANCE
    requests: Dict[RequestKind, List[CouncilRequest]] = field(default_factory=_empty_requests)

    # ========================================================================
    # LOOKUPS
    # ========================================================================

    def get_library_badge(self, badge_id: str) -> Optional[Badge]:
        for badge in self.badges_library:
            if badge.id == badge_id:
                return badge
        return None

    def get_colony(self, colony_id: str) -> Optional[Colony]:
        for colony in self.colonies:
            if colony.id == colony_id:
                return colony
        return None

    def requests_of(self, kind: RequestKind) -> List[CouncilRequest]:
        return self.requests.setdefault(kind, [])

    def get_request(self, kind: RequestKind, request_id: str) -> Optional[CouncilRequest]:
        for request in self.requests_of(kind):
            if request.id == request_id:
                return request
        return None

    def add_request(self, request: CouncilRequest) -> CouncilRequest:
        """Queue a request (newest first)."""
        self.requests_of(request.kind).insert(0, request)
        logger.info(f"Queued {request.kind.value} request {request.id} from {request.user_id}")
        return request

    def pending_requests(self, kind: Optional[RequestKind] = None) -> List[CouncilRequest]:
        kinds = [kind] if kind is not None else list(RequestKind)
        return [r for k in kinds for r in self.requests_of(k) if r.is_pending]

    @property
    def verification_requests(self) -> List[CouncilRequest]:
        return self.requests_of(RequestKind.VERIFICATION)

    @property
    def badge_proposals(self) -> List[CouncilRequest]:
        return self.requests_of(RequestKind.PROPOSAL)

    @property
    def promotion_requests(self) -> List[CouncilRequest]:
        return self.requests_of(RequestKind.PROMOTION)

    @property
    def link_suggestions(self) -> List[CouncilRequest]:
        return self.requests_of(RequestKind.LINK)

    @property
    def partnership_requests(self) -> List[CouncilRequest]:
        return self.requests_of(RequestKind.PARTNERSHIP)

    @property
    def physical_badge_requests(self) -> List[CouncilRequest]:
        return self.requests_of(RequestKind.PHYSICAL)

    # ========================================================================
    # SERIALIZATION
    # ========================================================================

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "user": self.user.to_dict(),
            "badgesLibrary": [b.to_dict() for b in self.badges_library],
            "colonies": [c.to_dict() for c in self.colonies],
            "accessFundBalance": self.access_fund_balance,
        }
        for kind, key in COLLECTION_KEYS.items():
            data[key] = [r.to_dict() for r in self.requests_of(kind)]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GuildState":
        """Load a state from a (migrated) snapshot dictionary."""
        requests = _empty_requests()
        for kind, key in COLLECTION_KEYS.items():
            request_cls = REQUEST_TYPES[kind]
            requests[kind] = [request_cls.from_dict(r) for r in data.get(key) or []]

        return cls(
            user=UserProfile.from_dict(data.get("user") or {}),
            badges_library=[Badge.from_dict(b) for b in data.get("badgesLibrary") or []],
            colonies=[Colony.from_dict(c) for c in data.get("colonies") or []],
            access_fund_balance=float(data.get("accessFundBalance", INITIAL_ACCESS_FUND_BALANCE)),
            requests=requests,
        )


# ============================================================================
# SEED CONTENT
# ============================================================================

def _seed_requirements(items: List[tuple]) -> List[Dict[str, Any]]:
    return [
        {"id": rid, "description": text, "requireAttachment": True, "requireNote": True}
        for rid, text in items
    ]


SEED_LIBRARY: List[Dict[str, Any]] = [
    {
        "id": "b1",
        "title": "Forest Stewardship",
        "description": "Learn to care for local woodland ecosystems and identify native species.",
        "domain": "Environment",
        "difficulty": 2,
        "requirements": _seed_requirements([
            ("r1", "Explain the concept of forest succession and the role of climax species in your local biome."),
            ("r2", "Identify 10 native trees and 5 invasive plant species in a local woodland area."),
            ("r3", "Describe the impact of soil pH and drainage on forest health."),
            ("r4", "Demonstrate the safe use of at least three forestry tools (e.g., pruning saw, loppers, clinometer)."),
            ("r5", "Complete a minimum of 8 hours of verified trail maintenance or invasive species removal."),
            ("r6", "Create a 1-year restoration plan for a small section of a local park or private land."),
            ("r7", "Explain the nitrogen and carbon cycles as they relate to forest floor decomposition."),
            ("r8", "Lead a small group on a guided \"Tree Walk\" to share your findings."),
        ]),
        "isVerified": True,
        "isUserCreated": False,
        "icon": "🌳",
        "designChoice": "template",
        "badgeShape": "circle",
    },
    {
        "id": "b2",
        "title": "Community Architect",
        "description": "Design and propose a community-centered space or initiative with professional rigor.",
        "domain": "Society",
        "difficulty": 3,
        "requirements": _seed_requirements([
            ("r3", "Define \"Third Place\" theory and its importance to social cohesion."),
            ("r4", "Conduct a site analysis of an underutilized space in your colony, noting sun exposure and foot traffic."),
            ("r5", "Interview three diverse stakeholders about their needs for a community hub."),
            ("r6", "Draft a to-scale blueprint or 3D model of your proposed intervention."),
            ("r7", "Research and list the zoning laws or guild permits required for your project."),
            ("r8", "Develop a budget and resource list, including possible sources of funding or donation."),
            ("r9", "Present your proposal to a Colony Council or local board for feedback."),
            ("r10", "Reflect on how your design promotes equity and environmental sustainability."),
        ]),
        "isVerified": True,
        "isUserCreated": False,
        "icon": "🏛️",
        "designChoice": "template",
        "badgeShape": "square",
    },
    {
        "id": "b3",
        "title": "The Socratic Path",
        "description": "Master the art of constructive dialogue and logical inquiry through practical application.",
        "domain": "Ethics",
        "difficulty": 5,
        "requirements": _seed_requirements([
            ("r5", "Define the Socratic Method and differentiate it from traditional debate."),
            ("r6", "Identify and explain 10 common logical fallacies (e.g., Ad Hominem, Straw Man)."),
            ("r7", "Read and summarize one Platonic dialogue (e.g., Meno or The Apology)."),
            ("r8", "Facilitate a 60-minute group inquiry session on a complex ethical topic."),
            ("r9", "Demonstrate active listening techniques by summarizing an opposing viewpoint to their satisfaction."),
            ("r10", "Write a 1,500-word treatise on the role of doubt in the pursuit of truth."),
            ("r11", "Create a set of \"Dialogue Ground Rules\" for use in your local Colony meetings."),
            ("r12", "Mentor a Seeker through their first public inquiry session."),
        ]),
        "isVerified": True,
        "isUserCreated": False,
        "icon": "⚖️",
        "designChoice": "template",
        "badgeShape": "rectangle",
    },
]

SEED_COLONIES: List[Dict[str, Any]] = [
    {
        "id": "c1",
        "name": "Portland Colony",
        "number": 101,
        "siege": "Cascadia",
        "charter": "To foster growth through sustainable urban living.",
        "membersCount": 42,
        "isApproved": True,
    },
    {
        "id": "c2",
        "name": "Riverbend Colony",
        "number": 205,
        "siege": "The Virtual Siege",
        "charter": "Connecting nomads across digital borders.",
        "membersCount": 128,
        "isApproved": True,
    },
]


def seed_library() -> List[Badge]:
    return [Badge.from_dict(b) for b in SEED_LIBRARY]


def seed_colonies() -> List[Colony]:
    return [Colony.from_dict(c) for c in SEED_COLONIES]


def default_user() -> UserProfile:
    return UserProfile(
        id=UserProfile.generate_id(),
        name="The Seeker",
        email="seeker@guild.org",
        tier=Tier.SEEKER,
    )


def initial_state(user: Optional[UserProfile] = None) -> GuildState:
    """Fresh state: seeded library and colonies, no requests."""
    return GuildState(
        user=user or default_user(),
        badges_library=seed_library(),
        colonies=seed_colonies(),
        access_fund_balance=INITIAL_ACCESS_FUND_BALANCE,
    )
